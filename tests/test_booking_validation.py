"""Unit tests for booking conflict validation."""
import pytest

from domain.enums import TimeSlot
from services.booking_validation import ConflictValidator, slots_overlap
from services.errors import SeatConflictError, UserAlreadyBookedError


@pytest.mark.unit
class TestSlotsOverlap:
    """Test the timeslot overlap rule."""

    def test_full_day_overlaps_everything(self):
        """Test FULL_DAY overlaps every slot."""
        for slot in TimeSlot:
            assert slots_overlap(TimeSlot.FULL_DAY, slot)
            assert slots_overlap(slot, TimeSlot.FULL_DAY)

    def test_halves_overlap_only_themselves(self):
        """Test AM and PM do not overlap each other."""
        assert slots_overlap(TimeSlot.AM, TimeSlot.AM)
        assert slots_overlap(TimeSlot.PM, TimeSlot.PM)
        assert not slots_overlap(TimeSlot.AM, TimeSlot.PM)
        assert not slots_overlap(TimeSlot.PM, TimeSlot.AM)

    def test_accepts_plain_strings(self):
        """Test wire values are accepted."""
        assert slots_overlap("AM", "FULL_DAY")


@pytest.mark.unit
class TestConflictValidator:
    """Test validation of proposed bookings."""

    @pytest.fixture
    def validator(self, store, cache, make_reservation):
        store.save(make_reservation(reservation_id="R1", user_id="U001", table_id="A1",
                                    slot_type=TimeSlot.AM))
        cache.ensure_loaded()
        return ConflictValidator(cache)

    def test_free_slot_accepted(self, validator, booking_date):
        """Test the free half of a seat can be booked."""
        assert validator.validate("U002", "A1", booking_date, TimeSlot.PM) is None

    def test_same_slot_rejected(self, validator, booking_date):
        """Test an already taken slot is rejected with the holder."""
        error = validator.validate("U002", "A1", booking_date, TimeSlot.AM)

        assert isinstance(error, SeatConflictError)
        assert error.booked_by == "U001"
        assert error.conflict_details == {
            "seat": "A1",
            "date": booking_date,
            "timeSlot": "AM",
            "bookedBy": "U001",
        }

    def test_full_day_rejected_on_half_booked_seat(self, validator, booking_date):
        """Test FULL_DAY cannot be booked when one half is taken."""
        error = validator.validate("U002", "A1", booking_date, TimeSlot.FULL_DAY)
        assert isinstance(error, SeatConflictError)

    def test_second_booking_same_day_rejected(self, validator, booking_date):
        """Test a user cannot hold two seats on one date."""
        error = validator.validate("U001", "B5", booking_date, TimeSlot.PM)

        assert isinstance(error, UserAlreadyBookedError)
        assert error.existing_booking_id == "R1"
        assert error.code == "USER_ALREADY_BOOKED"

    def test_user_rule_checked_before_seat_rule(self, validator, booking_date):
        """Test the per-user rule wins when both rules fail."""
        error = validator.validate("U001", "A1", booking_date, TimeSlot.AM)
        assert isinstance(error, UserAlreadyBookedError)

    def test_ignored_booking_does_not_count(self, validator, booking_date):
        """Test a booking the caller will release is ignored for the per-user rule."""
        assert validator.validate("U001", "B5", booking_date, TimeSlot.FULL_DAY,
                                  ignore_booking_ids=["R1"]) is None

    def test_other_date_accepted(self, validator):
        """Test the per-user rule is per date."""
        assert validator.validate("U001", "A1", "2025-10-16", TimeSlot.FULL_DAY) is None

    def test_validation_never_touches_store(self, store, validator, booking_date):
        """Test validation reads only the cache."""
        loads, writes = store.load_calls, store.write_calls
        validator.validate("U002", "A1", booking_date, TimeSlot.AM)

        assert store.load_calls == loads
        assert store.write_calls == writes
