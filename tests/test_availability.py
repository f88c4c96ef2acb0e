"""Unit tests for seat and timeslot availability."""
from itertools import combinations

import pytest

from domain.booking import BookingRecord
from domain.enums import BookingStatus, TimeSlot
from services.availability import AvailabilityResolver, resolve_open_timeslots


ALL_SLOTS = [TimeSlot.AM, TimeSlot.PM, TimeSlot.FULL_DAY]

ALLOWED_RESULTS = [
    [],
    [TimeSlot.PM],
    [TimeSlot.AM],
    [TimeSlot.AM, TimeSlot.PM, TimeSlot.FULL_DAY],
]


def _booking(time_slot, booking_id="B1", user_id="U001", seat_id="A1",
             date="2025-10-15", status=BookingStatus.ACTIVE):
    return BookingRecord(
        id=booking_id,
        user_id=user_id,
        seat_id=seat_id,
        date=date,
        time_slot=time_slot,
        booking_timestamp="2025-10-10T09:00:00+07:00",
        status=status,
    )


@pytest.mark.unit
class TestResolveOpenTimeslots:
    """Test open slot computation for a single seat and date."""

    def test_free_seat_offers_every_slot(self):
        """Test an untouched seat offers AM, PM and FULL_DAY."""
        assert resolve_open_timeslots([]) == [TimeSlot.AM, TimeSlot.PM, TimeSlot.FULL_DAY]

    def test_morning_booked_leaves_afternoon(self):
        """Test an AM booking leaves only PM."""
        assert resolve_open_timeslots([_booking(TimeSlot.AM)]) == [TimeSlot.PM]

    def test_afternoon_booked_leaves_morning(self):
        """Test a PM booking leaves only AM."""
        assert resolve_open_timeslots([_booking(TimeSlot.PM)]) == [TimeSlot.AM]

    def test_both_halves_booked(self):
        """Test AM and PM bookings close the seat."""
        bookings = [_booking(TimeSlot.AM, "B1"), _booking(TimeSlot.PM, "B2", user_id="U002")]
        assert resolve_open_timeslots(bookings) == []

    def test_full_day_closes_seat(self):
        """Test a FULL_DAY booking closes the seat."""
        assert resolve_open_timeslots([_booking(TimeSlot.FULL_DAY)]) == []

    def test_cancelled_bookings_ignored(self):
        """Test cancelled bookings do not take slots."""
        cancelled = _booking(TimeSlot.FULL_DAY, status=BookingStatus.CANCELLED)
        assert resolve_open_timeslots([cancelled]) == ALL_SLOTS

    def test_result_is_always_an_allowed_set(self):
        """Test every combination of booked slots yields one of the four allowed results."""
        for size in range(len(ALL_SLOTS) + 1):
            for booked in combinations(ALL_SLOTS, size):
                bookings = [
                    _booking(slot, booking_id=f"B{i}", user_id=f"U{i}")
                    for i, slot in enumerate(booked)
                ]
                assert resolve_open_timeslots(bookings) in ALLOWED_RESULTS


@pytest.mark.unit
class TestAvailabilityResolver:
    """Test availability queries against the booking cache."""

    def test_open_timeslots_for_free_seat(self, cache, booking_date):
        """Test a seat with no bookings offers every slot."""
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        assert resolver.open_timeslots("A1", booking_date) == ALL_SLOTS

    def test_full_day_seat_excluded_for_other_users(self, store, cache, make_reservation):
        """Test a FULL_DAY seat is not available to anyone but its owner."""
        store.save(make_reservation(user_id="U001", table_id="C3", date="2025-10-17"))
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        assert "C3" not in resolver.available_seats("2025-10-17")
        assert "C3" not in resolver.available_seats("2025-10-17", user_id="U002")
        assert "C3" in resolver.available_seats("2025-10-17", user_id="U001")

    def test_half_booked_seat_stays_available(self, store, cache, make_reservation, booking_date):
        """Test a seat with one half booked remains available."""
        store.save(make_reservation(table_id="A2", slot_type=TimeSlot.AM))
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        assert "A2" in resolver.available_seats(booking_date)
        assert resolver.open_timeslots("A2", booking_date) == [TimeSlot.PM]

    def test_other_dates_unaffected(self, store, cache, make_reservation):
        """Test a booking only closes its own date."""
        store.save(make_reservation(table_id="A1", date="2025-10-15"))
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        assert resolver.open_timeslots("A1", "2025-10-16") == ALL_SLOTS

    def test_available_seats_covers_layout(self, cache, booking_date):
        """Test every seat of the layout is available on an empty day."""
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        seats = resolver.available_seats(booking_date)
        assert len(seats) == 126
        assert seats[0] == "A1"

    def test_seat_states_mark_own_seat(self, store, cache, make_reservation, booking_date):
        """Test the viewing user's seat is marked mine and stays clickable."""
        store.save(make_reservation(user_id="U001", table_id="B2"))
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        states = {s.seat_id: s for s in resolver.seat_states(booking_date, user_id="U001", seats=["B2", "B3"])}

        assert states["B2"].mine is True
        assert states["B2"].open_timeslots == []
        assert states["B2"].clickable is True
        assert states["B3"].mine is False

    def test_reserved_seats(self, store, cache, make_reservation, booking_date):
        """Test reserved seats lists seats with ACTIVE bookings."""
        store.save(make_reservation(reservation_id="R1", table_id="A1"))
        store.save(make_reservation(reservation_id="R2", user_id="U002", table_id="D4", slot_type=TimeSlot.PM))
        cache.ensure_loaded()
        resolver = AvailabilityResolver(cache)

        assert sorted(resolver.reserved_seats(booking_date)) == ["A1", "D4"]
