"""Unit tests for the booking cache."""
import threading

import pytest

from database.stores import CsvReservationStore
from domain.enums import BookingStatus, TimeSlot
from services.booking_cache import BookingCache, generate_booking_id, new_booking
from services.errors import NotFoundError, PersistenceError


@pytest.mark.unit
class TestBookingIds:
    """Test booking ID generation."""

    def test_format(self):
        """Test IDs are BOOK_<millis>_<random> in upper case."""
        booking_id = generate_booking_id()
        prefix, millis, random_part = booking_id.split("_")

        assert prefix == "BOOK"
        assert millis.isdigit()
        assert len(random_part) == 6
        assert booking_id == booking_id.upper()

    def test_unique(self):
        """Test IDs do not repeat."""
        assert len({generate_booking_id() for _ in range(200)}) == 200

    def test_new_booking_is_active(self):
        """Test fresh bookings are ACTIVE and carry the table letter."""
        booking = new_booking("U001", "K3", "2025-10-15", TimeSlot.PM)

        assert booking.status == BookingStatus.ACTIVE
        assert booking.table_number == "K"
        assert booking.booking_timestamp


@pytest.mark.unit
class TestCacheLoading:
    """Test lazy loading and refresh."""

    def test_loads_once(self, store, cache):
        """Test repeated ensure_loaded calls read the store once."""
        cache.ensure_loaded()
        cache.ensure_loaded()

        assert store.load_calls == 1
        assert cache.is_loaded

    def test_concurrent_first_load_reads_once(self, store, cache):
        """Test callers racing the first load share one store read."""
        threads = [threading.Thread(target=cache.ensure_loaded) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.load_calls == 1

    def test_failed_load_retries(self, store, cache):
        """Test a failed load leaves the cache unloaded and the next call retries."""
        store.fail_load = True
        with pytest.raises(PersistenceError):
            cache.ensure_loaded()
        assert not cache.is_loaded

        store.fail_load = False
        cache.ensure_loaded()

        assert cache.is_loaded
        assert store.load_calls == 2

    def test_undecodable_csv_store_fails_load(self, tmp_path):
        """Test a corrupt CSV file fails the load with PersistenceError."""
        path = tmp_path / "reservations.csv"
        path.write_bytes(b"reservation_id,user_id,table_id\nR1,U\xff1,A1\n")
        csv_cache = BookingCache(CsvReservationStore(path))

        with pytest.raises(PersistenceError):
            csv_cache.ensure_loaded()

        assert not csv_cache.is_loaded

    def test_legacy_table_ids_mapped(self, store, cache, make_reservation):
        """Test stored T01-style table IDs load as seat A1."""
        store.save(make_reservation(table_id="T01"))
        cache.ensure_loaded()

        assert cache.get("R1").seat_id == "A1"

    def test_force_refresh_rereads_store(self, store, cache, make_reservation):
        """Test force_refresh picks up rows written behind the cache."""
        cache.ensure_loaded()
        store.save(make_reservation())

        cache.force_refresh()

        assert store.load_calls == 2
        assert cache.get("R1") is not None

    def test_invalidate_reloads_lazily(self, store, cache):
        """Test invalidate defers the reload to the next read."""
        cache.ensure_loaded()
        cache.invalidate()
        assert store.load_calls == 1

        cache.ensure_loaded()
        assert store.load_calls == 2

    def test_cache_info(self, store, cache, make_reservation):
        """Test cache_info reports load state and size."""
        assert cache.cache_info() == {"is_initialized": False, "record_count": 0}

        store.save(make_reservation())
        cache.ensure_loaded()

        assert cache.cache_info() == {"is_initialized": True, "record_count": 1}


@pytest.mark.unit
class TestCacheWrites:
    """Test write-through of add and cancel."""

    def test_add_writes_once(self, store, cache, booking_date):
        """Test add issues exactly one store write."""
        booking = new_booking("U001", "A1", booking_date, TimeSlot.AM)
        cache.add(booking)

        assert store.save_calls == 1
        assert store.get(booking.id).table_id == "A1"
        assert cache.get(booking.id) is booking

    def test_add_rolled_back_on_store_failure(self, store, cache, booking_date):
        """Test a failed save removes the optimistic append."""
        cache.ensure_loaded()
        store.fail_save = True
        booking = new_booking("U001", "A1", booking_date, TimeSlot.AM)

        with pytest.raises(PersistenceError):
            cache.add(booking)

        assert cache.get(booking.id) is None
        assert cache.cache_info()["record_count"] == 0

    def test_add_rejects_unstorable_booking(self, store, cache, booking_date):
        """Test a booking that does not fit the stored shape raises PersistenceError."""
        booking = new_booking("U001", "X" * 25, booking_date, TimeSlot.FULL_DAY)

        with pytest.raises(PersistenceError):
            cache.add(booking)

        assert cache.get(booking.id) is None
        assert store.save_calls == 0

    def test_cancel_marks_cancelled_and_deletes(self, store, cache, booking_date):
        """Test cancel flips status in memory and deletes the stored row."""
        booking = cache.add(new_booking("U001", "A1", booking_date, TimeSlot.AM))

        cancelled = cache.cancel(booking.id, "U001")

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.modified_by == "U001"
        assert cancelled.modified_timestamp is not None
        assert store.delete_calls == 1
        assert store.get(booking.id) is None

    def test_cancel_unknown_issues_no_write(self, store, cache):
        """Test cancelling an unknown ID raises NotFoundError without a store write."""
        cache.ensure_loaded()

        with pytest.raises(NotFoundError, match="Booking not found"):
            cache.cancel("BOOK_MISSING", "U001")

        assert store.write_calls == 0

    def test_cancel_other_users_booking_rejected(self, store, cache, booking_date):
        """Test only the owner can cancel."""
        booking = cache.add(new_booking("U001", "A1", booking_date, TimeSlot.AM))

        with pytest.raises(NotFoundError):
            cache.cancel(booking.id, "U002")

        assert cache.get(booking.id).is_active
        assert store.delete_calls == 0

    def test_cancel_restored_on_store_failure(self, store, cache, booking_date):
        """Test a failed delete restores the ACTIVE status."""
        booking = cache.add(new_booking("U001", "A1", booking_date, TimeSlot.AM))
        store.fail_delete = True

        with pytest.raises(PersistenceError):
            cache.cancel(booking.id, "U001")

        record = cache.get(booking.id)
        assert record.is_active
        assert record.modified_by is None

    def test_cancel_stands_when_row_already_gone(self, store, cache, booking_date):
        """Test a row missing from the store does not undo the cancel."""
        booking = cache.add(new_booking("U001", "A1", booking_date, TimeSlot.AM))
        store.delete(booking.id)

        cancelled = cache.cancel(booking.id, "U001")

        assert cancelled.status == BookingStatus.CANCELLED

    def test_records_for_never_touches_store(self, store, cache, booking_date):
        """Test filtering reads only memory."""
        cache.add(new_booking("U001", "A1", booking_date, TimeSlot.AM))
        loads = store.load_calls

        assert len(cache.records_for(lambda b: b.user_id == "U001")) == 1
        assert store.load_calls == loads

    def test_cache_per_store(self, store, make_reservation):
        """Test each cache instance reads only its own store."""
        first, second = type(store)([make_reservation()]), type(store)()
        first_cache, second_cache = BookingCache(first), BookingCache(second)
        first_cache.ensure_loaded()
        second_cache.ensure_loaded()

        assert first_cache.cache_info()["record_count"] == 1
        assert second_cache.cache_info()["record_count"] == 0
