"""
Booking cache: the in-memory mirror of the reservation store.

All reads are served from memory; every add/cancel writes through to the
store exactly once. The cache is an explicit object (one per app) passed to
the resolver, validator and batch processor.
"""
import logging
import threading
import time
import uuid
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from core.utils_datetime import get_current_datetime
from database.mapping import booking_to_reservation, reservation_to_booking
from database.stores import RecordNotFoundError, ReservationStore
from domain.booking import BookingRecord
from domain.enums import BookingStatus, TimeSlot
from services.errors import NotFoundError, PersistenceError


logger = logging.getLogger(__name__)


def generate_booking_id() -> str:
    """Generate unique booking ID (BOOK_<epoch ms>_<random>)."""
    timestamp = int(time.time() * 1000)
    random_part = uuid.uuid4().hex[:6]
    return f"BOOK_{timestamp}_{random_part}".upper()


def new_booking(user_id: str, seat_id: str, date: str, time_slot: TimeSlot) -> BookingRecord:
    """Build a fresh ACTIVE booking record."""
    return BookingRecord(
        id=generate_booking_id(),
        user_id=user_id,
        seat_id=seat_id,
        date=date,
        time_slot=time_slot,
        booking_timestamp=get_current_datetime().isoformat(),
        status=BookingStatus.ACTIVE,
        table_number=seat_id[:1],
    )


class BookingCache:
    """In-memory set of BookingRecord backed by a ReservationStore."""

    def __init__(self, store: ReservationStore):
        """
        Initialize the cache. Nothing is read until ensure_loaded().

        Args:
            store: Reservation store to load from and write through to
        """
        self.store = store
        self._records: List[BookingRecord] = []
        self._loaded = False
        self._load_lock = threading.Lock()

        # Single-writer lock: one mutation or batch in flight per cache
        self.write_lock = threading.RLock()

    @property
    def is_loaded(self) -> bool:
        """Whether the store has been read since the last invalidation."""
        return self._loaded

    def _load(self) -> None:
        reservations = self.store.load_all()
        self._records = [reservation_to_booking(r) for r in reservations]
        self._loaded = True
        logger.info(f"Loaded {len(self._records)} bookings into cache")

    def ensure_loaded(self) -> None:
        """
        Load the store once.

        Callers arriving during the first load wait for it and return.
        A failed load leaves the cache unloaded so the next call retries.

        Raises:
            PersistenceError: If the store cannot be read
        """
        if self._loaded:
            return
        with self._load_lock:
            if self._loaded:
                return
            self._load()

    def force_refresh(self) -> None:
        """Discard every cached record and reload from the store."""
        with self.write_lock, self._load_lock:
            self._loaded = False
            self._records = []
            self._load()

    def invalidate(self) -> None:
        """Mark the cache stale; the next ensure_loaded() reloads."""
        with self.write_lock, self._load_lock:
            self._loaded = False

    def add(self, record: BookingRecord) -> BookingRecord:
        """
        Append a booking and write it through to the store.

        Raises:
            PersistenceError: If the store write fails (append is rolled back)
                or the booking does not fit the stored reservation shape
            SeatConflictError: If the store itself reports a conflict
        """
        try:
            reservation = booking_to_reservation(record)
        except ValidationError as e:
            logger.error(f"Booking {record.id} cannot be stored: {e.error_count()} invalid field(s)")
            raise PersistenceError(f"Booking for seat {record.seat_id} cannot be stored") from e

        self.ensure_loaded()
        with self.write_lock:
            self._records.append(record)
            try:
                self.store.save(reservation)
            except Exception:
                self._records.remove(record)
                logger.error(f"Rolled back booking {record.id} after failed store write")
                raise
        logger.info(
            f"Created booking {record.id}: {record.user_id} on {record.seat_id} "
            f"{record.date} ({record.time_slot.value})"
        )
        return record

    def cancel(self, booking_id: str, acting_user_id: str) -> BookingRecord:
        """
        Cancel an ACTIVE booking owned by the acting user.

        Raises:
            NotFoundError: If no such ACTIVE booking exists for that user
                (no store write is issued)
            PersistenceError: If the store delete fails (status is restored)
        """
        self.ensure_loaded()
        with self.write_lock:
            record = self._find_active(booking_id, acting_user_id)
            if record is None:
                raise NotFoundError("Booking not found")

            previous = (record.status, record.modified_timestamp, record.modified_by)
            record.status = BookingStatus.CANCELLED
            record.modified_timestamp = get_current_datetime().isoformat()
            record.modified_by = acting_user_id

            try:
                self.store.delete(booking_id)
            except RecordNotFoundError:
                logger.warning(f"Booking {booking_id} was already removed from the store")
            except Exception:
                record.status, record.modified_timestamp, record.modified_by = previous
                logger.error(f"Restored booking {booking_id} after failed store delete")
                raise

        logger.info(f"Cancelled booking {booking_id} for {acting_user_id}")
        return record

    def _find_active(self, booking_id: str, user_id: str) -> Optional[BookingRecord]:
        for record in self._records:
            if record.id == booking_id and record.user_id == user_id and record.is_active:
                return record
        return None

    def records_for(self, predicate: Callable[[BookingRecord], bool]) -> List[BookingRecord]:
        """Filter cached records. Never touches the store."""
        return [record for record in self._records if predicate(record)]

    def all_records(self) -> List[BookingRecord]:
        """Snapshot of every cached booking, any status."""
        return list(self._records)

    def get(self, booking_id: str) -> Optional[BookingRecord]:
        """Cached booking by ID, whatever its status."""
        for record in self._records:
            if record.id == booking_id:
                return record
        return None

    def active_for_user_on(self, user_id: str, date: str) -> List[BookingRecord]:
        """ACTIVE bookings a user holds on a date (at most one when invariants hold)."""
        return self.records_for(
            lambda b: b.user_id == user_id and b.date == date and b.is_active
        )

    def active_for_seat_on(self, seat_id: str, date: str) -> List[BookingRecord]:
        """ACTIVE bookings on a seat for a date."""
        return self.records_for(
            lambda b: b.seat_id == seat_id and b.date == date and b.is_active
        )

    def cache_info(self) -> Dict[str, object]:
        """Loaded flag and record count, for health and diagnostics."""
        return {
            "is_initialized": self._loaded,
            "record_count": len(self._records),
        }
