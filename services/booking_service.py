"""
Booking service: the facade used by the API routers.

Wires the booking cache, conflict validator, availability resolver and
batch processor together. Rule rejections come back inside result objects;
store failures (PersistenceError) are raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.seating_config import SeatingConfig, get_seating_config
from core.utils_datetime import get_today_date
from domain.booking import BookingRecord
from domain.enums import BookingStatus, TimeSlot
from services.availability import AvailabilityResolver, SeatState
from services.booking_batch import BatchProcessor, BatchResult
from services.booking_cache import BookingCache, new_booking
from services.booking_validation import ConflictValidator
from services.errors import BookingError, NotFoundError, SeatConflictError


logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    """Outcome of a single create or cancel."""
    success: bool
    booking: Optional[BookingRecord] = None
    error: Optional[BookingError] = None

    @classmethod
    def ok(cls, booking: BookingRecord) -> "BookingResult":
        return cls(success=True, booking=booking)

    @classmethod
    def failure(cls, error: BookingError) -> "BookingResult":
        return cls(success=False, error=error)

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


@dataclass
class MultiBookingResult:
    """Outcome of create_multiple_bookings."""
    bookings: List[BookingRecord] = field(default_factory=list)
    failed_bookings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.bookings)

    @property
    def error(self) -> Optional[str]:
        if not self.failed_bookings:
            return None
        if not self.bookings:
            return "; ".join(self.failed_bookings)
        return f"Some bookings failed: {'; '.join(self.failed_bookings)}"


@dataclass
class UserBookingSummary:
    """A user's ACTIVE bookings plus today's booking."""
    user_bookings: List[BookingRecord]
    today_booking: Optional[BookingRecord]

    @property
    def total_bookings(self) -> int:
        return len(self.user_bookings)


@dataclass
class BookingRequest:
    """One seat/slot/date entry of a multiple-booking call."""
    seat_id: str
    time_slot: TimeSlot
    date: str


class BookingService:
    """Booking engine facade; one instance per cache."""

    def __init__(self, cache: BookingCache, seating: Optional[SeatingConfig] = None):
        """
        Initialize the service.

        Args:
            cache: Booking cache shared by every component
            seating: Seating layout (defaults to the office layout)
        """
        self.cache = cache
        self.seating = seating or get_seating_config()
        self.validator = ConflictValidator(cache)
        self.resolver = AvailabilityResolver(cache, self.seating)
        self.batch = BatchProcessor(cache, self.validator)

    # ========================================================================
    # Availability
    # ========================================================================

    def get_available_seats(self, date: str, user_id: Optional[str] = None) -> List[str]:
        """Seats with an open slot on the date, plus seats the user holds."""
        self.cache.ensure_loaded()
        return self.resolver.available_seats(date, user_id)

    def get_seat_states(self, date: str, user_id: Optional[str] = None) -> List[SeatState]:
        self.cache.ensure_loaded()
        return self.resolver.seat_states(date, user_id)

    def get_open_timeslots(self, seat_id: str, date: str) -> List[TimeSlot]:
        """Open slots for one seat: [], [AM], [PM] or [AM, PM, FULL_DAY]."""
        self.cache.ensure_loaded()
        return self.resolver.open_timeslots(seat_id, date)

    def get_reserved_seats(self, date: Optional[str] = None) -> List[str]:
        self.cache.ensure_loaded()
        return self.resolver.reserved_seats(date or get_today_date())

    # ========================================================================
    # Mutations
    # ========================================================================

    def create_booking(
        self,
        user_id: str,
        seat_id: str,
        time_slot: TimeSlot,
        date: Optional[str] = None
    ) -> BookingResult:
        """
        Create a booking after conflict validation.

        Args:
            user_id: Booking user
            seat_id: Seat to book
            time_slot: AM, PM or FULL_DAY
            date: YYYY-MM-DD (defaults to today)

        Returns:
            BookingResult with the new booking, or the rejection

        Raises:
            PersistenceError: If the store cannot be read or written
        """
        self.cache.ensure_loaded()
        time_slot = TimeSlot(time_slot)
        booking_date = date or get_today_date()

        with self.cache.write_lock:
            error = self.validator.validate(user_id, seat_id, booking_date, time_slot)
            if error is not None:
                return BookingResult.failure(error)

            record = new_booking(user_id, seat_id, booking_date, time_slot)
            try:
                self.cache.add(record)
            except SeatConflictError as e:
                return BookingResult.failure(self._store_conflict(e))

        return BookingResult.ok(record)

    def create_multiple_bookings(
        self,
        user_id: str,
        requests: Iterable[BookingRequest]
    ) -> MultiBookingResult:
        """
        Create several bookings; each is validated against the bookings
        created before it in the same call.

        Raises:
            PersistenceError: If the store write fails
        """
        self.cache.ensure_loaded()
        result = MultiBookingResult()

        with self.cache.write_lock:
            for request in requests:
                time_slot = TimeSlot(request.time_slot)
                error = self.validator.validate(user_id, request.seat_id, request.date, time_slot)
                if error is not None:
                    result.failed_bookings.append(error.message)
                    continue

                record = new_booking(user_id, request.seat_id, request.date, time_slot)
                try:
                    self.cache.add(record)
                except SeatConflictError:
                    result.failed_bookings.append(
                        f"Seat {request.seat_id} on {request.date}: Already booked by another user"
                    )
                    continue
                result.bookings.append(record)

        if result.failed_bookings:
            logger.warning(
                f"{len(result.failed_bookings)} booking(s) for {user_id} failed: "
                f"{result.failed_bookings}"
            )
        return result

    def cancel_booking(self, booking_id: str, user_id: str) -> BookingResult:
        """
        Cancel one of the user's ACTIVE bookings.

        Unknown, foreign or already-cancelled IDs give a NotFoundError
        result and leave state untouched.

        Raises:
            PersistenceError: If the store delete fails
        """
        try:
            record = self.cache.cancel(booking_id, user_id)
        except NotFoundError as e:
            logger.warning(f"Cancel of {booking_id} by {user_id} rejected: {e.message}")
            return BookingResult.failure(e)
        return BookingResult.ok(record)

    def apply_batch(self, modifications: Mapping[str, Mapping[str, bool]], user_id: str) -> BatchResult:
        """Apply a seat -> date -> intent map for the user (see BatchProcessor)."""
        return self.batch.apply(user_id, modifications)

    def _store_conflict(self, error: SeatConflictError) -> SeatConflictError:
        # The cache missed a booking made elsewhere; reload before the next attempt
        logger.warning(f"Store reported seat conflict: {error.message}")
        self.cache.force_refresh()
        return SeatConflictError(
            seat_id=error.seat_id,
            date=error.date,
            time_slot=error.time_slot,
            booked_by=error.booked_by,
            message=f"Seat already taken! {error.message}. Please refresh and choose another seat.",
        )

    # ========================================================================
    # Queries
    # ========================================================================

    def load_user_data(self, user_id: str) -> UserBookingSummary:
        self.cache.ensure_loaded()
        active = self.cache.records_for(lambda b: b.user_id == user_id and b.is_active)
        today = get_today_date()
        today_booking = next((b for b in active if b.date == today), None)
        return UserBookingSummary(user_bookings=active, today_booking=today_booking)

    def get_user_bookings(self, user_id: str) -> List[BookingRecord]:
        """Every cached booking of the user, cancelled ones included."""
        self.cache.ensure_loaded()
        return self.cache.records_for(lambda b: b.user_id == user_id)

    def get_bookings_for_date(self, date: str) -> List[BookingRecord]:
        self.cache.ensure_loaded()
        return self.cache.records_for(lambda b: b.date == date and b.is_active)

    def get_booking_stats(self, today: Optional[str] = None) -> Dict[str, int]:
        self.cache.ensure_loaded()
        today = today or get_today_date()
        records = self.cache.all_records()
        return {
            "total_bookings": len(records),
            "active_bookings": sum(1 for b in records if b.is_active),
            "today_bookings": sum(1 for b in records if b.date == today and b.is_active),
            "cancelled_bookings": sum(1 for b in records if b.status == BookingStatus.CANCELLED),
        }

    def refresh(self) -> None:
        """Reload the cache from the store."""
        self.cache.force_refresh()

    def cache_info(self) -> Dict[str, Any]:
        return self.cache.cache_info()
