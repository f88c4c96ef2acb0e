"""
Booking error taxonomy.

Validator rejections (ConflictError subclasses) are returned as values by
the engine; PersistenceError and ConfigurationError are raised.
"""
from typing import Any, Dict, List, Optional


class BookingError(Exception):
    """Base class for booking engine errors."""

    code = "BOOKING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ConflictError(BookingError):
    """A proposed booking violates a booking rule."""

    code = "CONFLICT"


class UserAlreadyBookedError(ConflictError):
    """The user already holds a seat on that date."""

    code = "USER_ALREADY_BOOKED"

    def __init__(self, user_id: str, date: str, existing_booking_id: Optional[str] = None):
        super().__init__(
            f"You already have a booking for {date}. Only one booking per day is allowed."
        )
        self.user_id = user_id
        self.date = date
        self.existing_booking_id = existing_booking_id


class SeatConflictError(ConflictError):
    """The seat is already taken for an overlapping timeslot."""

    code = "SEAT_ALREADY_BOOKED"

    def __init__(
        self,
        seat_id: str,
        date: str,
        time_slot: str,
        booked_by: Optional[str] = None,
        message: Optional[str] = None,
    ):
        super().__init__(message or f"Seat {seat_id} is already booked for {date} ({time_slot})")
        self.seat_id = seat_id
        self.date = date
        self.time_slot = time_slot
        self.booked_by = booked_by

    @property
    def conflict_details(self) -> Dict[str, Any]:
        return {
            "seat": self.seat_id,
            "date": self.date,
            "timeSlot": self.time_slot,
            "bookedBy": self.booked_by,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["conflictDetails"] = self.conflict_details
        return data


class NotFoundError(BookingError):
    """Target booking is missing or not owned by the caller."""

    code = "NOT_FOUND"


class PersistenceError(BookingError):
    """Reservation store read or write failed."""

    code = "PERSISTENCE_ERROR"


class ConfigurationError(BookingError):
    """Required external data is missing at boot."""

    code = "CONFIGURATION_ERROR"


class PartialFailure(BookingError):
    """Some operations of a batch failed; earlier successes are kept."""

    code = "PARTIAL_FAILURE"

    def __init__(self, failures: List[str]):
        super().__init__(f"Some bookings failed: {'; '.join(failures)}")
        self.failures = failures
