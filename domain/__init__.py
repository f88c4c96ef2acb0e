"""Domain layer for the desk booking service."""

from .enums import (
    TimeSlot,
    BookingStatus,
    BatchAction,
    StorageBackend,
)
from .models import (
    ReservationRecord,
    User,
    ReservationEnvelope,
    ReservationDeleteRequest,
    UserEnvelope,
    LoginRequest,
    BookingCreate,
    BookingRequestItem,
    MultipleBookingCreate,
    BatchModificationRequest,
    BookingView,
    SeatAvailability,
)
from .booking import BookingRecord

__all__ = [
    # Enums
    "TimeSlot",
    "BookingStatus",
    "BatchAction",
    "StorageBackend",
    # Models
    "ReservationRecord",
    "User",
    "ReservationEnvelope",
    "ReservationDeleteRequest",
    "UserEnvelope",
    "LoginRequest",
    "BookingCreate",
    "BookingRequestItem",
    "MultipleBookingCreate",
    "BatchModificationRequest",
    "BookingView",
    "SeatAvailability",
    # Engine records
    "BookingRecord",
]
