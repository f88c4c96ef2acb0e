"""Domain models using Pydantic v2 for the desk booking service."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from core.utils_datetime import parse_date
from .enums import TimeSlot, BookingStatus


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _check_calendar_date(v: str) -> str:
    try:
        parse_date(v)
    except ValueError:
        raise ValueError(f"{v} is not a valid calendar date")
    return v


class ReservationRecord(BaseModel):
    """
    Reservation as stored and exchanged on the wire.

    table_id holds the seat identifier (e.g. "A1").
    """

    reservation_id: str = Field(..., min_length=1, max_length=100)
    user_id: str = Field(..., min_length=1, max_length=100)
    table_id: str = Field(..., min_length=1, max_length=20)
    date: str = Field(..., pattern=DATE_PATTERN, description="Reservation date (YYYY-MM-DD)")
    slot_type: TimeSlot
    created_at: str = Field(default="", description="ISO timestamp of creation")

    model_config = ConfigDict(
        str_strip_whitespace=True,
        from_attributes=True,
        use_enum_values=False,
    )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_calendar_date(v)


class User(BaseModel):
    """Directory entry used by the login flow."""

    user_id: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)

    model_config = ConfigDict(str_strip_whitespace=True, from_attributes=True)


class ReservationEnvelope(BaseModel):
    """Body of POST /api/reservations."""

    reservation: ReservationRecord


class ReservationDeleteRequest(BaseModel):
    """Optional body of DELETE /api/reservations."""

    reservation_id: str = Field(..., min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True)


class UserEnvelope(BaseModel):
    """Body of POST /api/users."""

    user: User


class LoginRequest(BaseModel):
    """Login with a bare user ID."""

    user_id: str = Field(..., max_length=100)

    model_config = ConfigDict(str_strip_whitespace=True)


class BookingCreate(BaseModel):
    """Request to book one seat for one slot."""

    user_id: str = Field(..., min_length=1, max_length=100)
    seat_id: str = Field(..., min_length=2, max_length=10)
    time_slot: TimeSlot
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_calendar_date(v)


class BookingRequestItem(BaseModel):
    """One entry of a multiple-booking request."""

    seat_id: str = Field(..., min_length=2, max_length=10)
    time_slot: TimeSlot
    date: str = Field(..., pattern=DATE_PATTERN)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_calendar_date(v)


class MultipleBookingCreate(BaseModel):
    """Request to book several seats/dates in one call."""

    user_id: str = Field(..., min_length=1, max_length=100)
    bookings: List[BookingRequestItem] = Field(..., min_length=1)


class BatchModificationRequest(BaseModel):
    """
    Per-seat, per-date booking intents.

    modifications maps seat ID to a mapping of date to intent
    (true = book FULL_DAY, false = release).
    """

    user_id: str = Field(..., min_length=1, max_length=100)
    modifications: Dict[str, Dict[str, bool]]

    @field_validator("modifications")
    @classmethod
    def validate_modification_dates(cls, v: Dict[str, Dict[str, bool]]) -> Dict[str, Dict[str, bool]]:
        for dates in v.values():
            for date_str in dates:
                _check_calendar_date(date_str)
        return v


class BookingView(BaseModel):
    """Booking as returned by the API."""

    id: str
    user_id: str
    seat_id: str
    date: str
    time_slot: TimeSlot
    booking_timestamp: str
    status: BookingStatus
    table_number: str
    user_email: Optional[str] = None
    modified_timestamp: Optional[str] = None
    modified_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SeatAvailability(BaseModel):
    """Open slots of one seat on one date."""

    seat_id: str
    open_timeslots: List[TimeSlot]
    mine: bool = False
    clickable: bool
