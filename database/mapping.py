"""
Mapping between the stored reservation schema and engine bookings.

The store knows reservation_id/table_id/slot_type and has no status; the
engine works with BookingRecord. Only this module translates between them.
"""
import re
from typing import Optional

from domain.enums import BookingStatus
from domain.models import ReservationRecord
from domain.booking import BookingRecord


LEGACY_TABLE_ID_PATTERN = re.compile(r"^T(0[1-9]|[1-9]\d)$")


def seat_from_table_id(table_id: str) -> str:
    """
    Resolve the seat ID stored in table_id.

    Older rows used zero-padded table keys (T01, T02, ...); those map to
    seat 1 of table A, B, ... Seats of table T (T1..T4) are left alone.
    """
    match = LEGACY_TABLE_ID_PATTERN.match(table_id)
    if match:
        table_number = int(match.group(1))
        return f"{chr(ord('A') + table_number - 1)}1"
    return table_id


def reservation_to_booking(
    reservation: ReservationRecord,
    user_email: Optional[str] = None
) -> BookingRecord:
    """Convert a stored reservation into an ACTIVE booking."""
    seat_id = seat_from_table_id(reservation.table_id)
    return BookingRecord(
        id=reservation.reservation_id,
        user_id=reservation.user_id,
        seat_id=seat_id,
        date=reservation.date,
        time_slot=reservation.slot_type,
        booking_timestamp=reservation.created_at,
        status=BookingStatus.ACTIVE,
        table_number=seat_id[:1],
        user_email=user_email,
    )


def booking_to_reservation(booking: BookingRecord) -> ReservationRecord:
    """Convert a booking into the stored reservation shape (seat ID goes in table_id)."""
    return ReservationRecord(
        reservation_id=booking.id,
        user_id=booking.user_id,
        table_id=booking.seat_id,
        date=booking.date,
        slot_type=booking.time_slot,
        created_at=booking.booking_timestamp,
    )
