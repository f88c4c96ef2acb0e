"""Engine-facing booking record held in the booking cache."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .enums import BookingStatus, TimeSlot


@dataclass
class BookingRecord:
    """
    A reservation plus engine-only state.

    status is soft: cancelled bookings stay in the cache with
    CANCELLED status while the store deletes the row.
    """
    id: str
    user_id: str
    seat_id: str
    date: str  # YYYY-MM-DD
    time_slot: TimeSlot
    booking_timestamp: str
    status: BookingStatus = BookingStatus.ACTIVE
    table_number: str = ""
    user_email: Optional[str] = None
    modified_timestamp: Optional[str] = None
    modified_by: Optional[str] = None

    def __post_init__(self):
        self.time_slot = TimeSlot(self.time_slot)
        self.status = BookingStatus(self.status)
        if not self.table_number:
            self.table_number = self.seat_id[:1]

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with enum values as strings."""
        data = asdict(self)
        data['time_slot'] = self.time_slot.value
        data['status'] = self.status.value
        return data
