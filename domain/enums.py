"""Domain enums for the desk booking service."""

from enum import Enum


class TimeSlot(str, Enum):
    """Bookable part of a working day."""

    AM = "AM"
    PM = "PM"
    FULL_DAY = "FULL_DAY"


class BookingStatus(str, Enum):
    """Engine-level booking status (the store has no status column)."""

    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class BatchAction(str, Enum):
    """Operation performed by the modification batch processor."""

    CREATED = "created"
    CANCELLED = "cancelled"
    RELEASED = "released"  # Booking on another seat cancelled to rebook
    UNCHANGED = "unchanged"


class StorageBackend(str, Enum):
    """Reservation store implementations."""

    CSV = "csv"
    MEMORY = "memory"
    SQL = "sql"
    HTTP = "http"
