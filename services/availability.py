"""Availability of seats and timeslots, computed from the booking cache."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.seating_config import SeatingConfig, generate_all_seats, get_seating_config
from domain.booking import BookingRecord
from domain.enums import TimeSlot
from services.booking_cache import BookingCache


@dataclass
class SeatState:
    """Open timeslots of one seat, as seen by one user."""
    seat_id: str
    open_timeslots: List[TimeSlot]
    mine: bool

    @property
    def clickable(self) -> bool:
        return bool(self.open_timeslots) or self.mine


def resolve_open_timeslots(bookings: Iterable[BookingRecord]) -> List[TimeSlot]:
    """
    Compute open slots from the ACTIVE bookings of a single seat/date.

    Returns exactly one of [], [PM], [AM] or [AM, PM, FULL_DAY].
    """
    booked = {booking.time_slot for booking in bookings if booking.is_active}

    if TimeSlot.FULL_DAY in booked:
        return []

    am_open = TimeSlot.AM not in booked
    pm_open = TimeSlot.PM not in booked

    open_slots = []
    if am_open:
        open_slots.append(TimeSlot.AM)
    if pm_open:
        open_slots.append(TimeSlot.PM)
    # FULL_DAY is only offered on an untouched seat
    if am_open and pm_open:
        open_slots.append(TimeSlot.FULL_DAY)
    return open_slots


class AvailabilityResolver:
    """Answers which seats and slots are free on a date."""

    def __init__(self, cache: BookingCache, seating: Optional[SeatingConfig] = None):
        self.cache = cache
        self.seating = seating or get_seating_config()

    def open_timeslots(self, seat_id: str, date: str) -> List[TimeSlot]:
        """Open slots for a seat on a date."""
        return resolve_open_timeslots(self.cache.active_for_seat_on(seat_id, date))

    def seat_states(
        self,
        date: str,
        user_id: Optional[str] = None,
        seats: Optional[Iterable[str]] = None,
    ) -> List[SeatState]:
        """
        Per-seat availability for map rendering.

        Args:
            date: Date to inspect
            user_id: Viewing user; seats they hold are marked mine
            seats: Seats to inspect (defaults to the whole layout)
        """
        seat_ids = list(seats) if seats is not None else generate_all_seats(self.seating)
        bookings = self.cache.records_for(lambda b: b.date == date and b.is_active)

        by_seat = {}
        for booking in bookings:
            by_seat.setdefault(booking.seat_id, []).append(booking)

        states = []
        for seat_id in seat_ids:
            seat_bookings = by_seat.get(seat_id, [])
            states.append(SeatState(
                seat_id=seat_id,
                open_timeslots=resolve_open_timeslots(seat_bookings),
                mine=user_id is not None and any(b.user_id == user_id for b in seat_bookings),
            ))
        return states

    def available_seats(
        self,
        date: str,
        user_id: Optional[str] = None,
        seats: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """
        Seats the user may click on a date.

        A seat qualifies if any slot is open or the user already holds a
        booking on it (so it can be managed or released).
        """
        return [state.seat_id for state in self.seat_states(date, user_id, seats) if state.clickable]

    def reserved_seats(self, date: str) -> List[str]:
        """Seats with at least one ACTIVE booking on a date."""
        return [
            booking.seat_id
            for booking in self.cache.records_for(lambda b: b.date == date and b.is_active)
        ]
