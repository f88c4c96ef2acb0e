"""
Conflict validation for proposed bookings.

Checks run in order and the first failure wins:
  1. one ACTIVE booking per user per day
  2. seat/timeslot exclusivity (FULL_DAY overlaps everything, AM/PM only themselves)
Rejections are returned as error values, never raised.
"""

import logging
from typing import Iterable, Optional

from domain.enums import TimeSlot
from services.booking_cache import BookingCache
from services.errors import ConflictError, SeatConflictError, UserAlreadyBookedError


logger = logging.getLogger(__name__)


def slots_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    """Two slots overlap iff either is FULL_DAY or they are the same slot."""
    first, second = TimeSlot(first), TimeSlot(second)
    if first == TimeSlot.FULL_DAY or second == TimeSlot.FULL_DAY:
        return True
    return first == second


class ConflictValidator:
    """Decides whether a (user, seat, date, slot) booking may be created."""

    def __init__(self, cache: BookingCache):
        self.cache = cache

    def validate(
        self,
        user_id: str,
        seat_id: str,
        date: str,
        time_slot: TimeSlot,
        ignore_booking_ids: Iterable[str] = (),
    ) -> Optional[ConflictError]:
        """
        Validate a proposed booking against the cache.

        Args:
            user_id: Booking user
            seat_id: Requested seat
            date: Requested date (YYYY-MM-DD)
            time_slot: Requested slot
            ignore_booking_ids: The user's bookings the caller is about to
                cancel in the same operation; they do not count for rule 1

        Returns:
            None if the booking is acceptable, otherwise the rejection
        """
        time_slot = TimeSlot(time_slot)
        ignored = set(ignore_booking_ids)

        for existing in self.cache.active_for_user_on(user_id, date):
            if existing.id in ignored:
                continue
            logger.warning(
                f"Booking rejected: {user_id} already holds {existing.seat_id} on {date}"
            )
            return UserAlreadyBookedError(user_id, date, existing_booking_id=existing.id)

        for existing in self.cache.active_for_seat_on(seat_id, date):
            if slots_overlap(existing.time_slot, time_slot):
                logger.warning(
                    f"Booking rejected: {seat_id} on {date} ({time_slot.value}) "
                    f"overlaps {existing.time_slot.value} held by {existing.user_id}"
                )
                return SeatConflictError(
                    seat_id=seat_id,
                    date=date,
                    time_slot=time_slot.value,
                    booked_by=existing.user_id,
                )

        return None
