"""
Batch processor for seat-map modifications.

A batch maps seat ID -> date -> intent (True = book FULL_DAY, False = release)
and is applied sequentially under the cache write lock. Operations that
succeed before a failure are kept; there is no rollback.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from core.logging import LogContext
from domain.enums import BatchAction, TimeSlot
from services.booking_cache import BookingCache, new_booking
from services.booking_validation import ConflictValidator
from services.errors import BookingError, PartialFailure


logger = logging.getLogger(__name__)


# ============================================================================
# Results
# ============================================================================

@dataclass
class BatchOperation:
    """One applied (or failed) step of a batch."""
    seat_id: str
    date: str
    action: Optional[BatchAction] = None
    booking_id: Optional[str] = None
    error: Optional[BookingError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "seat_id": self.seat_id,
            "date": self.date,
            "action": self.action.value if self.action else None,
            "booking_id": self.booking_id,
            "error": self.error.code if self.error else None,
            "message": self.error.message if self.error else None,
        }


@dataclass
class BatchResult:
    """Outcome of a whole batch."""
    operations: List[BatchOperation] = field(default_factory=list)

    @property
    def applied(self) -> List[BatchOperation]:
        return [op for op in self.operations if not op.failed]

    @property
    def failures(self) -> List[BatchOperation]:
        return [op for op in self.operations if op.failed]

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_error(self) -> Optional[PartialFailure]:
        """PartialFailure describing the failed steps, or None if all succeeded."""
        if self.ok:
            return None
        return PartialFailure([
            f"{op.seat_id} on {op.date}: {op.error.message}" for op in self.failures
        ])


# ============================================================================
# Processor
# ============================================================================

class BatchProcessor:
    """Applies seat/date intent maps for one user."""

    def __init__(self, cache: BookingCache, validator: ConflictValidator):
        self.cache = cache
        self.validator = validator

    def apply(self, user_id: str, modifications: Mapping[str, Mapping[str, bool]]) -> BatchResult:
        """
        Apply a modification batch.

        Args:
            user_id: Acting user
            modifications: seat ID -> date -> intent

        Returns:
            BatchResult listing every operation in application order

        Raises:
            PersistenceError: If the cache cannot be loaded
        """
        self.cache.ensure_loaded()
        result = BatchResult()

        with self.cache.write_lock:
            for seat_id, dates in modifications.items():
                for date, should_be_booked in dates.items():
                    if should_be_booked:
                        result.operations.extend(self._book(user_id, seat_id, date))
                    else:
                        result.operations.append(self._release(user_id, seat_id, date))

        context = LogContext(logger, user_id=user_id, operation_count=len(result.operations))
        if result.ok:
            context.log("info", f"Batch for {user_id} applied")
        else:
            context.log(
                "warning",
                f"Batch for {user_id}: {len(result.failures)} operation(s) failed",
                failure_count=len(result.failures),
            )
        return result

    def _release(self, user_id: str, seat_id: str, date: str) -> BatchOperation:
        held = [b for b in self.cache.active_for_seat_on(seat_id, date) if b.user_id == user_id]
        if not held:
            return BatchOperation(seat_id, date, BatchAction.UNCHANGED)

        booking = held[0]
        try:
            self.cache.cancel(booking.id, user_id)
        except BookingError as e:
            return BatchOperation(seat_id, date, BatchAction.CANCELLED, booking.id, error=e)
        return BatchOperation(seat_id, date, BatchAction.CANCELLED, booking.id)

    def _book(self, user_id: str, seat_id: str, date: str) -> List[BatchOperation]:
        own = self.cache.active_for_user_on(user_id, date)

        for booking in own:
            if booking.seat_id == seat_id:
                return [BatchOperation(seat_id, date, BatchAction.UNCHANGED, booking.id)]

        # The user's booking on another seat is released before the rebook
        error = self.validator.validate(
            user_id, seat_id, date, TimeSlot.FULL_DAY,
            ignore_booking_ids=[b.id for b in own],
        )
        if error is not None:
            return [BatchOperation(seat_id, date, BatchAction.CREATED, error=error)]

        operations = []
        for booking in own:
            try:
                self.cache.cancel(booking.id, user_id)
            except BookingError as e:
                operations.append(BatchOperation(
                    booking.seat_id, date, BatchAction.RELEASED, booking.id, error=e
                ))
                return operations
            operations.append(BatchOperation(booking.seat_id, date, BatchAction.RELEASED, booking.id))

        record = new_booking(user_id, seat_id, date, TimeSlot.FULL_DAY)
        try:
            self.cache.add(record)
        except BookingError as e:
            operations.append(BatchOperation(seat_id, date, BatchAction.CREATED, error=e))
            return operations

        operations.append(BatchOperation(seat_id, date, BatchAction.CREATED, record.id))
        return operations
