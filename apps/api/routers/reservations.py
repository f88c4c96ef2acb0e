"""Raw reservation store endpoints (the contract the HTTP store talks to)."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from apps.api.deps import get_reservation_store
from database.mapping import seat_from_table_id
from database.stores import ReservationStore
from domain.models import ReservationDeleteRequest, ReservationEnvelope, ReservationRecord
from services.booking_validation import slots_overlap
from services.errors import SeatConflictError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _find_conflict(store: ReservationStore, record: ReservationRecord) -> Optional[ReservationRecord]:
    """Another user's reservation overlapping the same seat, date and slot."""
    seat_id = seat_from_table_id(record.table_id)
    for existing in store.load_all():
        if existing.reservation_id == record.reservation_id or existing.user_id == record.user_id:
            continue
        if seat_from_table_id(existing.table_id) != seat_id or existing.date != record.date:
            continue
        if slots_overlap(existing.slot_type, record.slot_type):
            return existing
    return None


def _invalidate_cache(request: Request) -> None:
    # Writes here bypass the booking cache
    cache = getattr(request.app.state, "booking_cache", None)
    if cache is not None:
        cache.invalidate()


@router.get("")
def list_reservations(store: ReservationStore = Depends(get_reservation_store)):
    """
    List every stored reservation.

    Returns:
        {success, reservations, count}
    """
    reservations = store.load_all()
    return {
        "success": True,
        "reservations": [r.model_dump(mode="json") for r in reservations],
        "count": len(reservations),
    }


@router.post("")
def save_reservation(
    request: Request,
    payload: ReservationEnvelope,
    store: ReservationStore = Depends(get_reservation_store)
):
    """
    Upsert a reservation.

    Rejected with 409 SEAT_ALREADY_BOOKED when another user already holds an
    overlapping slot on the same seat and date.
    """
    record = payload.reservation
    conflict = _find_conflict(store, record)
    if conflict is not None:
        logger.warning(
            f"Reservation {record.reservation_id} conflicts with {conflict.reservation_id}"
        )
        raise SeatConflictError(
            seat_id=record.table_id,
            date=record.date,
            time_slot=record.slot_type.value,
            booked_by=conflict.user_id,
            message="This seat is already booked by another user",
        )

    store.save(record)
    _invalidate_cache(request)
    return {"success": True, "reservation": record.model_dump(mode="json")}


@router.delete("")
def delete_reservation(
    request: Request,
    id: Optional[str] = Query(None, description="Reservation ID"),
    body: Optional[ReservationDeleteRequest] = Body(None),
    store: ReservationStore = Depends(get_reservation_store)
):
    """
    Delete a reservation by ?id= or JSON body {reservation_id}.

    Returns 404 when the reservation does not exist.
    """
    reservation_id = id or (body.reservation_id if body else None)
    if not reservation_id:
        raise HTTPException(status_code=400, detail="Reservation ID is required")

    store.delete(reservation_id)
    _invalidate_cache(request)
    return {"success": True, "message": "Reservation deleted successfully"}
