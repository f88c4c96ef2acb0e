"""Booking engine endpoints used by the seat map UI."""

import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from apps.api.deps import get_app_settings, get_booking_service
from apps.api.errors import error_response
from core.seating_config import generate_all_seats, is_known_seat
from core.settings import Settings
from core.utils_datetime import (
    DATE_FORMAT,
    get_booking_window,
    get_first_available_date,
    get_today_date,
    parse_date,
)
from domain.models import (
    BatchModificationRequest,
    BookingCreate,
    BookingView,
    MultipleBookingCreate,
    SeatAvailability,
)
from services.booking_service import BookingRequest, BookingService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


# ============================================================================
# Request checks
# ============================================================================

def _require_date(value: str) -> str:
    try:
        parse_date(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date {value!r}, expected {DATE_FORMAT}")
    return value


def _require_seat(service: BookingService, seat_id: str) -> str:
    if not is_known_seat(seat_id, service.seating):
        raise HTTPException(status_code=404, detail=f"Unknown seat {seat_id}")
    return seat_id


def _window(app_settings: Settings):
    return get_booking_window(
        weeks=app_settings.booking_window_weeks,
        cutoff_weekday=app_settings.booking_cutoff_weekday,
        cutoff_hour=app_settings.booking_cutoff_hour,
    )


def _require_bookable(dates: Iterable[str], app_settings: Settings) -> None:
    window = _window(app_settings)
    for value in dates:
        if value not in window:
            raise HTTPException(status_code=422, detail=f"{value} is outside the booking window")


def _view(booking) -> dict:
    return BookingView.model_validate(booking).model_dump(mode="json")


# ============================================================================
# Window and layout
# ============================================================================

@router.get("/window")
def booking_window(app_settings: Settings = Depends(get_app_settings)):
    """Bookable weekdays and the first one to preselect."""
    return {
        "success": True,
        "dates": _window(app_settings),
        "first_available_date": get_first_available_date(
            weeks=app_settings.booking_window_weeks,
            cutoff_weekday=app_settings.booking_cutoff_weekday,
            cutoff_hour=app_settings.booking_cutoff_hour,
        ),
    }


@router.get("/layout")
def seating_layout(service: BookingService = Depends(get_booking_service)):
    """Tables, zones and seat IDs of the office."""
    seating = service.seating
    tables = []
    for letter in seating.tables:
        zone = seating.zone_for_table(letter)
        tables.append({
            "table": letter,
            "zone": zone.name if zone else None,
            "seats": [f"{letter}{n}" for n in range(1, seating.seats_for_table(letter) + 1)],
        })
    return {
        "success": True,
        "tables": tables,
        "total_seats": len(generate_all_seats(seating)),
    }


# ============================================================================
# Availability
# ============================================================================

@router.get("/seats")
def seat_availability(
    date: Optional[str] = Query(None, description="Date (YYYY-MM-DD), defaults to today"),
    user_id: Optional[str] = Query(None, description="Viewing user"),
    service: BookingService = Depends(get_booking_service)
):
    """
    Per-seat open timeslots for a date.

    Returns:
        {success, date, seats: [SeatAvailability], available_seats}
    """
    target_date = _require_date(date) if date else get_today_date()
    states = service.get_seat_states(target_date, user_id)
    return {
        "success": True,
        "date": target_date,
        "seats": [
            SeatAvailability(
                seat_id=state.seat_id,
                open_timeslots=state.open_timeslots,
                mine=state.mine,
                clickable=state.clickable,
            ).model_dump(mode="json")
            for state in states
        ],
        "available_seats": [state.seat_id for state in states if state.clickable],
    }


@router.get("/seats/{seat_id}/timeslots")
def seat_timeslots(
    seat_id: str,
    date: str = Query(..., description="Date (YYYY-MM-DD)"),
    service: BookingService = Depends(get_booking_service)
):
    """Open timeslots of one seat."""
    _require_seat(service, seat_id)
    _require_date(date)
    return {
        "success": True,
        "seat_id": seat_id,
        "date": date,
        "open_timeslots": [slot.value for slot in service.get_open_timeslots(seat_id, date)],
    }


@router.get("/reserved")
def reserved_seats(
    date: Optional[str] = Query(None, description="Date (YYYY-MM-DD), defaults to today"),
    service: BookingService = Depends(get_booking_service)
):
    """Seats with at least one ACTIVE booking."""
    target_date = _require_date(date) if date else get_today_date()
    return {"success": True, "date": target_date, "seats": service.get_reserved_seats(target_date)}


# ============================================================================
# Mutations
# ============================================================================

@router.post("", status_code=201)
def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    app_settings: Settings = Depends(get_app_settings)
):
    """
    Book one seat for one slot.

    Returns 409 with USER_ALREADY_BOOKED or SEAT_ALREADY_BOOKED on conflict.
    """
    _require_seat(service, payload.seat_id)
    booking_date = payload.date or get_today_date()
    _require_bookable([booking_date], app_settings)

    result = service.create_booking(payload.user_id, payload.seat_id, payload.time_slot, booking_date)
    if not result.success:
        return error_response(result.error)
    return {"success": True, "booking": _view(result.booking)}


@router.post("/multiple", status_code=201)
def create_multiple_bookings(
    payload: MultipleBookingCreate,
    service: BookingService = Depends(get_booking_service),
    app_settings: Settings = Depends(get_app_settings)
):
    """Book several seat/slot/date entries; failures are listed per entry."""
    for item in payload.bookings:
        _require_seat(service, item.seat_id)
    _require_bookable([item.date for item in payload.bookings], app_settings)

    result = service.create_multiple_bookings(
        payload.user_id,
        [BookingRequest(item.seat_id, item.time_slot, item.date) for item in payload.bookings],
    )
    content = {
        "success": result.success,
        "bookings": [_view(b) for b in result.bookings],
        "failed_bookings": result.failed_bookings,
        "error": result.error,
    }
    if not result.success:
        return JSONResponse(status_code=409, content=content)
    return content


@router.delete("/{booking_id}")
def cancel_booking(
    booking_id: str,
    user_id: str = Query(..., min_length=1, description="Acting user"),
    service: BookingService = Depends(get_booking_service)
):
    """Cancel one of the user's ACTIVE bookings (404 if none matches)."""
    result = service.cancel_booking(booking_id, user_id)
    if not result.success:
        return error_response(result.error)
    return {"success": True, "booking": _view(result.booking)}


@router.post("/batch")
def apply_batch(
    payload: BatchModificationRequest,
    service: BookingService = Depends(get_booking_service),
    app_settings: Settings = Depends(get_app_settings)
):
    """
    Apply seat -> date -> intent modifications from the seat map.

    Steps that succeed are kept when a later one fails; the response lists
    every step and answers 409 if any failed.
    """
    for seat_id, dates in payload.modifications.items():
        _require_seat(service, seat_id)
        _require_bookable(dates.keys(), app_settings)

    result = service.apply_batch(payload.modifications, payload.user_id)
    content = {
        "success": result.ok,
        "operations": [op.to_dict() for op in result.operations],
    }
    failure = result.to_error()
    if failure is not None:
        content.update(failure.to_dict())
        return JSONResponse(status_code=409, content=content)
    return content


# ============================================================================
# Queries
# ============================================================================

@router.get("/users/{user_id}")
def user_bookings(
    user_id: str,
    include_cancelled: bool = Query(False, description="Include cancelled bookings"),
    service: BookingService = Depends(get_booking_service)
):
    """A user's bookings and today's booking."""
    if include_cancelled:
        bookings = service.get_user_bookings(user_id)
        return {"success": True, "bookings": [_view(b) for b in bookings], "count": len(bookings)}

    summary = service.load_user_data(user_id)
    return {
        "success": True,
        "user_bookings": [_view(b) for b in summary.user_bookings],
        "today_booking": _view(summary.today_booking) if summary.today_booking else None,
        "total_bookings": summary.total_bookings,
    }


@router.get("/date/{date}")
def bookings_for_date(date: str, service: BookingService = Depends(get_booking_service)):
    """ACTIVE bookings on a date."""
    _require_date(date)
    bookings = service.get_bookings_for_date(date)
    return {"success": True, "date": date, "bookings": [_view(b) for b in bookings], "count": len(bookings)}


@router.get("/stats")
def booking_stats(service: BookingService = Depends(get_booking_service)):
    return {"success": True, **service.get_booking_stats()}


@router.post("/refresh")
def refresh_cache(service: BookingService = Depends(get_booking_service)):
    """Reload the booking cache from the store."""
    service.refresh()
    return {"success": True, **service.cache_info()}


@router.get("/cache")
def cache_status(service: BookingService = Depends(get_booking_service)):
    return {"success": True, **service.cache_info()}
