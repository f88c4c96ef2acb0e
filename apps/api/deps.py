"""FastAPI dependencies: per-app singletons stored on app.state."""

from fastapi import Request

from core.settings import Settings
from database.stores import ReservationStore
from database.user_directory import UserDirectory
from services.booking_service import BookingService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_booking_service(request: Request) -> BookingService:
    """Get the booking service built at startup."""
    return request.app.state.booking_service


def get_reservation_store(request: Request) -> ReservationStore:
    return request.app.state.reservation_store


def get_user_directory(request: Request) -> UserDirectory:
    return request.app.state.user_directory
