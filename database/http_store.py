"""
Adapter: reservation store and user directory behind a remote booking API.

Talks to the /api/reservations and /api/users routes served by
apps.api (or any service exposing the same contract).
"""
import logging
from typing import List

import requests
from pydantic import ValidationError

from database.stores import RecordNotFoundError, ReservationStore
from database.user_directory import UserDirectory
from domain.models import ReservationRecord, User
from services.errors import PersistenceError, SeatConflictError


logger = logging.getLogger(__name__)


class HttpReservationStore(ReservationStore):
    """Adapter: remote reservations API client."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/reservations"

    def load_all(self) -> List[ReservationRecord]:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            return [ReservationRecord(**item) for item in data.get("reservations", [])]
        except (requests.RequestException, ValueError, ValidationError) as e:
            logger.error(f"Error loading reservations from {self.url}: {e}")
            raise PersistenceError(f"Failed to load reservations: {e}") from e

    def save(self, record: ReservationRecord) -> None:
        try:
            resp = self.session.post(
                self.url,
                json={"reservation": record.model_dump(mode="json")},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error saving reservation via API: {e}")
            raise PersistenceError(f"Failed to save reservation: {e}") from e

        if resp.status_code == 409:
            data = _json_or_empty(resp)
            if data.get("error") == "SEAT_ALREADY_BOOKED":
                details = data.get("conflictDetails") or {}
                raise SeatConflictError(
                    seat_id=details.get("seat", record.table_id),
                    date=details.get("date", record.date),
                    time_slot=details.get("timeSlot", record.slot_type.value),
                    booked_by=details.get("bookedBy"),
                    message=data.get("message") or "Seat is already booked by another user",
                )

        if not resp.ok:
            data = _json_or_empty(resp)
            message = data.get("message") or data.get("error") or "Unknown error"
            raise PersistenceError(f"Failed to save reservation: {resp.status_code} - {message}")

    def delete(self, reservation_id: str) -> None:
        if not reservation_id or not reservation_id.strip():
            raise ValueError("Reservation ID is required for deletion")

        try:
            resp = self.session.delete(
                self.url,
                params={"id": reservation_id},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error deleting reservation via API: {e}")
            raise PersistenceError(f"Failed to delete reservation: {e}") from e

        if resp.status_code == 404:
            raise RecordNotFoundError(reservation_id)
        if not resp.ok:
            data = _json_or_empty(resp)
            raise PersistenceError(
                f"Failed to delete reservation: {resp.status_code} - {data.get('error') or resp.text}"
            )


class HttpUserDirectory(UserDirectory):
    """Adapter: remote users API client."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/users"

    def load_all(self) -> List[User]:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            return [User(**item) for item in resp.json().get("users", [])]
        except (requests.RequestException, ValueError, ValidationError) as e:
            raise PersistenceError(f"Failed to load users: {e}") from e

    def save(self, user: User) -> None:
        try:
            resp = self.session.post(self.url, json={"user": user.model_dump()}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise PersistenceError(f"Failed to save user: {e}") from e


def _json_or_empty(resp: requests.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
