"""Pytest configuration and fixtures for desk booking tests."""
import pytest
from fastapi.testclient import TestClient

from apps.api.main import create_app
from core.settings import Settings
from core.utils_datetime import get_booking_window
from database.connection import build_engine, build_session_factory, init_db
from database.stores import InMemoryReservationStore
from domain.enums import TimeSlot
from domain.models import ReservationRecord
from services.booking_cache import BookingCache
from services.booking_service import BookingService
from services.errors import PersistenceError


class CountingStore(InMemoryReservationStore):
    """In-memory store that counts calls and can be told to fail."""

    def __init__(self, records=None):
        super().__init__(records)
        self.load_calls = 0
        self.save_calls = 0
        self.delete_calls = 0
        self.fail_load = False
        self.fail_save = False
        self.fail_delete = False

    def load_all(self):
        self.load_calls += 1
        if self.fail_load:
            raise PersistenceError("Failed to load reservations: store offline")
        return super().load_all()

    def save(self, record):
        self.save_calls += 1
        if self.fail_save:
            raise PersistenceError("Failed to save reservation: store offline")
        super().save(record)

    def delete(self, reservation_id):
        self.delete_calls += 1
        if self.fail_delete:
            raise PersistenceError("Failed to delete reservation: store offline")
        super().delete(reservation_id)

    @property
    def write_calls(self):
        return self.save_calls + self.delete_calls


@pytest.fixture(scope="function")
def booking_date():
    """A fixed Wednesday used by engine tests."""
    return "2025-10-15"


@pytest.fixture(scope="function")
def make_reservation():
    """Factory fixture to build a stored reservation."""
    def _make(reservation_id="R1", user_id="U001", table_id="A1",
              date="2025-10-15", slot_type=TimeSlot.FULL_DAY):
        return ReservationRecord(
            reservation_id=reservation_id,
            user_id=user_id,
            table_id=table_id,
            date=date,
            slot_type=slot_type,
            created_at="2025-10-10T09:00:00+07:00",
        )
    return _make


@pytest.fixture(scope="function")
def store():
    """Create an empty counting in-memory store."""
    return CountingStore()


@pytest.fixture(scope="function")
def cache(store):
    """Create a booking cache over the counting store."""
    return BookingCache(store)


@pytest.fixture(scope="function")
def booking_service(cache):
    """Create a booking service over the cache."""
    return BookingService(cache)


@pytest.fixture(scope="function")
def session_factory():
    """Create an in-memory SQLite database and session factory."""
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def api_settings(tmp_path):
    """Settings for an API app backed by the in-memory store."""
    return Settings(
        _env_file=None,
        app_env="development",
        storage_backend="memory",
        data_dir=str(tmp_path),
    )


@pytest.fixture(scope="function")
def client(api_settings):
    """Create a test client; the lifespan builds the engine."""
    app = create_app(api_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def window_dates(api_settings):
    """Bookable dates right now."""
    return get_booking_window(
        weeks=api_settings.booking_window_weeks,
        cutoff_weekday=api_settings.booking_cutoff_weekday,
        cutoff_hour=api_settings.booking_cutoff_hour,
    )
