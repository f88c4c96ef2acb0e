"""Build the configured reservation store and user directory."""

import logging
from typing import Tuple

from core.settings import Settings
from database.connection import build_engine, build_session_factory, init_db
from database.http_store import HttpReservationStore, HttpUserDirectory
from database.sql_store import SqlReservationStore, SqlUserDirectory
from database.stores import CsvReservationStore, InMemoryReservationStore, ReservationStore
from database.user_directory import (
    DEFAULT_USERS,
    CsvUserDirectory,
    InMemoryUserDirectory,
    UserDirectory,
)
from domain.enums import StorageBackend
from services.errors import ConfigurationError


logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Tuple[ReservationStore, UserDirectory]:
    """
    Create the reservation store and user directory for the configured backend.

    Args:
        settings: Application settings

    Returns:
        (reservation store, user directory)

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    try:
        backend = StorageBackend(settings.storage_backend)
    except ValueError as e:
        raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend}") from e

    logger.info(f"Using {backend.value} storage backend")

    if backend == StorageBackend.MEMORY:
        return InMemoryReservationStore(), InMemoryUserDirectory(DEFAULT_USERS)

    if backend == StorageBackend.CSV:
        return (
            CsvReservationStore(settings.reservations_csv_path),
            CsvUserDirectory(settings.users_csv_path, seed_defaults=settings.seed_default_users),
        )

    if backend == StorageBackend.SQL:
        engine = build_engine(settings.database_url, echo=settings.debug)
        init_db(engine)
        session_factory = build_session_factory(engine)
        users = SqlUserDirectory(session_factory)
        if settings.seed_default_users:
            users.seed(DEFAULT_USERS)
        return SqlReservationStore(session_factory), users

    timeout = settings.http_timeout_seconds
    return (
        HttpReservationStore(settings.reservations_api_url, timeout=timeout),
        HttpUserDirectory(settings.reservations_api_url, timeout=timeout),
    )
