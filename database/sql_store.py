"""SQL-backed reservation store and user directory (SQLAlchemy)."""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database.models import ReservationRow, UserRow
from database.stores import RecordNotFoundError, ReservationStore
from database.user_directory import UserDirectory
from domain.models import ReservationRecord, User
from services.errors import PersistenceError


logger = logging.getLogger(__name__)


class SqlReservationStore(ReservationStore):
    """Reservations kept in a relational database table."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the store.

        Args:
            session_factory: SQLAlchemy session factory; one session per call
        """
        self._session_factory = session_factory

    def load_all(self) -> List[ReservationRecord]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(
                    select(ReservationRow).order_by(ReservationRow.date, ReservationRow.table_id)
                ).all()
                return [ReservationRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error loading reservations: {e}")
            raise PersistenceError(f"Failed to load reservations: {e}") from e

    def get(self, reservation_id: str) -> Optional[ReservationRecord]:
        try:
            with self._session_factory() as session:
                row = session.get(ReservationRow, reservation_id)
                return ReservationRecord.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load reservation: {e}") from e

    def save(self, record: ReservationRecord) -> None:
        try:
            with self._session_factory() as session:
                session.merge(ReservationRow(**record.model_dump(mode="json")))
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving reservation {record.reservation_id}: {e}")
            raise PersistenceError(f"Failed to save reservation: {e}") from e
        logger.info(f"Reservation saved to database: {record.reservation_id}")

    def delete(self, reservation_id: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(ReservationRow, reservation_id)
                if row is None:
                    raise RecordNotFoundError(reservation_id)
                session.delete(row)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting reservation {reservation_id}: {e}")
            raise PersistenceError(f"Failed to delete reservation: {e}") from e
        logger.info(f"Reservation deleted from database: {reservation_id}")


class SqlUserDirectory(UserDirectory):
    """Users kept in a relational database table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def load_all(self) -> List[User]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(UserRow).order_by(UserRow.user_id)).all()
                return [User.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load users: {e}") from e

    def get(self, user_id: str) -> Optional[User]:
        try:
            with self._session_factory() as session:
                row = session.get(UserRow, user_id)
                return User.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load user: {e}") from e

    def save(self, user: User) -> None:
        try:
            with self._session_factory() as session:
                session.merge(UserRow(user_id=user.user_id, email=user.email))
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save user: {e}") from e
        logger.info(f"User {user.user_id} saved to database")

    def seed(self, users: List[User]) -> None:
        """Insert users that are not present yet."""
        try:
            with self._session_factory() as session:
                existing = set(session.scalars(select(UserRow.user_id)).all())
                for user in users:
                    if user.user_id not in existing:
                        session.add(UserRow(user_id=user.user_id, email=user.email))
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to seed users: {e}") from e
