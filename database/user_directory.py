"""
User directory used by the login flow: a flat list of {user_id, email}.
"""
import csv
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from domain.models import User
from services.errors import ConfigurationError, PersistenceError


logger = logging.getLogger(__name__)

USER_CSV_HEADERS = ["user_id", "email"]

DEFAULT_USERS = [
    User(user_id="1234", email="minnguyen@strongtie.com"),
    User(user_id="U001", email="dhuynh@strongtie.com"),
    User(user_id="U002", email="hvu@strongtie.com"),
    User(user_id="U003", email="mtien@strongtie.com"),
    User(user_id="U004", email="nghinguyen@strongtie.com"),
    User(user_id="U005", email="tnguyen19@strongtie.com"),
    User(user_id="U006", email="hoainguyen@strongtie.com"),
    User(user_id="U007", email="tienguyen@strongtie.com"),
    User(user_id="U008", email="quonguyen@strongtie.com"),
    User(user_id="U009", email="thtruong@strongtie.com"),
    User(user_id="U010", email="khdao@strongtie.com"),
]


class UserDirectory(ABC):
    """Port: bulk-readable, upsertable set of users."""

    @abstractmethod
    def load_all(self) -> List[User]:
        ...

    @abstractmethod
    def save(self, user: User) -> None:
        """Add the user, or replace the one with the same user_id."""
        ...

    def ensure_available(self) -> None:
        """Check at boot that the user list can be served."""
        self.load_all()

    def get(self, user_id: str) -> Optional[User]:
        for user in self.load_all():
            if user.user_id == user_id:
                return user
        return None

    def get_by_email(self, email: str) -> Optional[User]:
        for user in self.load_all():
            if user.email == email:
                return user
        return None


class InMemoryUserDirectory(UserDirectory):

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()
        for user in users or []:
            self._users[user.user_id] = user

    def load_all(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def save(self, user: User) -> None:
        with self._lock:
            self._users[user.user_id] = user
        logger.info(f"User {user.user_id} saved. Total users: {len(self._users)}")


class CsvUserDirectory(UserDirectory):
    """
    Users kept in a CSV file.

    When the file is missing the directory is seeded with DEFAULT_USERS if
    seed_defaults is set; otherwise ensure_available() raises
    ConfigurationError.
    """

    def __init__(self, csv_path: Union[str, Path], seed_defaults: bool = True):
        self.csv_path = Path(csv_path)
        self.seed_defaults = seed_defaults
        self._lock = threading.Lock()

    def ensure_available(self) -> None:
        """Check at boot that the user list can be served."""
        if self.csv_path.exists() or self.seed_defaults:
            return
        raise ConfigurationError(f"Required users file {self.csv_path} could not be loaded")

    def _read(self) -> List[User]:
        if not self.csv_path.exists():
            if self.seed_defaults:
                return list(DEFAULT_USERS)
            raise ConfigurationError(f"Required users file {self.csv_path} could not be loaded")
        users = []
        try:
            with open(self.csv_path, 'r', encoding='utf-8', newline='') as f:
                for row in csv.DictReader(f):
                    user_id = (row.get("user_id") or "").strip()
                    email = (row.get("email") or "").strip()
                    if not user_id or not email:
                        continue
                    try:
                        users.append(User(user_id=user_id, email=email))
                    except ValidationError:
                        logger.warning(f"Skipping invalid user row for {user_id!r}")
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error reading users from {self.csv_path}: {e}")
            raise PersistenceError(f"Failed to read users: {e}") from e
        return users

    def load_all(self) -> List[User]:
        with self._lock:
            return self._read()

    def save(self, user: User) -> None:
        with self._lock:
            users = self._read()
            for index, existing in enumerate(users):
                if existing.user_id == user.user_id:
                    users[index] = user
                    break
            else:
                users.append(user)

            tmp_path = self.csv_path.with_suffix(self.csv_path.suffix + ".tmp")
            try:
                self.csv_path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, 'w', encoding='utf-8', newline='') as f:
                    writer = csv.DictWriter(f, fieldnames=USER_CSV_HEADERS)
                    writer.writeheader()
                    for entry in users:
                        writer.writerow(entry.model_dump())
                os.replace(tmp_path, self.csv_path)
            except OSError as e:
                logger.error(f"Error writing users to {self.csv_path}: {e}")
                raise PersistenceError(f"Failed to save user: {e}") from e
        logger.info(f"User {user.user_id} saved to {self.csv_path.name}")
