"""
Reservation store port and its file/in-memory adapters.

The booking engine depends only on ReservationStore. Each adapter keeps
the wire schema (ReservationRecord) and knows nothing about booking status.
"""
import csv
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from domain.models import ReservationRecord
from services.errors import NotFoundError, PersistenceError


logger = logging.getLogger(__name__)

RESERVATION_CSV_HEADERS = [
    "reservation_id",
    "user_id",
    "table_id",
    "date",
    "slot_type",
    "created_at",
]


class RecordNotFoundError(NotFoundError):
    """Raised by a store when deleting a reservation it does not hold."""

    def __init__(self, reservation_id: str):
        super().__init__("Reservation not found")
        self.reservation_id = reservation_id


class ReservationStore(ABC):
    """
    Port: durable set of reservation records.

    save() is an upsert keyed by reservation_id. Concurrent writers are
    last-write-wins; there is no version token.
    """

    @abstractmethod
    def load_all(self) -> List[ReservationRecord]:
        """Return every stored reservation."""
        ...

    @abstractmethod
    def save(self, record: ReservationRecord) -> None:
        """Add the record, or replace the one with the same reservation_id."""
        ...

    @abstractmethod
    def delete(self, reservation_id: str) -> None:
        """Remove a record. Raises RecordNotFoundError if absent."""
        ...

    def get(self, reservation_id: str) -> Optional[ReservationRecord]:
        for record in self.load_all():
            if record.reservation_id == reservation_id:
                return record
        return None


class InMemoryReservationStore(ReservationStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self, records: Optional[Iterable[ReservationRecord]] = None):
        self._records: Dict[str, ReservationRecord] = {}
        self._lock = threading.Lock()
        for record in records or []:
            self._records[record.reservation_id] = record

    def load_all(self) -> List[ReservationRecord]:
        with self._lock:
            return [record.model_copy() for record in self._records.values()]

    def save(self, record: ReservationRecord) -> None:
        with self._lock:
            action = "updated" if record.reservation_id in self._records else "added"
            self._records[record.reservation_id] = record.model_copy()
        logger.info(f"Reservation {action} in memory: {record.reservation_id}")

    def delete(self, reservation_id: str) -> None:
        with self._lock:
            if reservation_id not in self._records:
                raise RecordNotFoundError(reservation_id)
            del self._records[reservation_id]
        logger.info(f"Reservation deleted from memory: {reservation_id}")


def parse_reservation_rows(rows: Iterable[Dict[str, str]]) -> List[ReservationRecord]:
    """
    Convert CSV dict rows into records, skipping rows that do not validate.

    Args:
        rows: Rows as produced by csv.DictReader

    Returns:
        List of valid reservation records
    """
    records = []
    for line_number, row in enumerate(rows, start=2):
        if not any((value or "").strip() for value in row.values()):
            continue
        try:
            records.append(ReservationRecord(**{
                header: (row.get(header) or "") for header in RESERVATION_CSV_HEADERS
            }))
        except ValidationError as e:
            logger.warning(f"Skipping invalid reservation row {line_number}: {e.error_count()} error(s)")
    return records


class CsvReservationStore(ReservationStore):
    """
    Reservations kept in a single CSV file.

    Every write rewrites the whole file (read-modify-write) under a
    process-local lock; other processes are not coordinated.
    """

    def __init__(self, csv_path: Union[str, Path]):
        self.csv_path = Path(csv_path)
        self._lock = threading.Lock()

    def _read(self) -> List[ReservationRecord]:
        if not self.csv_path.exists():
            return []
        try:
            with open(self.csv_path, 'r', encoding='utf-8', newline='') as f:
                return parse_reservation_rows(csv.DictReader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error reading reservations from {self.csv_path}: {e}")
            raise PersistenceError(f"Failed to read reservations: {e}") from e

    def _write(self, records: List[ReservationRecord]) -> None:
        tmp_path = self.csv_path.with_suffix(self.csv_path.suffix + ".tmp")
        try:
            self.csv_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8', newline='') as f:
                writer = csv.DictWriter(f, fieldnames=RESERVATION_CSV_HEADERS)
                writer.writeheader()
                for record in records:
                    writer.writerow(record.model_dump(mode="json"))
            os.replace(tmp_path, self.csv_path)
        except OSError as e:
            logger.error(f"Error writing reservations to {self.csv_path}: {e}")
            raise PersistenceError(f"Failed to save reservations: {e}") from e

    def load_all(self) -> List[ReservationRecord]:
        with self._lock:
            records = self._read()
        logger.debug(f"Loaded {len(records)} reservations from {self.csv_path}")
        return records

    def save(self, record: ReservationRecord) -> None:
        with self._lock:
            records = self._read()
            for index, existing in enumerate(records):
                if existing.reservation_id == record.reservation_id:
                    records[index] = record
                    break
            else:
                records.append(record)
            self._write(records)
        logger.info(f"Reservation saved to {self.csv_path.name}: {record.reservation_id}")

    def delete(self, reservation_id: str) -> None:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.reservation_id != reservation_id]
            if len(remaining) == len(records):
                raise RecordNotFoundError(reservation_id)
            self._write(remaining)
        logger.info(f"Reservation deleted from {self.csv_path.name}: {reservation_id}")
