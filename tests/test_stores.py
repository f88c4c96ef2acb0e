"""Reservation store contract tests, plus CSV specifics."""
import pytest

from database.sql_store import SqlReservationStore
from database.stores import (
    RESERVATION_CSV_HEADERS,
    CsvReservationStore,
    InMemoryReservationStore,
)
from services.errors import PersistenceError
from tests.contracts.reservation_store_contract import ReservationStoreContract, reservation


class TestInMemoryReservationStore(ReservationStoreContract):

    def create_store(self):
        return InMemoryReservationStore()


class TestCsvReservationStore(ReservationStoreContract):

    @pytest.fixture(autouse=True)
    def _csv_path(self, tmp_path):
        self.csv_path = tmp_path / "data" / "reservations.csv"

    def create_store(self):
        return CsvReservationStore(self.csv_path)

    def test_writes_header_and_rows(self):
        """Test the file keeps the wire column order."""
        store = self.create_store()
        store.save(reservation())

        lines = self.csv_path.read_text(encoding="utf-8").splitlines()

        assert lines[0] == ",".join(RESERVATION_CSV_HEADERS)
        assert lines[1] == "R1,U001,A1,2025-10-15,AM,2025-10-10T09:00:00+07:00"

    def test_invalid_rows_skipped(self):
        """Test rows that fail validation are skipped, not fatal."""
        self.csv_path.parent.mkdir(parents=True)
        self.csv_path.write_text(
            "reservation_id,user_id,table_id,date,slot_type,created_at\n"
            "R1,U001,A1,2025-10-15,AM,2025-10-10T09:00:00\n"
            "R2,U002,A2,2025-13-45,PM,2025-10-10T09:00:00\n"
            "R3,U003,A3,2025-10-15,EVENING,2025-10-10T09:00:00\n"
            ",,,,,\n",
            encoding="utf-8",
        )

        records = self.create_store().load_all()

        assert [r.reservation_id for r in records] == ["R1"]

    def test_no_temp_file_left(self):
        """Test the rewrite replaces the file atomically."""
        self.create_store().save(reservation())

        assert [p.name for p in self.csv_path.parent.iterdir()] == ["reservations.csv"]

    def test_unreadable_path_raises_persistence_error(self, tmp_path):
        """Test I/O errors surface as PersistenceError."""
        store = CsvReservationStore(tmp_path)

        with pytest.raises(PersistenceError):
            store.load_all()

    def test_undecodable_file_raises_persistence_error(self):
        """Test a file that is not valid UTF-8 surfaces as PersistenceError."""
        self.csv_path.parent.mkdir(parents=True)
        self.csv_path.write_bytes(b"reservation_id,user_id\nR1,U\xff1\n")

        with pytest.raises(PersistenceError):
            self.create_store().load_all()


class TestSqlReservationStore(ReservationStoreContract):

    @pytest.fixture(autouse=True)
    def _session_factory(self, session_factory):
        self.session_factory = session_factory

    def create_store(self):
        return SqlReservationStore(self.session_factory)
