"""
Office seating configuration: tables, zones, and the seats they hold.
Seat IDs are a table letter followed by a seat number (e.g. "A1", "P4").
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)

SEAT_ID_PATTERN = re.compile(r'^([A-Z])([1-9]\d*)$')


@dataclass
class Zone:
    """A named group of tables rendered together on the map."""
    name: str
    tables: List[str]
    color: str


@dataclass
class SeatingConfig:
    """Complete seating layout."""

    number_of_tables: int = 21
    seats_per_table: int = 8  # Default when a table has no override
    tables_per_row: int = 3
    table_letters: List[str] = field(
        default_factory=lambda: [chr(ord('A') + i) for i in range(21)]
    )

    # Per-table seat counts that differ from seats_per_table
    seat_overrides: Dict[str, int] = field(default_factory=dict)

    zones: Dict[str, Zone] = field(default_factory=dict)

    def seats_for_table(self, table_letter: str) -> int:
        """Get the number of seats at a table."""
        return self.seat_overrides.get(table_letter, self.seats_per_table)

    @property
    def tables(self) -> List[str]:
        """Table letters in use."""
        return self.table_letters[:self.number_of_tables]

    def zone_for_table(self, table_letter: str) -> Optional[Zone]:
        """Get the zone a table belongs to, or None."""
        for zone in self.zones.values():
            if table_letter in zone.tables:
                return zone
        return None


def generate_all_seats(config: SeatingConfig) -> List[str]:
    """
    Generate every seat ID of the layout.

    Args:
        config: Seating configuration

    Returns:
        Seat IDs ordered by table, then seat number
    """
    all_seats = []
    for table_letter in config.tables:
        for seat_number in range(1, config.seats_for_table(table_letter) + 1):
            all_seats.append(f"{table_letter}{seat_number}")
    return all_seats


def validate_seating_config(config: SeatingConfig) -> bool:
    """Check a seating configuration for internal consistency."""
    if config.number_of_tables <= 0 or config.seats_per_table <= 0 or config.tables_per_row <= 0:
        logger.error("Seating config: All numeric values must be positive")
        return False

    if len(config.table_letters) < config.number_of_tables:
        logger.error("Seating config: Not enough table letters for the number of tables")
        return False

    if any(count <= 0 for count in config.seat_overrides.values()):
        logger.error("Seating config: Seat overrides must be positive")
        return False

    return True


def table_letter(seat_id: str) -> str:
    """Get the table letter of a seat ID."""
    return seat_id[:1]


def is_known_seat(seat_id: str, config: Optional[SeatingConfig] = None) -> bool:
    """Check whether a seat ID exists in the layout."""
    config = config or get_seating_config()
    match = SEAT_ID_PATTERN.match(seat_id)
    if not match:
        return False
    letter, number = match.group(1), int(match.group(2))
    if letter not in config.tables:
        return False
    return 1 <= number <= config.seats_for_table(letter)


def get_default_seating_config() -> SeatingConfig:
    """Get the default office layout (21 tables in two zones)."""
    seat_overrides = {}

    # Zone A: middle column of the 3x3 grid has 6 seats
    for letter in ['B', 'E', 'H']:
        seat_overrides[letter] = 6
    # Zone B: first row has 6 seats, second row has 4
    for letter in ['J', 'K', 'L', 'M', 'N', 'O']:
        seat_overrides[letter] = 6
    for letter in ['P', 'Q', 'R', 'S', 'T', 'U']:
        seat_overrides[letter] = 4

    zones = {
        'zone1': Zone(
            name='Zone A (Tables A-I)',
            tables=['A', 'B', 'C', 'D', 'E', 'F', 'G', 'H', 'I'],
            color='#e3f2fd',
        ),
        'zone2': Zone(
            name='Zone B (Tables J-U)',
            tables=['J', 'K', 'L', 'M', 'N', 'O', 'P', 'Q', 'R', 'S', 'T', 'U'],
            color='#f3e5f5',
        ),
    }

    return SeatingConfig(
        number_of_tables=21,
        seats_per_table=8,
        tables_per_row=3,
        seat_overrides=seat_overrides,
        zones=zones,
    )


# Singleton instance
_seating_config_instance: Optional[SeatingConfig] = None


def get_seating_config() -> SeatingConfig:
    """Get the seating configuration singleton."""
    global _seating_config_instance
    if _seating_config_instance is None:
        _seating_config_instance = get_default_seating_config()
    return _seating_config_instance
