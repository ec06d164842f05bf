"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class DrawType(str, Enum):
    """Independent raffle campaigns, each with its own pool and ledger."""
    DISCOVERY_70 = "discovery-70"
    DISCOVERY_80 = "discovery-80"

    @property
    def label(self) -> str:
        return DRAW_TYPE_LABELS[self]

    @classmethod
    def parse(cls, value: "str | DrawType") -> "DrawType":
        """Resolve a raw campaign identifier.

        Raises:
            ValueError: If the identifier is not a known campaign
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown draw type: {value!r}") from None


DRAW_TYPE_LABELS = {
    DrawType.DISCOVERY_70: "70% Discovery",
    DrawType.DISCOVERY_80: "80% Discovery",
}

# Bundled datasets; DATA_FOLDER overrides
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

DATASET_FILES = {
    DrawType.DISCOVERY_70: "contestants-70.json",
    DrawType.DISCOVERY_80: "contestants-80.json",
}


class Department(str, Enum):
    """Departments contestants belong to."""
    INTERNATIONAL_MESSAGING = "International Messaging"
    INDIA_MESSAGING = "India Messaging"
    APAC = "APAC"

    @property
    def short_name(self) -> str:
        return self.value.replace(" Messaging", "")


# Raffle constants
class RaffleDefaults:
    """Draw configuration."""
    MIN_WINNERS_PER_DRAW = 1
    MAX_WINNERS_PER_DRAW = 50
    RECENT_WINNERS_LIMIT = 5


# Cache constants
class CacheDefaults:
    """Ledger read cache configuration."""
    LEDGER_TTL = 30  # seconds
    LEDGER_SIZE = 64


# Database constants
class DatabaseDefaults:
    """Default database configuration."""
    POOL_SIZE = 5
    BUSY_TIMEOUT = 5000  # milliseconds


# Remote store constants
class RemoteStoreDefaults:
    """Hosted winner table configuration."""
    TABLE = "winners"
    TIMEOUT = 10  # seconds
    REST_PREFIX = "/rest/v1"


# Export constants
class ExportDefaults:
    """CSV export configuration."""
    HEADERS = ("Name", "Department", "Supervisor", "Tickets", "Draw Type", "Draw Date")
    FILENAME_PREFIX = "contest-winners"
    DATE_FORMAT = "%Y-%m-%d"

CAMPAIGN_DESCRIPTIONS = {
    DrawType.DISCOVERY_70: "First discovery raffle draw",
    DrawType.DISCOVERY_80: "Second discovery raffle draw",
}
