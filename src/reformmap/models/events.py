"""Currency reform event models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

KEY_SEPARATOR = ":"

# Years are stored as signed 64-bit integers.
MIN_YEAR = -(2**63)
MAX_YEAR = 2**63 - 1


class ReformType(str, Enum):
    """Reform categories an editor may attach to a country and year."""

    NEW_CURRENCY = "New Currency"
    REDENOMINATION = "Redenomination"
    DECIMALIZATION = "Decimalization"
    DEVALUATION = "Devaluation"
    REVALUATION = "Revaluation"
    JOIN_EURO = "Join Euro"
    LEAVE_EURO = "Leave Euro"
    DOLLARIZATION = "Dollarization"
    DE_DOLLARIZATION = "De-Dollarization"
    PEG_CHANGE = "Peg Change"
    CURRENCY_BOARD = "Currency Board"
    MONETARY_UNION = "Monetary Union"
    EXIT_UNION = "Exit Union"
    GOLD_STANDARD = "Gold Standard"
    ABANDON_GOLD = "Abandon Gold"
    BANKNOTES_REDESIGN = "Banknotes Redesign"
    EXCHANGE_REGIME_CHANGE = "Exchange Regime Change"
    CRYPTOCURRENCY = "Cryptocurrency"
    INSTITUTION_REFORM = "Institution Reform"
    OTHER = "Other"


class ReformEvent(BaseModel):
    """One reform event; at most one exists per country and year.

    ``type`` stays a plain string so records written under an older set of
    categories still load and render with the default colour.
    """

    model_config = ConfigDict(populate_by_name=True)

    country_code: str = Field(alias="countryCode", min_length=1)
    year: int
    type: str
    title: str = ""
    desc: str = ""
    file_url: str = Field(default="", alias="fileUrl")
    saved_by: str | None = Field(default=None, alias="savedBy")
    timestamp: datetime | None = None

    @property
    def key(self) -> str:
        return event_key(self.country_code, self.year)


def event_key(country_code: str, year: int) -> str:
    """Serialize the composite key as ``<countryCode>:<year>``."""
    return f"{country_code}{KEY_SEPARATOR}{year}"


def parse_event_key(key: str) -> tuple[str, int]:
    """Split a serialized key back into ``(country_code, year)``."""
    country_code, separator, year = key.rpartition(KEY_SEPARATOR)
    if not separator or not country_code:
        msg = f"Malformed event key: {key!r}"
        raise ValueError(msg)
    return country_code, int(year)


def normalize_country_code(country_code: str) -> str:
    return country_code.strip().upper()


def format_year(year: int) -> str:
    """Display form of a signed year, e.g. ``-44`` becomes ``44 BCE``."""
    if year < 0:
        return f"{-year} BCE"
    return str(year)
