"""Domain models for drink templates and drink logs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DrinkTemplate:
    """Reusable drink preset selectable when logging a drink."""

    id: int
    name: str
    type: str
    size_value: float
    size_unit: str
    abv: float


@dataclass(frozen=True)
class DrinkLog:
    """A logged drink as returned by the backend.

    ``logged_at`` is kept verbatim and may not parse as a timestamp;
    ``standard_drinks`` is kept as received and may be non-numeric.
    """

    id: int
    name: str
    type: str
    size_value: float
    size_unit: str
    abv: float
    logged_at: str
    standard_drinks: object = None


@dataclass(frozen=True)
class DailyStats:
    """Per-day summary derived from the drink logs in memory."""

    date: str
    drinks: list[DrinkLog]
    drink_count: int
    standard_drinks: float


@dataclass(frozen=True)
class ParsedDrink:
    """Result of parsing a free-text drink description."""

    drink_template: DrinkTemplate
    confidence: float
