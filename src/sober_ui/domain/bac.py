"""Domain models for BAC estimates."""

from dataclasses import dataclass
from typing import Literal

BACStatus = Literal[
    "Sober", "Minimal", "Light", "Mild", "Significant", "Severe", "Dangerous"
]


@dataclass(frozen=True)
class BACPoint:
    """A single point on a BAC timeline."""

    time: str
    bac: float
    is_over_bac: bool
    status: str


@dataclass(frozen=True)
class BACSummary:
    """Summary of a BAC timeline."""

    max_bac: float
    max_bac_time: str | None
    sober_since_time: str | None
    total_drinks: int
    drinking_since_time: str | None
    duration_over_bac: float
    estimated_sober_time: str | None


@dataclass(frozen=True)
class BACTimeline:
    """BAC timeline with its summary."""

    timeline: list[BACPoint]
    summary: BACSummary


@dataclass(frozen=True)
class CurrentBAC:
    """Current BAC snapshot."""

    current_bac: float
    bac_status: str
    is_sober: bool
    estimated_sober_time: str | None
    last_calculated: str | None
