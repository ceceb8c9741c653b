"""Toast notifications returned to the user after form actions."""

from dataclasses import dataclass
from typing import Literal

NotificationLevel = Literal["success", "error"]


@dataclass(frozen=True)
class Notification:
    """A short message displayed to the user."""

    level: NotificationLevel
    title: str
    description: str | None = None
    duration_ms: int = 3000


def success(
    title: str, description: str | None = None, duration_ms: int = 3000
) -> Notification:
    """Build a success notification."""
    return Notification("success", title, description, duration_ms)


def error(
    title: str, description: str | None = None, duration_ms: int = 5000
) -> Notification:
    """Build an error notification."""
    return Notification("error", title, description, duration_ms)
