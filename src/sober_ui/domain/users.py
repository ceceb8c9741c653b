"""Domain models for users."""

from dataclasses import dataclass
from typing import Literal

Gender = Literal["male", "female", "unknown"]


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated user."""

    email: str
    user_id: int


@dataclass(frozen=True)
class UserProfile:
    """Profile values used for BAC estimates."""

    id: int
    email: str
    gender: str
    weight_kg: float
    created_at: str | None = None
    updated_at: str | None = None
