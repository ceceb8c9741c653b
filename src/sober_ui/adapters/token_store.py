"""Storage for the API bearer token."""

from dataclasses import dataclass, field
from typing import Protocol


class TokenStore(Protocol):
    """Interface for persisting the bearer token between requests."""

    def get(self) -> str | None:
        """Return the stored token, if any."""

    def set(self, token: str) -> None:
        """Store a token."""

    def clear(self) -> None:
        """Remove the stored token."""


@dataclass
class InMemoryTokenStore(TokenStore):
    """Token store keeping tokens under a configured key name."""

    key: str
    _values: dict[str, str] = field(default_factory=dict)

    def get(self) -> str | None:
        """Return the token stored under the key."""
        return self._values.get(self.key)

    def set(self, token: str) -> None:
        """Store a token under the key."""
        self._values[self.key] = token

    def clear(self) -> None:
        """Remove the token stored under the key."""
        self._values.pop(self.key, None)
