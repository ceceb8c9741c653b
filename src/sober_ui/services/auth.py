"""Login, signup and logout form actions."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from sober_ui.domain import notifications
from sober_ui.domain.errors import ApiError
from sober_ui.domain.notifications import Notification

AFTER_SIGNUP_ROUTE = "/drinks/log"
AFTER_LOGIN_ROUTE = "/drinks/log"

logger = logging.getLogger(__name__)


class AuthClient(Protocol):
    """API operations used by the auth forms."""

    async def login(self, email: str, password: str) -> str:
        """Authenticate and return a bearer token."""

    async def signup(self, email: str, password: str) -> str:
        """Create an account."""


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an auth form submission."""

    notification: Notification
    token: str | None = None
    redirect_to: str | None = None


@dataclass
class AuthService:
    """Application service behind the login and signup forms."""

    client: AuthClient

    async def login(self, email: str, password: str) -> AuthResult:
        """Log in and return the issued token on success."""
        try:
            token = await self.client.login(email, password)
        except (ApiError, httpx.HTTPError):
            logger.exception("Login failed")
            return AuthResult(
                notification=notifications.error(
                    "Unable to log in",
                    "Please check your email and password and try again.",
                )
            )
        if not token:
            logger.warning("Login response did not include a token")
            return AuthResult(notification=notifications.error("Unable to log in"))
        return AuthResult(
            notification=notifications.success("Welcome back!"),
            token=token,
            redirect_to=AFTER_LOGIN_ROUTE,
        )

    async def signup(self, email: str, password: str) -> AuthResult:
        """Create an account."""
        try:
            await self.client.signup(email, password)
        except (ApiError, httpx.HTTPError):
            logger.exception("Signup failed")
            return AuthResult(
                notification=notifications.error(
                    "Unable to create account",
                    "This email might already be registered. "
                    "Please try a different email or login instead.",
                )
            )
        return AuthResult(
            notification=notifications.success(
                "Welcome to Sōber!",
                "Your account has been created successfully. "
                "Redirecting you to get started...",
                duration_ms=4000,
            ),
            redirect_to=AFTER_SIGNUP_ROUTE,
        )
