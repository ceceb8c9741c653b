"""User profile form."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from sober_ui.domain import notifications
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.domain.notifications import Notification
from sober_ui.domain.users import UserProfile

logger = logging.getLogger(__name__)


class ProfileClient(Protocol):
    """API operations used by the profile form."""

    async def get_user_profile(self) -> UserProfile:
        """Return the user's profile."""

    async def update_user_profile(self, gender: str, weight_kg: float) -> None:
        """Update the user's gender and weight."""


@dataclass
class ProfileService:
    """Application service for the user profile."""

    client: ProfileClient

    async def get_profile(self) -> UserProfile | None:
        """Return the profile, or None when it can't be loaded."""
        try:
            return await self.client.get_user_profile()
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch user profile")
            return None

    async def update_profile(self, gender: str, weight_kg: float) -> Notification:
        """Save the user's gender and weight."""
        try:
            await self.client.update_user_profile(gender, weight_kg)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to update user profile")
            return notifications.error("Failed to update profile")
        return notifications.success("Profile updated successfully")
