"""Drink log form actions: create, edit, re-log, delete and free-text parsing."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol

import httpx

from sober_ui.domain import notifications
from sober_ui.domain.drink_logs import DrinkLog, DrinkTemplate, ParsedDrink
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.domain.notifications import Notification
from sober_ui.services.drink_logs import DrinkLogStore

CUSTOM_DRINK_TYPE = "custom"
CUSTOM_DRINK_NAME = "Custom Drink"

logger = logging.getLogger(__name__)


class DrinkEntryClient(Protocol):
    """API operations used by the drink log forms."""

    async def get_drink_templates(self) -> list[DrinkTemplate]:
        """Return the available drink templates."""

    async def create_drink_log(self, payload: dict[str, object]) -> int:
        """Create a drink log and return its id."""

    async def update_drink_log(self, payload: dict[str, object]) -> None:
        """Update a drink log."""

    async def delete_drink_log(self, drink_log_id: int) -> int:
        """Delete a drink log."""

    async def parse_drink_log(self, text: str) -> ParsedDrink:
        """Parse a free-text drink description."""


@dataclass(frozen=True)
class DrinkFormValues:
    """Values shown in the drink form; ABV is a percentage."""

    name: str
    size_value: float
    size_unit: str
    abv_percent: float


@dataclass(frozen=True)
class ValueChange:
    """Before and after values of a single edited field."""

    before: object
    after: object


@dataclass(frozen=True)
class DrinkDiff:
    """Fields changed by an edit; ABV values are percentages."""

    name: ValueChange | None = None
    size: ValueChange | None = None
    unit: ValueChange | None = None
    abv: ValueChange | None = None
    size_unit: str = ""


@dataclass
class DrinkEntryService:
    """Application service behind the drink log forms."""

    client: DrinkEntryClient
    store: DrinkLogStore

    async def list_templates(self) -> list[DrinkTemplate]:
        """Return drink templates, or an empty list if they can't be loaded."""
        try:
            return await self.client.get_drink_templates()
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch drink templates")
            return []

    async def parse_free_text(
        self, text: str
    ) -> tuple[DrinkFormValues | None, Notification | None]:
        """Parse a drink description into pre-filled form values."""
        if not text.strip():
            return None, None
        try:
            parsed = await self.client.parse_drink_log(text)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to parse drink")
            return None, notifications.error(
                "Could not parse drink description",
                "Please try describing your drink differently",
                duration_ms=3000,
            )
        template = parsed.drink_template
        values = DrinkFormValues(
            name=template.name,
            size_value=template.size_value,
            size_unit=template.size_unit,
            abv_percent=template.abv * 100,
        )
        return values, notifications.success(
            "Drink details parsed successfully",
            "Please review and adjust if needed",
        )

    async def create_from_template(
        self, template_id: int, size_value: float, size_unit: str, abv_percent: float
    ) -> Notification:
        """Log a drink based on a template, with the form's size and ABV."""
        templates = await self.list_templates()
        template = next((item for item in templates if item.id == template_id), None)
        if template is None:
            logger.warning(
                "Drink template not found", extra={"template_id": template_id}
            )
            return _create_failed()
        payload: dict[str, object] = {
            "name": template.name,
            "type": template.type,
            "size_value": size_value,
            "size_unit": size_unit,
            "abv": abv_percent / 100,
        }
        return await self._create(payload)

    async def create_from_text(
        self,
        free_text: str,
        name: str | None,
        size_value: float,
        size_unit: str,
        abv_percent: float,
    ) -> Notification:
        """Log a drink described in free text."""
        payload: dict[str, object] = {
            "name": name or free_text or CUSTOM_DRINK_NAME,
            "type": CUSTOM_DRINK_TYPE,
            "size_value": size_value,
            "size_unit": size_unit,
            "abv": abv_percent / 100,
        }
        return await self._create(payload)

    async def update(
        self, existing: DrinkLog, values: DrinkFormValues
    ) -> Notification:
        """Save edits to an existing drink log."""
        payload: dict[str, object] = {
            "id": existing.id,
            "name": values.name,
            "type": existing.type or CUSTOM_DRINK_TYPE,
            "size_value": values.size_value,
            "size_unit": values.size_unit,
            "abv": values.abv_percent / 100,
        }
        try:
            await self.client.update_drink_log(payload)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to update drink", extra={"id": existing.id})
            return notifications.error(
                "Unable to update drink",
                "Something went wrong. Please check your input and try again.",
            )
        await self.store.refresh_drink_logs()
        diff = compute_drink_diff(existing, values)
        return notifications.success(
            f"Updated {values.name}", format_drink_diff(diff)
        )

    async def relog(self, drink: DrinkLog) -> Notification:
        """Log the same drink again, timestamped now."""
        payload: dict[str, object] = {
            "name": drink.name,
            "type": drink.type,
            "size_value": drink.size_value,
            "size_unit": drink.size_unit,
            "abv": drink.abv,
        }
        try:
            await self.client.create_drink_log(payload)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to re-log drink", extra={"id": drink.id})
            return notifications.error("Failed to log drink again")
        await self.store.refresh_drink_logs()
        return notifications.success("Drink logged again")

    async def delete(self, drink_log_id: int) -> Notification:
        """Delete a drink log."""
        try:
            await self.client.delete_drink_log(drink_log_id)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Error deleting drink log", extra={"id": drink_log_id})
            return notifications.error("Failed to delete drink log")
        await self.store.refresh_drink_logs()
        return notifications.success("Drink log deleted")

    async def _create(self, payload: dict[str, object]) -> Notification:
        try:
            await self.client.create_drink_log(payload)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to create drink")
            return _create_failed()
        await self.store.refresh_drink_logs()
        abv = float(payload["abv"]) * 100  # type: ignore[arg-type]
        return notifications.success(
            f"Added {payload['name']} to your log",
            f"{_number(payload['size_value'])}{payload['size_unit']} "
            f"at {abv:.1f}% ABV",
        )


def compute_drink_diff(before: DrinkLog, after: DrinkFormValues) -> DrinkDiff:
    """Return the fields that differ between a log and its edited values."""
    after_abv = after.abv_percent / 100
    return DrinkDiff(
        name=(
            ValueChange(before.name, after.name) if before.name != after.name else None
        ),
        size=(
            ValueChange(before.size_value, after.size_value)
            if before.size_value != after.size_value
            else None
        ),
        unit=(
            ValueChange(before.size_unit, after.size_unit)
            if before.size_unit != after.size_unit
            else None
        ),
        abv=(
            ValueChange(before.abv * 100, after.abv_percent)
            if not math.isclose(before.abv, after_abv, abs_tol=1e-9)
            else None
        ),
        size_unit=after.size_unit,
    )


def format_drink_diff(diff: DrinkDiff) -> str:
    """Describe a drink diff as a sentence."""
    changes: list[str] = []
    if diff.name:
        changes.append(f'name from "{diff.name.before}" to "{diff.name.after}"')
    if diff.size:
        changes.append(
            f"size from {_number(diff.size.before)} to "
            f"{_number(diff.size.after)}{diff.size_unit}"
        )
    if diff.unit:
        changes.append(f"unit from {diff.unit.before} to {diff.unit.after}")
    if diff.abv:
        changes.append(
            f"ABV from {float(diff.abv.before):.1f}% "  # type: ignore[arg-type]
            f"to {float(diff.abv.after):.1f}%"  # type: ignore[arg-type]
        )

    if not changes:
        return "No changes made"
    if len(changes) == 1:
        return f"Changed {changes[0]}"
    return f"Changed {', '.join(changes[:-1])} and {changes[-1]}"


def _create_failed() -> Notification:
    return notifications.error(
        "Unable to log drink",
        "Something went wrong. Please check your input and try again.",
    )


def _number(value: object) -> str:
    """Format a number without a trailing .0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
