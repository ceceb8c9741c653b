"""Tests for the drink log form actions."""

import asyncio
from datetime import UTC

import pytest

from sober_ui.domain.drink_logs import DrinkTemplate, ParsedDrink
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.services.drink_entry import (
    DrinkEntryService,
    DrinkFormValues,
    compute_drink_diff,
    format_drink_diff,
)
from sober_ui.services.drink_logs import DrinkLogStore
from tests.conftest import FakeSoberApiClient, make_log, make_logs


def _service(client: FakeSoberApiClient) -> DrinkEntryService:
    return DrinkEntryService(client=client, store=DrinkLogStore(source=client, tz=UTC))


def test_create_from_template_uses_form_values_and_refreshes() -> None:
    client = FakeSoberApiClient(drink_logs=make_logs(2))
    service = _service(client)

    notification = asyncio.run(
        service.create_from_template(
            template_id=2, size_value=25, size_unit="cl", abv_percent=12.5
        )
    )

    assert client.created == [
        {
            "name": "Red wine",
            "type": "wine",
            "size_value": 25,
            "size_unit": "cl",
            "abv": 0.125,
        }
    ]
    assert notification.level == "success"
    assert notification.title == "Added Red wine to your log"
    assert notification.description == "25cl at 12.5% ABV"
    assert len(service.store.drink_logs) == 2


def test_create_from_unknown_template_fails() -> None:
    client = FakeSoberApiClient()

    notification = asyncio.run(
        _service(client).create_from_template(99, 33, "cl", 5)
    )

    assert notification.level == "error"
    assert notification.title == "Unable to log drink"
    assert client.created == []


def test_create_from_text_falls_back_to_description() -> None:
    client = FakeSoberApiClient()
    service = _service(client)

    asyncio.run(service.create_from_text("two pints of cider", None, 56.8, "cl", 4.5))
    asyncio.run(service.create_from_text("", None, 33, "cl", 5))

    assert client.created[0]["name"] == "two pints of cider"
    assert client.created[0]["type"] == "custom"
    assert client.created[0]["abv"] == pytest.approx(0.045)
    assert client.created[1]["name"] == "Custom Drink"


def test_create_failure_returns_error_without_refresh() -> None:
    client = FakeSoberApiClient(
        error=ApiError(code=1001, type="validation", message="bad abv")
    )
    service = _service(client)

    notification = asyncio.run(service.create_from_text("gin", "Gin", 4, "cl", 40))

    assert notification.level == "error"
    assert notification.description == (
        "Something went wrong. Please check your input and try again."
    )
    assert client.page_requests == []


def test_parse_free_text_prefills_form() -> None:
    client = FakeSoberApiClient(
        parsed=ParsedDrink(
            drink_template=DrinkTemplate(
                id=0,
                name="Lager",
                type="beer",
                size_value=56.8,
                size_unit="cl",
                abv=0.05,
            ),
            confidence=0.8,
        )
    )

    values, notification = asyncio.run(
        _service(client).parse_free_text("a pint of lager")
    )

    assert values == DrinkFormValues(
        name="Lager", size_value=56.8, size_unit="cl", abv_percent=5.0
    )
    assert notification is not None
    assert notification.title == "Drink details parsed successfully"


def test_parse_free_text_failure() -> None:
    client = FakeSoberApiClient(parsed=None)

    values, notification = asyncio.run(_service(client).parse_free_text("???"))

    assert values is None
    assert notification is not None
    assert notification.title == "Could not parse drink description"
    assert notification.duration_ms == 3000


def test_parse_blank_text_is_ignored() -> None:
    values, notification = asyncio.run(
        _service(FakeSoberApiClient()).parse_free_text("   ")
    )

    assert values is None
    assert notification is None


def test_update_reports_changes() -> None:
    existing = make_log(7, name="Beer")
    client = FakeSoberApiClient(drink_logs=[existing])
    service = _service(client)

    notification = asyncio.run(
        service.update(
            existing,
            DrinkFormValues(name="IPA", size_value=50, size_unit="cl", abv_percent=6.5),
        )
    )

    assert client.updated == [
        {
            "id": 7,
            "name": "IPA",
            "type": "beer",
            "size_value": 50,
            "size_unit": "cl",
            "abv": 0.065,
        }
    ]
    assert notification.title == "Updated IPA"
    assert notification.description == (
        'Changed name from "Beer" to "IPA", size from 33 to 50cl '
        "and ABV from 5.0% to 6.5%"
    )
    assert client.page_requests


def test_drink_diff_without_changes() -> None:
    existing = make_log(1)
    values = DrinkFormValues(
        name=existing.name,
        size_value=existing.size_value,
        size_unit=existing.size_unit,
        abv_percent=existing.abv * 100,
    )

    assert format_drink_diff(compute_drink_diff(existing, values)) == (
        "No changes made"
    )


def test_drink_diff_single_change() -> None:
    existing = make_log(1)
    values = DrinkFormValues(
        name=existing.name,
        size_value=existing.size_value,
        size_unit="ml",
        abv_percent=5,
    )

    assert format_drink_diff(compute_drink_diff(existing, values)) == (
        "Changed unit from cl to ml"
    )


def test_relog_copies_drink() -> None:
    drink = make_log(3, name="Stout")
    client = FakeSoberApiClient()

    notification = asyncio.run(_service(client).relog(drink))

    assert client.created == [
        {
            "name": "Stout",
            "type": "beer",
            "size_value": 33,
            "size_unit": "cl",
            "abv": 0.05,
        }
    ]
    assert notification.title == "Drink logged again"


def test_delete_refreshes_store() -> None:
    client = FakeSoberApiClient(drink_logs=make_logs(3))
    service = _service(client)

    notification = asyncio.run(service.delete(2))

    assert client.deleted == [2]
    assert notification.title == "Drink log deleted"
    assert len(service.store.drink_logs) == 3


def test_delete_failure() -> None:
    client = FakeSoberApiClient(
        error=ApiError(code=404, type="entity", message="not found")
    )

    notification = asyncio.run(_service(client).delete(5))

    assert notification.level == "error"
    assert notification.title == "Failed to delete drink log"


def test_templates_degrade_to_empty_list() -> None:
    client = FakeSoberApiClient(
        error=ApiError(code=500, type="database", message="down")
    )

    assert asyncio.run(_service(client).list_templates()) == []


def test_unauthorized_is_not_swallowed() -> None:
    client = FakeSoberApiClient(unauthorized=True)

    with pytest.raises(UnauthorizedError):
        asyncio.run(_service(client).delete(1))
