"""Pydantic models for submitted forms."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from sober_ui.domain.drink_logs import DrinkLog

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

SizeUnit = Literal["cl", "ml"]
GenderChoice = Literal["male", "female", "unknown"]


class LoginForm(BaseModel):
    """Login form payload."""

    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)


class SignupForm(BaseModel):
    """Signup form payload."""

    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8)
    password_confirmation: str = Field(min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupForm":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords don't match")
        return self


class DrinkLogCreateForm(BaseModel):
    """New drink log, from a template or a free-text description.

    ``abv`` is a percentage.
    """

    drink_template_id: int | None = None
    free_text: str | None = None
    name: str | None = None
    abv: float = Field(ge=0.01, le=100)
    size_value: float = Field(ge=1)
    size_unit: SizeUnit = "cl"

    @model_validator(mode="after")
    def template_or_free_text(self) -> "DrinkLogCreateForm":
        if self.drink_template_id is None and not (self.free_text or "").strip():
            raise ValueError("Please either select a drink or describe what you had")
        return self


class DrinkLogSnapshot(BaseModel):
    """Drink log as displayed to the user; ``abv`` is a fraction."""

    id: int
    name: str
    type: str = ""
    size_value: float
    size_unit: str
    abv: float = Field(ge=0, le=1)
    logged_at: str = ""

    def to_drink_log(self) -> DrinkLog:
        return DrinkLog(
            id=self.id,
            name=self.name,
            type=self.type,
            size_value=self.size_value,
            size_unit=self.size_unit,
            abv=self.abv,
            logged_at=self.logged_at,
        )


class DrinkLogEditForm(BaseModel):
    """Edited drink log; ``abv`` is a percentage.

    ``original`` carries the drink as it was shown before editing.
    """

    name: str = Field(min_length=1)
    abv: float = Field(ge=0.01, le=100)
    size_value: float = Field(ge=1)
    size_unit: SizeUnit
    original: DrinkLogSnapshot | None = None


class ParseDrinkForm(BaseModel):
    """Free-text drink description."""

    text: str = Field(min_length=1)


class ProfileForm(BaseModel):
    """Profile form payload."""

    gender: GenderChoice
    weight_kg: float = Field(ge=30, le=300)
