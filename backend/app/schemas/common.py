# app/schemas/common.py
"""
Reusable field constraints for request schemas.

Each helper returns a pydantic AfterValidator that raises ValueError with a
client-facing message; the central error formatter reports it per field.
"""
import re
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr

PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
SKU_RULE = re.compile(r"^[A-Za-z0-9_-]+$")
SLUG_RULE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def text(min_length: int, max_length: int, message: str) -> AfterValidator:
    """Strip surrounding whitespace, then enforce length bounds."""

    def check(value: str) -> str:
        value = value.strip()
        if not min_length <= len(value) <= max_length:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def matches(rule: re.Pattern, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not rule.match(value):
            raise ValueError(message)
        return value

    return AfterValidator(check)


def non_negative(message: str) -> AfterValidator:
    def check(value):
        if value < 0:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def at_most(limit: float, message: str) -> AfterValidator:
    def check(value):
        if value > limit:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _password(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if not PASSWORD_RULE.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


# ===== Shared annotated types =====
PersonName = Annotated[str, text(2, 100, "Name must be between 2 and 100 characters")]
Email = Annotated[EmailStr, AfterValidator(_normalize_email)]
Password = Annotated[str, AfterValidator(_password)]


def slug_type(max_length: int):
    return Annotated[
        str,
        text(2, max_length, f"Slug must be between 2 and {max_length} characters"),
        matches(SLUG_RULE, "Slug can only contain lowercase letters, numbers, and single hyphens"),
    ]


class RequestModel(BaseModel):
    """Base for request bodies: unknown keys are ignored, camelCase on the wire."""

    model_config = ConfigDict(extra="ignore")

    def patch(self) -> dict[str, Any]:
        """Only the fields the client actually sent (explicit nulls included)."""
        return self.model_dump(exclude_unset=True)
