"""Field validators applied before records are written.

Each validator returns the cleaned value or raises FieldValidationError
with a message suitable for the API response.
"""
from __future__ import annotations

import math
import re

NAME_MAX_LENGTH = 160

VALID_UNITS = frozenset({
    "m", "meter", "meters", "metre", "metres",
    "kg", "kilogram", "kilograms",
    "litre", "litres", "liter", "liters", "l",
    "nos", "numbers",
    "sqm", "sq.m", "square meter", "square meters",
    "rm", "running meter", "running meters",
    "unit", "units", "piece", "pieces", "pc", "pcs",
})

_NAME_RE = re.compile(r"^[A-Za-z0-9\s\-().,]+$")
_NON_DIGIT_RE = re.compile(r"\D")


class FieldValidationError(ValueError):
    """Raised when a submitted field is missing or malformed."""
    pass


def validate_name(name: str | None, field_name: str = "Name", max_length: int = NAME_MAX_LENGTH) -> str:
    """Letters, digits, spaces and ``- ( ) . ,`` only."""
    if not name or not isinstance(name, str):
        raise FieldValidationError(f"{field_name} is required")

    trimmed = name.strip()
    if not trimmed:
        raise FieldValidationError(f"{field_name} cannot be empty")
    if len(trimmed) > max_length:
        raise FieldValidationError(f"{field_name} must be {max_length} characters or less")
    if not _NAME_RE.match(trimmed):
        raise FieldValidationError(
            f"{field_name} can only contain letters, numbers, spaces, and limited punctuation (- ( ) . ,)"
        )
    return trimmed


def validate_phone(phone: str | None) -> str:
    """Exactly ten digits once separators are removed."""
    if not phone:
        raise FieldValidationError("Phone number is required")

    digits = _NON_DIGIT_RE.sub("", phone)
    if len(digits) != 10:
        raise FieldValidationError("Phone number must be exactly 10 digits")
    return digits


def validate_unit(unit: str | None) -> str:
    if not unit:
        raise FieldValidationError("Unit is required")

    normalized = unit.strip().lower()
    if normalized not in VALID_UNITS:
        raise FieldValidationError(f"Invalid unit. Allowed units: {', '.join(sorted(VALID_UNITS))}")
    return normalized


def validate_numeric(
    value: float | int | str | None,
    field_name: str = "Value",
    *,
    allow_zero: bool = False,
    minimum: float | None = None,
) -> float:
    """Parse ``value`` as a number and check its bounds."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise FieldValidationError(f"{field_name} must be a valid number") from None

    if not math.isfinite(number):
        raise FieldValidationError(f"{field_name} must be a valid number")
    if not allow_zero and number == 0:
        raise FieldValidationError(f"{field_name} cannot be zero")
    if minimum is not None and number < minimum:
        raise FieldValidationError(f"{field_name} must be at least {minimum}")
    return number


def validate_location(location: str | None, field_name: str = "Location") -> str:
    if not location or not isinstance(location, str):
        raise FieldValidationError(f"{field_name} is required")

    trimmed = location.strip()
    if not trimmed:
        raise FieldValidationError(f"{field_name} cannot be empty")
    return trimmed
