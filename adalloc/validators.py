"""
Input validation for values entering the data tree.

All validators raise ValidationError on invalid input. The metric functions
themselves never validate; checks happen here, at the entry boundary.
"""
import math
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional, Type, TypeVar

from adalloc.exceptions import ValidationError
from adalloc.observability import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)

MAX_NAME_LENGTH = 255


def validate_non_negative(value, field: str) -> float:
    """
    Validate a money amount or ratio.

    Args:
        value: Number to validate
        field: Field name for error messages

    Returns:
        Value as float

    Raises:
        ValidationError: If value is not a finite number >= 0
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "Must be a number", value)

    if math.isnan(value) or math.isinf(value):
        raise ValidationError(field, "Must be a finite number", value)

    if value < 0:
        raise ValidationError(field, "Must not be negative", value)

    return float(value)


def validate_count(value, field: str) -> int:
    """Validate an impressions/clicks style count (integer >= 0)."""
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        else:
            raise ValidationError(field, "Must be a whole number", value)

    if value < 0:
        raise ValidationError(field, "Must not be negative", value)

    return value


def validate_clicks_impressions(clicks: int, impressions: int) -> None:
    """
    clicks <= impressions is a convention, not a rule.

    Violations are accepted and logged.
    """
    if clicks > impressions:
        logger.warning(
            "Clicks exceed impressions",
            extra={"clicks": clicks, "impressions": impressions},
        )


def validate_name(value: Optional[str], field: str = "name") -> str:
    """
    Validate a display name.

    Returns:
        Stripped name

    Raises:
        ValidationError: If name is missing, not a string or too long
    """
    if value is None or value == "":
        raise ValidationError(field, "Name is required")

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    value = value.strip()
    if not value:
        raise ValidationError(field, "Name is required")

    if len(value) > MAX_NAME_LENGTH:
        raise ValidationError(
            field,
            f"Cannot exceed {MAX_NAME_LENGTH} characters",
            f"{len(value)} characters"
        )

    return value


def validate_optional_date(value, field: str = "date") -> Optional[date]:
    """
    Validate an optional ISO date (YYYY-MM-DD).

    Raises:
        ValidationError: If a value is given but is not a valid date
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(field, "Invalid date format. Expected %Y-%m-%d", value)


def validate_date_order(start: Optional[date], end: Optional[date]) -> None:
    if start and end and start > end:
        raise ValidationError(
            "date_range",
            "Start date must be before or equal to end date",
            f"{start} to {end}"
        )


def validate_enum(value, enum_cls: Type[E], field: str) -> E:
    """Parse a tagged value into its enum, rejecting unknown values."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(field, f"Must be one of: {valid}", value)


def validate_allocations(allocations: Mapping[str, float]) -> dict:
    """Validate a channel id → spend mapping; every spend must be >= 0."""
    if not isinstance(allocations, Mapping):
        raise ValidationError("allocations", "Must be a mapping of channel id to spend", allocations)

    return {
        str(channel_id): validate_non_negative(spend, f"allocations.{channel_id}")
        for channel_id, spend in allocations.items()
    }
