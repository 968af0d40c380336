"""Field validation shared by the ledger and cap table stores"""
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.services.errors import ValidationError


def require(value: Any, label: str) -> Any:
    """Reject None and blank strings"""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required")
    return value.strip() if isinstance(value, str) else value


def _decimal(value: Any, label: str) -> Decimal:
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{label} must be a number") from e
    if not number.is_finite():
        raise ValidationError(f"{label} must be a number")
    return number


def positive_amount(value: Any, label: str) -> Decimal:
    if value is None:
        raise ValidationError(f"{label} is required")
    number = _decimal(value, label)
    if number <= 0:
        raise ValidationError(f"Valid {label.lower()} is required (must be greater than zero)")
    return number


def non_negative_amount(value: Any, label: str) -> Decimal:
    number = _decimal(value, label)
    if number < 0:
        raise ValidationError(f"{label} cannot be negative")
    return number


def percentage(value: Any, label: str) -> Decimal:
    number = non_negative_amount(value, label)
    if number > 100:
        raise ValidationError(f"{label} cannot exceed 100%")
    return number


def not_in_future(value: Optional[date], label: str, today: Optional[date] = None) -> date:
    """Dates of investments and valuations must not be after today"""
    value = require(value, label)
    if value > (today or date.today()):
        raise ValidationError(f"{label} cannot be in the future")
    return value
