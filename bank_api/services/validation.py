"""Shared business-rule checks raising BusinessValidationException."""

from decimal import Decimal
from typing import Optional

from ..domain.exceptions import BusinessValidationException


def require_text(value: Optional[str], message: str, field: str) -> None:
    if value is None or not value.strip():
        raise BusinessValidationException(message, field=field)


def require_non_negative(amount: Decimal, message: str, field: str) -> None:
    if amount < 0:
        raise BusinessValidationException(message, field=field)
