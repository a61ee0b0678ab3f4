"""Input normalization shared by contract fields and row edits."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from loan_recon.exceptions import ContractViolation


def coerce_money(value: Any) -> Decimal:
    """Normalize a currency input; an empty input counts as zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ContractViolation(f"Invalid amount {value!r}")
    try:
        if isinstance(value, float):
            amount = Decimal(str(value))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ContractViolation(f"Invalid amount {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ContractViolation(f"Amount must be a finite, non-negative number, got {value!r}")
    return amount


def coerce_date(value: Any) -> date:
    """Normalize a date input (``date``, ``datetime`` or ISO string)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ContractViolation(f"Invalid date {value!r}") from exc
    raise ContractViolation(f"Invalid date {value!r}")


def coerce_count(value: Any) -> int:
    """Normalize a whole, non-negative count such as a term in months."""
    amount = coerce_money(value)
    if amount != amount.to_integral_value():
        raise ContractViolation(f"Expected a whole number, got {value!r}")
    return int(amount)
