"""Contract-level parameters entered before the schedule exists."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any

from loan_recon.exceptions import ContractViolation
from loan_recon.models.enums import AmortizationSystem
from loan_recon.models.values import coerce_count, coerce_date, coerce_money


@dataclass(frozen=True)
class ContractParameters:
    """Loan contract data handed to the amortization engine."""

    financed_amount: Decimal | None = None
    contract_rate: Decimal | None = None  # Monthly %, e.g. 4.5 for 4.5% a.m.
    term_months: int | None = None
    first_due_date: date | None = None
    amortization_system: AmortizationSystem = AmortizationSystem.PRICE
    market_rate: Decimal | None = None  # Monthly %, None lets the engine look it up
    debtor: str = ""
    creditor: str = ""
    contract_number: str = ""

    REQUIRED = ("financed_amount", "contract_rate", "term_months", "first_due_date")
    DECIMAL_FIELDS = ("financed_amount", "contract_rate", "market_rate")

    def missing_fields(self) -> list[str]:
        """Required fields that are absent, malformed or not positive."""
        missing = []
        for name in self.REQUIRED:
            value = getattr(self, name)
            if name == "first_due_date":
                if not isinstance(value, date):
                    missing.append(name)
            elif not _is_positive_number(value):
                missing.append(name)
        return missing

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()

    @property
    def reference_name(self) -> str:
        """Label used when persisting drafts."""
        return f"{self.debtor or 'Client'} - {self.creditor or 'Creditor'}"

    def merge(self, changes: dict[str, Any]) -> ContractParameters:
        """Return a copy with ``changes`` applied.

        Amounts and rates become ``Decimal``, the term an ``int`` and the
        first due date a ``date``. ``None`` clears a field.

        Raises
        ------
        ContractViolation
            If a key is not a contract field or a value cannot be
            normalized (negative, non-numeric, malformed date).
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ContractViolation(f"Unknown contract fields: {', '.join(unknown)}")
        return replace(self, **{name: _normalize(name, value) for name, value in changes.items()})


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal) and not value.is_finite():
        return False
    return value > 0


def _normalize(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in ContractParameters.DECIMAL_FIELDS:
        return coerce_money(value)
    if name == "term_months":
        return coerce_count(value)
    if name == "first_due_date":
        return coerce_date(value)
    if name == "amortization_system":
        try:
            return AmortizationSystem(value)
        except ValueError as exc:
            raise ContractViolation(f"Unknown amortization system {value!r}") from exc
    return value
