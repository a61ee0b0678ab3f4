"""Installment-level models: schedule lines, payment records and edit commands."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any

from loan_recon.models.enums import PaymentStatus

ZERO = Decimal("0")

EDITABLE_FIELDS = (
    "actual_payment_date",
    "actual_amount_paid",
    "extra_amortization",
    "status",
)


@dataclass(frozen=True)
class ScheduleLine:
    """One line of the baseline schedule produced by the amortization engine."""

    sequence_number: int
    due_date: date
    contract_amount: Decimal


@dataclass(frozen=True)
class PaymentRecord:
    """Installment (parcela) with its contractual terms and the recorded outcome.

    ``sequence_number``, ``due_date`` and ``contract_amount`` come from the
    schedule and never change. The remaining fields are edited by the user;
    ``edited`` tracks whether any of them moved away from its default.
    """

    sequence_number: int
    due_date: date
    contract_amount: Decimal
    actual_payment_date: date
    actual_amount_paid: Decimal
    extra_amortization: Decimal = ZERO
    status: PaymentStatus = PaymentStatus.OPEN
    edited: bool = False

    @classmethod
    def from_schedule(cls, line: ScheduleLine) -> PaymentRecord:
        """Create a record with every editable field at its default."""
        return cls(
            sequence_number=line.sequence_number,
            due_date=line.due_date,
            contract_amount=line.contract_amount,
            actual_payment_date=line.due_date,
            actual_amount_paid=line.contract_amount,
        )

    def default_value(self, field_name: str) -> Any:
        """Return the schedule-derived default of an editable field."""
        defaults = {
            "actual_payment_date": self.due_date,
            "actual_amount_paid": self.contract_amount,
            "extra_amortization": ZERO,
            "status": PaymentStatus.OPEN,
        }
        return defaults[field_name]

    def diverges_from_default(self) -> bool:
        """True when at least one editable field differs from its default."""
        return any(getattr(self, name) != self.default_value(name) for name in EDITABLE_FIELDS)

    def with_changes(self, **changes: Any) -> PaymentRecord:
        """Return a copy with ``changes`` applied and ``edited`` recomputed."""
        updated = replace(self, **changes)
        return replace(updated, edited=updated.diverges_from_default())

    def reset(self) -> PaymentRecord:
        """Return a copy with all editable fields back at their defaults."""
        return replace(
            self,
            actual_payment_date=self.due_date,
            actual_amount_paid=self.contract_amount,
            extra_amortization=ZERO,
            status=PaymentStatus.OPEN,
            edited=False,
        )

    @property
    def total_paid(self) -> Decimal:
        """Amount actually paid including voluntary prepayment."""
        return self.actual_amount_paid + self.extra_amortization

    @property
    def days_late(self) -> int:
        """Days between due date and actual payment, 0 when paid on time."""
        return max(0, (self.actual_payment_date - self.due_date).days)

    def late_charges(self, monthly_rate: Decimal, fine_rate: Decimal) -> Decimal:
        """Late interest pro rata plus the fixed fine, 0 when not late."""
        days = self.days_late
        if days <= 0 or not self.contract_amount:
            return ZERO
        interest = self.contract_amount * monthly_rate * Decimal(days) / Decimal(30)
        fine = self.contract_amount * fine_rate
        return interest + fine


@dataclass(frozen=True)
class EditCommand:
    """Single-cell edit addressed to a row of the store."""

    row_index: int
    field: str
    value: Any
