"""Baseline KPIs supplied by the amortization engine and derived comparatives."""

from dataclasses import dataclass
from decimal import Decimal

from loan_recon.models.enums import AbuseLevel, ViewMode


@dataclass(frozen=True)
class BaselineKPIs:
    """Reference figures computed outside the core and never recomputed here.

    Rates are monthly percentages (e.g. ``Decimal("4.5")`` for 4.5% a.m.).
    """

    original_installment_amount: Decimal
    fair_installment_amount: Decimal
    contract_rate: Decimal
    market_rate: Decimal | None = None
    original_total_paid: Decimal | None = None
    original_total_interest: Decimal | None = None
    original_financed_amount: Decimal | None = None
    past_overpayment: Decimal | None = None  # Indebito already paid
    balance_reduction: Decimal | None = None  # Future saldo reduction


@dataclass(frozen=True)
class DerivedComparative:
    """Comparative indicators derived from the record set.

    Ephemeral: rebuilt on every store or mode change, never persisted as
    authoritative state.
    """

    mode: ViewMode
    rows_considered: int
    amount_paid: Decimal
    extra_amortization_total: Decimal
    amount_owed_recalculated: Decimal
    total_savings: Decimal
    per_installment_savings: Decimal
    interest_ratio: Decimal
    interest_paid: Decimal
    interest_owed_recalculated: Decimal
    interest_savings: Decimal
    installment_paid: Decimal
    installment_owed: Decimal
    contract_rate: Decimal
    market_rate: Decimal
    overrate: Decimal
    abuse_level: AbuseLevel
    past_overpayment: Decimal
    future_balance_reduction: Decimal
