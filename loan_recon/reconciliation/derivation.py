"""Comparative derivation: owed vs. paid, interest split and savings.

Everything here is a pure function of (records, mode, baseline KPIs). No
running totals are kept between calls, so deriving twice from the same
inputs gives identical output.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from loan_recon.config import ReconConfig
from loan_recon.models.enums import AbuseLevel, ViewMode
from loan_recon.models.kpis import BaselineKPIs, DerivedComparative
from loan_recon.models.payment import PaymentRecord
from loan_recon.reconciliation.mode import resolve_mode, rows_to_consider

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Overrate thresholds (%) mapped to abuse levels, highest first
ABUSE_THRESHOLDS = (
    (Decimal("50"), AbuseLevel.CRITICAL),
    (Decimal("30"), AbuseLevel.HIGH),
    (Decimal("15"), AbuseLevel.MEDIUM),
)


def overrate(contract_rate: Decimal | None, market_rate: Decimal | None) -> Decimal:
    """Percentage by which the contract rate exceeds the market rate.

    Returns 0 when the market rate is missing or zero.
    """
    if not market_rate or contract_rate is None:
        return ZERO
    return (Decimal(contract_rate) - Decimal(market_rate)) / Decimal(market_rate) * HUNDRED


def classify_abuse(overrate_pct: Decimal) -> AbuseLevel:
    for threshold, level in ABUSE_THRESHOLDS:
        if overrate_pct >= threshold:
            return level
    return AbuseLevel.LOW


def interest_ratio(
    records: Sequence[PaymentRecord],
    kpis: BaselineKPIs,
    config: ReconConfig | None = None,
) -> Decimal:
    """Share of a paid amount taken as interest.

    Uses the engine's original aggregates when present. Without an interest
    total, the financed amount lets the ratio be inferred from the original
    installment over the whole schedule. Otherwise the configured fallback
    applies. The same ratio is later applied to both the paid and the
    recalculated side; it approximates, it does not recompute, interest.
    """
    config = config or ReconConfig()

    total_paid = kpis.original_total_paid
    if not total_paid:
        total_paid = Decimal(kpis.original_installment_amount) * len(records)

    if kpis.original_total_interest is not None:
        total_interest = Decimal(kpis.original_total_interest)
    elif kpis.original_financed_amount is not None:
        total_interest = max(ZERO, total_paid - Decimal(kpis.original_financed_amount))
    else:
        return config.fallback_interest_ratio

    if total_paid <= 0:
        return config.fallback_interest_ratio
    return total_interest / total_paid


def derive_comparative(
    records: Sequence[PaymentRecord],
    mode: ViewMode,
    kpis: BaselineKPIs,
    config: ReconConfig | None = None,
) -> DerivedComparative:
    """Compute the comparative indicators for the current record set.

    Parameters
    ----------
    records : Sequence[PaymentRecord]
        Full record set, in schedule order.
    mode : ViewMode
        Resolved viewing mode; selects the rows that count.
    kpis : BaselineKPIs
        Engine-supplied reference figures.
    config : ReconConfig | None
        Fallback ratio and rounding settings.

    Returns
    -------
    DerivedComparative
        Money figures rounded to cents.
    """
    config = config or ReconConfig()
    records = list(records)

    def money(value: Decimal) -> Decimal:
        return Decimal(value).quantize(config.money_quantum, rounding=ROUND_HALF_UP)

    rows = rows_to_consider(records, mode)
    fair_installment = Decimal(kpis.fair_installment_amount)
    original_installment = Decimal(kpis.original_installment_amount)

    amount_paid = sum((r.actual_amount_paid + r.extra_amortization for r in rows), ZERO)
    extra_total = sum((r.extra_amortization for r in rows), ZERO)
    amount_owed = fair_installment * len(rows)
    total_savings = amount_paid - amount_owed

    ratio = interest_ratio(records, kpis, config)
    interest_paid = amount_paid * ratio
    interest_owed = amount_owed * ratio

    if mode == ViewMode.RECONCILED:
        installment_paid = amount_paid / len(rows) if rows else ZERO
    else:
        installment_paid = original_installment

    overrate_pct = overrate(kpis.contract_rate, kpis.market_rate)

    past = Decimal(kpis.past_overpayment) if kpis.past_overpayment is not None else ZERO
    if kpis.balance_reduction is not None:
        future = Decimal(kpis.balance_reduction)
    else:
        future = max(ZERO, total_savings - past)

    return DerivedComparative(
        mode=mode,
        rows_considered=len(rows),
        amount_paid=money(amount_paid),
        extra_amortization_total=money(extra_total),
        amount_owed_recalculated=money(amount_owed),
        total_savings=money(total_savings),
        per_installment_savings=money(original_installment - fair_installment),
        interest_ratio=ratio,
        interest_paid=money(interest_paid),
        interest_owed_recalculated=money(interest_owed),
        interest_savings=money(interest_paid - interest_owed),
        installment_paid=money(installment_paid),
        installment_owed=money(fair_installment),
        contract_rate=Decimal(kpis.contract_rate),
        market_rate=Decimal(kpis.market_rate) if kpis.market_rate is not None else ZERO,
        overrate=overrate_pct,
        abuse_level=classify_abuse(overrate_pct),
        past_overpayment=money(past),
        future_balance_reduction=money(future),
    )


def derive_for_records(
    records: Sequence[PaymentRecord],
    kpis: BaselineKPIs,
    config: ReconConfig | None = None,
) -> DerivedComparative:
    """Resolve the mode from ``records`` and derive in one step."""
    records = list(records)
    return derive_comparative(records, resolve_mode(records), kpis, config)
