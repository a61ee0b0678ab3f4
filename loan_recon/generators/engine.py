"""Flat-installment reference engine for demos and tests.

This is a stand-in for the external amortization engine: it produces a
fixed-installment (PRICE) schedule at the contract rate and a "fair"
installment at the market rate. It does not look up market rates, apply
monetary correction or model SAC schedules.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from loan_recon.collaborators import EngineResult
from loan_recon.exceptions import ExternalComputationFailure
from loan_recon.models.contract import ContractParameters
from loan_recon.models.enums import AmortizationSystem
from loan_recon.models.kpis import BaselineKPIs
from loan_recon.models.payment import ScheduleLine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def add_months(start: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def fixed_installment(principal: Decimal, monthly_rate_pct: Decimal, term: int) -> Decimal:
    """Annuity payment for ``principal`` over ``term`` months."""
    rate = Decimal(monthly_rate_pct) / Decimal(100)
    if rate == 0:
        return (principal / term).quantize(CENT, rounding=ROUND_HALF_UP)
    factor = (1 + rate) ** term
    return (principal * rate * factor / (factor - 1)).quantize(CENT, rounding=ROUND_HALF_UP)


class FlatScheduleEngine:
    """Compute baseline schedule and KPIs with flat installments.

    Parameters
    ----------
    default_market_rate : Decimal | None
        Monthly market rate (%) used when the contract does not carry one.
    """

    def __init__(self, default_market_rate: Decimal | None = None) -> None:
        self.default_market_rate = default_market_rate
        self.calls = 0

    def compute(self, contract: ContractParameters) -> EngineResult:
        """Build the schedule for ``contract``.

        Raises
        ------
        ExternalComputationFailure
            If the contract is incomplete, not PRICE, or has no market rate.
        """
        self.calls += 1
        missing = contract.missing_fields()
        if missing:
            raise ExternalComputationFailure(f"Contract incomplete: {', '.join(missing)}")
        if contract.amortization_system != AmortizationSystem.PRICE:
            raise ExternalComputationFailure(
                f"{contract.amortization_system.value} schedules are not supported by the reference engine"
            )
        market_rate = contract.market_rate if contract.market_rate is not None else self.default_market_rate
        if market_rate is None:
            raise ExternalComputationFailure("No market rate available for the contract")

        principal = Decimal(contract.financed_amount)
        term = contract.term_months
        original = fixed_installment(principal, contract.contract_rate, term)
        fair = fixed_installment(principal, market_rate, term)

        schedule = [
            ScheduleLine(
                sequence_number=n,
                due_date=add_months(contract.first_due_date, n - 1),
                contract_amount=original,
            )
            for n in range(1, term + 1)
        ]
        total_paid = original * term

        kpis = BaselineKPIs(
            original_installment_amount=original,
            fair_installment_amount=fair,
            contract_rate=Decimal(contract.contract_rate),
            market_rate=Decimal(market_rate),
            original_total_paid=total_paid,
            original_total_interest=total_paid - principal,
            original_financed_amount=principal,
        )
        logger.debug(
            "Schedule computed: %d installments of %s (fair %s)", term, original, fair
        )
        return EngineResult(schedule=schedule, kpis=kpis, metadata={"engine": "flat-reference"})
