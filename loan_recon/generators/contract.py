"""Sample consumer loan contracts."""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from loan_recon.generators.base import BaseGenerator
from loan_recon.models.contract import ContractParameters
from loan_recon.models.enums import AmortizationSystem


class ContractGenerator(BaseGenerator):
    """Generate consumer loan contracts with above-market rates."""

    CREDITORS = [
        "Banco Horizonte S.A.",
        "Financeira Aurora S.A.",
        "Banco Meridiano S.A.",
        "Crediativa Financiamentos S.A.",
    ]

    # Monthly market rates (%) for personal credit
    MARKET_RATE_RANGE = (1.5, 3.0)
    # Contract rate as a multiple of the market rate
    MARKUP_RANGE = (1.0, 2.2)

    def generate(self, first_due_date: date | None = None) -> ContractParameters:
        """Generate a contract.

        Parameters
        ----------
        first_due_date : date | None
            First installment due date; defaults to a date within the
            last two years.

        Returns
        -------
        ContractParameters
            Complete, valid contract parameters.
        """
        if first_due_date is None:
            first_due_date = date.today() - timedelta(days=random.randint(60, 720))

        market_rate = Decimal(str(round(random.uniform(*self.MARKET_RATE_RANGE), 2)))
        markup = Decimal(str(round(random.uniform(*self.MARKUP_RANGE), 2)))

        return ContractParameters(
            financed_amount=Decimal(str(random.randint(5, 80) * 1000)),
            contract_rate=(market_rate * markup).quantize(Decimal("0.01")),
            term_months=random.choice([12, 18, 24, 36, 48, 60]),
            first_due_date=first_due_date,
            amortization_system=AmortizationSystem.PRICE,
            market_rate=market_rate,
            debtor=self.fake.name(),
            creditor=random.choice(self.CREDITORS),
            contract_number=self.fake.bothify("CT-####-######"),
        )

    def generate_batch(self, count: int) -> Iterator[ContractParameters]:
        """Generate multiple contracts."""
        for _ in range(count):
            yield self.generate()
