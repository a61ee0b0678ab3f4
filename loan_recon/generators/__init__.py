"""Sample data generators and the reference amortization engine."""

from loan_recon.generators.contract import ContractGenerator
from loan_recon.generators.engine import FlatScheduleEngine, add_months, fixed_installment
from loan_recon.generators.patterns import PaymentBehavior

__all__ = [
    "ContractGenerator",
    "FlatScheduleEngine",
    "PaymentBehavior",
    "add_months",
    "fixed_installment",
]
