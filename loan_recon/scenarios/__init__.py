"""Scenarios driving complete reconciliation sessions."""

from loan_recon.scenarios.reconciliation import ReconciliationScenario

__all__ = ["ReconciliationScenario"]
