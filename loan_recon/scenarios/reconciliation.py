"""End-to-end reconciliation session over a generated contract."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from loan_recon.collaborators import AmortizationEngine, PersistenceCollaborator
from loan_recon.config import LoanReconConfig
from loan_recon.generators import ContractGenerator, FlatScheduleEngine, PaymentBehavior
from loan_recon.models.contract import ContractParameters
from loan_recon.session.orchestrator import StageOrchestrator

logger = logging.getLogger(__name__)


class ReconciliationScenario:
    """Run a full session: contract entry, reconciliation, result.

    This scenario:
    - generates a contract (or uses the one given),
    - computes the schedule with the reference engine,
    - records a simulated payment history through edit commands,
    - produces the comparative result.
    """

    def __init__(
        self,
        contract: ContractParameters | None = None,
        engine: AmortizationEngine | None = None,
        persistence: PersistenceCollaborator | None = None,
        behavior: str | None = None,
        reference_date: date | None = None,
        seed: int | None = None,
        *,
        config: LoanReconConfig | None = None,
    ) -> None:
        self.seed = seed
        self.config = config or LoanReconConfig()
        self.contract = contract or ContractGenerator(seed=seed).generate()
        self.engine = engine or FlatScheduleEngine()
        self.persistence = persistence
        self.behavior = behavior
        self.reference_date = reference_date
        self._payment_behavior = PaymentBehavior(seed=seed)
        self.session: StageOrchestrator | None = None

    def run(self) -> StageOrchestrator:
        """Drive the session through every stage.

        Returns
        -------
        StageOrchestrator
            The session, left in the RESULT stage when every step succeeded.
        """
        session = StageOrchestrator(
            self.engine,
            persistence=self.persistence,
            config=self.config,
            extended_columns=True,
        )
        self.session = session

        session.update_contract(**{
            name: getattr(self.contract, name)
            for name in (
                "financed_amount",
                "contract_rate",
                "term_months",
                "first_due_date",
                "amortization_system",
                "market_rate",
                "debtor",
                "creditor",
                "contract_number",
            )
        })
        logger.info(
            "Running reconciliation scenario for %s (%s)",
            self.contract.reference_name,
            self.contract.contract_number or "no contract number",
        )

        if not session.advance_to_reconciliation():
            logger.warning("Scenario stopped in data entry")
            return session

        commands = self._payment_behavior.commands_for(
            session.store,
            reference_date=self.reference_date,
            behavior=self.behavior,
        )
        for command in commands:
            session.edit(command)
        logger.info("Applied %d payment edits", len(commands))

        session.advance_to_result()
        return session

    def get_summary(self) -> dict[str, Any]:
        """Headline figures of the last run."""
        if self.session is None or self.session.derived is None:
            return {}
        derived = self.session.derived
        return {
            "session_id": self.session.session_id,
            "stage": self.session.stage.value,
            "mode": derived.mode.value,
            "installments": len(self.session.store),
            "rows_considered": derived.rows_considered,
            "amount_paid": derived.amount_paid,
            "amount_owed_recalculated": derived.amount_owed_recalculated,
            "total_savings": derived.total_savings,
            "overrate": derived.overrate,
            "abuse_level": derived.abuse_level.value,
        }
