"""Three-stage reconciliation session: data entry, reconciliation, result.

The orchestrator owns the only reference to the session's
``PaymentRecordStore``. It gates stage progression with two dirty flags,
talks to the amortization engine and the persistence collaborator, and
turns every collaborator failure into a notification instead of letting
it corrupt local state.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Iterable

from loan_recon.collaborators import AmortizationEngine, ExportSink, PersistenceCollaborator
from loan_recon.config import LoanReconConfig
from loan_recon.exceptions import (
    ContractViolation,
    ExternalComputationFailure,
    PersistenceFailure,
    StageTransitionError,
)
from loan_recon.logging import get_logger
from loan_recon.models.base import Snapshot
from loan_recon.models.contract import ContractParameters
from loan_recon.models.enums import PaymentStatus, SnapshotStep, Stage, ViewMode
from loan_recon.models.kpis import BaselineKPIs, DerivedComparative
from loan_recon.models.payment import EditCommand, PaymentRecord
from loan_recon.reconciliation.derivation import derive_for_records
from loan_recon.reconciliation.edits import RowEditController
from loan_recon.reconciliation.grid import grid_page, grid_rows
from loan_recon.reconciliation.mode import resolve_mode
from loan_recon.reconciliation.selection import PRIMARY_BUTTON, SelectionController, SelectionSet
from loan_recon.session.debounce import Debouncer
from loan_recon.session.notifications import NotificationCenter
from loan_recon.sinks.serialization import dataclass_to_dict, to_dict_fast
from loan_recon.store.records import PaymentRecordStore


STAGE_ORDER = (Stage.DATA_ENTRY, Stage.RECONCILIATION, Stage.RESULT)


class StageOrchestrator:
    """Drive one reconciliation session for a single contract.

    Parameters
    ----------
    engine : AmortizationEngine
        Produces the baseline schedule and KPIs.
    persistence : PersistenceCollaborator | None
        Receives snapshots; ``None`` keeps the session purely local.
    session_id : str | None
        Identifier sent with every snapshot (generated when omitted).
    contract : ContractParameters | None
        Initial contract fields.
    config : LoanReconConfig | None
        Derivation and persistence settings.
    existing : bool
        True when the contract was already computed before, in which case
        the session does not start dirty.
    extended_columns : bool
        Include late-payment columns in grid exports.
    """

    def __init__(
        self,
        engine: AmortizationEngine,
        persistence: PersistenceCollaborator | None = None,
        session_id: str | None = None,
        contract: ContractParameters | None = None,
        config: LoanReconConfig | None = None,
        existing: bool = False,
        extended_columns: bool = False,
    ) -> None:
        self.engine = engine
        self.persistence = persistence
        self.session_id = session_id or uuid.uuid4().hex
        self.log = get_logger(__name__, session_id=self.session_id)
        self.contract = contract or ContractParameters()
        self.config = config or LoanReconConfig()
        self.extended_columns = extended_columns
        self.notifications = NotificationCenter()

        self.stage = Stage.DATA_ENTRY
        self.data_dirty = not existing
        self.reconciliation_dirty = False
        self._reached: set[Stage] = {Stage.DATA_ENTRY}

        self.kpis: BaselineKPIs | None = None
        self.derived: DerivedComparative | None = None
        self.result_baseline: PaymentRecordStore | None = None
        self.result: DerivedComparative | None = None

        self._store = PaymentRecordStore()
        self._edits = RowEditController()
        self._edits.subscribe(self._on_recompute)
        self._selection = SelectionController()
        self._compute_lock = threading.Lock()
        self._contract_saver = Debouncer(
            self.config.persistence.contract_debounce_seconds,
            self._save_contract_snapshot,
            name=f"contract-autosave[{self.session_id}]",
        )
        self._closed = False

    @classmethod
    def resume(
        cls,
        engine: AmortizationEngine,
        records: Iterable[PaymentRecord],
        kpis: BaselineKPIs,
        contract: ContractParameters,
        result_reached: bool = False,
        *,
        persistence: PersistenceCollaborator | None = None,
        session_id: str | None = None,
        config: LoanReconConfig | None = None,
        extended_columns: bool = False,
    ) -> StageOrchestrator:
        """Rebuild a session from previously persisted state.

        A resumed session is always an existing one: it starts with
        ``data_dirty`` cleared.
        """
        session = cls(
            engine,
            persistence=persistence,
            session_id=session_id,
            contract=contract,
            config=config,
            existing=True,
            extended_columns=extended_columns,
        )
        session.kpis = kpis
        session._commit(PaymentRecordStore(records))
        session._selection.resize(len(session._store))
        session._reached.add(Stage.RECONCILIATION)
        session.stage = Stage.RECONCILIATION
        if result_reached:
            session._reached.add(Stage.RESULT)
            session.result_baseline = session._store
            session.result = session.derived
        return session

    # State
    @property
    def store(self) -> PaymentRecordStore:
        return self._store

    @property
    def mode(self) -> ViewMode:
        return resolve_mode(self._store)

    @property
    def selection(self) -> SelectionSet:
        return self._selection.selection

    @property
    def dragging(self) -> bool:
        return self._selection.state.dragging

    @property
    def computing(self) -> bool:
        return self._compute_lock.locked()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reached_stages(self) -> list[Stage]:
        return [stage for stage in STAGE_ORDER if stage in self._reached]

    @property
    def result_reached(self) -> bool:
        return Stage.RESULT in self._reached

    @property
    def result_stale(self) -> bool:
        """True when a result exists but rows changed since it was produced."""
        return self.result_reached and self.reconciliation_dirty

    @property
    def can_advance_to_reconciliation(self) -> bool:
        return (
            self.stage == Stage.DATA_ENTRY
            and self.data_dirty
            and self.contract.is_valid
            and not self.computing
        )

    @property
    def can_advance_to_result(self) -> bool:
        if self.stage != Stage.RECONCILIATION or self.kpis is None:
            return False
        return self.reconciliation_dirty or not self.result_reached

    # Data entry
    def update_contract(self, **changes: Any) -> ContractParameters:
        """Merge contract fields, mark data dirty and schedule an autosave."""
        self._ensure_open()
        self.contract = self.contract.merge(changes)
        self.data_dirty = True
        if self.persistence is not None and self.contract.financed_amount:
            self._contract_saver.schedule(self.contract)
        return self.contract

    def save_draft(self) -> bool:
        """Persist the contract fields right away."""
        self._ensure_open()
        if not self.contract.financed_amount:
            self.notifications.warning("Fill in at least the financed amount")
            return False
        self._contract_saver.cancel()
        if self._persist(SnapshotStep.CONTRACT, self._contract_payload(self.contract)):
            self.notifications.success("Draft saved")
            return True
        return False

    def advance_to_reconciliation(self) -> bool:
        """Run the amortization engine and open the reconciliation stage.

        Returns
        -------
        bool
            True when the reconciliation was (re)generated. On engine
            failure the session stays in DATA_ENTRY with ``data_dirty``
            untouched and a retryable notification is posted.
        """
        self._ensure_open()
        if not self._compute_lock.acquire(blocking=False):
            self.notifications.warning("A calculation is already running")
            return False
        try:
            if self.stage != Stage.DATA_ENTRY:
                raise StageTransitionError(f"Cannot compute the schedule from {self.stage.value}")
            if not self.data_dirty:
                self.notifications.info("Reconciliation already reflects the contract data")
                return False
            missing = self.contract.missing_fields()
            if missing:
                self.notifications.error(f"Fill in all required fields: {', '.join(missing)}")
                return False

            try:
                result = self.engine.compute(self.contract)
                store = PaymentRecordStore.from_schedule(result.schedule)
            except ExternalComputationFailure as exc:
                self.log.warning("Amortization engine failed: %s", exc)
                self.notifications.error(f"Calculation failed: {exc}", retryable=True)
                return False
            except Exception as exc:
                self.log.exception("Unexpected amortization engine error")
                self.notifications.error(f"Calculation failed: {exc}", retryable=True)
                return False

            self.kpis = result.kpis
            self._commit(store)
            self._selection.resize(len(store))
            self.data_dirty = False
            self._reached.add(Stage.RECONCILIATION)
            self.stage = Stage.RECONCILIATION
            self.log.info("Reconciliation generated: %d installments", len(store))

            self._contract_saver.cancel()
            self._persist(SnapshotStep.CONTRACT, self._contract_payload(self.contract))
            self.notifications.success("Reconciliation generated")
            return True
        finally:
            self._compute_lock.release()

    # Reconciliation
    def edit(self, command: EditCommand) -> PaymentRecord:
        """Apply a single-cell edit and return the updated record."""
        self._ensure_reconciling()
        new_store = self._edits.edit(self._store, command)
        self._after_row_change(new_store)
        return new_store[command.row_index]

    def edit_row(self, row_index: int, field: str, value: Any) -> PaymentRecord:
        return self.edit(EditCommand(row_index=row_index, field=field, value=value))

    def bulk_set_status(self, status: PaymentStatus | str) -> int:
        """Set ``status`` on the selected rows and clear the selection.

        Returns
        -------
        int
            Number of rows updated (0 for an empty selection).
        """
        self._ensure_reconciling()
        selection = self.selection
        new_store, _ = self._edits.bulk_set_status(self._store, selection, status)
        self._selection.clear()
        if new_store is self._store:
            return 0
        self._after_row_change(new_store)
        self.notifications.success(f"{len(selection)} installments updated")
        return len(selection)

    def reset_rows(self) -> None:
        """Restore every row to its schedule defaults."""
        self._ensure_reconciling()
        self._after_row_change(self._edits.reset(self._store))
        self.notifications.success("Edits reset")

    def click_row(self, row: int, range_modifier: bool = False) -> SelectionSet:
        self._ensure_reconciling()
        return self._selection.click(row, range_modifier)

    def drag_start(self, row: int, button: int = PRIMARY_BUTTON) -> SelectionSet:
        self._ensure_reconciling()
        return self._selection.drag_start(row, button)

    def drag_enter(self, row: int) -> SelectionSet:
        self._ensure_reconciling()
        return self._selection.drag_enter(row)

    def drag_end(self) -> SelectionSet:
        """Pointer released anywhere; valid in every stage."""
        return self._selection.drag_end()

    def toggle_all_rows(self, selected: bool | None = None) -> SelectionSet:
        self._ensure_reconciling()
        return self._selection.toggle_all(selected)

    def advance_to_result(self) -> bool:
        """Freeze the current rows as the result baseline."""
        self._ensure_open()
        if self.kpis is None:
            self.notifications.error("Generate the reconciliation first")
            return False
        if self.stage != Stage.RECONCILIATION:
            raise StageTransitionError(f"Cannot produce a result from {self.stage.value}")
        if not self.can_advance_to_result:
            self.notifications.info("Result already reflects the reconciliation")
            return False

        self._selection.drag_end()
        self.result_baseline = self._store
        self.result = derive_for_records(self._store, self.kpis, self.config.recon)
        self.reconciliation_dirty = False
        self._reached.add(Stage.RESULT)
        self.stage = Stage.RESULT
        self.log.info(
            "Result generated: mode=%s rows=%d savings=%s",
            self.result.mode.value,
            self.result.rows_considered,
            self.result.total_savings,
        )

        self._persist(
            SnapshotStep.RESULT,
            {
                "records": [to_dict_fast(r) for r in self.result_baseline],
                "comparative": to_dict_fast(self.result),
            },
        )
        self.notifications.success("Results generated")
        return True

    def return_to(self, stage: Stage | str) -> None:
        """Navigate to a stage that was already reached."""
        self._ensure_open()
        stage = Stage(stage)
        if stage not in self._reached:
            raise StageTransitionError(f"Stage {stage.value} has not been reached yet")
        self._selection.drag_end()
        self.stage = stage

    # Export
    def export(self, extended: bool | None = None) -> dict[str, Any]:
        """Current session state as plain data for rendering or export."""
        extended = self.extended_columns if extended is None else extended
        return {
            "session_id": self.session_id,
            "stage": self.stage,
            "mode": self.mode,
            "data_dirty": self.data_dirty,
            "reconciliation_dirty": self.reconciliation_dirty,
            "result_stale": self.result_stale,
            "contract": dataclass_to_dict(self.contract),
            "rows": grid_rows(self._store, extended, self.config.recon, self.selection),
            "summary": self._store.summary(),
            "comparative": to_dict_fast(self.derived) if self.derived else None,
            "result": to_dict_fast(self.result) if self.result else None,
        }

    def page(self, page_index: int = 0, extended: bool | None = None) -> dict[str, Any]:
        extended = self.extended_columns if extended is None else extended
        return grid_page(self._store, page_index, extended, self.config.recon, self.selection)

    def publish(self, sink: ExportSink) -> None:
        """Hand the rows and the comparative to an export sink."""
        data = self.export()
        sink.write_batch("installments", data["rows"])
        if self.derived is not None:
            sink.write_batch("comparative", [self.derived])

    # Lifecycle
    def close(self) -> None:
        """End the session; pending autosaves are dropped."""
        if self._closed:
            return
        self._contract_saver.close()
        self._selection.drag_end()
        self._closed = True
        self.log.debug("Session closed")

    def __enter__(self) -> StageOrchestrator:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Internals
    def _on_recompute(self, store: PaymentRecordStore) -> None:
        self.derived = derive_for_records(store, self.kpis, self.config.recon) if self.kpis else None

    def _commit(self, store: PaymentRecordStore) -> None:
        self._on_recompute(store)
        self._store = store

    def _after_row_change(self, store: PaymentRecordStore) -> None:
        self._store = store
        self.reconciliation_dirty = True
        self._persist(
            SnapshotStep.RECONCILIATION,
            {"records": [to_dict_fast(r) for r in store]},
        )

    def _contract_payload(self, contract: ContractParameters) -> dict[str, Any]:
        return {"contract": dataclass_to_dict(contract), "reference": contract.reference_name}

    def _save_contract_snapshot(self, contract: ContractParameters) -> None:
        self._persist(SnapshotStep.CONTRACT, self._contract_payload(contract))

    def _persist(self, step: SnapshotStep, payload: dict[str, Any]) -> bool:
        if self.persistence is None:
            return True
        snapshot = Snapshot(session_id=self.session_id, step=step, payload=payload)
        try:
            if self.persistence.save(snapshot) is False:
                raise PersistenceFailure(f"{step.value} snapshot rejected")
        except Exception as exc:
            self.log.warning("Could not persist %s snapshot: %s", step.value, exc)
            self.notifications.error(
                f"Could not save {step.value} changes; they are kept locally", retryable=True
            )
            return False
        self.log.debug("Persisted %s snapshot", step.value)
        return True

    def _ensure_open(self) -> None:
        if self._closed:
            raise ContractViolation(f"Session {self.session_id} is closed")

    def _ensure_reconciling(self) -> None:
        self._ensure_open()
        if self.stage != Stage.RECONCILIATION:
            raise ContractViolation(
                f"Rows can only be changed during reconciliation, current stage is {self.stage.value}"
            )
