"""Boundary contracts for the collaborators the session talks to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from loan_recon.models.base import Snapshot
from loan_recon.models.contract import ContractParameters
from loan_recon.models.kpis import BaselineKPIs
from loan_recon.models.payment import ScheduleLine


@dataclass(frozen=True)
class EngineResult:
    """Baseline schedule and KPIs returned by the amortization engine."""

    schedule: list[ScheduleLine]
    kpis: BaselineKPIs
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class AmortizationEngine(Protocol):
    """Recalculation engine; raises on failure."""

    def compute(self, contract: ContractParameters) -> EngineResult: ...


@runtime_checkable
class PersistenceCollaborator(Protocol):
    """Stores partial session snapshots; returns False (or raises) on failure."""

    def save(self, snapshot: Snapshot) -> bool: ...


@runtime_checkable
class ExportSink(Protocol):
    """Receives plain data for rendering or export."""

    def write_batch(self, entity_type: str, records: list[Any]) -> None: ...

    def close(self) -> None: ...
