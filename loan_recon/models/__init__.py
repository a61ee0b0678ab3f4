"""Domain models for loan payment reconciliation."""

from loan_recon.models.base import Notification, Snapshot
from loan_recon.models.contract import ContractParameters
from loan_recon.models.enums import (
    RESOLVED_STATUSES,
    AbuseLevel,
    AmortizationSystem,
    NotificationLevel,
    PaymentStatus,
    SnapshotStep,
    Stage,
    ViewMode,
)
from loan_recon.models.kpis import BaselineKPIs, DerivedComparative
from loan_recon.models.payment import (
    EDITABLE_FIELDS,
    EditCommand,
    PaymentRecord,
    ScheduleLine,
)

__all__ = [
    "AbuseLevel",
    "AmortizationSystem",
    "BaselineKPIs",
    "ContractParameters",
    "DerivedComparative",
    "EDITABLE_FIELDS",
    "EditCommand",
    "Notification",
    "NotificationLevel",
    "PaymentRecord",
    "PaymentStatus",
    "RESOLVED_STATUSES",
    "ScheduleLine",
    "Snapshot",
    "SnapshotStep",
    "Stage",
    "ViewMode",
]
