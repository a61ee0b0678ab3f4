"""Projected vs. reconciled viewing mode."""

from typing import Iterable

from loan_recon.models.enums import RESOLVED_STATUSES, PaymentStatus, ViewMode
from loan_recon.models.payment import PaymentRecord


def resolve_mode(records: Iterable[PaymentRecord]) -> ViewMode:
    """RECONCILED as soon as any record leaves OPEN, PROJECTED otherwise."""
    if any(record.status != PaymentStatus.OPEN for record in records):
        return ViewMode.RECONCILED
    return ViewMode.PROJECTED


def rows_to_consider(records: Iterable[PaymentRecord], mode: ViewMode) -> list[PaymentRecord]:
    """Records that count toward the comparative totals.

    Once reconciliation has begun, OPEN installments are not realized yet
    and are left out even though they stay visible in the grid.
    """
    if mode == ViewMode.RECONCILED:
        return [record for record in records if record.status in RESOLVED_STATUSES]
    return list(records)
