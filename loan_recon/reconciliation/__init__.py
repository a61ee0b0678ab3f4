"""Reconciliation core: edits, selection, mode resolution and derivation."""

from loan_recon.reconciliation.derivation import (
    classify_abuse,
    derive_comparative,
    derive_for_records,
    interest_ratio,
    overrate,
)
from loan_recon.reconciliation.edits import (
    RowEditController,
    apply_bulk_status,
    apply_edit,
    reset_store,
)
from loan_recon.reconciliation.grid import grid_page, grid_rows
from loan_recon.reconciliation.mode import resolve_mode, rows_to_consider
from loan_recon.reconciliation.selection import (
    DragSession,
    SelectionController,
    SelectionSet,
    SelectionState,
)

__all__ = [
    "DragSession",
    "RowEditController",
    "SelectionController",
    "SelectionSet",
    "SelectionState",
    "apply_bulk_status",
    "apply_edit",
    "classify_abuse",
    "derive_comparative",
    "derive_for_records",
    "grid_page",
    "grid_rows",
    "interest_ratio",
    "overrate",
    "reset_store",
    "resolve_mode",
    "rows_to_consider",
]
