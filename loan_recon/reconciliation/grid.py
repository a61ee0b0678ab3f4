"""Tabular view of the reconciliation store.

One view serves both the simple and the detailed grid; ``extended=True``
adds the read-only late-payment columns.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP
from typing import Any

from loan_recon.config import ReconConfig
from loan_recon.models.payment import PaymentRecord
from loan_recon.store.records import PaymentRecordStore

BASE_COLUMNS = (
    "sequence_number",
    "due_date",
    "contract_amount",
    "actual_payment_date",
    "actual_amount_paid",
    "extra_amortization",
    "status",
    "edited",
)

EXTENDED_COLUMNS = ("days_late", "late_charges")


def columns(extended: bool = False) -> tuple[str, ...]:
    return BASE_COLUMNS + EXTENDED_COLUMNS if extended else BASE_COLUMNS


def grid_row(
    record: PaymentRecord,
    row_index: int,
    extended: bool = False,
    config: ReconConfig | None = None,
    selected: bool = False,
) -> dict[str, Any]:
    """Plain-data row for rendering."""
    row: dict[str, Any] = {"row_index": row_index, "selected": selected}
    for name in BASE_COLUMNS:
        row[name] = getattr(record, name)

    if extended:
        config = config or ReconConfig()
        row["days_late"] = record.days_late
        row["late_charges"] = record.late_charges(
            config.late_interest_monthly_rate, config.late_fine_rate
        ).quantize(config.money_quantum, rounding=ROUND_HALF_UP)
    return row


def grid_rows(
    store: PaymentRecordStore,
    extended: bool = False,
    config: ReconConfig | None = None,
    selection: frozenset[int] = frozenset(),
) -> list[dict[str, Any]]:
    """Every row of the store as plain data."""
    return [
        grid_row(record, index, extended, config, index in selection)
        for index, record in enumerate(store)
    ]


def grid_page(
    store: PaymentRecordStore,
    page_index: int = 0,
    extended: bool = False,
    config: ReconConfig | None = None,
    selection: frozenset[int] = frozenset(),
) -> dict[str, Any]:
    """One page of the grid with its footer.

    Returns
    -------
    dict[str, Any]
        ``rows``, ``page_index``, ``page_count``, ``columns`` and ``summary``.
    """
    config = config or ReconConfig()
    rows = [
        grid_row(record, index, extended, config, index in selection)
        for index, record in store.page(page_index, config.page_size)
    ]
    return {
        "columns": columns(extended),
        "rows": rows,
        "page_index": page_index,
        "page_count": store.page_count(config.page_size),
        "selected_count": len(selection),
        "summary": store.summary(),
    }
