"""Tests for the unified grid view."""

from datetime import date
from decimal import Decimal

import pytest

from loan_recon.config import ReconConfig
from loan_recon.exceptions import ContractViolation
from loan_recon.models import EditCommand, PaymentRecord, PaymentStatus, ScheduleLine
from loan_recon.reconciliation.edits import apply_edit
from loan_recon.reconciliation.grid import (
    BASE_COLUMNS,
    EXTENDED_COLUMNS,
    columns,
    grid_page,
    grid_row,
    grid_rows,
)
from loan_recon.store import PaymentRecordStore


class TestColumns:
    """Tests for column sets."""

    def test_simple_columns(self) -> None:
        assert columns() == BASE_COLUMNS
        assert "days_late" not in columns()

    def test_extended_columns(self) -> None:
        assert columns(extended=True) == BASE_COLUMNS + EXTENDED_COLUMNS


class TestGridRows:
    """Tests for row rendering."""

    def test_simple_row(self, store: PaymentRecordStore) -> None:
        row = grid_row(store[0], 0)

        assert row["row_index"] == 0
        assert row["sequence_number"] == 1
        assert row["status"] == PaymentStatus.OPEN
        assert row["selected"] is False
        assert "late_charges" not in row

    def test_extended_row_late_figures(self, store: PaymentRecordStore) -> None:
        store = apply_edit(store, EditCommand(0, "actual_payment_date", date(2024, 1, 25)))

        row = grid_row(store[0], 0, extended=True)

        assert row["days_late"] == 15
        assert row["late_charges"] == Decimal("12.50")

    def test_extended_row_on_time(self, store: PaymentRecordStore) -> None:
        row = grid_row(store[1], 1, extended=True)

        assert row["days_late"] == 0
        assert row["late_charges"] == Decimal("0.00")

    def test_late_charges_round_half_up(self) -> None:
        """A 2% fine on 100.25 is exactly 2.005 and rounds up to 2.01."""
        line = ScheduleLine(sequence_number=1, due_date=date(2024, 1, 10), contract_amount=Decimal("100.25"))
        record = PaymentRecord.from_schedule(line).with_changes(actual_payment_date=date(2024, 1, 11))
        config = ReconConfig(late_interest_monthly_rate=Decimal("0"))

        row = grid_row(record, 0, extended=True, config=config)

        assert row["late_charges"] == Decimal("2.01")

    def test_selection_flags(self, store: PaymentRecordStore) -> None:
        rows = grid_rows(store, selection=frozenset({2, 5}))

        assert len(rows) == 12
        assert [r["row_index"] for r in rows if r["selected"]] == [2, 5]


class TestGridPage:
    """Tests for pagination and footer."""

    def test_single_page_by_default(self, store: PaymentRecordStore) -> None:
        page = grid_page(store)

        assert page["page_count"] == 1
        assert len(page["rows"]) == 12
        assert page["summary"]["total_rows"] == 12
        assert page["columns"] == BASE_COLUMNS

    def test_custom_page_size(self, store: PaymentRecordStore) -> None:
        config = ReconConfig(page_size=5)

        page = grid_page(store, page_index=2, config=config, selection=frozenset({10, 1}))

        assert page["page_count"] == 3
        assert [r["row_index"] for r in page["rows"]] == [10, 11]
        assert page["rows"][0]["selected"] is True
        assert page["selected_count"] == 2

    def test_page_out_of_range(self, store: PaymentRecordStore) -> None:
        with pytest.raises(ContractViolation):
            grid_page(store, page_index=1)
