"""Tests for the row edit controller."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from loan_recon.exceptions import ContractViolation
from loan_recon.models import EditCommand, PaymentStatus
from loan_recon.reconciliation.edits import (
    RowEditController,
    apply_bulk_status,
    apply_edit,
    coerce_date,
    coerce_money,
    coerce_status,
    reset_store,
)
from loan_recon.store import PaymentRecordStore


class TestCoercion:
    """Tests for input normalization."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, Decimal("0")),
            (Decimal("12.34"), Decimal("12.34")),
            (10, Decimal("10")),
            (0.1, Decimal("0.1")),
            ("99.90", Decimal("99.90")),
        ],
    )
    def test_money(self, value: object, expected: Decimal) -> None:
        assert coerce_money(value) == expected

    @pytest.mark.parametrize("value", [-1, "abc", float("nan"), float("inf"), True, [1]])
    def test_money_rejected(self, value: object) -> None:
        with pytest.raises(ContractViolation):
            coerce_money(value)

    def test_dates(self) -> None:
        assert coerce_date(date(2024, 5, 1)) == date(2024, 5, 1)
        assert coerce_date(datetime(2024, 5, 1, 13, 0)) == date(2024, 5, 1)
        assert coerce_date("2024-05-01") == date(2024, 5, 1)

    @pytest.mark.parametrize("value", ["01/05/2024", 20240501, None])
    def test_dates_rejected(self, value: object) -> None:
        with pytest.raises(ContractViolation):
            coerce_date(value)

    def test_status(self) -> None:
        assert coerce_status("PAID") is PaymentStatus.PAID
        assert coerce_status(PaymentStatus.LATE) is PaymentStatus.LATE
        with pytest.raises(ContractViolation):
            coerce_status("CANCELLED")


class TestApplyEdit:
    """Tests for single-cell edits."""

    def test_edit_sets_field_and_flag(self, store: PaymentRecordStore) -> None:
        new_store = apply_edit(store, EditCommand(2, "actual_amount_paid", "450.00"))

        assert new_store[2].actual_amount_paid == Decimal("450.00")
        assert new_store[2].edited is True
        assert store[2].edited is False

    def test_other_records_untouched(self, store: PaymentRecordStore) -> None:
        new_store = apply_edit(store, EditCommand(2, "status", "PAID"))

        for index in range(len(store)):
            if index != 2:
                assert new_store[index] is store[index]

    def test_edit_back_to_default_clears_flag(self, store: PaymentRecordStore) -> None:
        """Edit a field, then set it back: the record is no longer edited."""
        edited = apply_edit(store, EditCommand(0, "actual_amount_paid", Decimal("450.00")))
        reverted = apply_edit(edited, EditCommand(0, "actual_amount_paid", Decimal("500.00")))

        assert edited[0].edited is True
        assert reverted[0].edited is False

    def test_flag_stays_while_another_field_diverges(self, store: PaymentRecordStore) -> None:
        s = apply_edit(store, EditCommand(0, "status", "PAID"))
        s = apply_edit(s, EditCommand(0, "extra_amortization", 100))
        s = apply_edit(s, EditCommand(0, "extra_amortization", None))

        assert s[0].extra_amortization == Decimal("0")
        assert s[0].edited is True

    def test_payment_date_from_string(self, store: PaymentRecordStore) -> None:
        new_store = apply_edit(store, EditCommand(0, "actual_payment_date", "2024-01-25"))
        assert new_store[0].actual_payment_date == date(2024, 1, 25)
        assert new_store[0].days_late == 15

    @pytest.mark.parametrize(
        "command",
        [
            EditCommand(12, "status", "PAID"),
            EditCommand(-1, "status", "PAID"),
            EditCommand(0, "due_date", "2024-01-01"),
            EditCommand(0, "contract_amount", 1),
            EditCommand(0, "edited", True),
            EditCommand(0, "actual_amount_paid", -5),
            EditCommand(0, "status", "UNKNOWN"),
        ],
    )
    def test_contract_violations(self, store: PaymentRecordStore, command: EditCommand) -> None:
        with pytest.raises(ContractViolation):
            apply_edit(store, command)


class TestBulkStatus:
    """Tests for bulk status edits."""

    def test_sets_status_and_clears_selection(self, store: PaymentRecordStore) -> None:
        new_store, selection = apply_bulk_status(store, frozenset({1, 3, 4}), "PAID")

        assert selection == frozenset()
        for index in (1, 3, 4):
            assert new_store[index].status == PaymentStatus.PAID
            assert new_store[index].edited is True
        assert new_store[0] is store[0]
        assert new_store[2] is store[2]

    def test_bulk_open_still_flags_rows(self, store: PaymentRecordStore) -> None:
        """Rows reviewed through a bulk action are flagged even when set to OPEN."""
        new_store, _ = apply_bulk_status(store, frozenset({0}), PaymentStatus.OPEN)

        assert new_store[0].status == PaymentStatus.OPEN
        assert new_store[0].edited is True

    def test_empty_selection_is_noop(self, store: PaymentRecordStore) -> None:
        new_store, selection = apply_bulk_status(store, frozenset(), "PAID")

        assert new_store is store
        assert selection == frozenset()

    def test_invalid_status(self, store: PaymentRecordStore) -> None:
        with pytest.raises(ContractViolation):
            apply_bulk_status(store, frozenset({0}), "WHATEVER")

    def test_out_of_range_row(self, store: PaymentRecordStore) -> None:
        with pytest.raises(ContractViolation):
            apply_bulk_status(store, frozenset({0, 12}), "PAID")


class TestReset:
    """Tests for store reset."""

    def test_reset_restores_defaults(self, store: PaymentRecordStore) -> None:
        edited = apply_edit(store, EditCommand(0, "actual_amount_paid", "1.00"))
        edited, _ = apply_bulk_status(edited, frozenset({1, 2}), "LATE")

        reset = reset_store(edited)

        assert reset == store
        assert reset.edited_count() == 0
        assert all(r.status == PaymentStatus.OPEN for r in reset)

    def test_reset_keeps_schedule_fields(self, store: PaymentRecordStore) -> None:
        reset = reset_store(store)

        assert [r.due_date for r in reset] == [r.due_date for r in store]
        assert [r.contract_amount for r in reset] == [r.contract_amount for r in store]


class TestRowEditController:
    """Tests for the recompute signal."""

    def test_listener_sees_complete_store(self, store: PaymentRecordStore) -> None:
        seen: list[PaymentRecordStore] = []
        controller = RowEditController()
        controller.subscribe(seen.append)

        new_store, _ = controller.bulk_set_status(store, frozenset(range(12)), "PAID")

        assert seen == [new_store]
        assert all(r.status == PaymentStatus.PAID for r in seen[0])

    def test_emits_once_per_operation(self, store: PaymentRecordStore) -> None:
        seen: list[PaymentRecordStore] = []
        controller = RowEditController()
        controller.subscribe(seen.append)

        s = controller.edit(store, EditCommand(0, "status", "PAID"))
        s, _ = controller.bulk_set_status(s, frozenset({1}), "LATE")
        controller.reset(s)

        assert len(seen) == 3

    def test_empty_bulk_does_not_emit(self, store: PaymentRecordStore) -> None:
        seen: list[PaymentRecordStore] = []
        controller = RowEditController()
        controller.subscribe(seen.append)

        controller.bulk_set_status(store, frozenset(), "PAID")

        assert seen == []

    def test_failed_edit_does_not_emit(self, store: PaymentRecordStore) -> None:
        seen: list[PaymentRecordStore] = []
        controller = RowEditController()
        controller.subscribe(seen.append)

        with pytest.raises(ContractViolation):
            controller.edit(store, EditCommand(99, "status", "PAID"))
        assert seen == []

    def test_unsubscribe(self, store: PaymentRecordStore) -> None:
        seen: list[PaymentRecordStore] = []
        controller = RowEditController()
        controller.subscribe(seen.append)
        controller.unsubscribe(seen.append)

        controller.edit(store, EditCommand(0, "status", "PAID"))

        assert seen == []
