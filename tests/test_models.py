"""Tests for domain models."""

from datetime import date
from decimal import Decimal

import pytest

from loan_recon.exceptions import ContractViolation
from loan_recon.models import (
    RESOLVED_STATUSES,
    AmortizationSystem,
    ContractParameters,
    EditCommand,
    Notification,
    NotificationLevel,
    PaymentRecord,
    PaymentStatus,
    ScheduleLine,
    Snapshot,
    SnapshotStep,
)


@pytest.fixture
def line() -> ScheduleLine:
    return ScheduleLine(sequence_number=3, due_date=date(2024, 3, 10), contract_amount=Decimal("500.00"))


@pytest.fixture
def record(line: ScheduleLine) -> PaymentRecord:
    return PaymentRecord.from_schedule(line)


class TestEnums:
    """Tests for enumeration types."""

    def test_payment_status_values(self) -> None:
        assert {s.value for s in PaymentStatus} == {"PAID", "OPEN", "RENEGOTIATED", "LATE"}

    def test_resolved_statuses_exclude_open(self) -> None:
        assert PaymentStatus.OPEN not in RESOLVED_STATUSES
        assert len(RESOLVED_STATUSES) == 3

    def test_snapshot_step_wire_values(self) -> None:
        assert [s.value for s in SnapshotStep] == ["contract", "reconciliation", "result"]

    def test_status_from_string(self) -> None:
        assert PaymentStatus("LATE") is PaymentStatus.LATE


class TestPaymentRecord:
    """Tests for PaymentRecord defaults and derived figures."""

    def test_from_schedule_defaults(self, record: PaymentRecord, line: ScheduleLine) -> None:
        """Editable fields start from the schedule."""
        assert record.actual_payment_date == line.due_date
        assert record.actual_amount_paid == line.contract_amount
        assert record.extra_amortization == Decimal("0")
        assert record.status == PaymentStatus.OPEN
        assert record.edited is False
        assert record.diverges_from_default() is False

    def test_with_changes_marks_edited(self, record: PaymentRecord) -> None:
        changed = record.with_changes(actual_amount_paid=Decimal("480.00"))

        assert changed.edited is True
        assert changed.actual_amount_paid == Decimal("480.00")
        assert record.actual_amount_paid == Decimal("500.00")

    def test_with_changes_back_to_default_clears_edited(self, record: PaymentRecord) -> None:
        """Reverting the only divergent field clears the flag."""
        changed = record.with_changes(status=PaymentStatus.PAID)
        reverted = changed.with_changes(status=PaymentStatus.OPEN)

        assert changed.edited is True
        assert reverted.edited is False

    def test_reset_keeps_immutable_fields(self, record: PaymentRecord) -> None:
        changed = record.with_changes(
            actual_payment_date=date(2024, 3, 20),
            actual_amount_paid=Decimal("510.00"),
            extra_amortization=Decimal("100.00"),
            status=PaymentStatus.LATE,
        )
        reset = changed.reset()

        assert reset == record
        assert reset.sequence_number == 3
        assert reset.due_date == date(2024, 3, 10)
        assert reset.contract_amount == Decimal("500.00")

    def test_total_paid_includes_extra(self, record: PaymentRecord) -> None:
        changed = record.with_changes(extra_amortization=Decimal("50.00"))
        assert changed.total_paid == Decimal("550.00")

    def test_days_late(self, record: PaymentRecord) -> None:
        assert record.days_late == 0
        assert record.with_changes(actual_payment_date=date(2024, 3, 25)).days_late == 15
        assert record.with_changes(actual_payment_date=date(2024, 3, 1)).days_late == 0

    def test_late_charges(self, record: PaymentRecord) -> None:
        """15 days late: 500 * 1% * 15/30 + 500 * 2% = 2.50 + 10.00."""
        late = record.with_changes(actual_payment_date=date(2024, 3, 25))

        charges = late.late_charges(Decimal("0.01"), Decimal("0.02"))

        assert charges == Decimal("12.50")
        assert record.late_charges(Decimal("0.01"), Decimal("0.02")) == Decimal("0")

    def test_frozen(self, record: PaymentRecord) -> None:
        with pytest.raises(AttributeError):
            record.status = PaymentStatus.PAID  # type: ignore[misc]

    def test_edit_command(self) -> None:
        command = EditCommand(row_index=0, field="status", value="PAID")
        assert command.row_index == 0
        assert command.field == "status"


class TestContractParameters:
    """Tests for ContractParameters."""

    def test_empty_contract_missing_everything(self) -> None:
        contract = ContractParameters()

        assert contract.missing_fields() == list(ContractParameters.REQUIRED)
        assert contract.is_valid is False
        assert contract.amortization_system == AmortizationSystem.PRICE

    def test_non_positive_values_are_missing(self, contract: ContractParameters) -> None:
        contract = contract.merge({"financed_amount": Decimal("0"), "term_months": 0})
        assert contract.missing_fields() == ["financed_amount", "term_months"]

    @pytest.mark.parametrize("value", [-1000.0, Decimal("-1"), "5000", Decimal("NaN"), True])
    def test_malformed_constructor_values_are_missing(self, value: object) -> None:
        contract = ContractParameters(
            financed_amount=value,
            contract_rate=Decimal("3"),
            term_months=12,
            first_due_date=date(2024, 1, 10),
        )

        assert contract.missing_fields() == ["financed_amount"]

    def test_due_date_must_be_a_date(self) -> None:
        contract = ContractParameters(
            financed_amount=Decimal("1000"),
            contract_rate=Decimal("3"),
            term_months=12,
            first_due_date="2024-01-10",
        )

        assert contract.missing_fields() == ["first_due_date"]

    def test_merge_normalizes_types(self) -> None:
        contract = ContractParameters().merge(
            {
                "financed_amount": 1500.5,
                "contract_rate": "3.25",
                "market_rate": 2,
                "term_months": "24",
                "first_due_date": "2024-02-15",
                "amortization_system": "SAC",
            }
        )

        assert contract.financed_amount == Decimal("1500.5")
        assert contract.contract_rate == Decimal("3.25")
        assert contract.market_rate == Decimal("2")
        assert contract.term_months == 24
        assert isinstance(contract.term_months, int)
        assert contract.first_due_date == date(2024, 2, 15)
        assert contract.amortization_system == AmortizationSystem.SAC
        assert contract.is_valid

    def test_merge_none_clears_field(self, contract: ContractParameters) -> None:
        merged = contract.merge({"financed_amount": None})

        assert merged.financed_amount is None
        assert merged.missing_fields() == ["financed_amount"]

    @pytest.mark.parametrize(
        "changes",
        [
            {"financed_amount": -1000.0},
            {"financed_amount": "a lot"},
            {"contract_rate": float("nan")},
            {"term_months": 12.5},
            {"term_months": -3},
            {"first_due_date": "10/01/2024"},
            {"amortization_system": "BULLET"},
        ],
    )
    def test_merge_rejects_malformed_values(self, contract: ContractParameters, changes: dict) -> None:
        with pytest.raises(ContractViolation):
            contract.merge(changes)

    def test_valid_contract(self, contract: ContractParameters) -> None:
        assert contract.is_valid
        assert contract.reference_name == "Maria Silva - Banco Horizonte S.A."

    def test_reference_name_placeholders(self) -> None:
        assert ContractParameters().reference_name == "Client - Creditor"

    def test_merge_returns_copy(self, contract: ContractParameters) -> None:
        merged = contract.merge({"term_months": 24})

        assert merged.term_months == 24
        assert contract.term_months == 12

    def test_merge_unknown_field(self, contract: ContractParameters) -> None:
        with pytest.raises(ContractViolation, match="bogus"):
            contract.merge({"bogus": 1})


class TestBaseModels:
    """Tests for Snapshot and Notification."""

    def test_snapshot_defaults(self) -> None:
        snapshot = Snapshot(session_id="s1", step=SnapshotStep.CONTRACT, payload={"a": 1})

        assert snapshot.metadata == {}
        assert snapshot.created_at is not None

    def test_notification_defaults(self) -> None:
        notification = Notification(level=NotificationLevel.INFO, message="hello")

        assert notification.retryable is False
        assert notification.message == "hello"
