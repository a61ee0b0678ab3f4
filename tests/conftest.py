"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterator
from unittest.mock import patch

import pytest

from loan_recon.collaborators import EngineResult
from loan_recon.config import LoanReconConfig, PersistenceConfig
from loan_recon.exceptions import ExternalComputationFailure
from loan_recon.generators.engine import add_months
from loan_recon.models import BaselineKPIs, ContractParameters, ScheduleLine, Snapshot
from loan_recon.session import StageOrchestrator
from loan_recon.store import PaymentRecordStore


class StubEngine:
    """Amortization engine returning a fixed schedule, or failing on demand."""

    def __init__(self, schedule: list[ScheduleLine], kpis: BaselineKPIs) -> None:
        self.schedule = schedule
        self.kpis = kpis
        self.calls: list[ContractParameters] = []
        self.fail_with: Exception | None = None

    def compute(self, contract: ContractParameters) -> EngineResult:
        self.calls.append(contract)
        if self.fail_with is not None:
            raise self.fail_with
        return EngineResult(schedule=list(self.schedule), kpis=self.kpis)


class RecordingPersistence:
    """Persistence collaborator keeping every snapshot it receives."""

    def __init__(self) -> None:
        self.snapshots: list[Snapshot] = []
        self.fail = False

    def save(self, snapshot: Snapshot) -> bool:
        if self.fail:
            raise ConnectionError("storage unavailable")
        self.snapshots.append(snapshot)
        return True

    def steps(self) -> list[str]:
        return [s.step.value for s in self.snapshots]


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function: Callable[..., None], args: tuple = ()) -> None:
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback as the timer thread would, even after a cancel."""
        self.function(*self.args)


@pytest.fixture
def timers() -> Iterator[list[FakeTimer]]:
    """Every timer a Debouncer creates, in creation order."""
    created: list[FakeTimer] = []

    def factory(*args: Any, **kwargs: Any) -> FakeTimer:
        timer = FakeTimer(*args, **kwargs)
        created.append(timer)
        return timer

    with patch("loan_recon.session.debounce.threading.Timer", side_effect=factory):
        yield created


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def schedule() -> list[ScheduleLine]:
    """Twelve monthly installments of 500.00."""
    first = date(2024, 1, 10)
    return [
        ScheduleLine(sequence_number=n, due_date=add_months(first, n - 1), contract_amount=Decimal("500.00"))
        for n in range(1, 13)
    ]


@pytest.fixture
def store(schedule: list[ScheduleLine]) -> PaymentRecordStore:
    """Store seeded with default records."""
    return PaymentRecordStore.from_schedule(schedule)


@pytest.fixture
def kpis() -> BaselineKPIs:
    """Baseline KPIs without aggregate totals."""
    return BaselineKPIs(
        original_installment_amount=Decimal("500.00"),
        fair_installment_amount=Decimal("420.00"),
        contract_rate=Decimal("4.5"),
        market_rate=Decimal("3.0"),
    )


@pytest.fixture
def contract() -> ContractParameters:
    """Complete contract parameters."""
    return ContractParameters(
        financed_amount=Decimal("5000.00"),
        contract_rate=Decimal("4.5"),
        term_months=12,
        first_due_date=date(2024, 1, 10),
        market_rate=Decimal("3.0"),
        debtor="Maria Silva",
        creditor="Banco Horizonte S.A.",
        contract_number="CT-0001-000001",
    )


@pytest.fixture
def engine(schedule: list[ScheduleLine], kpis: BaselineKPIs) -> StubEngine:
    """Engine stub returning the twelve-row schedule."""
    return StubEngine(schedule, kpis)


@pytest.fixture
def persistence() -> RecordingPersistence:
    """Persistence stub that records snapshots."""
    return RecordingPersistence()


@pytest.fixture
def config() -> LoanReconConfig:
    """Config with a long debounce so autosaves only fire when flushed."""
    return LoanReconConfig(persistence=PersistenceConfig(contract_debounce_seconds=60.0))


@pytest.fixture
def engine_failure() -> Exception:
    """Failure raised by the engine stub."""
    return ExternalComputationFailure("engine timed out")


def contract_fields(contract: ContractParameters) -> dict[str, Any]:
    """Contract fields as keyword arguments for ``update_contract``."""
    return {
        "financed_amount": contract.financed_amount,
        "contract_rate": contract.contract_rate,
        "term_months": contract.term_months,
        "first_due_date": contract.first_due_date,
        "market_rate": contract.market_rate,
        "debtor": contract.debtor,
        "creditor": contract.creditor,
    }


@pytest.fixture
def new_session(
    engine: StubEngine, persistence: RecordingPersistence, config: LoanReconConfig
) -> Iterator[StageOrchestrator]:
    """Session in DATA_ENTRY with no contract data yet."""
    session = StageOrchestrator(engine, persistence=persistence, session_id="sess-001", config=config)
    yield session
    session.close()


@pytest.fixture
def session(new_session: StageOrchestrator, contract: ContractParameters) -> StageOrchestrator:
    """Session already advanced to RECONCILIATION with twelve default rows."""
    new_session.update_contract(**contract_fields(contract))
    assert new_session.advance_to_reconciliation()
    new_session.notifications.drain()
    return new_session


@pytest.fixture
def contract_changes(contract: ContractParameters) -> dict[str, Any]:
    """The contract fixture as ``update_contract`` keyword arguments."""
    return contract_fields(contract)
