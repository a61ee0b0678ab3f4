"""Ordered, immutable store of payment records for one reconciliation session."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Iterator, Mapping

from loan_recon.exceptions import ContractViolation
from loan_recon.models.enums import PaymentStatus
from loan_recon.models.payment import PaymentRecord, ScheduleLine


class PaymentRecordStore:
    """Single source of truth for reconciliation state.

    The store never mutates: every change produces a new store that shares
    the untouched record objects with its predecessor, so downstream code can
    detect changed rows by identity.

    Parameters
    ----------
    records : Iterable[PaymentRecord]
        Records ordered by sequence number, starting at 1 with no gaps.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[PaymentRecord] = ()) -> None:
        self._records: tuple[PaymentRecord, ...] = tuple(records)
        for position, record in enumerate(self._records, start=1):
            if record.sequence_number != position:
                raise ContractViolation(
                    f"Sequence numbers must be contiguous from 1: expected {position}, "
                    f"got {record.sequence_number}"
                )

    @classmethod
    def from_schedule(cls, schedule: Iterable[ScheduleLine]) -> PaymentRecordStore:
        """Seed a store with default records from the baseline schedule."""
        return cls(PaymentRecord.from_schedule(line) for line in schedule)

    @property
    def records(self) -> tuple[PaymentRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PaymentRecord]:
        return iter(self._records)

    def __getitem__(self, row_index: int) -> PaymentRecord:
        return self._records[self.check_index(row_index)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaymentRecordStore):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"PaymentRecordStore({len(self._records)} records)"

    def check_index(self, row_index: int) -> int:
        """Validate a 0-based row index.

        Raises
        ------
        ContractViolation
            If the index is not an int within ``[0, len)``.
        """
        if isinstance(row_index, bool) or not isinstance(row_index, int):
            raise ContractViolation(f"Row index must be an int, got {row_index!r}")
        if not 0 <= row_index < len(self._records):
            raise ContractViolation(
                f"Row index {row_index} out of range [0, {len(self._records)})"
            )
        return row_index

    def replace_records(self, changes: Mapping[int, PaymentRecord]) -> PaymentRecordStore:
        """Return a new store with the rows in ``changes`` swapped in.

        Rows not in ``changes`` keep the same object.
        """
        for row_index, record in changes.items():
            self.check_index(row_index)
            if record.sequence_number != self._records[row_index].sequence_number:
                raise ContractViolation(
                    f"Row {row_index} cannot change sequence number "
                    f"{self._records[row_index].sequence_number} -> {record.sequence_number}"
                )
        return PaymentRecordStore(
            changes.get(index, record) for index, record in enumerate(self._records)
        )

    # Query methods
    def edited_count(self) -> int:
        return sum(1 for r in self._records if r.edited)

    def count_by_status(self) -> dict[PaymentStatus, int]:
        """Number of records per status, every status present."""
        counts = {status: 0 for status in PaymentStatus}
        for record in self._records:
            counts[record.status] += 1
        return counts

    def contract_total(self) -> Decimal:
        return sum((r.contract_amount for r in self._records), Decimal("0"))

    def page_count(self, page_size: int) -> int:
        if page_size <= 0:
            raise ContractViolation(f"page_size must be positive, got {page_size}")
        return max(1, -(-len(self._records) // page_size))

    def page(self, page_index: int, page_size: int) -> list[tuple[int, PaymentRecord]]:
        """Return ``(row_index, record)`` pairs for one grid page."""
        if not 0 <= page_index < self.page_count(page_size):
            raise ContractViolation(f"Page {page_index} out of range")
        start = page_index * page_size
        return list(enumerate(self._records))[start : start + page_size]

    def summary(self) -> dict[str, int | Decimal]:
        """Grid footer counts and totals.

        ``paid_total`` only counts rows marked PAID, the figure shown under
        the grid, which is distinct from the comparative ``amount_paid``.
        """
        paid = [r for r in self._records if r.status == PaymentStatus.PAID]
        return {
            "total_rows": len(self._records),
            "edited_rows": self.edited_count(),
            "paid_rows": len(paid),
            "contract_total": self.contract_total(),
            "paid_total": sum((r.actual_amount_paid for r in paid), Decimal("0")),
        }
