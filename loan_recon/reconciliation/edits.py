"""Row edit controller: single-cell edits, bulk status edits and reset.

The module-level functions are pure: they take a store and return a new
one. ``RowEditController`` wraps them and emits the recompute signal once
the new store is complete.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable

from loan_recon.exceptions import ContractViolation
from loan_recon.models.enums import PaymentStatus
from loan_recon.models.payment import EDITABLE_FIELDS, EditCommand
from loan_recon.models.values import coerce_date, coerce_money
from loan_recon.reconciliation.selection import SelectionSet
from loan_recon.store.records import PaymentRecordStore

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("actual_amount_paid", "extra_amortization")

RecomputeListener = Callable[[PaymentRecordStore], None]


def coerce_status(value: Any) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError as exc:
        raise ContractViolation(f"Unknown payment status {value!r}") from exc


def coerce_field_value(field: str, value: Any) -> Any:
    """Validate ``value`` for an editable ``field``.

    Raises
    ------
    ContractViolation
        If the field is not editable or the value does not fit it.
    """
    if field not in EDITABLE_FIELDS:
        raise ContractViolation(
            f"Field {field!r} is not editable, expected one of {EDITABLE_FIELDS}"
        )
    if field in MONEY_FIELDS:
        return coerce_money(value)
    if field == "actual_payment_date":
        return coerce_date(value)
    return coerce_status(value)


def apply_edit(store: PaymentRecordStore, command: EditCommand) -> PaymentRecordStore:
    """Apply a single-cell edit.

    Parameters
    ----------
    store : PaymentRecordStore
        Current store.
    command : EditCommand
        Row index, editable field and new value.

    Returns
    -------
    PaymentRecordStore
        New store; only the addressed record is a new object and its
        ``edited`` flag is recomputed against the schedule defaults.
    """
    row_index = store.check_index(command.row_index)
    value = coerce_field_value(command.field, command.value)
    updated = store[row_index].with_changes(**{command.field: value})
    return store.replace_records({row_index: updated})


def apply_bulk_status(
    store: PaymentRecordStore,
    selection: SelectionSet,
    status: PaymentStatus | str,
) -> tuple[PaymentRecordStore, SelectionSet]:
    """Set ``status`` on every selected row.

    Each touched row is flagged ``edited`` since the user reviewed it
    explicitly. An empty selection returns the same store.

    Returns
    -------
    tuple[PaymentRecordStore, SelectionSet]
        New store and the emptied selection.
    """
    target = coerce_status(status)
    if not selection:
        return store, SelectionSet()

    changes = {
        row_index: replace(store[row_index], status=target, edited=True)
        for row_index in sorted(selection)
    }
    return store.replace_records(changes), SelectionSet()


def reset_store(store: PaymentRecordStore) -> PaymentRecordStore:
    """Restore every record to its schedule defaults (full replacement)."""
    return PaymentRecordStore(record.reset() for record in store)


class RowEditController:
    """Apply edits and notify subscribers that derived figures are stale.

    Signals are delivered synchronously, after the new store is fully
    built, so a listener never sees a partially applied bulk edit.
    """

    def __init__(self) -> None:
        self._listeners: list[RecomputeListener] = []

    def subscribe(self, listener: RecomputeListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: RecomputeListener) -> None:
        self._listeners.remove(listener)

    def edit(self, store: PaymentRecordStore, command: EditCommand) -> PaymentRecordStore:
        new_store = apply_edit(store, command)
        logger.debug(
            "Row %d field %s set to %r (edited=%s)",
            command.row_index,
            command.field,
            command.value,
            new_store[command.row_index].edited,
        )
        self._emit(new_store)
        return new_store

    def bulk_set_status(
        self,
        store: PaymentRecordStore,
        selection: SelectionSet,
        status: PaymentStatus | str,
    ) -> tuple[PaymentRecordStore, SelectionSet]:
        new_store, cleared = apply_bulk_status(store, selection, status)
        if new_store is store:
            logger.debug("Bulk status edit with empty selection ignored")
            return new_store, cleared
        logger.info("%d installments set to %s", len(selection), coerce_status(status).value)
        self._emit(new_store)
        return new_store, cleared

    def reset(self, store: PaymentRecordStore) -> PaymentRecordStore:
        new_store = reset_store(store)
        logger.info("Edits reset on %d installments", len(new_store))
        self._emit(new_store)
        return new_store

    def _emit(self, store: PaymentRecordStore) -> None:
        for listener in list(self._listeners):
            listener(store)
