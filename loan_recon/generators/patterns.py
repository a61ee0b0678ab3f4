"""Realistic payment histories expressed as edit commands."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Iterable

from loan_recon.models.enums import PaymentStatus
from loan_recon.models.payment import EditCommand, PaymentRecord


class PaymentBehavior:
    """Simulate how a borrower actually paid the past-due installments."""

    BEHAVIORS = ["good", "occasional_late", "chronic_late", "renegotiated", "defaulter"]

    def __init__(self, seed: int | None = None) -> None:
        if seed is not None:
            random.seed(seed)

    def commands_for(
        self,
        records: Iterable[PaymentRecord],
        reference_date: date | None = None,
        behavior: str | None = None,
        weights: list[float] | None = None,
    ) -> list[EditCommand]:
        """Edit commands that record payments up to ``reference_date``.

        Parameters
        ----------
        records : Iterable[PaymentRecord]
            Records in store order; row indices follow this order.
        reference_date : date | None
            Installments due after this date stay OPEN (default: today).
        behavior : str | None
            Force one of ``BEHAVIORS``; drawn at random when omitted.
        weights : list[float] | None
            Draw weights for ``BEHAVIORS``.

        Returns
        -------
        list[EditCommand]
            Commands in row order, status last for each row.
        """
        if reference_date is None:
            reference_date = date.today()
        if behavior is None:
            behavior = random.choices(
                self.BEHAVIORS,
                weights=weights or [0.55, 0.20, 0.10, 0.05, 0.10],
                k=1,
            )[0]
        if behavior not in self.BEHAVIORS:
            raise ValueError(f"Unknown payment behavior {behavior!r}")

        commands: list[EditCommand] = []
        stop_after = random.randint(2, 6)

        for row_index, record in enumerate(records):
            if record.due_date > reference_date:
                continue

            if behavior == "good":
                delay = random.randint(0, 3)
                status = PaymentStatus.PAID
            elif behavior == "occasional_late":
                delay = random.randint(0, 5) if random.random() < 0.8 else random.randint(10, 30)
                status = PaymentStatus.PAID if delay <= 5 else PaymentStatus.LATE
            elif behavior == "chronic_late":
                delay = random.randint(5, 45)
                status = PaymentStatus.LATE
            elif behavior == "renegotiated":
                delay = 0
                status = PaymentStatus.RENEGOTIATED if record.sequence_number > stop_after else PaymentStatus.PAID
            else:  # defaulter
                if record.sequence_number > stop_after:
                    continue
                delay = random.randint(0, 15)
                status = PaymentStatus.PAID if delay <= 5 else PaymentStatus.LATE

            paid_date = record.due_date + timedelta(days=delay)
            if paid_date != record.actual_payment_date:
                commands.append(EditCommand(row_index, "actual_payment_date", paid_date))
            commands.append(EditCommand(row_index, "status", status))

        return commands
