"""In-memory store holding the reconciliation records of a session."""

from loan_recon.store.records import PaymentRecordStore

__all__ = ["PaymentRecordStore"]
