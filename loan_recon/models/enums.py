"""Enumeration types for the reconciliation domain."""

from enum import Enum


class PaymentStatus(str, Enum):
    PAID = "PAID"
    OPEN = "OPEN"
    RENEGOTIATED = "RENEGOTIATED"
    LATE = "LATE"


# Statuses counted once a reconciliation has begun
RESOLVED_STATUSES = frozenset(
    {PaymentStatus.PAID, PaymentStatus.LATE, PaymentStatus.RENEGOTIATED}
)


class ViewMode(str, Enum):
    PROJECTED = "PROJECTED"
    RECONCILED = "RECONCILED"


class Stage(str, Enum):
    DATA_ENTRY = "DATA_ENTRY"
    RECONCILIATION = "RECONCILIATION"
    RESULT = "RESULT"


class SnapshotStep(str, Enum):
    CONTRACT = "contract"
    RECONCILIATION = "reconciliation"
    RESULT = "result"


class AbuseLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AmortizationSystem(str, Enum):
    SAC = "SAC"
    PRICE = "PRICE"


class NotificationLevel(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
