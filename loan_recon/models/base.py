"""Base models shared across the session and the sinks."""

from dataclasses import dataclass, field
from datetime import datetime

from loan_recon.models.enums import NotificationLevel, SnapshotStep


@dataclass
class Snapshot:
    """Partial session snapshot handed to the persistence collaborator."""

    session_id: str
    step: SnapshotStep
    payload: dict
    created_at: datetime = field(default_factory=datetime.now)
    metadata: dict = field(default_factory=dict)


@dataclass
class Notification:
    """Non-blocking, user-visible message raised by the session."""

    level: NotificationLevel
    message: str
    retryable: bool = False
    created_at: datetime = field(default_factory=datetime.now)
