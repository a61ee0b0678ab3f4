"""Reconciliation session: stage orchestration, autosave and notifications."""

from loan_recon.session.debounce import Debouncer
from loan_recon.session.notifications import NotificationCenter
from loan_recon.session.orchestrator import StageOrchestrator

__all__ = ["Debouncer", "NotificationCenter", "StageOrchestrator"]
