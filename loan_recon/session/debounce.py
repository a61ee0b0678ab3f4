"""Debounced execution for deferred snapshot writes."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` once after a quiet period.

    Each ``schedule`` call cancels the pending timer and restarts it with the
    latest payload, so at most one call is pending per window. After
    ``close`` nothing fires anymore.

    Parameters
    ----------
    delay_seconds : float
        Quiet period before the callback runs.
    callback : Callable[[Any], None]
        Receives the payload of the most recent ``schedule`` call. Runs on
        the timer thread.
    name : str
        Label used in log messages.
    """

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[[Any], None],
        name: str = "debounce",
    ) -> None:
        self.delay_seconds = delay_seconds
        self.name = name
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._payload: Any = None
        self._generation = 0
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, payload: Any) -> bool:
        """(Re)start the timer with ``payload``; False once closed."""
        with self._lock:
            if self._closed:
                logger.debug("%s: schedule after close ignored", self.name)
                return False
            self._cancel_locked()
            self._generation += 1
            self._payload = payload
            self._timer = threading.Timer(self.delay_seconds, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()
        return True

    def flush(self) -> bool:
        """Run the pending call now; False when nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            payload = self._take_locked()
        self._run(payload)
        return True

    def cancel(self) -> bool:
        """Drop the pending call without running it."""
        with self._lock:
            had_pending = self._timer is not None
            self._cancel_locked()
            self._payload = None
        return had_pending

    def close(self) -> None:
        """Cancel any pending call and refuse further scheduling."""
        with self._lock:
            if self._timer is not None:
                logger.debug("%s: pending call cancelled on close", self.name)
            self._cancel_locked()
            self._payload = None
            self._closed = True

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._closed or generation != self._generation or self._timer is None:
                return
            payload = self._take_locked()
        self._run(payload)

    def _run(self, payload: Any) -> None:
        try:
            self._callback(payload)
        except Exception:
            # Timer threads have no caller to propagate to
            logger.exception("%s: debounced call failed", self.name)

    def _take_locked(self) -> Any:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._generation += 1
        payload, self._payload = self._payload, None
        return payload

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
