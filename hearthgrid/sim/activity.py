"""Activity log sink shared by the loop and the host UI."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Protocol

from hearthgrid.sim.contracts import LogEntry, Severity

logger = logging.getLogger("hearthgrid.activity")

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.ERROR,
}


class LogSink(Protocol):
    def emit(self, message: str, severity: Severity = Severity.INFO) -> None:
        """Record one activity message."""


class ActivityLog(LogSink):
    """Bounded in-memory activity log mirrored to the stdlib logger.

    Listeners are called synchronously from whichever thread emits, so UI
    listeners must hop onto their own thread. A failing listener is logged
    and skipped; the entry is still recorded.
    """

    def __init__(self, *, limit: int = 500) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=limit)
        self._listeners: list[Callable[[LogEntry], None]] = []
        self._lock = threading.Lock()

    def emit(self, message: str, severity: Severity = Severity.INFO) -> None:
        entry = LogEntry(message=message, severity=severity)
        with self._lock:
            self._entries.append(entry)
            listeners = list(self._listeners)
        logger.log(_LEVELS[severity], "%s", message)
        for listener in listeners:
            try:
                listener(entry)
            except Exception:  # noqa: BLE001
                logger.exception("Activity listener failed")

    def subscribe(self, listener: Callable[[LogEntry], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
