"""Admission control for writes made on behalf of a waiting caller.

A caller that stops waiting closes its gate. Repositories pass the gate
right before their single atomic write, so a write that has not started by
then never happens, and one that has started is reported to the caller.
"""

import threading
from contextvars import ContextVar
from typing import Optional

from withdrawals.domain.errors import StorageUnavailable


class WriteGate:
    """One-shot switch shared by a caller and the thread doing its work."""

    def __init__(self):
        self._lock = threading.Lock()
        self._closed = False
        self._entered = False

    def enter(self, operation: str) -> None:
        with self._lock:
            if self._closed:
                raise StorageUnavailable(f"Caller stopped waiting before '{operation}' could write")
            self._entered = True

    def close(self) -> bool:
        """Refuse later writes. Returns True if a write was already admitted."""
        with self._lock:
            self._closed = True
            return self._entered


current_gate: ContextVar[Optional[WriteGate]] = ContextVar("current_gate", default=None)


def enter_write(operation: str) -> None:
    """Pass the active gate, if any, before writing."""
    gate = current_gate.get()
    if gate is not None:
        gate.enter(operation)
