"""
Gate - The single mutual-exclusion lock guarding the shared store.

Every store operation (append, full read) must happen while the calling
thread owns the gate. Use it as a context manager so the gate is released
on every exit path, including when the store raises:

    with gate:
        store.append(token)
"""

import threading


class GateNotHeldError(RuntimeError):
    """Raised when a store operation or release happens without owning the gate."""


class Gate:
    """Binary lock that remembers which thread currently owns it."""

    def __init__(self):
        self._lock = threading.Lock()
        self._owner: int | None = None
        self.acquisitions = 0

    def acquire(self) -> None:
        """Block until the gate is free, then take exclusive ownership."""
        self._lock.acquire()
        self._owner = threading.get_ident()
        self.acquisitions += 1

    def release(self) -> None:
        """Give up ownership, waking one waiting thread (no fairness order)."""
        if self._owner != threading.get_ident():
            raise GateNotHeldError("Gate released by a thread that does not own it")
        self._owner = None
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    def held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def __enter__(self) -> "Gate":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
