"""
Base Worker - Abstract template for tasks that loop over the shared store.

Each worker repeats one step (append or read under the gate), then pauses.
Cancellation is cooperative: it is checked at the top of every iteration
and during the pause, which wakes early when the token is cancelled. An
iteration already in flight (including a pending gate acquisition) is
allowed to finish.
"""

import logging
import math
import threading
from abc import ABC, abstractmethod
from enum import Enum

from gate import Gate
from log_utils import EventSink
from store import SharedStore, StoreError


class TaskState(str, Enum):
    RUNNING = "running"
    CANCEL_REQUESTED = "cancel_requested"
    TERMINATED = "terminated"


class CancellationToken:
    """Cancellation signal shared between a supervisor and one or more workers."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent, never blocks."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Pause for up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout=timeout)


class BaseWorker(ABC):
    """Abstract base class for the store producers and the observer.

    Subclasses must implement:
        - step(): one iteration of work against the store
    """

    def __init__(
        self,
        name: str,
        gate: Gate,
        store: SharedStore,
        sink: EventSink,
        interval: float,
        token: CancellationToken | None = None,
    ):
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"{name} interval must be positive, got {interval}")
        self.name = name
        self.gate = gate
        self.store = store
        self.sink = sink
        self.interval = interval
        self.token = token or CancellationToken()
        self.logger = logging.getLogger(name)
        self._state_lock = threading.Lock()
        self.state = TaskState.RUNNING
        self.iterations = 0
        self.error_count = 0

    @abstractmethod
    def step(self) -> None:
        """Perform one store operation. May raise StoreError."""

    def run(self) -> None:
        """Main loop: step, then pause, until cancelled."""
        self.logger.info(f"Starting {self.name}")
        try:
            while not self.token.is_cancelled():
                try:
                    self.step()
                except StoreError as e:
                    self.error_count += 1
                    self.sink.error(self.name, "Store operation failed", e)
                except Exception as e:
                    self.error_count += 1
                    self.sink.error(self.name, "Unexpected error during iteration", e)
                self.iterations += 1

                if self.token.wait(self.interval):
                    break
        finally:
            with self._state_lock:
                self.state = TaskState.TERMINATED
            self.logger.info(f"{self.name} terminated after {self.iterations} iterations")

    def cancel(self) -> None:
        """Request cooperative shutdown without waiting for it."""
        with self._state_lock:
            if self.state == TaskState.RUNNING:
                self.state = TaskState.CANCEL_REQUESTED
        self.token.cancel()

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            "iterations": self.iterations,
            "error_count": self.error_count,
        }
