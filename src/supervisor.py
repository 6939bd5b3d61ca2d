"""
Supervisor - Owns the run lifecycle of the producers and the observer.

The supervisor:
1. Resets the shared store (fatal if it cannot)
2. Starts EvenProducer, OddProducer and TailObserver in their own threads
3. Lets them run for a fixed window
4. Signals cooperative cancellation to all three and joins them
5. Runs the smoke check: the store must not be empty after the run

The supervisor never touches the store outside of reset and the final
smoke check, and it never holds the gate while waiting.
"""

import sys
import signal
import logging
import threading
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config import ConfigError, Settings
from gate import Gate
from log_utils import EventSink, setup_logging
from store import SharedStore, StoreError
from workers import BaseWorker, EvenProducer, OddProducer, TailObserver

logger = logging.getLogger("Supervisor")

SUPERVISOR = "Supervisor"


class StartupError(RuntimeError):
    """The store could not be prepared; the run must not start."""


class SmokeCheckError(RuntimeError):
    """The store is empty after a full run."""


class Supervisor:
    """Starts, times, cancels and joins the three store tasks."""

    def __init__(
        self,
        settings: Settings | None = None,
        store: SharedStore | None = None,
        gate: Gate | None = None,
        sink: EventSink | None = None,
    ):
        self.settings = (settings or Settings()).validate()
        self.gate = gate or (store.gate if store else Gate())
        self.store = store or SharedStore(self.settings.store_path, self.gate)
        if self.store.gate is not self.gate:
            raise ValueError("Store and supervisor must share the same gate")
        self.sink = sink or EventSink()
        self._workers: dict[str, dict] = {}  # name -> {"worker": ..., "thread": ...}
        self._started = False
        self._stopped = False

    def _build_workers(self) -> list[BaseWorker]:
        s = self.settings
        return [
            EvenProducer(self.gate, self.store, self.sink, interval=s.even_interval),
            OddProducer(self.gate, self.store, self.sink, interval=s.odd_interval),
            TailObserver(
                self.gate, self.store, self.sink,
                interval=s.observer_interval, tail_size=s.tail_size,
            ),
        ]

    def _start_worker(self, worker: BaseWorker) -> None:
        """Start a worker in a background thread named after it."""
        thread = threading.Thread(target=worker.run, daemon=True, name=worker.name)
        self._workers[worker.name] = {"worker": worker, "thread": thread}
        thread.start()
        logger.info(f"Worker started: {worker.name}")

    def start(self) -> None:
        """Reset the store, then start all workers."""
        if self._started:
            raise RuntimeError("Supervisor already started")
        try:
            self.store.reset()
        except StoreError as e:
            self.sink.error(SUPERVISOR, "Cannot reset store before launch", e)
            raise StartupError(str(e)) from e

        self._started = True
        for worker in self._build_workers():
            self._start_worker(worker)

    def wait_run_window(self) -> None:
        """Block for the run window; only a process interrupt cuts it short."""
        try:
            time.sleep(self.settings.run_window)
        except KeyboardInterrupt:
            self.sink.warning(SUPERVISOR, "Interrupted while waiting for the run window")

    def stop(self) -> None:
        """Signal cancellation to every worker without waiting.

        Idempotent: safe to call multiple times.
        """
        if self._stopped:
            return
        self._stopped = True

        logger.info("Signalling workers to stop...")
        for name, info in self._workers.items():
            info["worker"].cancel()
            logger.debug(f"Cancellation signalled: {name}")

    def join(self) -> None:
        """Wait for every worker thread to terminate. No timeout.

        An interrupt while joining one worker is logged and joining moves
        on to the next, so every worker is waited for before returning.
        """
        for name, info in self._workers.items():
            thread = info["thread"]
            while thread.is_alive():
                try:
                    thread.join()
                except KeyboardInterrupt:
                    self.sink.warning(
                        SUPERVISOR, f"Interrupted while joining {name}", worker=name
                    )
            logger.info(f"Worker joined: {name}")

    def smoke_check(self) -> int:
        """Verify the store is non-empty. Returns the number of stored tokens."""
        with self.gate:
            try:
                count = len(self.store.read_all())
            except StoreError as e:
                self.sink.error(SUPERVISOR, "Cannot read store for smoke check", e)
                raise SmokeCheckError(f"Store unreadable after run: {e}") from e

        if count == 0:
            raise SmokeCheckError(
                f"Store {self.store.path} is empty after the run; "
                f"run window ({self.settings.run_window}s) is too short"
            )
        self.sink.info(
            SUPERVISOR, "smoke_check_passed",
            f"Smoke check passed: store holds {count} values",
            tokens=count,
        )
        return count

    def get_status(self) -> dict:
        """Return per-worker state and store counters."""
        return {
            "store_path": str(self.store.path),
            "store_bytes": self.store.size(),
            "gate_acquisitions": self.gate.acquisitions,
            "workers": {
                name: {
                    **info["worker"].get_status(),
                    "alive": info["thread"].is_alive(),
                }
                for name, info in self._workers.items()
            },
        }

    def run(self) -> dict:
        """Run the full lifecycle and return the final status."""
        s = self.settings
        logger.info("=" * 60)
        logger.info("Parity Writer - Supervisor Starting")
        logger.info(f"  Store: {self.store.path.resolve()}")
        logger.info(f"  Run window: {s.run_window}s")
        logger.info(
            f"  Intervals: even={s.even_interval}s, odd={s.odd_interval}s, "
            f"observer={s.observer_interval}s"
        )
        logger.info("=" * 60)

        self.start()
        try:
            self.wait_run_window()
        finally:
            self.stop()
            self.join()

        self.smoke_check()
        status = self.get_status()
        self.sink.info(SUPERVISOR, "run_complete", "Run complete, shutting down.")
        return status


def _raise_interrupt(sig, frame):
    raise KeyboardInterrupt


def main():
    """Entry point for the supervisor."""
    try:
        settings = Settings.from_env().validate()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(settings.logs_dir, settings.log_level)

    # SIGTERM interrupts the run window the same way Ctrl+C does
    signal.signal(signal.SIGTERM, _raise_interrupt)

    supervisor = Supervisor(settings, sink=EventSink(settings.logs_dir))
    try:
        supervisor.run()
    except (StartupError, SmokeCheckError) as e:
        logger.critical(f"{e.__class__.__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
