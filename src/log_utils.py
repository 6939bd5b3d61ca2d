"""Logging setup and the shared event sink.

Every task reports through one EventSink instance that is passed to it at
construction. Each event goes to the standard ``logging`` logger named after
the task and, when a logs directory is configured, is appended to the
day's structured log at Logs/<YYYY-MM-DD>.json.
"""

import json
import logging
import threading
from pathlib import Path
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(logs_dir: str | Path, level: str = "INFO") -> None:
    """Configure logging with both console and file handlers."""
    log_dir = Path(logs_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(
                log_dir / "parity_writer.log",
                encoding="utf-8",
            ),
        ],
    )


class EventSink:
    """Single observability sink shared by all tasks.

    Thread-safe: the in-memory event list and the JSON log file are both
    updated under the sink's own lock, independent of the store gate.
    """

    def __init__(self, logs_dir: str | Path | None = None):
        self.logs_dir = Path(logs_dir) if logs_dir else None
        self._lock = threading.Lock()
        self._events: list[dict] = []

        if self.logs_dir:
            self.logs_dir.mkdir(parents=True, exist_ok=True)

    def record(
        self,
        task: str,
        level: int,
        action_type: str,
        message: str,
        **details,
    ) -> dict:
        """Log an event for ``task`` and keep a structured copy of it."""
        now = datetime.now(timezone.utc)
        entry = {
            "timestamp": now.isoformat(),
            "task": task,
            "level": logging.getLevelName(level),
            "action_type": action_type,
            "message": message,
            **details,
        }

        logging.getLogger(task).log(level, message)

        with self._lock:
            self._events.append(entry)
            if self.logs_dir:
                self._persist(entry, now)
        return entry

    def info(self, task: str, action_type: str, message: str, **details) -> dict:
        return self.record(task, logging.INFO, action_type, message, **details)

    def warning(self, task: str, message: str, **details) -> dict:
        return self.record(task, logging.WARNING, "warning", message, **details)

    def error(self, task: str, message: str, cause: BaseException, **details) -> dict:
        return self.record(
            task, logging.ERROR, "error", f"{message}: {cause}",
            error=str(cause), **details,
        )

    def events(self, action_type: str | None = None) -> list[dict]:
        """Return a snapshot of recorded events, optionally filtered by type."""
        with self._lock:
            if action_type is None:
                return list(self._events)
            return [e for e in self._events if e["action_type"] == action_type]

    def _persist(self, entry: dict, now: datetime) -> None:
        log_file = self.logs_dir / f"{now.strftime('%Y-%m-%d')}.json"
        entries = []
        if log_file.exists():
            try:
                entries = json.loads(log_file.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                logging.getLogger(__name__).warning(
                    f"Corrupted log file {log_file.name}, starting fresh"
                )
                entries = []

        entries.append(entry)
        try:
            log_file.write_text(
                json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            logging.getLogger(__name__).error(f"Cannot write event log {log_file.name}: {e}")
