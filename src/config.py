"""
Settings - Run parameters loaded from environment variables (+ optional .env).

All durations are in seconds. Defaults reproduce the demonstration run:
producers every 0.5s / 0.7s, observer every 1s, for a 10s window.
"""

import os
import math
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

DEFAULT_STORE_PATH = "./numbers.txt"
DEFAULT_LOGS_DIR = "./Logs"
DEFAULT_RUN_WINDOW = 10.0
DEFAULT_EVEN_INTERVAL = 0.5
DEFAULT_ODD_INTERVAL = 0.7
DEFAULT_OBSERVER_INTERVAL = 1.0
DEFAULT_TAIL_SIZE = 5


class ConfigError(ValueError):
    """Run parameters that cannot produce a meaningful run."""


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    store_path: Path = Path(DEFAULT_STORE_PATH)
    logs_dir: Path = Path(DEFAULT_LOGS_DIR)
    log_level: str = "INFO"
    run_window: float = DEFAULT_RUN_WINDOW
    even_interval: float = DEFAULT_EVEN_INTERVAL
    odd_interval: float = DEFAULT_ODD_INTERVAL
    observer_interval: float = DEFAULT_OBSERVER_INTERVAL
    tail_size: int = DEFAULT_TAIL_SIZE

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv(override=False)

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if not isinstance(getattr(logging, log_level, None), int):
            log_level = "INFO"

        return Settings(
            store_path=Path(os.getenv("STORE_PATH", DEFAULT_STORE_PATH)).expanduser(),
            logs_dir=Path(os.getenv("LOGS_DIR", DEFAULT_LOGS_DIR)).expanduser(),
            log_level=log_level,
            run_window=_env_float("RUN_WINDOW_SECONDS", DEFAULT_RUN_WINDOW),
            even_interval=_env_float("EVEN_INTERVAL_SECONDS", DEFAULT_EVEN_INTERVAL),
            odd_interval=_env_float("ODD_INTERVAL_SECONDS", DEFAULT_ODD_INTERVAL),
            observer_interval=_env_float("OBSERVER_INTERVAL_SECONDS", DEFAULT_OBSERVER_INTERVAL),
            tail_size=_env_int("TAIL_SIZE", DEFAULT_TAIL_SIZE),
        )

    def validate(self) -> "Settings":
        """Raise ConfigError unless the run can reliably pass its smoke check."""
        durations = {
            "run_window": self.run_window,
            "even_interval": self.even_interval,
            "odd_interval": self.odd_interval,
            "observer_interval": self.observer_interval,
        }
        for name, value in durations.items():
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive finite duration, got {value}")

        if self.tail_size <= 0:
            raise ConfigError(f"tail_size must be positive, got {self.tail_size}")

        slowest_producer = max(self.even_interval, self.odd_interval)
        if self.observer_interval < slowest_producer:
            raise ConfigError(
                f"observer_interval ({self.observer_interval}s) must not be shorter "
                f"than the producer intervals ({slowest_producer}s)"
            )
        if self.run_window <= slowest_producer:
            raise ConfigError(
                f"run_window ({self.run_window}s) must exceed the slowest "
                f"producer interval ({slowest_producer}s)"
            )
        return self
