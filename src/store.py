"""
Shared Store - Append-only sequence of integer tokens backed by a flat file.

The file holds whitespace-separated decimal integers, e.g. ``"42 7 18 "``.
Only this module writes it, so every fragment read back parses as an int.

All operations except reset() require the caller to hold the gate; the
store checks this on each call rather than taking the gate itself.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gate import Gate, GateNotHeldError

logger = logging.getLogger(__name__)

SEPARATOR = " "


class StoreError(Exception):
    """I/O failure of the backing medium."""


class Parity(str, Enum):
    EVEN = "even"
    ODD = "odd"

    @classmethod
    def of(cls, value: int) -> "Parity":
        return cls.EVEN if value % 2 == 0 else cls.ODD


@dataclass(frozen=True)
class Token:
    """A single integer value written to the store."""

    value: int

    @property
    def parity(self) -> Parity:
        return Parity.of(self.value)

    def encode(self) -> str:
        return str(self.value)

    @classmethod
    def decode(cls, text: str) -> "Token":
        return cls(int(text))

    def __str__(self) -> str:
        return self.encode()


class SharedStore:
    """File-backed token store guarded by an externally owned gate."""

    def __init__(self, path: str | Path, gate: Gate):
        self.path = Path(path)
        self.gate = gate

    def _require_gate(self, operation: str) -> None:
        if not self.gate.held_by_current_thread():
            raise GateNotHeldError(f"{operation}() called without holding the gate")

    def reset(self) -> None:
        """Truncate the backing file to empty. Called once before any task starts."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("", encoding="ascii")
        except OSError as e:
            raise StoreError(f"Cannot reset store {self.path}: {e}") from e
        logger.debug(f"Store reset: {self.path}")

    def append(self, token: Token) -> None:
        """Append the token's text followed by one separator."""
        self._require_gate("append")
        try:
            with self.path.open("a", encoding="ascii") as fh:
                fh.write(token.encode() + SEPARATOR)
        except OSError as e:
            raise StoreError(f"Cannot append {token} to {self.path}: {e}") from e

    def read_all(self) -> list[Token]:
        """Return every stored token in append order. A missing file reads as empty."""
        self._require_gate("read_all")
        if not self.path.exists():
            return []
        try:
            content = self.path.read_text(encoding="ascii")
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StoreError(f"Store {self.path} holds non-ASCII bytes: {e}") from e
        try:
            return [Token.decode(part) for part in content.split()]
        except ValueError as e:
            raise StoreError(f"Store {self.path} holds a malformed token: {e}") from e

    def size(self) -> int:
        """Size of the backing file in bytes (0 if it does not exist yet)."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0
