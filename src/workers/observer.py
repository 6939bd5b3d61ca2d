"""
Tail Observer - Periodically reports the most recent tokens in the store.

The observer re-reads the whole store on every poll instead of tracking an
offset. Store size is bounded by the run window and the producers' low
write rate, so the full read stays cheap.
"""

from gate import Gate
from log_utils import EventSink
from store import SharedStore

from .base_worker import BaseWorker, CancellationToken

DEFAULT_TAIL_SIZE = 5


class TailObserver(BaseWorker):
    """Reads the store under the gate and logs its last ``tail_size`` tokens."""

    def __init__(
        self,
        gate: Gate,
        store: SharedStore,
        sink: EventSink,
        interval: float = 1.0,
        tail_size: int = DEFAULT_TAIL_SIZE,
        token: CancellationToken | None = None,
        name: str = "TailObserver",
    ):
        super().__init__(name, gate, store, sink, interval, token)
        if tail_size <= 0:
            raise ValueError(f"tail_size must be positive, got {tail_size}")
        self.tail_size = tail_size
        self.last_tail: list[int] = []

    def step(self) -> None:
        with self.gate:
            tokens = self.store.read_all()

        if not tokens:
            self.last_tail = []
            self.sink.info(
                self.name,
                "store_empty",
                f"{self.name}: store is empty, nothing to read yet",
            )
            return

        count = min(self.tail_size, len(tokens))
        self.last_tail = [t.value for t in tokens[-count:]]
        tail_text = " ".join(str(v) for v in self.last_tail)
        self.sink.info(
            self.name,
            "tail_read",
            f"{self.name} read last values: {tail_text}",
            tail=self.last_tail,
            total=len(tokens),
        )
