"""
Producers - Append random values of a fixed parity to the shared store.

EvenProducer writes values in {0, 2, ..., 98}; OddProducer writes values in
{1, 3, ..., 99}. Both pick uniformly among 50 choices, doubled (plus one for
odd). Their pauses differ (0.5s vs 0.7s) so the two contend unevenly for
the gate.
"""

import random

from gate import Gate
from log_utils import EventSink
from store import Parity, SharedStore, Token

from .base_worker import BaseWorker, CancellationToken

CHOICES = 50


class ParityProducer(BaseWorker):
    """Writes one random token of its parity per iteration."""

    def __init__(
        self,
        name: str,
        parity: Parity,
        gate: Gate,
        store: SharedStore,
        sink: EventSink,
        interval: float,
        token: CancellationToken | None = None,
        seed: int | None = None,
    ):
        super().__init__(name, gate, store, sink, interval, token)
        self.parity = Parity(parity)
        # Private random source, never shared with the other producer
        self._rng = random.Random(seed)
        self.last_value: int | None = None
        self.written = 0

    def generate(self) -> Token:
        value = self._rng.randrange(CHOICES) * 2
        if self.parity is Parity.ODD:
            value += 1
        return Token(value)

    def step(self) -> None:
        token = self.generate()

        with self.gate:
            self.store.append(token)

        self.last_value = token.value
        self.written += 1
        self.sink.info(
            self.name,
            "value_written",
            f"{self.name} wrote {self.parity.value} value: {token.value}",
            value=token.value,
            parity=self.parity.value,
        )

    def get_status(self) -> dict:
        return {**super().get_status(), "written": self.written, "last_value": self.last_value}


class EvenProducer(ParityProducer):
    def __init__(self, gate, store, sink, interval: float = 0.5, **kwargs):
        super().__init__("EvenProducer", Parity.EVEN, gate, store, sink, interval, **kwargs)


class OddProducer(ParityProducer):
    def __init__(self, gate, store, sink, interval: float = 0.7, **kwargs):
        super().__init__("OddProducer", Parity.ODD, gate, store, sink, interval, **kwargs)
