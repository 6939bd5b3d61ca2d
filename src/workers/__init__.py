from .base_worker import BaseWorker, CancellationToken, TaskState
from .producers import EvenProducer, OddProducer, ParityProducer
from .observer import TailObserver

__all__ = [
    "BaseWorker",
    "CancellationToken",
    "TaskState",
    "EvenProducer",
    "OddProducer",
    "ParityProducer",
    "TailObserver",
]
