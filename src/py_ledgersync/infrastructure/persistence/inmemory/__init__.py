from .clock import FixedClock, SystemClock
from .stores import InMemorySequenceStore, InMemorySyncKeyStore
from .uow import InMemoryUnitOfWork

__all__ = [
    "FixedClock",
    "SystemClock",
    "InMemorySequenceStore",
    "InMemorySyncKeyStore",
    "InMemoryUnitOfWork",
]
