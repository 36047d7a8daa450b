from __future__ import annotations

import threading
from typing import Protocol

from .entities import TellingId


TELLING_ID_KEY = "telling_id"

_issue_lock = threading.Lock()


class CounterStore(Protocol):
    def get_and_increment(self, key: str, default: int) -> int:
        """Atomically return the stored value (``default`` if absent) and persist value + 1."""
        ...


class TellingIdGenerator:
    """Issues strictly increasing, persisted count ids.

    Issuance is serialised process-wide; storage errors propagate because a
    caller that needs a unique id cannot continue without one.
    """

    def __init__(self, store: CounterStore, key: str = TELLING_ID_KEY) -> None:
        self.store = store
        self.key = key

    def next_id(self) -> TellingId:
        with _issue_lock:
            current = self.store.get_and_increment(self.key, 1)
        return str(current)


__all__ = ["CounterStore", "TELLING_ID_KEY", "TellingIdGenerator"]
