from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class WeatherCache:
    """A small thread-safe TTL cache for weather snapshots."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic) -> None:
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._storage.get(key)
            if not item:
                return None
            expires_at, value = item
            if expires_at < self._time_func():
                self._storage.pop(key, None)
                return None
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._storage[key] = (self._time_func() + ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()


__all__ = ["WeatherCache"]
