from __future__ import annotations

from typing import Protocol

from .storage_root import StorageRoot


class Preloadable(Protocol):
    """Contract for subsystems warmed up at process start.

    ``ensure_loaded`` must be idempotent and safe to call from several threads:
    the first caller does the work, later or concurrent callers observe the
    loaded state. It returns ``False`` when the data is not available yet
    (for example a missing storage root) and may raise on real failures.
    """

    name: str

    def ensure_loaded(self, root: StorageRoot) -> bool:
        ...


__all__ = ["Preloadable"]
