"""Access to the VT5 document tree.

Layout::

    <documents>/VT5/
        assets/  serverdata/  counts/  exports/  binaries/
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

ROOT_NAME = "VT5"
ASSETS = "assets"
SERVERDATA = "serverdata"
COUNTS = "counts"
EXPORTS = "exports"
BINARIES = "binaries"
SUBFOLDERS = (ASSETS, SERVERDATA, COUNTS, EXPORTS, BINARIES)


class StorageRoot:
    def __init__(self, documents_dir: Optional[Path | str]) -> None:
        self.documents_dir = Path(documents_dir) if documents_dir else None

    @property
    def path(self) -> Optional[Path]:
        if self.documents_dir is None:
            return None
        return self.documents_dir / ROOT_NAME

    def vt5_dir_if_exists(self) -> Optional[Path]:
        path = self.path
        if path is None or not path.is_dir():
            return None
        return path

    def probe_root_exists(self) -> bool:
        """Short existence check, safe to call before any index work."""
        return self.vt5_dir_if_exists() is not None

    def subdir_if_exists(self, name: str) -> Optional[Path]:
        root = self.vt5_dir_if_exists()
        if root is None:
            return None
        sub = root / name
        return sub if sub.is_dir() else None

    def folders_exist(self) -> bool:
        root = self.vt5_dir_if_exists()
        if root is None:
            return False
        return all((root / name).is_dir() for name in SUBFOLDERS)

    def ensure_folders(self) -> bool:
        """Create VT5 and its sub folders when missing (idempotent)."""
        path = self.path
        if path is None:
            return False
        for name in SUBFOLDERS:
            (path / name).mkdir(parents=True, exist_ok=True)
        logger.info("VT5 folder structure present at %s", path)
        return True

    def __repr__(self) -> str:
        return f"StorageRoot({self.path!s})"


__all__ = ["ASSETS", "BINARIES", "COUNTS", "EXPORTS", "SERVERDATA", "SUBFOLDERS", "StorageRoot"]
