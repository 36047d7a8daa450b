from __future__ import annotations

from pathlib import Path

import pytest

from vt5.storage_root import StorageRoot
from vt5app.prefs import PreferenceStore


@pytest.fixture()
def documents_dir(tmp_path: Path) -> Path:
    return tmp_path / "Documents"


@pytest.fixture()
def vt5_root(documents_dir: Path) -> StorageRoot:
    root = StorageRoot(documents_dir)
    root.ensure_folders()
    return root


@pytest.fixture()
def missing_root(tmp_path: Path) -> StorageRoot:
    return StorageRoot(tmp_path / "absent")


@pytest.fixture()
def prefs(tmp_path: Path) -> PreferenceStore:
    return PreferenceStore(f"sqlite:///{tmp_path / 'prefs.db'}")
