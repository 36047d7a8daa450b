from __future__ import annotations

import os

import pytest

from vt5app.prefs import PreferenceStore, sqlite_path


def test_put_and_get(prefs):
    assert prefs.get("missing") is None
    assert prefs.get("missing", "fallback") == "fallback"

    prefs.put("site", "Breskens")
    prefs.put("site", "Westkapelle")

    assert prefs.get("site") == "Westkapelle"


def test_get_and_increment(prefs):
    assert prefs.get_and_increment("counter", 5) == 5
    assert prefs.get_and_increment("counter", 5) == 6
    assert prefs.get_int("counter", 0) == 7


def test_failed_session_rolls_back(prefs):
    prefs.put("key", "before")

    with pytest.raises(RuntimeError):
        with prefs.session_scope(immediate=True) as session:
            session.execute("UPDATE preferences SET value = ? WHERE key = ?", ("after", "key"))
            raise RuntimeError("abort")

    assert prefs.get("key") == "before"


def test_sqlite_urls(tmp_path):
    assert sqlite_path(f"sqlite:///{tmp_path / 'prefs.db'}") == str(tmp_path / "prefs.db")
    assert sqlite_path("sqlite:///prefs.db") == os.path.abspath("prefs.db")
    assert sqlite_path("sqlite:///:memory:") == ":memory:"
    with pytest.raises(ValueError):
        PreferenceStore("mysql://localhost/vt5")
