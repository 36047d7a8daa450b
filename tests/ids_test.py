from __future__ import annotations

import threading

import pytest

from vt5.ids import TELLING_ID_KEY, TellingIdGenerator
from vt5app.prefs import PreferenceStore, PreferenceStoreError


def test_first_id_is_one_and_next_is_persisted(prefs):
    generator = TellingIdGenerator(prefs)

    assert generator.next_id() == "1"
    assert generator.next_id() == "2"
    assert prefs.get_int(TELLING_ID_KEY, 0) == 3


def test_ids_survive_a_new_store_instance(prefs):
    TellingIdGenerator(prefs).next_id()

    reopened = PreferenceStore(prefs.url)

    assert TellingIdGenerator(reopened).next_id() == "2"


def test_continues_from_stored_counter(prefs):
    prefs.put(TELLING_ID_KEY, "41")

    assert TellingIdGenerator(prefs).next_id() == "41"


def test_concurrent_ids_are_unique_and_contiguous(prefs):
    generator = TellingIdGenerator(prefs)
    results: list[str] = []
    results_lock = threading.Lock()
    start = threading.Barrier(16)

    def worker() -> None:
        start.wait()
        for _ in range(10):
            issued = generator.next_id()
            with results_lock:
                results.append(issued)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 160
    assert len(set(results)) == 160
    assert sorted(int(value) for value in results) == list(range(1, 161))


def test_store_errors_propagate(tmp_path):
    store = PreferenceStore(f"sqlite:///{tmp_path / 'missing' / 'prefs.db'}")

    with pytest.raises(PreferenceStoreError):
        TellingIdGenerator(store).next_id()
