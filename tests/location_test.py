from __future__ import annotations

from typing import Optional

from vt5.entities import Location
from vt5.location import FixFileLocationProvider, default_providers, select_best_location

from .helpers import write_json


class StaticProvider:
    def __init__(self, name: str, location: Optional[Location]) -> None:
        self.name = name
        self._location = location
        self.calls = 0

    def last_known(self) -> Optional[Location]:
        self.calls += 1
        return self._location


class BrokenProvider:
    name = "broken"

    def last_known(self) -> Optional[Location]:
        raise PermissionError("location permission revoked")


def test_most_recent_fix_wins():
    older = Location(52.0, 4.0, timestamp=1_000)
    newer = Location(53.0, 5.0, timestamp=2_000)

    assert select_best_location([StaticProvider("network", older), StaticProvider("gps", newer)]) == newer
    assert select_best_location([StaticProvider("network", newer), StaticProvider("gps", older)]) == newer


def test_equal_timestamps_keep_first_provider():
    first = Location(52.0, 4.0, timestamp=1_000)
    second = Location(53.0, 5.0, timestamp=1_000)

    assert select_best_location([StaticProvider("network", first), StaticProvider("gps", second)]) == first


def test_failing_provider_is_skipped():
    fix = Location(52.0, 4.0, timestamp=1_000)
    gps = StaticProvider("gps", fix)

    assert select_best_location([BrokenProvider(), gps]) == fix
    assert gps.calls == 1


def test_no_fix_returns_none():
    assert select_best_location([]) is None
    assert select_best_location([StaticProvider("network", None), BrokenProvider()]) is None


def test_fix_files(tmp_path):
    write_json(tmp_path / "network.json", {"latitude": 52.37, "longitude": 4.89, "timestamp": 1_700_000_000_000})
    write_json(tmp_path / "gps.json", {"latitude": 52.38, "longitude": 4.90, "timestamp": 1_700_000_060_000})

    providers = default_providers(tmp_path)

    assert [provider.name for provider in providers] == ["network", "gps"]
    assert select_best_location(providers) == Location(52.38, 4.90, 1_700_000_060_000)


def test_unreadable_fix_file_counts_as_no_fix(tmp_path):
    (tmp_path / "network.json").write_text("[]", encoding="utf-8")

    assert FixFileLocationProvider(tmp_path, "gps").last_known() is None
    assert select_best_location(default_providers(tmp_path)) is None
