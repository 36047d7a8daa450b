from __future__ import annotations

import gzip
import json
from pathlib import Path

from vt5.storage_root import StorageRoot


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def write_alias_index(root: StorageRoot, records: list[dict]) -> Path:
    path = root.path / "binaries" / "aliases_optimized.json.gz"
    with gzip.open(path, "wt", encoding="utf-8") as fh:
        json.dump({"json": records}, fh)
    return path


SPECIES = [
    {"soortid": "20", "soortnaam": "Buizerd", "soortkey": "buizerd", "latin": "Buteo buteo"},
    {"soortid": "31", "soortnaam": "Vink", "soortkey": "vink", "latin": "Fringilla coelebs"},
]

ALIAS_RECORDS = [
    {
        "aliasid": "1",
        "speciesid": "20",
        "canonical": "buizerd",
        "tilename": "Buizerd",
        "alias": "buizerd",
        "norm": "buizerd",
        "weight": 1.0,
    },
    {
        "aliasid": "2",
        "speciesid": "31",
        "canonical": "vink",
        "alias": "vinkje",
        "norm": "vinkje",
        "weight": 0.5,
    },
]
