"""Secondary alias index keyed by species.

Load priority:
1. ``assets/alias_master.json``
2. seed built from ``serverdata/species.json`` (canonical names only),
   written back to ``assets/alias_master.json`` for the next start.
"""
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import AliasIndex, AliasMaster, AliasRecord, SpeciesAliases
from ..storage_root import ASSETS, SERVERDATA, StorageRoot
from ..text import normalize_lower_no_diacritics


MASTER_FILE = "alias_master.json"


class AliasManager:
    name = "AliasManager"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._index: Optional[AliasIndex] = None
        self._by_species: Dict[str, List[AliasRecord]] = {}
        self._by_norm: Dict[str, AliasRecord] = {}
        self._log = logging.getLogger(self.__class__.__name__)
        self.build_count = 0

    def is_index_loaded(self) -> bool:
        return self._index is not None

    def loaded_index(self) -> Optional[AliasIndex]:
        return self._index

    def ensure_index_loaded(self, root: StorageRoot) -> bool:
        if self._index is not None:
            self._log.debug("ensure_index_loaded: already loaded")
            return True
        with self._lock:
            if self._index is not None:
                self._log.debug("ensure_index_loaded: already loaded (inside lock)")
                return True
            master = self._read_master(root)
            if master is None:
                master = self._seed_from_species(root)
            if master is None:
                self._log.warning("Alias index unavailable: no %s and no species data", MASTER_FILE)
                return False
            index = master.to_alias_index()
            self._publish(index)
            self._log.info("Built alias index (species=%d, records=%d)", len(self._by_species), len(index.records))
            return True

    ensure_loaded = ensure_index_loaded

    def species_for(self, phrase: str) -> Optional[str]:
        record = self._by_norm.get(normalize_lower_no_diacritics(phrase))
        return record.speciesid if record else None

    def aliases_for(self, species_id: str) -> List[AliasRecord]:
        return list(self._by_species.get(species_id.lower(), []))

    def _publish(self, index: AliasIndex) -> None:
        by_species: Dict[str, List[AliasRecord]] = {}
        by_norm: Dict[str, AliasRecord] = {}
        for record in index.records:
            by_species.setdefault(record.speciesid, []).append(record)
            current = by_norm.get(record.norm)
            if current is None or record.weight > current.weight:
                by_norm[record.norm] = record
        self._by_species = by_species
        self._by_norm = by_norm
        self.build_count += 1
        self._index = index

    def _read_master(self, root: StorageRoot) -> Optional[AliasMaster]:
        assets = root.subdir_if_exists(ASSETS)
        if assets is None:
            return None
        path = assets / MASTER_FILE
        if not path.is_file():
            return None
        return AliasMaster.model_validate_json(path.read_bytes())

    def _seed_from_species(self, root: StorageRoot) -> Optional[AliasMaster]:
        serverdata = root.subdir_if_exists(SERVERDATA)
        species_path = serverdata / "species.json" if serverdata is not None else None
        if species_path is None or not species_path.is_file():
            return None
        data = json.loads(species_path.read_text(encoding="utf-8") or "null")
        items = data.get("json", []) if isinstance(data, dict) else (data or [])
        species = [
            SpeciesAliases(
                species_id=str(item["soortid"]),
                canonical=str(item["soortnaam"]),
                tilename=item.get("soortkey") or None,
            )
            for item in items
            if isinstance(item, dict) and item.get("soortid") and item.get("soortnaam")
        ]
        master = AliasMaster(timestamp=datetime.now(timezone.utc).isoformat(), species=species)
        assets = root.subdir_if_exists(ASSETS)
        if assets is not None:
            (assets / MASTER_FILE).write_text(
                master.model_dump_json(by_alias=True, indent=2),
                encoding="utf-8",
            )
            self._log.info("Seeded %s from species.json (species=%d)", MASTER_FILE, len(species))
        return master


__all__ = ["AliasManager", "MASTER_FILE"]
