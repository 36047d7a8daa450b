"""In-memory alias matcher used by speech recognition.

Loads ``binaries/aliases_optimized.json.gz`` once and builds three lookup
layers: normalised text, Koelner Phonetik code and first-character buckets.
"""
from __future__ import annotations

import gzip
import logging
import threading
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Tuple

from .models import AliasIndex, AliasRecord
from ..storage_root import BINARIES, StorageRoot
from ..text import cologne_phonetic, normalize_lower_no_diacritics


logger = logging.getLogger(__name__)

ALIASES_FILE = "aliases_optimized.json.gz"


class AliasMatcher:
    name = "AliasMatcher"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._alias_map: Optional[Dict[str, List[AliasRecord]]] = None
        self._phonetic_map: Optional[Dict[str, List[str]]] = None
        self._first_char_buckets: Optional[Dict[str, List[str]]] = None
        self._missing_warned = False
        self.build_count = 0

    @property
    def is_loaded(self) -> bool:
        return self._alias_map is not None

    def ensure_loaded(self, root: StorageRoot) -> bool:
        """Load the index once; concurrent callers wait for the first load."""
        if self._alias_map is not None:
            return True
        with self._lock:
            if self._alias_map is not None:
                return True
            index = self._read_index(root)
            if index is None:
                return False
            self._build_maps(index)
            logger.info(
                "AliasMatcher index loaded (records=%d, keys=%d)",
                len(index.records),
                len(self._alias_map or {}),
            )
            return True

    def reload(self, root: StorageRoot) -> bool:
        with self._lock:
            self._alias_map = None
            self._phonetic_map = None
            self._first_char_buckets = None
            self._missing_warned = False
        return self.ensure_loaded(root)

    def _read_index(self, root: StorageRoot) -> Optional[AliasIndex]:
        binaries = root.subdir_if_exists(BINARIES)
        path = binaries / ALIASES_FILE if binaries is not None else None
        if path is None or not path.is_file():
            if not self._missing_warned:
                self._missing_warned = True
                logger.warning("Alias index not found under %s; matcher stays unloaded", root.path)
            return None
        with gzip.open(path, "rb") as fh:
            payload = fh.read()
        return AliasIndex.model_validate_json(payload)

    def _build_maps(self, index: AliasIndex) -> None:
        alias_map: Dict[str, List[AliasRecord]] = {}
        phonetic_map: Dict[str, List[str]] = {}
        buckets: Dict[str, List[str]] = {}
        for record in index.records:
            keys = {record.norm, record.alias}
            for key in keys:
                if not key:
                    continue
                if key not in alias_map:
                    buckets.setdefault(key[0], []).append(key)
                alias_map.setdefault(key, []).append(record)
            code = record.cologne or cologne_phonetic(record.norm)
            if code:
                phonetic_map.setdefault(code, []).append(record.norm)
        self._phonetic_map = phonetic_map
        self._first_char_buckets = buckets
        self.build_count += 1
        # published last: readers use it as the "loaded" flag
        self._alias_map = alias_map

    # Lookups ------------------------------------------------------------
    def find_exact(self, phrase: str) -> List[AliasRecord]:
        alias_map = self._alias_map
        if not alias_map:
            return []
        hits = alias_map.get(normalize_lower_no_diacritics(phrase.strip()))
        if hits:
            return list(hits)
        return list(alias_map.get(phrase.strip().lower(), []))

    def find_fuzzy(self, phrase: str, top_n: int = 6, threshold: float = 0.40) -> List[Tuple[AliasRecord, float]]:
        """Score candidates sharing the first character by text and phonetic similarity."""
        alias_map = self._alias_map
        buckets = self._first_char_buckets
        if not alias_map or not buckets:
            return []
        query = normalize_lower_no_diacritics(phrase)
        if not query:
            return []
        query_code = cologne_phonetic(query)
        max_diff = max(2, len(query) // 3)

        scored: List[Tuple[AliasRecord, float]] = []
        for key in buckets.get(query[0], []):
            if abs(len(key) - len(query)) > max_diff:
                continue
            text_sim = SequenceMatcher(None, query, key).ratio()
            phon_sim = SequenceMatcher(None, query_code, cologne_phonetic(key)).ratio() if query_code else 0.0
            score = min(1.0, 0.6 * text_sim + 0.4 * phon_sim)
            if score < threshold:
                continue
            scored.extend((record, score) for record in alias_map[key])
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:top_n]

    def phonetic_candidates(self, phrase: str) -> List[str]:
        phonetic_map = self._phonetic_map or {}
        return list(phonetic_map.get(cologne_phonetic(phrase), []))


__all__ = ["ALIASES_FILE", "AliasMatcher"]
