"""Server data read from ``VT5/serverdata`` and its in-memory cache.

Each ``<name>.json`` holds either a bare list, a ``{"json": [...]}`` wrapper or
a single object. Entries that do not validate are skipped and counted.
"""
from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .storage_root import SERVERDATA, StorageRoot
from .text import normalize_canonical


logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)


class _Item(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True, coerce_numbers_to_str=True)


class CheckUserItem(_Item):
    userid: str
    fullname: str
    message: Optional[str] = None


class SpeciesItem(_Item):
    soortid: str
    soortnaam: str
    soortkey: str = ""
    latin: str = ""
    sortering: str = ""


class ProtocolInfoItem(_Item):
    id: str
    protocolid: str
    veld: str
    waarde: Optional[str] = None
    tekst: Optional[str] = None
    sortering: Optional[str] = None


class ProtocolSpeciesItem(_Item):
    id: str
    protocolid: str
    soortid: str
    geslacht: Optional[str] = None
    leeftijd: Optional[str] = None
    kleed: Optional[str] = None


class SiteItem(_Item):
    telpostid: str
    telpostnaam: str
    r1: Optional[str] = None
    r2: Optional[str] = None
    typetelpost: Optional[str] = None
    protocolid: Optional[str] = None


class SiteValueItem(_Item):
    telpostid: str
    waarde: str
    sortering: Optional[str] = None


class SiteSpeciesItem(_Item):
    telpostid: str
    soortid: str


class CodeItem(_Item):
    category: Optional[str] = Field(default=None, alias="veld")
    id: Optional[str] = None
    key: Optional[str] = Field(default=None, alias="tekstkey")
    value: Optional[str] = Field(default=None, alias="waarde")
    tekst: Optional[str] = None
    sortering: Optional[str] = None


@dataclass(frozen=True)
class DataSnapshot:
    current_user: Optional[CheckUserItem] = None
    species_by_id: Mapping[str, SpeciesItem] = field(default_factory=dict)
    species_by_canonical: Mapping[str, str] = field(default_factory=dict)
    sites_by_id: Mapping[str, SiteItem] = field(default_factory=dict)
    site_locations_by_site: Mapping[str, List[SiteValueItem]] = field(default_factory=dict)
    site_heights_by_site: Mapping[str, List[SiteValueItem]] = field(default_factory=dict)
    site_species_by_site: Mapping[str, List[SiteSpeciesItem]] = field(default_factory=dict)
    protocols_info: List[ProtocolInfoItem] = field(default_factory=list)
    protocol_species_by_protocol: Mapping[str, List[ProtocolSpeciesItem]] = field(default_factory=dict)
    codes_by_category: Mapping[str, List[CodeItem]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.species_by_id or self.sites_by_id or self.codes_by_category or self.current_user)


def _group_by(items: List[Any], attr: str, missing: str = "") -> Dict[str, List[Any]]:
    grouped: Dict[str, List[Any]] = defaultdict(list)
    for item in items:
        grouped[getattr(item, attr) or missing].append(item)
    return dict(grouped)


class ServerDataRepository:
    """Reads all server data files below a storage root into one snapshot."""

    def __init__(self, root: StorageRoot) -> None:
        self.root = root
        self._log = logging.getLogger(self.__class__.__name__)

    def load_all(self) -> Optional[DataSnapshot]:
        """Return ``None`` when the serverdata folder is not there (yet)."""
        folder = self.root.subdir_if_exists(SERVERDATA)
        if folder is None:
            return None

        users = self._read_list(folder, "checkuser", CheckUserItem)
        species = self._read_list(folder, "species", SpeciesItem)
        protocol_info = self._read_list(folder, "protocolinfo", ProtocolInfoItem)
        protocol_species = self._read_list(folder, "protocolspecies", ProtocolSpeciesItem)
        sites = self._read_list(folder, "sites", SiteItem)
        site_locations = self._read_list(folder, "site_locations", SiteValueItem)
        site_heights = self._read_list(folder, "site_heights", SiteValueItem)
        site_species = self._read_list(folder, "site_species", SiteSpeciesItem)
        codes = self._read_list(folder, "codes", CodeItem)

        return DataSnapshot(
            current_user=users[0] if users else None,
            species_by_id={sp.soortid: sp for sp in species},
            species_by_canonical={normalize_canonical(sp.soortnaam): sp.soortid for sp in species},
            sites_by_id={site.telpostid: site for site in sites},
            site_locations_by_site=_group_by(site_locations, "telpostid"),
            site_heights_by_site=_group_by(site_heights, "telpostid"),
            site_species_by_site=_group_by(site_species, "telpostid"),
            protocols_info=protocol_info,
            protocol_species_by_protocol=_group_by(protocol_species, "protocolid"),
            codes_by_category=_group_by(codes, "category", missing="uncategorized"),
        )

    def _read_list(self, folder: Path, base_name: str, model: Type[ItemT]) -> List[ItemT]:
        path = folder / f"{base_name}.json"
        if not path.is_file():
            return []
        data = json.loads(path.read_text(encoding="utf-8") or "null")
        if isinstance(data, dict) and isinstance(data.get("json"), list):
            raw_items = data["json"]
        elif isinstance(data, list):
            raw_items = data
        elif isinstance(data, dict):
            raw_items = [data]
        else:
            raw_items = []

        items: List[ItemT] = []
        skipped = 0
        for raw in raw_items:
            try:
                items.append(model.model_validate(raw))
            except ValidationError:
                skipped += 1
        if skipped:
            self._log.warning("Skipped %d invalid entries in %s", skipped, path.name)
        return items


class ServerDataCache:
    """Loads the server data once and serves it from memory afterwards.

    Call :meth:`invalidate` after new server files were downloaded.
    """

    name = "ServerDataCache"

    def __init__(self, repository_factory: Type[ServerDataRepository] = ServerDataRepository) -> None:
        self._repository_factory = repository_factory
        self._cached: Optional[DataSnapshot] = None
        self._lock = threading.Lock()
        self.load_count = 0

    @property
    def cached(self) -> Optional[DataSnapshot]:
        return self._cached

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None

    def ensure_loaded(self, root: StorageRoot) -> bool:
        return self.get_or_load(root) is not None

    def get_or_load(self, root: StorageRoot) -> Optional[DataSnapshot]:
        cached = self._cached
        if cached is not None:
            return cached
        with self._lock:
            if self._cached is not None:
                return self._cached
            snapshot = self._repository_factory(root).load_all()
            if snapshot is None:
                logger.info("Server data not available yet under %s", root.path)
                return None
            self.load_count += 1
            self._cached = snapshot
            logger.info(
                "Server data loaded (species=%d, sites=%d, code categories=%d)",
                len(snapshot.species_by_id),
                len(snapshot.sites_by_id),
                len(snapshot.codes_by_category),
            )
            return snapshot

    def snapshot_or_empty(self, root: StorageRoot) -> DataSnapshot:
        return self.get_or_load(root) or DataSnapshot()


__all__ = [
    "CheckUserItem",
    "CodeItem",
    "DataSnapshot",
    "ProtocolInfoItem",
    "ProtocolSpeciesItem",
    "ServerDataCache",
    "ServerDataRepository",
    "SiteItem",
    "SiteSpeciesItem",
    "SiteValueItem",
    "SpeciesItem",
]
