from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..text import cologne_phonetic, normalize_lower_no_diacritics


class AliasRecord(BaseModel):
    """One spoken alias for a species. Everything lowercase except ``tilename``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    aliasid: str
    speciesid: str
    canonical: str
    tilename: Optional[str] = None
    alias: str
    norm: str
    cologne: Optional[str] = None
    phonemes: Optional[str] = None
    weight: float = 1.0


class AliasIndex(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    json_: List[AliasRecord] = Field(default_factory=list, alias="json")

    @property
    def records(self) -> List[AliasRecord]:
        return self.json_


class SpeciesAliases(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    species_id: str = Field(alias="speciesId")
    canonical: str
    tilename: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)


class AliasMaster(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: str = "2.1"
    timestamp: Optional[str] = None
    species: List[SpeciesAliases] = Field(default_factory=list)

    def to_alias_index(self) -> AliasIndex:
        records: List[AliasRecord] = []
        for entry in self.species:
            seen = set()
            texts = [entry.canonical, *entry.aliases]
            if entry.tilename:
                texts.append(entry.tilename)
            for text in texts:
                norm = normalize_lower_no_diacritics(text)
                if not norm or norm in seen:
                    continue
                seen.add(norm)
                records.append(
                    AliasRecord(
                        aliasid=str(len(seen)),
                        speciesid=entry.species_id.lower(),
                        canonical=entry.canonical.lower(),
                        tilename=entry.tilename,
                        alias=text.strip().lower(),
                        norm=norm,
                        cologne=cologne_phonetic(norm) or None,
                    )
                )
        return AliasIndex(json=records)


__all__ = ["AliasIndex", "AliasMaster", "AliasRecord", "SpeciesAliases"]
