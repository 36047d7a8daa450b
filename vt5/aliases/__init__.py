from .manager import AliasManager
from .matcher import AliasMatcher
from .models import AliasIndex, AliasMaster, AliasRecord, SpeciesAliases

__all__ = ["AliasIndex", "AliasManager", "AliasMaster", "AliasMatcher", "AliasRecord", "SpeciesAliases"]
