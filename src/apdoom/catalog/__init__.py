"""Content catalog: static level, item and location tables for one game definition."""

from .game_tables import BaseGame, GameTables, tables_for
from .loader import Definitions, catalog_from_dict, load_definitions
from .models import ItemDef, LevelIndex, LevelInfo, ThingInfo
from .registry import Catalog

__all__ = [
    "BaseGame",
    "Catalog",
    "Definitions",
    "GameTables",
    "ItemDef",
    "LevelIndex",
    "LevelInfo",
    "ThingInfo",
    "catalog_from_dict",
    "load_definitions",
    "tables_for",
]
