from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import CatalogError
from .game_tables import BaseGame
from .models import ItemDef, LevelInfo, ThingInfo
from .registry import Catalog

logger = logging.getLogger(__name__)

# Guards against malformed definitions rather than a real engine limit
MAX_THING = 10240

DEFAULT_DEFS_DIR = Path("defs")


def _pad3(v: List[bool]) -> List[bool]:
    values = [bool(x) for x in (v or [])][:3]
    return values + [False] * (3 - len(values))


class LevelDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., alias="_name", description="Display name, e.g. 'Hangar (E1M1)'")
    game_map: List[int] = Field(..., min_length=2, max_length=2, description="[game episode, game map]")
    key: List[bool] = Field(default_factory=list)
    use_skull: List[bool] = Field(default_factory=list)
    thing_list: List[Union[int, List[Any]]] = Field(default_factory=list)

    @field_validator("key", "use_skull")
    @classmethod
    def three_flags(cls, v: List[bool]) -> List[bool]:
        return _pad3(v)

    @field_validator("thing_list")
    @classmethod
    def check_things(cls, v: List[Union[int, List[Any]]]) -> List[Union[int, List[Any]]]:
        if len(v) > MAX_THING:
            raise ValueError(f"Too many things! The max is {MAX_THING}")
        for thing in v:
            if isinstance(thing, list) and (len(thing) < 2 or isinstance(thing[0], bool) or not isinstance(thing[0], int)):
                raise ValueError("Location things must be [doom_type, check_sanity]")
        return v

    def to_level_info(self) -> LevelInfo:
        things = []
        for index, thing in enumerate(self.thing_list):
            if isinstance(thing, list):
                # Locations are stored as [doomednum, check sanity]
                things.append(ThingInfo(int(thing[0]), index, bool(thing[1]), False))
            else:
                things.append(ThingInfo(int(thing), index, False, True))
        return LevelInfo(
            name=self.name,
            game_episode=self.game_map[0],
            game_map=self.game_map[1],
            keys=tuple(_pad3(self.key)),  # type: ignore[arg-type]
            use_skull=tuple(_pad3(self.use_skull)),  # type: ignore[arg-type]
            things=tuple(things),
        )


class AmmoDefinition(BaseModel):
    name: str
    max: int = Field(..., ge=0)


class GameInfoDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ammo: List[AmmoDefinition] = Field(default_factory=list)
    starting_health: int = 100
    starting_armor: int = 0


class Definitions(BaseModel):
    """Schema of a ``defs/<game>.json`` definitions file (the parts the core reads)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    game_name: str = Field(..., alias="_game_name")
    iwad: str = Field(..., alias="_iwad")
    pwads: List[str] = Field(default_factory=list, alias="_pwads")
    location_types: List[int] = Field(..., alias="ap_location_types")
    type_sprites: Dict[int, str]
    item_table: Dict[int, List[int]]
    location_table: Dict[int, Dict[int, Dict[int, int]]]
    level_info: List[List[LevelDefinition]]
    game_info: Optional[GameInfoDefinition] = None

    @field_validator("item_table")
    @classmethod
    def items_have_doom_type(cls, v: Dict[int, List[int]]) -> Dict[int, List[int]]:
        for item_id, value in v.items():
            if not value:
                raise ValueError(f"Item {item_id} has no doom type")
        return v

    def to_catalog(self) -> Catalog:
        items = {}
        for item_id, value in self.item_table.items():
            ep = value[1] if len(value) > 1 else -1
            map_ = value[2] if len(value) > 2 else -1
            items[item_id] = ItemDef(item_id=item_id, doom_type=value[0], ep=ep, map=map_)

        levels = [[lvl.to_level_info() for lvl in ep] for ep in self.level_info]
        game_info = self.game_info or GameInfoDefinition()
        return Catalog(
            game_name=self.game_name,
            iwad=self.iwad,
            pwads=self.pwads,
            base_game=BaseGame.from_iwad(self.iwad),
            levels=levels,
            items=items,
            locations=self.location_table,
            sprites=self.type_sprites,
            location_types=set(self.location_types),
            start_health=game_info.starting_health,
            start_armor=game_info.starting_armor,
            max_ammo=[a.max for a in game_info.ammo] if game_info.ammo else None,
        )


def catalog_from_dict(data: Dict[str, Any]) -> Catalog:
    """Validate an already decoded definitions document and build the catalog."""
    try:
        defs = Definitions.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid definitions: {e}") from e
    catalog = defs.to_catalog()
    logger.info(
        "Loaded definitions for %s (%s): %d episodes, %d items, %d sprites",
        catalog.game_name,
        catalog.base_game.value,
        catalog.episode_count,
        len(defs.item_table),
        len(defs.type_sprites),
    )
    return catalog


def load_definitions(game_name: str, defs_dir: Optional[Path] = None) -> Catalog:
    """Load ``<defs_dir>/<game_name>.json`` into a :class:`Catalog`.

    Raises:
        CatalogError: if the file is missing, is not JSON, or fails validation.
    """
    path = Path(defs_dir or DEFAULT_DEFS_DIR) / f"{game_name}.json"
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Can't find a definitions file for {game_name!r} in {path.parent}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path}: {e}") from e
    logger.debug("Loaded definitions from %s", path)
    return catalog_from_dict(data)
