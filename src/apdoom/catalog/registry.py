from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from .game_tables import BaseGame, GameTables, tables_for
from .models import ItemDef, LevelIndex, LevelInfo

logger = logging.getLogger(__name__)

# <episode, <map, <index, location id>>>, episode and map 1-based
LocationTable = Mapping[int, Mapping[int, Mapping[int, int]]]


class Catalog:
    """
    Read-only content catalog for one game definition.

    Holds the level table (episode-major, map-minor), the item table, the
    location table and sprite names. It is the only authority for converting
    between catalog level indices and the engine's episode/map numbers.
    """

    def __init__(
        self,
        *,
        game_name: str,
        levels: Sequence[Sequence[LevelInfo]],
        items: Mapping[int, ItemDef],
        locations: LocationTable,
        sprites: Mapping[int, str],
        location_types: Set[int] | None = None,
        base_game: BaseGame = BaseGame.DOOM2,
        iwad: str = "",
        pwads: Sequence[str] = (),
        start_health: int = 100,
        start_armor: int = 0,
        max_ammo: Sequence[int] | None = None,
    ) -> None:
        self.game_name = game_name
        self.iwad = iwad
        self.pwads: Tuple[str, ...] = tuple(pwads)
        self.base_game = base_game
        self.tables: GameTables = tables_for(base_game)
        self.start_health = start_health
        self.start_armor = start_armor
        self._levels: Tuple[Tuple[LevelInfo, ...], ...] = tuple(tuple(ep) for ep in levels)
        self._items: Dict[int, ItemDef] = dict(items)
        self._locations: Dict[int, Dict[int, Dict[int, int]]] = {
            ep: {m: dict(idx) for m, idx in maps.items()} for ep, maps in locations.items()
        }
        self._sprites: Dict[int, str] = dict(sprites)
        self._location_types: Set[int] = set(location_types or ())

        if max_ammo is not None and len(max_ammo) == self.tables.ammo_count:
            self.default_max_ammo: Tuple[int, ...] = tuple(int(v) for v in max_ammo)
        else:
            self.default_max_ammo = self.tables.default_max_ammo

        self._by_game_number: Dict[Tuple[int, int], LevelIndex] = {}
        for idx in self.levels():
            info = self._levels[idx.ep][idx.map]
            self._by_game_number.setdefault((info.game_episode, info.game_map), idx)

        self._location_lookup: Dict[int, Tuple[LevelIndex, int]] = {}
        for ep, maps in sorted(self._locations.items()):
            for m, indices in sorted(maps.items()):
                for index, loc_id in sorted(indices.items()):
                    self._location_lookup.setdefault(loc_id, (LevelIndex(ep - 1, m - 1), index))

    # Levels

    @property
    def episode_count(self) -> int:
        return len(self._levels)

    def map_count(self, ep: int) -> int:
        """Number of maps in zero-based episode ``ep`` (0 if there is no such episode)."""
        if ep < 0 or ep >= len(self._levels):
            return 0
        return len(self._levels[ep])

    @property
    def max_map_count(self) -> int:
        return max((len(ep) for ep in self._levels), default=0)

    def levels(self) -> Iterator[LevelIndex]:
        """Iterate every level in catalog order."""
        for ep, maps in enumerate(self._levels):
            for m in range(len(maps)):
                yield LevelIndex(ep, m)

    def episode_levels(self, ep: int) -> List[LevelIndex]:
        return [LevelIndex(ep, m) for m in range(self.map_count(ep))]

    def has_level(self, idx: LevelIndex) -> bool:
        return 0 <= idx.ep < len(self._levels) and 0 <= idx.map < len(self._levels[idx.ep])

    def level_info(self, idx: LevelIndex) -> LevelInfo:
        if not self.has_level(idx):
            raise KeyError(f"Unknown level index: {idx}")
        return self._levels[idx.ep][idx.map]

    def try_make_level_index(self, game_episode: int, game_map: int) -> Optional[LevelIndex]:
        return self._by_game_number.get((game_episode, game_map))

    def make_level_index(self, game_episode: int, game_map: int) -> LevelIndex:
        idx = self.try_make_level_index(game_episode, game_map)
        if idx is None:
            logger.error("Episode %d, Map %d isn't in the Archipelago level table!", game_episode, game_map)
            return LevelIndex(0, 0)
        return idx

    def index_to_ep(self, idx: LevelIndex) -> int:
        return self.level_info(idx).game_episode

    def index_to_map(self, idx: LevelIndex) -> int:
        return self.level_info(idx).game_map

    def original_music(self, idx: LevelIndex) -> int:
        info = self.level_info(idx)
        return self.tables.original_music(idx.ep + 1, idx.map + 1, self.map_count(idx.ep), info.game_map)

    # Items and locations

    def item(self, item_id: int) -> Optional[ItemDef]:
        return self._items.get(item_id)

    def location_id(self, idx: LevelIndex, index: int) -> Optional[int]:
        return self._locations.get(idx.ep + 1, {}).get(idx.map + 1, {}).get(index)

    def find_location(self, location_id: int) -> Optional[Tuple[LevelIndex, int]]:
        return self._location_lookup.get(location_id)

    def locations(self) -> Iterator[Tuple[LevelIndex, int, int]]:
        """Iterate ``(level, index, location id)`` sorted by episode, map, index."""
        for ep, maps in sorted(self._locations.items()):
            for m, indices in sorted(maps.items()):
                for index, loc_id in sorted(indices.items()):
                    yield LevelIndex(ep - 1, m - 1), index, loc_id

    def sprite(self, doom_type: int) -> Optional[str]:
        return self._sprites.get(doom_type)

    def is_location_type(self, doom_type: int) -> bool:
        return doom_type in self._location_types
