from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Deque, Dict, Iterable, Iterator, List, Mapping, Optional, Set

from ..catalog import BaseGame, Catalog, LevelIndex
from .level import LevelState
from .player import PlayerState

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..settings import SettingsOverrides

logger = logging.getLogger(__name__)

# Only the first five episodes can be toggled from slot data
SLOT_DATA_EPISODES = 5
# Map index of the boss level checked by the "complete episode bosses" goal
BOSS_MAP_INDEX = 7


@dataclass
class SessionOptions:
    """Game options decided by the server (or overridden locally)."""

    goal: int = 0
    difficulty: int = 0
    random_monsters: int = 0
    random_items: int = 0
    random_music: int = 0
    flip_levels: int = 0
    check_sanity: bool = False
    reset_level_on_death: int = 0
    two_ways_keydoors: int = 0


@dataclass
class SessionState:
    """
    Everything about the session that must survive a restart.

    Level states are keyed by :class:`LevelIndex` and kept in catalog order.
    ``item_queue`` holds server item ids whose in-game delivery is waiting for
    the player to be in a level. ``received_item_count`` is how many of the
    server's received items were applied without a gap, and
    ``received_item_indices`` holds the indices past that gap that the server
    delivered early.
    """

    player: PlayerState
    levels: Dict[LevelIndex, LevelState]
    episodes: List[bool]
    max_ammo_start: List[int]
    max_ammo_add: List[int]
    options: SessionOptions = field(default_factory=SessionOptions)
    ep: int = 0
    map: int = 0
    victory: bool = False
    item_queue: Deque[int] = field(default_factory=deque)
    progressive_locations: Set[int] = field(default_factory=set)
    received_item_count: int = 0
    received_item_indices: Set[int] = field(default_factory=set)

    @classmethod
    def new(cls, catalog: Catalog) -> "SessionState":
        tables = catalog.tables
        player = PlayerState.new(
            weapon_count=tables.weapon_count,
            ammo_count=tables.ammo_count,
            powerup_count=tables.powerup_count,
            inventory_count=tables.inventory_count,
            start_health=catalog.start_health,
            start_armor=catalog.start_armor,
        )
        return cls(
            player=player,
            levels={idx: LevelState() for idx in catalog.levels()},
            episodes=[False] * catalog.episode_count,
            max_ammo_start=list(catalog.default_max_ammo),
            max_ammo_add=list(catalog.default_max_ammo),
        )

    # Queries

    def level(self, idx: LevelIndex) -> LevelState:
        try:
            return self.levels[idx]
        except KeyError as exc:
            raise KeyError(f"Unknown level index: {idx}") from exc

    def is_episode_enabled(self, ep: int) -> bool:
        return 0 <= ep < len(self.episodes) and self.episodes[ep]

    def enabled_levels(self) -> Iterator[LevelIndex]:
        for idx in self.levels:
            if self.is_episode_enabled(idx.ep):
                yield idx

    def highest_episode(self) -> int:
        highest = 0
        for ep, enabled in enumerate(self.episodes):
            if enabled:
                highest = ep
        return highest

    def boss_level(self, ep: int) -> Optional[LevelIndex]:
        """Boss level of an episode; its last map when the episode is shorter."""
        boss = LevelIndex(ep, BOSS_MAP_INDEX)
        if boss in self.levels:
            return boss
        maps = [idx for idx in self.levels if idx.ep == ep]
        return max(maps, key=lambda idx: idx.map) if maps else None

    def uses_boss_goal(self, base_game: BaseGame) -> bool:
        return self.options.goal == 1 and base_game in (BaseGame.DOOM, BaseGame.HERETIC)

    def goal_reached(self, base_game: BaseGame) -> bool:
        if self.uses_boss_goal(base_game):
            for ep, enabled in enumerate(self.episodes):
                if not enabled:
                    continue
                boss = self.boss_level(ep)
                if boss is None or not self.levels[boss].completed:
                    return False
            return True
        return all(self.levels[idx].completed for idx in self.enabled_levels())

    # Mutators

    def check_location(self, idx: LevelIndex, index: int) -> bool:
        """Record a checked location. Calling it again with the same arguments is a no-op."""
        return self.level(idx).record_check(index)

    def is_item_received(self, index: int) -> bool:
        return index < self.received_item_count or index in self.received_item_indices

    def mark_item_received(self, index: int) -> bool:
        """Record a server item index as applied. Returns False if it already was."""
        if index < 0 or self.is_item_received(index):
            return False
        self.received_item_indices.add(index)
        self._compact_received()
        return True

    def merge_received_items(self, count: int, indices: Iterable[int] = ()) -> None:
        """Fold in a stored received count and out-of-order indices."""
        self.received_item_count = max(self.received_item_count, count)
        self.received_item_indices.update(i for i in indices if i >= 0)
        self._compact_received()

    def _compact_received(self) -> None:
        indices = self.received_item_indices
        while self.received_item_count in indices:
            indices.discard(self.received_item_count)
            self.received_item_count += 1
        for index in [i for i in indices if i < self.received_item_count]:
            indices.discard(index)

    def recalc_max_ammo(self) -> None:
        self.player.recalc_max_ammo(self.max_ammo_start, self.max_ammo_add)

    def ensure_episode_enabled(self) -> bool:
        """Enable the first episode when none is. Returns True if it had to."""
        if any(self.episodes) or not self.episodes:
            return False
        logger.info("No episode selected, selecting episode 1")
        self.episodes[0] = True
        return True

    def apply_overrides(self, overrides: Optional["SettingsOverrides"]) -> None:
        if overrides is None:
            return
        opts = self.options
        if overrides.skill is not None:
            opts.difficulty = overrides.skill
        if overrides.monster_rando is not None:
            opts.random_monsters = overrides.monster_rando
        if overrides.item_rando is not None:
            opts.random_items = overrides.item_rando
        if overrides.music_rando is not None:
            opts.random_music = overrides.music_rando
        if overrides.flip_levels is not None:
            opts.flip_levels = overrides.flip_levels
        if overrides.reset_level_on_death is not None:
            opts.reset_level_on_death = overrides.reset_level_on_death

    def apply_slot_data(self, data: Mapping[str, Any], overrides: Optional["SettingsOverrides"] = None) -> None:
        """Apply server slot data; values overridden locally are left alone."""

        def get(key: str) -> Optional[int]:
            value = data.get(key)
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, int):
                return value
            return None

        def overridden(attr: str) -> bool:
            return overrides is not None and getattr(overrides, attr) is not None

        opts = self.options
        simple = {
            "goal": ("goal", None),
            "difficulty": ("difficulty", "skill"),
            "random_monsters": ("random_monsters", "monster_rando"),
            "random_pickups": ("random_items", "item_rando"),
            "random_music": ("random_music", "music_rando"),
            "flip_levels": ("flip_levels", "flip_levels"),
            "reset_level_on_death": ("reset_level_on_death", "reset_level_on_death"),
            "two_ways_keydoors": ("two_ways_keydoors", None),
        }
        for key, (attr, override_attr) in simple.items():
            value = get(key)
            if value is None or (override_attr and overridden(override_attr)):
                continue
            setattr(opts, attr, value)

        sanity = get("check_sanity")
        if sanity is not None:
            opts.check_sanity = bool(sanity)

        for i in range(min(SLOT_DATA_EPISODES, len(self.episodes))):
            value = get(f"episode{i + 1}")
            if value is not None:
                self.episodes[i] = bool(value)

        for i in range(len(self.max_ammo_start)):
            start = get(f"ammo{i + 1}start")
            if start is not None and start > 0:
                self.max_ammo_start[i] = start
            add = get(f"ammo{i + 1}add")
            if add is not None and add > 0:
                self.max_ammo_add[i] = add
