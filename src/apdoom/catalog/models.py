from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, order=True)
class LevelIndex:
    """Zero-based (episode, map) position of a level in the catalog.

    This is never the number the engine uses for a level (``E1M1``, ``MAP07``);
    go through :class:`apdoom.catalog.Catalog` to convert between the two.
    """

    ep: int
    map: int

    def __str__(self) -> str:
        return f"({self.ep}, {self.map})"


@dataclass(frozen=True)
class ThingInfo:
    """A single map thing as listed in the definitions."""

    doom_type: int
    index: int
    check_sanity: bool = False
    unreachable: bool = True


@dataclass(frozen=True)
class LevelInfo:
    """Static description of one level. Built once, never mutated."""

    name: str
    game_episode: int
    game_map: int
    keys: Tuple[bool, bool, bool] = (False, False, False)
    use_skull: Tuple[bool, bool, bool] = (False, False, False)
    things: Tuple[ThingInfo, ...] = field(default_factory=tuple)

    @property
    def thing_count(self) -> int:
        return len(self.things)

    @property
    def check_count(self) -> int:
        """Number of reachable location things."""
        return sum(1 for t in self.things if not t.unreachable)

    @property
    def sanity_check_count(self) -> int:
        """Number of location things only present with check sanity on."""
        return sum(1 for t in self.things if t.check_sanity)

    def total_check_count(self, check_sanity: bool) -> int:
        if check_sanity:
            return self.check_count
        return self.check_count - self.sanity_check_count

    @property
    def short_name(self) -> str:
        """The ``(E1M1)`` part of the name, or the whole name if there is none."""
        pos = self.name.find("(")
        if pos == -1:
            return self.name
        return self.name[pos:]


@dataclass(frozen=True)
class ItemDef:
    """What a server item id means in game: a doom type, optionally bound to a level.

    ``ep`` and ``map`` are 1-based catalog numbers, ``-1`` when the item is
    not level bound.
    """

    item_id: int
    doom_type: int
    ep: int = -1
    map: int = -1

    @property
    def level_bound(self) -> bool:
        return self.ep != -1 and self.map != -1

    @property
    def level_index(self) -> LevelIndex:
        return LevelIndex(self.ep - 1, self.map - 1)
