from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .catalog import BaseGame, Catalog, LevelIndex

logger = logging.getLogger(__name__)

FLIP_NONE = 0
FLIP_ALL = 1
FLIP_RANDOM = 2

MUSIC_OFF = 0
MUSIC_SELECTED_EPISODES = 1
MUSIC_GLOBAL = 2

_MASK64 = (1 << 64) - 1


def hash_seed(text: str) -> int:
    """64-bit djb2 (``h * 33 + c``) over the UTF-8 bytes of ``text``.

    Stable across platforms and runs, unlike :func:`hash`.
    """
    h = 5381
    for c in text.encode("utf-8"):
        h = ((h << 5) + h + c) & _MASK64
    return h


@dataclass
class SeededRNG:
    """
    Deterministic RNG wrapper around random.Random.

    One instance is created per session from the seed string; every
    derivation draws from it in a fixed order so a seed replays the same game.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    @classmethod
    def from_text(cls, text: str) -> "SeededRNG":
        return cls(hash_seed(text))

    def randrange(self, n: int) -> int:
        """Return a random integer in [0, n)."""
        if n <= 0:
            raise ValueError("Cannot draw from an empty range")
        return self._rng.randrange(n)

    def coin(self) -> bool:
        return self.randrange(2) == 1


def derive_level_flips(catalog: Catalog, mode: int, rng: SeededRNG) -> Dict[LevelIndex, bool]:
    """Flip flag for every level. Mode 2 draws once per level, in catalog order."""
    if mode == FLIP_ALL:
        logger.info("All levels flipped")
        return {idx: True for idx in catalog.levels()}
    if mode == FLIP_RANDOM:
        logger.info("Levels randomly flipped")
        return {idx: rng.coin() for idx in catalog.levels()}
    return {idx: False for idx in catalog.levels()}


def derive_music_assignment(
    catalog: Catalog,
    episodes: Sequence[bool],
    mode: int,
    rng: SeededRNG,
) -> Dict[LevelIndex, int]:
    """Music id for every level.

    Levels start with their original music. With shuffling on, the original
    tracks of the eligible levels (enabled episodes, or every level in global
    mode) form a pool, and each level of an enabled episode draws one track
    from it without replacement.
    """
    music = {idx: catalog.original_music(idx) for idx in catalog.levels()}
    if mode <= MUSIC_OFF:
        return music

    def enabled(ep: int) -> bool:
        return 0 <= ep < len(episodes) and bool(episodes[ep])

    pool: List[int] = [music[idx] for idx in catalog.levels() if enabled(idx.ep) or mode == MUSIC_GLOBAL]

    logger.info("Random Music:")
    for idx in catalog.levels():
        if not enabled(idx.ep):
            continue
        if not pool:
            logger.warning("Music pool exhausted at %s; keeping original track", idx)
            break
        mus = pool.pop(rng.randrange(len(pool)))
        music[idx] = mus
        logger.info("  %s = %s", _level_label(catalog, idx), _music_label(catalog, mus))
    return music


def _level_label(catalog: Catalog, idx: LevelIndex) -> str:
    if catalog.base_game is BaseGame.DOOM2:
        return f"MAP{catalog.index_to_map(idx):02d}"
    return f"E{catalog.index_to_ep(idx)}M{catalog.index_to_map(idx)}"


def _music_label(catalog: Catalog, mus: int) -> str:
    per_ep = max(catalog.max_map_count, 1)
    if catalog.base_game is BaseGame.DOOM:
        return f"E{(mus - 1) // per_ep + 1}M{(mus - 1) % per_ep + 1}"
    if catalog.base_game is BaseGame.DOOM2:
        return f"MAP{mus - 51:02d}"
    return f"E{mus // per_ep + 1}M{mus % per_ep + 1}"
