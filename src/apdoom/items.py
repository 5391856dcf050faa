"""Item effects: what receiving a server item does to the session state.

Every catalog item maps to exactly one effect variant. Effects only touch
the core's own bookkeeping (keys, capacity, unlocks...); actually handing the
pickup to the player is the game's job and happens on delivery.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .catalog import Catalog, ItemDef
from .catalog.game_tables import (
    BACKPACK_DOOM_TYPE,
    CAPACITY_UPGRADE_FIRST,
    CAPACITY_UPGRADE_LAST,
    LEVEL_COMPLETE_DOOM_TYPE,
    LEVEL_UNLOCK_DOOM_TYPE,
)
from .state import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityUpgradeAll:
    """Backpack / bag of holding: one upgrade for every ammo type."""


@dataclass(frozen=True)
class CapacityUpgrade:
    ammo: int


@dataclass(frozen=True)
class KeyGrant:
    slot: int


@dataclass(frozen=True)
class WeaponGrant:
    slot: int


@dataclass(frozen=True)
class MapGrant:
    pass


@dataclass(frozen=True)
class LevelUnlock:
    pass


@dataclass(frozen=True)
class LevelComplete:
    pass


@dataclass(frozen=True)
class InventoryPickup:
    """Anything else. The game adds it up itself on delivery."""


ItemEffect = Union[
    CapacityUpgradeAll,
    CapacityUpgrade,
    KeyGrant,
    WeaponGrant,
    MapGrant,
    LevelUnlock,
    LevelComplete,
    InventoryPickup,
]


def classify_item(catalog: Catalog, item: ItemDef) -> ItemEffect:
    tables = catalog.tables
    doom_type = item.doom_type
    if doom_type == BACKPACK_DOOM_TYPE:
        return CapacityUpgradeAll()
    if CAPACITY_UPGRADE_FIRST <= doom_type <= CAPACITY_UPGRADE_LAST:
        return CapacityUpgrade(doom_type - CAPACITY_UPGRADE_FIRST)
    if doom_type in tables.keys:
        return KeyGrant(tables.keys[doom_type])
    if doom_type in tables.weapons:
        return WeaponGrant(tables.weapons[doom_type])
    if doom_type == tables.map_doom_type:
        return MapGrant()
    if doom_type == LEVEL_UNLOCK_DOOM_TYPE:
        return LevelUnlock()
    if doom_type == LEVEL_COMPLETE_DOOM_TYPE:
        return LevelComplete()
    return InventoryPickup()


def apply_item(state: SessionState, catalog: Catalog, item: ItemDef) -> ItemEffect:
    """Apply the state effect of ``item`` and return the effect that was applied."""
    effect = classify_item(catalog, item)
    player = state.player

    if isinstance(effect, CapacityUpgradeAll):
        for i in range(len(player.capacity_upgrades)):
            player.capacity_upgrades[i] += 1
        state.recalc_max_ammo()
    elif isinstance(effect, CapacityUpgrade):
        if effect.ammo < len(player.capacity_upgrades):
            player.capacity_upgrades[effect.ammo] += 1
        state.recalc_max_ammo()
    elif isinstance(effect, WeaponGrant):
        if effect.slot < len(player.weapon_owned):
            player.weapon_owned[effect.slot] = True
    elif isinstance(effect, (KeyGrant, MapGrant, LevelUnlock, LevelComplete)):
        level = state.levels.get(item.level_index) if item.level_bound else None
        if level is None:
            logger.warning("Item %d (%r) is not bound to a known level", item.item_id, effect)
            return effect
        if isinstance(effect, KeyGrant):
            level.keys[effect.slot] = True
        elif isinstance(effect, MapGrant):
            level.has_map = True
        elif isinstance(effect, LevelUnlock):
            level.unlocked = True
        else:
            level.completed = True
    elif isinstance(effect, InventoryPickup):
        pass
    else:  # pragma: no cover - exhaustive over ItemEffect
        raise TypeError(f"Unhandled item effect: {effect!r}")
    return effect
