from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class BaseGame(str, Enum):
    DOOM = "doom"
    DOOM2 = "doom2"
    HERETIC = "heretic"

    @classmethod
    def from_iwad(cls, iwad_name: str) -> "BaseGame":
        name = (iwad_name or "").upper()
        if name == "HERETIC.WAD":
            return cls.HERETIC
        if name in ("DOOM.WAD", "CHEX.WAD"):
            return cls.DOOM
        # Every other IWAD we know of is Doom 2 based
        return cls.DOOM2


# Doom episode 4 reuses music from earlier episodes
_DOOM_EP4_MUSIC = (
    2 * 9 + 3 + 1,  # e3m4
    2 * 9 + 1 + 1,  # e3m2
    2 * 9 + 2 + 1,  # e3m3
    0 * 9 + 4 + 1,  # e1m5
    1 * 9 + 6 + 1,  # e2m7
    1 * 9 + 3 + 1,  # e2m4
    1 * 9 + 5 + 1,  # e2m6
    1 * 9 + 4 + 1,  # e2m5
    0 * 9 + 8 + 1,  # e1m9
)

_DOOM_KEYS = {5: 0, 40: 0, 6: 1, 39: 1, 13: 2, 38: 2}
_HERETIC_KEYS = {80: 0, 73: 1, 79: 2}

_DOOM_WEAPONS = {2001: 2, 2002: 3, 2003: 4, 2004: 5, 2006: 6, 2005: 7}
_DOOM2_WEAPONS = {**_DOOM_WEAPONS, 82: 8}
_HERETIC_WEAPONS = {2005: 7, 2001: 2, 53: 3, 2003: 5, 2002: 6, 2004: 4}

_DOOM_WEAPON_NAMES = (
    "Fist",
    "Pistol",
    "Shotgun",
    "Chaingun",
    "Rocket launcher",
    "Plasma gun",
    "BFG9000",
    "Chainsaw",
    "Super shotgun",
)
_DOOM_POWER_NAMES = (
    "Invulnerability",
    "Strength",
    "Invisibility",
    "Hazard suit",
    "Computer area map",
    "Infrared",
)
_DOOM_AMMO_NAMES = ("Bullets", "Shells", "Cells", "Rockets")

_HERETIC_WEAPON_NAMES = (
    "Staff",
    "Elven wand",
    "Ethereal crossbow",
    "Dragon claw",
    "Hellstaff",
    "Phoenix rod",
    "Firemace",
    "Gauntlets of the Necromancer",
    "Beak",
)
# Power 0 is the engine's unused "no power" slot
_HERETIC_POWER_NAMES = (
    "None",
    "Invulnerability",
    "Invisibility",
    "Map scroll",
    "Torch",
    "Tome of power",
    "Wings of wrath",
    "Shield",
    "Health",
)
_HERETIC_AMMO_NAMES = (
    "Wand crystals",
    "Ethereal arrows",
    "Claw orbs",
    "Hellstaff runes",
    "Flame orbs",
    "Mace spheres",
)

# Item doom types with a fixed meaning regardless of the base game
BACKPACK_DOOM_TYPE = 8
CAPACITY_UPGRADE_FIRST = 65001
CAPACITY_UPGRADE_LAST = 65006
LEVEL_UNLOCK_DOOM_TYPE = -1
LEVEL_COMPLETE_DOOM_TYPE = -2
# Heretic wings of wrath are per level and never carried over
WINGS_INVENTORY_TYPE = 9


@dataclass(frozen=True)
class GameTables:
    """Fixed per-base-game numbers the core needs to interpret items."""

    base_game: BaseGame
    weapon_count: int
    ammo_count: int
    powerup_count: int
    inventory_count: int
    default_max_ammo: Tuple[int, ...]
    keys: Dict[int, int] = field(default_factory=dict)
    weapons: Dict[int, int] = field(default_factory=dict)
    map_doom_type: int = 2026
    weapon_names: Tuple[str, ...] = _DOOM_WEAPON_NAMES
    power_names: Tuple[str, ...] = _DOOM_POWER_NAMES
    ammo_names: Tuple[str, ...] = _DOOM_AMMO_NAMES

    def weapon_name(self, weapon: int) -> str:
        return _name(self.weapon_names, weapon)

    def power_name(self, power: int) -> str:
        return _name(self.power_names, power)

    def ammo_name(self, ammo: int) -> str:
        return _name(self.ammo_names, ammo)

    def original_music(self, ep: int, map: int, map_count: int, game_map: int) -> int:
        """Music lump number a level plays in the unmodified game.

        ``ep`` and ``map`` are 1-based catalog numbers; ``game_map`` is the
        engine's map number, which is what Doom 2 music is keyed on.
        """
        if self.base_game is BaseGame.DOOM:
            if ep == 4:
                return _DOOM_EP4_MUSIC[map - 1]
            return 1 + (ep - 1) * map_count + (map - 1)
        if self.base_game is BaseGame.DOOM2:
            return 52 + game_map - 1
        return (ep - 1) * map_count + (map - 1)


def _name(names: Tuple[str, ...], index: int) -> str:
    if 0 <= index < len(names):
        return names[index]
    return "UNKNOWN"

def tables_for(base_game: BaseGame) -> GameTables:
    if base_game is BaseGame.HERETIC:
        return GameTables(
            base_game=base_game,
            weapon_count=9,
            ammo_count=6,
            powerup_count=9,
            inventory_count=14,
            default_max_ammo=(100, 50, 200, 200, 20, 150),
            keys=dict(_HERETIC_KEYS),
            weapons=dict(_HERETIC_WEAPONS),
            map_doom_type=35,
            weapon_names=_HERETIC_WEAPON_NAMES,
            power_names=_HERETIC_POWER_NAMES,
            ammo_names=_HERETIC_AMMO_NAMES,
        )
    return GameTables(
        base_game=base_game,
        weapon_count=9,
        ammo_count=4,
        powerup_count=6,
        inventory_count=0,
        default_max_ammo=(200, 50, 300, 50),
        keys=dict(_DOOM_KEYS),
        weapons=dict(_DOOM2_WEAPONS if base_game is BaseGame.DOOM2 else _DOOM_WEAPONS),
        map_doom_type=2026,
    )
