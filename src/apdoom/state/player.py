from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

logger = logging.getLogger(__name__)

MAX_AMMO_CAP = 999


@dataclass
class InventorySlot:
    type: int = 0
    count: int = 0


@dataclass
class PlayerState:
    """
    Player stats carried between levels.

    Array lengths follow the base game (see :class:`apdoom.catalog.GameTables`);
    use :meth:`new` to get a correctly sized starting player.
    """

    health: int = 100
    armor_points: int = 0
    armor_type: int = 0
    ready_weapon: int = 1  # Last weapon held
    kill_count: int = 0  # Accumulated over every level
    item_count: int = 0
    secret_count: int = 0
    powers: List[int] = field(default_factory=list)
    weapon_owned: List[bool] = field(default_factory=list)
    ammo: List[int] = field(default_factory=list)
    max_ammo: List[int] = field(default_factory=list)
    capacity_upgrades: List[int] = field(default_factory=list)
    inventory: List[InventorySlot] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        *,
        weapon_count: int,
        ammo_count: int,
        powerup_count: int,
        inventory_count: int,
        start_health: int = 100,
        start_armor: int = 0,
    ) -> "PlayerState":
        player = cls(
            health=start_health,
            armor_points=start_armor,
            powers=[0] * powerup_count,
            weapon_owned=[False] * weapon_count,
            ammo=[0] * ammo_count,
            max_ammo=[0] * ammo_count,
            capacity_upgrades=[0] * ammo_count,
            inventory=[InventorySlot() for _ in range(inventory_count)],
        )
        # Fist and pistol, with a clip to go with it
        for w in (0, 1):
            if w < weapon_count:
                player.weapon_owned[w] = True
        if ammo_count:
            player.ammo[0] = 50
        return player

    def recalc_max_ammo(self, start: Sequence[int], add: Sequence[int]) -> None:
        """Recompute max ammo from base, increment and capacity upgrades."""
        for i in range(len(self.max_ammo)):
            value = start[i] + add[i] * self.capacity_upgrades[i]
            self.max_ammo[i] = min(MAX_AMMO_CAP, value)
