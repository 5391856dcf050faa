"""JSON document for the session state (``apstate.json``).

Loading merges into an existing state field by field instead of replacing
it: integers overwrite only when the stored value is an integer, flags are
OR'd in, and checks go through the idempotent check mutator. A partial or
older document therefore never clears progress the session already has.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping

from ..catalog import Catalog, LevelIndex
from ..catalog.game_tables import WINGS_INVENTORY_TYPE
from ..errors import CorruptSaveError
from ..state import SessionState

logger = logging.getLogger(__name__)

SAVE_VERSION = "APDOOM 1.2.0 PWAD"


def encode_state(state: SessionState, catalog: Catalog) -> Dict[str, Any]:
    player = state.player
    json_player: Dict[str, Any] = {
        "health": player.health,
        "armor_points": player.armor_points,
        "armor_type": player.armor_type,
        "ready_weapon": player.ready_weapon,
        "kill_count": player.kill_count,
        "item_count": player.item_count,
        "secret_count": player.secret_count,
        "powers": list(player.powers),
        "weapon_owned": [bool(w) for w in player.weapon_owned],
        "ammo": list(player.ammo),
        "max_ammo": list(player.max_ammo),
        "capacity_upgrades": list(player.capacity_upgrades),
        # Wings are per level, they never carry over
        "inventory": [
            {"type": slot.type, "count": slot.count}
            for slot in player.inventory
            if slot.type != WINGS_INVENTORY_TYPE
        ],
    }

    episodes: List[List[Dict[str, Any]]] = []
    for ep in range(catalog.episode_count):
        json_levels = []
        for idx in catalog.episode_levels(ep):
            level = state.level(idx)
            json_levels.append(
                {
                    "completed": level.completed,
                    "keys0": level.keys[0],
                    "keys1": level.keys[1],
                    "keys2": level.keys[2],
                    "check_count": level.check_count,
                    "has_map": level.has_map,
                    "unlocked": level.unlocked,
                    "special": level.special,
                    "checks": list(level.checks),
                }
            )
        episodes.append(json_levels)

    return {
        "player": json_player,
        "episodes": episodes,
        "item_queue": list(state.item_queue),
        "ep": state.ep,
        "map": state.map,
        "enabled_episodes": [bool(e) for e in state.episodes],
        # Known progression locations, so reconnecting does not scout again
        "progressive_locations": sorted(state.progressive_locations),
        "received_item_count": state.received_item_count,
        # Items the server delivered past a gap in the indices
        "received_item_indices": sorted(state.received_item_indices),
        "victory": state.victory,
        "version": SAVE_VERSION,
    }


def encode_text(state: SessionState, catalog: Catalog) -> str:
    return json.dumps(encode_state(state, catalog), indent=2)


def decode_text(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptSaveError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CorruptSaveError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _obj(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _seq(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _at(values: List[Any], i: int) -> Any:
    return values[i] if i < len(values) else None


def _get_int(value: Any, default: int) -> int:
    return value if _is_int(value) else default


def _get_flag(value: Any, current: bool) -> bool:
    if isinstance(value, (bool, int)):
        return current or bool(value)
    return current


def apply_state(state: SessionState, catalog: Catalog, data: Mapping[str, Any]) -> None:
    """Merge a decoded ``apstate.json`` document into ``state``."""
    player = state.player
    json_player = _obj(data.get("player"))
    for attr in ("health", "armor_points", "armor_type", "ready_weapon", "kill_count", "item_count", "secret_count"):
        setattr(player, attr, _get_int(json_player.get(attr), getattr(player, attr)))

    powers = _seq(json_player.get("powers"))
    for i in range(len(player.powers)):
        player.powers[i] = _get_int(_at(powers, i), player.powers[i])
    owned = _seq(json_player.get("weapon_owned"))
    for i in range(len(player.weapon_owned)):
        player.weapon_owned[i] = _get_flag(_at(owned, i), player.weapon_owned[i])
    ammo = _seq(json_player.get("ammo"))
    max_ammo = _seq(json_player.get("max_ammo"))
    upgrades = _seq(json_player.get("capacity_upgrades"))
    for i in range(len(player.ammo)):
        player.ammo[i] = _get_int(_at(ammo, i), player.ammo[i])
        player.max_ammo[i] = _get_int(_at(max_ammo, i), player.max_ammo[i])
        player.capacity_upgrades[i] = _get_int(_at(upgrades, i), player.capacity_upgrades[i])
    inventory = _seq(json_player.get("inventory"))
    for i, slot in enumerate(player.inventory):
        json_slot = _obj(_at(inventory, i))
        slot.type = _get_int(json_slot.get("type"), slot.type)
        slot.count = _get_int(json_slot.get("count"), slot.count)

    episodes = _seq(data.get("episodes"))
    for ep in range(catalog.episode_count):
        json_levels = _seq(_at(episodes, ep))
        for idx in catalog.episode_levels(ep):
            _apply_level(state, idx, _obj(_at(json_levels, idx.map)))

    for item_id in _seq(data.get("item_queue")):
        if _is_int(item_id):
            state.item_queue.append(item_id)

    state.ep = _get_int(data.get("ep"), state.ep)
    state.map = _get_int(data.get("map"), state.map)
    enabled = _seq(data.get("enabled_episodes"))
    for i in range(len(state.episodes)):
        state.episodes[i] = _get_flag(_at(enabled, i), state.episodes[i])

    for loc_id in _seq(data.get("progressive_locations")):
        if _is_int(loc_id):
            state.progressive_locations.add(loc_id)

    received = data.get("received_item_count")
    early = [i for i in _seq(data.get("received_item_indices")) if _is_int(i)]
    state.merge_received_items(received if _is_int(received) else 0, early)
    state.victory = _get_flag(data.get("victory"), state.victory)

    # Stored max ammo is only a fallback; the formula always wins
    state.recalc_max_ammo()
    _log_summary(state, catalog)


def _apply_level(state: SessionState, idx: LevelIndex, json_level: Mapping[str, Any]) -> None:
    level = state.level(idx)
    level.completed = _get_flag(json_level.get("completed"), level.completed)
    for k in range(3):
        level.keys[k] = _get_flag(json_level.get(f"keys{k}"), level.keys[k])
    level.has_map = _get_flag(json_level.get("has_map"), level.has_map)
    level.unlocked = _get_flag(json_level.get("unlocked"), level.unlocked)
    level.special = _get_flag(json_level.get("special"), level.special)
    for index in _seq(json_level.get("checks")):
        if _is_int(index):
            state.check_location(idx, index)


def _log_summary(state: SessionState, catalog: Catalog) -> None:
    tables = catalog.tables
    player = state.player
    logger.info(
        "Player state: health %d, armor %d (type %d), ready weapon %s",
        player.health,
        player.armor_points,
        player.armor_type,
        tables.weapon_name(player.ready_weapon),
    )
    logger.info("  Kills %d, items %d, secrets %d", player.kill_count, player.item_count, player.secret_count)
    active = [tables.power_name(i) for i, p in enumerate(player.powers) if p]
    if active:
        logger.info("  Active powerups: %s", ", ".join(active))
    logger.info("  Owned weapons: %s", ", ".join(tables.weapon_name(i) for i, w in enumerate(player.weapon_owned) if w))
    for i in range(len(player.ammo)):
        logger.info("  %s = %d / %d", tables.ammo_name(i), player.ammo[i], player.max_ammo[i])
    logger.info("  Enabled episodes: %s", ", ".join(str(i + 1) for i, e in enumerate(state.episodes) if e))
    logger.info("  Episode: %d, Map: %d, Victory: %s", state.ep, state.map, state.victory)
