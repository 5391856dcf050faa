import json
from pathlib import Path

import pytest

from apdoom.catalog import LevelIndex
from apdoom.errors import PersistenceError
from apdoom.persistence import (
    SAVE_VERSION,
    SaveManager,
    apply_state,
    encode_state,
    resolve_save_dir,
    save_dir_string,
    string_to_hex,
)
from apdoom.state import SessionState
from fakes import make_catalog


def _played_state(catalog) -> SessionState:
    state = SessionState.new(catalog)
    state.episodes = [True, False]
    player = state.player
    player.health = 73
    player.armor_points = 50
    player.armor_type = 1
    player.ready_weapon = 2
    player.kill_count = 12
    player.item_count = 3
    player.secret_count = 1
    player.powers[1] = 1
    player.weapon_owned[2] = True
    player.ammo = [120, 8, 0, 2]
    player.capacity_upgrades = [1, 1, 0, 0]
    state.recalc_max_ammo()
    e1m1 = state.level(LevelIndex(0, 0))
    e1m1.completed = True
    e1m1.keys[0] = True
    e1m1.has_map = True
    e1m1.unlocked = True
    e1m1.special = True
    e1m1.record_check(2)
    e1m1.record_check(1)
    state.level(LevelIndex(0, 1)).unlocked = True
    state.item_queue.extend([1003, 1000])
    state.ep = 1
    state.map = 2
    state.progressive_locations.update({102, 111})
    state.received_item_count = 7
    state.received_item_indices = {9, 12}
    state.victory = True
    return state


def test_save_dir_naming():
    assert string_to_hex("Ab") == "4162"
    assert save_dir_string("S", "Ab") == "AP_S_4162"
    assert save_dir_string("S", "Ab", "saves") == "saves/AP_S_4162"


def test_default_root_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("APDOOM_SAVE_ROOT", str(tmp_path))
    assert resolve_save_dir("S", "Ab") == tmp_path / "AP_S_4162"
    assert resolve_save_dir("S", "Ab", "saves") == Path("saves/AP_S_4162")


def test_round_trip(tmp_path: Path, catalog):
    state = _played_state(catalog)
    mgr = SaveManager(tmp_path)
    path = mgr.save(state, catalog)
    assert path.name == "apstate.json"

    fresh = SessionState.new(catalog)
    assert mgr.load_into(fresh, catalog) is True

    assert fresh.player == state.player
    assert fresh.levels == state.levels
    assert list(fresh.item_queue) == [1003, 1000]
    assert fresh.episodes == state.episodes
    assert (fresh.ep, fresh.map) == (1, 2)
    assert fresh.progressive_locations == {102, 111}
    assert fresh.received_item_count == 7
    assert fresh.received_item_indices == {9, 12}
    assert fresh.victory is True


def test_document_layout(catalog):
    data = encode_state(_played_state(catalog), catalog)
    assert data["version"] == SAVE_VERSION
    assert data["enabled_episodes"] == [True, False]
    level = data["episodes"][0][0]
    assert level["keys0"] is True
    assert level["check_count"] == 2
    assert level["checks"] == [2, 1]
    assert len(data["episodes"]) == 2
    assert json.loads(json.dumps(data)) == data


def test_max_ammo_recomputed_on_load(catalog):
    state = SessionState.new(catalog)
    data = {"player": {"capacity_upgrades": [2, 0, 0, 0], "max_ammo": [1, 1, 1, 1]}}
    apply_state(state, catalog, data)
    assert state.player.max_ammo == [600, 50, 300, 50]


def test_load_merges_instead_of_replacing(catalog):
    state = SessionState.new(catalog)
    state.player.weapon_owned[3] = True
    state.level(LevelIndex(0, 0)).record_check(1)
    data = {
        "player": {"health": "lots", "armor_points": 20, "weapon_owned": [False, False, True]},
        "episodes": [[{"completed": False, "checks": [1, 2, "x"]}]],
        "victory": False,
    }
    apply_state(state, catalog, data)
    player = state.player
    assert player.health == 100
    assert player.armor_points == 20
    assert player.weapon_owned[:4] == [True, True, True, True]
    assert state.level(LevelIndex(0, 0)).checks == [1, 2]
    assert state.victory is False


def test_heretic_wings_are_not_saved():
    catalog = make_catalog(_iwad="HERETIC.WAD")
    state = SessionState.new(catalog)
    state.player.inventory[0].type = 9
    state.player.inventory[0].count = 1
    state.player.inventory[1].type = 3
    state.player.inventory[1].count = 2
    inventory = encode_state(state, catalog)["player"]["inventory"]
    assert {"type": 9, "count": 1} not in inventory
    assert inventory[0] == {"type": 3, "count": 2}
    assert len(inventory) == 13


def test_missing_file_is_a_fresh_session(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path)
    assert mgr.read() is None
    state = SessionState.new(catalog)
    assert mgr.load_into(state, catalog) is False
    assert state == SessionState.new(catalog)


def test_backup_used_when_primary_is_corrupt(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path)
    state = SessionState.new(catalog)
    state.player.health = 50
    mgr.save(state, catalog)
    state.player.health = 60
    mgr.save(state, catalog)
    assert mgr.backup_path.exists()

    mgr.state_path.write_text("{ broken", encoding="utf-8")
    fresh = SessionState.new(catalog)
    assert mgr.load_into(fresh, catalog) is True
    assert fresh.player.health == 50


def test_corrupt_file_without_backup_is_ignored(tmp_path: Path, catalog):
    mgr = SaveManager(tmp_path)
    mgr.state_path.write_text("[1, 2]", encoding="utf-8")
    assert mgr.read() is None


def test_write_failure_raises(tmp_path: Path, catalog):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    mgr = SaveManager(blocker)
    with pytest.raises(PersistenceError):
        mgr.save(SessionState.new(catalog), catalog)
