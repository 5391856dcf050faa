import json
from pathlib import Path

import pytest

from apdoom.catalog import BaseGame, LevelIndex, catalog_from_dict, load_definitions, tables_for
from apdoom.catalog.loader import MAX_THING
from apdoom.errors import CatalogError
from fakes import definitions, make_catalog


def test_levels_in_catalog_order(catalog):
    assert catalog.episode_count == 2
    assert catalog.map_count(0) == 2
    assert catalog.map_count(5) == 0
    assert list(catalog.levels()) == [
        LevelIndex(0, 0),
        LevelIndex(0, 1),
        LevelIndex(1, 0),
        LevelIndex(1, 1),
    ]


def test_level_index_conversion_goes_through_catalog(catalog):
    idx = catalog.make_level_index(2, 1)
    assert idx == LevelIndex(1, 0)
    assert catalog.index_to_ep(idx) == 2
    assert catalog.index_to_map(idx) == 1

    assert catalog.try_make_level_index(9, 9) is None
    # Unknown levels fall back to the first one
    assert catalog.make_level_index(9, 9) == LevelIndex(0, 0)


def test_level_info_counts(catalog):
    info = catalog.level_info(LevelIndex(0, 0))
    assert info.name == "Hangar (E1M1)"
    assert info.short_name == "(E1M1)"
    assert info.keys == (True, False, False)
    assert info.thing_count == 5
    assert info.check_count == 3
    assert info.sanity_check_count == 1
    assert info.total_check_count(check_sanity=False) == 2
    assert info.total_check_count(check_sanity=True) == 3

    thing = info.things[3]
    assert thing.doom_type == 2001
    assert thing.check_sanity and not thing.unreachable
    assert info.things[0].unreachable

    with pytest.raises(KeyError):
        catalog.level_info(LevelIndex(3, 0))


def test_items_and_locations(catalog):
    key = catalog.item(1002)
    assert key.doom_type == 5
    assert key.level_bound
    assert key.level_index == LevelIndex(0, 0)
    assert not catalog.item(1000).level_bound
    assert catalog.item(9999) is None

    assert catalog.location_id(LevelIndex(0, 0), 2) == 102
    assert catalog.location_id(LevelIndex(0, 0), -1) == 100
    assert catalog.location_id(LevelIndex(0, 0), 4) is None
    assert catalog.find_location(211) == (LevelIndex(1, 1), 0)
    assert catalog.find_location(1) is None

    locations = list(catalog.locations())
    assert locations[0] == (LevelIndex(0, 0), -1, 100)
    assert len(locations) == 10

    assert catalog.sprite(2001) == "SHOTA0"
    assert catalog.sprite(3004) is None
    assert catalog.is_location_type(2011)
    assert not catalog.is_location_type(3004)


def test_base_game_and_music(catalog):
    assert catalog.base_game is BaseGame.DOOM
    assert catalog.default_max_ammo == (200, 50, 300, 50)
    assert catalog.original_music(LevelIndex(0, 0)) == 1
    assert catalog.original_music(LevelIndex(1, 1)) == 4

    doom2 = make_catalog(_iwad="DOOM2.WAD")
    assert doom2.base_game is BaseGame.DOOM2
    assert doom2.original_music(LevelIndex(0, 1)) == 53

    heretic = make_catalog(_iwad="HERETIC.WAD")
    assert heretic.tables.ammo_count == 6
    assert heretic.tables.inventory_count == 14


def test_game_info_overrides_start_values():
    catalog = make_catalog(
        game_info={
            "ammo": [{"name": n, "max": 10} for n in ("a", "b", "c", "d")],
            "starting_health": 150,
        }
    )
    assert catalog.default_max_ammo == (10, 10, 10, 10)
    assert catalog.start_health == 150


def test_load_definitions_from_file(tmp_path: Path):
    (tmp_path / "test.json").write_text(json.dumps(definitions()), encoding="utf-8")
    catalog = load_definitions("test", tmp_path)
    assert catalog.game_name == "Test Doom"


def test_missing_definitions_file(tmp_path: Path):
    with pytest.raises(CatalogError):
        load_definitions("nope", tmp_path)


def test_invalid_json(tmp_path: Path):
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_definitions("bad", tmp_path)


def test_schema_violations():
    data = definitions()
    del data["_iwad"]
    with pytest.raises(CatalogError):
        catalog_from_dict(data)

    data = definitions(item_table={"1": []})
    with pytest.raises(CatalogError):
        catalog_from_dict(data)


def test_too_many_things():
    data = definitions()
    data["level_info"][0][0]["thing_list"] = [1] * (MAX_THING + 1)
    with pytest.raises(CatalogError):
        catalog_from_dict(data)


def test_name_tables_follow_the_base_game():
    doom = tables_for(BaseGame.DOOM)
    heretic = tables_for(BaseGame.HERETIC)
    assert doom.weapon_name(2) == "Shotgun"
    assert heretic.weapon_name(2) == "Ethereal crossbow"
    assert heretic.ammo_name(5) == "Mace spheres"
    assert heretic.power_name(5) == "Tome of power"
    assert len(heretic.ammo_names) == heretic.ammo_count
    assert len(heretic.power_names) == heretic.powerup_count
    assert doom.ammo_name(4) == "UNKNOWN"
