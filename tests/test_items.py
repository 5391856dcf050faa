from apdoom.catalog import LevelIndex
from apdoom.items import (
    CapacityUpgrade,
    CapacityUpgradeAll,
    InventoryPickup,
    KeyGrant,
    LevelComplete,
    LevelUnlock,
    MapGrant,
    WeaponGrant,
    apply_item,
    classify_item,
)
from apdoom.state import MAX_AMMO_CAP, SessionState
from fakes import (
    ITEM_BACKPACK,
    ITEM_BLUE_KEY_E1M1,
    ITEM_COMPLETE_E1M1,
    ITEM_MAP_E1M2,
    ITEM_MEDIKIT,
    ITEM_SHELL_CAPACITY,
    ITEM_SHOTGUN,
    ITEM_UNLOCK_E1M2,
)


def _apply(state, catalog, item_id):
    return apply_item(state, catalog, catalog.item(item_id))


def test_classification(catalog):
    assert classify_item(catalog, catalog.item(ITEM_BACKPACK)) == CapacityUpgradeAll()
    assert classify_item(catalog, catalog.item(ITEM_SHELL_CAPACITY)) == CapacityUpgrade(1)
    assert classify_item(catalog, catalog.item(ITEM_BLUE_KEY_E1M1)) == KeyGrant(0)
    assert classify_item(catalog, catalog.item(ITEM_SHOTGUN)) == WeaponGrant(2)
    assert classify_item(catalog, catalog.item(ITEM_MAP_E1M2)) == MapGrant()
    assert classify_item(catalog, catalog.item(ITEM_UNLOCK_E1M2)) == LevelUnlock()
    assert classify_item(catalog, catalog.item(ITEM_COMPLETE_E1M1)) == LevelComplete()
    assert classify_item(catalog, catalog.item(ITEM_MEDIKIT)) == InventoryPickup()


def test_max_ammo_invariant_after_upgrades(catalog):
    state = SessionState.new(catalog)
    state.recalc_max_ammo()
    sequence = [ITEM_BACKPACK, ITEM_SHELL_CAPACITY, ITEM_BACKPACK, ITEM_SHELL_CAPACITY, ITEM_BACKPACK]
    for item_id in sequence:
        _apply(state, catalog, item_id)
        player = state.player
        for i in range(len(player.max_ammo)):
            expected = min(MAX_AMMO_CAP, state.max_ammo_start[i] + state.max_ammo_add[i] * player.capacity_upgrades[i])
            assert player.max_ammo[i] == expected

    assert state.player.capacity_upgrades == [3, 5, 3, 3]
    assert state.player.max_ammo == [800, 300, 999, 200]


def test_level_bound_items(catalog):
    state = SessionState.new(catalog)
    _apply(state, catalog, ITEM_BLUE_KEY_E1M1)
    _apply(state, catalog, ITEM_MAP_E1M2)
    _apply(state, catalog, ITEM_UNLOCK_E1M2)
    _apply(state, catalog, ITEM_COMPLETE_E1M1)

    e1m1 = state.level(LevelIndex(0, 0))
    e1m2 = state.level(LevelIndex(0, 1))
    assert e1m1.keys == [True, False, False]
    assert e1m1.completed
    assert e1m2.has_map
    assert e1m2.unlocked
    assert not e1m2.completed


def test_weapon_and_inventory_items(catalog):
    state = SessionState.new(catalog)
    before = SessionState.new(catalog)
    _apply(state, catalog, ITEM_SHOTGUN)
    assert state.player.weapon_owned[2] is True

    effect = _apply(before, catalog, ITEM_MEDIKIT)
    assert isinstance(effect, InventoryPickup)
    assert before == SessionState.new(catalog)
