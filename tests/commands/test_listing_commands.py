"""
Tests for the read-only listing commands.
"""

import pytest

from overseer.models import ItemType, MagicSchool, MagicType, MirClass
from overseer.roles import AccountIdentity


@pytest.fixture
def viewer(callers):
    return callers[AccountIdentity.NORMAL]


# ============================================================================
# Paging and rendering
# ============================================================================


@pytest.mark.commands
def test_list_items_pages(dispatcher, viewer, records):
    for i in range(60):
        records.items.create_new(name=f"Sword {i}", item_type=ItemType.WEAPON, required_amount=i)

    outcome = dispatcher.dispatch("list_items", viewer, {"keyword": "sword", "page": 2})

    assert outcome.ok
    assert outcome.data["total_count"] == 60
    assert outcome.data["total_pages"] == 2
    assert outcome.data["page"] == 2
    assert [i["name"] for i in outcome.data["items"]] == [f"Sword {i}" for i in range(50, 60)]
    assert outcome.message == "Items: 60 match(es), page 2/2"


@pytest.mark.commands
def test_list_items_type_filter_by_name(dispatcher, viewer, records):
    records.items.create_new(name="Sword", item_type=ItemType.WEAPON)
    records.items.create_new(name="Potion", item_type=ItemType.CONSUMABLE)
    outcome = dispatcher.dispatch("list_items", viewer, {"item_type": "consumable"})
    assert [i["name"] for i in outcome.data["items"]] == ["Potion"]


@pytest.mark.commands
def test_unknown_filter_is_ignored(dispatcher, viewer, records):
    records.items.create_new(name="Sword", item_type=ItemType.WEAPON)
    records.items.create_new(name="Potion", item_type=ItemType.CONSUMABLE)
    outcome = dispatcher.dispatch("list_items", viewer, {"item_type": "spaceship"})
    assert outcome.ok
    assert outcome.data["total_count"] == 2


@pytest.mark.commands
def test_list_magics_filters(dispatcher, viewer, records):
    records.magics.create_new(
        name="Fire Ball", magic=MagicType.FIRE_BALL, mir_class=MirClass.WIZARD, school=MagicSchool.FIRE
    )
    records.magics.create_new(
        name="Healing", magic=MagicType.HEAL, mir_class=MirClass.TAOIST, school=MagicSchool.HOLY
    )
    outcome = dispatcher.dispatch("list_magics", viewer, {"mir_class": "taoist"})
    assert [m["name"] for m in outcome.data["items"]] == ["Healing"]
    assert outcome.data["items"][0]["class"] == "taoist"


@pytest.mark.commands
def test_list_empty(dispatcher, viewer):
    outcome = dispatcher.dispatch("list_monsters", viewer, {})
    assert outcome.ok
    assert outcome.data["items"] == []
    assert outcome.message == "Monsters: 0 match(es), page 1/1"


@pytest.mark.commands
def test_list_maps_include_player_counts(dispatcher, viewer, bichon, player_factory):
    player_factory("Alice")
    outcome = dispatcher.dispatch("list_maps", viewer, {})
    assert outcome.data["items"][0]["players"] == 1


@pytest.mark.commands
def test_list_players(dispatcher, viewer, player_factory):
    player_factory("Zed", x=3, y=4)
    player_factory("Amy")
    outcome = dispatcher.dispatch("list_players", viewer, {"keyword": "z"})
    assert outcome.data["items"] == [
        {"name": "Zed", "level": 1, "class": "warrior", "map": 1, "location": [3, 4]}
    ]


@pytest.mark.commands
def test_list_accounts_page_size(dispatcher, viewer, records):
    for i in range(25):
        records.accounts.create_new(email=f"user{i}@example.com")
    outcome = dispatcher.dispatch("list_accounts", viewer, {"page": 3})
    assert outcome.data["page_size"] == 10
    assert len(outcome.data["items"]) == 5


# ============================================================================
# Races
# ============================================================================


@pytest.mark.commands
def test_listing_race_returns_empty_page(dispatcher, viewer, world, player_factory, monkeypatch):
    player_factory("Alice")

    def racing():
        yield from world.players
        raise RuntimeError("list changed size during iteration")

    monkeypatch.setattr(world, "connected_players", racing)
    outcome = dispatcher.dispatch("list_players", viewer, {})

    assert outcome.ok
    assert outcome.data["items"] == []
    assert outcome.data["total_count"] == 0
    assert outcome.data["error"] == "collection_changed"


@pytest.mark.commands
def test_listing_render_failure_returns_empty_page(dispatcher, viewer, world, bichon, player_factory, monkeypatch):
    player_factory("Alice")
    calls = []
    get_map = world.get_map

    def flaky(index):
        calls.append(index)
        if len(calls) > 1:
            raise KeyError(index)
        return get_map(index)

    monkeypatch.setattr(world, "get_map", flaky)
    outcome = dispatcher.dispatch("list_maps", viewer, {})

    assert outcome.ok
    assert outcome.data["items"] == []
    assert outcome.data["total_count"] == 0
    assert outcome.data["error"] == "traversal_failed"
    assert outcome.message == "Maps: listing unavailable, try again"


@pytest.mark.commands
def test_listing_view_failure_returns_empty_page(dispatcher, viewer, player_factory, monkeypatch):
    player_factory("Alice")

    def broken(player):
        raise AttributeError("character")

    monkeypatch.setattr("overseer.commands.listings.player_view", broken)
    outcome = dispatcher.dispatch("list_players", viewer, {})

    assert outcome.ok
    assert outcome.data["items"] == []
    assert outcome.data["error"] == "traversal_failed"
