"""
System tests for the Record Query Engine.

Tests pagination arithmetic, keyword matching, structured filters, the
per-collection orderings and degradation on traversal races.
"""

import math

import pytest

from overseer.models import ItemType, MagicSchool, MagicType, MirClass
from overseer.query import (
    Page,
    QueryError,
    paginate,
    query_accounts,
    query_items,
    query_magics,
    query_maps,
    query_monsters,
    query_players,
)
from overseer.world import Map

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sword_catalog(records):
    """120 swords plus 30 other items."""
    for i in range(120):
        records.items.create_new(
            name=f"Sword {i:03d}", item_type=ItemType.WEAPON, required_amount=i
        )
    for i in range(30):
        records.items.create_new(name=f"Potion {i}", item_type=ItemType.CONSUMABLE)
    return records.items


def _exploding(exc: Exception):
    yield from ()
    raise exc


# ============================================================================
# paginate
# ============================================================================


@pytest.mark.systems
@pytest.mark.parametrize("n,p", [(0, 10), (1, 10), (10, 10), (11, 10), (120, 50), (99, 7)])
def test_total_pages_is_ceiling(n, p):
    page = Page(items=[], total_count=n, page=1, page_size=p)
    assert page.total_pages == math.ceil(n / p)


@pytest.mark.systems
def test_pages_partition_the_filtered_set():
    data = list(range(23))
    seen = []
    for page_no in range(1, 4):
        result = paginate(data, page=page_no, page_size=10, order_key=lambda x: x)
        seen.extend(result.page.items)
        assert result.page.total_count == 23
    assert seen == data


@pytest.mark.systems
@pytest.mark.parametrize("page_no", [0, -3, None])
def test_page_below_one_is_first_page(page_no):
    result = paginate(range(5), page=page_no, page_size=2, order_key=lambda x: x)
    assert result.page.page == 1
    assert result.page.items == [0, 1]


@pytest.mark.systems
def test_page_past_end_is_empty_but_keeps_count():
    result = paginate(range(5), page=9, page_size=2, order_key=lambda x: x)
    assert result.page.items == []
    assert result.page.total_count == 5


@pytest.mark.systems
def test_concurrent_modification_gives_empty_page():
    result = paginate(
        _exploding(RuntimeError("list changed size during iteration")),
        page=1,
        page_size=10,
        order_key=lambda x: x,
    )
    assert result.error is QueryError.COLLECTION_CHANGED
    assert result.page.items == []
    assert result.page.total_count == 0
    assert not result.ok


@pytest.mark.systems
def test_other_traversal_failure_gives_empty_page():
    result = paginate(
        _exploding(AttributeError("character vanished")),
        page=1,
        page_size=10,
        order_key=lambda x: x,
    )
    assert result.error is QueryError.TRAVERSAL_FAILED
    assert result.page.total_count == 0


# ============================================================================
# Items
# ============================================================================


@pytest.mark.systems
def test_item_search_second_page(ctx, sword_catalog):
    """Keyword 'sword', page 2 of 50, with 120 matches -> items 51-100."""
    result = query_items(ctx, keyword="sword", page=2)
    page = result.page
    assert result.ok
    assert page.total_count == 120
    assert len(page.items) == 50
    assert [i.required_amount for i in page.items] == list(range(50, 100))


@pytest.mark.systems
def test_item_keyword_is_case_insensitive(ctx, sword_catalog):
    upper = query_items(ctx, keyword="SWORD", page=1).page
    lower = query_items(ctx, keyword="sword", page=1).page
    assert upper.total_count == lower.total_count == 120
    assert upper.items == lower.items


@pytest.mark.systems
def test_item_keyword_matches_index(ctx, sword_catalog):
    result = query_items(ctx, keyword="150", page=1)
    assert [i.index for i in result.page.items] == [150]


@pytest.mark.systems
def test_item_type_filter_ands_with_keyword(ctx, sword_catalog):
    result = query_items(ctx, keyword="1", item_type=ItemType.CONSUMABLE, page=1)
    names = [i.name for i in result.page.items]
    assert names
    assert all(n.startswith("Potion") for n in names)


@pytest.mark.systems
def test_items_ordered_by_type_then_required_amount(ctx, records):
    records.items.create_new(name="Ring", item_type=ItemType.RING, required_amount=1)
    records.items.create_new(name="Big Sword", item_type=ItemType.WEAPON, required_amount=30)
    records.items.create_new(name="Small Sword", item_type=ItemType.WEAPON, required_amount=5)
    names = [i.name for i in query_items(ctx).page.items]
    assert names == ["Small Sword", "Big Sword", "Ring"]


# ============================================================================
# Other call-sites
# ============================================================================


@pytest.mark.systems
def test_accounts_match_character_names(ctx, player_factory):
    player_factory("Moonblade", email="first@example.com")
    player_factory("Ironfist", email="second@example.com")

    result = query_accounts(ctx, keyword="moon")
    assert [a.email for a in result.page.items] == ["first@example.com"]
    assert result.page.page_size == 10


@pytest.mark.systems
def test_monsters_ordered_by_level(ctx, records):
    records.monsters.create_new(name="Oma King", level=40)
    records.monsters.create_new(name="Hen", level=1)
    records.monsters.create_new(name="Deer", level=3)
    names = [m.name for m in query_monsters(ctx).page.items]
    assert names == ["Hen", "Deer", "Oma King"]


@pytest.mark.systems
def test_magic_filters_and_skill_type_keyword(ctx, records):
    records.magics.create_new(
        name="Fire Ball", magic=MagicType.FIRE_BALL, mir_class=MirClass.WIZARD, school=MagicSchool.FIRE
    )
    records.magics.create_new(
        name="Ice Bolt", magic=MagicType.ICE_BOLT, mir_class=MirClass.WIZARD, school=MagicSchool.ICE
    )
    records.magics.create_new(
        name="Mending", magic=MagicType.HEAL, mir_class=MirClass.TAOIST, school=MagicSchool.HOLY
    )

    wizard = query_magics(ctx, mir_class=MirClass.WIZARD).page
    assert [m.name for m in wizard.items] == ["Fire Ball", "Ice Bolt"]

    fire = query_magics(ctx, mir_class=MirClass.WIZARD, school=MagicSchool.FIRE).page
    assert [m.name for m in fire.items] == ["Fire Ball"]

    # "heal" matches the skill type name even though the display name differs
    by_type = query_magics(ctx, keyword="heal").page
    assert [m.name for m in by_type.items] == ["Mending"]


@pytest.mark.systems
def test_magic_keyword_ignores_skill_type_underscores(ctx, records):
    records.magics.create_new(name="Flame Orb", magic=MagicType.FIRE_BALL)
    records.magics.create_new(name="Frost", magic=MagicType.ICE_BOLT)

    for keyword in ["fireball", "FIRE_BALL", "fire_b"]:
        result = query_magics(ctx, keyword=keyword)
        assert [m.name for m in result.page.items] == ["Flame Orb"], keyword


@pytest.mark.systems
def test_maps_ordered_by_player_count(ctx, records, world, bichon, player_builder):
    quiet = records.maps.create_new(file_name="1", description="Ant Cave")
    busy = records.maps.create_new(file_name="2", description="Zuma Temple")
    busy_map = world.add_map(Map(info=busy, width=20, height=20))
    world.add_map(Map(info=quiet, width=20, height=20))
    for name in ("A", "B"):
        player_builder().with_name(name).on_map(busy_map, 1, 1).build()
    player_builder().with_name("C").on_map(bichon, 1, 1).build()

    result = query_maps(ctx)
    assert [m.description for m in result.page.items] == [
        "Zuma Temple",
        "Bichon Province",
        "Ant Cave",
    ]


@pytest.mark.systems
def test_maps_keyword_matches_file_name(ctx, records, bichon):
    records.maps.create_new(file_name="zuma01", description="Zuma Temple")
    result = query_maps(ctx, keyword="ZUMA01")
    assert [m.file_name for m in result.page.items] == ["zuma01"]


@pytest.mark.systems
def test_players_by_name(ctx, player_factory):
    player_factory("Zed")
    player_factory("alice")
    player_factory("Bob")
    names = [p.name for p in query_players(ctx).page.items]
    assert names == ["alice", "Bob", "Zed"]
    assert [p.name for p in query_players(ctx, keyword="ZE").page.items] == ["Zed"]
