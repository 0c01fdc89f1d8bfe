"""
Unit tests for record types, enum parsing and derived monster stats.
"""

import pytest

from overseer.models import (
    ItemType,
    MagicSchool,
    MonsterInfo,
    RequiredClass,
    Stat,
    Stats,
    parse_enum,
)

# ============================================================================
# parse_enum
# ============================================================================


@pytest.mark.unit
def test_parse_enum_by_name_is_case_insensitive():
    assert parse_enum(ItemType, "weapon") is ItemType.WEAPON
    assert parse_enum(ItemType, "WEAPON") is ItemType.WEAPON
    assert parse_enum(MagicSchool, "weapon skills") is MagicSchool.WEAPON_SKILLS


@pytest.mark.unit
def test_parse_enum_by_number():
    assert parse_enum(ItemType, 2) is ItemType.WEAPON
    assert parse_enum(ItemType, "2") is ItemType.WEAPON


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "   ", "no-such-type", 999])
def test_parse_enum_unknown_is_none(value):
    assert parse_enum(ItemType, value) is None


@pytest.mark.unit
def test_parse_enum_flags():
    assert parse_enum(RequiredClass, "all") == RequiredClass.ALL
    assert parse_enum(RequiredClass, 3) == RequiredClass.WARRIOR | RequiredClass.WIZARD


# ============================================================================
# Stats
# ============================================================================


@pytest.mark.unit
def test_stats_skip_zero_and_default_to_zero():
    stats = Stats({Stat.HEALTH: 100, Stat.MANA: 0})
    assert len(stats) == 1
    assert stats[Stat.HEALTH] == 100
    assert stats[Stat.MANA] == 0
    assert stats.to_dict() == {"health": 100}


@pytest.mark.unit
def test_monster_stats_are_sparse():
    """Setting a stat to 0 removes its entry; nonzero creates or updates it."""
    monster = MonsterInfo(index=1, name="Hen")
    monster.set_stat(Stat.HEALTH, 40)
    monster.set_stat(Stat.MAX_DC, 5)
    monster.set_stat(Stat.MAX_DC, 7)
    monster.set_stat(Stat.HEALTH, 0)

    assert monster.info_stats == {Stat.MAX_DC: 7}
    assert all(amount != 0 for amount in monster.info_stats.values())


@pytest.mark.unit
def test_removed_stat_can_be_set_again():
    monster = MonsterInfo(index=1, name="Hen")
    monster.set_stat(Stat.HEALTH, 40)
    monster.stats_changed()

    monster.set_stat(Stat.HEALTH, 0)
    monster.stats_changed()
    assert Stat.HEALTH not in monster.info_stats
    assert monster.stats[Stat.HEALTH] == 0

    monster.set_stat(Stat.HEALTH, 25)
    monster.stats_changed()
    assert monster.info_stats == {Stat.HEALTH: 25}
    assert monster.stats[Stat.HEALTH] == 25
    assert monster.stats.to_dict() == {"health": 25}


@pytest.mark.unit
def test_monster_stats_only_refresh_on_stats_changed():
    monster = MonsterInfo(index=1, name="Hen")
    monster.set_stat(Stat.HEALTH, 40)
    assert monster.stats[Stat.HEALTH] == 0

    monster.stats_changed()
    assert monster.stats[Stat.HEALTH] == 40
    assert monster.stats == Stats({Stat.HEALTH: 40})


@pytest.mark.unit
def test_records_compare_by_identity():
    assert MonsterInfo(index=1, name="Hen") != MonsterInfo(index=1, name="Hen")
