"""
Record types shared between the admin bridge and the simulation.

Catalog definitions (items, monsters, maps, magics) are templates; the live
objects created from them belong to the simulation (see world.py). Accounts,
characters and learned skills are the persistent player-side records.

Records compare by identity: two definitions with equal fields are still
different catalog entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, IntFlag
from typing import Any


# ============================================================================
# Catalog enumerations
# ============================================================================


class MirClass(IntEnum):
    WARRIOR = 0
    WIZARD = 1
    TAOIST = 2
    ASSASSIN = 3


class ItemType(IntEnum):
    NOTHING = 0
    CONSUMABLE = 1
    WEAPON = 2
    ARMOUR = 3
    TORCH = 4
    HELMET = 5
    NECKLACE = 6
    BRACELET = 7
    RING = 8
    SHOES = 9
    POISON = 10
    AMULET = 11
    MEAT = 12
    ORE = 13
    BOOK = 14
    SCROLL = 15
    SHIELD = 16


class RequiredClass(IntFlag):
    NONE = 0
    WARRIOR = 1
    WIZARD = 2
    TAOIST = 4
    ASSASSIN = 8
    WAR_WIZ_TAO = WARRIOR | WIZARD | TAOIST
    ALL = WARRIOR | WIZARD | TAOIST | ASSASSIN


class RequiredGender(IntEnum):
    MALE = 1
    FEMALE = 2
    NONE = 3


class RequiredType(IntEnum):
    LEVEL = 0
    MAX_LEVEL = 1
    AC = 2
    MR = 3
    DC = 4
    MC = 5
    SC = 6
    HEALTH = 7
    MANA = 8
    ACCURACY = 9
    AGILITY = 10


class Rarity(IntEnum):
    COMMON = 0
    SUPERIOR = 1
    ELITE = 2


class ItemEffect(IntEnum):
    NONE = 0
    GOLD = 1
    EXPERIENCE = 2
    RECALL = 3
    TELEPORT = 4
    RANDOM_TELEPORT = 5


class MagicSchool(IntEnum):
    NONE = 0
    PASSIVE = 1
    WEAPON_SKILLS = 2
    NEUTRAL = 3
    FIRE = 4
    ICE = 5
    LIGHTNING = 6
    WIND = 7
    HOLY = 8
    DARK = 9
    PHANTOM = 10
    PHYSICAL = 11


class MagicMode(IntEnum):
    ACTIVE = 0
    PASSIVE = 1
    TOGGLE = 2


class MagicType(IntEnum):
    """Skill kinds; a player holds at most one learned skill per kind."""

    NONE = 0
    SWORDSMANSHIP = 100
    POTION_MASTERY = 101
    SLAYING = 102
    THRUSTING = 103
    HALF_MOON = 104
    SHOULDER_DASH = 105
    FLAMING_SWORD = 106
    FIRE_BALL = 201
    LIGHTNING_BALL = 202
    ICE_BOLT = 203
    GUST = 204
    REPULSION = 205
    THUNDER_BOLT = 206
    HEAL = 300
    SPIRIT_SWORD = 301
    POISON_DUST = 302
    EXPLOSIVE_TALISMAN = 303
    SOUL_SHIELD = 304
    WILLOW_DANCE = 400
    VINE_TREE_DANCE = 401
    DISCIPLINE = 402


class LightSetting(IntEnum):
    DEFAULT = 0
    LIGHT = 1
    NIGHT = 2


class FightSetting(IntEnum):
    NONE = 0
    SAFE = 1
    FIGHT = 2


class Stat(IntEnum):
    """Stats an admin may set on a monster definition."""

    HEALTH = 0
    MANA = 1
    MIN_AC = 2
    MAX_AC = 3
    MIN_MR = 4
    MAX_MR = 5
    MIN_DC = 6
    MAX_DC = 7
    MIN_MC = 8
    MAX_MC = 9
    MIN_SC = 10
    MAX_SC = 11
    ACCURACY = 12
    AGILITY = 13


def parse_enum(enum_type: type[IntEnum], value: str | int | None):
    """
    Parse a filter value by member name (case-insensitive) or number.

    Returns None when the value is empty or does not name a member, so an
    unrecognised filter is ignored rather than matching nothing.
    """
    if value is None:
        return None
    if isinstance(value, int):
        try:
            return enum_type(value)
        except ValueError:
            return None
    text = value.strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return parse_enum(enum_type, int(text))
    key = text.upper().replace(" ", "_")
    return enum_type.__members__.get(key)


# ============================================================================
# Derived stats
# ============================================================================


class Stats:
    """Effective stat totals; missing stats read as 0."""

    def __init__(self, values: dict[Stat, int] | None = None) -> None:
        self._values: dict[Stat, int] = {}
        for stat, amount in (values or {}).items():
            if amount:
                self._values[stat] = self._values.get(stat, 0) + amount

    def __getitem__(self, stat: Stat) -> int:
        return self._values.get(stat, 0)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Stats):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return f"Stats({self.to_dict()})"

    def to_dict(self) -> dict[str, int]:
        return {stat.name.lower(): amount for stat, amount in sorted(self._values.items())}


# ============================================================================
# Player-side records
# ============================================================================


@dataclass(eq=False)
class Account:
    index: int
    email: str = ""
    role: int = 0
    game_gold: int = 0
    hunt_gold: int = 0
    banned: bool = False
    creation_date: datetime = field(default_factory=datetime.now)
    last_login: datetime | None = None
    characters: list["Character"] = field(default_factory=list)


@dataclass(eq=False)
class Character:
    index: int
    name: str = ""
    account: Account | None = field(default=None, repr=False)
    mir_class: MirClass = MirClass.WARRIOR
    level: int = 1
    deleted: bool = False
    magics: list["UserMagic"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class UserMagic:
    """A skill learned by one character."""

    index: int
    character: Character | None = field(default=None, repr=False)
    info: "MagicInfo | None" = None
    level: int = 0
    experience: int = 0

    def to_client_info(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "info_index": self.info.index if self.info else 0,
            "level": self.level,
            "experience": self.experience,
        }


# ============================================================================
# Catalog definitions
# ============================================================================


@dataclass(eq=False)
class ItemInfo:
    index: int
    name: str = ""
    item_type: ItemType = ItemType.NOTHING
    required_class: RequiredClass = RequiredClass.ALL
    required_gender: RequiredGender = RequiredGender.NONE
    required_type: RequiredType = RequiredType.LEVEL
    required_amount: int = 0
    shape: int = 0
    effect: ItemEffect = ItemEffect.NONE
    image: int = 0
    durability: int = 0
    price: int = 0
    weight: int = 0
    stack_size: int = 1
    rarity: Rarity = Rarity.COMMON


@dataclass(eq=False)
class MonsterInfo:
    """
    Monster template.

    `info_stats` is the sparse source of truth (nonzero amounts only);
    `stats` is derived from it and only refreshed by stats_changed().
    """

    index: int
    name: str = ""
    level: int = 1
    experience: int = 0
    view_range: int = 7
    cool_eye: int = 0
    attack_delay: int = 2500
    move_delay: int = 1800
    is_boss: bool = False
    undead: bool = False
    can_push: bool = True
    can_tame: bool = True
    info_stats: dict[Stat, int] = field(default_factory=dict)
    stats: Stats = field(default_factory=Stats)

    def set_stat(self, stat: Stat, amount: int) -> None:
        """Set one stat entry; an amount of 0 removes the entry."""
        if amount == 0:
            self.info_stats.pop(stat, None)
        else:
            self.info_stats[stat] = amount

    def stats_changed(self) -> None:
        self.stats = Stats(self.info_stats)


@dataclass(eq=False)
class MapInfo:
    index: int
    file_name: str = ""
    description: str = ""
    mini_map: int = 0
    light: LightSetting = LightSetting.DEFAULT
    fight: FightSetting = FightSetting.NONE
    allow_rt: bool = True
    allow_tt: bool = True
    can_horse: bool = True
    can_mine: bool = False
    can_marriage_recall: bool = True
    allow_recall: bool = True
    minimum_level: int = 0
    maximum_level: int = 0
    # Rate pairs: floor then ceiling, in percent
    monster_health: int = 0
    max_monster_health: int = 0
    monster_damage: int = 0
    max_monster_damage: int = 0
    drop_rate: int = 0
    max_drop_rate: int = 0
    experience_rate: int = 0
    max_experience_rate: int = 0
    gold_rate: int = 0
    max_gold_rate: int = 0
    skill_delay: int = 0


@dataclass(eq=False)
class MagicInfo:
    index: int
    name: str = ""
    magic: MagicType = MagicType.NONE
    mir_class: MirClass = MirClass.WARRIOR
    school: MagicSchool = MagicSchool.NONE
    mode: MagicMode = MagicMode.ACTIVE
    icon: int = 0
    min_base_power: int = 0
    max_base_power: int = 0
    min_level_power: int = 0
    max_level_power: int = 0
    base_cost: int = 0
    level_cost: int = 0
    need_level1: int = 0
    need_level2: int = 0
    need_level3: int = 0
    experience1: int = 0
    experience2: int = 0
    experience3: int = 0
    delay: int = 0
    description: str = ""
