"""Plain-dict views of records for Outcome.data."""

from __future__ import annotations

from typing import Any

from ..models import Account, ItemInfo, MagicInfo, MapInfo, MonsterInfo
from ..roles import role_label


def _enum(value) -> str:
    return value.name.lower() if value is not None else ""


def account_view(account: Account) -> dict[str, Any]:
    return {
        "index": account.index,
        "email": account.email,
        "role": account.role,
        "role_label": role_label(account.role),
        "game_gold": account.game_gold,
        "hunt_gold": account.hunt_gold,
        "banned": account.banned,
        "creation_date": account.creation_date.isoformat(),
        "last_login": account.last_login.isoformat() if account.last_login else None,
        "characters": [
            {
                "index": c.index,
                "name": c.name,
                "class": _enum(c.mir_class),
                "level": c.level,
                "deleted": c.deleted,
            }
            for c in list(account.characters)
        ],
    }


def item_view(info: ItemInfo) -> dict[str, Any]:
    return {
        "index": info.index,
        "name": info.name,
        "item_type": _enum(info.item_type),
        "required_class": int(info.required_class),
        "required_gender": _enum(info.required_gender),
        "required_type": _enum(info.required_type),
        "required_amount": info.required_amount,
        "shape": info.shape,
        "effect": _enum(info.effect),
        "image": info.image,
        "durability": info.durability,
        "price": info.price,
        "weight": info.weight,
        "stack_size": info.stack_size,
        "rarity": _enum(info.rarity),
    }


def monster_view(info: MonsterInfo) -> dict[str, Any]:
    return {
        "index": info.index,
        "name": info.name,
        "level": info.level,
        "experience": info.experience,
        "view_range": info.view_range,
        "cool_eye": info.cool_eye,
        "attack_delay": info.attack_delay,
        "move_delay": info.move_delay,
        "is_boss": info.is_boss,
        "undead": info.undead,
        "can_push": info.can_push,
        "can_tame": info.can_tame,
        "stats": info.stats.to_dict(),
    }


def map_view(info: MapInfo, player_count: int | None = None) -> dict[str, Any]:
    view = {
        "index": info.index,
        "file_name": info.file_name,
        "description": info.description,
        "mini_map": info.mini_map,
        "light": _enum(info.light),
        "fight": _enum(info.fight),
        "allow_rt": info.allow_rt,
        "allow_tt": info.allow_tt,
        "can_horse": info.can_horse,
        "can_mine": info.can_mine,
        "can_marriage_recall": info.can_marriage_recall,
        "allow_recall": info.allow_recall,
        "minimum_level": info.minimum_level,
        "maximum_level": info.maximum_level,
        "monster_health": [info.monster_health, info.max_monster_health],
        "monster_damage": [info.monster_damage, info.max_monster_damage],
        "drop_rate": [info.drop_rate, info.max_drop_rate],
        "experience_rate": [info.experience_rate, info.max_experience_rate],
        "gold_rate": [info.gold_rate, info.max_gold_rate],
        "skill_delay": info.skill_delay,
    }
    if player_count is not None:
        view["players"] = player_count
    return view


def magic_view(info: MagicInfo) -> dict[str, Any]:
    return {
        "index": info.index,
        "name": info.name,
        "magic": _enum(info.magic),
        "class": _enum(info.mir_class),
        "school": _enum(info.school),
        "mode": _enum(info.mode),
        "icon": info.icon,
        "base_power": [info.min_base_power, info.max_base_power],
        "level_power": [info.min_level_power, info.max_level_power],
        "base_cost": info.base_cost,
        "level_cost": info.level_cost,
        "need_level": [info.need_level1, info.need_level2, info.need_level3],
        "experience": [info.experience1, info.experience2, info.experience3],
        "delay": info.delay,
        "description": info.description,
    }


def player_view(player: Any) -> dict[str, Any]:
    live_map = player.current_map
    return {
        "name": player.name,
        "level": player.level,
        "class": _enum(player.character.mir_class),
        "map": live_map.info.index if live_map is not None else None,
        "location": list(player.location),
    }
