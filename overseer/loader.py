"""
World snapshot loader.

A snapshot is one YAML document holding the record side of the world plus
enough live state (map grids, online players) to run admin commands
against it outside a real server:

    accounts:
      - index: 1
        email: gm@example.com
        role: 4
        characters:
          - index: 1
            name: Warden
            mir_class: warrior
            level: 40
            magics:
              - {index: 1, info: 1, level: 3}
    items:
      - {index: 1, name: Wooden Sword, item_type: weapon}
    monsters:
      - {index: 1, name: Hen, level: 1, stats: {health: 15}}
    maps:
      - {index: 1, file_name: "0", description: Bichon Province,
         width: 300, height: 300, blocked: [[0, 0]]}
    magics:
      - {index: 1, name: Fencing, magic: swordsmanship, mir_class: warrior}
    online:
      - {name: Warden, map: 1, x: 120, y: 88}

Enum fields accept member names (case-insensitive) or numbers.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .models import (
    Account,
    Character,
    ItemInfo,
    MagicInfo,
    MapInfo,
    MonsterInfo,
    Stat,
    UserMagic,
    parse_enum,
)
from .records import RecordStore
from .world import Map, PlayerObject, World

logger = logging.getLogger(__name__)

SECTIONS = ("accounts", "items", "monsters", "maps", "magics", "online")

# Live-map keys stored alongside MapInfo fields
MAP_GRID_KEYS = ("width", "height", "blocked")


class SnapshotError(ValueError):
    """Raised when a snapshot document is malformed."""


@dataclass
class Snapshot:
    records: RecordStore
    world: World


# ============================================================================
# Loading
# ============================================================================


def _build(cls, data: dict[str, Any], skip: tuple[str, ...] = ()):
    """Instantiate a record dataclass, coercing enum-valued fields."""
    known = {f.name: f for f in fields(cls)}
    values = {}
    for key, value in data.items():
        if key in skip:
            continue
        if key not in known:
            raise SnapshotError(f"{cls.__name__}: unknown field '{key}'")
        default = known[key].default
        if isinstance(default, Enum) and not isinstance(value, Enum):
            parsed = parse_enum(type(default), value)
            if parsed is None:
                raise SnapshotError(f"{cls.__name__}.{key}: invalid value {value!r}")
            value = parsed
        values[key] = value
    if "index" not in values:
        raise SnapshotError(f"{cls.__name__}: missing index")
    return cls(**values)


def _load_monster(data: dict[str, Any]) -> MonsterInfo:
    info = _build(MonsterInfo, data, skip=("stats",))
    for key, amount in (data.get("stats") or {}).items():
        stat = parse_enum(Stat, key)
        if stat is None:
            raise SnapshotError(f"MonsterInfo {info.index}: unknown stat {key!r}")
        info.set_stat(stat, int(amount))
    info.stats_changed()
    return info


def _load_accounts(store: RecordStore, entries: list[dict]) -> None:
    for entry in entries:
        account = _build(Account, entry, skip=("characters",))
        store.accounts.add(account)
        for char_data in entry.get("characters") or []:
            character = _build(Character, char_data, skip=("magics",))
            character.account = account
            account.characters.append(character)
            store.characters.add(character)
            for magic_data in char_data.get("magics") or []:
                info = store.magics.find(magic_data.get("info"))
                if info is None:
                    raise SnapshotError(
                        f"Character {character.name}: unknown skill {magic_data.get('info')}"
                    )
                magic = UserMagic(
                    index=magic_data["index"],
                    character=character,
                    info=info,
                    level=magic_data.get("level", 0),
                    experience=magic_data.get("experience", 0),
                )
                character.magics.append(magic)
                store.user_magics.add(magic)


def load_snapshot_data(data: dict[str, Any]) -> Snapshot:
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise SnapshotError(f"Unknown snapshot sections: {', '.join(sorted(unknown))}")

    store = RecordStore()
    world = World()

    for entry in data.get("items") or []:
        store.items.add(_build(ItemInfo, entry))
    for entry in data.get("monsters") or []:
        store.monsters.add(_load_monster(entry))
    for entry in data.get("magics") or []:
        store.magics.add(_build(MagicInfo, entry))
    for entry in data.get("maps") or []:
        info = store.maps.add(_build(MapInfo, entry, skip=MAP_GRID_KEYS))
        if "width" in entry and "height" in entry:
            world.add_map(
                Map(
                    info=info,
                    width=int(entry["width"]),
                    height=int(entry["height"]),
                    blocked={tuple(cell) for cell in entry.get("blocked") or []},
                )
            )
    # Characters reference skills, so accounts load after magics
    _load_accounts(store, data.get("accounts") or [])

    for entry in data.get("online") or []:
        wanted = str(entry["name"]).casefold()
        character = store.characters.find_by(lambda c: c.name.casefold() == wanted)
        if character is None:
            raise SnapshotError(f"Online player {entry['name']} has no character")
        live_map = world.get_map(entry["map"]) if "map" in entry else None
        cell = (int(entry.get("x", 0)), int(entry.get("y", 0)))
        world.connect(PlayerObject(character=character, location=cell), live_map, cell)

    logger.info(
        f"Loaded snapshot: {len(store.accounts)} accounts, {len(store.items)} items, "
        f"{len(store.monsters)} monsters, {len(store.maps)} maps, "
        f"{len(store.magics)} magics, {len(world.players)} online"
    )
    return Snapshot(records=store, world=world)


def load_snapshot(path: str | Path) -> Snapshot:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SnapshotError(f"{path}: expected a mapping at the top level")
    return load_snapshot_data(data)


# ============================================================================
# Dumping
# ============================================================================


def _enum_value(value: Enum) -> str | int:
    # Combined flags have no single member name
    name = value.name
    if name and name.isidentifier():
        return name.lower()
    return int(value)


def _plain(record, skip: tuple[str, ...] = ()) -> dict[str, Any]:
    out = {}
    for f in fields(record):
        if f.name in skip:
            continue
        value = getattr(record, f.name)
        if isinstance(value, Enum):
            value = _enum_value(value)
        out[f.name] = value
    return out


def dump_snapshot_data(snapshot: Snapshot) -> dict[str, Any]:
    store, world = snapshot.records, snapshot.world

    accounts = []
    for account in store.accounts.snapshot():
        entry = _plain(account, skip=("characters",))
        entry["characters"] = []
        for character in account.characters:
            char_entry = _plain(character, skip=("account", "magics"))
            char_entry["magics"] = [
                {
                    "index": m.index,
                    "info": m.info.index,
                    "level": m.level,
                    "experience": m.experience,
                }
                for m in character.magics
                if m.info is not None
            ]
            entry["characters"].append(char_entry)
        accounts.append(entry)

    monsters = []
    for info in store.monsters.snapshot():
        entry = _plain(info, skip=("info_stats", "stats"))
        entry["stats"] = {s.name.lower(): amount for s, amount in sorted(info.info_stats.items())}
        monsters.append(entry)

    maps = []
    for info in store.maps.snapshot():
        entry = _plain(info)
        live_map = world.get_map(info.index)
        if live_map is not None:
            entry["width"] = live_map.width
            entry["height"] = live_map.height
            entry["blocked"] = [list(cell) for cell in sorted(live_map.blocked)]
        maps.append(entry)

    online = []
    for player in world.connected_players():
        entry = {"name": player.name, "x": player.location[0], "y": player.location[1]}
        if player.current_map is not None:
            entry["map"] = player.current_map.info.index
        online.append(entry)

    return {
        "accounts": accounts,
        "items": [_plain(info) for info in store.items.snapshot()],
        "monsters": monsters,
        "maps": maps,
        "magics": [_plain(info) for info in store.magics.snapshot()],
        "online": online,
    }


def dump_snapshot(snapshot: Snapshot, path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            dump_snapshot_data(snapshot),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
