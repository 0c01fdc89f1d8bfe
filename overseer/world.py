"""
Simulation boundary.

The admin bridge never reaches into the game loop directly: everything it
does to live state goes through the `Simulation` and `LiveMap` protocols.
`World` is an in-memory implementation used by the CLI, the tests and hosts
that do not bring their own simulation.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .events import Event
from .models import Character, ItemInfo, MagicType, MapInfo, MonsterInfo, UserMagic

logger = logging.getLogger(__name__)

# (x, y) grid coordinate
Cell = tuple[int, int]

DEFAULT_INVENTORY_SIZE = 40


@runtime_checkable
class LiveMap(Protocol):
    """A running map instance."""

    info: MapInfo
    width: int
    height: int
    players: list[Any]
    objects: list[Any]

    def is_blocked(self, cell: Cell) -> bool:
        """True when the cell is outside the grid or blocks movement."""
        ...

    def monsters(self) -> list[Any]:
        """Monster objects on the map; other objects are never included."""
        ...


@runtime_checkable
class Simulation(Protocol):
    """Accessors the admin commands are allowed to use on the live world."""

    def connected_players(self) -> list[Any]: ...

    def find_player(self, name: str) -> Any | None: ...

    def live_maps(self) -> list[LiveMap]: ...

    def get_map(self, index: int) -> LiveMap | None: ...

    def create_item(self, info: ItemInfo, count: int = 1) -> Any: ...

    def can_gain_item(self, player: Any, item: Any) -> bool: ...

    def gain_item(self, player: Any, item: Any) -> None: ...

    def spawn_monster(self, info: MonsterInfo, live_map: LiveMap, cell: Cell) -> bool: ...

    def kill(self, obj: Any) -> None: ...

    def level_up(self, player: Any) -> None: ...

    def teleport(self, player: Any, live_map: LiveMap, cell: Cell) -> bool: ...

    def random_location(self, live_map: LiveMap) -> Cell | None: ...

    def broadcast(self, event: Event) -> int: ...

    def disconnect(self, player: Any, reason: str) -> None: ...


# ============================================================================
# In-memory reference implementation
# ============================================================================


@dataclass(eq=False)
class Map:
    info: MapInfo
    width: int
    height: int
    blocked: set[Cell] = field(default_factory=set)
    players: list["PlayerObject"] = field(default_factory=list)
    objects: list[Any] = field(default_factory=list)

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_blocked(self, cell: Cell) -> bool:
        return not self.in_bounds(cell) or cell in self.blocked

    def monsters(self) -> list["MonsterObject"]:
        return [obj for obj in list(self.objects) if isinstance(obj, MonsterObject)]


@dataclass(eq=False)
class MonsterObject:
    info: MonsterInfo
    current_map: Map | None = None
    location: Cell = (0, 0)
    dead: bool = False

    def die(self) -> None:
        self.dead = True


@dataclass(eq=False)
class ItemObject:
    info: ItemInfo
    count: int = 1


@dataclass(eq=False)
class PlayerObject:
    """
    An online character.

    `magics` is a by-type lookup derived from `character.magics`; it is only
    changed through learn_magic()/forget_magic() so the two stay in step.
    """

    character: Character
    current_map: Map | None = None
    location: Cell = (0, 0)
    inventory: list[ItemObject] = field(default_factory=list)
    inventory_size: int = DEFAULT_INVENTORY_SIZE
    outbox: list[Event] = field(default_factory=list)
    magics: dict[MagicType, UserMagic] = field(default_factory=dict)
    max_health: int = 0
    connected: bool = True

    def __post_init__(self) -> None:
        if not self.magics:
            self.rebuild_magic_index()
        self.recalculate()

    @property
    def name(self) -> str:
        return self.character.name

    @property
    def level(self) -> int:
        return self.character.level

    @level.setter
    def level(self, value: int) -> None:
        self.character.level = value

    @property
    def email(self) -> str:
        account = self.character.account
        return account.email if account else ""

    def enqueue(self, event: Event) -> None:
        """Queue an outbound event; the transport drains it later."""
        if not self.connected:
            raise ConnectionError(f"{self.name} is not connected")
        self.outbox.append(event)

    def recalculate(self) -> None:
        self.max_health = 50 + self.level * 10

    # ---------- Learned skills ----------

    def learn_magic(self, magic: UserMagic) -> None:
        self.character.magics.append(magic)
        self.magics[magic.info.magic] = magic

    def forget_magic(self, magic: UserMagic) -> None:
        if magic in self.character.magics:
            self.character.magics.remove(magic)
        if self.magics.get(magic.info.magic) is magic:
            del self.magics[magic.info.magic]

    def rebuild_magic_index(self) -> None:
        self.magics = {m.info.magic: m for m in self.character.magics if m.info}

    def magic_index_consistent(self) -> bool:
        """Every learned skill is in the lookup and nothing else is."""
        owned = [m for m in self.character.magics if m.info]
        if len(owned) != len(self.magics):
            return False
        return all(self.magics.get(m.info.magic) is m for m in owned)


class World:
    """
    In-memory simulation state.

    Maps are keyed by MapInfo index. Connected players live in `players`;
    disconnecting removes them.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.maps: dict[int, Map] = {}
        self.players: list[PlayerObject] = []
        self.rng = rng or random.Random()

    # ---------- Setup ----------

    def add_map(self, live_map: Map) -> Map:
        self.maps[live_map.info.index] = live_map
        return live_map

    def connect(
        self, player: PlayerObject, live_map: Map | None = None, cell: Cell | None = None
    ) -> PlayerObject:
        player.connected = True
        self.players.append(player)
        if live_map is not None:
            self._place(player, live_map, cell or player.location)
        return player

    def _place(self, player: PlayerObject, live_map: Map, cell: Cell) -> None:
        if player.current_map is not None and player in player.current_map.players:
            player.current_map.players.remove(player)
        player.current_map = live_map
        player.location = cell
        live_map.players.append(player)

    # ---------- Simulation protocol ----------

    def connected_players(self) -> list[PlayerObject]:
        return list(self.players)

    def find_player(self, name: str) -> PlayerObject | None:
        wanted = name.casefold()
        for player in self.connected_players():
            if player.name.casefold() == wanted:
                return player
        return None

    def live_maps(self) -> list[Map]:
        return list(self.maps.values())

    def get_map(self, index: int) -> Map | None:
        return self.maps.get(index)

    def create_item(self, info: ItemInfo, count: int = 1) -> ItemObject:
        """One stack of the item; the count is capped at the stack size."""
        return ItemObject(info=info, count=min(count, max(info.stack_size, 1)))

    def can_gain_item(self, player: PlayerObject, item: ItemObject) -> bool:
        return len(player.inventory) < player.inventory_size

    def gain_item(self, player: PlayerObject, item: ItemObject) -> None:
        player.inventory.append(item)

    def spawn_monster(self, info: MonsterInfo, live_map: Map, cell: Cell) -> bool:
        if live_map.is_blocked(cell):
            return False
        live_map.objects.append(MonsterObject(info=info, current_map=live_map, location=cell))
        return True

    def kill(self, obj: Any) -> None:
        obj.die()
        live_map = getattr(obj, "current_map", None)
        if live_map is not None and obj in live_map.objects:
            live_map.objects.remove(obj)

    def level_up(self, player: PlayerObject) -> None:
        player.recalculate()
        logger.debug(f"{player.name} recalculated at level {player.level}")

    def teleport(self, player: PlayerObject, live_map: Map, cell: Cell) -> bool:
        self._place(player, live_map, cell)
        return True

    def random_location(self, live_map: Map) -> Cell | None:
        free = [
            (x, y)
            for x in range(live_map.width)
            for y in range(live_map.height)
            if (x, y) not in live_map.blocked
        ]
        if not free:
            return None
        return self.rng.choice(free)

    def broadcast(self, event: Event) -> int:
        """Queue an event for every connected player; returns deliveries."""
        delivered = 0
        for player in self.connected_players():
            try:
                player.enqueue(dict(event))
            except Exception as e:
                logger.debug(f"Broadcast to {player.name} dropped: {e}")
                continue
            delivered += 1
        return delivered

    def disconnect(self, player: PlayerObject, reason: str) -> None:
        player.connected = False
        if player in self.players:
            self.players.remove(player)
        if player.current_map is not None and player in player.current_map.players:
            player.current_map.players.remove(player)
        logger.info(f"Disconnected {player.name}: {reason}")
