"""
Commands acting on online players.

Players are looked up by name among connected sessions on every call; a
player who logged off between two commands is reported as not online.
"""

from pydantic import Field

from .. import events
from ..outcome import (
    AuditRecord,
    InvalidInputError,
    NotFoundError,
    Outcome,
    PreconditionError,
)
from ..roles import AccountIdentity
from .base import AdminCommand, CommandParams, admin_command


class PlayerParams(CommandParams):
    name: str = Field(..., min_length=1, description="Online character name")


class TeleportParams(PlayerParams):
    map_index: int = Field(..., description="Target map definition index")
    x: int = 0
    y: int = 0


class BroadcastParams(CommandParams):
    message: str = Field(..., min_length=1, max_length=1000)


class GiveItemParams(PlayerParams):
    item_index: int
    count: int = 1


class LevelUpParams(PlayerParams):
    levels: int = Field(..., description="Levels to add (must be positive)")


@admin_command(
    name="teleport_player",
    required_role=AccountIdentity.ADMIN,
    params=TeleportParams,
    description="Move a player to a map; (0, 0) picks a random free cell",
    mutating=True,
)
class TeleportPlayer(AdminCommand):
    def execute(self, params: TeleportParams) -> Outcome:
        player = self.require_player(params.name)
        live_map = self.ctx.world.get_map(params.map_index)
        if live_map is None:
            raise NotFoundError(f"Map {params.map_index} not found")

        cell = (params.x, params.y)
        x_ok = 0 < params.x < live_map.width
        y_ok = 0 < params.y < live_map.height
        if not (x_ok and y_ok):
            cell = self.ctx.world.random_location(live_map)
            if cell is None:
                raise PreconditionError(f"No free location on map {params.map_index}")

        if not self.ctx.world.teleport(player, live_map, cell):
            raise PreconditionError(f"Could not move {player.name} to {cell}")

        return Outcome.success(
            f"Teleported {player.name} to {live_map.info.description} {cell}",
            data={"name": player.name, "map": live_map.info.index, "location": list(cell)},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"map": live_map.info.index, "x": cell[0], "y": cell[1]},
            ),
        )


@admin_command(
    name="broadcast",
    required_role=AccountIdentity.OPERATOR,
    params=BroadcastParams,
    description="Send a system announcement to every connected player",
    mutating=True,
)
class Broadcast(AdminCommand):
    def execute(self, params: BroadcastParams) -> Outcome:
        delivered = self.ctx.world.broadcast(events.announcement(params.message))
        return Outcome.success(
            f"Announcement sent to {delivered} player(s)",
            data={"delivered": delivered},
            audit=AuditRecord(
                action=self.name,
                target_type="world",
                target_id="all",
                details={"length": len(params.message)},
            ),
        )


@admin_command(
    name="give_item",
    required_role=AccountIdentity.ADMIN,
    params=GiveItemParams,
    description="Create an item instance in a player's inventory",
    mutating=True,
)
class GiveItem(AdminCommand):
    def execute(self, params: GiveItemParams) -> Outcome:
        player = self.require_player(params.name)
        info = self.require_item_info(params.item_index)
        count = params.count if params.count > 0 else 1

        item = self.ctx.world.create_item(info, count)
        if not self.ctx.world.can_gain_item(player, item):
            raise PreconditionError(f"{player.name}'s inventory is full")
        self.ctx.world.gain_item(player, item)

        message = f"Gave {item.count} x {info.name} to {player.name}"
        if item.count < count:
            message += f" (requested {count}, capped at stack size)"
        return Outcome.success(
            message,
            data={
                "name": player.name,
                "item": info.index,
                "count": item.count,
                "requested": count,
            },
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"item": info.index, "count": item.count},
            ),
        )


@admin_command(
    name="kick_player",
    required_role=AccountIdentity.SUPERVISOR,
    params=PlayerParams,
    description="Disconnect a player's session",
    mutating=True,
)
class KickPlayer(AdminCommand):
    def execute(self, params: PlayerParams) -> Outcome:
        player = self.require_player(params.name)
        self.notify(player, events.disconnect(events.KICKED_BY_ADMIN))
        self.ctx.world.disconnect(player, events.KICKED_BY_ADMIN)
        return Outcome.success(
            f"Kicked {player.name}",
            data={"name": player.name},
            audit=AuditRecord(action=self.name, target_type="player", target_id=player.name),
        )


@admin_command(
    name="recall_player",
    required_role=AccountIdentity.ADMIN,
    params=PlayerParams,
    description="Bring a player to the calling admin's character",
    mutating=True,
)
class RecallPlayer(AdminCommand):
    def execute(self, params: PlayerParams) -> Outcome:
        if self.caller is None:
            raise PreconditionError("Recall needs a calling account")
        player = self.require_player(params.name)

        wanted = self.caller.email.casefold()
        own = next(
            (
                p
                for p in self.ctx.world.connected_players()
                if p.email.casefold() == wanted and p is not player
            ),
            None,
        )
        if own is None:
            raise NotFoundError(f"No online character for {self.caller.email}")
        live_map = self.require_player_map(own)

        if not self.ctx.world.teleport(player, live_map, own.location):
            raise PreconditionError(f"Could not move {player.name} to {own.name}")

        return Outcome.success(
            f"Recalled {player.name} to {own.name}",
            data={"name": player.name, "map": live_map.info.index, "location": list(own.location)},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"map": live_map.info.index, "to": own.name},
            ),
        )


@admin_command(
    name="level_up",
    required_role=AccountIdentity.ADMIN,
    params=LevelUpParams,
    description="Raise a player's level",
    mutating=True,
)
class LevelUp(AdminCommand):
    def execute(self, params: LevelUpParams) -> Outcome:
        if params.levels <= 0:
            raise InvalidInputError("Levels must be greater than 0")
        player = self.require_player(params.name)

        max_level = self.ctx.config.max_level
        current = player.level
        target = current + params.levels
        if target > max_level:
            raise PreconditionError(
                f"Level cannot exceed {max_level} "
                f"({player.name} is level {current}, requested {target})",
                data={"max_level": max_level, "current": current, "target": target},
            )

        player.level = target
        self.ctx.world.level_up(player)
        return Outcome.success(
            f"{player.name} is now level {target}",
            data={"name": player.name, "level": target},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"from": current, "to": target},
            ),
        )
