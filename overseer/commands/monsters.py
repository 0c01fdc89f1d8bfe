"""
Monster commands: definition edits, spawning, clearing a map.

Stat edits go through MonsterInfo.set_stat and end with an explicit
stats_changed() so the derived view is never stale after a command.
"""

from typing import Any, Optional

from pydantic import field_validator

from ..models import Stat, parse_enum
from ..outcome import AuditRecord, InvalidInputError, Outcome
from ..placement import clamp_count, clamp_radius, spawn_near
from ..roles import AccountIdentity
from .base import (
    AdminCommand,
    CommandParams,
    IndexParams,
    admin_command,
    apply_fields,
)
from .players import PlayerParams
from .views import monster_view


class MonsterFields(CommandParams):
    name: Optional[str] = None
    level: Optional[int] = None
    experience: Optional[int] = None
    view_range: Optional[int] = None
    cool_eye: Optional[int] = None
    attack_delay: Optional[int] = None
    move_delay: Optional[int] = None
    is_boss: Optional[bool] = None
    undead: Optional[bool] = None
    can_push: Optional[bool] = None
    can_tame: Optional[bool] = None
    stats: Optional[dict[Stat, int]] = None

    @field_validator("stats", mode="before")
    @classmethod
    def parse_stat_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        parsed = {}
        for key, amount in value.items():
            stat = key if isinstance(key, Stat) else parse_enum(Stat, key)
            if stat is None:
                raise ValueError(f"Unknown stat: {key!r}")
            parsed[stat] = amount
        return parsed


class CreateMonsterParams(MonsterFields):
    name: str


class UpdateMonsterParams(MonsterFields):
    index: int


class SpawnParams(PlayerParams):
    monster_index: int
    count: int = 1
    radius: int = 3


def _split_fields(fields: dict) -> tuple[dict, dict]:
    stats = fields.pop("stats", None) or {}
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if not fields["name"]:
            raise InvalidInputError("Monster name is required")
    return fields, stats


@admin_command(
    name="create_monster",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=CreateMonsterParams,
    description="Add a monster definition",
    mutating=True,
)
class CreateMonster(AdminCommand):
    def execute(self, params: CreateMonsterParams) -> Outcome:
        fields, stats = _split_fields(params.provided())
        info = self.ctx.records.monsters.create_new(**fields)
        for stat, amount in stats.items():
            if amount != 0:
                info.set_stat(stat, amount)
        info.stats_changed()
        return Outcome.success(
            f"Created monster {info.index} ({info.name})",
            data=monster_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="monster",
                target_id=str(info.index),
                details={"name": info.name},
            ),
        )


@admin_command(
    name="update_monster",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=UpdateMonsterParams,
    description="Edit a monster definition; a stat amount of 0 removes it",
    mutating=True,
)
class UpdateMonster(AdminCommand):
    def execute(self, params: UpdateMonsterParams) -> Outcome:
        fields, stats = _split_fields(params.provided("index"))
        info = self.require_monster_info(params.index)
        apply_fields(info, fields)
        for stat, amount in stats.items():
            info.set_stat(stat, amount)
        info.stats_changed()

        changed = sorted(fields) + [f"stat:{s.name.lower()}" for s in stats]
        return Outcome.success(
            f"Updated monster {info.index} ({info.name})",
            data=monster_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="monster",
                target_id=str(info.index),
                details={"fields": ",".join(changed) or "-"},
            ),
        )


@admin_command(
    name="monster_detail",
    required_role=AccountIdentity.ADMIN,
    params=IndexParams,
    description="Show one monster definition",
)
class MonsterDetail(AdminCommand):
    def execute(self, params: IndexParams) -> Outcome:
        info = self.require_monster_info(params.index)
        return Outcome.success(f"Monster {info.index}", data=monster_view(info))


@admin_command(
    name="spawn_monsters",
    required_role=AccountIdentity.ADMIN,
    params=SpawnParams,
    description="Spawn monsters around a player",
    mutating=True,
)
class SpawnMonsters(AdminCommand):
    def execute(self, params: SpawnParams) -> Outcome:
        player = self.require_player(params.name)
        live_map = self.require_player_map(player)
        info = self.require_monster_info(params.monster_index)

        config = self.ctx.config
        count = clamp_count(params.count, config.spawn_max_count)
        radius = clamp_radius(params.radius, config.spawn_max_radius)
        report = spawn_near(
            self.ctx.world,
            info,
            live_map,
            player.location,
            count,
            radius,
            self.ctx.rng,
            config.placement_attempts,
        )

        return Outcome.success(
            f"Spawned {report.placed}/{report.requested} {info.name} near {player.name}",
            data={
                "placed": report.placed,
                "requested": report.requested,
                "cells": [list(c) for c in report.cells],
            },
            audit=AuditRecord(
                action=self.name,
                target_type="map",
                target_id=str(live_map.info.index),
                details={
                    "monster": info.index,
                    "placed": report.placed,
                    "requested": report.requested,
                },
            ),
        )


@admin_command(
    name="clear_map_monsters",
    required_role=AccountIdentity.ADMIN,
    params=PlayerParams,
    description="Kill every live monster on a player's map",
    mutating=True,
)
class ClearMapMonsters(AdminCommand):
    def execute(self, params: PlayerParams) -> Outcome:
        player = self.require_player(params.name)
        live_map = self.require_player_map(player)

        killed = 0
        for monster in live_map.monsters():
            if monster.dead:
                continue
            self.ctx.world.kill(monster)
            killed += 1

        return Outcome.success(
            f"Killed {killed} monster(s) on {live_map.info.description}",
            data={"killed": killed},
            audit=AuditRecord(
                action=self.name,
                target_type="map",
                target_id=str(live_map.info.index),
                details={"killed": killed},
            ),
        )
