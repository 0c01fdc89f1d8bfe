"""
Skill commands.

A learned skill lives in two places: Character.magics (the owned list) and
PlayerObject.magics (the by-type lookup for the online session). Grants and
revokes always touch both through learn_magic()/forget_magic().
"""

from typing import Any, Optional

from pydantic import Field

from .. import events
from ..models import MagicInfo, UserMagic
from ..outcome import AuditRecord, InvalidInputError, NotFoundError, Outcome
from ..roles import AccountIdentity
from .base import AdminCommand, CommandParams, admin_command, apply_fields
from .players import PlayerParams


class GrantSkillParams(PlayerParams):
    magic_index: int
    level: int = 0


class GrantClassSkillsParams(PlayerParams):
    level: int = 0


class RevokeSkillParams(PlayerParams):
    magic_index: int


class UpdateMagicParams(CommandParams):
    index: int
    name: Optional[str] = None
    icon: Optional[int] = None
    min_base_power: Optional[int] = None
    max_base_power: Optional[int] = None
    min_level_power: Optional[int] = None
    max_level_power: Optional[int] = None
    base_cost: Optional[int] = None
    level_cost: Optional[int] = None
    need_level1: Optional[int] = None
    need_level2: Optional[int] = None
    need_level3: Optional[int] = None
    experience1: Optional[int] = None
    experience2: Optional[int] = None
    experience3: Optional[int] = None
    delay: Optional[int] = None
    description: Optional[str] = Field(None, max_length=2000)


def _learned(player: Any, info: MagicInfo) -> UserMagic | None:
    for magic in list(player.character.magics):
        if magic.info is info:
            return magic
    return None


class _SkillCommand(AdminCommand):
    def clamp_level(self, level: int) -> int:
        return max(0, min(level, self.ctx.config.max_magic_level))

    def grant(self, player: Any, info: MagicInfo, level: int) -> tuple[UserMagic, bool]:
        """Set or create the player's skill; returns (skill, created)."""
        level = self.clamp_level(level)
        magic = _learned(player, info)
        if magic is not None:
            magic.level = level
            magic.experience = 0
            self.notify(player, events.magic_leveled(info.index, magic.level, magic.experience))
            return magic, False

        magic = self.ctx.records.user_magics.create_new(
            character=player.character, info=info, level=level, experience=0
        )
        player.learn_magic(magic)
        self.notify(player, events.new_magic(magic.to_client_info()))
        return magic, True


@admin_command(
    name="grant_skill",
    required_role=AccountIdentity.ADMIN,
    params=GrantSkillParams,
    description="Teach a skill or set its level",
    mutating=True,
)
class GrantSkill(_SkillCommand):
    def execute(self, params: GrantSkillParams) -> Outcome:
        player = self.require_player(params.name)
        info = self.require_magic_info(params.magic_index)
        magic, created = self.grant(player, info, params.level)
        verb = "Added" if created else "Updated"
        return Outcome.success(
            f"{verb} {info.name} Lv.{magic.level} for {player.name}",
            data={"name": player.name, "magic": info.index, "level": magic.level, "created": created},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"magic": info.index, "level": magic.level, "created": created},
            ),
        )


@admin_command(
    name="grant_class_skills",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=GrantClassSkillsParams,
    description="Teach every skill of the player's class at one level",
    mutating=True,
)
class GrantClassSkills(_SkillCommand):
    def execute(self, params: GrantClassSkillsParams) -> Outcome:
        player = self.require_player(params.name)
        mir_class = player.character.mir_class

        added = updated = 0
        for info in self.ctx.records.magics.snapshot():
            if info.mir_class != mir_class:
                continue
            _, created = self.grant(player, info, params.level)
            if created:
                added += 1
            else:
                updated += 1

        level = self.clamp_level(params.level)
        return Outcome.success(
            f"{player.name}: added {added}, updated {updated} skill(s) at Lv.{level}",
            data={"name": player.name, "added": added, "updated": updated, "level": level},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"added": added, "updated": updated, "level": level},
            ),
        )


@admin_command(
    name="revoke_skill",
    required_role=AccountIdentity.ADMIN,
    params=RevokeSkillParams,
    description="Remove a learned skill (takes effect on reconnect)",
    mutating=True,
)
class RevokeSkill(AdminCommand):
    def execute(self, params: RevokeSkillParams) -> Outcome:
        player = self.require_player(params.name)
        magic = next(
            (
                m
                for m in list(player.character.magics)
                if m.info is not None and m.info.index == params.magic_index
            ),
            None,
        )
        if magic is None:
            raise NotFoundError(f"{player.name} does not know skill {params.magic_index}")

        player.forget_magic(magic)
        self.ctx.records.user_magics.delete(magic)

        # There is no client message for removal; the session sees it on reconnect
        return Outcome.success(
            f"Removed {magic.info.name} from {player.name} (reconnect required)",
            data={"name": player.name, "magic": params.magic_index, "reconnect_required": True},
            audit=AuditRecord(
                action=self.name,
                target_type="player",
                target_id=player.name,
                details={"magic": params.magic_index},
            ),
        )


@admin_command(
    name="update_magic",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=UpdateMagicParams,
    description="Edit a skill definition",
    mutating=True,
)
class UpdateMagic(AdminCommand):
    def execute(self, params: UpdateMagicParams) -> Outcome:
        fields = params.provided("index")
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if not fields["name"]:
                raise InvalidInputError("Skill name is required")
        info = self.require_magic_info(params.index)
        apply_fields(info, fields)
        return Outcome.success(
            f"Updated skill {info.index} ({info.name})",
            data={"index": info.index, "fields": sorted(fields)},
            audit=AuditRecord(
                action=self.name,
                target_type="magic",
                target_id=str(info.index),
                details={"fields": ",".join(sorted(fields)) or "-"},
            ),
        )
