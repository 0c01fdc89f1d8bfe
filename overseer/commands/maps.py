"""Map definition commands."""

from typing import Optional

from pydantic import Field

from ..models import FightSetting, LightSetting
from ..outcome import AuditRecord, InvalidInputError, Outcome
from ..query import map_player_count
from ..roles import AccountIdentity
from .base import (
    AdminCommand,
    CommandParams,
    IndexParams,
    admin_command,
    apply_fields,
    enum_param,
)
from .views import map_view

LightParam = enum_param(LightSetting)
FightParam = enum_param(FightSetting)


class MapFields(CommandParams):
    file_name: Optional[str] = None
    description: Optional[str] = None
    mini_map: Optional[int] = None
    light: LightParam = None
    fight: FightParam = None
    allow_rt: Optional[bool] = None
    allow_tt: Optional[bool] = None
    can_horse: Optional[bool] = None
    can_mine: Optional[bool] = None
    can_marriage_recall: Optional[bool] = None
    allow_recall: Optional[bool] = None
    minimum_level: Optional[int] = None
    maximum_level: Optional[int] = None
    monster_health: Optional[int] = None
    max_monster_health: Optional[int] = None
    monster_damage: Optional[int] = None
    max_monster_damage: Optional[int] = None
    drop_rate: Optional[int] = None
    max_drop_rate: Optional[int] = None
    experience_rate: Optional[int] = None
    max_experience_rate: Optional[int] = None
    gold_rate: Optional[int] = None
    max_gold_rate: Optional[int] = None
    skill_delay: Optional[int] = None


class CreateMapParams(MapFields):
    file_name: str = Field(..., description="Map file name (must not be blank)")


class UpdateMapParams(MapFields):
    index: int


def _normalize(fields: dict, file_name: str) -> dict:
    if "file_name" in fields:
        fields["file_name"] = fields["file_name"].strip()
        if not fields["file_name"]:
            raise InvalidInputError("Map file name is required")
        file_name = fields["file_name"]
    if "description" in fields and not fields["description"].strip():
        fields["description"] = file_name
    return fields


@admin_command(
    name="create_map",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=CreateMapParams,
    description="Add a map definition",
    mutating=True,
)
class CreateMap(AdminCommand):
    def execute(self, params: CreateMapParams) -> Outcome:
        fields = _normalize(params.provided(), params.file_name)
        fields.setdefault("description", fields["file_name"])
        info = self.ctx.records.maps.create_new(**fields)
        return Outcome.success(
            f"Created map {info.index} ({info.description})",
            data=map_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="map",
                target_id=str(info.index),
                details={"file_name": info.file_name},
            ),
        )


@admin_command(
    name="update_map",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=UpdateMapParams,
    description="Edit a map definition",
    mutating=True,
)
class UpdateMap(AdminCommand):
    def execute(self, params: UpdateMapParams) -> Outcome:
        info = self.require_map_info(params.index)
        fields = _normalize(params.provided("index"), info.file_name)
        apply_fields(info, fields)
        return Outcome.success(
            f"Updated map {info.index} ({info.description})",
            data=map_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="map",
                target_id=str(info.index),
                details={"fields": ",".join(sorted(fields)) or "-"},
            ),
        )


@admin_command(
    name="map_detail",
    required_role=AccountIdentity.ADMIN,
    params=IndexParams,
    description="Show one map definition with its live player count",
)
class MapDetail(AdminCommand):
    def execute(self, params: IndexParams) -> Outcome:
        info = self.require_map_info(params.index)
        return Outcome.success(
            f"Map {info.index}", data=map_view(info, map_player_count(self.ctx, info))
        )
