"""Item definition commands."""

from typing import Optional

from pydantic import Field

from ..models import (
    ItemEffect,
    ItemType,
    Rarity,
    RequiredClass,
    RequiredGender,
    RequiredType,
)
from ..outcome import AuditRecord, InvalidInputError, Outcome
from ..roles import AccountIdentity
from .base import (
    AdminCommand,
    CommandParams,
    IndexParams,
    admin_command,
    apply_fields,
    enum_param,
)
from .views import item_view

ItemTypeParam = enum_param(ItemType)
RequiredClassParam = enum_param(RequiredClass)
RequiredGenderParam = enum_param(RequiredGender)
RequiredTypeParam = enum_param(RequiredType)
ItemEffectParam = enum_param(ItemEffect)
RarityParam = enum_param(Rarity)


class ItemFields(CommandParams):
    """Editable ItemInfo fields; unset fields are left alone."""

    name: Optional[str] = None
    item_type: ItemTypeParam = None
    required_class: RequiredClassParam = None
    required_gender: RequiredGenderParam = None
    required_type: RequiredTypeParam = None
    required_amount: Optional[int] = None
    shape: Optional[int] = None
    effect: ItemEffectParam = None
    image: Optional[int] = None
    durability: Optional[int] = None
    price: Optional[int] = None
    weight: Optional[int] = None
    stack_size: Optional[int] = None
    rarity: RarityParam = None


class CreateItemParams(ItemFields):
    name: str = Field(..., description="Display name (must not be blank)")


class UpdateItemParams(ItemFields):
    index: int


def _normalize(fields: dict) -> dict:
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if not fields["name"]:
            raise InvalidInputError("Item name is required")
    if "stack_size" in fields and fields["stack_size"] < 1:
        fields["stack_size"] = 1
    return fields


@admin_command(
    name="create_item",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=CreateItemParams,
    description="Add an item definition",
    mutating=True,
)
class CreateItem(AdminCommand):
    def execute(self, params: CreateItemParams) -> Outcome:
        fields = _normalize(params.provided())
        info = self.ctx.records.items.create_new(**fields)
        return Outcome.success(
            f"Created item {info.index} ({info.name})",
            data=item_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="item",
                target_id=str(info.index),
                details={"name": info.name},
            ),
        )


@admin_command(
    name="update_item",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=UpdateItemParams,
    description="Edit an item definition",
    mutating=True,
)
class UpdateItem(AdminCommand):
    def execute(self, params: UpdateItemParams) -> Outcome:
        fields = _normalize(params.provided("index"))
        info = self.require_item_info(params.index)
        apply_fields(info, fields)
        return Outcome.success(
            f"Updated item {info.index} ({info.name})",
            data=item_view(info),
            audit=AuditRecord(
                action=self.name,
                target_type="item",
                target_id=str(info.index),
                details={"fields": ",".join(sorted(fields)) or "-"},
            ),
        )


@admin_command(
    name="item_detail",
    required_role=AccountIdentity.ADMIN,
    params=IndexParams,
    description="Show one item definition",
)
class ItemDetail(AdminCommand):
    def execute(self, params: IndexParams) -> Outcome:
        info = self.require_item_info(params.index)
        return Outcome.success(f"Item {info.index}", data=item_view(info))
