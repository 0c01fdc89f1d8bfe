"""
Base class, registry decorator and shared lookups for admin commands.

Each command is a class registered by name with the role it requires and
the pydantic model that validates its parameters:

    @admin_command(
        name="ban_account",
        required_role=AccountIdentity.ADMIN,
        params=AccountParams,
        description="Ban an account by email",
        mutating=True,
    )
    class BanAccount(AdminCommand):
        def execute(self, params: AccountParams) -> Outcome:
            account = self.require_account(params.email)
            ...

Commands raise CommandError subclasses for expected failures; the
dispatcher converts them to Outcomes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..models import Account, ItemInfo, MagicInfo, MapInfo, MonsterInfo, parse_enum
from ..outcome import NotFoundError, Outcome
from ..roles import AccountIdentity, Caller

if TYPE_CHECKING:
    from ..context import AdminContext
    from ..world import LiveMap

logger = logging.getLogger(__name__)


class CommandParams(BaseModel):
    """Base for parameter models; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    def provided(self, *exclude: str) -> dict[str, Any]:
        """Fields the caller actually supplied, minus `exclude`."""
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude=set(exclude))


class NoParams(CommandParams):
    pass


class IndexParams(CommandParams):
    index: int = Field(..., description="Definition index")


def enum_param(enum_type: type[IntEnum], lenient: bool = False):
    """
    Optional enum parameter accepting a member, its name or its number.

    Unknown values are rejected, or read as None when `lenient` (used for
    listing filters, where an unrecognised filter is simply not applied).
    """

    def parse(value: Any) -> Any:
        if value is None or isinstance(value, enum_type):
            return value
        parsed = parse_enum(enum_type, value)
        if parsed is None and not lenient:
            raise ValueError(f"Unknown {enum_type.__name__}: {value!r}")
        return parsed

    return Annotated[Optional[enum_type], BeforeValidator(parse)]


def apply_fields(record: Any, fields: dict[str, Any]) -> None:
    for key, value in fields.items():
        setattr(record, key, value)


# =============================================================================
# Command base class
# =============================================================================


class AdminCommand(ABC):
    """
    One admin operation.

    Instances are built per invocation with the shared context and the
    resolved caller; targets are looked up again on every execute().
    """

    # Metadata - set by the @admin_command decorator
    name: str = "unnamed"
    description: str = ""
    required_role: AccountIdentity = AccountIdentity.NORMAL
    params_model: type[CommandParams] = NoParams
    mutating: bool = False

    def __init__(self, ctx: "AdminContext", caller: Caller | None = None) -> None:
        self.ctx = ctx
        self.caller = caller

    @abstractmethod
    def execute(self, params: Any) -> Outcome:
        """Run the command with already-validated params."""

    def notify(self, player: Any, event: dict[str, Any]) -> bool:
        """Best-effort delivery to a player's session."""
        try:
            player.enqueue(event)
        except Exception as e:
            logger.debug(f"Dropped {event.get('type')} for {player.name}: {e}")
            return False
        return True

    # --- Lookups: each raises NotFoundError naming the missing entity ---

    def require_account(self, email: str) -> Account:
        account = self.ctx.records.find_account(email)
        if account is None:
            raise NotFoundError(f"Account '{email}' not found")
        return account

    def require_player(self, name: str) -> Any:
        player = self.ctx.world.find_player(name)
        if player is None:
            raise NotFoundError(f"Player '{name}' is not online")
        return player

    def require_player_map(self, player: Any) -> "LiveMap":
        if player.current_map is None:
            raise NotFoundError(f"Player '{player.name}' is not on a map")
        return player.current_map

    def require_item_info(self, index: int) -> ItemInfo:
        info = self.ctx.records.items.find(index)
        if info is None:
            raise NotFoundError(f"Item definition {index} not found")
        return info

    def require_monster_info(self, index: int) -> MonsterInfo:
        info = self.ctx.records.monsters.find(index)
        if info is None:
            raise NotFoundError(f"Monster definition {index} not found")
        return info

    def require_map_info(self, index: int) -> MapInfo:
        info = self.ctx.records.maps.find(index)
        if info is None:
            raise NotFoundError(f"Map definition {index} not found")
        return info

    def require_magic_info(self, index: int) -> MagicInfo:
        info = self.ctx.records.magics.find(index)
        if info is None:
            raise NotFoundError(f"Skill definition {index} not found")
        return info


# =============================================================================
# Registry
# =============================================================================


_COMMAND_REGISTRY: dict[str, type[AdminCommand]] = {}


def admin_command(
    name: str,
    required_role: AccountIdentity,
    params: type[CommandParams] = NoParams,
    description: str = "",
    mutating: bool = False,
):
    """Decorator to register an admin command class."""

    def decorator(cls: type[AdminCommand]) -> type[AdminCommand]:
        cls.name = name
        cls.required_role = required_role
        cls.params_model = params
        cls.description = description
        cls.mutating = mutating

        if name in _COMMAND_REGISTRY:
            logger.warning(f"Overwriting admin command '{name}'")
        _COMMAND_REGISTRY[name] = cls

        return cls

    return decorator


def get_command(name: str) -> type[AdminCommand] | None:
    return _COMMAND_REGISTRY.get(name)


def get_all_commands() -> dict[str, type[AdminCommand]]:
    return _COMMAND_REGISTRY.copy()
