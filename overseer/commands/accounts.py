"""Account commands: ban, currency, role changes."""

from typing import Literal

from pydantic import Field

from ..outcome import AuditRecord, InvalidInputError, Outcome
from ..roles import AccountIdentity, parse_role, role_label
from .base import AdminCommand, CommandParams, admin_command
from .views import account_view


class AccountParams(CommandParams):
    email: str = Field(..., min_length=1, description="Account email")


class CurrencyParams(AccountParams):
    amount: int = Field(..., description="Signed delta to apply")
    currency: Literal["game_gold", "hunt_gold"] = "game_gold"


class RoleParams(AccountParams):
    role: int = Field(..., description="New role value (0-4)")


class _SetBanned(AdminCommand):
    banned: bool = True

    def execute(self, params: AccountParams) -> Outcome:
        account = self.require_account(params.email)
        account.banned = self.banned
        verb = "banned" if self.banned else "unbanned"
        return Outcome.success(
            f"Account {account.email} {verb}",
            data={"email": account.email, "banned": account.banned},
            audit=AuditRecord(
                action=self.name,
                target_type="account",
                target_id=account.email,
                details={"banned": account.banned},
            ),
        )


@admin_command(
    name="ban_account",
    required_role=AccountIdentity.ADMIN,
    params=AccountParams,
    description="Ban an account",
    mutating=True,
)
class BanAccount(_SetBanned):
    banned = True


@admin_command(
    name="unban_account",
    required_role=AccountIdentity.ADMIN,
    params=AccountParams,
    description="Lift an account ban",
    mutating=True,
)
class UnbanAccount(_SetBanned):
    banned = False


@admin_command(
    name="adjust_currency",
    required_role=AccountIdentity.ADMIN,
    params=CurrencyParams,
    description="Add to or subtract from an account balance (floored at 0)",
    mutating=True,
)
class AdjustCurrency(AdminCommand):
    def execute(self, params: CurrencyParams) -> Outcome:
        account = self.require_account(params.email)
        before = getattr(account, params.currency)
        after = max(0, before + params.amount)
        setattr(account, params.currency, after)
        return Outcome.success(
            f"{account.email} {params.currency}: {before} -> {after}",
            data={"email": account.email, "currency": params.currency, "balance": after},
            audit=AuditRecord(
                action=self.name,
                target_type="account",
                target_id=account.email,
                details={"currency": params.currency, "delta": params.amount, "balance": after},
            ),
        )


@admin_command(
    name="set_account_role",
    required_role=AccountIdentity.SUPER_ADMIN,
    params=RoleParams,
    description="Change an account's permission level",
    mutating=True,
)
class SetAccountRole(AdminCommand):
    def execute(self, params: RoleParams) -> Outcome:
        try:
            role = parse_role(params.role)
        except ValueError as e:
            raise InvalidInputError(str(e))
        account = self.require_account(params.email)
        account.role = int(role)
        return Outcome.success(
            f"{account.email} is now {role_label(account.role)}",
            data={"email": account.email, "role": account.role},
            audit=AuditRecord(
                action=self.name,
                target_type="account",
                target_id=account.email,
                details={"role": account.role},
            ),
        )


@admin_command(
    name="account_detail",
    required_role=AccountIdentity.NORMAL,
    params=AccountParams,
    description="Show one account and its characters",
)
class AccountDetail(AdminCommand):
    def execute(self, params: AccountParams) -> Outcome:
        account = self.require_account(params.email)
        return Outcome.success(f"Account {account.email}", data=account_view(account))
