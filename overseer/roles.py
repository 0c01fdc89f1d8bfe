"""
Role hierarchy for admin commands.

Role hierarchy: NORMAL < SUPERVISOR < OPERATOR < ADMIN < SUPER_ADMIN

A command declares the minimum role it needs; a caller passes when its
resolved role value is greater than or equal to that role's ordinal.
"""

from dataclasses import dataclass
from enum import IntEnum


class AccountIdentity(IntEnum):
    """Account permission levels, lowest to highest."""

    NORMAL = 0
    SUPERVISOR = 1
    OPERATOR = 2
    ADMIN = 3
    SUPER_ADMIN = 4


ROLE_LABELS: dict[AccountIdentity, str] = {
    AccountIdentity.NORMAL: "Normal",
    AccountIdentity.SUPERVISOR: "Supervisor",
    AccountIdentity.OPERATOR: "Operator",
    AccountIdentity.ADMIN: "Admin",
    AccountIdentity.SUPER_ADMIN: "SuperAdmin",
}

MIN_ROLE_VALUE = int(min(AccountIdentity))
MAX_ROLE_VALUE = int(max(AccountIdentity))


@dataclass(frozen=True)
class Caller:
    """
    An already-authenticated caller.

    `role` is the integer role value resolved by the identity layer; it is
    never re-derived while a command runs.
    """

    email: str
    role: int


def has_role(caller_role_value: int, required: AccountIdentity) -> bool:
    """True iff the caller's role value is at least the required role."""
    return caller_role_value >= int(required)


def is_valid_role_value(value: int) -> bool:
    return MIN_ROLE_VALUE <= value <= MAX_ROLE_VALUE


def parse_role(value: int) -> AccountIdentity:
    """Convert a role value to AccountIdentity, rejecting out-of-range values."""
    if not is_valid_role_value(value):
        raise ValueError(
            f"Invalid role value {value} (expected {MIN_ROLE_VALUE}-{MAX_ROLE_VALUE})"
        )
    return AccountIdentity(value)


def role_label(value: int) -> str:
    """Display name for a role value; unknown values render as 'Unknown(n)'."""
    if not is_valid_role_value(value):
        return f"Unknown({value})"
    return ROLE_LABELS[AccountIdentity(value)]
