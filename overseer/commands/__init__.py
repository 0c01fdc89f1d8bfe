"""
Admin command set.

Importing this package registers every command with the registry in
base.py; the dispatcher looks commands up by name from there.
"""

from . import accounts, items, listings, maps, monsters, players, skills  # noqa: F401
from .base import (
    AdminCommand,
    CommandParams,
    admin_command,
    get_all_commands,
    get_command,
)

__all__ = [
    "AdminCommand",
    "CommandParams",
    "admin_command",
    "get_all_commands",
    "get_command",
]
