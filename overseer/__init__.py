"""
Overseer - admin command and authorization bridge for a live game world.

Operators run commands against the running simulation through a single
dispatcher that gates every mutation on the caller's role:

    ctx = AdminContext(world=world, records=records, config=AdminConfig.from_env())
    dispatcher = CommandDispatcher(ctx)
    outcome = dispatcher.dispatch("ban_account", Caller("gm@x.com", 3), {"email": "a@x.com"})
"""

__version__ = "0.4.0"

from .config import AdminConfig  # noqa: E402
from .context import AdminContext  # noqa: E402
from .dispatcher import CommandDispatcher  # noqa: E402
from .outcome import FailureKind, Outcome  # noqa: E402
from .roles import AccountIdentity, Caller, has_role  # noqa: E402

__all__ = [
    "__version__",
    "AccountIdentity",
    "AdminConfig",
    "AdminContext",
    "Caller",
    "CommandDispatcher",
    "FailureKind",
    "Outcome",
    "has_role",
]
