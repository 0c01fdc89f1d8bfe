"""
Command Dispatcher - single entry point for admin commands.

    resolve -> authorize -> validate -> execute -> audit

Nothing raised inside a command escapes dispatch(): expected failures come
back as typed Outcomes, anything else as an INTERNAL Outcome with the
traceback logged.
"""

import logging
from typing import Any

from pydantic import ValidationError

from .commands import get_all_commands, get_command
from .context import AdminContext
from .outcome import CommandError, FailureKind, Outcome
from .roles import Caller, has_role, role_label

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        where = ".".join(str(part) for part in item["loc"]) or "params"
        problems.append(f"{where}: {item['msg']}")
    return "Invalid parameters: " + "; ".join(problems)


class CommandDispatcher:
    """
    Routes named commands to their handlers for an already-identified caller.

    Usage:
        dispatcher = CommandDispatcher(ctx)
        outcome = dispatcher.dispatch("kick_player", caller, {"name": "Bob"})
    """

    def __init__(self, ctx: AdminContext) -> None:
        self.ctx = ctx

    def command_names(self) -> list[str]:
        return sorted(get_all_commands())

    def dispatch(
        self, name: str, caller: Caller, params: dict[str, Any] | None = None
    ) -> Outcome:
        command_cls = get_command(name)
        if command_cls is None:
            return Outcome.failure(FailureKind.INVALID_INPUT, f"Unknown command '{name}'")

        if not has_role(caller.role, command_cls.required_role):
            logger.info(
                f"Denied {name} for {caller.email} "
                f"(has {role_label(caller.role)}, needs {role_label(command_cls.required_role)})"
            )
            return Outcome.failure(
                FailureKind.AUTHORIZATION,
                f"Insufficient permissions: {name} requires "
                f"{role_label(command_cls.required_role)}",
            )

        try:
            validated = command_cls.params_model.model_validate(params or {})
        except ValidationError as e:
            return Outcome.failure(FailureKind.INVALID_INPUT, _validation_message(e))

        command = command_cls(self.ctx, caller)
        try:
            outcome = command.execute(validated)
        except CommandError as e:
            return Outcome.failure(e.kind, e.message, e.data)
        except Exception as e:
            logger.error(f"Command {name} failed: {e}", exc_info=True)
            return Outcome.failure(FailureKind.INTERNAL, f"Command failed: {e}")

        if outcome.ok and outcome.audit is not None:
            audit = outcome.audit
            self.ctx.audit.log_action(
                action=audit.action,
                target_type=audit.target_type,
                target_id=audit.target_id,
                details=audit.details,
                success=True,
            )
        return outcome
