"""
Logging helpers and the admin audit trail.

Module code uses plain `logging.getLogger(__name__)` loggers. Audit lines go
to the `overseer.audit` logger, one line per successful mutation:

    action=ban target_type=account target_id=a@x.com banned=True success=True
"""

import logging
from typing import Any

AUDIT_LOGGER_NAME = "overseer.audit"

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and embedded hosts."""
    logging.basicConfig(level=level.upper(), format=DEFAULT_FORMAT)


def _format_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return repr(text)
    return text


class AdminAuditLogger:
    """
    Fire-and-forget audit sink for admin mutations.

    Lines are actor-independent: they describe the action and the identifiers
    it touched, not who asked for it.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_action(
        self,
        action: str,
        target_type: str,
        target_id: str,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> str:
        parts = [
            f"action={_format_value(action)}",
            f"target_type={_format_value(target_type)}",
            f"target_id={_format_value(target_id)}",
        ]
        for key, value in (details or {}).items():
            parts.append(f"{key}={_format_value(value)}")
        parts.append(f"success={success}")
        line = " ".join(parts)
        self.logger.info(line)
        return line


admin_audit = AdminAuditLogger()
