"""
Uniform command result and the failure taxonomy.

Commands raise CommandError subclasses for expected failures; the dispatcher
turns them (and anything unexpected) into an Outcome so nothing escapes a
command boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureKind(Enum):
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    PRECONDITION = "precondition"
    INTERNAL = "internal"


@dataclass
class AuditRecord:
    """What a successful mutation did, written once by the dispatcher."""

    action: str
    target_type: str
    target_id: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class Outcome:
    """
    Result of one admin command.

    `data` carries plain values for the presentation layer; `audit` is set by
    mutating commands on success and consumed by the dispatcher.
    """

    ok: bool
    message: str
    data: Any = None
    kind: FailureKind | None = None
    audit: AuditRecord | None = None

    @classmethod
    def success(
        cls,
        message: str,
        data: Any = None,
        audit: AuditRecord | None = None,
    ) -> "Outcome":
        return cls(ok=True, message=message, data=data, audit=audit)

    @classmethod
    def failure(
        cls, kind: FailureKind, message: str, data: Any = None
    ) -> "Outcome":
        return cls(ok=False, message=message, data=data, kind=kind)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"ok": self.ok, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.kind is not None:
            result["kind"] = self.kind.value
        return result


class CommandError(Exception):
    """Expected command failure; `kind` selects the outcome category."""

    kind = FailureKind.INTERNAL

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class NotFoundError(CommandError):
    kind = FailureKind.NOT_FOUND


class InvalidInputError(CommandError):
    kind = FailureKind.INVALID_INPUT


class PreconditionError(CommandError):
    kind = FailureKind.PRECONDITION
