"""
AdminContext - shared state handle passed to every admin command.

Commands receive the context at construction and re-resolve their targets
from it on each execution; nothing is cached between invocations.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import AdminConfig
from .logging import AdminAuditLogger, admin_audit
from .records import RecordStore

if TYPE_CHECKING:
    from .world import Simulation


@dataclass
class AdminContext:
    """
    Usage:
        ctx = AdminContext(world=world, records=records)
        BanAccount(ctx).execute(params)
    """

    world: "Simulation"
    records: RecordStore
    config: AdminConfig = field(default_factory=AdminConfig)
    audit: AdminAuditLogger = field(default_factory=lambda: admin_audit)
    rng: random.Random = field(default_factory=random.Random)
