"""
Admin bridge configuration.

Defaults can be overridden through OVERSEER_* environment variables or a
YAML file:

    max_level: 60
    max_magic_level: 5
    catalog_page_size: 25
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

# Environment settings
MAX_LEVEL = int(os.getenv("OVERSEER_MAX_LEVEL", "100"))
MAX_MAGIC_LEVEL = int(os.getenv("OVERSEER_MAX_MAGIC_LEVEL", "3"))
LOG_LEVEL = os.getenv("OVERSEER_LOG_LEVEL", "INFO")

# Page sizes per listing
ACCOUNT_PAGE_SIZE = 10
CATALOG_PAGE_SIZE = 50

# Spawn limits
SPAWN_MAX_COUNT = 100
SPAWN_MAX_RADIUS = 20
PLACEMENT_ATTEMPTS = 20


@dataclass
class AdminConfig:
    """Tunables the admin commands read at execution time."""

    max_level: int = MAX_LEVEL
    max_magic_level: int = MAX_MAGIC_LEVEL
    account_page_size: int = ACCOUNT_PAGE_SIZE
    catalog_page_size: int = CATALOG_PAGE_SIZE
    spawn_max_count: int = SPAWN_MAX_COUNT
    spawn_max_radius: int = SPAWN_MAX_RADIUS
    placement_attempts: int = PLACEMENT_ATTEMPTS
    log_level: str = LOG_LEVEL

    def __post_init__(self) -> None:
        if self.max_level < 1:
            raise ValueError("max_level must be at least 1")
        if self.max_magic_level < 0:
            raise ValueError("max_magic_level cannot be negative")
        for name in ("account_page_size", "catalog_page_size", "placement_attempts"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.spawn_max_count < 1 or self.spawn_max_radius < 1:
            raise ValueError("spawn limits must be at least 1")

    @classmethod
    def from_env(cls) -> "AdminConfig":
        """Build from the current environment (re-read on every call)."""
        return cls(
            max_level=int(os.getenv("OVERSEER_MAX_LEVEL", str(MAX_LEVEL))),
            max_magic_level=int(
                os.getenv("OVERSEER_MAX_MAGIC_LEVEL", str(MAX_MAGIC_LEVEL))
            ),
            log_level=os.getenv("OVERSEER_LOG_LEVEL", LOG_LEVEL),
        )

    @classmethod
    def from_mapping(cls, data: dict) -> "AdminConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AdminConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        return cls.from_mapping(data)
