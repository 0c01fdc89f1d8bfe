"""
Global pytest configuration and shared fixtures.

Provides common test infrastructure for all test suites including:
- Config, record store and reference world
- Player factory backed by PlayerBuilder
- Callers for every role
- Dispatcher with a captured audit trail
"""

import logging
import random

import pytest

from overseer.config import AdminConfig
from overseer.context import AdminContext
from overseer.dispatcher import CommandDispatcher
from overseer.logging import AUDIT_LOGGER_NAME, AdminAuditLogger
from overseer.records import RecordStore
from overseer.roles import AccountIdentity, Caller
from overseer.world import Map, World
from tests.fixtures.players import PlayerBuilder

# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def config() -> AdminConfig:
    """Config with explicit values so tests do not depend on the environment."""
    return AdminConfig(max_level=100, max_magic_level=3, log_level="DEBUG")


@pytest.fixture
def records() -> RecordStore:
    """Create an empty record store."""
    return RecordStore()


@pytest.fixture
def world() -> World:
    """Create an empty World with a seeded RNG."""
    return World(rng=random.Random(1234))


@pytest.fixture
def bichon(records: RecordStore, world: World) -> Map:
    """A 50x50 map with a short wall at y=10."""
    info = records.maps.create_new(file_name="0", description="Bichon Province")
    live_map = Map(info=info, width=50, height=50, blocked={(x, 10) for x in range(10, 20)})
    return world.add_map(live_map)


@pytest.fixture
def audit_logger() -> AdminAuditLogger:
    return AdminAuditLogger(logging.getLogger(AUDIT_LOGGER_NAME))


@pytest.fixture
def ctx(records, world, config, audit_logger) -> AdminContext:
    return AdminContext(
        world=world,
        records=records,
        config=config,
        audit=audit_logger,
        rng=random.Random(42),
    )


@pytest.fixture
def dispatcher(ctx: AdminContext) -> CommandDispatcher:
    return CommandDispatcher(ctx)


@pytest.fixture
def audit_lines(caplog):
    """Return a callable listing audit lines written so far in the test."""
    caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)

    def _lines() -> list[str]:
        return [r.getMessage() for r in caplog.records if r.name == AUDIT_LOGGER_NAME]

    return _lines


# ============================================================================
# Caller Fixtures
# ============================================================================


@pytest.fixture
def callers() -> dict[AccountIdentity, Caller]:
    """One caller per role."""
    return {
        role: Caller(email=f"{role.name.lower()}@staff.example.com", role=int(role))
        for role in AccountIdentity
    }


@pytest.fixture
def admin(callers) -> Caller:
    return callers[AccountIdentity.ADMIN]


@pytest.fixture
def super_admin(callers) -> Caller:
    return callers[AccountIdentity.SUPER_ADMIN]


# ============================================================================
# Player Fixtures
# ============================================================================


@pytest.fixture
def player_builder(records, world):
    """Return a fresh PlayerBuilder per call."""

    def _builder() -> PlayerBuilder:
        return PlayerBuilder(records, world)

    return _builder


@pytest.fixture
def player_factory(player_builder, bichon):
    """Factory for creating connected players on the Bichon map."""

    def _create_player(
        name: str = "TestPlayer",
        level: int = 1,
        x: int = 5,
        y: int = 5,
        email: str | None = None,
    ):
        builder = player_builder().with_name(name).with_level(level).on_map(bichon, x, y)
        if email:
            builder.with_email(email)
        return builder.build()

    return _create_player
