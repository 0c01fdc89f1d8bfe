"""
Placement search for admin monster spawns.

Each unit gets a bounded number of random tries around an anchor cell.
Tries are clamped into the map, so a search near an edge piles up on the
border rather than wandering off the grid.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import PLACEMENT_ATTEMPTS, SPAWN_MAX_COUNT, SPAWN_MAX_RADIUS
from .models import MonsterInfo

if TYPE_CHECKING:
    from .world import Cell, LiveMap, Simulation

logger = logging.getLogger(__name__)


@dataclass
class SpawnReport:
    placed: int
    requested: int
    cells: list["Cell"] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.placed == self.requested


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def clamp_radius(radius: int, maximum: int = SPAWN_MAX_RADIUS) -> int:
    return _clamp(radius, 1, maximum)


def clamp_count(count: int, maximum: int = SPAWN_MAX_COUNT) -> int:
    return _clamp(count, 1, maximum)


def find_spawn_cell(
    live_map: "LiveMap",
    anchor: "Cell",
    radius: int,
    rng: random.Random,
    attempts: int = PLACEMENT_ATTEMPTS,
) -> "Cell | None":
    """Try up to `attempts` cells around anchor; None when all are blocked."""
    ax, ay = anchor
    for _ in range(attempts):
        x = _clamp(ax + rng.randint(-radius, radius), 0, live_map.width - 1)
        y = _clamp(ay + rng.randint(-radius, radius), 0, live_map.height - 1)
        if not live_map.is_blocked((x, y)):
            return (x, y)
    return None


def spawn_near(
    sim: "Simulation",
    info: MonsterInfo,
    live_map: "LiveMap",
    anchor: "Cell",
    count: int,
    radius: int,
    rng: random.Random,
    attempts: int = PLACEMENT_ATTEMPTS,
) -> SpawnReport:
    """
    Place `count` units independently around anchor.

    Count and radius are expected to be clamped already. A unit whose search
    fails, or whose cell the simulation rejects, is simply not placed.
    """
    report = SpawnReport(placed=0, requested=count)
    for _ in range(count):
        cell = find_spawn_cell(live_map, anchor, radius, rng, attempts)
        if cell is None:
            continue
        if not sim.spawn_monster(info, live_map, cell):
            logger.debug(f"Simulation rejected {info.name} at {cell}")
            continue
        report.placed += 1
        report.cells.append(cell)
    return report
