"""Computer opponent shot selection: hunt damaged ships, otherwise search."""

from __future__ import annotations

import logging
import random
from enum import Enum

from armada.engine.grid import CellStatus, Grid
from armada.engine.ship import SHIP_ORDER, Coordinate, ShipType
from armada.telemetry import get_meter, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("armada.ai.targeting")
meter = get_meter("armada.ai.targeting")

SELECTION_COUNTER = meter.create_counter(
    "armada_ai_shot_selections",
    unit="1",
    description="Computer shot selections, by phase and difficulty",
)


class Difficulty(Enum):
    """Search strength of the computer opponent.

    The value of `parity_attempts` is how many random samples the search
    phase spends looking for an unresolved checkerboard cell before
    falling back to a uniform choice.
    """

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def parity_attempts(self) -> int:
        return _PARITY_ATTEMPTS[self]


_PARITY_ATTEMPTS = {
    Difficulty.EASY: 0,
    Difficulty.MEDIUM: 50,
    Difficulty.HARD: 200,
}


def active_hits(grid: Grid) -> dict[ShipType, list[Coordinate]]:
    """Visible hits on ships that are not yet sunk, grouped by ship type.

    A ship counts as sunk once the number of hit cells recorded for its
    type reaches the type's length. Groups are returned in catalog order.
    """
    hits: dict[ShipType, list[Coordinate]] = {}
    for coord in grid.coordinates():
        cell = grid.cell(coord)
        if cell.status is CellStatus.HIT and cell.occupant is not None:
            hits.setdefault(cell.occupant, []).append(coord)
    return {
        ship_type: hits[ship_type]
        for ship_type in SHIP_ORDER
        if ship_type in hits and len(hits[ship_type]) < ship_type.length
    }


def _line_extensions(group: list[Coordinate]) -> list[Coordinate]:
    first, second = group[0], group[1]
    if first.y == second.y:
        xs = [coord.x for coord in group]
        row = first.y
        return [Coordinate(max(xs) + 1, row), Coordinate(min(xs) - 1, row)]
    ys = [coord.y for coord in group]
    col = first.x
    return [Coordinate(col, max(ys) + 1), Coordinate(col, min(ys) - 1)]


def hunt_target(grid: Grid, rng: random.Random) -> Coordinate | None:
    """Pick a follow-up cell next to a damaged ship, or None."""
    for group in active_hits(grid).values():
        if len(group) >= 2:
            for candidate in _line_extensions(group):
                if grid.is_unresolved(candidate):
                    return candidate

        neighbours = [neighbour for coord in group for neighbour in coord.neighbours()]
        rng.shuffle(neighbours)
        for candidate in neighbours:
            if grid.is_unresolved(candidate):
                return candidate
    return None


def search_target(grid: Grid, difficulty: Difficulty, rng: random.Random) -> Coordinate:
    """Random search, biased towards checkerboard cells on harder tiers."""
    for _ in range(difficulty.parity_attempts):
        candidate = Coordinate(rng.randrange(grid.size), rng.randrange(grid.size))
        if (candidate.x + candidate.y) % 2 == 0 and grid.is_unresolved(candidate):
            return candidate

    remaining = grid.unresolved()
    if not remaining:
        raise ValueError("No unresolved cells left to target.")
    return rng.choice(remaining)


def select_computer_shot(
    observed_grid: Grid,
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    rng: random.Random | None = None,
) -> Coordinate:
    """Choose the computer's next strike on the grid it has observed.

    Only hit/miss cells and the ship types revealed by hits are consulted,
    so passing either the defender's full grid or `Grid.observed()` gives
    the same distribution. Always returns an in-bounds unresolved cell.
    """
    rng = rng or random.Random()
    difficulty = Difficulty(difficulty)
    with tracer.start_as_current_span("targeting.select_computer_shot") as span:
        span.set_attribute("difficulty", difficulty.value)
        target = hunt_target(observed_grid, rng)
        phase = "hunt"
        if target is None:
            target = search_target(observed_grid, difficulty, rng)
            phase = "search"

        span.set_attribute("phase", phase)
        span.set_attribute("target.x", target.x)
        span.set_attribute("target.y", target.y)
        SELECTION_COUNTER.add(1, attributes={"phase": phase, "difficulty": difficulty.value})
        logger.debug(
            "computer_shot_selected",
            extra={
                "phase": phase,
                "difficulty": difficulty.value,
                "x": target.x,
                "y": target.y,
            },
        )
        return target
