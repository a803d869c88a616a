"""Shot resolution and win detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from armada.telemetry import get_meter, get_tracer

from .grid import Cell, CellStatus, Fleet, Grid
from .ship import HIT_REWARD, Coordinate, PlacedShip, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("armada.engine.resolver")
meter = get_meter("armada.engine.resolver")

SHOT_COUNTER = meter.create_counter(
    "armada_engine_shots",
    unit="1",
    description="Shots resolved against a grid, by outcome",
)


class ShotResult(Enum):
    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"
    ABSORBED = "absorbed"
    REJECTED = "rejected"

    @property
    def is_hit(self) -> bool:
        return self in (ShotResult.HIT, ShotResult.SUNK)


@dataclass(frozen=True)
class ShotOutcome:
    """Everything a driver needs after a single strike."""

    result: ShotResult
    target: Coordinate
    grid: Grid
    fleet: Fleet
    cp_awarded: int = 0
    ship_type: ShipType | None = None
    fleet_destroyed: bool = False

    @property
    def continue_turn(self) -> bool:
        """Hits keep the attacker firing; misses and absorbed strikes pass the turn."""
        return self.result.is_hit


def is_sunk(ship: PlacedShip) -> bool:
    return ship.is_sunk()


def fleet_destroyed(fleet: Fleet) -> bool:
    """True when the fleet has ships and every one of them is sunk."""
    return len(fleet) > 0 and fleet.all_sunk()


def resolve_shot(grid: Grid, fleet: Fleet, x: int, y: int, owner: str = "unknown") -> ShotOutcome:
    """Strike (x, y) on the defender's grid and fleet.

    Inputs are never modified: the updated grid and fleet are returned on
    the outcome. Out-of-bounds coordinates and cells already hit or missed
    yield a REJECTED outcome carrying the original state.
    """
    target = Coordinate(x, y)
    with tracer.start_as_current_span("resolver.resolve_shot") as span:
        span.set_attribute("shot.x", x)
        span.set_attribute("shot.y", y)
        span.set_attribute("grid.owner", owner)

        outcome = _resolve(grid, fleet, target)

        span.set_attribute("shot.outcome", outcome.result.value)
        SHOT_COUNTER.add(1, attributes={"outcome": outcome.result.value, "owner": owner})
        extra = {
            "x": x,
            "y": y,
            "outcome": outcome.result.value,
            "ship_type": outcome.ship_type.name if outcome.ship_type else None,
            "cp_awarded": outcome.cp_awarded,
            "owner": owner,
        }
        if outcome.result is ShotResult.REJECTED:
            logger.warning("shot_rejected", extra=extra)
        else:
            logger.info("shot_resolved", extra=extra)
        if outcome.fleet_destroyed:
            span.set_attribute("fleet.destroyed", True)
            logger.info("fleet_destroyed", extra={"owner": owner})
        return outcome


def _resolve(grid: Grid, fleet: Fleet, target: Coordinate) -> ShotOutcome:
    if not grid.in_bounds(target) or grid.cell(target).is_resolved:
        return ShotOutcome(ShotResult.REJECTED, target, grid, fleet)

    cell = grid.cell(target)
    if cell.status is not CellStatus.OCCUPIED or cell.occupant is None:
        new_grid = grid.with_cells({target: Cell(CellStatus.MISS)})
        return ShotOutcome(ShotResult.MISS, target, new_grid, fleet)

    ship = fleet.get(cell.occupant)
    if ship is None:
        raise LookupError(f"No {cell.occupant.display_name} in fleet for occupied cell {target}")

    if ship.shielded:
        # The shield soaks the strike; the cell stays occupied and can be struck again.
        new_fleet = fleet.with_ship(ship.with_shield(False))
        return ShotOutcome(
            ShotResult.ABSORBED,
            target,
            grid,
            new_fleet,
            ship_type=ship.ship_type,
            fleet_destroyed=fleet_destroyed(new_fleet),
        )

    damaged = ship.with_hit()
    new_grid = grid.with_cells({target: Cell(CellStatus.HIT, ship.ship_type)})
    new_fleet = fleet.with_ship(damaged)
    reward = HIT_REWARD
    result = ShotResult.HIT
    if damaged.is_sunk():
        reward += ship.ship_type.sink_bonus
        result = ShotResult.SUNK
    return ShotOutcome(
        result,
        target,
        new_grid,
        new_fleet,
        cp_awarded=reward,
        ship_type=ship.ship_type,
        fleet_destroyed=fleet_destroyed(new_fleet),
    )
