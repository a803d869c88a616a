"""Power-up rules: shield, area scan and area strike."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from armada.telemetry import get_meter, get_tracer

from .grid import Fleet, Grid
from .resolver import ShotOutcome, fleet_destroyed, resolve_shot
from .ship import Coordinate

logger = logging.getLogger(__name__)
tracer = get_tracer("armada.engine.powerups")
meter = get_meter("armada.engine.powerups")

POWERUP_COUNTER = meter.create_counter(
    "armada_engine_powerups",
    unit="1",
    description="Power-up activations, by kind and acceptance",
)

AREA_RADIUS = 1


class PowerUp(Enum):
    """Power-ups with their display name, CP cost and description."""

    SHIELD = (
        "Aegis Shield",
        50,
        "Deploys a one-time shield on a friendly vessel, absorbing the next incoming strike.",
    )
    AREA_SCAN = (
        "Sonar Scan",
        75,
        "Reveals a 3x3 grid area. Does not consume your attack phase.",
    )
    AREA_STRIKE = (
        "Trident Missile",
        120,
        "Strikes every unresolved cell of a 3x3 grid area. Replaces your standard attack.",
    )

    def __init__(self, display_name: str, cost: int, description: str) -> None:
        self.display_name = display_name
        self.cost = cost
        self.description = description


class RejectionReason(Enum):
    INSUFFICIENT_CP = "insufficient_cp"
    OUT_OF_BOUNDS = "out_of_bounds"
    INVALID_TARGET = "invalid_target"
    NO_TARGETS = "no_targets"


@dataclass(frozen=True)
class ScanReading:
    coord: Coordinate
    occupied: bool


@dataclass(frozen=True)
class PowerUpOutcome:
    """Result of a power-up; rejected outcomes carry the untouched inputs."""

    power_up: PowerUp
    accepted: bool
    grid: Grid
    fleet: Fleet | None
    balance: int
    reason: RejectionReason | None = None
    shots: tuple[ShotOutcome, ...] = ()
    readings: tuple[ScanReading, ...] = field(default_factory=tuple)
    continue_turn: bool = False
    fleet_destroyed: bool = False

    @property
    def cp_awarded(self) -> int:
        return sum(shot.cp_awarded for shot in self.shots)


def area_cells(grid: Grid, centre: Coordinate) -> list[Coordinate]:
    """The 3×3 block around `centre`, clipped to the grid, row-major."""
    cells = []
    for dy in range(-AREA_RADIUS, AREA_RADIUS + 1):
        for dx in range(-AREA_RADIUS, AREA_RADIUS + 1):
            coord = Coordinate(centre.x + dx, centre.y + dy)
            if grid.in_bounds(coord):
                cells.append(coord)
    return cells


def _reject(
    power_up: PowerUp,
    reason: RejectionReason,
    grid: Grid,
    fleet: Fleet | None,
    balance: int,
    owner: str,
    continue_turn: bool = False,
) -> PowerUpOutcome:
    POWERUP_COUNTER.add(
        1, attributes={"power_up": power_up.name, "accepted": False, "owner": owner}
    )
    logger.warning(
        "powerup_rejected",
        extra={
            "power_up": power_up.name,
            "reason": reason.value,
            "balance": balance,
            "owner": owner,
        },
    )
    return PowerUpOutcome(
        power_up,
        False,
        grid,
        fleet,
        balance,
        reason=reason,
        continue_turn=continue_turn,
    )


def _accepted(power_up: PowerUp, balance: int, owner: str) -> None:
    POWERUP_COUNTER.add(
        1, attributes={"power_up": power_up.name, "accepted": True, "owner": owner}
    )
    logger.info(
        "powerup_applied",
        extra={"power_up": power_up.name, "balance": balance, "owner": owner},
    )


def apply_shield(
    grid: Grid, fleet: Fleet, x: int, y: int, balance: int, owner: str = "unknown"
) -> PowerUpOutcome:
    """Shield the acting side's own ship that occupies (x, y).

    `grid` and `fleet` are the acting side's own. The ship must be afloat
    and not already shielded. Uses up the turn's action.
    """
    power_up = PowerUp.SHIELD
    target = Coordinate(x, y)
    with tracer.start_as_current_span("powerups.shield") as span:
        span.set_attribute("target.x", x)
        span.set_attribute("target.y", y)
        if balance < power_up.cost:
            return _reject(power_up, RejectionReason.INSUFFICIENT_CP, grid, fleet, balance, owner)
        if not grid.in_bounds(target):
            return _reject(power_up, RejectionReason.OUT_OF_BOUNDS, grid, fleet, balance, owner)

        occupant = grid.cell(target).occupant
        ship = fleet.get(occupant) if occupant is not None else None
        if ship is None or ship.is_sunk() or ship.shielded:
            return _reject(power_up, RejectionReason.INVALID_TARGET, grid, fleet, balance, owner)

        span.set_attribute("ship.type", ship.ship_type.name)
        new_balance = balance - power_up.cost
        _accepted(power_up, new_balance, owner)
        return PowerUpOutcome(
            power_up,
            True,
            grid,
            fleet.with_ship(ship.with_shield()),
            new_balance,
        )


def apply_area_scan(
    grid: Grid, x: int, y: int, balance: int, owner: str = "unknown"
) -> PowerUpOutcome:
    """Reveal whether each cell of the 3×3 block around (x, y) holds a ship.

    Nothing is resolved and the attack is not consumed, so the outcome
    always reports ``continue_turn=True``.
    """
    power_up = PowerUp.AREA_SCAN
    centre = Coordinate(x, y)
    with tracer.start_as_current_span("powerups.area_scan") as span:
        span.set_attribute("target.x", x)
        span.set_attribute("target.y", y)
        if balance < power_up.cost:
            return _reject(
                power_up,
                RejectionReason.INSUFFICIENT_CP,
                grid,
                None,
                balance,
                owner,
                continue_turn=True,
            )
        if not grid.in_bounds(centre):
            return _reject(
                power_up,
                RejectionReason.OUT_OF_BOUNDS,
                grid,
                None,
                balance,
                owner,
                continue_turn=True,
            )

        readings = tuple(
            ScanReading(coord, grid.cell(coord).occupant is not None)
            for coord in area_cells(grid, centre)
        )
        span.set_attribute("scan.contacts", sum(1 for reading in readings if reading.occupied))
        new_balance = balance - power_up.cost
        _accepted(power_up, new_balance, owner)
        return PowerUpOutcome(
            power_up,
            True,
            grid,
            None,
            new_balance,
            readings=readings,
            continue_turn=True,
        )


def apply_area_strike(
    grid: Grid, fleet: Fleet, x: int, y: int, balance: int, owner: str = "unknown"
) -> PowerUpOutcome:
    """Resolve a shot on every unresolved cell of the 3×3 block around (x, y)."""
    power_up = PowerUp.AREA_STRIKE
    centre = Coordinate(x, y)
    with tracer.start_as_current_span("powerups.area_strike") as span:
        span.set_attribute("target.x", x)
        span.set_attribute("target.y", y)
        if balance < power_up.cost:
            return _reject(power_up, RejectionReason.INSUFFICIENT_CP, grid, fleet, balance, owner)
        if not grid.in_bounds(centre):
            return _reject(power_up, RejectionReason.OUT_OF_BOUNDS, grid, fleet, balance, owner)

        targets = [coord for coord in area_cells(grid, centre) if grid.is_unresolved(coord)]
        if not targets:
            return _reject(power_up, RejectionReason.NO_TARGETS, grid, fleet, balance, owner)

        shots: list[ShotOutcome] = []
        for coord in targets:
            outcome = resolve_shot(grid, fleet, coord.x, coord.y, owner=owner)
            grid, fleet = outcome.grid, outcome.fleet
            shots.append(outcome)

        awarded = sum(shot.cp_awarded for shot in shots)
        any_hit = any(shot.result.is_hit for shot in shots)
        span.set_attribute("strike.cells", len(shots))
        span.set_attribute("strike.hits", sum(1 for shot in shots if shot.result.is_hit))
        new_balance = balance - power_up.cost + awarded
        _accepted(power_up, new_balance, owner)
        return PowerUpOutcome(
            power_up,
            True,
            grid,
            fleet,
            new_balance,
            shots=tuple(shots),
            continue_turn=any_hit,
            fleet_destroyed=fleet_destroyed(fleet),
        )


def affordable(balance: int) -> list[PowerUp]:
    """Power-ups a side can currently pay for."""
    return [power_up for power_up in PowerUp if balance >= power_up.cost]
