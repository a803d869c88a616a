"""Grid model, placement validation and fleet generation."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping

from armada.telemetry import get_meter, get_tracer

from .ship import (
    GRID_SIZE,
    SHIP_ORDER,
    Coordinate,
    Orientation,
    PlacedShip,
    ShipType,
    ship_cells,
)

logger = logging.getLogger(__name__)
tracer = get_tracer("armada.engine.grid")
meter = get_meter("armada.engine.grid")

PLACEMENT_COUNTER = meter.create_counter(
    "armada_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)


class PlacementError(ValueError):
    """Raised when a ship cannot be committed to a grid."""


class CellStatus(Enum):
    """What a single grid cell holds."""

    EMPTY = "empty"
    OCCUPIED = "occupied"
    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True)
class Cell:
    status: CellStatus = CellStatus.EMPTY
    occupant: ShipType | None = None

    @property
    def is_resolved(self) -> bool:
        """True once the cell has been struck; resolved cells are terminal."""
        return self.status in (CellStatus.HIT, CellStatus.MISS)


EMPTY_CELL = Cell()


@dataclass(frozen=True)
class Grid:
    """Immutable N×N board, indexed as ``rows[y][x]``."""

    rows: tuple[tuple[Cell, ...], ...]

    @property
    def size(self) -> int:
        return len(self.rows)

    def in_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.x < self.size and 0 <= coord.y < self.size

    def cell(self, coord: Coordinate) -> Cell:
        if not self.in_bounds(coord):
            raise IndexError(f"{coord} is outside the {self.size}x{self.size} grid")
        return self.rows[coord.y][coord.x]

    def is_unresolved(self, coord: Coordinate) -> bool:
        """In bounds and not yet struck."""
        return self.in_bounds(coord) and not self.cell(coord).is_resolved

    def coordinates(self) -> Iterator[Coordinate]:
        for y in range(self.size):
            for x in range(self.size):
                yield Coordinate(x, y)

    def unresolved(self) -> list[Coordinate]:
        return [coord for coord in self.coordinates() if not self.cell(coord).is_resolved]

    def count(self, status: CellStatus) -> int:
        return sum(1 for row in self.rows for cell in row if cell.status is status)

    def with_cells(self, updates: Mapping[Coordinate, Cell]) -> Grid:
        """Return a copy of the grid with the given cells replaced."""
        if not updates:
            return self
        rows = [list(row) for row in self.rows]
        for coord, cell in updates.items():
            if not self.in_bounds(coord):
                raise IndexError(f"{coord} is outside the {self.size}x{self.size} grid")
            rows[coord.y][coord.x] = cell
        return Grid(tuple(tuple(row) for row in rows))

    def observed(self) -> Grid:
        """The grid as an attacker sees it: only struck cells are revealed."""
        return Grid(
            tuple(
                tuple(cell if cell.is_resolved else EMPTY_CELL for cell in row)
                for row in self.rows
            )
        )


@dataclass(frozen=True)
class Fleet:
    """The ships belonging to one side; at most one ship per type."""

    ships: tuple[PlacedShip, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[PlacedShip]:
        return iter(self.ships)

    def __len__(self) -> int:
        return len(self.ships)

    def get(self, ship_type: ShipType) -> PlacedShip | None:
        for ship in self.ships:
            if ship.ship_type is ship_type:
                return ship
        return None

    def with_ship(self, ship: PlacedShip) -> Fleet:
        """Return a fleet where `ship` replaces the ship of the same type, or is appended."""
        if self.get(ship.ship_type) is None:
            return Fleet(self.ships + (ship,))
        return Fleet(
            tuple(ship if existing.ship_type is ship.ship_type else existing for existing in self.ships)
        )

    def is_complete(self) -> bool:
        return {ship.ship_type for ship in self.ships} == set(SHIP_ORDER)

    def all_sunk(self) -> bool:
        return all(ship.is_sunk() for ship in self.ships)

    def afloat(self) -> int:
        return sum(1 for ship in self.ships if not ship.is_sunk())


def create_empty_grid(size: int = GRID_SIZE) -> Grid:
    """Return a grid where every cell is empty with no occupant."""
    return Grid(tuple(tuple(EMPTY_CELL for _ in range(size)) for _ in range(size)))


def can_place_ship(grid: Grid, x: int, y: int, length: int, horizontal: bool) -> bool:
    """Check bounds and overlap for a ship of `length` anchored at (x, y)."""
    for coord in ship_cells(Coordinate(x, y), length, Orientation.from_flag(horizontal)):
        if not grid.in_bounds(coord):
            return False
        if grid.cell(coord).status is CellStatus.OCCUPIED:
            return False
    return True


def place_ship(
    grid: Grid,
    fleet: Fleet,
    ship_type: ShipType,
    x: int,
    y: int,
    horizontal: bool,
    owner: str = "unknown",
) -> tuple[Grid, Fleet]:
    """Commit a ship to copies of `grid` and `fleet`.

    Raises PlacementError if the ship type is already deployed or the
    placement fails `can_place_ship`; the inputs are never modified.
    """
    orientation = Orientation.from_flag(horizontal)
    with tracer.start_as_current_span("grid.place_ship") as span:
        span.set_attribute("ship.type", ship_type.name)
        span.set_attribute("ship.length", ship_type.length)
        span.set_attribute("ship.anchor.x", x)
        span.set_attribute("ship.anchor.y", y)
        span.set_attribute("grid.owner", owner)
        details = {
            "owner": owner,
            "ship_type": ship_type.name,
            "orientation": orientation.name,
            "x": x,
            "y": y,
        }

        if fleet.get(ship_type) is not None:
            PLACEMENT_COUNTER.add(1, attributes={"result": "duplicate", "owner": owner})
            logger.warning("ship_placement_duplicate", extra=details)
            raise PlacementError(f"{ship_type.display_name} is already deployed.")

        if not can_place_ship(grid, x, y, ship_type.length, horizontal):
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": owner})
            logger.warning("ship_placement_failed", extra=details)
            raise PlacementError(
                f"{ship_type.display_name} does not fit at {Coordinate(x, y).label()}."
            )

        ship = PlacedShip(ship_type, Coordinate(x, y), orientation)
        occupied = Cell(CellStatus.OCCUPIED, ship_type)
        new_grid = grid.with_cells({coord: occupied for coord in ship.coordinates()})
        PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": owner})
        logger.info("ship_placed", extra=details)
        return new_grid, fleet.with_ship(ship)


def generate_fleet(
    rng: random.Random | None = None,
    size: int = GRID_SIZE,
    owner: str = "unknown",
) -> tuple[Grid, Fleet]:
    """Randomly place one ship of each type, in catalog order."""
    rng = rng or random.Random()
    grid = create_empty_grid(size)
    fleet = Fleet()
    with tracer.start_as_current_span("grid.generate_fleet") as span:
        span.set_attribute("grid.owner", owner)
        for ship_type in SHIP_ORDER:
            attempts = 0
            while True:
                attempts += 1
                horizontal = rng.random() < 0.5
                # Anchors are drawn so the ship always fits on the board;
                # only overlaps can reject a sample.
                span_limit = size - ship_type.length + 1
                x = rng.randrange(span_limit if horizontal else size)
                y = rng.randrange(size if horizontal else span_limit)
                if can_place_ship(grid, x, y, ship_type.length, horizontal):
                    grid, fleet = place_ship(grid, fleet, ship_type, x, y, horizontal, owner)
                    break
            logger.debug(
                "random_ship_placed",
                extra={"ship_type": ship_type.name, "attempts": attempts, "owner": owner},
            )
    return grid, fleet


def accuracy(grid: Grid) -> int:
    """Percentage of struck cells on `grid` that were hits, rounded."""
    hits = grid.count(CellStatus.HIT)
    total = hits + grid.count(CellStatus.MISS)
    if total == 0:
        return 0
    return round(hits / total * 100)
