"""Ship catalog and placed-ship model for the Armada engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

GRID_SIZE = 10
HIT_REWARD = 5


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate; `x` is the column and `y` the row."""

    x: int
    y: int

    def label(self) -> str:
        """Human readable form used in the combat log, e.g. ``A-1``."""
        return f"{chr(65 + self.x)}-{self.y + 1}"

    def neighbours(self) -> list[Coordinate]:
        """Orthogonal neighbours, possibly outside the board."""
        return [
            Coordinate(self.x + 1, self.y),
            Coordinate(self.x - 1, self.y),
            Coordinate(self.x, self.y + 1),
            Coordinate(self.x, self.y - 1),
        ]


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @classmethod
    def from_flag(cls, horizontal: bool) -> Orientation:
        return cls.HORIZONTAL if horizontal else cls.VERTICAL


class ShipType(Enum):
    """The five ship classes, in catalog order."""

    CARRIER = ("Carrier", 5, "directions_boat", 40)
    BATTLESHIP = ("Battleship", 4, "anchor", 30)
    DESTROYER = ("Destroyer", 3, "rocket", 20)
    SUBMARINE = ("Submarine", 3, "waves", 20)
    PATROL_BOAT = ("Patrol Boat", 2, "speed", 15)

    def __init__(self, display_name: str, length: int, icon: str, sink_bonus: int) -> None:
        self.display_name = display_name
        self.length = length
        self.icon = icon
        self.sink_bonus = sink_bonus


SHIP_ORDER: tuple[ShipType, ...] = tuple(ShipType)
FLEET_CELL_COUNT = sum(ship_type.length for ship_type in SHIP_ORDER)
MIN_SHIP_LENGTH = min(ship_type.length for ship_type in SHIP_ORDER)


def ship_cells(anchor: Coordinate, length: int, orientation: Orientation) -> list[Coordinate]:
    """Walk `length` cells from `anchor` along `orientation`."""
    if orientation is Orientation.HORIZONTAL:
        return [Coordinate(anchor.x + offset, anchor.y) for offset in range(length)]
    return [Coordinate(anchor.x, anchor.y + offset) for offset in range(length)]


@dataclass(frozen=True)
class PlacedShip:
    """A ship instance on a grid. Updates return new instances."""

    ship_type: ShipType
    anchor: Coordinate
    orientation: Orientation
    hits: int = 0
    shielded: bool = False

    @property
    def length(self) -> int:
        return self.ship_type.length

    @property
    def horizontal(self) -> bool:
        return self.orientation is Orientation.HORIZONTAL

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return ship_cells(self.anchor, self.length, self.orientation)

    def is_sunk(self) -> bool:
        return self.hits >= self.length

    def with_hit(self) -> PlacedShip:
        """Return a copy with one more hit, capped at the ship length."""
        return replace(self, hits=min(self.hits + 1, self.length))

    def with_shield(self, shielded: bool = True) -> PlacedShip:
        return replace(self, shielded=shielded)
