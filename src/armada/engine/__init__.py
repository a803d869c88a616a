"""Pure game engine: grids, fleets, shot resolution and power-ups.

The match controller lives in `armada.engine.game` and is not imported
here, since it depends on the computer opponent in `armada.ai`.
"""

from .grid import (
    Cell,
    CellStatus,
    Fleet,
    Grid,
    PlacementError,
    accuracy,
    can_place_ship,
    create_empty_grid,
    generate_fleet,
    place_ship,
)
from .powerups import (
    PowerUp,
    PowerUpOutcome,
    RejectionReason,
    ScanReading,
    apply_area_scan,
    apply_area_strike,
    apply_shield,
)
from .resolver import ShotOutcome, ShotResult, fleet_destroyed, is_sunk, resolve_shot
from .ship import (
    FLEET_CELL_COUNT,
    GRID_SIZE,
    SHIP_ORDER,
    Coordinate,
    Orientation,
    PlacedShip,
    ShipType,
)

__all__ = [
    "FLEET_CELL_COUNT",
    "GRID_SIZE",
    "SHIP_ORDER",
    "Cell",
    "CellStatus",
    "Coordinate",
    "Fleet",
    "Grid",
    "Orientation",
    "PlacedShip",
    "PlacementError",
    "PowerUp",
    "PowerUpOutcome",
    "RejectionReason",
    "ScanReading",
    "ShipType",
    "ShotOutcome",
    "ShotResult",
    "accuracy",
    "apply_area_scan",
    "apply_area_strike",
    "apply_shield",
    "can_place_ship",
    "create_empty_grid",
    "fleet_destroyed",
    "generate_fleet",
    "is_sunk",
    "place_ship",
    "resolve_shot",
]
