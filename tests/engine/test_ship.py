"""Tests for the ship catalog and PlacedShip."""

from armada.engine.ship import (
    FLEET_CELL_COUNT,
    SHIP_ORDER,
    Coordinate,
    Orientation,
    PlacedShip,
    ShipType,
)


def test_catalog_order_and_lengths() -> None:
    assert [ship_type.length for ship_type in SHIP_ORDER] == [5, 4, 3, 3, 2]
    assert SHIP_ORDER[0] is ShipType.CARRIER
    assert FLEET_CELL_COUNT == 17


def test_sink_bonus_grows_with_ship_size() -> None:
    assert ShipType.PATROL_BOAT.sink_bonus == 15
    assert ShipType.SUBMARINE.sink_bonus == ShipType.DESTROYER.sink_bonus == 20
    assert ShipType.BATTLESHIP.sink_bonus == 30
    assert ShipType.CARRIER.sink_bonus == 40
    ordered = sorted(SHIP_ORDER, key=lambda ship_type: ship_type.length)
    bonuses = [ship_type.sink_bonus for ship_type in ordered]
    assert bonuses == sorted(bonuses)


def test_ship_coordinates_follow_orientation() -> None:
    horizontal = PlacedShip(ShipType.PATROL_BOAT, Coordinate(0, 0), Orientation.HORIZONTAL)
    assert horizontal.coordinates() == [Coordinate(0, 0), Coordinate(1, 0)]

    vertical = PlacedShip(ShipType.DESTROYER, Coordinate(3, 3), Orientation.VERTICAL)
    assert vertical.coordinates() == [Coordinate(3, 3), Coordinate(3, 4), Coordinate(3, 5)]


def test_hits_accumulate_until_sunk_and_never_exceed_length() -> None:
    ship = PlacedShip(ShipType.SUBMARINE, Coordinate(3, 3), Orientation.VERTICAL)
    for expected in range(1, ship.length + 1):
        ship = ship.with_hit()
        assert ship.hits == expected
        assert ship.is_sunk() is (expected == ship.length)

    ship = ship.with_hit()
    assert ship.hits == ship.length
    assert ship.is_sunk()


def test_with_shield_returns_copy() -> None:
    ship = PlacedShip(ShipType.CARRIER, Coordinate(0, 0), Orientation.HORIZONTAL)
    shielded = ship.with_shield()
    assert shielded.shielded
    assert not ship.shielded


def test_coordinate_label() -> None:
    assert Coordinate(0, 0).label() == "A-1"
    assert Coordinate(9, 9).label() == "J-10"
