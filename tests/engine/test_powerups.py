"""Tests for shield, area scan and area strike."""

import pytest
from armada.engine.grid import Cell, CellStatus, Fleet, create_empty_grid, place_ship
from armada.engine.powerups import (
    PowerUp,
    RejectionReason,
    affordable,
    apply_area_scan,
    apply_area_strike,
    apply_shield,
    area_cells,
)
from armada.engine.resolver import ShotResult, resolve_shot
from armada.engine.ship import HIT_REWARD, Coordinate, ShipType


@pytest.fixture()
def board():
    grid, fleet = place_ship(create_empty_grid(), Fleet(), ShipType.PATROL_BOAT, 0, 0, True)
    grid, fleet = place_ship(grid, fleet, ShipType.DESTROYER, 4, 4, False)
    return grid, fleet


def test_power_up_costs() -> None:
    assert PowerUp.SHIELD.cost == 50
    assert PowerUp.AREA_SCAN.cost == 75
    assert PowerUp.AREA_STRIKE.cost == 120
    assert affordable(60) == [PowerUp.SHIELD]
    assert affordable(0) == []


def test_area_cells_are_clipped_to_the_board() -> None:
    grid = create_empty_grid()
    assert len(area_cells(grid, Coordinate(5, 5))) == 9
    assert area_cells(grid, Coordinate(0, 0)) == [
        Coordinate(0, 0),
        Coordinate(1, 0),
        Coordinate(0, 1),
        Coordinate(1, 1),
    ]
    assert len(area_cells(grid, Coordinate(9, 4))) == 6


def test_shield_sets_flag_and_charges_cp(board) -> None:
    grid, fleet = board
    outcome = apply_shield(grid, fleet, 1, 0, 60)
    assert outcome.accepted
    assert outcome.balance == 10
    assert outcome.fleet.get(ShipType.PATROL_BOAT).shielded
    assert not outcome.continue_turn
    assert outcome.grid is grid


@pytest.mark.parametrize(
    ("target", "balance", "reason"),
    [
        ((0, 0), 49, RejectionReason.INSUFFICIENT_CP),
        ((5, 5), 100, RejectionReason.INVALID_TARGET),
        ((10, 0), 100, RejectionReason.OUT_OF_BOUNDS),
    ],
)
def test_shield_rejections_change_nothing(board, target, balance, reason) -> None:
    grid, fleet = board
    outcome = apply_shield(grid, fleet, *target, balance)
    assert not outcome.accepted
    assert outcome.reason is reason
    assert outcome.balance == balance
    assert outcome.fleet is fleet


def test_shield_rejects_already_shielded_and_sunk_ships(board) -> None:
    grid, fleet = board
    shielded = apply_shield(grid, fleet, 0, 0, 200)
    again = apply_shield(grid, shielded.fleet, 0, 0, shielded.balance)
    assert again.reason is RejectionReason.INVALID_TARGET

    first = resolve_shot(grid, fleet, 0, 0)
    sunk = resolve_shot(first.grid, first.fleet, 1, 0)
    assert sunk.result is ShotResult.SUNK
    outcome = apply_shield(sunk.grid, sunk.fleet, 0, 0, 200)
    assert outcome.reason is RejectionReason.INVALID_TARGET


def test_shield_can_cover_a_damaged_ship(board) -> None:
    grid, fleet = board
    hit = resolve_shot(grid, fleet, 4, 4)
    outcome = apply_shield(hit.grid, hit.fleet, 4, 4, 50)
    assert outcome.accepted
    assert outcome.fleet.get(ShipType.DESTROYER).shielded


def test_area_scan_reveals_block_without_resolving(board) -> None:
    grid, _ = board
    outcome = apply_area_scan(grid, 1, 1, 80)
    assert outcome.accepted
    assert outcome.balance == 5
    assert outcome.continue_turn
    assert outcome.grid is grid
    assert len(outcome.readings) == 9
    contacts = {reading.coord for reading in outcome.readings if reading.occupied}
    assert contacts == {Coordinate(0, 0), Coordinate(1, 0)}


def test_area_scan_rejected_without_cp(board) -> None:
    grid, _ = board
    outcome = apply_area_scan(grid, 1, 1, 74)
    assert not outcome.accepted
    assert outcome.reason is RejectionReason.INSUFFICIENT_CP
    assert outcome.balance == 74
    assert outcome.readings == ()


def test_area_strike_resolves_every_fresh_cell(board) -> None:
    grid, fleet = board
    grid = grid.with_cells({Coordinate(4, 3): Cell(CellStatus.MISS)})

    outcome = apply_area_strike(grid, fleet, 4, 4, 130)
    assert outcome.accepted
    assert len(outcome.shots) == 8
    results = [shot.result for shot in outcome.shots]
    assert results.count(ShotResult.HIT) == 2
    assert outcome.continue_turn
    assert outcome.cp_awarded == 2 * HIT_REWARD
    assert outcome.balance == 130 - 120 + 2 * HIT_REWARD
    assert outcome.fleet.get(ShipType.DESTROYER).hits == 2
    assert all(outcome.grid.cell(coord).is_resolved for coord in area_cells(grid, Coordinate(4, 4)))
    assert not outcome.fleet_destroyed


def test_area_strike_all_misses_passes_turn(board) -> None:
    grid, fleet = board
    outcome = apply_area_strike(grid, fleet, 8, 8, 120)
    assert outcome.accepted
    assert outcome.balance == 0
    assert not outcome.continue_turn
    assert all(shot.result is ShotResult.MISS for shot in outcome.shots)


def test_area_strike_can_end_the_match() -> None:
    grid, fleet = place_ship(create_empty_grid(), Fleet(), ShipType.PATROL_BOAT, 0, 0, True)
    outcome = apply_area_strike(grid, fleet, 0, 0, 120)
    assert outcome.fleet_destroyed
    assert outcome.balance == 2 * HIT_REWARD + ShipType.PATROL_BOAT.sink_bonus


def test_area_strike_rejections(board) -> None:
    grid, fleet = board
    poor = apply_area_strike(grid, fleet, 4, 4, 119)
    assert poor.reason is RejectionReason.INSUFFICIENT_CP
    assert poor.grid is grid

    resolved = grid.with_cells(
        {coord: Cell(CellStatus.MISS) for coord in area_cells(grid, Coordinate(8, 8))}
    )
    nothing_left = apply_area_strike(resolved, fleet, 8, 8, 500)
    assert nothing_left.reason is RejectionReason.NO_TARGETS
    assert nothing_left.balance == 500
