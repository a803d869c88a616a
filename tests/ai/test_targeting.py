"""Tests for the computer opponent's shot selection."""

import random

import pytest
from armada.ai.targeting import Difficulty, active_hits, hunt_target, select_computer_shot
from armada.engine.grid import Cell, CellStatus, Grid, create_empty_grid, generate_fleet
from armada.engine.resolver import resolve_shot
from armada.engine.ship import Coordinate, ShipType


def _hits(grid: Grid, ship_type: ShipType, *coords: tuple[int, int]) -> Grid:
    return grid.with_cells({Coordinate(x, y): Cell(CellStatus.HIT, ship_type) for x, y in coords})


def _misses(grid: Grid, *coords: tuple[int, int]) -> Grid:
    return grid.with_cells({Coordinate(x, y): Cell(CellStatus.MISS) for x, y in coords})


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_line_of_hits_is_extended(difficulty: Difficulty) -> None:
    grid = _hits(create_empty_grid(), ShipType.DESTROYER, (2, 2), (3, 2))
    for seed in range(20):
        target = select_computer_shot(grid, difficulty, random.Random(seed))
        assert target in {Coordinate(4, 2), Coordinate(1, 2)}


def test_line_extension_prefers_far_end_then_near_end() -> None:
    grid = _hits(create_empty_grid(), ShipType.DESTROYER, (2, 2), (3, 2))
    assert hunt_target(grid, random.Random(0)) == Coordinate(4, 2)

    blocked = _misses(grid, (4, 2))
    assert hunt_target(blocked, random.Random(0)) == Coordinate(1, 2)


def test_vertical_line_is_extended() -> None:
    grid = _hits(create_empty_grid(), ShipType.BATTLESHIP, (6, 9), (6, 8))
    assert hunt_target(grid, random.Random(0)) == Coordinate(6, 7)


def test_blocked_line_falls_back_to_neighbours() -> None:
    grid = _hits(create_empty_grid(), ShipType.DESTROYER, (0, 0), (1, 0))
    grid = _misses(grid, (2, 0))
    target = hunt_target(grid, random.Random(5))
    assert target in {Coordinate(0, 1), Coordinate(1, 1)}


def test_single_hit_targets_an_orthogonal_neighbour() -> None:
    grid = _hits(create_empty_grid(), ShipType.CARRIER, (5, 5))
    grid = _misses(grid, (6, 5))
    neighbours = {Coordinate(4, 5), Coordinate(5, 4), Coordinate(5, 6)}
    seen = set()
    for seed in range(40):
        target = select_computer_shot(grid, Difficulty.EASY, random.Random(seed))
        assert target in neighbours
        seen.add(target)
    assert len(seen) > 1, "Neighbour order should be shuffled"


def test_sunk_ships_are_not_hunted() -> None:
    grid = _hits(create_empty_grid(), ShipType.PATROL_BOAT, (0, 0), (1, 0))
    assert active_hits(grid) == {}
    assert hunt_target(grid, random.Random(0)) is None


def test_active_hits_are_grouped_in_catalog_order() -> None:
    grid = _hits(create_empty_grid(), ShipType.PATROL_BOAT, (9, 9))
    grid = _hits(grid, ShipType.CARRIER, (0, 5))
    groups = active_hits(grid)
    assert list(groups) == [ShipType.CARRIER, ShipType.PATROL_BOAT]
    assert hunt_target(grid, random.Random(1)) in Coordinate(0, 5).neighbours()


def test_hard_search_uses_checkerboard_cells() -> None:
    grid = create_empty_grid()
    for seed in range(50):
        target = select_computer_shot(grid, Difficulty.HARD, random.Random(seed))
        assert (target.x + target.y) % 2 == 0


def test_difficulty_accepts_plain_strings() -> None:
    target = select_computer_shot(create_empty_grid(), "medium", random.Random(3))
    assert create_empty_grid().is_unresolved(target)


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_single_remaining_cell_is_found(difficulty: Difficulty) -> None:
    grid = create_empty_grid()
    last = Coordinate(7, 3)
    grid = grid.with_cells(
        {coord: Cell(CellStatus.MISS) for coord in grid.coordinates() if coord != last}
    )
    assert select_computer_shot(grid, difficulty, random.Random(0)) == last


def test_exhausted_board_raises() -> None:
    grid = create_empty_grid()
    grid = grid.with_cells({coord: Cell(CellStatus.MISS) for coord in grid.coordinates()})
    with pytest.raises(ValueError):
        select_computer_shot(grid, Difficulty.HARD, random.Random(0))


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_selected_shots_are_always_legal(difficulty: Difficulty) -> None:
    rng = random.Random(11)
    grid, fleet = generate_fleet(rng)
    for _ in range(100):
        target = select_computer_shot(grid.observed(), difficulty, rng)
        assert grid.in_bounds(target)
        assert not grid.cell(target).is_resolved
        outcome = resolve_shot(grid, fleet, target.x, target.y)
        grid, fleet = outcome.grid, outcome.fleet
        if outcome.fleet_destroyed:
            break
    assert fleet.all_sunk()
