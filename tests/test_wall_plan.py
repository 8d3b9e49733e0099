import random

import pytest

from maze import (EAST, NORTH, OPPOSITE, PASSAGE, SOUTH, WALL, WEST, CylindricalGrid,
                  SpanningTree, WallPlan, can_solve, derive_wall_plan, generate_wilson,
                  pick_endpoints, render_ascii, solve)


def make_plan(rows, cols, seed=0):
    grid = CylindricalGrid(rows, cols)
    return derive_wall_plan(grid, generate_wilson(grid, random.Random(seed)))


@pytest.mark.parametrize("rows, cols", [(1, 2), (2, 2), (4, 7), (10, 20)])
def test_plan_is_symmetric(rows, cols):
    plan = make_plan(rows, cols, seed=rows * cols)
    for cell in plan.grid.cells():
        for direction, state in plan.sides(cell).items():
            other = plan.grid.neighbor(cell, direction)
            assert plan.side(other, OPPOSITE[direction]) == state


@pytest.mark.parametrize("rows, cols", [(2, 2), (5, 6), (10, 20)])
def test_passage_count_matches_tree(rows, cols):
    plan = make_plan(rows, cols)
    open_sides = sum(bin(plan.flags(c)).count("1") for c in plan.grid.cells())
    assert open_sides == 2 * (rows * cols - 1)


def test_caps_never_open():
    plan = make_plan(6, 8, seed=11)
    for col in range(8):
        assert plan.side((0, col), NORTH) is None
        assert NORTH not in plan.sides((0, col))
        assert plan.side((5, col), SOUTH) is None
        assert SOUTH not in plan.sides((5, col))
        assert not plan.is_open((0, col), NORTH)
        assert not plan.is_open((5, col), SOUTH)


def test_single_ring_has_one_wall_pair():
    for seed in range(20):
        plan = make_plan(1, 4, seed)
        east_walls = [c for c in plan.grid.cells() if plan.side(c, EAST) == WALL]
        west_walls = [c for c in plan.grid.cells() if plan.side(c, WEST) == WALL]
        assert len(east_walls) == 1
        assert len(west_walls) == 1
        (row, col), = east_walls
        assert west_walls == [(row, (col + 1) % 4)]
        for cell in plan.grid.cells():
            assert set(plan.sides(cell)) == {EAST, WEST}


def test_two_columns_keep_east_and_west_apart():
    # with two columns East and West reach the same cell through different walls
    grid = CylindricalGrid(1, 2)
    tree = SpanningTree(grid, (0, 0), {(0, 1): ((0, 0), WEST)})
    plan = derive_wall_plan(grid, tree)
    assert plan.side((0, 1), WEST) == PASSAGE
    assert plan.side((0, 0), EAST) == PASSAGE
    assert plan.side((0, 1), EAST) == WALL
    assert plan.side((0, 0), WEST) == WALL


def test_plan_rejects_wrong_flag_count():
    with pytest.raises(ValueError):
        WallPlan(CylindricalGrid(2, 3), bytearray(5))


def test_every_maze_is_solvable():
    for seed in range(10):
        grid = CylindricalGrid(10, 10)
        rng = random.Random(seed)
        plan = derive_wall_plan(grid, generate_wilson(grid, rng))
        start, end = pick_endpoints(grid, rng)
        assert start[0] == 0 and end[0] == 9
        path = solve(plan, start, end)
        assert path[0] == start and path[-1] == end
        for a, b in zip(path, path[1:]):
            assert b in [other for other, _ in plan.passages(a)]


def test_all_walls_is_unsolvable():
    grid = CylindricalGrid(3, 3)
    plan = WallPlan(grid, bytearray(9))
    assert not can_solve(plan, (0, 0), (2, 2))
    assert can_solve(plan, (1, 1), (1, 1))


def test_render_ascii_layout():
    plan = make_plan(3, 4, seed=2)
    text = render_ascii(plan, start=(0, 1), end=(2, 3))
    lines = text.splitlines()
    assert len(lines) == 2 * 3 + 1
    assert all(len(line) == 4 * 4 + 1 for line in lines)
    assert lines[0] == "+---" * 4 + "+"
    assert lines[-1] == "+---" * 4 + "+"
    # top row is drawn first
    assert " E " in lines[1]
    assert " S " in lines[-2]
