import pytest

from maze import EAST, NORTH, SOUTH, WEST, CylindricalGrid, InvalidDimension


def test_wraparound_neighbors_every_row():
    grid = CylindricalGrid(3, 5)
    for row in range(3):
        assert grid.neighbor((row, 0), WEST) == (row, 4)
        assert grid.neighbor((row, 4), EAST) == (row, 0)


def test_caps_have_no_vertical_neighbor():
    grid = CylindricalGrid(3, 4)
    assert grid.neighbor((0, 2), NORTH) is None
    assert grid.neighbor((2, 2), SOUTH) is None
    assert grid.neighbor((1, 2), NORTH) == (0, 2)
    assert grid.neighbor((1, 2), SOUTH) == (2, 2)


def test_neighbor_order_and_count():
    grid = CylindricalGrid(3, 4)
    assert grid.neighbors((1, 1)) == (((0, 1), NORTH), ((2, 1), SOUTH),
                                      ((1, 0), WEST), ((1, 2), EAST))
    assert len(grid.neighbors((0, 0))) == 3
    assert len(grid.neighbors((2, 3))) == 3


def test_single_row_only_has_horizontal_neighbors():
    grid = CylindricalGrid(1, 4)
    directions = [d for _, d in grid.neighbors((0, 0))]
    assert directions == [WEST, EAST]


def test_adjacency_is_symmetric():
    grid = CylindricalGrid(4, 3)
    for cell in grid.cells():
        for other, _ in grid.neighbors(cell):
            assert cell in [c for c, _ in grid.neighbors(other)]


def test_two_columns_is_the_minimum():
    grid = CylindricalGrid(2, 2)
    assert len(grid) == 4
    assert grid.neighbor((0, 0), WEST) == grid.neighbor((0, 0), EAST) == (0, 1)


@pytest.mark.parametrize("rows, cols", [(2, 1), (0, 5), (3, 0), (-1, 4), (True, 2), (2, True), (2.0, 3)])
def test_invalid_dimensions(rows, cols):
    with pytest.raises(InvalidDimension):
        CylindricalGrid(rows, cols)


def test_invalid_dimension_is_a_value_error():
    with pytest.raises(ValueError):
        CylindricalGrid(2, 1)


def test_neighbors_rejects_outside_cell():
    grid = CylindricalGrid(2, 3)
    with pytest.raises(IndexError):
        grid.neighbors((2, 0))
