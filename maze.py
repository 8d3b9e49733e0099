"""
Cylindrical maze core: grid topology, Wilson's algorithm and wall plan.

Cells are (row, col) tuples. Row 0 sits against the base of the cylinder,
row R-1 at the top; columns wrap around (col C-1 is next to col 0).
Directions are single-bit flags so the open sides of a cell fit in a byte,
the same way the machine-readable MAZE_ROW lines store them.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Tuple

NORTH = 0x01   # toward row 0 (base end)
SOUTH = 0x02   # toward row R-1 (top end)
EAST = 0x04    # increasing column
WEST = 0x08    # decreasing column

DIRECTIONS = (NORTH, SOUTH, WEST, EAST)
DIRECTION_NAMES = {NORTH: 'N', SOUTH: 'S', EAST: 'E', WEST: 'W'}
OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}

WALL = 'wall'
PASSAGE = 'passage'

Cell = Tuple[int, int]


class InvalidDimension(ValueError):
    """Rows, columns or physical sizes out of range."""


class GeneratorStalled(RuntimeError):
    """The random walk exceeded its step cap."""


def _integer(value):
    return isinstance(value, int) and not isinstance(value, bool)


class CylindricalGrid:
    def __init__(self, rows: int, cols: int):
        if not _integer(rows) or rows < 1:
            raise InvalidDimension(f"rows must be a positive integer, got {rows!r}")
        # one column makes West == East == self, so two is the minimum
        if not _integer(cols) or cols < 2:
            raise InvalidDimension(f"cols must be an integer >= 2, got {cols!r}")
        self.rows = rows
        self.cols = cols

    def __len__(self):
        return self.rows * self.cols

    def __repr__(self):
        return f"CylindricalGrid(rows={self.rows}, cols={self.cols})"

    def cells(self):
        for row in range(self.rows):
            for col in range(self.cols):
                yield (row, col)

    def contains(self, cell: Cell) -> bool:
        row, col = cell
        return 0 <= row < self.rows and 0 <= col < self.cols

    def neighbor(self, cell: Cell, direction: int) -> Optional[Cell]:
        """Return the cell across `direction`, or None for a missing cap side."""
        row, col = cell
        if direction == NORTH:
            return (row - 1, col) if row > 0 else None
        if direction == SOUTH:
            return (row + 1, col) if row < self.rows - 1 else None
        if direction == WEST:
            return (row, (col - 1) % self.cols)
        if direction == EAST:
            return (row, (col + 1) % self.cols)
        raise ValueError(f"unknown direction {direction!r}")

    def neighbors(self, cell: Cell) -> Tuple[Tuple[Cell, int], ...]:
        """Neighbors of `cell` as (cell, direction) pairs, in N, S, W, E order."""
        if not self.contains(cell):
            raise IndexError(f"cell {cell} outside {self!r}")
        result = []
        for direction in DIRECTIONS:
            other = self.neighbor(cell, direction)
            if other is not None:
                result.append((other, direction))
        return tuple(result)


class SpanningTree:
    """Parent links of a spanning tree over every grid cell.

    `links[cell] = (parent, direction)` where `direction` is the side of
    `cell` the edge leaves through. The root has no entry.
    """

    def __init__(self, grid: CylindricalGrid, root: Cell, links: Dict[Cell, Tuple[Cell, int]]):
        self.grid = grid
        self.root = root
        self._links = dict(links)

    def __len__(self):
        return len(self._links)

    def __eq__(self, other):
        if not isinstance(other, SpanningTree):
            return NotImplemented
        return (self.grid.rows, self.grid.cols, self.root, self._links) == \
            (other.grid.rows, other.grid.cols, other.root, other._links)

    def parent(self, cell: Cell) -> Optional[Cell]:
        link = self._links.get(cell)
        return link[0] if link else None

    def link(self, cell: Cell) -> Optional[Tuple[Cell, int]]:
        return self._links.get(cell)

    def edges(self) -> List[Tuple[Cell, Cell, int]]:
        """All edges as (child, parent, direction), sorted by child."""
        return [(cell, parent, direction)
                for cell, (parent, direction) in sorted(self._links.items())]

    def edge_count(self) -> int:
        return len(self._links)


def default_step_cap(grid: CylindricalGrid) -> int:
    n = len(grid)
    return max(10_000, 1000 * n * n)


def generate_wilson(grid: CylindricalGrid, rng, max_steps: Optional[int] = None,
                    walk_log: Optional[list] = None) -> SpanningTree:
    """Sample a uniform spanning tree of `grid` with Wilson's algorithm.

    `rng` only needs `randrange`; pass `random.Random(seed)` for repeatable
    mazes. The root is a random cell of row 0. Every other cell, in row-major
    order, starts a loop-erased random walk that runs until it hits the tree;
    the erased path is then grafted on.

    Raises GeneratorStalled when more than `max_steps` walk steps are taken
    in total.
    """
    if max_steps is None:
        max_steps = default_step_cap(grid)

    root = (0, rng.randrange(grid.cols))
    in_tree = {root}
    links = {}
    steps = 0

    for start in grid.cells():
        if start in in_tree:
            continue

        # path[i] -> path[i + 1] leaves through dirs[i]
        path = [start]
        dirs = []
        index = {start: 0}
        current = start
        walk_steps = 0

        while current not in in_tree:
            options = grid.neighbors(current)
            nxt, direction = options[rng.randrange(len(options))]
            steps += 1
            walk_steps += 1
            if steps > max_steps:
                raise GeneratorStalled(
                    f"random walk exceeded {max_steps} steps on {grid!r} "
                    f"({len(in_tree)}/{len(grid)} cells in tree)")

            pos = index.get(nxt)
            if pos is not None:
                # loop: erase everything after the first visit of nxt
                for erased in path[pos + 1:]:
                    del index[erased]
                del path[pos + 1:]
                del dirs[pos:]
            else:
                dirs.append(direction)
                index[nxt] = len(path)
                path.append(nxt)
            current = nxt

        for i, direction in enumerate(dirs):
            links[path[i]] = (path[i + 1], direction)
            in_tree.add(path[i])

        if walk_log is not None:
            walk_log.append((start, walk_steps, len(path)))

    return SpanningTree(grid, root, links)


class WallPlan:
    """Open-side flags for every cell of a grid."""

    def __init__(self, grid: CylindricalGrid, flags: bytearray):
        if len(flags) != len(grid):
            raise ValueError(f"expected {len(grid)} cell flags, got {len(flags)}")
        self.grid = grid
        self._flags = bytes(flags)

    @property
    def rows(self):
        return self.grid.rows

    @property
    def cols(self):
        return self.grid.cols

    def __eq__(self, other):
        if not isinstance(other, WallPlan):
            return NotImplemented
        return (self.rows, self.cols, self._flags) == (other.rows, other.cols, other._flags)

    def flags(self, cell: Cell) -> int:
        row, col = cell
        return self._flags[col + row * self.cols]

    def side(self, cell: Cell, direction: int) -> Optional[str]:
        """WALL or PASSAGE, or None when the side does not exist (cap rows)."""
        if self.grid.neighbor(cell, direction) is None:
            return None
        return PASSAGE if self.flags(cell) & direction else WALL

    def sides(self, cell: Cell) -> Dict[int, str]:
        return {direction: self.side(cell, direction)
                for direction in DIRECTIONS
                if self.grid.neighbor(cell, direction) is not None}

    def is_open(self, cell: Cell, direction: int) -> bool:
        return self.side(cell, direction) == PASSAGE

    def passages(self, cell: Cell) -> List[Tuple[Cell, int]]:
        return [(other, direction) for other, direction in self.grid.neighbors(cell)
                if self.flags(cell) & direction]

    def rows_hex(self):
        """Yield (row, 'HH HH ...') lines of the raw flags, as stored in MAZE_ROW."""
        for row in range(self.rows):
            yield row, " ".join(f"{self.flags((row, col)):02X}" for col in range(self.cols))


def derive_wall_plan(grid: CylindricalGrid, tree: SpanningTree) -> WallPlan:
    """Mark a side open iff a tree edge crosses it; everything else is wall."""
    flags = bytearray(len(grid))
    for cell, parent, direction in tree.edges():
        row, col = cell
        prow, pcol = parent
        flags[col + row * grid.cols] |= direction
        flags[pcol + prow * grid.cols] |= OPPOSITE[direction]
    return WallPlan(grid, flags)


def pick_endpoints(grid: CylindricalGrid, rng) -> Tuple[Cell, Cell]:
    """Start somewhere on row 0, end somewhere on the last row."""
    start = (0, rng.randrange(grid.cols))
    end = (grid.rows - 1, rng.randrange(grid.cols))
    return start, end


def solve(plan: WallPlan, start: Cell, end: Cell) -> Optional[List[Cell]]:
    """Breadth-first search through passages; the path from start to end or None."""
    parent = {start: None}
    q = deque([start])
    while q:
        cell = q.popleft()
        if cell == end:
            path = []
            while cell is not None:
                path.append(cell)
                cell = parent[cell]
            path.reverse()
            return path
        for other, _ in plan.passages(cell):
            if other not in parent:
                parent[other] = cell
                q.append(other)
    return None


def can_solve(plan: WallPlan, start: Cell, end: Cell) -> bool:
    return solve(plan, start, end) is not None


def render_ascii(plan: WallPlan, start: Optional[Cell] = None, end: Optional[Cell] = None,
                 path: Optional[List[Cell]] = None) -> str:
    """Draw the unwrapped cylinder with the top row (R-1) at the top.

    Legend: + corner, --- horizontal wall, | vertical wall, S start, E end,
    * solution path. The left and right edges are the same wall.
    """
    on_path = set(path or ())
    W = plan.cols
    lines = []

    def border(row, direction):
        line = ""
        for col in range(W):
            line += "+"
            line += "   " if plan.is_open((row, col), direction) else "---"
        return line + "+"

    for row in range(plan.rows - 1, -1, -1):
        lines.append(border(row, SOUTH))
        line = ""
        for col in range(W):
            cell = (row, col)
            if col == 0:
                line += " " if plan.is_open(cell, WEST) else "|"
            if cell == start:
                line += " S "
            elif cell == end:
                line += " E "
            elif cell in on_path:
                line += " * "
            else:
                line += "   "
            line += " " if plan.is_open(cell, EAST) else "|"
        lines.append(line)
    lines.append(border(0, NORTH))
    return "\n".join(lines)
