#!/usr/bin/env python3
"""
Maze Visualizer for cylinder maze .scad files

Reads the machine-readable MAZE_* comment block that cylinder_maze.py
writes into <maze-file>_whole.scad and shows the maze as text, or plots
the unwrapped wall map with matplotlib.
"""

import argparse
import sys

import matplotlib.pyplot as plt

from maze import (DIRECTIONS, DIRECTION_NAMES, EAST, NORTH, SOUTH, WEST, CylindricalGrid,
                  InvalidDimension, WallPlan, render_ascii, solve)


def parse_scad_maze(text):
    """Parse the MAZE_START / MAZE_ROW / MAZE_END block.

    Returns a dict with 'plan' (WallPlan), 'start' and 'end' (cells or None).
    Raises ValueError when the block is missing or malformed.
    """
    rows = cols = None
    start = end = None
    data = {}
    ended = False
    for raw in text.splitlines():
        line = raw.strip()
        if not line.startswith('//'):
            continue
        fields = line[2:].split()
        if not fields:
            continue
        tag = fields[0]
        if tag == 'MAZE_START':
            rows, cols = int(fields[1]), int(fields[2])
        elif tag == 'MAZE_ENDPOINTS':
            v = [int(x) for x in fields[1:5]]
            start, end = (v[0], v[1]), (v[2], v[3])
        elif tag == 'MAZE_ROW':
            if rows is None:
                raise ValueError("MAZE_ROW before MAZE_START")
            row = int(fields[1])
            values = [int(h, 16) for h in fields[2:]]
            if len(values) != cols:
                raise ValueError(f"Row {row} has {len(values)} values, expected {cols}")
            if not 0 <= row < rows:
                raise ValueError(f"Row number {row} out of range")
            data[row] = values
        elif tag == 'MAZE_END':
            ended = True
            break

    if rows is None or not ended:
        raise ValueError("Missing MAZE_START or MAZE_END in maze file")
    if len(data) != rows:
        raise ValueError(f"Expected {rows} MAZE_ROW lines, got {len(data)}")

    try:
        grid = CylindricalGrid(rows, cols)
    except InvalidDimension as e:
        raise ValueError(str(e))
    flags = bytearray()
    for row in range(rows):
        flags.extend(data[row])
    return {'plan': WallPlan(grid, flags), 'start': start, 'end': end}


def parse_maze_file(filename):
    with open(filename, 'r', encoding='utf-8') as f:
        return parse_scad_maze(f.read())


def visualize_maze_text(plan):
    """Each cell as the letters of its open sides (N, S, E, W), top row first."""
    output = []
    for row in range(plan.rows - 1, -1, -1):
        cells = []
        for col in range(plan.cols):
            flags = plan.flags((row, col))
            cells.append("".join(DIRECTION_NAMES[d] for d in DIRECTIONS if flags & d).ljust(4))
        output.append(" ".join(cells))
    return "\n".join(output)


def wall_lines(plan):
    """Wall segments of the unwrapped maze in cell units: ((x0, y0), (x1, y1))."""
    segments = []
    for row, col in plan.grid.cells():
        cell = (row, col)
        if not plan.is_open(cell, NORTH):
            segments.append(((col, row), (col + 1, row)))
        if not plan.is_open(cell, WEST):
            segments.append(((col, row), (col, row + 1)))
        if plan.side(cell, SOUTH) is None:
            segments.append(((col, row + 1), (col + 1, row + 1)))
        if col == plan.cols - 1 and not plan.is_open(cell, EAST):
            # draw the wrap seam on the right edge too
            segments.append(((col + 1, row), (col + 1, row + 1)))
    return segments


def plot_maze(plan, start=None, end=None, path=None, save=None, title=None):
    fig = plt.figure(figsize=(max(4, plan.cols * 0.4), max(3, plan.rows * 0.4)))
    ax = fig.add_subplot(111)
    for (x0, y0), (x1, y1) in wall_lines(plan):
        ax.plot([x0, x1], [y0, y1], color=(0.1, 0.1, 0.1), linewidth=2)
    if path:
        ax.plot([c + 0.5 for _, c in path], [r + 0.5 for r, _ in path],
                color=(0.2, 0.6, 0.9), linewidth=1.5)
    for cell, label in ((start, 'S'), (end, 'E')):
        if cell is not None:
            ax.text(cell[1] + 0.5, cell[0] + 0.5, label, ha='center', va='center')
    ax.axvline(0, color=(0.8, 0.2, 0.2), linestyle=':', linewidth=1)
    ax.axvline(plan.cols, color=(0.8, 0.2, 0.2), linestyle=':', linewidth=1)
    ax.set_xlim(-0.5, plan.cols + 0.5)
    ax.set_ylim(-0.5, plan.rows + 0.5)
    ax.set_aspect('equal')
    ax.set_xlabel('column (wraps at dotted lines)')
    ax.set_ylabel('row (base at 0)')
    ax.set_title(title or f'Cylinder maze {plan.rows}x{plan.cols}')
    fig.tight_layout()
    if save:
        fig.savefig(save)
        plt.close(fig)
    else:
        plt.show()
    return fig


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Visualize cylinder maze .scad files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s cylinder_maze_whole.scad
  %(prog)s cylinder_maze_whole.scad --text
  %(prog)s cylinder_maze_whole.scad --solve
  %(prog)s cylinder_maze_whole.scad --plot --save maze.png
        """
    )
    parser.add_argument('filename', help='Maze .scad file to visualize')
    parser.add_argument('--text', action='store_true',
                        help='Use text format showing passage directions (N/S/E/W)')
    parser.add_argument('--solve', action='store_true', help='Mark the path from S to E')
    parser.add_argument('--info', action='store_true',
                        help='Show maze information only (no visualization)')
    parser.add_argument('--plot', action='store_true', help='Plot the wall map with matplotlib')
    parser.add_argument('--save', default=None, help='Save the plot to this file instead of showing it')

    args = parser.parse_args(argv)

    try:
        maze_data = parse_maze_file(args.filename)
    except FileNotFoundError:
        print(f"Error: File not found: {args.filename}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    plan = maze_data['plan']
    start, end = maze_data['start'], maze_data['end']
    path = None
    if args.solve and start is not None and end is not None:
        path = solve(plan, start, end)

    print(f"Maze: {args.filename}")
    print(f"Dimensions: {plan.rows}x{plan.cols}")
    if start is not None:
        print(f"Start: {start}  End: {end}")
    print()

    if args.info:
        return 0
    if args.plot:
        plot_maze(plan, start, end, path, save=args.save)
    elif args.text:
        print(visualize_maze_text(plan))
    else:
        print(render_ascii(plan, start, end, path))
    return 0


if __name__ == '__main__':
    sys.exit(main())
