#!/usr/bin/env python3
"""
Cylinder maze generator.

Builds a perfect maze on the surface of a cylinder (columns wrap around,
rows do not) with Wilson's algorithm and writes two OpenSCAD files:

  <maze-file>_whole.scad   the maze cylinder on its base platform
  <outer-file>.scad        the shell that slides over it

Usage (basic):
  python3 cylinder_maze.py --rows 10 --cols 20 --height 60 --circumference 100

Set MAZE_DEBUG in the environment to get a walk-by-walk log in
maze_debug.log.
"""

import argparse
import os
import random
import subprocess
import sys

from maze import (CylindricalGrid, InvalidDimension, GeneratorStalled, derive_wall_plan,
                  generate_wilson, pick_endpoints, render_ascii, solve)
from scad import Tolerances, build_inner_document, build_outer_document, check_dimensions

DEBUG_LOG = 'maze_debug.log'


class MazeConfig:
    def __init__(self, rows=10, cols=20, height_mm=60.0, circumference_mm=100.0, hollow=False,
                 maze_file_base='cylinder_maze', outer_file_base='cylinder_outer',
                 seed=None, tolerances=None):
        self.rows = rows
        self.cols = cols
        self.height_mm = height_mm
        self.circumference_mm = circumference_mm
        self.hollow = hollow
        self.maze_file_base = maze_file_base
        self.outer_file_base = outer_file_base
        self.seed = seed
        self.tolerances = tolerances or Tolerances()

    def validate(self):
        """Raise InvalidDimension before any generation work is done."""
        CylindricalGrid(self.rows, self.cols)
        check_dimensions(self.height_mm, self.circumference_mm)
        self.tolerances.validate()
        return self

    @property
    def maze_name(self):
        return f"{self.maze_file_base}_whole"

    @property
    def outer_name(self):
        return self.outer_file_base


class MazeBuild:
    """Everything one run produces."""

    def __init__(self, grid, tree, plan, start, end, path, inner, outer, walk_log):
        self.grid = grid
        self.tree = tree
        self.plan = plan
        self.start = start
        self.end = end
        self.path = path
        self.inner = inner
        self.outer = outer
        self.walk_log = walk_log

    @property
    def solvable(self):
        return self.path is not None

    def documents(self):
        return [self.inner, self.outer]


def build_maze(config, rng=None):
    """Run the whole pipeline; no files are touched.

    `rng` defaults to random.Random(config.seed).
    """
    config.validate()
    if rng is None:
        rng = random.Random(config.seed)

    grid = CylindricalGrid(config.rows, config.cols)
    walk_log = []
    tree = generate_wilson(grid, rng, walk_log=walk_log)
    plan = derive_wall_plan(grid, tree)
    start, end = pick_endpoints(grid, rng)
    path = solve(plan, start, end)

    inner = build_inner_document(plan, config.height_mm, config.circumference_mm,
                                 hollow=config.hollow, tolerances=config.tolerances,
                                 name=config.maze_name, start=start, end=end, path=path)
    outer = build_outer_document(config.height_mm, config.circumference_mm,
                                 hollow=config.hollow, rows=config.rows, cols=config.cols,
                                 tolerances=config.tolerances, name=config.outer_name)
    return MazeBuild(grid, tree, plan, start, end, path, inner, outer, walk_log)


def write_documents(documents, out_dir='.'):
    """Write each document to <out_dir>/<name>.scad; return the paths."""
    if out_dir and not os.path.isdir(out_dir):
        os.makedirs(out_dir)
    paths = []
    for doc in documents:
        path = os.path.join(out_dir, doc.name + '.scad')
        with open(path, 'w', encoding='utf-8') as f:
            f.write(doc.to_scad())
        paths.append(path)
    return paths


def scad_to_stl(scad_path, stl_path=None):
    """Run openscad to turn a .scad file into an STL next to it."""
    if stl_path is None:
        stl_path = os.path.splitext(scad_path)[0] + '.stl'
    try:
        res = subprocess.run(['openscad', '-q', scad_path, '-o', stl_path], check=False)
    except FileNotFoundError:
        raise RuntimeError('openscad not found; please install OpenSCAD or run without --stl')
    if res.returncode != 0:
        if os.path.exists(stl_path):
            os.remove(stl_path)
        raise RuntimeError(f'openscad failed to generate {stl_path}')
    return stl_path


def write_debug_log(build, config, filename=DEBUG_LOG):
    with open(filename, 'w', encoding='utf-8') as df:
        df.write(f'ROWS={config.rows} COLS={config.cols} SEED={config.seed} ROOT={build.tree.root}\n')
        df.write(f'START={build.start} END={build.end} SOLVABLE={build.solvable}\n')
        df.write('WALK_LOG: start steps path_length\n')
        total = 0
        for start, steps, length in build.walk_log:
            total += steps
            df.write(f'{start} {steps} {length}\n')
        df.write(f'TOTAL_STEPS={total} EDGES={build.tree.edge_count()}\n')


def parse_args(argv):
    defaults = Tolerances()
    p = argparse.ArgumentParser(description='Generate a cylindrical maze and export it to OpenSCAD')
    p.add_argument('-r', '--rows', type=int, default=10, help='Number of maze rows')
    p.add_argument('-c', '--cols', type=int, default=20, help='Number of maze columns (>= 2)')
    p.add_argument('--height', type=float, default=60.0, help='Height of the cylinder (mm)')
    p.add_argument('--circumference', type=float, default=100.0, help='Circumference of the cylinder (mm)')
    p.add_argument('--hollow', action='store_true', help='Hollow core; open-ended outer shell')
    p.add_argument('--maze-file', '--maze_file', dest='maze_file', default='cylinder_maze',
                   help='Base filename for the maze output')
    p.add_argument('--outer-file', '--outer_file', dest='outer_file', default='cylinder_outer',
                   help='Base filename for the outer shell output')
    p.add_argument('--out-dir', dest='out_dir', default='.', help='Directory for the output files')
    p.add_argument('--seed', type=int, default=None, help='Deterministic RNG seed')
    p.add_argument('--stl', action='store_true', help='Run output through openscad to make stl')
    p.add_argument('-q', '--quiet', action='store_true', help='Do not print the maze')
    # print tolerances
    p.add_argument('--clearance', type=float, default=defaults.clearance,
                   help='Gap between maze and shell, radius (mm)')
    p.add_argument('--shell-wall', dest='shell_wall', type=float, default=defaults.shell_wall,
                   help='Outer shell wall thickness (mm)')
    p.add_argument('--wall-ratio', dest='wall_ratio', type=float, default=defaults.wall_ratio,
                   help='Maze wall thickness as a fraction of the cell')
    p.add_argument('--channel-depth-ratio', dest='channel_depth_ratio', type=float,
                   default=defaults.channel_depth_ratio, help='Channel depth as a fraction of the cell width')
    p.add_argument('--base-ratio', dest='base_ratio', type=float, default=defaults.base_ratio,
                   help='Base platform height as a fraction of the height')
    p.add_argument('--max-depth-ratio', dest='max_depth_ratio', type=float,
                   default=defaults.max_depth_ratio, help='Channel depth limit as a fraction of the radius')
    p.add_argument('--base-overhang', dest='base_overhang', type=float, default=defaults.base_overhang,
                   help='Base platform radius as a multiple of the radius')
    p.add_argument('--segments', type=int, default=defaults.segments, help='$fn for round shapes')
    return p.parse_args(argv)


def config_from_args(args):
    tolerances = Tolerances(clearance=args.clearance, shell_wall=args.shell_wall,
                            wall_ratio=args.wall_ratio, channel_depth_ratio=args.channel_depth_ratio,
                            max_depth_ratio=args.max_depth_ratio, base_ratio=args.base_ratio,
                            base_overhang=args.base_overhang, segments=args.segments)
    return MazeConfig(rows=args.rows, cols=args.cols, height_mm=args.height,
                      circumference_mm=args.circumference, hollow=args.hollow,
                      maze_file_base=args.maze_file, outer_file_base=args.outer_file,
                      seed=args.seed, tolerances=tolerances)


def main(argv):
    args = parse_args(argv)
    config = config_from_args(args)

    try:
        build = build_maze(config)
    except (InvalidDimension, GeneratorStalled) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Wilson's Algorithm Maze on a Cylinder ({config.rows}x{config.cols}):")
        print("(Left and right edges wrap around)")
        print("Start (S) at the base row, End (E) at the top row\n")
        print(render_ascii(build.plan, build.start, build.end))
        print(f"\nMaze is solvable: {build.solvable}")

    if os.getenv('MAZE_DEBUG') is not None:
        write_debug_log(build, config)

    try:
        paths = write_documents(build.documents(), args.out_dir)
        for path in paths:
            written = [path]
            if args.stl:
                written.append(scad_to_stl(path))
            if not args.quiet:
                print("\n".join(written))
    except (OSError, RuntimeError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
