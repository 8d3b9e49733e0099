"""
OpenSCAD output for the cylinder maze.

A GeometryDocument is a list of named parameters, comment lines and a
tree of Shape nodes. Shape is a tagged variant: `kind` says what the node
is and the serializer switches on it. Two builders produce the printable
pieces: the inner maze cylinder and the outer shell that slides over it.
"""

from __future__ import annotations

import math

from maze import NORTH, SOUTH, WEST, PASSAGE, WALL, InvalidDimension, render_ascii

# Shape kinds
CYLINDER = 'cylinder'
CUBE = 'cube'
WEDGE = 'wedge'
UNION = 'union'
DIFFERENCE = 'difference'
TRANSLATE = 'translate'
ROTATE = 'rotate'

BOOLEAN_KINDS = (UNION, DIFFERENCE)
TRANSFORM_KINDS = (TRANSLATE, ROTATE)

# overlap (mm) so touching solids fuse instead of sharing a face
EPSILON = 0.01


class Tolerances:
    """Print-tolerance constants. None of these change the maze itself.

    clearance            radial gap between the maze and the outer shell (mm)
    shell_wall           wall thickness of the outer shell (mm)
    wall_ratio           maze wall thickness, as a fraction of the cell span
    channel_depth_ratio  channel depth, as a fraction of the cell width
    max_depth_ratio      channel depth limit, as a fraction of the radius
    base_ratio           base platform height, as a fraction of the height
    base_overhang        base platform radius, as a multiple of the radius
    segments             $fn used for every round primitive
    """

    def __init__(self, clearance=0.2, shell_wall=1.2, wall_ratio=0.2,
                 channel_depth_ratio=0.45, max_depth_ratio=0.3,
                 base_ratio=0.05, base_overhang=1.1, segments=360):
        self.clearance = clearance
        self.shell_wall = shell_wall
        self.wall_ratio = wall_ratio
        self.channel_depth_ratio = channel_depth_ratio
        self.max_depth_ratio = max_depth_ratio
        self.base_ratio = base_ratio
        self.base_overhang = base_overhang
        self.segments = segments

    def __repr__(self):
        return (f"Tolerances(clearance={self.clearance!r}, shell_wall={self.shell_wall!r}, "
                f"wall_ratio={self.wall_ratio!r}, channel_depth_ratio={self.channel_depth_ratio!r}, "
                f"max_depth_ratio={self.max_depth_ratio!r}, base_ratio={self.base_ratio!r}, "
                f"base_overhang={self.base_overhang!r}, segments={self.segments!r})")

    def validate(self):
        # zero clearance makes the shell bore coincide with the wall tops
        if not _finite(self.clearance) or self.clearance <= 0:
            raise InvalidDimension(f"clearance must be > 0, got {self.clearance!r}")
        if not _finite(self.shell_wall) or self.shell_wall <= 0:
            raise InvalidDimension(f"shell_wall must be > 0, got {self.shell_wall!r}")
        for name in ('wall_ratio', 'channel_depth_ratio', 'max_depth_ratio', 'base_ratio'):
            value = getattr(self, name)
            if not _finite(value) or not 0 < value < 1:
                raise InvalidDimension(f"{name} must be between 0 and 1, got {value!r}")
        if not _finite(self.base_overhang) or self.base_overhang < 1:
            raise InvalidDimension(f"base_overhang must be >= 1, got {self.base_overhang!r}")
        if not isinstance(self.segments, int) or self.segments < 3:
            raise InvalidDimension(f"segments must be an integer >= 3, got {self.segments!r}")
        return self


def _finite(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def check_dimensions(height, circumference):
    if not _finite(height) or height <= 0:
        raise InvalidDimension(f"height must be > 0, got {height!r}")
    if not _finite(circumference) or circumference <= 0:
        raise InvalidDimension(f"circumference must be > 0, got {circumference!r}")


class Shape:
    __slots__ = ('kind', 'params', 'children')

    def __init__(self, kind, params=None, children=()):
        self.kind = kind
        self.params = dict(params or {})
        self.children = tuple(children)

    def __repr__(self):
        return f"Shape({self.kind!r}, {self.params!r}, {len(self.children)} children)"

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def cylinder(r, h, fn, r2=None):
    if r2 is None:
        return Shape(CYLINDER, {'r': r, 'h': h, '$fn': fn})
    return Shape(CYLINDER, {'r1': r, 'r2': r2, 'h': h, '$fn': fn})


def cube(x, y, z):
    return Shape(CUBE, {'size': [x, y, z]})


def wedge(inner_r, outer_r, thickness, angle, fn):
    """Annular sector: radii inner_r..outer_r, `thickness` tall, swept `angle` degrees from +X."""
    return Shape(WEDGE, {'inner_r': inner_r, 'outer_r': outer_r,
                         'thickness': thickness, 'angle': angle, '$fn': fn})


def union(*children):
    return Shape(UNION, children=children)


def difference(*children):
    return Shape(DIFFERENCE, children=children)


def translate(v, child):
    return Shape(TRANSLATE, {'v': list(v)}, (child,))


def rotate(v, child):
    return Shape(ROTATE, {'v': list(v)}, (child,))


def fmt(x):
    """Format a number for OpenSCAD: at most 6 decimals, no trailing zeros, no -0."""
    if isinstance(x, (list, tuple)):
        return "[" + ", ".join(fmt(v) for v in x) + "]"
    if isinstance(x, bool):
        return "true" if x else "false"
    if isinstance(x, int):
        return str(x)
    s = f"{x:.6f}".rstrip('0').rstrip('.')
    if s in ('-0', ''):
        s = '0'
    return s


def _args(params):
    return ", ".join(f"{k}={fmt(v)}" for k, v in params.items())


def _emit(shape, indent, out):
    pad = "  " * indent
    kind = shape.kind
    p = shape.params
    if kind == CYLINDER:
        out.append(f"{pad}cylinder({_args(p)});")
    elif kind == CUBE:
        out.append(f"{pad}cube({fmt(p['size'])});")
    elif kind == WEDGE:
        out.append(f"{pad}rotate_extrude(angle={fmt(p['angle'])}, $fn={fmt(p['$fn'])})")
        out.append(f"{pad}  translate([{fmt(p['inner_r'])}, 0])")
        out.append(f"{pad}    square([{fmt(p['outer_r'] - p['inner_r'])}, {fmt(p['thickness'])}]);")
    elif kind in BOOLEAN_KINDS:
        out.append(f"{pad}{kind}() {{")
        for child in shape.children:
            _emit(child, indent + 1, out)
        out.append(f"{pad}}}")
    elif kind in TRANSFORM_KINDS:
        out.append(f"{pad}{kind}({fmt(p['v'])})")
        _emit(shape.children[0], indent + 1, out)
    else:
        raise ValueError(f"unknown shape kind {kind!r}")


class GeometryDocument:
    """One printable piece: parameters, comments and top-level shapes."""

    def __init__(self, name, shapes, params=None, comments=()):
        self.name = name
        self.shapes = tuple(shapes)
        self.params = dict(params or {})
        self.comments = tuple(comments)

    def walk(self):
        for shape in self.shapes:
            yield from shape.walk()

    def lines(self):
        out = [f"// {line}" if line else "//" for line in self.comments]
        if self.comments:
            out.append("")
        for key, value in self.params.items():
            out.append(f"{key} = {fmt(value)};")
        if self.params:
            out.append("")
        for shape in self.shapes:
            _emit(shape, 0, out)
        return out

    def to_scad(self):
        return "\n".join(self.lines()) + "\n"


class CylinderLayout:
    """Physical dimensions shared by the inner piece and the shell."""

    def __init__(self, height, circumference, rows=None, cols=None, tolerances=None):
        check_dimensions(height, circumference)
        self.tol = (tolerances or Tolerances()).validate()
        self.height = float(height)
        self.circumference = float(circumference)
        self.radius = self.circumference / (2 * math.pi)
        self.rows = rows
        self.cols = cols
        self.base_height = self.tol.base_ratio * self.height
        self.shell_radius = self.radius + self.tol.clearance
        self.shell_outer_radius = self.shell_radius + self.tol.shell_wall
        if cols:
            self.cell_width = self.circumference / cols
            self.cell_angle = 360.0 / cols
            self.depth = min(self.tol.channel_depth_ratio * self.cell_width,
                             self.tol.max_depth_ratio * self.radius)
        else:
            self.cell_width = self.cell_angle = self.depth = None
        self.row_height = self.height / rows if rows else None

    @property
    def core_radius(self):
        return self.radius - self.depth


def _ew_wall(layout, row, boundary):
    """Radial plate on the boundary between column boundary-1 and boundary."""
    t = layout.tol.wall_ratio * layout.cell_width
    plate = cube(layout.depth + EPSILON, t, layout.row_height)
    placed = translate([layout.core_radius - EPSILON, -t / 2, row * layout.row_height], plate)
    return rotate([0, 0, boundary * layout.cell_angle], placed)


def _ns_wall(layout, boundary, col):
    """Sector on row boundary `boundary` (0..rows) spanning column `col`."""
    t = layout.tol.wall_ratio * layout.row_height
    z = boundary * layout.row_height - t / 2
    # cap walls stay inside [0, height]
    z = min(max(z, 0.0), layout.height - t)
    ring = wedge(layout.core_radius - EPSILON, layout.radius, t,
                 layout.cell_angle, layout.tol.segments)
    return translate([0, 0, z], rotate([0, 0, col * layout.cell_angle], ring))


def wall_segments(plan, layout):
    """One primitive per physical wall.

    Each cell contributes its North side (a cap on row 0) and its West side
    when they are walls, and the top row adds its South cap. The plan is
    symmetric, so this covers every wall side of every cell exactly once.
    """
    walls = []
    for row, col in plan.grid.cells():
        cell = (row, col)
        if plan.side(cell, NORTH) != PASSAGE:
            walls.append(_ns_wall(layout, row, col))
        if plan.side(cell, WEST) == WALL:
            walls.append(_ew_wall(layout, row, col))
        if plan.side(cell, SOUTH) is None:
            walls.append(_ns_wall(layout, row + 1, col))
    return walls


def maze_comments(plan, start=None, end=None, path=None):
    """Human-readable drawing plus the machine-readable MAZE_* block."""
    lines = [
        f"============ CYLINDER MAZE ({plan.rows}x{plan.cols}) ============",
        "",
        "Unwrapped view, top of the cylinder at the top.",
        "Legend: + corner, --- / | wall, S start, E end, * solution",
        "The leftmost and rightmost edges are the same wall.",
        "",
    ]
    lines.extend(render_ascii(plan, start, end, path).splitlines())
    lines.append("")
    lines.append("Machine-readable maze data (open sides: N=01 S=02 E=04 W=08):")
    lines.append(f"MAZE_START {plan.rows} {plan.cols}")
    if start is not None and end is not None:
        lines.append(f"MAZE_ENDPOINTS {start[0]} {start[1]} {end[0]} {end[1]}")
    for row, hexes in plan.rows_hex():
        lines.append(f"MAZE_ROW {row} {hexes}")
    lines.append("MAZE_END")
    return lines


def build_inner_document(plan, height, circumference, hollow=False, tolerances=None,
                         name='maze', start=None, end=None, path=None):
    """Maze cylinder: core (optionally hollow) + base platform + walls."""
    layout = CylinderLayout(height, circumference, plan.rows, plan.cols, tolerances)
    fn = layout.tol.segments

    core = cylinder(layout.core_radius, layout.height, fn)
    if hollow:
        cavity = translate([0, 0, EPSILON],
                           cylinder(layout.core_radius - layout.depth, layout.height, fn))
        core = difference(core, cavity)
    base = translate([0, 0, -layout.base_height],
                     cylinder(layout.tol.base_overhang * layout.radius,
                              layout.base_height + EPSILON, fn))

    solid = union(core, base, *wall_segments(plan, layout))
    params = {
        'radius': layout.radius,
        'core_radius': layout.core_radius,
        'height': layout.height,
        'rows': plan.rows,
        'cols': plan.cols,
        'cell_width': layout.cell_width,
        'row_height': layout.row_height,
        'hollow': bool(hollow),
    }
    return GeometryDocument(name, [solid], params, maze_comments(plan, start, end, path))


def build_outer_document(height, circumference, hollow=False, rows=None, cols=None,
                         tolerances=None, name='outer'):
    """Shell with `clearance` around the maze; closed bottom unless hollow."""
    layout = CylinderLayout(height, circumference, rows, cols, tolerances)
    fn = layout.tol.segments

    if hollow:
        bore = translate([0, 0, -EPSILON],
                         cylinder(layout.shell_radius, layout.height + 2 * EPSILON, fn))
    else:
        # bore starts at z=0; the base below it closes the bottom
        bore = cylinder(layout.shell_radius, layout.height + EPSILON, fn)
    shell = difference(cylinder(layout.shell_outer_radius, layout.height, fn), bore)

    parts = [shell]
    if not hollow:
        parts.append(translate([0, 0, -layout.base_height],
                               cylinder(layout.tol.base_overhang * layout.shell_outer_radius,
                                        layout.base_height + EPSILON, fn)))
    if rows and cols:
        parts.append(_tooth(layout))

    params = {
        'inner_radius': layout.shell_radius,
        'outer_radius': layout.shell_outer_radius,
        'height': layout.height,
        'clearance': layout.tol.clearance,
        'hollow': bool(hollow),
    }
    return GeometryDocument(name, [union(*parts)], params,
                            [f"Outer shell for a {layout.circumference:g} mm cylinder maze"])


def _tooth(layout):
    """Cone on the shell wall pointing at the axis, centered on the top row
    and on column 0, so it sits in a channel rather than on a radial wall."""
    reach = max(layout.depth - layout.tol.clearance, EPSILON)
    r = 0.3 * min(layout.cell_width, layout.row_height)
    z = layout.height - layout.row_height / 2
    cone = cylinder(r, reach + EPSILON, 36, r2=0.8 * r)
    # rotate about Y so the cone's axis runs along -X, base on the shell wall
    placed = translate([layout.shell_radius + EPSILON, 0, z], rotate([0, -90, 0], cone))
    return rotate([0, 0, layout.cell_angle / 2], placed)
