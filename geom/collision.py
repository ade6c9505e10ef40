# geom/collision.py
from geom.polygons import Rect, oriented_box, bounding_rect

AABB = "aabb"
ORIENTED = "oriented"
COLLISION_MODES = (AABB, ORIENTED)


def rects_overlap(a: Rect, b: Rect) -> bool:
    """Strict overlap; rectangles that only share an edge do not collide."""
    if a.max_x <= b.min_x or a.min_x >= b.max_x:
        return False
    if a.max_y <= b.min_y or a.min_y >= b.max_y:
        return False
    return True


def _project(poly, ax, ay):
    """Project polygon onto axis (ax, ay). Returns (min, max) scalar interval."""
    v0 = ax*poly[0][0] + ay*poly[0][1]
    mn = mx = v0
    for (x, y) in poly[1:]:
        v = ax*x + ay*y
        if v < mn: mn = v
        if v > mx: mx = v
    return mn, mx


def poly_intersect_sat(polyA, polyB):
    """
    Separating Axis Theorem for convex polygons.
    Returns True if polygons overlap (touching edges count as separated).
    """
    for poly in (polyA, polyB):
        for i in range(len(poly)):
            x1, y1 = poly[i]
            x2, y2 = poly[(i+1) % len(poly)]
            # edge normal is a separating axis candidate
            ax, ay = -(y2 - y1), (x2 - x1)
            mnA, mxA = _project(polyA, ax, ay)
            mnB, mxB = _project(polyB, ax, ay)
            if mxA <= mnB or mxB <= mnA:
                return False
    return True


def vehicle_footprint(state, geometry):
    """Rotated body rectangle centered on the vehicle position."""
    return oriented_box(state.position, geometry.length, geometry.width, state.heading)


def vehicle_bounds(state, geometry) -> Rect:
    """Axis-aligned extent of the rotated body, re-derived for the current pose."""
    return bounding_rect(vehicle_footprint(state, geometry))


def first_collision(footprint, obstacles):
    """
    footprint: a Rect (axis-aligned test) or a polygon (SAT test).
    Returns the index of the first obstacle hit, or None if clear.
    """
    for j, obs in enumerate(obstacles):
        rect = getattr(obs, "rect", obs)
        if isinstance(footprint, Rect):
            hit = rects_overlap(footprint, rect)
        else:
            hit = poly_intersect_sat(footprint, rect.corners())
        if hit:
            return j
    return None


def is_colliding(footprint, obstacles) -> bool:
    return first_collision(footprint, obstacles) is not None


def footprint_for_mode(state, geometry, mode=AABB):
    if mode == AABB:
        return vehicle_bounds(state, geometry)
    if mode == ORIENTED:
        return vehicle_footprint(state, geometry)
    raise ValueError(f"unknown collision mode {mode!r}; expected one of {COLLISION_MODES}")
