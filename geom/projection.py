# geom/projection.py
"""
Pointer-to-world mapping.

Screen points are window/client pixels with y growing downward. World points
are (x, y) on the ground plane z = 0.
"""
import math
import numpy as np

GROUND_NORMAL = np.array([0.0, 0.0, 1.0])
SNAP_INCREMENT_RAD = math.pi / 4   # 45 degrees
_PARALLEL_EPS = 1e-9


class CanvasMapper:
    """Flat canvas: world coordinates are canvas-local pixels."""

    def __init__(self, origin=(0.0, 0.0)):
        self.origin = origin

    def screen_to_world(self, screen_point):
        sx, sy = screen_point
        ox, oy = self.origin
        return (sx - ox, sy - oy)


class PerspectiveCamera:
    """
    Pinhole camera looking at the ground plane.
    position, target: 3D points (z up)
    fov_deg:          vertical field of view
    viewport:         (width, height) in pixels
    """

    def __init__(self, position=(0.0, -20.0, 10.0), target=(0.0, 0.0, 0.0),
                 fov_deg=75.0, viewport=(800, 600), up=(0.0, 0.0, 1.0)):
        self.position = np.asarray(position, dtype=float)
        self.target = np.asarray(target, dtype=float)
        self.fov_deg = float(fov_deg)
        self.viewport = viewport

        forward = self.target - self.position
        norm = np.linalg.norm(forward)
        if norm == 0.0:
            raise ValueError("camera position and target coincide")
        self.forward = forward / norm
        right = np.cross(self.forward, np.asarray(up, dtype=float))
        if np.linalg.norm(right) < _PARALLEL_EPS:
            raise ValueError("camera up vector is parallel to the viewing direction")
        self.right = right / np.linalg.norm(right)
        self.up = np.cross(self.right, self.forward)

    def resize(self, width, height):
        self.viewport = (width, height)

    def ndc(self, screen_point):
        w, h = self.viewport
        sx, sy = screen_point
        return (sx / w) * 2.0 - 1.0, -(sy / h) * 2.0 + 1.0

    def ray(self, screen_point):
        """Return (origin, unit direction) of the ray through a screen point."""
        nx, ny = self.ndc(screen_point)
        w, h = self.viewport
        half_h = math.tan(math.radians(self.fov_deg) / 2.0)
        half_w = half_h * (w / h)
        d = self.forward + nx * half_w * self.right + ny * half_h * self.up
        return self.position.copy(), d / np.linalg.norm(d)

    def screen_to_world(self, screen_point):
        """Ground-plane hit as (x, y), or None if the ray never reaches the ground."""
        origin, direction = self.ray(screen_point)
        return intersect_ground(origin, direction)


def intersect_ground(origin, direction, normal=GROUND_NORMAL, offset=0.0):
    """Intersect a ray with the plane n.p = offset; None when parallel or behind."""
    denom = float(np.dot(normal, direction))
    if abs(denom) < _PARALLEL_EPS:
        return None
    t = (offset - float(np.dot(normal, origin))) / denom
    if t < 0.0:
        return None
    hit = origin + t * direction
    return (float(hit[0]), float(hit[1]))


def snap_to_angle(start, point, increment=SNAP_INCREMENT_RAD):
    """Keep the drag length, round its direction to the nearest multiple of increment."""
    x0, y0 = start
    dx, dy = point[0] - x0, point[1] - y0
    length = math.hypot(dx, dy)
    angle = math.atan2(dy, dx)
    snapped = round(angle / increment) * increment
    return (x0 + length * math.cos(snapped), y0 + length * math.sin(snapped))
