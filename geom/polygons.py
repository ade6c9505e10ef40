# geom/polygons.py
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle given by its min/max corners."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_center(cls, center, width, height):
        cx, cy = center
        hw, hh = width / 2.0, height / 2.0
        return cls(cx - hw, cy - hh, cx + hw, cy + hh)

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    @property
    def center(self):
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def contains(self, point) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def corners(self):
        """Counter-clockwise from the min corner."""
        return [(self.min_x, self.min_y), (self.max_x, self.min_y),
                (self.max_x, self.max_y), (self.min_x, self.max_y)]


def oriented_box(center, length, width, theta):
    """
    Return a 4-vertex polygon for a rectangle centered at 'center' with heading 'theta'.
    Long side = length (front/back), short side = width (left/right).
    Vertex order: front-left, front-right, rear-right, rear-left.
    """
    x, y = center
    L = length / 2.0
    W = width / 2.0
    c, s = math.cos(theta), math.sin(theta)
    # offsets in the body frame, front is +x
    local = [(L, W), (L, -W), (-L, -W), (-L, W)]
    return [(x + c*dx - s*dy, y + s*dx + c*dy) for dx, dy in local]


def bounding_rect(poly) -> Rect:
    xs = [p[0] for p in poly]
    ys = [p[1] for p in poly]
    return Rect(min(xs), min(ys), max(xs), max(ys))
