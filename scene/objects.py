"""
objects.py
Static scene content for the car sandbox.

Holds the obstacles the car can hit, the reference line segments drawn as
visual guides, and the trace of positions the car has driven through.
Collections are plain lists: order carries no meaning, duplicates are kept.
"""
import logging
from dataclasses import dataclass

import numpy as np

from geom.polygons import Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Obstacle:
    rect: Rect

    @classmethod
    def centered(cls, point, size):
        return cls(Rect.from_center(point, size, size))


@dataclass(frozen=True)
class ReferenceLine:
    start: tuple
    end: tuple


class SceneObjects:
    """Obstacles, reference lines and the driven trace."""

    def __init__(self, max_obstacles: int = None):
        self.max_obstacles = max_obstacles
        self.obstacles = []
        self.lines = []
        self.trace = []

    def add_obstacle(self, obstacle):
        """Append an obstacle; returns False when the optional cap is reached."""
        if not isinstance(obstacle, Obstacle):
            obstacle = Obstacle(obstacle)
        if self.max_obstacles is not None and len(self.obstacles) >= self.max_obstacles:
            logger.warning("Obstacle limit (%d) reached, placement ignored", self.max_obstacles)
            return False
        self.obstacles.append(obstacle)
        logger.debug("Obstacle added at %s (total %d)", obstacle.rect.center, len(self.obstacles))
        return True

    def add_reference_line(self, p0, p1):
        line = ReferenceLine(tuple(p0), tuple(p1))
        self.lines.append(line)
        logger.debug("Reference line %s -> %s", line.start, line.end)
        return line

    def record(self, point):
        self.trace.append(tuple(point))

    def trace_array(self):
        """Trace as an (N, 2) array, empty (0, 2) when nothing was driven."""
        if not self.trace:
            return np.empty((0, 2))
        return np.asarray(self.trace, dtype=float)

    def clear_trace(self):
        self.trace = []

    def clear_lines(self):
        self.lines = []

    def clear_all(self):
        self.obstacles = []
        self.lines = []
        self.trace = []
