# sim/config.py
import math
from dataclasses import dataclass, field

from vehicles.base import VehicleGeometry
from vehicles.controls import STEERING_INCREMENT_RAD, SPEED_INCREMENT
from geom.collision import AABB, COLLISION_MODES
from geom.polygons import Rect
from geom.projection import SNAP_INCREMENT_RAD


# ========================
# Scene defaults
# ========================

OBSTACLE_SIZE_M = 2.0                # square obstacles centered on the click
WORLD_ORIGIN = (0.0, 0.0)            # reset position


@dataclass
class SimConfig:
    geometry: VehicleGeometry = field(default_factory=VehicleGeometry)
    steering_increment: float = STEERING_INCREMENT_RAD
    speed_increment: float = SPEED_INCREMENT
    obstacle_size: float = OBSTACLE_SIZE_M
    origin: tuple = WORLD_ORIGIN
    bounds: Rect = None              # None = unbounded ground plane
    collision_mode: str = AABB
    max_obstacles: int = None
    snap_increment: float = SNAP_INCREMENT_RAD

    def __post_init__(self):
        for name in ("steering_increment", "speed_increment", "obstacle_size", "snap_increment"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")
        if self.collision_mode not in COLLISION_MODES:
            raise ValueError(
                f"collision_mode must be one of {COLLISION_MODES}, got {self.collision_mode!r}"
            )
        if self.max_obstacles is not None and self.max_obstacles < 0:
            raise ValueError("max_obstacles must be >= 0")
