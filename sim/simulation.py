# sim/simulation.py
"""
Simulation context for the car sandbox.

Owns the vehicle state, its geometry and the scene objects. The caller owns
the loop: it feeds measured frame times into tick() and forwards input as
commands through handle() (or the matching on_* methods). Everything read
back (state, obstacles, lines, trace) is for display only.
"""
import logging
import math
from dataclasses import replace
from typing import NamedTuple

from vehicles.base import VehicleState
from vehicles.bicycle import KinematicBicycle
from vehicles import controls
from geom.collision import footprint_for_mode, first_collision
from geom.projection import snap_to_angle
from scene.objects import SceneObjects, Obstacle
from sim import commands as cmd
from sim.config import SimConfig

logger = logging.getLogger(__name__)


class TickResult(NamedTuple):
    state: VehicleState
    collided: bool
    out_of_bounds: bool


def _is_finite_number(value):
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _is_finite_point(point):
    """True for an (x, y) pair of finite numbers."""
    try:
        x, y = point
    except (TypeError, ValueError):
        return False
    return _is_finite_number(x) and _is_finite_number(y)


class Simulation:
    def __init__(self, config: SimConfig = None):
        self.config = config or SimConfig()
        self.geometry = replace(self.config.geometry)
        self.model = KinematicBicycle(self.geometry)
        ox, oy = self.config.origin
        self.state = VehicleState(x=ox, y=oy)
        self.scene = SceneObjects(max_obstacles=self.config.max_obstacles)
        self.time = 0.0
        self.speed_display = "0.0"
        self._line_start = None
        self._line_end = None

        self._handlers = {
            cmd.SteerLeft: lambda c: self.on_steer_left(),
            cmd.SteerRight: lambda c: self.on_steer_right(),
            cmd.Accelerate: lambda c: self.on_accelerate(),
            cmd.Decelerate: lambda c: self.on_decelerate(),
            cmd.SetSpeed: lambda c: self.on_set_speed(c.value),
            cmd.Rotate90: lambda c: self.on_rotate_90(c.clockwise),
            cmd.Reset: lambda c: self.on_reset(),
            cmd.SetGeometry: lambda c: self.on_set_geometry(c.length, c.width),
            cmd.PlaceVehicle: lambda c: self.on_place_vehicle(c.point),
            cmd.PlaceObstacle: lambda c: self.on_place_obstacle(c.point),
            cmd.BeginLine: lambda c: self.on_begin_line(c.point),
            cmd.UpdateLineDrag: lambda c: self.on_update_line_drag(c.point, c.snap),
            cmd.EndLine: lambda c: self.on_end_line(c.point, c.snap),
            cmd.ClearLines: lambda c: self.on_clear_lines(),
        }

    # ------------------------------------------------------------------
    # read access for renderers
    # ------------------------------------------------------------------

    @property
    def obstacles(self):
        return tuple(self.scene.obstacles)

    @property
    def lines(self):
        return tuple(self.scene.lines)

    @property
    def trace(self):
        return tuple(self.scene.trace)

    @property
    def drawing_line(self):
        return self._line_start is not None

    @property
    def line_preview(self):
        """(start, current end) of the line being dragged, or None."""
        if self._line_start is None:
            return None
        return self._line_start, self._line_end

    def footprint(self):
        return footprint_for_mode(self.state, self.geometry, self.config.collision_mode)

    # ------------------------------------------------------------------
    # per-frame update
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> TickResult:
        """Advance the car by dt seconds, then stop it on a boundary or obstacle hit."""
        if not _is_finite_number(dt) or dt < 0:
            logger.warning("Ignoring invalid frame time %r", dt)
            return TickResult(replace(self.state), False, False)

        nxt = self.model.advance(self.state, dt)
        self.state.x, self.state.y, self.state.heading = nxt.x, nxt.y, nxt.heading
        self.time += dt
        if self.state.speed != 0 and dt > 0:
            self.scene.record(self.state.position)

        out_of_bounds = False
        bounds = self.config.bounds
        if bounds is not None and not bounds.contains(self.state.position):
            out_of_bounds = True
            self._stop("left the world bounds")

        collided = self.check_collisions()
        return TickResult(replace(self.state), collided, out_of_bounds)

    def check_collisions(self) -> bool:
        hit = first_collision(self.footprint(), self.scene.obstacles)
        if hit is None:
            return False
        self._stop(f"hit obstacle {hit}")
        return True

    def _stop(self, reason):
        if self.state.speed != 0:
            logger.info("Vehicle stopped at (%.2f, %.2f): %s", self.state.x, self.state.y, reason)
        self._set_speed(0.0)

    def _set_speed(self, value):
        controls.set_speed(self.state, self.geometry, value)
        self.speed_display = f"{self.state.speed:.1f}"
        return self.state.speed

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    def handle(self, command):
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"unsupported command: {command!r}")
        logger.debug("Handling %s", command)
        return handler(command)

    def on_steer_left(self):
        return controls.steer(self.state, self.geometry, self.config.steering_increment)

    def on_steer_right(self):
        return controls.steer(self.state, self.geometry, -self.config.steering_increment)

    def on_accelerate(self):
        return self._set_speed(self.state.speed + self.config.speed_increment)

    def on_decelerate(self):
        return self._set_speed(self.state.speed - self.config.speed_increment)

    def on_set_speed(self, value):
        if not _is_finite_number(value):
            logger.warning("Refusing non-finite speed %r", value)
            return False
        self._set_speed(value)
        return True

    def on_rotate_90(self, clockwise=False):
        return controls.rotate_quarter_turn(self.state, clockwise)

    def on_reset(self):
        ox, oy = self.config.origin
        self.state.x, self.state.y = ox, oy
        self.state.heading = 0.0
        self.state.steering_angle = 0.0
        self._set_speed(0.0)
        self.scene.clear_all()
        self._line_start = self._line_end = None
        self.time = 0.0
        logger.info("Simulation reset")

    def on_set_geometry(self, length, width, wheelbase=None):
        """Replace body dimensions; returns False (and changes nothing) on bad values."""
        try:
            geometry = replace(
                self.geometry,
                length=length,
                width=width,
                wheelbase=self.geometry.wheelbase if wheelbase is None else wheelbase,
            )
        except ValueError as e:
            logger.warning("Refusing geometry change: %s", e)
            return False
        self.geometry = geometry
        self.model.geometry = geometry
        controls.enforce_limits(self.state, geometry)
        logger.debug("Geometry set to %.2f x %.2f", geometry.length, geometry.width)
        return True

    def _usable_point(self, point, action):
        """None means the pointer missed the ground; non-finite points are refused."""
        if point is None:
            return False
        if not _is_finite_point(point):
            logger.warning("Refusing %s at non-finite point %r", action, point)
            return False
        return True

    def on_place_vehicle(self, point):
        if not self._usable_point(point, "vehicle placement"):
            return False
        self.state.x, self.state.y = point
        self.state.heading = 0.0
        self.state.steering_angle = 0.0
        self.scene.clear_trace()
        return True

    def on_place_obstacle(self, point):
        if not self._usable_point(point, "obstacle placement"):
            return False
        return self.scene.add_obstacle(Obstacle.centered(point, self.config.obstacle_size))

    def on_begin_line(self, point):
        if not self._usable_point(point, "line start"):
            return False
        self._line_start = tuple(point)
        self._line_end = tuple(point)
        return True

    def _drag_end(self, point, snap):
        if snap:
            return snap_to_angle(self._line_start, point, self.config.snap_increment)
        return tuple(point)

    def on_update_line_drag(self, point, snap=False):
        if self._line_start is None or not self._usable_point(point, "line drag"):
            return None
        self._line_end = self._drag_end(point, snap)
        return self._line_end

    def on_end_line(self, point, snap=False):
        """
        Finalize the dragged line. Without a started drag this does nothing.
        A missing or non-finite end point finalizes at the last preview end.
        """
        if self._line_start is None:
            logger.debug("Line end without a started line, ignored")
            return None
        if self._usable_point(point, "line end"):
            end = self._drag_end(point, snap)
        else:
            end = self._line_end
        line = self.scene.add_reference_line(self._line_start, end)
        self._line_start = self._line_end = None
        return line

    def on_clear_lines(self):
        self.scene.clear_lines()
