# vehicles/controls.py
"""
Bounded control mutations applied by discrete input events.

Increments are applied once per event and are not scaled by elapsed time,
so holding a key steers as fast as the keyboard repeats.
"""
import math

from vehicles.base import VehicleState, VehicleGeometry, clamp

STEERING_INCREMENT_RAD = math.radians(2.0)
SPEED_INCREMENT = 0.1


def steer(state: VehicleState, geometry: VehicleGeometry, delta: float):
    """Positive delta steers left (counter-clockwise)."""
    lim = geometry.max_steering_angle
    state.steering_angle = clamp(state.steering_angle + delta, -lim, lim)
    return state.steering_angle


def change_speed(state: VehicleState, geometry: VehicleGeometry, delta: float):
    return set_speed(state, geometry, state.speed + delta)


def set_speed(state: VehicleState, geometry: VehicleGeometry, value: float):
    lim = geometry.max_speed
    state.speed = clamp(value, -lim, lim)
    return state.speed


def rotate_quarter_turn(state: VehicleState, clockwise: bool = False):
    state.heading += -math.pi / 2 if clockwise else math.pi / 2
    return state.heading


def enforce_limits(state: VehicleState, geometry: VehicleGeometry):
    """Re-clamp controls after the limits themselves changed."""
    steer(state, geometry, 0.0)
    set_speed(state, geometry, state.speed)
