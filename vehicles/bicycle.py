# vehicles/bicycle.py
import math
from dataclasses import replace

from vehicles.base import VehicleState, VehicleGeometry


def slip_angle(steering_angle: float, speed: float) -> float:
    """Effective slip angle; flips sign in reverse so steering feels the same both ways."""
    direction = 1.0 if speed >= 0 else -1.0
    return math.atan(math.tan(steering_angle) / 2.0) * direction


class KinematicBicycle:
    def __init__(self, geometry: VehicleGeometry = None):
        self.geometry = geometry or VehicleGeometry()

    @property
    def wheelbase(self):
        return self.geometry.wheelbase

    def advance(self, state: VehicleState, dt: float) -> VehicleState:
        """
        Integrate one step of bicycle kinematics. Does not touch `state`.
        state: pose + controls (speed is signed, negative = reverse)
        dt:    elapsed time [s]
        """
        beta = slip_angle(state.steering_angle, state.speed)
        d = state.speed * dt
        if d == 0.0:
            return replace(state)
        return replace(
            state,
            x=state.x + d * math.cos(state.heading + beta),
            y=state.y + d * math.sin(state.heading + beta),
            heading=state.heading + (d / self.geometry.wheelbase) * math.sin(beta),
        )

    # Convenience: simulate a short rollout with the controls held constant
    def rollout(self, state: VehicleState, dt: float, steps: int):
        poses = [replace(state)]
        for _ in range(steps):
            state = self.advance(state, dt)
            poses.append(state)
        return poses
