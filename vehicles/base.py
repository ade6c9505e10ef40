# vehicles/base.py
import math
from dataclasses import dataclass


# ========================
# Default vehicle parameters (meters, radians, m/s)
# ========================

DEFAULT_LENGTH_M = 4.0
DEFAULT_WIDTH_M = 2.0
DEFAULT_WHEELBASE_M = 2.5            # distance between front and rear axle
DEFAULT_MAX_STEERING_RAD = math.pi / 6   # 30 degrees
DEFAULT_MAX_SPEED = 5.0              # either direction


@dataclass
class VehicleState:
    """Pose plus control inputs (meters, radians, m/s).

    heading is never wrapped; sin/cos do not care how far it has wound up.
    """
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0
    steering_angle: float = 0.0
    speed: float = 0.0

    @property
    def position(self):
        return (self.x, self.y)


@dataclass
class VehicleGeometry:
    length: float = DEFAULT_LENGTH_M
    width: float = DEFAULT_WIDTH_M
    wheelbase: float = DEFAULT_WHEELBASE_M
    max_steering_angle: float = DEFAULT_MAX_STEERING_RAD
    max_speed: float = DEFAULT_MAX_SPEED

    def __post_init__(self):
        for name in ("length", "width", "wheelbase", "max_speed"):
            value = getattr(self, name)
            if not is_positive_finite(value):
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")
        # tan() blows up at 90 degrees
        if not (is_positive_finite(self.max_steering_angle) and self.max_steering_angle < math.pi / 2):
            raise ValueError(
                f"max_steering_angle must be in (0, pi/2), got {self.max_steering_angle!r}"
            )


def is_positive_finite(value) -> bool:
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def clamp(value, lo, hi):
    return max(lo, min(hi, value))
