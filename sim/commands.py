# sim/commands.py
"""
One small dataclass per control action, plus the tables that translate raw
key and pointer events into them.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class SteerLeft:
    pass


@dataclass(frozen=True)
class SteerRight:
    pass


@dataclass(frozen=True)
class Accelerate:
    pass


@dataclass(frozen=True)
class Decelerate:
    pass


@dataclass(frozen=True)
class SetSpeed:
    value: float


@dataclass(frozen=True)
class Rotate90:
    clockwise: bool = False


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SetGeometry:
    length: float
    width: float


@dataclass(frozen=True)
class PlaceVehicle:
    point: tuple


@dataclass(frozen=True)
class PlaceObstacle:
    point: tuple


@dataclass(frozen=True)
class BeginLine:
    point: tuple


@dataclass(frozen=True)
class UpdateLineDrag:
    point: tuple
    snap: bool = False


@dataclass(frozen=True)
class EndLine:
    point: tuple
    snap: bool = False


@dataclass(frozen=True)
class ClearLines:
    pass


KEY_BINDINGS = {
    "left": SteerLeft(),
    "right": SteerRight(),
    "up": Accelerate(),
    "down": Decelerate(),
    "r": Rotate90(),
    "R": Rotate90(clockwise=True),
    "escape": Reset(),
    "c": ClearLines(),
}

# browser-style key names map onto the same commands
KEY_BINDINGS.update({
    "ArrowLeft": KEY_BINDINGS["left"],
    "ArrowRight": KEY_BINDINGS["right"],
    "ArrowUp": KEY_BINDINGS["up"],
    "ArrowDown": KEY_BINDINGS["down"],
    "Escape": KEY_BINDINGS["escape"],
})


def command_for_key(key):
    """Command bound to a key name, or None for unbound keys."""
    if key is None:
        return None
    return KEY_BINDINGS.get(key)


def command_for_pointer(kind, point, alt=False, shift=False, drawing=False):
    """
    Translate a pointer event into a command.
    kind:    "press", "move" or "release"
    point:   world-space point (already mapped)
    drawing: True while a line drag is in progress
    Press: alt starts a line, shift drops an obstacle, plain click moves the car.
    Move/release only matter during a line drag; shift snaps the angle.
    A release off the ground still ends the drag (at the last preview point).
    """
    if kind == "release" and drawing:
        return EndLine(point, snap=shift)
    if point is None:
        return None
    if kind == "press":
        if alt:
            return BeginLine(point)
        if shift:
            return PlaceObstacle(point)
        return PlaceVehicle(point)
    if not drawing:
        return None
    if kind == "move":
        return UpdateLineDrag(point, snap=shift)
    raise ValueError(f"unknown pointer event kind {kind!r}")
