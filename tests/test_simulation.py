import math
import random

import pytest

from geom.polygons import Rect
from sim import commands as cmd
from sim.config import SimConfig
from sim.simulation import Simulation


@pytest.fixture
def sim():
    return Simulation()


def drive(sim, dt, n):
    return [sim.tick(dt) for _ in range(n)]


def test_initial_state_at_origin(sim):
    assert sim.state.position == (0.0, 0.0)
    assert sim.state.speed == 0.0
    assert sim.speed_display == "0.0"


def test_tick_straight_line(sim):
    sim.on_set_speed(2.0)
    result = sim.tick(0.5)
    assert result.state.x == 1.0 and result.state.y == 0.0
    assert not result.collided and not result.out_of_bounds
    assert sim.time == 0.5


def test_tick_result_is_a_snapshot(sim):
    sim.on_set_speed(2.0)
    result = sim.tick(0.5)
    sim.tick(0.5)
    assert result.state.x == 1.0


def test_trace_only_grows_while_moving(sim):
    sim.tick(0.1)
    assert sim.trace == ()
    sim.on_set_speed(1.0)
    drive(sim, 0.1, 3)
    assert len(sim.trace) == 3


def test_collision_stops_vehicle(sim):
    sim.on_place_obstacle((5.0, 0.0))          # occupies x in [4, 6]
    sim.on_set_speed(5.0)
    results = drive(sim, 0.1, 10)
    hits = [r.collided for r in results]
    assert hits.index(True) == 4                # front reaches x = 4.5 on the fifth frame
    assert sim.state.speed == 0.0
    assert sim.speed_display == "0.0"
    x_at_stop = results[4].state.x
    assert sim.state.x == pytest.approx(x_at_stop)


def test_leaving_bounds_stops_vehicle():
    sim = Simulation(SimConfig(bounds=Rect(-10, -10, 10, 10)))
    sim.on_place_vehicle((9.9, 0.0))
    sim.on_set_speed(5.0)
    result = sim.tick(0.1)
    assert result.out_of_bounds
    assert sim.state.speed == 0.0


@pytest.mark.parametrize("dt", [float("nan"), -0.1, float("inf"), None])
def test_invalid_frame_time_ignored(sim, dt):
    sim.on_set_speed(2.0)
    result = sim.tick(dt)
    assert result.state.x == 0.0
    assert sim.time == 0.0


def test_set_speed_clamps_and_refuses_non_finite(sim):
    sim.on_set_speed(12.0)
    assert sim.state.speed == 5.0
    assert sim.speed_display == "5.0"
    assert not sim.on_set_speed(float("nan"))
    assert not sim.on_set_speed("fast")
    assert sim.state.speed == 5.0


def test_geometry_change_validated(sim):
    assert not sim.on_set_geometry(0.0, 2.0)
    assert sim.geometry.length == 4.0
    assert sim.on_set_geometry(6.0, 3.0)
    assert (sim.geometry.length, sim.geometry.width) == (6.0, 3.0)
    assert sim.model.geometry is sim.geometry


def test_longer_car_collides_sooner(sim):
    sim.on_place_obstacle((4.5, 0.0))          # x in [3.5, 5.5]
    assert not sim.check_collisions()
    sim.on_set_geometry(8.0, 2.0)
    assert sim.check_collisions()


def test_key_commands_through_handle(sim):
    sim.handle(cmd.SteerLeft())
    assert sim.state.steering_angle == pytest.approx(math.radians(2))
    sim.handle(cmd.SteerRight())
    sim.handle(cmd.SteerRight())
    assert sim.state.steering_angle == pytest.approx(-math.radians(2))
    sim.handle(cmd.Accelerate())
    assert sim.state.speed == pytest.approx(0.1)
    assert sim.speed_display == "0.1"
    sim.handle(cmd.Decelerate())
    sim.handle(cmd.Decelerate())
    assert sim.state.speed == pytest.approx(-0.1)
    sim.handle(cmd.Rotate90())
    assert sim.state.heading == pytest.approx(math.pi / 2)
    sim.handle(cmd.Rotate90(clockwise=True))
    assert sim.state.heading == pytest.approx(0.0)
    sim.handle(cmd.SetSpeed(3.0))
    assert sim.state.speed == 3.0
    sim.handle(cmd.SetGeometry(5.0, 2.5))
    assert sim.geometry.length == 5.0


def test_unknown_command_rejected(sim):
    with pytest.raises(TypeError):
        sim.handle("accelerate")


def test_random_commands_keep_controls_bounded(sim):
    rng = random.Random(3)
    pool = [cmd.SteerLeft(), cmd.SteerRight(), cmd.Accelerate(), cmd.Decelerate()]
    g = sim.geometry
    for _ in range(1000):
        if rng.random() < 0.1:
            sim.handle(cmd.SetSpeed(rng.uniform(-50, 50)))
        else:
            sim.handle(rng.choice(pool))
        sim.tick(0.02)
        assert abs(sim.state.steering_angle) <= g.max_steering_angle
        assert abs(sim.state.speed) <= g.max_speed


def test_place_vehicle_keeps_speed(sim):
    sim.on_set_speed(2.0)
    sim.on_steer_left()
    sim.on_rotate_90()
    drive(sim, 0.1, 3)
    sim.handle(cmd.PlaceVehicle((7.0, -3.0)))
    assert sim.state.position == (7.0, -3.0)
    assert sim.state.heading == 0.0 and sim.state.steering_angle == 0.0
    assert sim.state.speed == 2.0
    assert sim.trace == ()


def test_point_commands_without_point_are_ignored(sim):
    assert not sim.on_place_vehicle(None)
    assert not sim.on_place_obstacle(None)
    assert not sim.on_begin_line(None)
    assert sim.obstacles == ()


@pytest.mark.parametrize("point", [
    (float("nan"), 0.0),
    (0.0, float("inf")),
    (float("-inf"), 1.0),
    ("a", 1.0),
    (1.0,),
])
def test_point_commands_refuse_non_finite_points(sim, point):
    sim.on_set_speed(2.0)
    assert not sim.on_place_vehicle(point)
    assert not sim.on_place_obstacle(point)
    assert not sim.on_begin_line(point)
    assert sim.obstacles == ()
    assert not sim.drawing_line
    result = sim.tick(0.1)
    assert result.state.x == pytest.approx(0.2)
    assert math.isfinite(result.state.y)


def test_line_drag_ignores_non_finite_points(sim):
    sim.on_begin_line((0.0, 0.0))
    sim.on_update_line_drag((3.0, 0.0))
    assert sim.on_update_line_drag((float("nan"), 1.0)) is None
    assert sim.line_preview[1] == (3.0, 0.0)
    line = sim.on_end_line((float("inf"), 0.0))
    assert line.end == (3.0, 0.0)
    assert not sim.drawing_line


def test_trace_not_recorded_without_elapsed_time(sim):
    sim.on_set_speed(1.0)
    sim.tick(0.0)
    sim.tick(0.0)
    assert sim.trace == ()
    sim.tick(0.1)
    assert len(sim.trace) == 1


def test_line_drag_with_snap(sim):
    sim.handle(cmd.BeginLine((0.0, 0.0)))
    assert sim.drawing_line
    sim.handle(cmd.UpdateLineDrag((10.0, 4.0), snap=True))
    start, end = sim.line_preview
    assert end == pytest.approx((math.sqrt(116), 0.0))
    line = sim.handle(cmd.EndLine((10.0, 4.0), snap=True))
    assert line.end == pytest.approx((math.sqrt(116), 0.0))
    assert sim.lines == (line,)
    assert sim.line_preview is None


def test_line_end_without_snap_uses_raw_point(sim):
    sim.on_begin_line((1.0, 1.0))
    sim.on_update_line_drag((5.0, 2.0), snap=True)
    line = sim.on_end_line((5.0, 2.0))
    assert line.end == (5.0, 2.0)


def test_line_end_without_begin_is_ignored(sim):
    assert sim.on_end_line((1.0, 1.0)) is None
    assert sim.on_update_line_drag((1.0, 1.0)) is None
    assert sim.lines == ()


def test_line_end_off_ground_uses_last_preview(sim):
    sim.on_begin_line((0.0, 0.0))
    sim.on_update_line_drag((3.0, 0.0))
    line = sim.on_end_line(None)
    assert line.end == (3.0, 0.0)


def test_clear_lines_keeps_obstacles(sim):
    sim.on_place_obstacle((10.0, 10.0))
    sim.on_begin_line((0.0, 0.0))
    sim.on_end_line((1.0, 1.0))
    sim.handle(cmd.ClearLines())
    assert sim.lines == ()
    assert len(sim.obstacles) == 1


def test_reset_scenario(sim):
    sim.on_place_obstacle((20.0, 20.0))
    sim.on_place_obstacle((-20.0, 20.0))
    sim.on_begin_line((0.0, 5.0))
    sim.on_end_line((10.0, 5.0))
    sim.on_set_speed(3.0)
    sim.on_steer_left()
    drive(sim, 0.1, 10)
    sim.on_rotate_90()
    sim.handle(cmd.Reset())
    st = sim.state
    assert (st.speed, st.steering_angle, st.heading) == (0.0, 0.0, 0.0)
    assert st.position == (0.0, 0.0)
    assert sim.obstacles == () and sim.lines == () and sim.trace == ()
    assert sim.speed_display == "0.0"
    assert sim.time == 0.0


def test_reset_returns_to_configured_origin():
    sim = Simulation(SimConfig(origin=(3.0, 4.0)))
    sim.on_place_vehicle((0.0, 0.0))
    sim.on_reset()
    assert sim.state.position == (3.0, 4.0)


def test_reset_keeps_state_object(sim):
    state = sim.state
    sim.on_reset()
    assert sim.state is state


def test_obstacle_cap_from_config():
    sim = Simulation(SimConfig(max_obstacles=2))
    for i in range(4):
        sim.on_place_obstacle((10.0 * i + 10, 0.0))
    assert len(sim.obstacles) == 2


def test_oriented_mode_allows_near_corner_pass():
    aabb = Simulation()
    oriented = Simulation(SimConfig(collision_mode="oriented"))
    for s in (aabb, oriented):
        s.state.heading = math.pi / 4
        s.scene.add_obstacle(Rect(1.6, 1.6, 2.6, 2.6))
    assert aabb.check_collisions()
    assert not oriented.check_collisions()


@pytest.mark.parametrize("kwargs", [
    {"collision_mode": "circle"},
    {"obstacle_size": 0.0},
    {"speed_increment": float("nan")},
    {"max_obstacles": -1},
])
def test_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        SimConfig(**kwargs)
