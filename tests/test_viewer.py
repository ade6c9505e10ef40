import math
from types import SimpleNamespace

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pytest

from sim.simulation import Simulation
from sim.viewer import Viewer, release_default_keymaps


@pytest.fixture
def viewer():
    ticks = iter([0.0, 0.05, 0.10, 0.15, 0.20])
    v = Viewer(Simulation(), fig=plt.figure(), clock=lambda: next(ticks))
    yield v
    plt.close(v.fig)


def mouse(viewer, x, y, key=None, inside=True):
    return SimpleNamespace(key=key, xdata=x, ydata=y, inaxes=viewer.ax if inside else None)


def test_arrow_keys_drive_the_car(viewer):
    viewer.on_key(SimpleNamespace(key="left"))
    assert viewer.sim.state.steering_angle == pytest.approx(math.radians(2))
    viewer.on_key(SimpleNamespace(key="up"))
    assert viewer.speed_slider.val == pytest.approx(0.1)
    viewer.on_key(SimpleNamespace(key="q"))


def test_slider_sets_speed(viewer):
    viewer.speed_slider.set_val(2.0)
    assert viewer.sim.state.speed == 2.0


def test_click_variants(viewer):
    viewer.on_press(mouse(viewer, 3.0, 4.0))
    assert viewer.sim.state.position == (3.0, 4.0)
    viewer.on_press(mouse(viewer, 10.0, 10.0, key="shift"))
    assert len(viewer.sim.obstacles) == 1
    viewer.on_press(mouse(viewer, 50.0, 50.0, inside=False))
    assert viewer.sim.state.position == (3.0, 4.0)


def test_alt_drag_draws_snapped_line(viewer):
    viewer.on_press(mouse(viewer, 0.0, 0.0, key="alt"))
    viewer.on_move(mouse(viewer, 10.0, 4.0, key="shift"))
    assert viewer.sim.line_preview[1] == pytest.approx((math.sqrt(116), 0.0))
    viewer.on_release(mouse(viewer, 10.0, 4.0, key="shift"))
    assert len(viewer.sim.lines) == 1
    viewer.on_move(mouse(viewer, 1.0, 1.0))
    assert viewer.sim.line_preview is None


def test_release_outside_axes_finishes_line(viewer):
    viewer.on_press(mouse(viewer, 0.0, 0.0, key="alt"))
    viewer.on_move(mouse(viewer, 6.0, 2.0))
    viewer.on_release(mouse(viewer, 90.0, 90.0, inside=False))
    assert not viewer.sim.drawing_line
    assert viewer.sim.lines[0].end == (6.0, 2.0)
    viewer.on_move(mouse(viewer, 1.0, 1.0))
    assert viewer.sim.line_preview is None


def test_step_feeds_measured_time(viewer):
    viewer.sim.on_set_speed(2.0)
    first = viewer.step()
    assert first.state.x == 0.0
    viewer.step()
    assert viewer.sim.state.x == pytest.approx(0.1)
    assert viewer.speed_slider.val == pytest.approx(2.0)


def test_collision_resets_slider(viewer):
    viewer.sim.on_place_obstacle((3.1, 0.0))    # near face at x = 2.1
    viewer.speed_slider.set_val(4.0)
    viewer.step()
    viewer.step()
    assert viewer.sim.state.speed == 0.0
    assert viewer.speed_slider.val == 0.0


def test_release_default_keymaps():
    with plt.rc_context():
        release_default_keymaps()
        assert "left" not in plt.rcParams["keymap.back"]
        assert "c" not in plt.rcParams["keymap.back"]
        assert "r" not in plt.rcParams["keymap.home"]
