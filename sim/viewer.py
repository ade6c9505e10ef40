# sim/viewer.py
#!/usr/bin/env python3
"""
Interactive matplotlib window for the car sandbox.

Keys:   arrows steer / change speed, r rotate 90 (R clockwise), c clear lines, escape reset
Mouse:  click places the car, shift+click an obstacle, alt+drag draws a
        reference line (hold shift while dragging to snap to 45 degrees)
"""
import argparse, logging, time

import matplotlib.pyplot as plt
from matplotlib.widgets import Slider

from geom.polygons import Rect
from geom.projection import CanvasMapper
from sim import commands as cmd
from sim.animate import draw_scene, draw_steering_indicator, layout_axes
from sim.config import SimConfig
from sim.simulation import Simulation

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 30
DEFAULT_BOUNDS = (-30.0, -20.0, 30.0, 20.0)


def _modifiers(event):
    """matplotlib reports held modifiers in event.key, e.g. 'shift' or 'alt+shift'."""
    key = (event.key or "").lower()
    return "alt" in key, "shift" in key


class Viewer:
    def __init__(self, sim: Simulation, fig=None, clock=time.perf_counter):
        self.sim = sim
        self.clock = clock
        self.fig = fig if fig is not None else plt.figure(figsize=(9, 7))
        self.ax, self.dial = layout_axes(self.fig)
        slider_ax = self.fig.add_axes([0.82, 0.62, 0.14, 0.03])
        lim = sim.geometry.max_speed
        self.speed_slider = Slider(slider_ax, "v", -lim, lim, valinit=sim.state.speed)
        self.speed_slider.on_changed(self.on_slider)
        # axes data coordinates are already world coordinates
        self.mapper = CanvasMapper()
        self._last = None
        self._syncing = False

        self.fig.canvas.mpl_connect("key_press_event", self.on_key)
        self.fig.canvas.mpl_connect("button_press_event", self.on_press)
        self.fig.canvas.mpl_connect("motion_notify_event", self.on_move)
        self.fig.canvas.mpl_connect("button_release_event", self.on_release)

    def _world_point(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return None
        return self.mapper.screen_to_world((event.xdata, event.ydata))

    def on_key(self, event):
        command = cmd.command_for_key(event.key)
        if command is not None:
            self.sim.handle(command)
            self.sync_slider()

    def on_slider(self, value):
        if not self._syncing:
            self.sim.on_set_speed(value)

    def _pointer(self, kind, event):
        alt, shift = _modifiers(event)
        command = cmd.command_for_pointer(kind, self._world_point(event), alt=alt, shift=shift,
                                          drawing=self.sim.drawing_line)
        if command is not None:
            self.sim.handle(command)

    def on_press(self, event):
        self._pointer("press", event)

    def on_move(self, event):
        self._pointer("move", event)

    def on_release(self, event):
        self._pointer("release", event)

    def sync_slider(self):
        """Mirror the simulated speed on the slider without feeding it back."""
        if self.speed_slider.val != self.sim.state.speed:
            self._syncing = True
            try:
                self.speed_slider.set_val(self.sim.state.speed)
            finally:
                self._syncing = False

    def step(self):
        now = self.clock()
        dt = 0.0 if self._last is None else now - self._last
        self._last = now
        result = self.sim.tick(dt)
        self.sync_slider()
        self.redraw()
        return result

    def redraw(self):
        draw_scene(self.ax, self.sim)
        draw_steering_indicator(self.dial, self.sim.state.steering_angle)
        self.fig.canvas.draw_idle()

    def run(self):
        timer = self.fig.canvas.new_timer(interval=FRAME_INTERVAL_MS)
        timer.add_callback(self.step)
        timer.start()
        plt.show()


def main(argv=None):
    ap = argparse.ArgumentParser(description="Interactive bicycle-model car sandbox")
    ap.add_argument('--bounds', type=float, nargs=4, default=DEFAULT_BOUNDS,
                    metavar=('XMIN', 'YMIN', 'XMAX', 'YMAX'))
    ap.add_argument('--collision_mode', choices=('aabb', 'oriented'), default='aabb')
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    release_default_keymaps()
    sim = Simulation(SimConfig(bounds=Rect(*args.bounds), collision_mode=args.collision_mode))
    Viewer(sim).run()


def release_default_keymaps():
    """Drop matplotlib's navigation shortcuts that collide with the driving keys."""
    for name in ("keymap.back", "keymap.forward", "keymap.home"):
        plt.rcParams[name] = [k for k in plt.rcParams[name] if k not in cmd.KEY_BINDINGS]


if __name__ == '__main__':
    main()
