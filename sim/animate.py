# sim/animate.py
import math
import numpy as np
# explicit Agg canvas so off-screen output works under any pyplot backend
from matplotlib.figure import Figure
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.patches import Polygon as MplPoly, Rectangle, Circle
import imageio.v2 as imageio

from geom.polygons import oriented_box
from geom.collision import vehicle_footprint

VIEW_MARGIN_M = 5.0


def scene_extent(sim, margin=VIEW_MARGIN_M):
    """(xmin, xmax, ymin, ymax) covering the configured bounds or everything placed."""
    if sim.config.bounds is not None:
        b = sim.config.bounds
        return b.min_x, b.max_x, b.min_y, b.max_y
    pts = [sim.config.origin] + vehicle_footprint(sim.state, sim.geometry)
    pts += sim.trace
    for line in sim.lines:
        pts += [line.start, line.end]
    if sim.line_preview is not None:
        pts += list(sim.line_preview)
    for obs in sim.obstacles:
        pts += obs.rect.corners()
    xs, ys = zip(*pts)
    return min(xs) - margin, max(xs) + margin, min(ys) - margin, max(ys) + margin


def wheel_polygons(state, geometry):
    """Four wheel rectangles; the front pair is turned by the steering angle."""
    wl, ww = 0.2 * geometry.length, 0.15 * geometry.width
    half_wb = geometry.wheelbase / 2.0
    half_track = geometry.width / 2.0 - ww / 2.0
    c, s = math.cos(state.heading), math.sin(state.heading)
    polys = []
    for ax_off, steered in ((half_wb, True), (-half_wb, False)):
        for side in (half_track, -half_track):
            cx = state.x + c*ax_off - s*side
            cy = state.y + s*ax_off + c*side
            th = state.heading + (state.steering_angle if steered else 0.0)
            polys.append(oriented_box((cx, cy), wl, ww, th))
    return polys


def draw_scene(ax, sim, title=None):
    """Draw trace, reference lines, obstacles and the car onto an axes."""
    ax.clear()
    ax.set_aspect('equal', adjustable='box')
    xmin, xmax, ymin, ymax = scene_extent(sim)
    ax.set_xlim(xmin, xmax)
    ax.set_ylim(ymin, ymax)
    ax.grid(True, linewidth=0.5, color="#dddddd")

    if sim.config.bounds is not None:
        b = sim.config.bounds
        ax.plot([b.min_x, b.max_x, b.max_x, b.min_x, b.min_x],
                [b.min_y, b.min_y, b.max_y, b.max_y, b.min_y],
                color="black", linewidth=1.5)

    # trace
    trace = sim.scene.trace_array()
    if len(trace):
        ax.plot(trace[:, 0], trace[:, 1], color="blue", linewidth=2)

    # reference lines, plus the one being dragged (dashed)
    for line in sim.lines:
        ax.plot([line.start[0], line.end[0]], [line.start[1], line.end[1]],
                color="green", linewidth=2)
    preview = sim.line_preview
    if preview is not None:
        (x0, y0), (x1, y1) = preview
        ax.plot([x0, x1], [y0, y1], color="green", linewidth=2, linestyle="--")

    # obstacles (filled)
    for obs in sim.obstacles:
        r = obs.rect
        ax.add_patch(Rectangle((r.min_x, r.min_y), r.width, r.height, color="gray"))

    # car body and wheels
    st, g = sim.state, sim.geometry
    ax.add_patch(MplPoly(vehicle_footprint(st, g), closed=True, fill=True, color="red"))
    for poly in wheel_polygons(st, g):
        ax.add_patch(MplPoly(poly, closed=True, fill=True, color="black"))

    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    ax.set_title(title or f"t = {sim.time:.2f} s   speed = {sim.speed_display}")


def draw_steering_indicator(ax, steering_angle):
    """Wheel-style dial; the needle points up when driving straight."""
    ax.clear()
    ax.set_aspect('equal')
    ax.set_xlim(-1.2, 1.2)
    ax.set_ylim(-1.2, 1.2)
    ax.axis("off")
    ax.add_patch(Circle((0, 0), 1.0, fill=False, linewidth=2, color="black"))
    # positive steering is a left turn, needle swings counter-clockwise
    ax.plot([0, -math.sin(steering_angle)], [0, math.cos(steering_angle)],
            color="red", linewidth=3)


def layout_axes(fig):
    """Scene axes on the left, steering dial in the top-right corner."""
    ax = fig.add_axes([0.08, 0.08, 0.72, 0.85])
    dial = fig.add_axes([0.82, 0.75, 0.16, 0.16])
    return ax, dial


def _figure(sim):
    fig = Figure(figsize=(7, 6))
    FigureCanvasAgg(fig)
    ax, dial = layout_axes(fig)
    draw_scene(ax, sim)
    draw_steering_indicator(dial, sim.state.steering_angle)
    return fig


def save_png(sim, out_path):
    """Save a static snapshot of the current scene."""
    _figure(sim).savefig(out_path, dpi=150)


def render_frame(sim):
    """Rasterize the current scene to an (H, W, 3) uint8 array."""
    fig = _figure(sim)
    fig.canvas.draw()
    w, h = fig.canvas.get_width_height()
    buf = np.frombuffer(fig.canvas.buffer_rgba(), dtype=np.uint8)
    return buf.reshape(h, w, 4)[..., :3].copy()


def save_gif(frames, out="drive.gif", frame_delay=0.10):
    """Write pre-rendered frames (see render_frame) as an animated GIF."""
    if not frames:
        raise ValueError("no frames to write")
    imageio.mimsave(out, frames, duration=float(frame_delay))
