# sim/run_drive.py
#!/usr/bin/env python3
"""
Scripted drive: replay a command script against the simulation and log every step.

Script format (CSV, '#' starts a comment):
    place_obstacle,8,0
    set_speed,2
    steer_left,5          # five key presses
    tick,0.05,40          # dt [s], number of frames
    begin_line,0,0
    end_line,10,4,snap
"""
import argparse, csv, logging, math, os

from vehicles.base import VehicleGeometry
from geom.polygons import Rect
from geom.collision import COLLISION_MODES
from sim import commands as cmd
from sim.config import SimConfig
from sim.simulation import Simulation

logger = logging.getLogger(__name__)

LOG_FIELDS = ['t', 'x', 'y', 'heading', 'steering', 'speed', 'collided', 'out_of_bounds']

# script name -> command class; key commands take an optional press count
_KEY_COMMANDS = {
    'steer_left': cmd.SteerLeft,
    'steer_right': cmd.SteerRight,
    'accelerate': cmd.Accelerate,
    'decelerate': cmd.Decelerate,
    'reset': cmd.Reset,
    'clear_lines': cmd.ClearLines,
}
_POINT_COMMANDS = {
    'place_vehicle': cmd.PlaceVehicle,
    'place_obstacle': cmd.PlaceObstacle,
    'begin_line': cmd.BeginLine,
}
_DRAG_COMMANDS = {
    'drag_line': cmd.UpdateLineDrag,
    'end_line': cmd.EndLine,
}


class Tick:
    def __init__(self, dt, repeat=1):
        self.dt = dt
        self.repeat = repeat


def _floats(lineno, args, n):
    if len(args) != n:
        raise ValueError(f"line {lineno}: expected {n} numeric argument(s), got {len(args)}")
    try:
        vals = [float(a) for a in args]
    except ValueError:
        raise ValueError(f"line {lineno}: non-numeric argument in {args}") from None
    if not all(math.isfinite(v) for v in vals):
        raise ValueError(f"line {lineno}: non-finite argument in {args}")
    return vals


def parse_row(lineno, row):
    """Turn one script row into a list of steps (commands or Tick)."""
    name, args = row[0].strip(), [a.strip() for a in row[1:] if a.strip()]
    if name in _KEY_COMMANDS:
        count = int(_floats(lineno, args, 1)[0]) if args else 1
        if count < 1:
            raise ValueError(f"line {lineno}: press count must be at least 1, got {args[0]}")
        return [_KEY_COMMANDS[name]() for _ in range(count)]
    if name in _POINT_COMMANDS:
        x, y = _floats(lineno, args, 2)
        return [_POINT_COMMANDS[name]((x, y))]
    if name in _DRAG_COMMANDS:
        snap = bool(args) and args[-1].lower() == 'snap'
        if snap:
            args = args[:-1]
        x, y = _floats(lineno, args, 2)
        return [_DRAG_COMMANDS[name]((x, y), snap=snap)]
    if name == 'set_speed':
        return [cmd.SetSpeed(*_floats(lineno, args, 1))]
    if name == 'set_geometry':
        return [cmd.SetGeometry(*_floats(lineno, args, 2))]
    if name == 'rotate':
        clockwise = bool(args) and args[0].lower() in ('cw', 'clockwise')
        return [cmd.Rotate90(clockwise=clockwise)]
    if name == 'tick':
        if len(args) not in (1, 2):
            raise ValueError(f"line {lineno}: tick takes dt and an optional frame count")
        vals = _floats(lineno, args, len(args))
        dt, repeat = vals[0], int(vals[1]) if len(vals) > 1 else 1
        if not math.isfinite(dt) or dt < 0 or repeat < 1:
            raise ValueError(f"line {lineno}: bad tick arguments {args}")
        return [Tick(dt, repeat)]
    raise ValueError(f"line {lineno}: unknown command {name!r}")


def parse_script(lines):
    steps = []
    for lineno, row in enumerate(csv.reader(lines), start=1):
        if not row or not row[0].strip() or row[0].lstrip().startswith('#'):
            continue
        # drop trailing comments
        cleaned = []
        for cell in row:
            if '#' in cell:
                cleaned.append(cell.split('#', 1)[0])
                break
            cleaned.append(cell)
        steps.extend(parse_row(lineno, cleaned))
    return steps


def log_row(sim, result=None):
    st = sim.state
    return {
        't': round(sim.time, 6), 'x': st.x, 'y': st.y, 'heading': st.heading,
        'steering': st.steering_angle, 'speed': st.speed,
        'collided': int(bool(result and result.collided)),
        'out_of_bounds': int(bool(result and result.out_of_bounds)),
    }


def run_script(sim, steps, frame_stride=None, render=None):
    """
    Execute parsed steps. Returns (log rows, frames).
    frame_stride: render every k-th tick (needs `render`, a sim -> image callable).
    """
    rows = [log_row(sim)]
    frames = []
    n_ticks = 0
    for step in steps:
        if isinstance(step, Tick):
            for _ in range(step.repeat):
                result = sim.tick(step.dt)
                rows.append(log_row(sim, result))
                if frame_stride and render is not None and n_ticks % frame_stride == 0:
                    frames.append(render(sim))
                n_ticks += 1
        else:
            sim.handle(step)
    return rows, frames


def build_config(args):
    geometry = VehicleGeometry(
        length=args.length,
        width=args.width,
        wheelbase=args.wheelbase,
        max_steering_angle=math.radians(args.max_steer_deg),
        max_speed=args.max_speed,
    )
    bounds = Rect(*args.bounds) if args.bounds else None
    return SimConfig(geometry=geometry, bounds=bounds, collision_mode=args.collision_mode,
                     max_obstacles=args.max_obstacles)


def make_parser():
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument('script', help='CSV command script')
    ap.add_argument('--outdir', type=str, default='results')
    ap.add_argument('--length', type=float, default=VehicleGeometry.length)
    ap.add_argument('--width', type=float, default=VehicleGeometry.width)
    ap.add_argument('--wheelbase', type=float, default=VehicleGeometry.wheelbase)
    ap.add_argument('--max_speed', type=float, default=VehicleGeometry.max_speed)
    ap.add_argument('--max_steer_deg', type=float,
                    default=math.degrees(VehicleGeometry.max_steering_angle))
    ap.add_argument('--bounds', type=float, nargs=4, metavar=('XMIN', 'YMIN', 'XMAX', 'YMAX'))
    ap.add_argument('--collision_mode', choices=COLLISION_MODES, default='aabb')
    ap.add_argument('--max_obstacles', type=int, default=None)
    ap.add_argument('--png', action='store_true', help='save a snapshot of the final scene')
    ap.add_argument('--gif', action='store_true', help='save an animated GIF of the drive')
    ap.add_argument('--stride', type=int, default=5, help='render every k-th frame for --gif')
    ap.add_argument('-v', '--verbose', action='store_true')
    return ap


def main(argv=None):
    ap = make_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
        with open(args.script, newline='') as f:
            steps = parse_script(f)
    except (OSError, ValueError) as e:
        ap.error(str(e))

    os.makedirs(args.outdir, exist_ok=True)
    sim = Simulation(config)

    render = None
    if args.gif or args.png:
        from sim import animate
        render = animate.render_frame
    rows, frames = run_script(sim, steps, frame_stride=max(1, args.stride) if args.gif else None,
                              render=render)

    log_path = os.path.join(args.outdir, 'drive_log.csv')
    with open(log_path, 'w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=LOG_FIELDS)
        w.writeheader()
        w.writerows(rows)
    logger.info("Wrote %d steps to %s", len(rows), log_path)

    if args.png:
        png_path = os.path.join(args.outdir, 'final_scene.png')
        animate.save_png(sim, png_path)
        logger.info("Wrote %s", png_path)
    if args.gif:
        if frames:
            gif_path = os.path.join(args.outdir, 'drive.gif')
            animate.save_gif(frames, gif_path)
            logger.info("Wrote %s (%d frames)", gif_path, len(frames))
        else:
            logger.warning("No ticks in script, GIF skipped")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
