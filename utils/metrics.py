# utils/metrics.py
#!/usr/bin/env python3
import argparse, csv, math
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def load_log(csv_path):
    """Read a drive_log.csv into column lists of floats."""
    cols = {}
    with open(csv_path, newline='') as f:
        r = csv.DictReader(f)
        for row in r:
            for k, v in row.items():
                cols.setdefault(k, []).append(float(v))
    if not cols:
        raise ValueError(f"{csv_path}: empty drive log")
    return cols


def summarize(cols):
    """Distance driven, number of stop events, final pose."""
    xs, ys = cols['x'], cols['y']
    distance = sum(math.hypot(xs[i+1] - xs[i], ys[i+1] - ys[i]) for i in range(len(xs) - 1))
    collisions = sum(1 for i in range(1, len(xs))
                     if cols['collided'][i] and not cols['collided'][i-1])
    return {
        'duration_s': cols['t'][-1] - cols['t'][0],
        'distance': distance,
        'collisions': collisions,
        'final_pose': (xs[-1], ys[-1], cols['heading'][-1]),
    }


def plot_log(cols, out):
    t = cols['t']
    fig, axes = plt.subplots(3, 1, sharex=True, figsize=(7, 7))
    axes[0].plot(t, cols['speed'])
    axes[0].set_ylabel('speed [m/s]')
    axes[1].plot(t, [math.degrees(a) for a in cols['steering']])
    axes[1].set_ylabel('steering [deg]')
    axes[2].plot(t, [math.degrees(a) for a in cols['heading']])
    axes[2].set_ylabel('heading [deg]')
    axes[2].set_xlabel('t [s]')
    for i, hit in enumerate(cols['collided']):
        if hit:
            axes[0].axvline(t[i], color='red', linewidth=0.8, alpha=0.5)
    axes[0].set_title('Drive log')
    fig.tight_layout()
    fig.savefig(out)
    plt.close(fig)


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument('csv_path')
    ap.add_argument('--out', default='results/drive_log.png')
    args = ap.parse_args(argv)

    cols = load_log(args.csv_path)
    plot_log(cols, args.out)
    s = summarize(cols)
    print(f"duration {s['duration_s']:.2f} s, distance {s['distance']:.2f} m, "
          f"collisions {s['collisions']}")


if __name__ == '__main__':
    main()
