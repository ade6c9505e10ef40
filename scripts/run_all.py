# run_all.py
import subprocess
import sys


def run_drive(script="scripts/demo_drive.csv", outdir="results", gif=False):
    cmd = [sys.executable, "-m", "sim.run_drive", script, "--outdir", outdir, "--png"]
    if gif:
        cmd.append("--gif")
    subprocess.run(cmd, check=True)


def make_plot(outdir="results"):
    subprocess.run([
        sys.executable, "-m", "utils.metrics",
        f"{outdir}/drive_log.csv",
        "--out", f"{outdir}/drive_log.png"
    ], check=True)


if __name__ == "__main__":
    run_drive(gif="--gif" in sys.argv)
    make_plot()
