# qsnake/tools/plot_scores.py
import argparse
import csv
import math
from collections import deque
from pathlib import Path

# Use a non-interactive backend that writes to files
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


def to_float(v):
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan


def rolling_mean(xs, window):
    out, q, s = [], deque(), 0.0
    for x in xs:
        x = float(x)
        q.append(x); s += x
        if len(q) > window:
            s -= q.popleft()
        out.append(s / len(q))
    return out


def load_log(path: Path):
    episodes, scores, eps = [], [], []
    with path.open(newline="") as f:
        for row in csv.DictReader(f):
            episodes.append(to_float(row.get("episode")))
            scores.append(to_float(row.get("epis/final_score")))
            eps.append(to_float(row.get("agent/epsilon")))
    return episodes, scores, eps


def plot(log_path: Path, out_path: Path, window: int = 100) -> Path:
    if not log_path.exists():
        raise FileNotFoundError(f"Could not find {log_path}. Run `qsnake train` first.")
    episodes, scores, eps = load_log(log_path)

    fig, (ax_s, ax_e) = plt.subplots(2, 1, figsize=(9, 6), sharex=True)
    ax_s.plot(episodes, scores, lw=0.6, alpha=0.4, label="score")
    ax_s.plot(episodes, rolling_mean(scores, window), lw=1.5, label=f"mean{window}")
    ax_s.set_ylabel("score"); ax_s.legend(loc="upper left")
    ax_e.plot(episodes, eps, lw=1.0, color="tab:red")
    ax_e.set_ylabel("epsilon"); ax_e.set_xlabel("episode")
    fig.tight_layout()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return out_path


def main(argv=None):
    p = argparse.ArgumentParser(description="Plot a qsnake training log")
    p.add_argument("log", nargs="?", default="runs/qsnake/logs.csv")
    p.add_argument("--out", default=None)
    p.add_argument("--window", type=int, default=100)
    args = p.parse_args(argv)
    log_path = Path(args.log)
    out = Path(args.out) if args.out else log_path.parent / "plots" / "scores.png"
    print(f"wrote {plot(log_path, out, args.window)}")


if __name__ == "__main__":
    main()
