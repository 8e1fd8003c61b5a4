# blockqsim/plot_results.py
import csv, os
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from collections import defaultdict
from statistics import median

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def load_rows(path):
    rows = []
    with open(path, "r") as f:
        for row in csv.DictReader(f):
            row["channels"] = int(row["channels"])
            row["depth"]    = int(row["depth"])
            row["threads"]  = int(row["threads"])
            row["wall_ms"]  = float(row["wall_ms"])
            rows.append(row)
    return rows

def median_by(rows, key):
    """{key value: median wall_ms} over rows (repeated runs append to the same CSV)."""
    buckets = defaultdict(list)
    for r in rows:
        buckets[r[key]].append(r["wall_ms"])
    return {k: float(median(v)) for k, v in buckets.items()}

def _line_plot(series, xlabel, ylabel, title, out_path, logy=False):
    if not series:
        return None
    plt.figure()
    for label, pts in series.items():
        xs = sorted(pts)
        plt.plot(xs, [pts[x] for x in xs], marker="o", label=label)
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    if logy:
        plt.yscale("log")
    plt.grid(True, which="both", ls="--", lw=0.5)
    if len(series) > 1:
        plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()
    return out_path

def plot_runtime_vs_channels(rows, tag, out_dir):
    return _line_plot({tag: median_by(rows, "channels")}, "Channels (n)", "Runtime (ms)",
                      f"Runtime vs Channels [{tag}]",
                      os.path.join(out_dir, f"runtime_vs_channels_{tag}.png"), logy=True)

def plot_runtime_vs_depth(rows, tag, out_dir):
    return _line_plot({tag: median_by(rows, "depth")}, "Depth (layers)", "Runtime (ms)",
                      f"Runtime vs Depth [{tag}]",
                      os.path.join(out_dir, f"runtime_vs_depth_{tag}.png"))

def plot_speedup_vs_threads(rows, tag, out_dir):
    pts = median_by(rows, "threads")
    t1 = pts.get(1)
    if not t1:
        return None
    return _line_plot({tag: {t: t1 / w for t, w in pts.items()}}, "Threads", "Speedup (T1/Tt)",
                      f"Speedup vs Threads [{tag}]",
                      os.path.join(out_dir, f"speedup_vs_threads_{tag}.png"))

def plot_channels_compare(data_dir):
    """Serial and numba channel scaling on one log-scale figure."""
    series = {}
    for be in ("serial", "numba"):
        path = os.path.join(data_dir, be, "channels.csv")
        if os.path.exists(path):
            series[be] = median_by(load_rows(path), "channels")
    return _line_plot(series, "Channels (n)", "Runtime (ms, log scale)",
                      "Runtime vs Channels (serial vs numba)",
                      os.path.join(data_dir, "runtime_vs_channels_compare.png"), logy=True)

def plot_all(data_dir=DATA_DIR):
    """Plot every data/<backend>/<experiment>.csv next to its CSV. Returns written paths."""
    written = []
    for root, _, files in os.walk(data_dir):
        for f in sorted(files):
            if not f.endswith(".csv"):
                continue
            path = os.path.join(root, f)
            tag = os.path.splitext(f)[0]
            backend = os.path.basename(root)
            rows = load_rows(path)
            print(f"Plotting from {backend}/{tag}.csv ({len(rows)} rows)...")
            if tag.startswith("channels"):
                written.append(plot_runtime_vs_channels(rows, backend, root))
            elif tag.startswith("threads"):
                written.append(plot_speedup_vs_threads(rows, backend, root))
            elif tag.startswith("depth"):
                written.append(plot_runtime_vs_depth(rows, backend, root))
    written.append(plot_channels_compare(data_dir))
    return [p for p in written if p]

def main():
    if not os.path.isdir(DATA_DIR):
        print("No CSV files found under data/")
        return
    written = plot_all(DATA_DIR)
    print(f"\nSaved {len(written)} plots under data/")

if __name__ == "__main__":
    main()
