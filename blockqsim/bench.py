# blockqsim/bench.py
import argparse, csv, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .circuit import Circuit

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def warmup(backend):
    # one small run to JIT-compile the kernel
    _ = Circuit.empty(3).h(0).cx(1, 0).ccx(2, 0, 1).simulate(backend=backend, check_norm=False)

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        pass
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "dtype": "complex128",
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
        "machine": platform.machine(),
    }

HEADER = ["channels","depth","backend","threads","blocks","wall_ms","hostname","commit","dtype","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

ONE_Q = ["x", "y", "z", "h", "s", "t"]

def random_circuit(n, depth, seed=0):
    """Alternating layers of 1-channel gates and shuffled 2/3-channel gates."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0 or n < 2:
            for k in range(n):
                c.gate(ONE_Q[int(rng.integers(0, len(ONE_Q)))], k)
        else:
            perm = [int(k) for k in rng.permutation(n)]
            if n >= 3 and rng.integers(0, 2) == 0:
                c.ccx(*perm[:3])
            else:
                c.gate(["cx", "cz", "swap"][int(rng.integers(0, 3))], perm[0], perm[1])
    return c

def time_run(circ, backend):
    t0 = time.perf_counter()
    _ = circ.simulate(backend=backend, check_norm=False)
    return (time.perf_counter() - t0) * 1e3  # ms

def numba_max_threads():
    from .apply_numba import get_threads, set_threads
    set_threads(os.cpu_count() or 1)
    return get_threads()

def _row(circ, n, depth, backend, threads, wall):
    m = meta_row()
    return {
        "channels": n, "depth": depth, "backend": backend, "threads": threads,
        "blocks": len(circ.blocks), "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"],
    }

# ---------------------------------------------------------------------
# individual experiments

def bench_channels(ns, depth, backend, out_path):
    print(f"[run] Channel scaling → {out_path}")
    new_csv(out_path)
    warmup(backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for n in ns:
        circ = random_circuit(n, depth, seed=42)
        wall = time_run(circ, backend)
        write_row(out_path, _row(circ, n, depth, backend, threads, wall))
        print(f"  n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_threads(n, depth, threads_list, out_path):
    print(f"[run] Thread scaling → {out_path}")
    new_csv(out_path)
    from .apply_numba import set_threads
    circ = random_circuit(n, depth, seed=123)
    pool = numba_max_threads()
    warmup("numba")
    set_threads(1)
    t1 = time_run(circ, "numba")
    print(f"  pool={pool}  T1={t1:.1f} ms")

    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            print(f"  requested t={t} > pool={pool}; using t={tt}")
        set_threads(tt)
        wall = time_run(circ, "numba")
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, _row(circ, n, depth, "numba", tt, wall))
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}×")
    print("✓ done.\n")

def bench_depth(n, depths, backend, out_path):
    print(f"[run] Depth scaling → {out_path}")
    new_csv(out_path)
    warmup(backend)
    threads = 0 if backend == "serial" else numba_max_threads()
    for d in depths:
        circ = random_circuit(n, d, seed=7)
        wall = time_run(circ, backend)
        write_row(out_path, _row(circ, n, d, backend, threads, wall))
        print(f"  depth={d}  wall={wall:.2f} ms")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="blockqsim benchmarks → data/<backend>/*.csv")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_channels = sub.add_parser("channels")
    p_channels.add_argument("--ns", type=str, required=True)
    p_channels.add_argument("--depth", type=int, default=20)
    p_channels.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--depth", type=int, default=40)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8,16")
    # threads always use numba backend
    p_threads.add_argument("--backend", type=str, default="numba", choices=["numba"])

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=10)
    p_depth.add_argument("--depths", type=str, default="10,20,50,100")
    p_depth.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    args = p.parse_args(argv)

    base = backend_dir(args.backend)

    if args.cmd == "channels":
        ns = [int(x) for x in args.ns.split(",")]
        bench_channels(ns, args.depth, args.backend, os.path.join(base, "channels.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.depth, ts, os.path.join(base, "threads.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend, os.path.join(base, "depth.csv"))

if __name__ == "__main__":
    main()
