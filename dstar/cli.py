# dstar/cli.py
from __future__ import annotations
import argparse, csv, logging, os, os.path
from typing import List, Tuple

from .grid import GridWorld
from .planners import dstar_run, repeated_forward, RunStats
from .trace import TraceWriter
from .types import MalformedMap
from .viz import draw_world_png

def format_stats(name: str, s: RunStats) -> str:
    return (f"{name:20s} | reached={s.reached!s:5s} | moves={s.moves:4d} | cost={s.cost:8.1f} | "
            f"replans={s.replans:3d} | expansions={s.expansions:6d} | "
            f"time={s.elapsed_sec*1000:7.1f} ms")

def format_path(s: RunStats) -> str:
    return " -> ".join(f"({r},{c})" for r, c in s.path_taken)

def run_all_algs(world: GridWorld, out_dir: str | None = None, base_tag: str = "run") -> List[Tuple[str, RunStats]]:
    results: List[Tuple[str, RunStats]] = []
    algs = [
        ("dstar", dstar_run),
        ("astar_largerg", lambda w: repeated_forward(w, tie_break="larger_g")),
        ("astar_smallerg", lambda w: repeated_forward(w, tie_break="smaller_g")),
    ]
    for name, alg in algs:
        w = world.clone()
        stats = alg(w)
        results.append((name, stats))
        if out_dir:
            draw_world_png(w, stats.path_taken, stats.expanded_all, os.path.join(out_dir, f"{base_tag}_{name}.png"))
    return results

# -------- subcommands --------

def cmd_gen(args: argparse.Namespace) -> int:
    os.makedirs(args.out, exist_ok=True)
    for i in range(args.count):
        gw = GridWorld.random(rows=args.rows, cols=args.cols, p_blocked=args.p, p_unknown=args.u,
                              seed=(args.seed + i) if args.seed is not None else None)
        path = os.path.join(args.out, f"grid_{i:03d}.txt")
        gw.save(path)
        print("wrote", path)
    return 0

def cmd_run(args: argparse.Namespace) -> int:
    world = GridWorld.load(args.map)
    if args.trace:
        with TraceWriter(args.trace) as trace:
            stats = dstar_run(world, max_steps=args.max_steps, on_step=trace)
        print(f"wrote {trace.steps} trace steps to {args.trace}")
    else:
        stats = dstar_run(world, max_steps=args.max_steps)

    if args.png:
        draw_world_png(world, stats.path_taken, stats.expanded_all, args.png)

    if not stats.reached:
        print(f"No possible path. ({stats.reason})")
        return 1
    print(format_path(stats))
    print(format_stats("dstar", stats))
    return 0

def cmd_bench(args: argparse.Namespace) -> int:
    envs = sorted(p for p in os.listdir(args.envdir) if p.endswith(".txt"))
    if args.out:
        os.makedirs(args.out, exist_ok=True)
    rows = []
    for fname in envs:
        fpath = os.path.join(args.envdir, fname)
        gw = GridWorld.load(fpath)
        base = os.path.splitext(fname)[0]
        results = run_all_algs(gw, out_dir=args.out, base_tag=base)
        for name, st in results:
            print(f"{fname} :: {format_stats(name, st)}")
            rows.append({
                "env": fname,
                "alg": name,
                "reached": st.reached,
                "moves": st.moves,
                "cost": round(st.cost, 4),
                "replans": st.replans,
                "expansions": st.expansions,
                "time_sec": round(st.elapsed_sec, 6),
            })
    if args.csv and rows:
        with open(args.csv, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
        print("wrote CSV:", args.csv)
    return 0

def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="D* path planning on partially known grids")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("gen", help="generate random maps")
    g.add_argument("--count", type=int, default=10)
    g.add_argument("--rows", type=int, default=20)
    g.add_argument("--cols", type=int, default=20)
    g.add_argument("--p", type=float, default=0.20, help="probability of a known blocked cell")
    g.add_argument("--u", type=float, default=0.10, help="probability of a hidden blockage")
    g.add_argument("--out", type=str, default="envs")
    g.add_argument("--seed", type=int, default=None)
    g.set_defaults(func=cmd_gen)

    r = sub.add_parser("run", help="run D* on one map and print the path")
    r.add_argument("--map", type=str, required=True)
    r.add_argument("--trace", type=str, default="", help="write a step-by-step trace to this file")
    r.add_argument("--png", type=str, default="", help="render the finished run to this PNG")
    r.add_argument("--max-steps", type=int, default=None)
    r.set_defaults(func=cmd_run)

    b = sub.add_parser("bench", help="run D* and repeated A* on every .txt in a folder")
    b.add_argument("--envdir", type=str, required=True)
    b.add_argument("--out", type=str, default="", help="folder for PNGs")
    b.add_argument("--csv", type=str, default="")
    b.set_defaults(func=cmd_bench)

    return p

def main(argv: List[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except MalformedMap as e:
        print(f"error: {e}")
        return 2

if __name__ == "__main__":
    raise SystemExit(main())
