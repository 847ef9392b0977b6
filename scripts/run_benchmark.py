#!/usr/bin/env python3
"""Sweep seeds x grid sizes x planners and append one JSON line per run."""
import argparse
import json
import os
from pathlib import Path

from dstar_evac import ComparisonRow, generate_scenario, rank_rows, run_comparison


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sizes", nargs="*", type=int, default=[10, 20, 30])
    ap.add_argument("--seeds", nargs="*", type=int, default=[0, 1, 2])
    ap.add_argument("--planners", nargs="*", default=["dstar_lite", "dynamic_astar"])
    ap.add_argument("--budget-factor", type=int, default=2)
    ap.add_argument("--mode", default="NORMAL")
    ap.add_argument("--out", default="logs/benchmark.jsonl")
    args = ap.parse_args()

    Path(os.path.dirname(args.out) or ".").mkdir(parents=True, exist_ok=True)
    md_path = os.path.splitext(args.out)[0] + ".md"

    rows = []
    with open(args.out, "w", encoding="utf-8") as f:
        for seed in args.seeds:
            scenarios = [generate_scenario(n, name=f"{n}x{n}_s{seed}", seed=seed) for n in args.sizes]
            results = run_comparison(scenarios, args.planners, step_budget_factor=args.budget_factor)
            ranked = rank_rows([ComparisonRow.from_result(r) for r in results], args.mode)
            for row in ranked:
                res = row.as_dict()
                res["seed"] = seed
                json.dump(res, f, ensure_ascii=False)
                f.write("\n")
                rows.append(res)

    with open(md_path, "w", encoding="utf-8") as mf:
        mf.write("# D* Lite Evacuation Benchmark\n\n")
        for r in rows:
            mf.write(
                f"- {r['scenario']} | {r['planner']} | rank={r['rank']} | {r['outcome']} | "
                f"cost=({r['smoke']}, {r['time']}, {r['distance']}) | expansions={r['expansions']} | {r['runtime_ms']}ms\n"
            )
    print(f"Saved: {args.out} and {md_path}")


if __name__ == "__main__":
    main()
