#!/usr/bin/env python3
"""Aggregate benchmark.jsonl into per-planner summary JSON/CSV."""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from statistics import mean
from typing import Any, Dict, List


def _load_results(jsonl_path: Path) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []
    if not jsonl_path.exists():
        return results
    with jsonl_path.open("r", encoding="utf-8") as jf:
        for line in jf:
            line = line.strip()
            if not line:
                continue
            try:
                results.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    return results


def summarize(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for res in results:
        grouped.setdefault(str(res.get("planner")), []).append(res)

    summaries: List[Dict[str, Any]] = []
    for planner, runs in sorted(grouped.items()):
        ok = [r for r in runs if r.get("outcome") == "SUCCESS"]
        summaries.append(
            {
                "planner": planner,
                "runs": len(runs),
                "successes": len(ok),
                "success_rate": round(len(ok) / len(runs), 3),
                "wins": sum(1 for r in runs if r.get("rank") == 1),
                "mean_weighted_cost": round(mean(float(r["weighted_cost"]) for r in ok), 2) if ok else None,
                "mean_expansions": round(mean(int(r.get("expansions") or 0) for r in runs), 1),
                "mean_runtime_ms": round(mean(float(r.get("runtime_ms") or 0.0) for r in runs), 3),
            }
        )
    return summaries


def main():
    parser = argparse.ArgumentParser(description="Summarize evacuation benchmark results")
    parser.add_argument("--input", default="logs/benchmark.jsonl", help="JSONL file with benchmark runs")
    parser.add_argument("--output", default="logs", help="Directory for summary.json/summary.csv")
    args = parser.parse_args()

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    summary_json = out_dir / "summary.json"
    summary_csv = out_dir / "summary.csv"

    summaries = summarize(_load_results(Path(args.input)))
    summary_json.write_text(json.dumps(summaries, indent=2, ensure_ascii=False), encoding="utf-8")

    fieldnames = [
        "planner",
        "runs",
        "successes",
        "success_rate",
        "wins",
        "mean_weighted_cost",
        "mean_expansions",
        "mean_runtime_ms",
    ]
    with summary_csv.open("w", encoding="utf-8", newline="") as cf:
        writer = csv.DictWriter(cf, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(summaries)

    print(f"Summary regenerated: {summary_json}, {summary_csv}")


if __name__ == "__main__":
    main()
