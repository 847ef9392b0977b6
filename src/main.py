"""Command-line entrypoint for the D* Lite evacuation benchmark."""
from __future__ import annotations

import argparse
from typing import List, Tuple

from dstar_evac import (
    ComparisonRow,
    Config,
    RunResult,
    SimulationLogger,
    build_scenarios,
    rank_rows,
    run_comparison,
    save_history,
    save_json,
    save_rows_csv,
    write_run_log,
    write_summary_markdown,
)
from dstar_evac.visuals import render_history_gif


def execute_run(config: Config) -> Tuple[List[RunResult], List[ComparisonRow]]:
    """Execute the comparison pipeline for a fully specified configuration."""

    config.validate()
    scenarios = build_scenarios(config)
    out_dir = config.ensure_output_dir()

    with SimulationLogger(str(out_dir / config.trajectories_filename)) as logger:
        results = run_comparison(
            scenarios,
            config.planners,
            step_budget_factor=config.step_budget_factor,
            logger=logger,
            verbose=config.verbose,
            log_every=config.log_every,
        )

    rows = rank_rows([ComparisonRow.from_result(result) for result in results], config.mode())
    row_dicts = [row.as_dict() for row in rows]
    save_json(row_dicts, str(out_dir / config.results_json_filename))
    save_rows_csv(row_dicts, str(out_dir / config.results_csv_filename))
    write_summary_markdown(row_dicts, str(out_dir / config.summary_md_filename), title=f"Evacuation benchmark: {config.label()}")

    for result in results:
        stem = f"{result.scenario}_{result.planner}"
        save_history(result.history, str(out_dir / f"{stem}_history.csv"))
        if config.render_gif:
            gif_name = config.gif_pattern.format(scenario=result.scenario, planner=result.planner)
            render_history_gif(result.history, str(out_dir / gif_name), title=stem)

    write_run_log(str(out_dir / config.log_filename), config_dict=config.as_dict(), rows=row_dicts)
    if config.verbose:
        print(f"[dstar] saved {len(rows)} rows to {out_dir}", flush=True)
    return results, rows


def run_from_cli(argv: List[str] | None = None):
    parser = argparse.ArgumentParser(description="D* Lite evacuation benchmark")
    parser.add_argument("--scenario", default=None, help="Scenario JSON path (default: generated grids)")
    parser.add_argument("--sizes", nargs="*", type=int, default=[10, 20, 30], help="Generated grid sizes")
    parser.add_argument("--seed", type=int, default=0, help="Seed for generated scenarios")
    parser.add_argument("--planners", nargs="*", default=["dstar_lite", "dynamic_astar"], help="Planners to compare")
    parser.add_argument("--budget-factor", type=int, default=2, help="Step budget as a multiple of rows*cols")
    parser.add_argument("--ranking-mode", default="NORMAL", help="Mode used to rank successful runs")
    parser.add_argument("--gif", action="store_true", help="Render a GIF per run")
    parser.add_argument("--quiet", action="store_true", help="Silence progress output")
    parser.add_argument("--output", default="artifacts", help="Directory for JSON/CSV outputs")
    args = parser.parse_args(argv)

    config = Config(
        scenario_path=args.scenario,
        grid_sizes=args.sizes,
        seed=args.seed,
        planners=args.planners,
        step_budget_factor=args.budget_factor,
        ranking_mode=args.ranking_mode,
        render_gif=args.gif,
        verbose=not args.quiet,
        output_dir=args.output,
    )
    config.update_from_env()

    return execute_run(config)


if __name__ == "__main__":
    run_from_cli()
