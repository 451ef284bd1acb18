"""Module entry point for `python -m hearthgrid`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from hearthgrid.app import DEFAULT_GOAL, run_agent, run_agent_with_viewer
from hearthgrid.db.run_log import (
    RUN_LOG_NAME,
    latest_run_folder,
    read_final_state,
    read_log_entries,
)
from hearthgrid.render.world_view import render_activity, render_world_view
from hearthgrid.sim.agent_loop import MAX_ITERATIONS, ROUND_DELAY_SECONDS, LoopConfig

DEFAULT_LOG_DIR = Path("runs")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Hearthgrid agent.")
    parser.add_argument(
        "--goal",
        default=None,
        help="Goal handed to the agent.",
    )
    parser.add_argument(
        "--llm",
        default=None,
        help="Decision backend to use: gemini, mlx, or fake.",
    )
    parser.add_argument(
        "--model-id",
        default=None,
        help="Model ID for the gemini or mlx backend.",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Gemini API key (defaults to HEARTHGRID_API_KEY or GEMINI_API_KEY).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="World generation seed (defaults to HEARTHGRID_SEED or 0).",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=MAX_ITERATIONS,
        help="Maximum decision rounds per run.",
    )
    parser.add_argument(
        "--round-delay",
        type=float,
        default=ROUND_DELAY_SECONDS,
        help="Seconds to pause between rounds.",
    )
    parser.add_argument(
        "--view",
        action="store_true",
        help="Open the live viewer instead of running headless.",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=DEFAULT_LOG_DIR,
        help="Base directory for headless run folders.",
    )
    parser.add_argument(
        "--show-run",
        nargs="?",
        const="latest",
        default=None,
        help="Print a saved run folder (defaults to latest).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level.",
    )
    args = parser.parse_args()

    config = LoopConfig(
        max_iterations=args.max_iterations, round_delay=args.round_delay
    )

    if args.show_run is not None:
        if args.show_run == "latest":
            run_folder = latest_run_folder(args.log_dir)
        else:
            run_folder = Path(args.show_run)
        if run_folder is None:
            raise SystemExit("No run folder found. Run the agent first.")
        _show_run(run_folder)
        return

    if args.view:
        run_agent_with_viewer(
            args.goal,
            llm_backend=args.llm,
            model_id=args.model_id,
            api_key=args.api_key,
            seed=args.seed,
            config=config,
        )
        return

    _configure_logging(args.verbose)
    result, run_dir = run_agent(
        args.goal or DEFAULT_GOAL,
        args.log_dir,
        llm_backend=args.llm,
        model_id=args.model_id,
        api_key=args.api_key,
        seed=args.seed,
        config=config,
    )
    if result.rejected:
        raise SystemExit(f"Run rejected: {result.reason}")
    print(f"Run finished ({result.status.value}); saved to {run_dir}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _show_run(run_folder: Path) -> None:
    console = Console()
    log_path = run_folder / RUN_LOG_NAME
    if not log_path.exists():
        raise SystemExit(f"No {RUN_LOG_NAME} in {run_folder}")
    entries = list(read_log_entries(log_path))
    final = read_final_state(log_path)
    if final is None:
        console.print(render_activity(entries, max_entries=len(entries) or 1))
        return
    snapshot, status = final
    console.print(
        render_world_view(
            snapshot,
            status=status,
            entries=entries,
            max_entries=len(entries) or 1,
        )
    )


if __name__ == "__main__":
    main()
