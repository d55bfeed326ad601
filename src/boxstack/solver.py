"""
High-level pipeline for the boxstack project.

This module glues together:

- The orientation expansion from `boxstack.geometry`.
- A seeder (reusable DP + single-use pruning, or greedy) from
  `boxstack.stackers.dp_seed`.
- Simulated-annealing refinement from `boxstack.stackers.annealing`.

It exposes functions to:

- Solve one instance with a single annealing run (`solve`).
- Run several independent annealing runs in worker processes and keep the
  best (`solve_multi_start`).
- Use a small CLI for convenience:

      python -m boxstack.solver data/raw/boxes.txt 100 1
      # or, once installed
      boxstack data/raw/boxes.txt 100 1 --runs 4

The CLI prints the final stack top box first, one line per box:
`width depth height cumulative_height`.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
import argparse
import logging
import random

from .config import (
    ANNEAL_INNER_TRIALS,
    ANNEAL_MIN_TEMPERATURE,
    DEFAULT_COOLING_RATE,
    DEFAULT_INITIAL_TEMPERATURE,
    DEFAULT_RUNS,
    configure_logging,
    validate_annealing_params,
)
from .evaluation import StackTable, stack_to_frame
from .exceptions import ConfigurationError, EmptyInputError
from .geometry import Box, ResultRow, Stack, expand_orientations, result_rows, stack_height
from .stackers.annealing import COOLING_SCHEDULES, AnnealingStats, anneal, resolve_schedule
from .stackers.dp_seed import SEED_STRATEGIES, build_seed
from .utils.io import format_stack_lines, load_boxes, save_stack_csv
from .utils.timing import Timer


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass
class StackResult:
    """
    Outcome of one pipeline run.

    - stack: best stack found, bottom-to-top
    - seed: the single-use seed the annealer started from (may be unnested)
    - stats: annealer statistics for the run
    - run_index: which run produced this result in a multi-start solve
    """

    stack: Stack
    seed: Stack
    stats: AnnealingStats
    run_index: int = 0

    @property
    def height(self) -> int:
        return stack_height(self.stack)

    @property
    def seed_height(self) -> int:
        return stack_height(self.seed)

    def rows(self) -> List[ResultRow]:
        return result_rows(self.stack)

    def to_frame(self) -> StackTable:
        return stack_to_frame(self.stack)


# ---------------------------------------------------------------------------
# Single run
# ---------------------------------------------------------------------------

def _check_inputs(
    boxes: Sequence[Box],
    initial_temperature: float,
    cooling_rate: float,
    min_temperature: float,
    schedule,
    seed_strategy: str,
) -> None:
    validate_annealing_params(initial_temperature, cooling_rate, min_temperature)
    resolve_schedule(schedule)
    if seed_strategy.lower() not in SEED_STRATEGIES:
        raise ConfigurationError(
            f"Unknown seed strategy {seed_strategy!r}; expected one of {list(SEED_STRATEGIES)}."
        )
    if not boxes:
        raise EmptyInputError("No boxes to stack.")


def solve(
    boxes: Sequence[Box],
    initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE,
    cooling_rate: float = DEFAULT_COOLING_RATE,
    rng: Optional[random.Random] = None,
    seed_strategy: str = "dp",
    schedule=None,
    inner_trials: int = ANNEAL_INNER_TRIALS,
    min_temperature: float = ANNEAL_MIN_TEMPERATURE,
    run_index: int = 0,
) -> StackResult:
    """
    Build a tall single-use stack from `boxes`.

    Pipeline:

    1. Validate the annealing parameters and reject an empty box list.
    2. Expand every box into its three orientations.
    3. Build a seed with `seed_strategy` ('dp' or 'greedy').
    4. Refine it with simulated annealing.

    Raises
    ------
    ConfigurationError
        Non-positive temperature or cooling rate, or an unknown schedule
        or seed strategy.
    EmptyInputError
        If `boxes` is empty.
    """
    _check_inputs(
        boxes, initial_temperature, cooling_rate, min_temperature, schedule, seed_strategy
    )

    pool = expand_orientations(boxes)
    seed = build_seed(pool, strategy=seed_strategy)
    logger.info(
        "Seed (%s) height %d from %d boxes / %d orientations",
        seed_strategy, stack_height(seed), len(boxes), len(pool),
    )

    stats = anneal(
        seed,
        pool,
        initial_temperature=initial_temperature,
        cooling_rate=cooling_rate,
        rng=rng,
        schedule=schedule,
        inner_trials=inner_trials,
        min_temperature=min_temperature,
        track_stats=True,
    )
    return StackResult(stack=stats.best, seed=seed, stats=stats, run_index=run_index)


# ---------------------------------------------------------------------------
# Multi-start
# ---------------------------------------------------------------------------

def _solve_run(boxes: Sequence[Box], run_seed: int, run_index: int, kwargs: dict) -> StackResult:
    """Worker entry point: one independent run with its own generator."""
    return solve(boxes, rng=random.Random(run_seed), run_index=run_index, **kwargs)


def _pick_best(results: Sequence[StackResult]) -> StackResult:
    return min(results, key=lambda r: (-r.height, r.run_index))


def solve_multi_start(
    boxes: Sequence[Box],
    initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE,
    cooling_rate: float = DEFAULT_COOLING_RATE,
    runs: int = DEFAULT_RUNS,
    workers: Optional[int] = None,
    seed: Optional[int] = None,
    seed_strategy: str = "dp",
    schedule: Optional[str] = None,
    inner_trials: int = ANNEAL_INNER_TRIALS,
    min_temperature: float = ANNEAL_MIN_TEMPERATURE,
) -> StackResult:
    """
    Run `runs` independent annealing runs and return the tallest result.

    Run `k` uses `random.Random(seed + k)`, so a fixed `seed` makes the
    whole solve reproducible regardless of scheduling. Ties go to the
    lowest run index. With `workers == 1` (or a single run) everything
    runs in this process; otherwise runs go to a `ProcessPoolExecutor`.
    `schedule` must be a name here so it can be sent to workers.
    """
    _check_inputs(
        boxes, initial_temperature, cooling_rate, min_temperature, schedule, seed_strategy
    )
    if runs < 1:
        raise ConfigurationError(f"runs must be at least 1, got {runs}")

    base_seed = seed if seed is not None else random.randrange(2**32)
    kwargs = dict(
        initial_temperature=initial_temperature,
        cooling_rate=cooling_rate,
        seed_strategy=seed_strategy,
        schedule=schedule,
        inner_trials=inner_trials,
        min_temperature=min_temperature,
    )

    results: List[StackResult] = []
    if runs == 1 or workers == 1:
        for k in range(runs):
            results.append(_solve_run(boxes, base_seed + k, k, kwargs))
    else:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_solve_run, list(boxes), base_seed + k, k, kwargs): k
                for k in range(runs)
            }
            for future in as_completed(futures):
                result = future.result()
                logger.info("Run %d finished with height %d", futures[future], result.height)
                results.append(result)

    best = _pick_best(results)
    logger.info("Best of %d runs: run %d, height %d", runs, best.run_index, best.height)
    return best


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Stack boxes as high as possible (each box used once, strictly nested).",
    )
    parser.add_argument("input", type=str, help="Box file: three integers per line.")
    parser.add_argument("initial_temperature", type=float, help="Starting annealing temperature.")
    parser.add_argument("cooling_rate", type=float, help="Cooling rate for the schedule.")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (optional).",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=1,
        help="Number of independent annealing runs; the tallest result is kept.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker processes for multiple runs (default: one per CPU).",
    )
    parser.add_argument(
        "--seed-strategy",
        choices=SEED_STRATEGIES,
        default="dp",
        help="How to build the starting stack.",
    )
    parser.add_argument(
        "--schedule",
        choices=sorted(COOLING_SCHEDULES),
        default="geometric",
        help="Cooling schedule.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional CSV path to also save the result table.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    try:
        boxes = load_boxes(args.input)
        with Timer("solve"):
            result = solve_multi_start(
                boxes,
                initial_temperature=args.initial_temperature,
                cooling_rate=args.cooling_rate,
                runs=args.runs,
                workers=args.workers,
                seed=args.seed,
                seed_strategy=args.seed_strategy,
                schedule=args.schedule,
            )
    except (FileNotFoundError, ConfigurationError, EmptyInputError) as exc:
        raise SystemExit(f"boxstack: {exc}") from exc

    for line in format_stack_lines(result.stack):
        print(line)

    if args.output is not None:
        out_path = save_stack_csv(result.stack, Path(args.output))
        logger.info("Result table written to %s", out_path)


if __name__ == "__main__":
    main()
