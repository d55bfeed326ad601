#!/usr/bin/env python
"""
CLI helper to build a stack from a box file and save the result table.

This script is a thin wrapper around the library entry points:

- boxstack.solver.solve_multi_start
- boxstack.utils.io.save_stack_csv / evaluate_saved_stack  (optional)

Typical usage from the project root
-----------------------------------

    python scripts/make_stack.py data/raw/example_boxes.txt
    # or
    python scripts/make_stack.py data/raw/example_boxes.txt --seed 123 --runs 4
    python scripts/make_stack.py data/raw/example_boxes.txt --seed-strategy greedy
    python scripts/make_stack.py data/raw/example_boxes.txt --evaluate

The script automatically adds `src/` to PYTHONPATH so that it can import the
`boxstack` package without requiring installation.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Optional, List


def _ensure_src_on_path() -> Path:
    """
    Ensure that <project_root>/src is on sys.path and return project_root.

    Assumes this file lives in <project_root>/scripts/make_stack.py.
    """
    project_root = Path(__file__).resolve().parents[1]
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))
    return project_root


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the tallest stack found for a box file and save it as CSV.",
    )
    parser.add_argument("input", type=str, help="Box file: three integers per line.")
    parser.add_argument(
        "--initial-temperature",
        type=float,
        default=None,
        help="Starting annealing temperature (default from boxstack.config).",
    )
    parser.add_argument(
        "--cooling-rate",
        type=float,
        default=None,
        help="Cooling rate (default from boxstack.config).",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=None,
        help="Independent annealing runs (default from boxstack.config).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (optional).",
    )
    parser.add_argument(
        "--seed-strategy",
        choices=["dp", "greedy"],
        default="dp",
        help="How to build the starting stack.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help=(
            "Optional output path for the CSV. "
            "If omitted, a timestamped name will be created under data/results/."
        ),
    )
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="After writing the result, validate it independently and print the height.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    project_root = _ensure_src_on_path()

    # Imports done after path configuration
    from boxstack import config
    from boxstack.solver import solve_multi_start
    from boxstack.utils.io import evaluate_saved_stack, load_boxes, save_stack_csv

    args = _parse_args(argv)
    config.configure_logging("INFO")

    initial_temperature = (
        args.initial_temperature
        if args.initial_temperature is not None
        else config.DEFAULT_INITIAL_TEMPERATURE
    )
    cooling_rate = args.cooling_rate if args.cooling_rate is not None else config.DEFAULT_COOLING_RATE
    runs = args.runs if args.runs is not None else config.DEFAULT_RUNS
    seed = args.seed if args.seed is not None else config.DEFAULT_SEED

    print(f"[make_stack] Project root: {project_root}")
    print(f"[make_stack] T0={initial_temperature} rate={cooling_rate} runs={runs} seed={seed}")

    boxes = load_boxes(args.input)
    result = solve_multi_start(
        boxes,
        initial_temperature=initial_temperature,
        cooling_rate=cooling_rate,
        runs=runs,
        seed=seed,
        seed_strategy=args.seed_strategy,
    )
    print(f"[make_stack] Seed height: {result.seed_height}")
    print(f"[make_stack] Final height: {result.height} ({len(result.stack)} boxes)")

    csv_path = save_stack_csv(
        result.stack,
        Path(args.output) if args.output is not None else None,
    )
    print(f"[make_stack] Result written to: {csv_path}")

    if args.evaluate:
        height = evaluate_saved_stack(csv_path, strict=True)
        print(f"[make_stack] Validated height: {height}")


if __name__ == "__main__":
    main()
