#!/usr/bin/env python
"""
Check saved stack tables and print one summary row per file.

    python scripts/score_stack.py data/results/*.csv
    python scripts/score_stack.py data/results/run.csv --boxes data/raw/example_boxes.txt

With `--boxes`, every row must also be an orientation of the box its
`box_id` names in that file. Exits with status 1 if any table fails.
"""

from __future__ import annotations

from pathlib import Path
import argparse
import sys

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from boxstack.config import configure_logging  # noqa: E402
from boxstack.evaluation import evaluate_stack_csv  # noqa: E402
from boxstack.geometry import orientations_for_box  # noqa: E402
from boxstack.utils.io import load_boxes  # noqa: E402


def _check_against_boxes(table: pd.DataFrame, boxes) -> None:
    by_id = {b.index: b for b in boxes}
    for row in table.itertuples(index=False):
        box = by_id.get(row.box_id)
        if box is None:
            raise ValueError(f"box_id {row.box_id} is not in the box file")
        shapes = {(o.width, o.depth, o.height) for o in orientations_for_box(box)}
        if (row.width, row.depth, row.height) not in shapes:
            raise ValueError(f"row for box {row.box_id} does not match its dimensions")


def score(path: Path, strict: bool, boxes=None) -> dict:
    try:
        table, height = evaluate_stack_csv(path, strict=strict)
        if boxes is not None:
            _check_against_boxes(table, boxes)
    except (FileNotFoundError, ValueError) as exc:
        return {"file": path.name, "boxes": None, "height": None, "error": str(exc)}
    return {"file": path.name, "boxes": len(table), "height": height, "error": ""}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("tables", nargs="+", type=Path)
    parser.add_argument("--boxes", type=Path, default=None, help="Box file the stacks were built from.")
    parser.add_argument("--non-strict", action="store_true", help="Only check the columns.")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    boxes = load_boxes(args.boxes) if args.boxes is not None else None
    summary = pd.DataFrame([score(p, not args.non_strict, boxes) for p in args.tables])
    print(summary.to_string(index=False))
    return 1 if (summary["error"] != "").any() else 0


if __name__ == "__main__":
    sys.exit(main())
