"""
I/O utilities for the boxstack project.

This module centralizes common file and path operations so that:
- Scripts and notebooks do *not* hard-code paths.
- Reading box lists and writing stack results is consistent everywhere.

Box files
---------

Plain text, one box per line, three whitespace-separated positive
integers:

    4 4 4
    3 5 2
    10 1 7

Lines that do not hold exactly three tokens, hold non-integers, or hold a
non-positive dimension are skipped with a logged warning (blank lines are
skipped quietly). Box identities are assigned in the
order the surviving lines appear.

Typical usage
-------------

    from boxstack.utils.io import load_boxes, format_stack_lines

    boxes = load_boxes("data/raw/boxes.txt")
    ...
    print("\\n".join(format_stack_lines(result.stack)))
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union
import datetime as dt
import logging
import re

import pandas as pd

from ..config import DATA_DIR, DATA_RAW_DIR, DATA_RESULTS_DIR
from ..evaluation import evaluate_stack_csv, stack_to_frame
from ..geometry import Box, Orientation, result_rows


logger = logging.getLogger(__name__)

# Optional sign followed by ASCII digits only.
_INT_TOKEN = re.compile(r"[+-]?[0-9]+")

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Directory helpers
# ---------------------------------------------------------------------------

def ensure_data_dirs() -> None:
    """
    Ensure that data/, data/raw/ and data/results/ exist.
    Safe to call repeatedly.
    """
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    DATA_RAW_DIR.mkdir(parents=True, exist_ok=True)
    DATA_RESULTS_DIR.mkdir(parents=True, exist_ok=True)


def get_raw_path(*parts: str) -> Path:
    """
    Build a path under the `data/raw/` directory.

    Example
    -------
    >>> get_raw_path("boxes.txt")
    PosixPath('.../data/raw/boxes.txt')
    """
    return DATA_RAW_DIR.joinpath(*parts)


def get_timestamped_result_path(
    prefix: str = "stack",
    suffix: str = ".csv",
) -> Path:
    """
    Build a timestamped result path under `data/results/`, e.g.
    stack_20251126_153045.csv
    """
    DATA_RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    timestamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
    return DATA_RESULTS_DIR / f"{prefix}_{timestamp}{suffix}"


# ---------------------------------------------------------------------------
# Loading boxes
# ---------------------------------------------------------------------------

def parse_box_line(line: str) -> Optional[tuple]:
    """
    Parse one line of a box file into an `(x, y, z)` triple.

    Tokens must be plain ASCII integers with an optional sign; forms such
    as "1_0" or non-ASCII digits are rejected. Returns None for lines that
    should be skipped; every skipped line except a blank one is logged.
    """
    tokens = line.split()
    if not tokens:
        return None
    if len(tokens) != 3:
        logger.warning("expected three box dimensions: %s", line.strip())
        return None
    if not all(_INT_TOKEN.fullmatch(t) for t in tokens):
        logger.warning("invalid box dimensions: %s", line.strip())
        return None
    dims = tuple(int(t) for t in tokens)
    if any(d <= 0 for d in dims):
        logger.warning("non-positive box dimensions: %s", line.strip())
        return None
    return dims


def parse_boxes(lines: Sequence[str]) -> List[Box]:
    """Parse box lines, numbering the valid ones from 0."""
    boxes: List[Box] = []
    for line in lines:
        dims = parse_box_line(line)
        if dims is None:
            continue
        boxes.append(Box(dims[0], dims[1], dims[2], len(boxes)))
    return boxes


def load_boxes(path: PathLike) -> List[Box]:
    """
    Load boxes from a whitespace-separated text file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    box_path = Path(path)
    if not box_path.exists():
        raise FileNotFoundError(f"Box file not found: {box_path}")

    with box_path.open("r", encoding="utf-8") as fh:
        boxes = parse_boxes(fh.readlines())

    logger.info("Loaded %d boxes from %s", len(boxes), box_path)
    return boxes


# ---------------------------------------------------------------------------
# Writing results
# ---------------------------------------------------------------------------

def format_stack_lines(stack: Sequence[Orientation]) -> List[str]:
    """
    Format a stack as text lines, top box first:

        width depth height cumulative_height
    """
    return [f"{w} {d} {h} {c}" for w, d, h, c in result_rows(stack)]


def save_stack_csv(
    stack: Sequence[Orientation],
    path: Optional[PathLike] = None,
    prefix: str = "stack",
) -> Path:
    """
    Write `stack` as a CSV result table (see `evaluation.stack_to_frame`).

    If `path` is None a timestamped name under `data/results/` is used.
    """
    if path is None:
        out_path = get_timestamped_result_path(prefix=prefix)
    else:
        out_path = Path(path)
        out_path.parent.mkdir(parents=True, exist_ok=True)

    stack_to_frame(stack).to_csv(out_path, index=False)
    return out_path


def load_stack_csv(path: PathLike) -> pd.DataFrame:
    """Load a saved result table as a DataFrame."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Stack CSV not found: {csv_path}")
    return pd.read_csv(csv_path)


def evaluate_saved_stack(path: PathLike, strict: bool = True) -> int:
    """
    Validate a saved result table and return its total height.
    """
    _table, total_height = evaluate_stack_csv(path, strict=strict)
    return total_height


__all__ = [
    "ensure_data_dirs",
    "get_raw_path",
    "get_timestamped_result_path",
    "parse_box_line",
    "parse_boxes",
    "load_boxes",
    "format_stack_lines",
    "save_stack_csv",
    "load_stack_csv",
    "evaluate_saved_stack",
]
