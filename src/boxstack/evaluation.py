"""
Evaluation utilities for the boxstack project.

A result is stored as a table with one row per box, top box first:

    box_id,width,depth,height,cumulative_height
    2,2,2,2,2
    1,3,3,3,5
    0,4,4,4,9

`cumulative_height` is the height from the top of the stack to the bottom
of that box, so the last row holds the total height.

Validation here is deliberately independent from `geometry.is_valid_stack`:
footprints are rebuilt as shapely rectangles centred on the stack axis, and
a box fits on the one below it only when the lower rectangle
`contains_properly` the upper one (no shared edges). This lets tests and
scripts cross-check what the stackers produce.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .geometry import Orientation, footprint_polygon, result_rows


# Type alias for clarity
StackTable = pd.DataFrame

STACK_COLUMNS = ["box_id", "width", "depth", "height", "cumulative_height"]


# ---------------------------------------------------------------------------
# Building tables
# ---------------------------------------------------------------------------

def stack_to_frame(stack: Sequence[Orientation]) -> StackTable:
    """
    Convert a bottom-to-top stack into a top-to-bottom result table.
    """
    rows = result_rows(stack)
    box_ids = [o.box_id for o in reversed(stack)]
    records = [
        {
            "box_id": box_id,
            "width": w,
            "depth": d,
            "height": h,
            "cumulative_height": c,
        }
        for box_id, (w, d, h, c) in zip(box_ids, rows)
    ]
    return pd.DataFrame(records, columns=STACK_COLUMNS)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def footprints_nest(upper: Tuple[float, float], lower: Tuple[float, float]) -> bool:
    """
    True if footprint `upper` lies strictly inside footprint `lower` when
    both are centred on the same axis.
    """
    return footprint_polygon(*lower).contains_properly(footprint_polygon(*upper))


def validate_stack_frame(df: pd.DataFrame, strict: bool = True) -> StackTable:
    """
    Check a result table and return a clean copy with integer columns.

    Always checks that the required columns are present. If `strict` is
    True, also checks:
    - every dimension is a positive integer and width <= depth
    - no box_id repeats
    - cumulative_height is the running sum of height from the top
    - each footprint strictly contains the footprint of the row above it

    Raises
    ------
    ValueError
        On the first failed check.
    """
    missing = set(STACK_COLUMNS).difference(df.columns)
    if missing:
        raise ValueError(f"Stack table is missing required columns: {sorted(missing)}")

    table = df[STACK_COLUMNS].copy().reset_index(drop=True)

    if not strict:
        return table

    dims = table[["width", "depth", "height"]]
    if not np.all(np.equal(np.mod(dims.to_numpy(dtype=float), 1.0), 0.0)):
        raise ValueError("Box dimensions must be integers.")
    if (dims <= 0).any().any():
        raise ValueError("Box dimensions must be positive.")
    table = table.astype(int)

    if (table["width"] > table["depth"]).any():
        raise ValueError("Every footprint must have width <= depth.")

    dupes = table.loc[table["box_id"].duplicated(), "box_id"].tolist()
    if dupes:
        raise ValueError(f"Boxes used more than once: {dupes[:5]}")

    expected = table["height"].cumsum()
    if not (expected == table["cumulative_height"]).all():
        raise ValueError("cumulative_height does not match the running sum of height.")

    footprints = list(zip(table["width"], table["depth"]))
    for row, (upper, lower) in enumerate(zip(footprints, footprints[1:])):
        if not footprints_nest(upper, lower):
            raise ValueError(
                f"Row {row} footprint {upper} does not fit strictly on "
                f"row {row + 1} footprint {lower}."
            )

    return table


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def total_height(table: StackTable) -> int:
    return int(table["height"].sum())


def evaluate_stack_csv(
    path: Union[str, Path],
    strict: bool = True,
) -> Tuple[StackTable, int]:
    """
    Load a result CSV, validate it and compute its total height.

    Returns
    -------
    table:
        The validated result table.
    total_height:
        Sum of the box heights.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Stack CSV not found: {csv_path}")

    raw_df = pd.read_csv(csv_path)
    table = validate_stack_frame(raw_df, strict=strict)
    return table, total_height(table)


__all__ = [
    "StackTable",
    "STACK_COLUMNS",
    "stack_to_frame",
    "footprints_nest",
    "validate_stack_frame",
    "total_height",
    "evaluate_stack_csv",
]
