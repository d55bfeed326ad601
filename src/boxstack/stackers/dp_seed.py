"""
Seed construction for the boxstack project.

Two seeders live here, both producing a bottom-to-top `Stack`:

- `dp_reusable_stack`: the classic box-stacking dynamic program over the
  whole orientation pool. It ignores the single-use rule, so a box may
  appear more than once (one orientation resting on another orientation
  of the same box). Under reuse the result is optimal.
- `greedy_area_stack`: a single pass over the pool by descending footprint
  area that only appends orientations fitting on the current top and
  whose box is still unused. Weaker, but always valid.

`prune_single_use` turns the DP output into a single-use seed by keeping
the first occurrence of each box, scanning bottom-to-top.

Note that pruning does *not* re-check containment between entries that
become adjacent after a duplicate is dropped. The annealer repairs its
starting stack before use, so a loose seed is acceptable there.
"""

from __future__ import annotations

from typing import List, Sequence, Set
import logging

import numpy as np

from ..geometry import Orientation, Stack, stack_height


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _area_order(pool: Sequence[Orientation]) -> np.ndarray:
    """
    Indices of `pool` sorted by descending footprint area.

    The sort is stable, so ties keep input order and the DP is
    reproducible for a fixed input.
    """
    areas = np.fromiter((o.area for o in pool), dtype=np.int64, count=len(pool))
    return np.argsort(-areas, kind="stable")


# ---------------------------------------------------------------------------
# Reusable DP seeder
# ---------------------------------------------------------------------------

def dp_reusable_stack(pool: Sequence[Orientation]) -> Stack:
    """
    Tallest strictly nested chain over `pool`, allowing box reuse.

    Orientations are processed by descending footprint area; anything that
    fits strictly inside an orientation has a smaller area, so every
    possible support of entry `k` comes earlier in that order. For each
    entry we keep the best chain height ending there and its predecessor,
    then backtrack from the overall best.

    Runs in O(n^2) over the number of orientations. An empty pool gives
    an empty stack.
    """
    n = len(pool)
    if n == 0:
        return ()

    order = _area_order(pool)
    ordered = [pool[int(i)] for i in order]

    widths = np.array([o.width for o in ordered], dtype=np.int64)
    depths = np.array([o.depth for o in ordered], dtype=np.int64)
    heights = np.array([o.height for o in ordered], dtype=np.int64)

    best = heights.copy()
    pred = np.full(n, -1, dtype=np.int64)

    for k in range(1, n):
        supports = (widths[:k] > widths[k]) & (depths[:k] > depths[k])
        if not supports.any():
            continue
        # First support with the tallest chain wins ties.
        candidates = np.where(supports, best[:k], -1)
        j = int(np.argmax(candidates))
        best[k] = best[j] + heights[k]
        pred[k] = j

    top = int(np.argmax(best))

    chain: List[Orientation] = []
    k = top
    while k >= 0:
        chain.append(ordered[k])
        k = int(pred[k])
    chain.reverse()

    logger.debug("DP seed (with reuse): %d entries, height %d", len(chain), int(best[top]))
    return tuple(chain)


# ---------------------------------------------------------------------------
# Single-use pruner
# ---------------------------------------------------------------------------

def prune_single_use(stack: Sequence[Orientation]) -> Stack:
    """
    Keep the first occurrence of each source box, scanning bottom-to-top.

    Relative order is preserved and the result is a subsequence of
    `stack`. Containment between newly adjacent entries is not re-checked.
    """
    seen: Set[int] = set()
    kept: List[Orientation] = []
    for o in stack:
        if o.box_id in seen:
            continue
        seen.add(o.box_id)
        kept.append(o)
    return tuple(kept)


# ---------------------------------------------------------------------------
# Greedy seeder
# ---------------------------------------------------------------------------

def greedy_area_stack(pool: Sequence[Orientation]) -> Stack:
    """
    Walk the pool by descending area and append whatever fits on top.

    An orientation is appended when the stack is empty, or when it fits
    strictly on the current top and its box has not been used yet.
    """
    stack: List[Orientation] = []
    used: Set[int] = set()
    for i in _area_order(pool):
        o = pool[int(i)]
        if o.box_id in used:
            continue
        if stack and not o.fits_on(stack[-1]):
            continue
        stack.append(o)
        used.add(o.box_id)

    logger.debug("Greedy seed: %d entries, height %d", len(stack), stack_height(stack))
    return tuple(stack)


def build_seed(pool: Sequence[Orientation], strategy: str = "dp") -> Stack:
    """
    Build a single-use starting stack with the named strategy.

    Strategies
    ----------
    - 'dp' (default):
        `dp_reusable_stack` followed by `prune_single_use`. May not be
        nested where duplicates were dropped.
    - 'greedy':
        `greedy_area_stack`. Always valid.
    """
    strategy = strategy.lower()
    if strategy == "dp":
        return prune_single_use(dp_reusable_stack(pool))
    if strategy == "greedy":
        return greedy_area_stack(pool)
    raise ValueError(f"Unknown seed strategy {strategy!r}; expected 'dp' or 'greedy'.")


SEED_STRATEGIES = ("dp", "greedy")


__all__ = [
    "dp_reusable_stack",
    "prune_single_use",
    "greedy_area_stack",
    "build_seed",
    "SEED_STRATEGIES",
]
