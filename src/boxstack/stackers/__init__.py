"""
Stacking strategies for the boxstack project.

- Seeders (`dp_seed.py`): the reusable box-stacking DP with its
  single-use pruner, and a greedy area-ordered baseline.
- Refinement (`annealing.py`): simulated annealing over stack-editing
  moves, with the shared `repair` primitive.

High-level code (e.g. `boxstack.solver`) should depend on the functions
exported here rather than reaching into module internals.
"""

from .annealing import AnnealingStats, anneal, repair
from .dp_seed import build_seed, dp_reusable_stack, greedy_area_stack, prune_single_use

__all__ = [
    "AnnealingStats",
    "anneal",
    "repair",
    "build_seed",
    "dp_reusable_stack",
    "greedy_area_stack",
    "prune_single_use",
]
