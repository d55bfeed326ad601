"""
Global configuration for the boxstack project.

This module centralizes:

- Project-root and data paths
- Random seeds for reproducibility
- Default annealing parameters and their validation
- Logging setup for scripts and the command line

All of these are kept in one place so that experiments are easy to
reproduce and configuration changes don't require hunting through
multiple files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union
import logging
import random

import numpy as np

from .exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

# This file lives in: <repo>/src/boxstack/config.py
PROJECT_ROOT: Path = Path(__file__).resolve().parents[2]

DATA_DIR: Path = PROJECT_ROOT / "data"
DATA_RAW_DIR: Path = DATA_DIR / "raw"
DATA_RESULTS_DIR: Path = DATA_DIR / "results"


# ---------------------------------------------------------------------------
# Randomness / reproducibility
# ---------------------------------------------------------------------------

DEFAULT_SEED: int = 1234


def set_global_seeds(seed: Optional[int] = None) -> int:
    """
    Set Python's and NumPy's global random seeds and return the seed used.

    The annealer takes an explicit `random.Random`, so this only matters
    for code that still reaches for the module-level generators.
    """
    if seed is None:
        seed = DEFAULT_SEED

    random.seed(seed)
    np.random.seed(seed)
    return seed


# ---------------------------------------------------------------------------
# Annealing configuration
# ---------------------------------------------------------------------------

# Trials run at each temperature before cooling.
ANNEAL_INNER_TRIALS: int = 20

# The loop stops once the temperature is at or below this value. Must stay
# strictly positive: the acceptance probability divides by the temperature.
ANNEAL_MIN_TEMPERATURE: float = 1e-3

DEFAULT_INITIAL_TEMPERATURE: float = 100.0
DEFAULT_COOLING_RATE: float = 1.0

# Independent annealing runs used by `solver.solve_multi_start`.
DEFAULT_RUNS: int = 4


def validate_annealing_params(
    initial_temperature: float,
    cooling_rate: float,
    min_temperature: float = ANNEAL_MIN_TEMPERATURE,
) -> None:
    """
    Reject annealing parameters that would make the loop meaningless.

    Raises
    ------
    ConfigurationError
        If the initial temperature, the cooling rate or the stopping
        threshold is not strictly positive.
    """
    if not initial_temperature > 0:
        raise ConfigurationError(
            f"initial_temperature must be positive, got {initial_temperature!r}"
        )
    if not cooling_rate > 0:
        raise ConfigurationError(
            f"cooling_rate must be positive, got {cooling_rate!r}"
        )
    if not min_temperature > 0:
        raise ConfigurationError(
            f"min_temperature must be positive, got {min_temperature!r}"
        )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure root logging for scripts and the command line.

    Library modules only create loggers; they never configure handlers.
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    # Paths
    "PROJECT_ROOT",
    "DATA_DIR",
    "DATA_RAW_DIR",
    "DATA_RESULTS_DIR",
    # Seeds / randomness
    "DEFAULT_SEED",
    "set_global_seeds",
    # Annealing parameters
    "ANNEAL_INNER_TRIALS",
    "ANNEAL_MIN_TEMPERATURE",
    "DEFAULT_INITIAL_TEMPERATURE",
    "DEFAULT_COOLING_RATE",
    "DEFAULT_RUNS",
    "validate_annealing_params",
    # Logging
    "LOG_FORMAT",
    "configure_logging",
]
