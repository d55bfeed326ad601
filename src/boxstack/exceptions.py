"""
Error types raised by the boxstack pipeline.

Both subclass `ValueError`, so callers catching the usual bad-input error
keep working. They are raised before any optimization work starts.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Annealing parameters are unusable (non-positive temperature or rate)."""


class EmptyInputError(ValueError):
    """No boxes are available to stack."""


__all__ = [
    "ConfigurationError",
    "EmptyInputError",
]
