"""
boxstack – tallest single-use box stack

This package contains the geometry, seeding, annealing and evaluation
logic for building a tall stack of boxes where each box may be rotated,
used at most once, and must fit strictly inside the box below it. See
the `stackers` and `utils` subpackages for the algorithms and helpers,
and `boxstack.solver` for the end-to-end pipeline.
"""

__all__ = []

__version__ = "0.1.0"
