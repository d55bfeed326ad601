"""
Test package for the boxstack project.

This directory collects unit and integration tests for the core modules:

- Geometry, orientations and footprints (`test_geometry.py`)
- Seeders and pruning (`test_seeding.py`)
- Repair, moves and annealing (`test_annealing.py`)
- End-to-end pipeline and CLI (`test_solver.py`)
- Result tables and validation (`test_evaluation.py`)
- Box files and result files (`test_io.py`)
- Plotting helpers (`test_plotting.py`)

You can run tests with:

    pytest
    # or
    python -m pytest

from the project root.
"""

__all__ = []
