"""
Utility helpers for the boxstack project.

Small, reusable helpers that don't naturally belong in `geometry`,
`evaluation`, or `stackers`:

- Box-file loading and result writing (`io.py`)
- Matplotlib views of stacks (`plotting.py`)
- Timing via logging (`timing.py`)

`plotting` is not imported here so that matplotlib is only loaded when a
caller asks for it.
"""

__all__ = []
