"""
Timing helpers for the boxstack project.

`Timer` measures wall-clock time for a block and reports it through
logging rather than print, so timings show up alongside the rest of the
pipeline output and can be silenced with the log level.

    from boxstack.utils.timing import Timer

    with Timer("anneal") as t:
        result = solve(boxes, 100.0, 1.0)
    print(t.elapsed)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import logging
import time


logger = logging.getLogger(__name__)


@dataclass
class Timer:
    """
    Context manager for measuring wall-clock time of a code block.

    Attributes
    ----------
    name:
        Optional label used in the log message.
    elapsed:
        Duration in seconds. Available after the context exits.
    """

    name: Optional[str] = None
    level: int = logging.INFO
    start: float = 0.0
    end: float = 0.0
    elapsed: float = 0.0
    _logger: logging.Logger = field(default=logger, repr=False)

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end = time.perf_counter()
        self.elapsed = self.end - self.start
        self._logger.log(self.level, "%s took %.4f s", self.name or "block", self.elapsed)


__all__ = [
    "Timer",
]
