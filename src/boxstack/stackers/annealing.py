"""
Simulated-annealing refinement for the boxstack project.

The primary API is:

    anneal(seed_stack, pool, initial_temperature=..., cooling_rate=..., rng=...)

which searches for a taller valid stack starting from a seed:

- At each temperature, run a fixed number of trials.
- Each trial builds a candidate from the current stack with one of four
  neighbourhood moves (swap, remove-and-insert, replace, rebuild above a
  cut), each followed by `repair`.
- Taller candidates are always accepted; others are accepted with the
  Metropolis probability exp(delta / T).
- The best stack seen is tracked separately and returned.

Stacks are immutable tuples. Every move returns a new tuple, so the
current and best stacks never alias each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Union
import logging
import math
import random

from ..config import (
    ANNEAL_INNER_TRIALS,
    ANNEAL_MIN_TEMPERATURE,
    validate_annealing_params,
)
from ..exceptions import ConfigurationError
from ..geometry import (
    Orientation,
    Stack,
    fits_between,
    stack_height,
    used_box_ids,
)
from .dp_seed import prune_single_use


logger = logging.getLogger(__name__)

Move = Callable[[Stack, Sequence[Orientation], random.Random], Stack]
CoolingSchedule = Callable[[float, float, float], float]


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------

def repair(stack: Sequence[Orientation], start: int = 0) -> Stack:
    """
    Drop entries from `start` upward that do not fit on the entry below.

    Each entry is compared with the entry that is *now* directly beneath
    it, so removals cascade within the single pass. Entries below `start`
    are left as they are. The result for `start=0` is always nested, and
    repairing it again changes nothing.
    """
    start = max(0, min(start, len(stack)))
    kept: List[Orientation] = list(stack[:start])
    for o in stack[start:]:
        if not kept or o.fits_on(kept[-1]):
            kept.append(o)
    return tuple(kept)


def _unused(pool: Sequence[Orientation], used: Set[int]) -> List[Orientation]:
    return [o for o in pool if o.box_id not in used]


# ---------------------------------------------------------------------------
# Neighbourhood moves
# ---------------------------------------------------------------------------

def swap_move(stack: Stack, pool: Sequence[Orientation], rng: random.Random) -> Stack:
    """Exchange two entries, then repair from the lower position."""
    if len(stack) < 2:
        return stack
    i, j = sorted(rng.sample(range(len(stack)), 2))
    edited = list(stack)
    edited[i], edited[j] = edited[j], edited[i]
    return repair(edited, i)


def remove_insert_move(stack: Stack, pool: Sequence[Orientation], rng: random.Random) -> Stack:
    """
    Remove a random entry and try to put a random unused orientation in
    its place. The insertion only happens if the orientation fits between
    its new neighbours; the stack is repaired from that position either way.
    """
    if not stack:
        return stack
    pos = rng.randrange(len(stack))
    edited = list(stack[:pos]) + list(stack[pos + 1:])

    candidates = _unused(pool, used_box_ids(edited))
    if candidates:
        o = rng.choice(candidates)
        if fits_between(edited, o, pos):
            edited.insert(pos, o)
    return repair(edited, pos)


def replace_move(stack: Stack, pool: Sequence[Orientation], rng: random.Random) -> Stack:
    """
    Substitute the entry at a random position with an unused orientation
    that fits against both neighbours. No-op when nothing fits.
    """
    if not stack:
        return stack
    pos = rng.randrange(len(stack))
    others = list(stack[:pos]) + list(stack[pos + 1:])

    candidates = [
        o for o in _unused(pool, used_box_ids(others))
        if fits_between(others, o, pos)
    ]
    if not candidates:
        return stack

    edited = list(stack)
    edited[pos] = rng.choice(candidates)
    return repair(edited, pos + 1)


def rebuild_move(stack: Stack, pool: Sequence[Orientation], rng: random.Random) -> Stack:
    """
    Keep everything below a random cut and regrow the rest greedily.

    Unused orientations that fit on the entry just below the cut (any of
    them for a cut at the bottom) are shuffled, then appended one by one
    whenever they still fit on the current top and their box is not on
    the stack yet. The result can be shorter or longer than the input.
    """
    cut = rng.randrange(len(stack) + 1)
    rebuilt: List[Orientation] = list(stack[:cut])
    used = used_box_ids(rebuilt)

    candidates = _unused(pool, used)
    if rebuilt:
        base = rebuilt[-1]
        candidates = [o for o in candidates if o.fits_on(base)]
    rng.shuffle(candidates)

    for o in candidates:
        if o.box_id in used:
            continue
        if rebuilt and not o.fits_on(rebuilt[-1]):
            continue
        rebuilt.append(o)
        used.add(o.box_id)
    return tuple(rebuilt)


MOVES: Dict[str, Move] = {
    "swap": swap_move,
    "remove_insert": remove_insert_move,
    "replace": replace_move,
    "rebuild": rebuild_move,
}

# Smallest stack each move needs to do anything.
_MIN_LENGTH: Dict[str, int] = {
    "swap": 2,
    "remove_insert": 1,
    "replace": 1,
    "rebuild": 0,
}


def neighbour(stack: Stack, pool: Sequence[Orientation], rng: random.Random) -> Stack:
    """
    Produce one candidate from `stack` with a uniformly chosen move.

    Moves that need more entries than the stack has are left out of the
    draw, so an empty stack always gets a rebuild.
    """
    names = [name for name in MOVES if len(stack) >= _MIN_LENGTH[name]]
    return MOVES[rng.choice(names)](stack, pool, rng)


# ---------------------------------------------------------------------------
# Cooling schedules
# ---------------------------------------------------------------------------

def geometric_cooling(
    temperature: float,
    initial_temperature: float,
    cooling_rate: float,
) -> float:
    """
    Multiply by (1 - cooling_rate / initial_temperature).

    The first step lowers the temperature by exactly `cooling_rate`;
    later steps shrink proportionally.
    """
    return temperature * (1.0 - cooling_rate / initial_temperature)


def linear_cooling(
    temperature: float,
    initial_temperature: float,
    cooling_rate: float,
) -> float:
    """Subtract `cooling_rate` at every step."""
    return temperature - cooling_rate


COOLING_SCHEDULES: Dict[str, CoolingSchedule] = {
    "geometric": geometric_cooling,
    "linear": linear_cooling,
}


def resolve_schedule(schedule: Union[str, CoolingSchedule, None]) -> CoolingSchedule:
    """
    Map a schedule name (or None for the default) to its function.
    Callables are returned unchanged.
    """
    if schedule is None:
        return geometric_cooling
    if callable(schedule):
        return schedule
    try:
        return COOLING_SCHEDULES[schedule.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown cooling schedule {schedule!r}; "
            f"expected one of {sorted(COOLING_SCHEDULES)}."
        ) from None


# ---------------------------------------------------------------------------
# Annealing core
# ---------------------------------------------------------------------------

@dataclass
class AnnealingStats:
    """
    Summary of an annealing run.

    `best_history` holds the best height after each temperature step and
    never decreases.
    """

    best: Stack
    initial_height: int
    final_height: int
    accepted_moves: int = 0
    rejected_moves: int = 0
    improved_moves: int = 0
    temperature_steps: int = 0
    best_history: List[int] = field(default_factory=list)

    @property
    def improvement(self) -> int:
        return self.final_height - self.initial_height


def anneal(
    seed_stack: Sequence[Orientation],
    pool: Sequence[Orientation],
    initial_temperature: float,
    cooling_rate: float,
    rng: Optional[random.Random] = None,
    schedule: Union[str, CoolingSchedule, None] = None,
    inner_trials: int = ANNEAL_INNER_TRIALS,
    min_temperature: float = ANNEAL_MIN_TEMPERATURE,
    track_stats: bool = False,
) -> Union[Stack, AnnealingStats]:
    """
    Refine `seed_stack` by simulated annealing over `pool`.

    Parameters
    ----------
    seed_stack:
        Starting stack, bottom-to-top. It may reuse a box or break
        containment (e.g. a raw DP seed); repeated boxes are dropped and
        the rest is repaired before use.
    pool:
        The full orientation pool that moves draw replacements from.
    initial_temperature, cooling_rate:
        Both must be positive, otherwise `ConfigurationError` is raised
        before any trial runs.
    rng:
        Random source for move selection and acceptance. A fresh
        `random.Random()` is used if None.
    schedule:
        'geometric' (default), 'linear', or a callable
            f(temperature, initial_temperature, cooling_rate) -> temperature
        that must strictly lower the temperature.
    inner_trials:
        Trials per temperature step.
    min_temperature:
        The loop stops once the temperature is at or below this value.
    track_stats:
        If True, return an `AnnealingStats` (with the best stack in
        `.best`) instead of just the best stack.

    Returns
    -------
    Stack or AnnealingStats
        The tallest valid stack seen.
    """
    validate_annealing_params(initial_temperature, cooling_rate, min_temperature)
    cool = resolve_schedule(schedule)
    rng = rng if rng is not None else random.Random()

    current: Stack = repair(prune_single_use(seed_stack))
    current_height = stack_height(current)
    best, best_height = current, current_height

    stats = AnnealingStats(best=best, initial_height=best_height, final_height=best_height)

    temperature = float(initial_temperature)
    while temperature > min_temperature:
        for _ in range(inner_trials):
            candidate = neighbour(current, pool, rng)
            candidate_height = stack_height(candidate)
            delta = candidate_height - current_height

            if delta > 0 or rng.random() < math.exp(delta / temperature):
                current, current_height = candidate, candidate_height
                stats.accepted_moves += 1
                if candidate_height > best_height:
                    best, best_height = candidate, candidate_height
                    stats.improved_moves += 1
            else:
                stats.rejected_moves += 1

        stats.temperature_steps += 1
        stats.best_history.append(best_height)

        next_temperature = cool(temperature, initial_temperature, cooling_rate)
        if next_temperature >= temperature:
            raise ConfigurationError(
                f"Cooling schedule did not lower the temperature "
                f"({temperature!r} -> {next_temperature!r})."
            )
        logger.debug(
            "T=%.4f current=%d best=%d accepted=%d",
            temperature, current_height, best_height, stats.accepted_moves,
        )
        temperature = next_temperature

    stats.best = best
    stats.final_height = best_height
    logger.info(
        "Annealing finished after %d steps: height %d -> %d",
        stats.temperature_steps, stats.initial_height, best_height,
    )

    if track_stats:
        return stats
    return best


__all__ = [
    "Move",
    "CoolingSchedule",
    "repair",
    "swap_move",
    "remove_insert_move",
    "replace_move",
    "rebuild_move",
    "MOVES",
    "neighbour",
    "geometric_cooling",
    "linear_cooling",
    "COOLING_SCHEDULES",
    "resolve_schedule",
    "AnnealingStats",
    "anneal",
]
