"""
Tests for boxstack.stackers.annealing

These tests focus on:
- repair dropping unnested entries in a single cascading pass
- every neighbourhood move keeping a valid stack valid
- the annealer rejecting bad configuration before running
- the best height never decreasing over a run
- the cooling schedules and their step counts
- the Metropolis rule for downhill candidates
"""

from __future__ import annotations

import random

import pytest

import boxstack.stackers.annealing as annealing_module
from boxstack.config import set_global_seeds, validate_annealing_params
from boxstack.exceptions import ConfigurationError
from boxstack.geometry import (
    Orientation,
    boxes_from_dims,
    expand_orientations,
    is_nested,
    is_valid_stack,
    stack_height,
)
from boxstack.stackers.annealing import (
    MOVES,
    AnnealingStats,
    anneal,
    geometric_cooling,
    linear_cooling,
    neighbour,
    rebuild_move,
    repair,
    replace_move,
    resolve_schedule,
)
from boxstack.stackers.dp_seed import dp_reusable_stack, greedy_area_stack


def _sq(side: int, box_id: int, height: int = 1) -> Orientation:
    return Orientation(side, side, height, box_id)


def _random_pool(rng: random.Random, n_boxes: int, max_dim: int = 10):
    boxes = boxes_from_dims(
        [(rng.randint(1, max_dim), rng.randint(1, max_dim), rng.randint(1, max_dim)) for _ in range(n_boxes)]
    )
    return expand_orientations(boxes)


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------

def test_repair_compares_with_the_entry_now_below():
    # 11 is dropped, after which 9 fits on 10 and is kept.
    stack = (_sq(10, 0), _sq(11, 1), _sq(9, 2))
    assert repair(stack) == (_sq(10, 0), _sq(9, 2))


def test_repair_cascades_over_several_removals():
    stack = (_sq(10, 0), _sq(4, 1), _sq(9, 2), _sq(3, 3), _sq(8, 4), _sq(2, 5))
    assert repair(stack) == (_sq(10, 0), _sq(4, 1), _sq(3, 3), _sq(2, 5))


def test_repair_leaves_entries_below_start_alone():
    stack = (_sq(3, 0), _sq(5, 1), _sq(2, 2))
    assert repair(stack, 1) == (_sq(3, 0), _sq(2, 2))
    assert repair(stack, 2) == stack
    assert repair(stack, 99) == stack


def test_repair_of_empty_and_single_stacks():
    assert repair(()) == ()
    assert repair((_sq(3, 0),)) == (_sq(3, 0),)


@pytest.mark.parametrize("seed", range(30))
def test_repair_is_idempotent(seed):
    rng = random.Random(seed)
    pool = _random_pool(rng, 8)
    stack = tuple(rng.sample(pool, rng.randint(0, len(pool))))
    start = rng.randint(0, len(stack))

    once = repair(stack, start)
    assert repair(once, start) == once
    assert is_nested(repair(stack))


# ---------------------------------------------------------------------------
# Moves
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("name", sorted(MOVES))
@pytest.mark.parametrize("seed", range(10))
def test_each_move_keeps_stacks_valid(name, seed):
    rng = random.Random(seed)
    pool = _random_pool(rng, 12)
    stack = greedy_area_stack(pool)
    move = MOVES[name]

    for _ in range(40):
        before = list(stack)
        candidate = move(stack, pool, rng)
        assert isinstance(candidate, tuple)
        assert is_valid_stack(candidate)
        # The input stack is left untouched
        assert list(stack) == before
        stack = candidate


def test_moves_on_empty_stack_only_rebuild():
    rng = random.Random(0)
    pool = expand_orientations(boxes_from_dims([(4, 4, 4), (3, 3, 3)]))

    for name in ("swap", "remove_insert", "replace"):
        assert MOVES[name]((), pool, rng) == ()

    for _ in range(10):
        candidate = neighbour((), pool, rng)
        assert candidate
        assert is_valid_stack(candidate)


def test_replace_is_a_no_op_when_nothing_fits():
    stack = (_sq(10, 0), _sq(5, 1), _sq(1, 2))
    pool = [
        Orientation(2, 30, 1, 0),
        Orientation(1, 20, 3, 1),
        Orientation(1, 40, 1, 2),
    ]
    rng = random.Random(1)
    for _ in range(10):
        assert replace_move(stack, pool, rng) == stack


def test_rebuild_from_bottom_uses_each_box_once():
    pool = expand_orientations(boxes_from_dims([(1, 2, 3), (4, 5, 6), (7, 8, 9)]))
    rng = random.Random(5)
    for _ in range(20):
        rebuilt = rebuild_move((), pool, rng)
        assert is_valid_stack(rebuilt)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "initial_temperature, cooling_rate",
    [(0.0, 1.0), (-5.0, 1.0), (10.0, 0.0), (10.0, -0.5)],
)
def test_anneal_rejects_non_positive_parameters(initial_temperature, cooling_rate):
    pool = expand_orientations(boxes_from_dims([(1, 2, 3)]))
    with pytest.raises(ConfigurationError):
        anneal((), pool, initial_temperature, cooling_rate)


def test_validate_annealing_params_rejects_zero_threshold():
    validate_annealing_params(10.0, 1.0)
    with pytest.raises(ConfigurationError):
        validate_annealing_params(10.0, 1.0, min_temperature=0.0)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_annealing_params(0.0, 1.0)


def test_schedule_that_does_not_cool_is_rejected():
    pool = expand_orientations(boxes_from_dims([(1, 2, 3)]))
    with pytest.raises(ConfigurationError):
        anneal((), pool, 10.0, 1.0, rng=random.Random(0), schedule=lambda t, t0, r: t)


def test_unknown_schedule_name_is_rejected():
    with pytest.raises(ConfigurationError):
        resolve_schedule("exponential")


def test_set_global_seeds_returns_seed():
    assert set_global_seeds(42) == 42


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

def test_cooling_functions():
    assert geometric_cooling(10.0, 10.0, 1.0) == pytest.approx(9.0)
    assert geometric_cooling(5.0, 10.0, 1.0) == pytest.approx(4.5)
    assert linear_cooling(5.0, 10.0, 1.0) == pytest.approx(4.0)
    assert resolve_schedule(None) is geometric_cooling
    assert resolve_schedule("Linear") is linear_cooling


def test_geometric_schedule_step_count():
    pool = expand_orientations(boxes_from_dims([(4, 4, 4), (3, 3, 3)]))
    stats = anneal((), pool, 10.0, 5.0, rng=random.Random(0), inner_trials=3, track_stats=True)

    # 10 * 0.5**k stays above 1e-3 for k = 0..13
    assert stats.temperature_steps == 14
    assert stats.accepted_moves + stats.rejected_moves == 14 * 3


def test_linear_schedule_step_count():
    pool = expand_orientations(boxes_from_dims([(4, 4, 4), (3, 3, 3)]))
    stats = anneal(
        (), pool, 2.0, 0.5, rng=random.Random(0), schedule="linear", inner_trials=2, track_stats=True
    )
    # 2.0, 1.5, 1.0, 0.5 then 0.0 stops the loop
    assert stats.temperature_steps == 4


def test_cooling_rate_above_initial_temperature_runs_one_step():
    pool = expand_orientations(boxes_from_dims([(4, 4, 4)]))
    stats = anneal((), pool, 1.0, 2.0, rng=random.Random(0), track_stats=True)
    assert stats.temperature_steps == 1


# ---------------------------------------------------------------------------
# Annealing runs
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("seed", range(8))
def test_best_height_never_decreases(seed):
    rng = random.Random(seed)
    pool = _random_pool(rng, 10)
    start = greedy_area_stack(pool)

    stats = anneal(start, pool, 5.0, 1.0, rng=rng, track_stats=True)

    assert isinstance(stats, AnnealingStats)
    history = [stats.initial_height] + stats.best_history
    assert all(a <= b for a, b in zip(history, history[1:]))
    assert stats.final_height == history[-1] == stack_height(stats.best)
    assert stats.improvement >= 0
    assert is_valid_stack(stats.best)


def test_anneal_repairs_an_unnested_seed():
    pool = [
        Orientation(4, 9, 1, 0),
        Orientation(1, 4, 9, 0),
        Orientation(1, 9, 4, 0),
        Orientation(5, 10, 1, 1),
        Orientation(1, 5, 10, 1),
        Orientation(1, 10, 5, 1),
    ]
    seed = (Orientation(4, 9, 1, 0), Orientation(5, 10, 1, 1))

    stats = anneal(seed, pool, 10.0, 1.0, rng=random.Random(2), track_stats=True)

    assert stats.initial_height == 1
    assert is_valid_stack(stats.best)
    assert stats.final_height >= stats.initial_height


def test_anneal_is_reproducible_with_same_rng_seed():
    pool = _random_pool(random.Random(11), 10)
    start = greedy_area_stack(pool)

    a = anneal(start, pool, 10.0, 1.0, rng=random.Random(99))
    b = anneal(start, pool, 10.0, 1.0, rng=random.Random(99))
    assert a == b


def test_anneal_returns_stack_without_stats():
    pool = expand_orientations(boxes_from_dims([(5, 6, 7)]))
    best = anneal((), pool, 10.0, 1.0, rng=random.Random(0))
    assert isinstance(best, tuple)
    assert stack_height(best) == 7


def test_anneal_drops_reused_boxes_from_seed():
    # The reusable DP stacks two orientations of the single box.
    pool = expand_orientations(boxes_from_dims([(1, 2, 3)]))
    seed = dp_reusable_stack(pool)
    assert len(seed) == 2 and seed[0].box_id == seed[1].box_id

    stats = anneal(seed, pool, 10.0, 1.0, rng=random.Random(0), track_stats=True)

    assert stats.initial_height == 1
    assert is_valid_stack(stats.best)
    assert stats.final_height == 3


# ---------------------------------------------------------------------------
# Acceptance rule
# ---------------------------------------------------------------------------

_TALL = (_sq(5, 0, height=10),)
_SHORT = (_sq(5, 0, height=9),)


def _alternate(stack, pool, rng):
    # From the tall stack the only candidate is one unit shorter, and back.
    return _SHORT if stack == _TALL else _TALL


class _FixedRandom(random.Random):
    def random(self):
        return 0.5


def test_hot_run_accepts_downhill_candidates(monkeypatch):
    monkeypatch.setattr(annealing_module, "neighbour", _alternate)

    # 1000 then 500: two steps of 20 trials, exp(-1/T) is close to 1.
    stats = anneal(
        _TALL, [], 1000.0, 500.0, rng=random.Random(0), schedule="linear", track_stats=True
    )

    assert stats.temperature_steps == 2
    assert stats.accepted_moves > 30
    assert stats.best == _TALL
    assert stats.final_height == 10


def test_cold_run_rejects_downhill_candidates(monkeypatch):
    monkeypatch.setattr(annealing_module, "neighbour", _alternate)

    # 0.01, 0.006, 0.002: exp(-1/T) is negligible at every step.
    stats = anneal(
        _TALL, [], 0.01, 0.004, rng=random.Random(0), schedule="linear", track_stats=True
    )

    assert stats.temperature_steps == 3
    assert stats.accepted_moves == 0
    assert stats.rejected_moves == 60
    assert stats.best == _TALL


@pytest.mark.parametrize(
    "temperature, accepted",
    [
        (2.0, True),  # exp(-0.5) ~ 0.61 > 0.5
        (1.0, False),  # exp(-1) ~ 0.37 < 0.5
    ],
)
def test_downhill_acceptance_threshold_is_exp_delta_over_t(monkeypatch, temperature, accepted):
    monkeypatch.setattr(annealing_module, "neighbour", _alternate)

    stats = anneal(
        _TALL,
        [],
        temperature,
        temperature,
        rng=_FixedRandom(0),
        schedule="linear",
        inner_trials=1,
        track_stats=True,
    )

    assert stats.temperature_steps == 1
    assert stats.accepted_moves == int(accepted)
    assert stats.rejected_moves == int(not accepted)
    assert stats.best == _TALL
