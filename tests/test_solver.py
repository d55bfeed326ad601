"""
End-to-end tests for boxstack.solver

Scenarios:
- Three nested cubes stack to height 9 in decreasing order
- A single box stands on its smallest footprint
- Bad configuration and empty input are rejected before any work
- Random box sets always produce valid stacks at least as tall as the seed
- Multi-start runs and the command line
"""

from __future__ import annotations

import random
import runpy
from pathlib import Path

import pytest

from boxstack.evaluation import validate_stack_frame
from boxstack.exceptions import ConfigurationError, EmptyInputError
from boxstack.geometry import Orientation, boxes_from_dims, is_valid_stack
from boxstack.solver import main, solve, solve_multi_start
from boxstack.utils.io import save_stack_csv


CUBES = [(4, 4, 4), (3, 3, 3), (2, 2, 2)]
SCORE_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "score_stack.py"


def test_nested_cubes_use_every_box():
    result = solve(boxes_from_dims(CUBES), 10.0, 1.0, rng=random.Random(0))

    assert result.height == 9
    assert result.height >= result.seed_height
    assert result.rows() == [(2, 2, 2, 2), (3, 3, 3, 5), (4, 4, 4, 9)]


@pytest.mark.parametrize("seed_strategy", ["dp", "greedy"])
def test_single_box_stands_on_smallest_footprint(seed_strategy):
    result = solve(
        boxes_from_dims([(5, 6, 7)]), 10.0, 1.0, rng=random.Random(4), seed_strategy=seed_strategy
    )

    assert result.height == 7
    assert result.rows() == [(5, 6, 7, 7)]


def test_empty_input_is_rejected():
    with pytest.raises(EmptyInputError):
        solve([], 10.0, 1.0)


@pytest.mark.parametrize(
    "initial_temperature, cooling_rate",
    [(0.0, 1.0), (10.0, 0.0), (-1.0, -1.0)],
)
def test_configuration_is_checked_before_input(initial_temperature, cooling_rate):
    # Even with no boxes, the configuration error comes first.
    with pytest.raises(ConfigurationError):
        solve([], initial_temperature, cooling_rate)


def test_unknown_seed_strategy_is_rejected_up_front():
    boxes = boxes_from_dims(CUBES)
    with pytest.raises(ConfigurationError):
        solve(boxes, 10.0, 1.0, seed_strategy="random")
    with pytest.raises(ConfigurationError):
        solve_multi_start(boxes, 10.0, 1.0, runs=2, workers=2, seed_strategy="random")
    # Checked before the empty-input error as well.
    with pytest.raises(ConfigurationError):
        solve([], 10.0, 1.0, seed_strategy="bogus")


@pytest.mark.parametrize("seed", range(12))
def test_random_instances_give_valid_stacks(seed):
    rng = random.Random(seed)
    dims = [(rng.randint(1, 12), rng.randint(1, 12), rng.randint(1, 12)) for _ in range(rng.randint(1, 12))]

    result = solve(boxes_from_dims(dims), 5.0, 1.0, rng=rng)

    assert is_valid_stack(result.stack)
    assert result.height >= result.seed_height
    # Independent shapely-based check of the same result
    validate_stack_frame(result.to_frame(), strict=True)


def test_multi_start_in_process_is_reproducible():
    boxes = boxes_from_dims([(3, 5, 7), (2, 9, 4), (6, 6, 1), (8, 2, 5), (4, 4, 10)])

    a = solve_multi_start(boxes, 5.0, 1.0, runs=3, workers=1, seed=21)
    b = solve_multi_start(boxes, 5.0, 1.0, runs=3, workers=1, seed=21)

    assert a.stack == b.stack
    assert a.run_index == b.run_index
    assert is_valid_stack(a.stack)


def test_multi_start_keeps_the_tallest_run():
    boxes = boxes_from_dims([(3, 5, 7), (2, 9, 4), (6, 6, 1), (8, 2, 5), (4, 4, 10)])

    best = solve_multi_start(boxes, 5.0, 1.0, runs=3, workers=1, seed=8)
    singles = [
        solve(boxes, 5.0, 1.0, rng=random.Random(8 + k), run_index=k) for k in range(3)
    ]
    assert best.height == max(r.height for r in singles)


def test_multi_start_with_worker_processes():
    boxes = boxes_from_dims(CUBES)
    result = solve_multi_start(boxes, 5.0, 1.0, runs=2, workers=2, seed=1)
    assert result.height == 9


def test_multi_start_rejects_zero_runs():
    with pytest.raises(ConfigurationError):
        solve_multi_start(boxes_from_dims(CUBES), 5.0, 1.0, runs=0)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

def test_cli_prints_stack_top_to_bottom(tmp_path, capsys):
    box_file = tmp_path / "boxes.txt"
    box_file.write_text("4 4 4\n3 3 3\nnot a box\n2 2 2\n")
    out_csv = tmp_path / "out" / "stack.csv"

    main([str(box_file), "10", "1", "--seed", "3", "--output", str(out_csv)])

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["2 2 2 2", "3 3 3 5", "4 4 4 9"]
    assert out_csv.exists()


def test_cli_reports_missing_file(tmp_path):
    with pytest.raises(SystemExit):
        main([str(tmp_path / "missing.txt"), "10", "1"])


def test_cli_reports_empty_input(tmp_path):
    box_file = tmp_path / "boxes.txt"
    box_file.write_text("0 1 2\n-1 2 3\n")
    with pytest.raises(SystemExit):
        main([str(box_file), "10", "1"])


def test_cli_reports_bad_configuration(tmp_path):
    box_file = tmp_path / "boxes.txt"
    box_file.write_text("1 2 3\n")
    with pytest.raises(SystemExit):
        main([str(box_file), "0", "1"])


def test_score_script_summarises_tables(tmp_path, capsys):
    score_main = runpy.run_path(str(SCORE_SCRIPT))["main"]
    good = save_stack_csv((Orientation(4, 4, 4, 0), Orientation(2, 2, 2, 1)), tmp_path / "good.csv")
    reused = save_stack_csv((Orientation(4, 4, 4, 0), Orientation(2, 2, 2, 0)), tmp_path / "reused.csv")

    assert score_main([str(good)]) == 0
    assert "good.csv" in capsys.readouterr().out

    assert score_main([str(good), str(reused)]) == 1
    assert "more than once" in capsys.readouterr().out


def test_score_script_checks_rows_against_box_file(tmp_path, capsys):
    score_main = runpy.run_path(str(SCORE_SCRIPT))["main"]
    table = save_stack_csv((Orientation(4, 4, 4, 0), Orientation(2, 2, 2, 1)), tmp_path / "stack.csv")
    matching = tmp_path / "boxes.txt"
    matching.write_text("4 4 4\n2 2 2\n")
    other = tmp_path / "other.txt"
    other.write_text("4 4 4\n2 2 5\n")

    assert score_main([str(table), "--boxes", str(matching)]) == 0
    assert score_main([str(table), "--boxes", str(other)]) == 1
    assert "does not match" in capsys.readouterr().out
