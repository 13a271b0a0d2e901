"""Unit tests for the backtracking solver."""

import pytest

from src.sudoku import solver_core
from src.sudoku.errors import SolverExhausted
from src.sudoku.grid import empty_grid, is_complete, satisfies_no_repeat
from src.sudoku.parser import parse_initial_state
from src.utils.trace import Tracer


def _make_dead_end_grid():
    # Row 0 needs a 9 at (0, 8) but column 8 already holds one.
    grid = empty_grid()
    for c in range(8):
        grid[0][c] = c + 1
    grid[4][8] = 9
    return grid


def test_solver_fills_empty_grid():
    result = solver_core.solve(empty_grid(), Tracer(enabled=False))
    assert isinstance(result, solver_core.Solved)
    assert is_complete(result.grid)
    assert satisfies_no_repeat(result.grid)


def test_solver_is_deterministic_on_empty_grid():
    first = solver_core.solve(empty_grid(), Tracer(enabled=False))
    second = solver_core.solve(empty_grid(), Tracer(enabled=False))
    assert first.grid == second.grid
    # Ascending digits in row-major order start the first row at 1..9.
    assert first.grid[0] == list(range(1, 10))


def test_solver_solves_classic_puzzle(classic_text, classic_solution):
    grid = parse_initial_state(classic_text)
    result = solver_core.solve(grid, Tracer(enabled=False))
    assert isinstance(result, solver_core.Solved)
    assert result.grid == classic_solution


def test_solver_keeps_givens_and_leaves_input_untouched(classic_text):
    grid = parse_initial_state(classic_text)
    before = [list(row) for row in grid]
    result = solver_core.solve(grid, Tracer(enabled=False))
    assert grid == before
    for r in range(9):
        for c in range(9):
            if before[r][c]:
                assert result.grid[r][c] == before[r][c]


def test_solver_reports_exhaustion_as_a_result():
    result = solver_core.solve(_make_dead_end_grid(), Tracer(enabled=False))
    assert isinstance(result, solver_core.Exhausted)
    assert result.cell == (0, 8)


def test_solve_in_place_restores_grid_on_failure():
    grid = _make_dead_end_grid()
    before = [list(row) for row in grid]
    assert not solver_core.solve_in_place(grid, Tracer(enabled=False))
    assert grid == before


def test_solve_in_place_fills_grid(classic_text, classic_solution):
    grid = parse_initial_state(classic_text)
    assert solver_core.solve_in_place(grid, Tracer(enabled=False))
    assert grid == classic_solution


def test_complete_raises_on_exhaustion():
    with pytest.raises(SolverExhausted) as excinfo:
        solver_core.complete(_make_dead_end_grid(), Tracer(enabled=False))
    assert excinfo.value.cell == (0, 8)


def test_solver_records_trace_steps(classic_text):
    tracer = Tracer(enabled=True)
    solver_core.solve(parse_initial_state(classic_text), tracer)
    summary = tracer.summary()
    assert summary["num_placements"] >= 51
    assert summary["action_counts"]["solution_found"] == 1


def test_count_solutions(classic_text, classic_solution):
    assert solver_core.count_solutions(parse_initial_state(classic_text)) == 1
    assert solver_core.has_unique_solution(parse_initial_state(classic_text))
    assert solver_core.count_solutions(empty_grid(), limit=2) == 2
    assert solver_core.count_solutions(classic_solution) == 1
    assert solver_core.count_solutions(_make_dead_end_grid()) == 0
