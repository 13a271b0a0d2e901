"""Unit tests for grid helpers and the legality predicate."""

import random

import pytest

from src.sudoku.grid import (
    check_shape,
    conflicts,
    empty_grid,
    find_empty,
    fixed_mask,
    is_complete,
    is_legal,
    is_valid_move,
    satisfies_no_repeat,
)


def _reference_is_legal(grid, row, col, digit):
    br, bc = 3 * (row // 3), 3 * (col // 3)
    seen = set(grid[row]) | {grid[r][col] for r in range(9)}
    seen |= {grid[r][c] for r in range(br, br + 3) for c in range(bc, bc + 3)}
    return digit not in seen


def test_is_legal_accepts_only_the_solution_digit_in_a_blanked_cell(classic_solution):
    for row in range(9):
        for col in range(9):
            grid = [list(r) for r in classic_solution]
            expected = grid[row][col]
            grid[row][col] = 0
            legal = [d for d in range(1, 10) if is_legal(grid, row, col, d)]
            assert legal == [expected]


def test_is_legal_rejects_every_digit_on_a_complete_solution(classic_solution):
    for row in range(9):
        for col in range(9):
            assert not any(is_legal(classic_solution, row, col, d) for d in range(1, 10))


def test_is_legal_matches_reference_on_partial_grids(classic_solution):
    rng = random.Random(7)
    for _ in range(20):
        grid = [list(r) for r in classic_solution]
        for _ in range(rng.randint(20, 70)):
            grid[rng.randrange(9)][rng.randrange(9)] = 0
        for row in range(9):
            for col in range(9):
                for digit in range(1, 10):
                    assert is_legal(grid, row, col, digit) == _reference_is_legal(grid, row, col, digit)


def test_is_legal_checks_box_from_its_origin():
    grid = empty_grid()
    grid[4][4] = 7
    assert not is_legal(grid, 3, 5, 7)
    assert is_legal(grid, 2, 2, 7)


def test_is_valid_move_ignores_the_cells_own_value(classic_solution):
    assert is_valid_move(classic_solution, 0, 0, 5)
    assert not is_valid_move(classic_solution, 0, 0, 3)
    assert is_valid_move(classic_solution, 0, 0, 0)


def test_find_empty_is_row_major():
    grid = empty_grid()
    for c in range(9):
        grid[0][c] = c + 1
    grid[1][0] = 4
    assert find_empty(grid) == (1, 1)


def test_is_complete(classic_solution):
    assert is_complete(classic_solution)
    classic_solution[8][8] = 0
    assert not is_complete(classic_solution)


def test_conflicts_reports_both_clashing_cells():
    grid = empty_grid()
    grid[0][0] = 3
    grid[0][8] = 3
    grid[5][5] = 1
    assert conflicts(grid) == {(0, 0), (0, 8)}
    assert not satisfies_no_repeat(grid)


def test_solution_satisfies_no_repeat(classic_solution):
    assert satisfies_no_repeat(classic_solution)
    assert conflicts(classic_solution) == set()


def test_fixed_mask_marks_nonzero_cells():
    grid = empty_grid()
    grid[2][3] = 9
    mask = fixed_mask(grid)
    assert mask[2][3]
    assert sum(cell for row in mask for cell in row) == 1


@pytest.mark.parametrize(
    "grid",
    [
        [[0] * 9 for _ in range(8)],
        [[0] * 8 for _ in range(9)],
        [[10] + [0] * 8] + [[0] * 9 for _ in range(8)],
        [[True] + [0] * 8] + [[0] * 9 for _ in range(8)],
    ],
)
def test_check_shape_rejects_bad_grids(grid):
    with pytest.raises(ValueError):
        check_shape(grid)
