"""Top-level solve interface.

Expose `solve_puzzle(puzzle)` that accepts a 9x9 grid, an 81-character puzzle
string, or a record produced by `src.sudoku.loader.load_puzzles`.
"""

from typing import Any

from src.sudoku import solver_core
from src.sudoku.grid import Grid, check_shape, satisfies_no_repeat
from src.sudoku.parser import parse_initial_state


def solve_puzzle(puzzle: Any) -> Grid:
    """
    Solve a puzzle and return the completed grid.
    Accepts:
      - 9x9 lists of ints (0 for empty)
      - 81-character strings (parsed via `parse_initial_state`)
      - Loader records with a "puzzle" entry
    Returns an empty list when the puzzle has clashing givens or no completion.
    """
    if isinstance(puzzle, dict):
        puzzle = puzzle.get("puzzle", "")

    if isinstance(puzzle, str):
        grid = parse_initial_state(puzzle)
    elif isinstance(puzzle, list):
        grid = [list(row) for row in puzzle]
        check_shape(grid)
    else:
        raise TypeError("solve_puzzle expects a grid, a puzzle string or a puzzle record")

    # The search assumes conflict-free givens.
    if not satisfies_no_repeat(grid):
        return []

    result = solver_core.solve(grid)
    if isinstance(result, solver_core.Solved):
        return result.grid
    return []


__all__ = ["solve_puzzle"]
