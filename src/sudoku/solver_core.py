"""Backtracking Sudoku solver: first empty cell in row-major order, digits ascending."""

from dataclasses import dataclass
from typing import Optional, Union

from .errors import SolverExhausted
from .grid import DIGITS, EMPTY, Cell, Grid, copy_grid, find_empty, is_legal
from src.utils.trace import Tracer, get_tracer


@dataclass(frozen=True)
class Solved:
    grid: Grid


@dataclass(frozen=True)
class Exhausted:
    """No digit admits a completion. `cell` is where the top-level search gave up."""

    cell: Optional[Cell] = None


SolveResult = Union[Solved, Exhausted]


def solve(grid: Grid, tracer: Optional[Tracer] = None) -> SolveResult:
    """
    Fill every empty cell of a conflict-free partial grid.
    The input grid is left untouched; the search runs on its own copy.
    Returns Solved(grid) or Exhausted when no completion exists.
    """
    tracer = tracer or get_tracer()
    work = copy_grid(grid)
    result = _search(work, 0, tracer)
    if isinstance(result, Exhausted):
        row, col = result.cell if result.cell else (None, None)
        tracer.log_exhausted(row, col)
    return result


def solve_in_place(grid: Grid, tracer: Optional[Tracer] = None) -> bool:
    """Solve `grid` in place. On failure the grid is left as it was given."""
    tracer = tracer or get_tracer()
    return isinstance(_search(grid, 0, tracer), Solved)


def complete(grid: Grid, tracer: Optional[Tracer] = None) -> Grid:
    """Like `solve`, but an exhausted search raises SolverExhausted."""
    result = solve(grid, tracer)
    if isinstance(result, Exhausted):
        raise SolverExhausted(result.cell)
    return result.grid


def _search(grid: Grid, depth: int, tracer: Tracer) -> SolveResult:
    cell = find_empty(grid)
    if cell is None:
        tracer.log_solution_found(depth=depth)
        return Solved(grid)

    row, col = cell
    for digit in DIGITS:
        if not is_legal(grid, row, col, digit):
            continue
        grid[row][col] = digit
        tracer.log_place(row, col, digit, depth=depth + 1)
        result = _search(grid, depth + 1, tracer)
        if isinstance(result, Solved):
            return result
        # Undo before trying the next digit.
        grid[row][col] = EMPTY

    tracer.log_backtrack(row, col)
    return Exhausted(cell)


def count_solutions(grid: Grid, limit: int = 2) -> int:
    """
    Count completions of `grid`, stopping once `limit` is reached.
    Not traced: this is an advisory helper, the generator never calls it.
    """
    work = copy_grid(grid)
    return _count(work, limit)


def has_unique_solution(grid: Grid) -> bool:
    return count_solutions(grid, limit=2) == 1


def _count(grid: Grid, limit: int) -> int:
    cell = find_empty(grid)
    if cell is None:
        return 1
    row, col = cell
    found = 0
    for digit in DIGITS:
        if not is_legal(grid, row, col, digit):
            continue
        grid[row][col] = digit
        found += _count(grid, limit - found)
        grid[row][col] = EMPTY
        if found >= limit:
            break
    return found
