"""Random puzzle generation: seed the diagonal boxes, solve, then blank cells."""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_CELLS_TO_REMOVE
from .grid import BOX, EMPTY, SIZE, DIGITS, FixedMask, Grid, copy_grid, empty_grid, fixed_mask
from .solver_core import complete
from src.utils.trace import Tracer, get_tracer

logger = logging.getLogger(__name__)

CELL_COUNT = SIZE * SIZE


@dataclass(frozen=True)
class GeneratedPuzzle:
    puzzle: Grid
    solution: Grid

    @property
    def fixed_mask(self) -> FixedMask:
        return fixed_mask(self.puzzle)

    @property
    def givens(self) -> int:
        return sum(1 for row in self.puzzle for value in row if value != EMPTY)


def seed_diagonal_boxes(grid: Grid, rng: random.Random, tracer: Optional[Tracer] = None) -> None:
    """
    Fill the boxes at (0,0), (3,3) and (6,6) with independent permutations of 1..9.
    Those boxes share no row, column or box, so no legality check is needed.
    """
    tracer = tracer or get_tracer()
    for origin in range(0, SIZE, BOX):
        digits = list(DIGITS)
        rng.shuffle(digits)
        for i, digit in enumerate(digits):
            grid[origin + i // BOX][origin + i % BOX] = digit
        tracer.log_seed(origin, origin)


def remove_cells(
    solution: Grid,
    cells_to_remove: int,
    rng: random.Random,
    tracer: Optional[Tracer] = None,
) -> Grid:
    """Blank `cells_to_remove` distinct cells picked uniformly at random from a copy of `solution`."""
    if not 0 <= cells_to_remove <= CELL_COUNT:
        raise ValueError(f"cells_to_remove must be in 0..{CELL_COUNT}, got {cells_to_remove}")
    filled = sum(1 for row in solution for value in row if value != EMPTY)
    if cells_to_remove > filled:
        raise ValueError(f"Cannot remove {cells_to_remove} cells from a grid with {filled} filled")

    tracer = tracer or get_tracer()
    puzzle = copy_grid(solution)
    removed = 0
    attempts = 0
    while removed < cells_to_remove:
        attempts += 1
        row = rng.randrange(SIZE)
        col = rng.randrange(SIZE)
        if puzzle[row][col] != EMPTY:
            puzzle[row][col] = EMPTY
            removed += 1
    tracer.log_remove(removed, attempts)
    return puzzle


def generate(
    cells_to_remove: int = DEFAULT_CELLS_TO_REMOVE,
    rng: Optional[random.Random] = None,
    tracer: Optional[Tracer] = None,
) -> GeneratedPuzzle:
    """
    Produce a random solved grid and a puzzle with `cells_to_remove` cells blanked.

    The puzzle is only guaranteed to have *a* solution (the returned one); whether
    it is unique is not checked.
    """
    rng = rng or random.Random()
    tracer = tracer or get_tracer()

    board = empty_grid()
    seed_diagonal_boxes(board, rng, tracer)
    # Seeded boxes never conflict, so exhaustion here is an internal fault and propagates.
    solution = complete(board, tracer)
    puzzle = remove_cells(solution, cells_to_remove, rng, tracer)

    logger.debug("Generated puzzle with %d givens", CELL_COUNT - cells_to_remove)
    return GeneratedPuzzle(puzzle=puzzle, solution=solution)
