"""Shared puzzle fixtures."""

import pytest

from src.sudoku.generator import GeneratedPuzzle
from src.sudoku.parser import puzzle_from_text

CLASSIC_TEXT = (
    "530070000"
    "600195000"
    "098000060"
    "800060003"
    "400803001"
    "700020006"
    "060000280"
    "000419005"
    "000080079"
)

CLASSIC_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]


@pytest.fixture
def classic_text():
    return CLASSIC_TEXT


@pytest.fixture
def classic_solution():
    return [list(row) for row in CLASSIC_SOLUTION]


@pytest.fixture
def classic_puzzle() -> GeneratedPuzzle:
    """The classic puzzle paired with its real solution (not the import path's puzzle == solution)."""
    imported = puzzle_from_text(CLASSIC_TEXT)
    return GeneratedPuzzle(puzzle=imported.puzzle, solution=[list(row) for row in CLASSIC_SOLUTION])
