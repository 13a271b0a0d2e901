"""Puzzle text import/export.

Text format: 81 characters once whitespace is stripped, row-major. `1`-`9` is a
filled cell; any other character (`0`, `.`, ...) is empty.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Optional

from .config import DEFAULT_CELLS_TO_REMOVE
from .errors import MalformedPuzzleText
from .generator import GeneratedPuzzle, generate
from .grid import BOX, EMPTY, SIZE, Grid, copy_grid

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")
_DIGIT = re.compile(r"[1-9]")


def parse_initial_state(text: str) -> Grid:
    clean = _WHITESPACE.sub("", text or "")
    if len(clean) != SIZE * SIZE:
        raise MalformedPuzzleText(len(clean))

    grid: Grid = []
    for r in range(SIZE):
        row = []
        for c in range(SIZE):
            char = clean[r * SIZE + c]
            row.append(int(char) if _DIGIT.fullmatch(char) else EMPTY)
        grid.append(row)
    return grid


def serialize_grid(grid: Grid, blank: str = ".") -> str:
    return "".join(str(value) if value != EMPTY else blank for row in grid for value in row)


def puzzle_from_text(text: str) -> GeneratedPuzzle:
    """
    Author-supplied state: used as both puzzle and solution, with no solving
    and no legality or completeness check.
    """
    grid = parse_initial_state(text)
    return GeneratedPuzzle(puzzle=grid, solution=copy_grid(grid))


def load_or_generate(
    text: Optional[str],
    cells_to_remove: int = DEFAULT_CELLS_TO_REMOVE,
    rng: Optional[random.Random] = None,
) -> GeneratedPuzzle:
    """Import `text` when it is a well-formed puzzle, otherwise generate a fresh one."""
    if text and text.strip():
        try:
            return puzzle_from_text(text)
        except MalformedPuzzleText as e:
            logger.warning("Ignoring initial state (%s); generating a puzzle instead", e)
    return generate(cells_to_remove=cells_to_remove, rng=rng)


def format_grid(grid: Grid, blank: str = ".") -> str:
    lines = []
    for r, row in enumerate(grid):
        if r and r % BOX == 0:
            lines.append("------+-------+------")
        chunks = []
        for start in range(0, SIZE, BOX):
            chunks.append(" ".join(str(v) if v != EMPTY else blank for v in row[start:start + BOX]))
        lines.append(" | ".join(chunks))
    return "\n".join(lines)
