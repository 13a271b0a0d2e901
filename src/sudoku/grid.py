"""Grid primitives and the legality predicate shared by solver, generator and session."""

from typing import Iterable, List, Optional, Set, Tuple

Grid = List[List[int]]
FixedMask = List[List[bool]]
Cell = Tuple[int, int]

SIZE = 9
BOX = 3
EMPTY = 0
DIGITS = range(1, SIZE + 1)


def empty_grid() -> Grid:
    return [[EMPTY] * SIZE for _ in range(SIZE)]


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def box_origin(row: int, col: int) -> Cell:
    return row - row % BOX, col - col % BOX


def is_legal(grid: Grid, row: int, col: int, digit: int) -> bool:
    """
    Return True when `digit` does not already appear in the row, column or 3x3 box
    of (row, col). The cell's own content is not inspected, so callers asking about
    a filled cell get "would this digit be legal here if the cell were empty".
    """
    for x in range(SIZE):
        if grid[row][x] == digit or grid[x][col] == digit:
            return False

    start_row, start_col = box_origin(row, col)
    for r in range(start_row, start_row + BOX):
        for c in range(start_col, start_col + BOX):
            if grid[r][c] == digit:
                return False
    return True


def is_valid_move(grid: Grid, row: int, col: int, value: int) -> bool:
    """Advisory check for UIs: would `value` at (row, col) clash with its peers?"""
    if value == EMPTY:
        return True
    return is_legal(_without(grid, row, col), row, col, value)


def find_empty(grid: Grid) -> Optional[Cell]:
    for r in range(SIZE):
        for c in range(SIZE):
            if grid[r][c] == EMPTY:
                return r, c
    return None


def is_complete(grid: Grid) -> bool:
    return find_empty(grid) is None


def units() -> Iterable[List[Cell]]:
    for r in range(SIZE):
        yield [(r, c) for c in range(SIZE)]
    for c in range(SIZE):
        yield [(r, c) for r in range(SIZE)]
    for br in range(0, SIZE, BOX):
        for bc in range(0, SIZE, BOX):
            yield [(br + dr, bc + dc) for dr in range(BOX) for dc in range(BOX)]


def conflicts(grid: Grid) -> Set[Cell]:
    """Every filled cell whose digit repeats somewhere in one of its units."""
    clashing: Set[Cell] = set()
    for unit in units():
        seen = {}
        for r, c in unit:
            value = grid[r][c]
            if value == EMPTY:
                continue
            if value in seen:
                clashing.add((r, c))
                clashing.add(seen[value])
            else:
                seen[value] = (r, c)
    return clashing


def satisfies_no_repeat(grid: Grid) -> bool:
    return not conflicts(grid)


def fixed_mask(puzzle: Grid) -> FixedMask:
    return [[value != EMPTY for value in row] for row in puzzle]


def check_cell(row: int, col: int) -> None:
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise ValueError(f"Cell ({row}, {col}) is outside the 9x9 grid")


def check_shape(grid: Grid) -> None:
    """Raise ValueError unless `grid` is 9 rows of 9 ints in 0..9."""
    if not isinstance(grid, list) or len(grid) != SIZE:
        raise ValueError("Grid must have 9 rows")
    for row in grid:
        if not isinstance(row, list) or len(row) != SIZE:
            raise ValueError("Every grid row must have 9 cells")
        for value in row:
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= SIZE:
                raise ValueError(f"Grid values must be ints in 0..9, got {value!r}")


def _without(grid: Grid, row: int, col: int) -> Grid:
    if grid[row][col] == EMPTY:
        return grid
    trial = copy_grid(grid)
    trial[row][col] = EMPTY
    return trial
