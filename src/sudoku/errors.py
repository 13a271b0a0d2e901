"""Exceptions raised by the puzzle engine and the sync layer.

Cell-edit rule violations (fixed cell, non-editable candidate cell) are not
exceptions: they come back as ``EditOutcome`` values from the session.
"""

from typing import Optional, Tuple


class SudokuError(Exception):
    """Base class for every error raised by this package."""


class MalformedPuzzleText(SudokuError, ValueError):
    """Imported puzzle text does not hold exactly 81 meaningful characters."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Puzzle text must be 81 characters after stripping whitespace, got {length}")


class SolverExhausted(SudokuError):
    """No completion exists for the grid handed to the solver."""

    def __init__(self, cell: Optional[Tuple[int, int]] = None):
        self.cell = cell
        where = f" at cell {cell}" if cell is not None else ""
        super().__init__(f"Solver exhausted every digit{where}; grid has no completion")


class SyncError(SudokuError):
    """Writing to the shared session record failed."""


class SessionNotFound(SyncError, KeyError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No session record with id {session_id!r}")

    def __str__(self) -> str:
        return self.args[0]
