"""Shared state of one collaborative puzzle and the rules for editing it."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .generator import GeneratedPuzzle
from .grid import (
    DIGITS,
    EMPTY,
    SIZE,
    Cell,
    FixedMask,
    Grid,
    check_cell,
    check_shape,
    conflicts,
    copy_grid,
    fixed_mask,
    is_complete,
)

logger = logging.getLogger(__name__)

CandidateGrid = List[List[Set[int]]]

# Palette offered to participants when they join.
PLAYER_COLORS: Dict[str, str] = {
    "yellow": "#FFD700",
    "blue": "#4169E1",
    "red": "#FF4136",
    "green": "#2ECC40",
    "orange": "#FF851B",
    "purple": "#B10DC9",
    "pink": "#FF69B4",
    "gold": "#DAA520",
}


def pick_color(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return rng.choice(list(PLAYER_COLORS.values()))


def empty_candidates() -> CandidateGrid:
    return [[set() for _ in range(SIZE)] for _ in range(SIZE)]


def copy_candidates(candidates: CandidateGrid) -> CandidateGrid:
    return [[set(cell) for cell in row] for row in candidates]


class SessionStatus(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"


def status_from_record(value: Any) -> Optional[SessionStatus]:
    """
    Status stored on a record, or None when it is missing or one this engine does
    not manage (termination and archival are written by other services).
    """
    try:
        return SessionStatus(value)
    except ValueError:
        if value:
            logger.debug("Ignoring unmanaged session status %r", value)
        return None


class EditOutcome(Enum):
    APPLIED = "applied"
    FIXED_CELL_VIOLATION = "fixed_cell_violation"
    NOT_EDITABLE = "not_editable"


@dataclass
class Participant:
    id: str
    nickname: str
    color: str
    # Presentational only: which cell this participant last touched.
    selected_cell: Optional[Cell] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "nickname": self.nickname, "color": self.color}
        if self.selected_cell is not None:
            row, col = self.selected_cell
            data["selectedCell"] = {"row": row, "col": col}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        selected = data.get("selectedCell")
        cell = (int(selected["row"]), int(selected["col"])) if selected else None
        return cls(
            id=str(data["id"]),
            nickname=str(data.get("nickname", "")),
            color=str(data.get("color", "")),
            selected_cell=cell,
        )


@dataclass
class Session:
    """
    One in-progress puzzle. `solution` and `fixed` are set at creation and never
    change; `board`, `candidates` and `players` are mutated by edits and by
    absorbing remote snapshots.
    """

    session_id: str
    board: Grid
    solution: Grid
    fixed: FixedMask
    candidates: CandidateGrid = field(default_factory=empty_candidates)
    players: List[Participant] = field(default_factory=list)
    status: SessionStatus = SessionStatus.WAITING

    @classmethod
    def create(
        cls,
        session_id: str,
        puzzle: GeneratedPuzzle,
        creator: Optional[Participant] = None,
    ) -> "Session":
        session = cls(
            session_id=session_id,
            board=copy_grid(puzzle.puzzle),
            solution=copy_grid(puzzle.solution),
            fixed=fixed_mask(puzzle.puzzle),
        )
        if creator is not None:
            session.add_participant(creator)
        return session

    # -- edits -------------------------------------------------------------

    def apply_cell_edit(self, participant_id: str, row: int, col: int, value: int) -> EditOutcome:
        """
        Write `value` (0 clears) into a non-fixed cell. Writing a digit empties the
        cell's candidates. Conflicting digits are accepted; use `conflicts()` for hints.
        """
        check_cell(row, col)
        if not 0 <= value <= SIZE:
            raise ValueError(f"Cell value must be in 0..9, got {value}")

        if self.fixed[row][col]:
            logger.debug("Rejected edit by %s on fixed cell (%d, %d)", participant_id, row, col)
            return EditOutcome.FIXED_CELL_VIOLATION

        self.board[row][col] = value
        if value != EMPTY:
            self.candidates[row][col].clear()
        self._touch(participant_id, (row, col))
        return EditOutcome.APPLIED

    def toggle_candidate(self, participant_id: str, row: int, col: int, digit: int) -> EditOutcome:
        check_cell(row, col)
        if digit not in DIGITS:
            raise ValueError(f"Candidate digit must be in 1..9, got {digit}")

        if not self._annotatable(row, col):
            logger.debug("Rejected candidate toggle by %s on cell (%d, %d)", participant_id, row, col)
            return EditOutcome.NOT_EDITABLE

        marks = self.candidates[row][col]
        if digit in marks:
            marks.remove(digit)
        else:
            marks.add(digit)
        self._touch(participant_id, None)
        return EditOutcome.APPLIED

    def clear_candidates(self, participant_id: str, row: int, col: int) -> EditOutcome:
        check_cell(row, col)
        if not self._annotatable(row, col):
            return EditOutcome.NOT_EDITABLE
        self.candidates[row][col].clear()
        self._touch(participant_id, None)
        return EditOutcome.APPLIED

    def add_participant(self, participant: Participant) -> None:
        if self.participant(participant.id) is not None:
            raise ValueError(f"Participant id {participant.id!r} already in session")
        self.players.append(participant)
        logger.info("Participant %s (%s) joined session %s", participant.id, participant.nickname, self.session_id)

    def select_cell(self, participant_id: str, cell: Optional[Cell]) -> bool:
        """Move a participant's pointer. Returns False for unknown participants."""
        if cell is not None:
            check_cell(*cell)
        player = self.participant(participant_id)
        if player is None:
            return False
        player.selected_cell = cell
        return True

    # -- queries -----------------------------------------------------------

    def participant(self, participant_id: str) -> Optional[Participant]:
        for player in self.players:
            if player.id == participant_id:
                return player
        return None

    def is_complete(self) -> bool:
        return is_complete(self.board)

    def is_solved(self) -> bool:
        return self.board == self.solution

    def conflicts(self) -> Set[Cell]:
        return conflicts(self.board)

    def candidates_at(self, row: int, col: int) -> Set[int]:
        return set(self.candidates[row][col])

    # -- records -----------------------------------------------------------

    def to_record(self) -> Dict[str, Any]:
        """The full persisted row for this session."""
        return {
            "id": self.session_id,
            "board": copy_grid(self.board),
            "solution": copy_grid(self.solution),
            "initial_board": [list(row) for row in self.fixed],
            "players": self.players_record(),
            "candidates": self.candidates_record(),
            "status": self.status.value,
        }

    def players_record(self) -> List[Dict[str, Any]]:
        return [player.to_dict() for player in self.players]

    def candidates_record(self) -> List[List[List[int]]]:
        return [[sorted(cell) for cell in row] for row in self.candidates]

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Session":
        board = [list(row) for row in record["board"]]
        solution = [list(row) for row in record["solution"]]
        check_shape(board)
        check_shape(solution)
        fixed = record.get("initial_board")
        fixed_cells = [[bool(v) for v in row] for row in fixed] if fixed else fixed_mask(board)
        candidates = record.get("candidates")
        session = cls(
            session_id=str(record["id"]),
            board=board,
            solution=solution,
            fixed=fixed_cells,
            candidates=candidates_from_record(candidates) if candidates else empty_candidates(),
            players=[Participant.from_dict(p) for p in record.get("players") or []],
            status=status_from_record(record.get("status")) or SessionStatus.WAITING,
        )
        drop_stale_candidates(session)
        return session

    # -- internals ---------------------------------------------------------

    def _annotatable(self, row: int, col: int) -> bool:
        return not self.fixed[row][col] and self.board[row][col] == EMPTY

    def _touch(self, participant_id: str, cell: Optional[Cell]) -> None:
        self.status = SessionStatus.ACTIVE
        if cell is not None:
            self.select_cell(participant_id, cell)


def candidates_from_record(raw: List[List[List[int]]]) -> CandidateGrid:
    if len(raw) != SIZE or any(len(row) != SIZE for row in raw):
        raise ValueError("Candidate record must be a 9x9 array")
    grid = empty_candidates()
    for r in range(SIZE):
        for c in range(SIZE):
            digits = {int(d) for d in raw[r][c]}
            if not digits <= set(DIGITS):
                raise ValueError(f"Candidate digits must be in 1..9, got {sorted(digits)}")
            grid[r][c] = digits
    return grid


def drop_stale_candidates(session: Session) -> None:
    """Clear candidates on filled or fixed cells, which a stored record can still carry."""
    for r in range(SIZE):
        for c in range(SIZE):
            if session.board[r][c] != EMPTY or session.fixed[r][c]:
                session.candidates[r][c].clear()
