"""Sudoku engine, session state and replication for collaborative solving."""

from .grid import Grid, is_legal
from .solver_core import Exhausted, Solved, solve
from .generator import GeneratedPuzzle, generate
from .parser import parse_initial_state, serialize_grid
from .session import EditOutcome, Participant, Session
from .sync import InMemoryRecordStore, Replica

__all__ = [
    "Grid",
    "is_legal",
    "Solved",
    "Exhausted",
    "solve",
    "GeneratedPuzzle",
    "generate",
    "parse_initial_state",
    "serialize_grid",
    "EditOutcome",
    "Participant",
    "Session",
    "InMemoryRecordStore",
    "Replica",
]
