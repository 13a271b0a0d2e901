"""Replication of session state between participants.

Each participant owns a `Replica`. Local edits are applied to the replica first
and then written to a shared session record; every replica subscribes to
change notifications on that record and absorbs the snapshots it receives by
replacing its board, candidates and players wholesale.

Consistency is last-writer-wins per snapshot field. A replica that writes a
snapshot built before it absorbed someone else's concurrent edit overwrites
that edit for everyone, even when the two edits touched different cells. No
per-cell merge is attempted.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol, Tuple

from .config import SudokuConfig
from .errors import SessionNotFound, SyncError
from .generator import GeneratedPuzzle
from .grid import EMPTY, Cell, check_shape
from .session import (
    EditOutcome,
    Participant,
    Session,
    candidates_from_record,
    copy_candidates,
    drop_stale_candidates,
    status_from_record,
)
from src.utils.io import load_json, save_json

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]

EDIT_FIELDS = ("board", "candidates", "players", "status")
CANDIDATE_FIELDS = ("candidates", "status")
PLAYER_FIELDS = ("players",)


@dataclass(frozen=True)
class RecordUpdate:
    """Change notification: the full row of `session_id` after a write."""

    session_id: str
    new: Snapshot


Callback = Callable[[RecordUpdate], None]


def new_session_id() -> str:
    return str(uuid.uuid4())


def new_participant_id() -> str:
    return str(uuid.uuid4())


class RecordStore(Protocol):
    """The persisted session record together with its change-notification channel."""

    def insert(self, record: Snapshot) -> None: ...

    def fetch(self, session_id: str) -> Snapshot: ...

    def update(self, session_id: str, fields: Snapshot) -> None: ...

    def subscribe(self, session_id: str, callback: Callback) -> Callable[[], None]: ...


class InMemoryRecordStore:
    """
    Rows keyed by session id. `update` replaces the named fields and publishes the
    updated row to every subscriber of that session, in write order.

    With `auto_deliver=False` notifications queue up until `deliver_pending()`,
    which stands in for propagation latency between participants.
    """

    def __init__(self, auto_deliver: bool = True):
        self.auto_deliver = auto_deliver
        self._rows: Dict[str, Snapshot] = {}
        self._subscribers: Dict[str, List[Callback]] = {}
        self._pending: Deque[RecordUpdate] = deque()
        self._delivering = False

    def insert(self, record: Snapshot) -> None:
        session_id = str(record["id"])
        if self._lookup(session_id) is not None:
            raise SyncError(f"Session record {session_id!r} already exists")
        row = copy.deepcopy(record)
        self._save(row)
        self._rows[session_id] = row

    def fetch(self, session_id: str) -> Snapshot:
        row = self._lookup(session_id)
        if row is None:
            raise SessionNotFound(session_id)
        return copy.deepcopy(row)

    def update(self, session_id: str, fields: Snapshot) -> None:
        row = self._lookup(session_id)
        if row is None:
            raise SessionNotFound(session_id)
        if "id" in fields and fields["id"] != session_id:
            raise SyncError("Session record id cannot be changed")

        updated = dict(row)
        for key, value in fields.items():
            updated[key] = copy.deepcopy(value)
        self._save(updated)
        self._rows[session_id] = updated
        self._publish(RecordUpdate(session_id, copy.deepcopy(updated)))

    def subscribe(self, session_id: str, callback: Callback) -> Callable[[], None]:
        self._subscribers.setdefault(session_id, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(session_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    @property
    def pending(self) -> int:
        return len(self._pending)

    def deliver_pending(self) -> int:
        """Deliver queued notifications in arrival order. Returns how many were sent."""
        if self._delivering:
            return 0
        delivered = 0
        self._delivering = True
        try:
            while self._pending:
                update = self._pending.popleft()
                for callback in list(self._subscribers.get(update.session_id, [])):
                    callback(RecordUpdate(update.session_id, copy.deepcopy(update.new)))
                delivered += 1
        finally:
            self._delivering = False
        return delivered

    def _publish(self, update: RecordUpdate) -> None:
        self._pending.append(update)
        if self.auto_deliver:
            self.deliver_pending()

    def _lookup(self, session_id: str) -> Optional[Snapshot]:
        return self._rows.get(session_id)

    def _save(self, row: Snapshot) -> None:
        """Persist `row`; the in-memory store keeps nothing outside `_rows`."""


class JsonFileRecordStore(InMemoryRecordStore):
    """Same contract as the in-memory store, with each row kept in `<root>/<id>.json`."""

    def __init__(self, root: Path, auto_deliver: bool = True):
        super().__init__(auto_deliver=auto_deliver)
        self.root = Path(root)

    def path_for(self, session_id: str) -> Path:
        return self.root / f"{session_id}.json"

    def _lookup(self, session_id: str) -> Optional[Snapshot]:
        row = super()._lookup(session_id)
        if row is None:
            path = self.path_for(session_id)
            if path.exists():
                row = load_json(path)
                self._rows[session_id] = row
        return row

    def _save(self, row: Snapshot) -> None:
        try:
            save_json(self.path_for(str(row["id"])), row)
        except OSError as e:
            raise SyncError(f"Failed to persist session {row['id']!r}: {e}") from e


def make_store(config: SudokuConfig, auto_deliver: bool = True) -> InMemoryRecordStore:
    """File-backed store when `config.store_dir` is set, in-memory otherwise."""
    if config.store_dir is not None:
        return JsonFileRecordStore(config.store_dir, auto_deliver=auto_deliver)
    return InMemoryRecordStore(auto_deliver=auto_deliver)


class Replica:
    """One participant's local copy of a session."""

    def __init__(self, store: RecordStore, session: Session, participant_id: str):
        self.store = store
        self.session = session
        self.participant_id = participant_id
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(session.session_id, self.absorb)

    @classmethod
    def create(
        cls,
        store: RecordStore,
        puzzle: GeneratedPuzzle,
        creator: Participant,
        session_id: Optional[str] = None,
    ) -> "Replica":
        session = Session.create(session_id or new_session_id(), puzzle, creator)
        store.insert(session.to_record())
        logger.info("Created session %s for %s", session.session_id, creator.nickname)
        return cls(store, session, creator.id)

    @classmethod
    def join(cls, store: RecordStore, session_id: str, participant: Participant) -> "Replica":
        session = Session.from_record(store.fetch(session_id))
        session.add_participant(participant)
        store.update(session_id, {"players": session.players_record()})
        return cls(store, session, participant.id)

    @classmethod
    def load(cls, store: RecordStore, session_id: str, participant_id: str) -> "Replica":
        return cls(store, Session.from_record(store.fetch(session_id)), participant_id)

    @property
    def session_id(self) -> str:
        return self.session.session_id

    # -- local edits ---------------------------------------------------------

    def edit_cell(self, row: int, col: int, value: int) -> EditOutcome:
        return self._apply_local(
            lambda s: s.apply_cell_edit(self.participant_id, row, col, value), EDIT_FIELDS
        )

    def clear_cell(self, row: int, col: int) -> EditOutcome:
        return self.edit_cell(row, col, EMPTY)

    def toggle_candidate(self, row: int, col: int, digit: int) -> EditOutcome:
        return self._apply_local(
            lambda s: s.toggle_candidate(self.participant_id, row, col, digit), CANDIDATE_FIELDS
        )

    def clear_candidates(self, row: int, col: int) -> EditOutcome:
        return self._apply_local(
            lambda s: s.clear_candidates(self.participant_id, row, col), CANDIDATE_FIELDS
        )

    def select_cell(self, cell: Optional[Cell]) -> bool:
        def _select(s: Session) -> EditOutcome:
            if s.select_cell(self.participant_id, cell):
                return EditOutcome.APPLIED
            return EditOutcome.NOT_EDITABLE

        return self._apply_local(_select, PLAYER_FIELDS) is EditOutcome.APPLIED

    def outgoing_snapshot(self, fields: Tuple[str, ...] = EDIT_FIELDS) -> Snapshot:
        """Fields of the local session as they would be written to the shared record."""
        session = self.session
        values = {
            "board": lambda: [list(row) for row in session.board],
            "candidates": session.candidates_record,
            "players": session.players_record,
            "status": lambda: session.status.value,
        }
        return {name: values[name]() for name in fields}

    def _apply_local(self, mutate: Callable[[Session], EditOutcome], fields: Tuple[str, ...]) -> EditOutcome:
        before = self._capture()
        outcome = mutate(self.session)
        if outcome is not EditOutcome.APPLIED:
            return outcome

        snapshot = self.outgoing_snapshot(fields)
        try:
            self.store.update(self.session_id, snapshot)
        except SyncError:
            logger.exception("Failed to propagate edit for session %s; reverting local state", self.session_id)
            self._restore(before)
            raise
        return outcome

    # -- remote snapshots ----------------------------------------------------

    def absorb(self, update: RecordUpdate) -> bool:
        """
        Replace board, candidates and players with the snapshot's values.
        Candidates left on filled or fixed cells are dropped and a status this engine
        does not manage is ignored. Returns False when the update belongs to another
        session or is malformed (nothing is changed then).
        """
        if update.session_id != self.session_id:
            return False
        new = update.new
        try:
            board = [list(row) for row in new["board"]] if "board" in new else None
            if board is not None:
                check_shape(board)
            candidates = candidates_from_record(new["candidates"]) if new.get("candidates") else None
            players = [Participant.from_dict(p) for p in new.get("players") or []] if "players" in new else None
            status = status_from_record(new.get("status"))
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Discarding malformed snapshot for session %s: %s", self.session_id, e)
            return False

        session = self.session
        if board is not None:
            session.board = board
        if candidates is not None:
            session.candidates = candidates
        if players is not None:
            session.players = players
        if status is not None:
            session.status = status
        drop_stale_candidates(session)
        logger.debug("Absorbed snapshot for session %s (%s)", self.session_id, ", ".join(sorted(new)))
        return True

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -- internals -----------------------------------------------------------

    def _capture(self) -> Tuple[Any, ...]:
        s = self.session
        return (
            [list(row) for row in s.board],
            copy_candidates(s.candidates),
            copy.deepcopy(s.players),
            s.status,
        )

    def _restore(self, state: Tuple[Any, ...]) -> None:
        s = self.session
        s.board, s.candidates, s.players, s.status = state
