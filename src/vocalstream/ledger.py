from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import NoteFinalized


class FeedbackKind(str, Enum):
    MATCH = "match"
    MISS_HIGH = "miss_high"
    MISS_LOW = "miss_low"
    NO_INPUT = "no_input"


class NoteState(str, Enum):
    PENDING = "pending"
    EVALUATING = "evaluating"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class FeedbackRecord:
    note_id: int
    result: FeedbackKind
    recorded_at: float


class FeedbackLedger:
    """Per-note verdicts for one session.

    Each note moves ``PENDING -> EVALUATING -> FINALIZED``. While evaluating,
    the latest record wins; once finalized the verdict is frozen. The live
    view holds evaluating notes, the permanent view every verdict so far.
    """

    def __init__(self) -> None:
        self._states: Dict[int, NoteState] = {}
        self._verdicts: Dict[int, FeedbackRecord] = {}

    def state(self, note_id: int) -> NoteState:
        return self._states.get(note_id, NoteState.PENDING)

    def is_finalized(self, note_id: int) -> bool:
        return self.state(note_id) is NoteState.FINALIZED

    def record(self, note_id: int, kind: FeedbackKind, now: float) -> FeedbackRecord:
        if self.is_finalized(note_id):
            raise NoteFinalized(note_id)
        entry = FeedbackRecord(note_id=note_id, result=kind, recorded_at=now)
        self._states[note_id] = NoteState.EVALUATING
        self._verdicts[note_id] = entry
        return entry

    def retire(self, note_id: int) -> None:
        if self.state(note_id) is NoteState.EVALUATING:
            self._states[note_id] = NoteState.FINALIZED

    def retire_all(self) -> None:
        for note_id in list(self.live):
            self.retire(note_id)

    def get(self, note_id: int) -> Optional[FeedbackRecord]:
        return self._verdicts.get(note_id)

    @property
    def live(self) -> Dict[int, FeedbackRecord]:
        return {
            note_id: self._verdicts[note_id]
            for note_id, state in self._states.items()
            if state is NoteState.EVALUATING
        }

    @property
    def permanent(self) -> Dict[int, FeedbackRecord]:
        return dict(self._verdicts)

    def clear(self) -> None:
        self._states.clear()
        self._verdicts.clear()
