from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .dsp import midi_to_name
from .errors import InvalidScript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetNote:
    start_time: float
    duration: float
    pitch: int
    display_name: str
    sequence_id: int

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def contains(self, playhead: float) -> bool:
        return self.start_time <= playhead <= self.end_time


class Melody:
    def __init__(self, notes: Sequence[TargetNote]):
        self.notes: List[TargetNote] = validate_notes(notes)

    def __len__(self) -> int:
        return len(self.notes)

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple]) -> "Melody":
        parsed = []
        for row in rows:
            if len(row) < 3:
                raise InvalidScript(f"linha incompleta: {row!r}")
            try:
                start_s, duration_s, pitch = float(row[0]), float(row[1]), _as_pitch(row[2])
            except InvalidScript:
                raise
            except (TypeError, ValueError) as exc:
                raise InvalidScript(f"linha invalida: {row!r}") from exc
            name = row[3] if len(row) > 3 else ""
            parsed.append((start_s, duration_s, pitch, name or ""))
        parsed.sort(key=lambda item: item[0])

        notes = [
            TargetNote(
                start_time=start_s,
                duration=duration_s,
                pitch=pitch,
                display_name=name or midi_to_name(pitch),
                sequence_id=idx,
            )
            for idx, (start_s, duration_s, pitch, name) in enumerate(parsed)
        ]
        return cls(notes)

    @classmethod
    def from_csv(cls, path: Path) -> "Melody":
        rows = []
        with path.open("r", encoding="utf-8") as handle:
            reader = csv.DictReader(handle)
            for line_no, row in enumerate(reader, start=2):
                try:
                    rows.append((row["start_s"], row["duration_s"], row["midi"], row.get("name") or ""))
                except KeyError as exc:
                    raise InvalidScript(f"{path}:{line_no}: coluna ausente {exc}") from exc
        return cls.from_rows(rows)


def validate_notes(notes: Sequence[TargetNote]) -> List[TargetNote]:
    notes = list(notes)
    if not notes:
        raise InvalidScript("roteiro de notas vazio")

    seen_ids = set()
    previous: Optional[TargetNote] = None
    for note in notes:
        if not math.isfinite(note.start_time) or note.start_time < 0:
            raise InvalidScript(f"nota {note.sequence_id}: inicio invalido {note.start_time!r}")
        if not math.isfinite(note.duration) or note.duration <= 0:
            raise InvalidScript(f"nota {note.sequence_id}: duracao invalida {note.duration!r}")
        if note.sequence_id in seen_ids:
            raise InvalidScript(f"nota {note.sequence_id}: id repetido")
        seen_ids.add(note.sequence_id)
        if previous is not None:
            if note.start_time < previous.start_time:
                raise InvalidScript(f"nota {note.sequence_id}: fora de ordem")
            if note.start_time < previous.end_time:
                logger.warning("Notas %d e %d se sobrepoem", previous.sequence_id, note.sequence_id)
        previous = note
    return notes


def resolve_active_note(playhead: float, notes: Sequence[TargetNote]) -> Optional[TargetNote]:
    for note in notes:
        if note.start_time > playhead:
            break
        if note.contains(playhead):
            return note
    return None


def elapsed_notes(playhead: float, notes: Sequence[TargetNote]) -> List[TargetNote]:
    return [note for note in notes if note.end_time < playhead]


def _as_pitch(raw) -> int:
    value = float(raw)
    if not math.isfinite(value) or not value.is_integer():
        raise InvalidScript(f"altura invalida {raw!r}")
    return int(value)
