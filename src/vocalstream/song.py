from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .melody import Melody


@dataclass
class Song:
    root: Path
    melody: Melody
    title: str
    audio_path: Optional[Path] = None
    artist: Optional[str] = None
    audio_offset_s: float = 0.0

    @property
    def duration_s(self) -> float:
        return max(note.end_time for note in self.melody.notes)

    @classmethod
    def from_dir(cls, path: Path) -> "Song":
        root = path
        audio_path = None
        for name in ("audio.wav", "audio.ogg", "audio.mp3"):
            candidate = root / name
            if candidate.exists():
                audio_path = candidate
                break

        melody_path = root / "melody.csv"
        if not melody_path.exists():
            raise FileNotFoundError(f"Nao achei melody.csv em {root}")

        meta_path = root / "meta.json"
        meta = {}
        if meta_path.exists():
            meta = json.loads(meta_path.read_text(encoding="utf-8"))

        return cls(
            root=root,
            melody=Melody.from_csv(melody_path),
            title=meta.get("title") or root.name,
            audio_path=audio_path,
            artist=meta.get("artist") or None,
            audio_offset_s=float(meta.get("audio_offset_s", 0.0)),
        )
