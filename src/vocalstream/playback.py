from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional


class MixerPlayer:
    def __init__(self, audio_path: Path, sample_rate: int, audio_offset_s: float = 0.0):
        import pygame

        pygame.mixer.init(frequency=sample_rate)
        pygame.mixer.music.load(str(audio_path))
        self._music = pygame.mixer.music
        self.audio_offset_s = audio_offset_s
        self._started = False
        self._paused = False

    def play(self) -> None:
        self._music.play()
        self._started = True
        self._paused = False

    def pause(self) -> None:
        self._paused = True
        self._music.pause()

    def resume(self) -> None:
        self._music.unpause()
        self._paused = False

    def stop(self) -> None:
        self._music.stop()

    def position(self) -> Optional[float]:
        pos_ms = self._music.get_pos()
        if pos_ms < 0:
            return None
        return pos_ms / 1000.0 - self.audio_offset_s

    def ended(self) -> bool:
        # get_busy() is also False while paused.
        return self._started and not self._paused and not self._music.get_busy()


class WallClockPlayer:
    def __init__(self, duration_s: float, clock: Callable[[], float] = time.perf_counter):
        self.duration_s = duration_s
        self.clock = clock
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._stopped = False

    def play(self) -> None:
        self._started_at = self.clock()
        self._paused_at = None
        self._stopped = False

    def pause(self) -> None:
        if self._started_at is not None and self._paused_at is None:
            self._paused_at = self.clock()

    def resume(self) -> None:
        if self._started_at is not None and self._paused_at is not None:
            self._started_at += self.clock() - self._paused_at
            self._paused_at = None

    def stop(self) -> None:
        self._stopped = True

    def position(self) -> Optional[float]:
        if self._started_at is None:
            return None
        now = self._paused_at if self._paused_at is not None else self.clock()
        return now - self._started_at

    def ended(self) -> bool:
        if self._stopped:
            return True
        position = self.position()
        return position is not None and position >= self.duration_s
