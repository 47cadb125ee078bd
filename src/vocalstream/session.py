from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import numpy as np

from .cadence import SamplingLoop
from .config import (
    AudioConfig,
    Calibration,
    SessionConfig,
    validate_latency_ms,
    validate_octave_offset,
    validate_tolerance_cents,
)
from .dsp import hz_to_midi, midi_to_name, shift_octaves
from .errors import InputUnavailable, InvalidScript, InvalidTransition
from .ledger import FeedbackKind, FeedbackLedger, FeedbackRecord
from .melody import TargetNote, elapsed_notes, resolve_active_note, validate_notes
from .pitch import PitchEstimate, PitchEstimator
from .scoring import ScoreSummary, compare_pitch, summarize
from .smoothing import PitchSmoother

logger = logging.getLogger(__name__)


class AudioSource(Protocol):
    def read(self) -> np.ndarray:
        ...


class MediaPlayer(Protocol):
    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def resume(self) -> None:
        ...

    def stop(self) -> None:
        ...

    def position(self) -> Optional[float]:
        ...

    def ended(self) -> bool:
        ...


class Estimator(Protocol):
    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        ...


class SessionState(str, Enum):
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class TickResult:
    playhead: float
    smoothed_hz: Optional[float]
    scale_number: Optional[float]
    note_name: Optional[str]
    active_note: Optional[TargetNote]
    target_name: Optional[str]
    feedback: Optional[FeedbackKind]


@dataclass(frozen=True)
class SessionSnapshot:
    state: SessionState
    calibration: Calibration
    tick: Optional[TickResult] = None
    live: Mapping[int, FeedbackRecord] = dataclasses.field(default_factory=dict)
    permanent: Mapping[int, FeedbackRecord] = dataclasses.field(default_factory=dict)
    summary: Optional[ScoreSummary] = None


class Session:
    """Owns one singing session: smoother, ledger and calibration.

    Lifecycle: ``load`` -> ``start`` -> ``pause``/``resume`` -> ``finish``,
    and ``reset`` back to ready from any state. ``tick`` may be driven by the
    internal sampling loop (when ``start`` gets a capture source and a player)
    or called directly by the host application.

    Every mutation happens under one lock and ends by publishing a frozen
    :class:`SessionSnapshot`; ``snapshot()`` hands out the latest one without
    waiting on a tick in progress.
    """

    def __init__(
        self,
        audio_config: Optional[AudioConfig] = None,
        session_config: Optional[SessionConfig] = None,
        calibration: Optional[Calibration] = None,
        estimator: Optional[Estimator] = None,
    ):
        self.audio_config = audio_config or AudioConfig()
        self.session_config = session_config or SessionConfig()
        self._calibration = dataclasses.replace(calibration) if calibration else Calibration()
        self._calibration.validate()
        self._estimator = estimator or PitchEstimator(
            sample_rate=self.audio_config.sample_rate,
            min_freq=self.audio_config.min_freq,
            max_freq=self.audio_config.max_freq,
            silence_threshold=self.audio_config.silence_threshold,
            yin_threshold=self.audio_config.yin_threshold,
        )

        self._lock = threading.Lock()
        self._state = SessionState.READY
        self._notes: List[TargetNote] = []
        self._notes_by_id: Dict[int, TargetNote] = {}
        self._smoother = PitchSmoother(self.session_config.validity_window_s)
        self._ledger = FeedbackLedger()
        self._summary: Optional[ScoreSummary] = None
        self._last_tick: Optional[TickResult] = None
        self._display_range: Optional[Tuple[int, int]] = None

        self._capture: Optional[AudioSource] = None
        self._player: Optional[MediaPlayer] = None
        self._loop: Optional[SamplingLoop] = None
        self._snapshot = self._build_snapshot()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def notes(self) -> List[TargetNote]:
        return list(self._notes)

    @property
    def calibration(self) -> Calibration:
        return dataclasses.replace(self._calibration)

    @property
    def summary(self) -> Optional[ScoreSummary]:
        return self._summary

    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    def load(self, notes: Sequence[TargetNote]) -> None:
        validated = validate_notes(notes)
        with self._lock:
            if self._state is not SessionState.READY:
                raise InvalidTransition("load", self._state)
            self._notes = validated
            self._notes_by_id = {note.sequence_id: note for note in validated}
            self._display_range = None
        logger.info("Roteiro carregado com %d notas", len(validated))

    def start(self, capture: Optional[AudioSource] = None, player: Optional[MediaPlayer] = None) -> None:
        with self._lock:
            if self._state is not SessionState.READY:
                raise InvalidTransition("start", self._state)
            if not self._notes:
                raise InvalidScript("nenhum roteiro carregado")
            self._state = SessionState.PLAYING
            self._capture = capture
            self._player = player
            self._publish()

        if player is not None:
            player.play()
        if capture is not None and player is not None:
            self._loop = SamplingLoop(self.session_config.tick_interval_s, self._sample)
            self._loop.start()
        logger.info("Sessao iniciada")

    def pause(self) -> None:
        with self._lock:
            if self._state is not SessionState.PLAYING:
                raise InvalidTransition("pause", self._state)
            self._state = SessionState.PAUSED
            self._publish()
        if self._player is not None:
            self._player.pause()
        logger.info("Sessao pausada")

    def resume(self) -> None:
        with self._lock:
            if self._state is not SessionState.PAUSED:
                raise InvalidTransition("resume", self._state)
            self._state = SessionState.PLAYING
            self._publish()
        if self._player is not None:
            self._player.resume()
        logger.info("Sessao retomada")

    def toggle_pause(self) -> None:
        if self._state is SessionState.PLAYING:
            self.pause()
        elif self._state is SessionState.PAUSED:
            self.resume()

    def finish(self) -> ScoreSummary:
        with self._lock:
            if self._state is SessionState.FINISHED and self._summary is not None:
                return self._summary
            if self._state is SessionState.READY:
                raise InvalidTransition("finish", self._state)
            self._state = SessionState.FINISHED
            self._ledger.retire_all()
            self._summary = summarize(self._ledger.permanent)
            self._publish()
            summary = self._summary

        self._stop_sampling()
        logger.info("Sessao finalizada: %d%% (%s)", summary.percentage, summary.grade.value)
        return summary

    def reset(self, preserve_calibration: bool = True) -> None:
        with self._lock:
            self._state = SessionState.READY
            self._ledger.clear()
            self._smoother.reset()
            self._summary = None
            self._last_tick = None
            if not preserve_calibration:
                self._calibration = Calibration()
                self._display_range = None
            self._publish()

        self._stop_sampling()
        self._capture = None
        self._player = None
        logger.info("Sessao reiniciada (calibracao %s)", "mantida" if preserve_calibration else "padrao")

    def set_octave_offset(self, value: int) -> None:
        validate_octave_offset(value)
        with self._lock:
            self._calibration.octave_offset = value
            self._display_range = None
            self._publish()

    def set_latency_ms(self, value: float) -> None:
        value = validate_latency_ms(value)
        with self._lock:
            self._calibration.latency_ms = value
            self._publish()

    def set_tolerance_cents(self, value: float) -> None:
        value = validate_tolerance_cents(value)
        with self._lock:
            self._calibration.tolerance_cents = value
            self._publish()

    def display_range(self) -> Optional[Tuple[int, int]]:
        """Lowest and highest target pitch after octave calibration."""
        with self._lock:
            if self._display_range is None and self._notes:
                offset = self._calibration.octave_offset
                pitches = [int(shift_octaves(note.pitch, offset)) for note in self._notes]
                self._display_range = (min(pitches), max(pitches))
            return self._display_range

    def current_summary(self) -> ScoreSummary:
        with self._lock:
            return summarize(self._ledger.permanent)

    def tick(
        self, buffer: Optional[np.ndarray], playback_time: Optional[float], now: Optional[float] = None
    ) -> Optional[TickResult]:
        if buffer is None or playback_time is None:
            logger.debug("Tick ignorado: %s", "sem audio" if buffer is None else "sem posicao de reproducao")
            return None
        if now is None:
            now = time.monotonic()

        with self._lock:
            if self._state is not SessionState.PLAYING:
                return None

            calibration = self._calibration
            playhead = playback_time - calibration.latency_ms / 1000.0

            estimate = self._estimator.estimate(buffer)
            smoothed_hz = self._smoother.update(estimate.hz, now)
            scale_number = hz_to_midi(smoothed_hz) if smoothed_hz is not None else None

            active = resolve_active_note(playhead, self._notes)
            live = self._ledger.live
            for note in elapsed_notes(playhead, [self._notes_by_id[note_id] for note_id in live]):
                self._ledger.retire(note.sequence_id)

            feedback = compare_pitch(
                scale_number, active, calibration.octave_offset, calibration.tolerance_cents
            )
            if active is not None and feedback is not None:
                if self._ledger.is_finalized(active.sequence_id):
                    logger.debug("Nota %d ja finalizada, ignorando", active.sequence_id)
                else:
                    self._ledger.record(active.sequence_id, feedback, now)

            target_name = None
            if active is not None:
                target_name = midi_to_name(shift_octaves(active.pitch, calibration.octave_offset))

            result = TickResult(
                playhead=playhead,
                smoothed_hz=smoothed_hz,
                scale_number=scale_number,
                note_name=midi_to_name(scale_number) if scale_number is not None else None,
                active_note=active,
                target_name=target_name,
                feedback=feedback,
            )
            self._last_tick = result
            self._publish()
            return result

    def _sample(self) -> None:
        if self._state is not SessionState.PLAYING:
            return
        capture, player = self._capture, self._player
        if capture is None or player is None:
            return
        if player.ended():
            try:
                self.finish()
            except InvalidTransition as exc:
                logger.debug("Fim ignorado: %s", exc)
            return

        try:
            buffer = capture.read()
            position = player.position()
            if position is None:
                raise InputUnavailable("posicao de reproducao indisponivel")
        except InputUnavailable as exc:
            logger.debug("Tick ignorado: %s", exc)
            return
        self.tick(buffer, position, time.monotonic())

    def _stop_sampling(self) -> None:
        loop, self._loop = self._loop, None
        if loop is not None:
            loop.stop(timeout=1.0)
        if self._player is not None:
            self._player.stop()

    def _publish(self) -> None:
        self._snapshot = self._build_snapshot()

    def _build_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            calibration=dataclasses.replace(self._calibration),
            tick=self._last_tick,
            live=self._ledger.live,
            permanent=self._ledger.permanent,
            summary=self._summary,
        )
