import math
from typing import Optional

import numpy as np

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


def rms(frame: np.ndarray) -> float:
    if frame.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(frame.astype(np.float64) ** 2)))


def hz_to_midi(hz: float) -> Optional[float]:
    if hz <= 0:
        return None
    return 69.0 + 12.0 * math.log2(hz / 440.0)


def midi_to_hz(midi: float) -> float:
    return 440.0 * (2.0 ** ((midi - 69.0) / 12.0))


def midi_to_name(midi: float) -> str:
    number = int(math.floor(midi + 0.5))
    octave = number // 12 - 1
    return f"{NOTE_NAMES[number % 12]}{octave}"


def shift_octaves(pitch: float, octave_offset: int) -> float:
    # Octave calibration only moves the expectation, never the stored note.
    return pitch + 12 * octave_offset
