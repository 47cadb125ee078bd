from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationOutOfRange

OCTAVE_OFFSET_RANGE = (-4, 4)
MAX_LATENCY_MS = 5000.0


@dataclass
class AudioConfig:
    sample_rate: int = 44100
    block_size: int = 2048
    channels: int = 1
    min_freq: float = 50.0
    max_freq: float = 2000.0
    silence_threshold: float = 0.01
    yin_threshold: float = 0.15


@dataclass
class SessionConfig:
    tick_interval_s: float = 0.05
    validity_window_s: float = 1.0


@dataclass
class Calibration:
    octave_offset: int = -1
    latency_ms: float = 300.0
    tolerance_cents: float = 50.0

    def validate(self) -> None:
        validate_octave_offset(self.octave_offset)
        validate_latency_ms(self.latency_ms)
        validate_tolerance_cents(self.tolerance_cents)


def validate_octave_offset(value: int) -> int:
    low, high = OCTAVE_OFFSET_RANGE
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ConfigurationOutOfRange("octave_offset", value, f"inteiro entre {low} e {high}")
    return value


def validate_latency_ms(value: float) -> float:
    if not 0.0 <= value <= MAX_LATENCY_MS:
        raise ConfigurationOutOfRange("latency_ms", value, f"0 a {MAX_LATENCY_MS:.0f} ms")
    return float(value)


def validate_tolerance_cents(value: float) -> float:
    if not value > 0.0:
        raise ConfigurationOutOfRange("tolerance_cents", value, "maior que zero")
    return float(value)
