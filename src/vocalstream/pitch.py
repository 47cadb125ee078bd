from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .dsp import rms


@dataclass
class PitchEstimate:
    hz: Optional[float]
    confidence: float


class PitchEstimator:
    def __init__(
        self,
        sample_rate: int,
        min_freq: float,
        max_freq: float,
        silence_threshold: float,
        yin_threshold: float,
    ):
        self.sample_rate = sample_rate
        self.min_freq = min_freq
        self.max_freq = max_freq
        self.silence_threshold = silence_threshold
        self.yin_threshold = yin_threshold

    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        if frame.size == 0:
            return PitchEstimate(None, 0.0)

        x = frame.astype(np.float64)
        if rms(x) < self.silence_threshold:
            return PitchEstimate(None, 0.0)
        x = x - np.mean(x)

        window = len(x) // 2
        min_lag = max(int(self.sample_rate / self.max_freq), 2)
        max_lag = min(int(self.sample_rate / self.min_freq) + 1, window)
        if max_lag <= min_lag + 2:
            return PitchEstimate(None, 0.0)

        cmnd = _cumulative_mean_normalized(_difference(x, window, max_lag))

        lag = _absolute_threshold(cmnd, min_lag, max_lag, self.yin_threshold)
        if lag is None:
            return PitchEstimate(None, 0.0)
        confidence = float(1.0 - cmnd[lag])

        refined = float(lag)
        if 1 <= lag < len(cmnd) - 1:
            y0, y1, y2 = cmnd[lag - 1], cmnd[lag], cmnd[lag + 1]
            denom = 2.0 * (2.0 * y1 - y0 - y2)
            if abs(denom) > 1e-12:
                refined = lag + (y2 - y0) / denom

        hz = self.sample_rate / refined if refined > 0 else None
        if hz is None or not self.within_band(hz):
            return PitchEstimate(None, confidence)
        return PitchEstimate(hz, confidence)

    def within_band(self, hz: float) -> bool:
        return self.min_freq <= hz <= self.max_freq


def _difference(x: np.ndarray, window: int, max_lag: int) -> np.ndarray:
    # d(tau) = sum_j (x[j] - x[j + tau])^2 over j < window, via FFT cross-correlation.
    size = len(x) + window
    nfft = 1 << (size - 1).bit_length()
    spectrum = np.fft.rfft(x, nfft)
    head = np.fft.rfft(x[:window], nfft)
    cross = np.fft.irfft(spectrum * np.conj(head), nfft)[: max_lag + 1]

    energy = np.concatenate(([0.0], np.cumsum(x ** 2)))
    lags = np.arange(max_lag + 1)
    shifted = energy[lags + window] - energy[lags]
    diff = energy[window] + shifted - 2.0 * cross
    diff[0] = 0.0
    return np.maximum(diff, 0.0)


def _cumulative_mean_normalized(diff: np.ndarray) -> np.ndarray:
    cmnd = np.ones_like(diff)
    running = np.cumsum(diff[1:])
    lags = np.arange(1, len(diff))
    with np.errstate(divide="ignore", invalid="ignore"):
        cmnd[1:] = np.where(running > 0, diff[1:] * lags / running, 1.0)
    return cmnd


def _absolute_threshold(cmnd: np.ndarray, min_lag: int, max_lag: int, threshold: float) -> Optional[int]:
    tau = min_lag
    while tau < max_lag:
        if cmnd[tau] < threshold:
            while tau + 1 < max_lag and cmnd[tau + 1] < cmnd[tau]:
                tau += 1
            return tau
        tau += 1
    return None
