from __future__ import annotations

from typing import Optional

SMOOTHING_WEIGHT = 0.8


class PitchSmoother:
    def __init__(self, validity_window_s: float):
        self.validity_window_s = validity_window_s
        self.value: Optional[float] = None
        self.last_valid_at: Optional[float] = None

    def update(self, raw_hz: Optional[float], now: float) -> Optional[float]:
        if raw_hz is not None:
            if self.value is None:
                self.value = raw_hz
            else:
                self.value = SMOOTHING_WEIGHT * self.value + (1.0 - SMOOTHING_WEIGHT) * raw_hz
            self.last_valid_at = now
            return self.value

        if self.last_valid_at is not None and now - self.last_valid_at > self.validity_window_s:
            self.reset()
        return self.value

    def reset(self) -> None:
        self.value = None
        self.last_valid_at = None
