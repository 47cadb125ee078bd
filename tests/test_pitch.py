import numpy as np
import pytest

from vocalstream.config import AudioConfig
from vocalstream.pitch import PitchEstimator

SAMPLE_RATE = 44100
BLOCK = 2048


def _estimator(**overrides) -> PitchEstimator:
    cfg = AudioConfig()
    params = dict(
        sample_rate=cfg.sample_rate,
        min_freq=cfg.min_freq,
        max_freq=cfg.max_freq,
        silence_threshold=cfg.silence_threshold,
        yin_threshold=cfg.yin_threshold,
    )
    params.update(overrides)
    return PitchEstimator(**params)


def _sine(hz: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(BLOCK) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * hz * t)


@pytest.mark.parametrize("hz", [110.0, 220.0, 261.63, 440.0, 880.0])
def test_sine_frequency(hz):
    estimate = _estimator().estimate(_sine(hz))
    assert estimate.hz == pytest.approx(hz, rel=0.01)
    assert estimate.confidence > 0.8


def test_silence_is_unvoiced():
    estimate = _estimator().estimate(np.zeros(BLOCK))
    assert estimate.hz is None


def test_silence_is_unvoiced_for_any_threshold():
    for silence in (0.0, 0.01, 0.5):
        for yin in (0.05, 0.15, 0.9):
            estimator = _estimator(silence_threshold=silence, yin_threshold=yin)
            assert estimator.estimate(np.zeros(BLOCK)).hz is None


def test_quiet_noise_is_gated():
    rng = np.random.default_rng(7)
    noise = rng.normal(0.0, 0.001, BLOCK)
    assert _estimator().estimate(noise).hz is None


def test_strict_threshold_rejects_everything():
    estimate = _estimator(yin_threshold=0.0).estimate(_sine(220.0))
    assert estimate.hz is None


def test_empty_frame():
    estimate = _estimator().estimate(np.zeros(0))
    assert estimate.hz is None
    assert estimate.confidence == 0.0


def test_band_limits():
    estimator = _estimator()
    assert estimator.within_band(50.0)
    assert estimator.within_band(2000.0)
    assert not estimator.within_band(49.9)
    assert not estimator.within_band(2500.0)


def test_estimate_is_deterministic():
    frame = _sine(330.0)
    estimator = _estimator()
    assert estimator.estimate(frame) == estimator.estimate(frame.copy())
