import threading
import time

import pytest

from vocalstream.cadence import SamplingLoop


def test_ticks_until_stopped():
    count = []
    reached = threading.Event()

    def on_tick():
        count.append(1)
        if len(count) >= 3:
            reached.set()

    loop = SamplingLoop(0.01, on_tick)
    loop.start()
    assert reached.wait(2.0)
    loop.stop(timeout=1.0)
    assert not loop.running
    seen = len(count)
    time.sleep(0.05)
    assert len(count) == seen


def test_slow_ticks_drop_missed_deadlines():
    count = []

    def on_tick():
        count.append(1)
        time.sleep(0.05)

    loop = SamplingLoop(0.01, on_tick)
    loop.start()
    time.sleep(0.2)
    loop.stop(timeout=1.0)
    assert loop.skipped > 0
    assert len(count) <= 6


def test_stop_from_inside_tick():
    loop = None
    done = threading.Event()

    def on_tick():
        loop.stop()
        done.set()

    loop = SamplingLoop(0.01, on_tick)
    loop.start()
    assert done.wait(2.0)
    assert not loop.running


def test_stop_without_start():
    SamplingLoop(0.01, lambda: None).stop()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        SamplingLoop(0.0, lambda: None)


def test_failing_tick_keeps_loop_running():
    calls = []
    reached = threading.Event()

    def on_tick():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("falhou")
        if len(calls) >= 3:
            reached.set()

    loop = SamplingLoop(0.01, on_tick)
    loop.start()
    try:
        assert reached.wait(2.0)
        assert loop.running
    finally:
        loop.stop(timeout=1.0)
