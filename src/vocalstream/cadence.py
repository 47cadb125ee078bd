from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SamplingLoop:
    def __init__(
        self,
        interval_s: float,
        on_tick: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
        name: str = "vocalstream-sampling",
    ):
        if interval_s <= 0:
            raise ValueError("interval_s deve ser positivo")
        self.interval_s = interval_s
        self.on_tick = on_tick
        self.clock = clock
        self.name = name
        self.skipped = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        next_due = self.clock()
        while not self._stop.is_set():
            wait_s = next_due - self.clock()
            if wait_s > 0 and self._stop.wait(wait_s):
                break

            try:
                self.on_tick()
            except Exception:
                logger.exception("Falha no tick de amostragem")

            next_due += self.interval_s
            now = self.clock()
            if now > next_due:
                missed = int((now - next_due) // self.interval_s) + 1
                next_due += missed * self.interval_s
                self.skipped += missed
                logger.debug("Tick atrasado, %d amostragens puladas", missed)
