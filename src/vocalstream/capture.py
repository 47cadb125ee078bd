from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Union

import numpy as np
import sounddevice as sd

from .config import AudioConfig
from .errors import InputUnavailable

logger = logging.getLogger(__name__)


class MicrophoneCapture:
    def __init__(
        self,
        config: AudioConfig,
        device: Optional[Union[int, str]] = None,
        max_age_s: float = 0.5,
    ):
        self.config = config
        self.max_age_s = max_age_s
        self._lock = threading.Lock()
        self._latest: Optional[np.ndarray] = None
        self._latest_at = 0.0
        self._stream = sd.InputStream(
            channels=config.channels,
            samplerate=config.sample_rate,
            blocksize=config.block_size,
            device=device,
            callback=self._callback,
        )

    def __enter__(self) -> "MicrophoneCapture":
        self._stream.start()
        return self

    def __exit__(self, *exc) -> None:
        self._stream.stop()
        self._stream.close()

    def read(self) -> np.ndarray:
        with self._lock:
            block, received_at = self._latest, self._latest_at
        if block is None:
            raise InputUnavailable("nenhum bloco de audio recebido")
        if time.monotonic() - received_at > self.max_age_s:
            raise InputUnavailable("bloco de audio antigo demais")
        return block

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.debug("Status da entrada de audio: %s", status)
            return
        block = indata[:, 0].copy()
        with self._lock:
            self._latest = block
            self._latest_at = time.monotonic()
