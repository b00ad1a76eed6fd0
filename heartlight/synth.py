from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from typing import Deque, Mapping, Optional

import numpy as np

try:
    import sounddevice as sd
except Exception:  # pragma: no cover - PortAudio missing at import
    sd = None  # type: ignore

from .config import LightConfig

logger = logging.getLogger(__name__)


class AudioSynthesizer:
    """
    Audible monitor for the ultrasonic carriers.

    Each carrier is mapped to an audible tone whose level follows the carrier
    magnitude above a rolling noise threshold. Runs beside the decoder and is
    never on the decode path.
    """

    def __init__(self, cfg: LightConfig, device: Optional[int | str] = None):
        self.cfg = cfg
        self.device = device
        self.gain = cfg.synth_gain
        size = max(1, int(cfg.synth_noise_window_sec * cfg.sample_rate / cfg.fft_size))
        self._noise: Deque[float] = deque([0.0] * size, maxlen=size)
        self._bins = {
            carrier: int(tone * cfg.fft_size / cfg.sample_rate)
            for carrier, tone in cfg.audible_map.items()
        }
        self.q: queue.Queue[np.ndarray] = queue.Queue(maxsize=4)
        self._playing = threading.Event()
        self._thr: Optional[threading.Thread] = None
        self._stream = None

    @property
    def noise_threshold(self) -> float:
        return float(np.mean(self._noise))

    @property
    def playing(self) -> bool:
        return self._playing.is_set()

    def synthesize(self, magnitudes: Mapping[int, float]) -> np.ndarray:
        n = self.cfg.fft_size
        if magnitudes:
            peak = max(magnitudes, key=lambda k: magnitudes[k])
            others = [v for k, v in magnitudes.items() if k != peak]
            self._noise.append(float(np.mean(others)) if others else 0.0)
        threshold = self.noise_threshold
        spec = np.zeros(n // 2 + 1, dtype=np.complex128)
        for carrier, magnitude in magnitudes.items():
            idx = self._bins.get(carrier)
            if idx is None or idx > n // 2:
                continue
            # irfft doubles a one-sided bin; halve so the tone peaks at level / n
            spec[idx] += max(magnitude - threshold, 0.0) * self.gain / 2
        pcm = np.fft.irfft(spec, n=n)
        return (np.clip(pcm, -1.0, 1.0) * 32767).astype(np.int16)

    def submit(self, magnitudes: Mapping[int, float]) -> None:
        if not self._playing.is_set() or self.q.full():
            return
        try:
            self.q.put_nowait(self.synthesize(magnitudes))
        except queue.Full:
            pass

    def start(self) -> None:
        if self._playing.is_set():
            return
        if sd is None:
            raise RuntimeError("sounddevice not available; install sounddevice")
        self._stream = sd.OutputStream(
            device=self.device,
            channels=1,
            samplerate=self.cfg.sample_rate,
            blocksize=self.cfg.fft_size,
            dtype="int16",
        )
        self._stream.start()
        self._playing.set()
        self._thr = threading.Thread(target=self._run, name="AudioSynthesizer", daemon=True)
        self._thr.start()
        logger.info("Audio feedback started")

    def stop(self) -> None:
        if not self._playing.is_set():
            return
        self._playing.clear()
        if self._thr is not None:
            self._thr.join(timeout=2)
            self._thr = None
        with self.q.mutex:
            self.q.queue.clear()
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        logger.info("Audio feedback stopped")

    def _run(self) -> None:
        while self._playing.is_set():
            try:
                data = self.q.get(timeout=0.1)
            except queue.Empty:
                continue
            if self._playing.is_set():
                self._stream.write(data.reshape(-1, 1))
