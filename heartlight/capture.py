from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional

import numpy as np
import soundfile as sf

try:
    import sounddevice as sd
except Exception:  # pragma: no cover - PortAudio missing at import
    sd = None  # type: ignore

from .config import LightConfig
from .spectral import MagnitudeMap, SpectralAnalyzer

logger = logging.getLogger(__name__)

MagnitudeListener = Callable[[MagnitudeMap], None]


@dataclass
class DeviceInfo:
    index: int
    name: str
    samplerate: int
    channels: int


def probe_devices(cfg: LightConfig) -> Optional[DeviceInfo]:
    """Pick the input device that accepts the configured rate, preferring the default one."""
    if sd is None:
        return None
    devices = sd.query_devices()
    default_in = sd.default.device[0]
    wanted = None if cfg.device is None else str(cfg.device).strip().lower()
    candidates: list[tuple[int, int, dict]] = []
    for idx, d in enumerate(devices):
        if d.get("max_input_channels", 0) < cfg.channels:
            continue
        try:
            sd.check_input_settings(device=idx, samplerate=cfg.sample_rate, channels=cfg.channels, dtype="int16")
        except Exception:
            continue
        score = 10 if idx == default_in else 0
        if wanted and (wanted == str(idx) or wanted in str(d.get("name", "")).lower()):
            score += 20
        candidates.append((score, idx, d))
    if not candidates:
        return None
    score, idx, best = max(candidates, key=lambda t: t[0])
    if wanted and score < 20:
        logger.warning("No usable input device matches %r", cfg.device)
        return None
    return DeviceInfo(index=idx, name=best.get("name", "?"), samplerate=cfg.sample_rate, channels=cfg.channels)


def to_int16_scale(data: np.ndarray) -> np.ndarray:
    """Mono float64 samples on the int16 amplitude scale."""
    x = np.asarray(data)
    # Decide on scaling before the mixdown turns int16 into float
    scale = 32768.0 if np.issubdtype(x.dtype, np.floating) else 1.0
    if x.ndim == 2:
        x = x.mean(axis=1, dtype=np.float64)
    return x.astype(np.float64) * scale


def iter_wav_blocks(path: Path | str, cfg: LightConfig) -> Iterator[np.ndarray]:
    """Yield consecutive full blocks of a recording; a trailing partial block is dropped."""
    info = sf.info(str(path))
    if info.samplerate != cfg.sample_rate:
        raise ValueError(f"{path}: sample rate {info.samplerate} Hz, expected {cfg.sample_rate} Hz")
    for block in sf.blocks(str(path), blocksize=cfg.fft_size, dtype="int16", always_2d=True):
        if block.shape[0] < cfg.fft_size:
            break
        yield to_int16_scale(block)


class FrequencyCapture:
    """
    Live microphone capture.

    The audio callback only copies blocks into a bounded queue; a processing
    thread runs the analyzer and hands each magnitude map to subscribers.
    """

    def __init__(self, cfg: LightConfig, analyzer: Optional[SpectralAnalyzer] = None):
        self.cfg = cfg
        self.analyzer = analyzer or SpectralAnalyzer(cfg)
        self.q: queue.Queue[np.ndarray] = queue.Queue(maxsize=cfg.queue_blocks)
        self.dropped = 0
        self._subs: list[MagnitudeListener] = []
        self._stop = threading.Event()
        self._thr: Optional[threading.Thread] = None
        self._stream = None

    def subscribe(self, fn: MagnitudeListener) -> None:
        self._subs.append(fn)

    def submit(self, frames: np.ndarray) -> None:
        try:
            self.q.put_nowait(frames.copy())
        except queue.Full:
            self.dropped += 1
            try:
                _ = self.q.get_nowait()
            except queue.Empty:
                pass
            self.q.put_nowait(frames.copy())

    def start(self, device: Optional[DeviceInfo] = None) -> DeviceInfo:
        if sd is None:
            raise RuntimeError("sounddevice not available; install sounddevice")
        if device is None:
            device = probe_devices(self.cfg)
        if device is None:
            raise RuntimeError(f"No audio input device supports {self.cfg.sample_rate} Hz mono")
        logger.info("Capturing from %s @ %d Hz", device.name, device.samplerate)
        self._stop.clear()
        self._thr = threading.Thread(target=self._run, name="FrequencyCapture", daemon=True)
        self._thr.start()
        self._stream = sd.InputStream(
            device=device.index,
            channels=device.channels,
            samplerate=device.samplerate,
            blocksize=self.cfg.fft_size,
            dtype="int16",
            callback=self._callback,
        )
        self._stream.start()
        return device

    def stop(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        self._stop.set()
        if self._thr is not None:
            self._thr.join(timeout=2)
            self._thr = None

    def _callback(self, indata, frames, time_info, status):  # type: ignore
        if status:
            logger.debug("Audio status: %s", status)
        self.submit(indata)

    def process(self, block: np.ndarray) -> MagnitudeMap:
        magnitudes = self.analyzer.analyze(to_int16_scale(block))
        for fn in self._subs:
            try:
                fn(magnitudes)
            except Exception:
                # Keep audio flowing
                logger.exception("Magnitude subscriber failed")
        return magnitudes

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                data = self.q.get(timeout=0.1)
            except queue.Empty:
                continue
            if data.shape[0] != self.cfg.fft_size:
                continue
            self.process(data)
