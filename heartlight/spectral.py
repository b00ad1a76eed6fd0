from __future__ import annotations

import logging
import math

import numpy as np
from scipy.signal import get_window

from .config import ConfigurationError, LightConfig

logger = logging.getLogger(__name__)

MagnitudeMap = dict[int, float]


class SpectralAnalyzer:
    """
    Per-block magnitude extraction for the target carriers.

    Each block is Hann-windowed and transformed with a real FFT. The magnitude
    of a carrier is the mean of the ``2 * fft_neighbor_count + 1`` bins around
    its nominal bin, scaled back to the amplitude of the input signal.
    """

    def __init__(self, config: LightConfig):
        self.config = config
        self.fft_size = config.fft_size
        self.half = config.fft_size // 2
        # Symmetric window: 0.5 * (1 - cos(2*pi*i / (N-1)))
        self._window = get_window("hann", self.fft_size, fftbins=False)
        self._bins: dict[int, np.ndarray] = {}
        k = config.fft_neighbor_count
        for freq in config.target_frequencies:
            idx = self.bin_index(freq)
            lo, hi = idx - k, idx + k
            if lo < 0 or hi >= self.half:
                raise ConfigurationError(
                    f"{freq} Hz maps to bins {lo}..{hi}, outside [0, {self.half}) "
                    f"for sample_rate={config.sample_rate}, fft_size={config.fft_size}"
                )
            self._bins[freq] = np.arange(lo, hi + 1)
        logger.debug("Target bins: %s", {f: int(b[k]) for f, b in self._bins.items()})

    def bin_index(self, frequency: float) -> int:
        # Halves round up, so 38.5 lands on bin 39
        return int(math.floor(frequency * self.fft_size / self.config.sample_rate + 0.5))

    @property
    def bin_indices(self) -> dict[int, int]:
        k = self.config.fft_neighbor_count
        return {f: int(b[k]) for f, b in self._bins.items()}

    @property
    def frequency_resolution(self) -> float:
        return self.config.sample_rate / self.fft_size

    def spectrum(self, samples: np.ndarray) -> np.ndarray:
        """Amplitude-scaled magnitude of the first N/2 bins."""
        x = np.asarray(samples, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.fft_size:
            raise ValueError(f"Expected a block of {self.fft_size} samples, got {x.shape[0]}")
        X = np.fft.rfft(x * self._window)[: self.half]
        # Normalize by N/2, x2 for the Hann window's coherent gain
        return np.hypot(X.real, X.imag) / self.half * 2.0

    def analyze(self, samples: np.ndarray) -> MagnitudeMap:
        mag = self.spectrum(samples)
        return {f: float(np.mean(mag[b])) for f, b in self._bins.items()}
