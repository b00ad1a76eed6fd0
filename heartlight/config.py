from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a configuration cannot be run (refuse to start)."""


@dataclass
class LightConfig:
    sample_rate: int = 44100
    fft_size: int = 1024
    fft_neighbor_count: int = 2
    target_frequencies: tuple[int, ...] = (18500, 18750, 19000, 19250, 19500)
    channels: int = 1
    device: Optional[int | str] = None
    # Blocks buffered between the audio callback and the decode thread
    queue_blocks: int = 8
    # Dominant symbol: absolute floor and ratio over the mean of the others
    dominant_floor: float = 500.0
    dominant_ratio: float = 3.0
    frame_interval_ms: int = 50
    off_color: tuple[int, int, int] = (0, 0, 0)
    synth_gain: float = 2.0
    synth_noise_window_sec: float = 2.0
    audible_map: dict[int, float] = field(
        default_factory=lambda: {
            18500: 1046.502,
            18750: 1174.659,
            19000: 1318.510,
            19250: 1396.913,
            19500: 1567.982,
        }
    )

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.fft_size < 2:
            raise ConfigurationError(f"fft_size must be at least 2, got {self.fft_size}")
        if self.fft_neighbor_count < 0:
            raise ConfigurationError(f"fft_neighbor_count must be >= 0, got {self.fft_neighbor_count}")
        if self.frame_interval_ms <= 0:
            raise ConfigurationError(f"frame_interval_ms must be positive, got {self.frame_interval_ms}")
        if not self.target_frequencies:
            raise ConfigurationError("at least one target frequency is required")
        if self.channels != 1:
            raise ConfigurationError("only mono capture is supported")

    @property
    def history_size(self) -> int:
        # About one second of blocks
        return max(1, self.sample_rate // self.fft_size)

    @property
    def block_period(self) -> float:
        return self.fft_size / self.sample_rate

    @property
    def frame_interval(self) -> float:
        return self.frame_interval_ms / 1000.0
