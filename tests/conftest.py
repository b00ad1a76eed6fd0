from __future__ import annotations

import numpy as np
import pytest
import soundfile as sf

from heartlight.config import LightConfig

# Slot choices 1,0,0,1,1,0,0 -> code 76 (orange)
BEACON_76 = [18500, 19250, 19000, 18750, 19500, 19250, 19000, 18750]
# Slot choices 0,0,0,0,1,0,1 -> code 5 (yellow)
BEACON_5 = [18500, 18750, 19000, 18750, 19000, 19250, 19000, 19250]


def tone(freq: float, n: int = 1024, sr: int = 44100, amp: float = 8000.0) -> np.ndarray:
    t = np.arange(n) / sr
    return amp * np.sin(2 * np.pi * freq * t)


def beacon_blocks(symbols, blocks_per_symbol: int = 3, n: int = 1024, sr: int = 44100) -> list[np.ndarray]:
    blocks = [np.zeros(n) for _ in range(2)]
    for f in symbols:
        blocks.extend(tone(f, n, sr) for _ in range(blocks_per_symbol))
    blocks.extend(np.zeros(n) for _ in range(2))
    return blocks


def magnitudes_for(symbol, level: float = 5000.0, floor: float = 20.0) -> dict[int, float]:
    freqs = LightConfig().target_frequencies
    return {f: (level if f == symbol else floor) for f in freqs}


@pytest.fixture
def cfg() -> LightConfig:
    return LightConfig()


@pytest.fixture
def beacon_wav(tmp_path):
    path = tmp_path / "beacon.wav"
    data = np.concatenate(beacon_blocks(BEACON_76)).astype(np.int16)
    sf.write(str(path), data, 44100, subtype="PCM_16")
    return path
