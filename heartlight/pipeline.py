from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .animation import AnimationEngine, Renderer
from .capture import FrequencyCapture, iter_wav_blocks
from .config import LightConfig
from .decoder import SignalDecoder
from .patterns import LightAction
from .spectral import MagnitudeMap, SpectralAnalyzer
from .synth import AudioSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeEvent:
    block: int
    time_sec: float
    code: int
    action: Optional[LightAction]


class HeartLight:
    """samples -> magnitudes -> code -> color, wired end to end."""

    def __init__(
        self,
        cfg: LightConfig,
        render: Renderer,
        synthesizer: Optional[AudioSynthesizer] = None,
        engine: Optional[AnimationEngine] = None,
    ):
        self.cfg = cfg
        self.analyzer = SpectralAnalyzer(cfg)
        self.decoder = SignalDecoder(cfg)
        self.engine = engine or AnimationEngine(cfg, render)
        self.synthesizer = synthesizer
        self.capture = FrequencyCapture(cfg, self.analyzer)
        self.decoder.subscribe(self.engine.on_code_changed)
        self.capture.subscribe(self.on_magnitudes)
        self.last_magnitudes: MagnitudeMap = {}

    def on_magnitudes(self, magnitudes: MagnitudeMap) -> Optional[int]:
        self.last_magnitudes = magnitudes
        if self.synthesizer is not None:
            self.synthesizer.submit(magnitudes)
        return self.decoder.update(magnitudes)

    def process_block(self, samples: np.ndarray) -> Optional[int]:
        return self.on_magnitudes(self.analyzer.analyze(samples))

    def decode_file(self, path: Path | str) -> list[CodeEvent]:
        """Run a recording through the analyzer and decoder. The engine is not driven."""
        decoder = SignalDecoder(self.cfg)
        events: list[CodeEvent] = []
        for i, block in enumerate(iter_wav_blocks(path, self.cfg)):
            code = decoder.update(self.analyzer.analyze(block))
            if code is not None:
                events.append(CodeEvent(i, i * self.cfg.block_period, code, self.engine.lookup(code)))
        return events

    def start(self) -> None:
        if self.synthesizer is not None:
            self.synthesizer.start()
        self.capture.start()

    def stop(self) -> None:
        self.capture.stop()
        if self.synthesizer is not None:
            self.synthesizer.stop()
        self.engine.stop()
        if self.capture.dropped:
            logger.warning("Dropped %d audio blocks", self.capture.dropped)

    def run(self) -> None:
        try:
            self.start()
            while True:
                time.sleep(0.2)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
