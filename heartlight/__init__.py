"""heartlight - Ultrasonic Signal to Light

Decodes five-carrier ultrasonic beacons (18.5 kHz to 19.5 kHz) picked up by a
microphone into 7-bit signal codes and plays the light animation bound to
each code.
"""

from .config import LightConfig, ConfigurationError
from .spectral import SpectralAnalyzer
from .decoder import SignalDecoder, TEMPLATE, dominant_symbol, edge_sequence, find_pattern, decode_window
from .patterns import LightAction, Lighting, TurnOff, Blinking, AlternatingBlink, Gradation, LIGHT_ACTIONS, PATTERN_MAP
from .animation import AnimationEngine, AnimationTask, Segment, segments
from .capture import FrequencyCapture, probe_devices, iter_wav_blocks
from .synth import AudioSynthesizer
from .pipeline import HeartLight, CodeEvent

__all__ = [
    "LightConfig",
    "ConfigurationError",
    "SpectralAnalyzer",
    "SignalDecoder",
    "TEMPLATE",
    "dominant_symbol",
    "edge_sequence",
    "find_pattern",
    "decode_window",
    "LightAction",
    "Lighting",
    "TurnOff",
    "Blinking",
    "AlternatingBlink",
    "Gradation",
    "LIGHT_ACTIONS",
    "PATTERN_MAP",
    "AnimationEngine",
    "AnimationTask",
    "Segment",
    "segments",
    "FrequencyCapture",
    "probe_devices",
    "iter_wav_blocks",
    "AudioSynthesizer",
    "HeartLight",
    "CodeEvent",
]
