from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Iterable, Mapping, Optional, Sequence

from .config import ConfigurationError, LightConfig

logger = logging.getLogger(__name__)

Symbol = Optional[int]
CodeListener = Callable[[int], None]

# Allowed carriers per slot, in declared order. A slot's ordinal is one bit.
TEMPLATE: tuple[tuple[int, ...], ...] = (
    (18500,),
    (18750, 19250),
    (19000, 19500),
    (18750, 19250),
    (19000, 19500),
    (18750, 19250),
    (19000, 19500),
    (18750, 19250),
)


def dominant_symbol(magnitudes: Mapping[int, float], floor: float = 500.0, ratio: float = 3.0) -> Symbol:
    """
    Return the loudest carrier if it clears both the absolute floor and
    ``ratio`` times the mean of the other carriers, otherwise ``None``.
    """
    if not magnitudes:
        return None
    freq, peak = max(magnitudes.items(), key=lambda kv: kv[1])
    others = [v for k, v in magnitudes.items() if k != freq]
    noise = sum(others) / len(others) if others else 0.0
    if peak >= floor and peak > noise * ratio:
        return freq
    return None


def edge_sequence(history: Iterable[Symbol]) -> list[int]:
    edges: list[int] = []
    for sym in history:
        if sym is None:
            continue
        if edges and edges[-1] == sym:
            continue
        edges.append(sym)
    return edges


def find_pattern(edges: Sequence[int], template: Sequence[Sequence[int]] = TEMPLATE) -> Optional[tuple[int, ...]]:
    """Most recent window of ``edges`` that fits the template slot by slot."""
    width = len(template)
    for start in range(len(edges) - width, -1, -1):
        window = edges[start:start + width]
        if all(sym in slot for sym, slot in zip(window, template)):
            return tuple(window)
    return None


def decode_window(window: Sequence[int], template: Sequence[Sequence[int]] = TEMPLATE) -> int:
    code = 0
    for sym, slot in zip(window, template):
        code = (code << 1) | list(slot).index(sym)
    return code


class SignalDecoder:
    """
    Turns a stream of magnitude maps into code-changed events.

    Keeps roughly one second of dominant symbols and re-scans it after every
    block. Listeners are only called when the decoded code differs from the
    one currently held.
    """

    def __init__(self, config: LightConfig, template: Sequence[Sequence[int]] = TEMPLATE):
        monitored = set(config.target_frequencies)
        missing = {f for slot in template for f in slot} - monitored
        if missing:
            raise ConfigurationError(f"Template uses unmonitored frequencies: {sorted(missing)}")
        self.config = config
        self.template = tuple(tuple(slot) for slot in template)
        self._history: Deque[Symbol] = deque(maxlen=config.history_size)
        self._code: Optional[int] = None
        self._listeners: list[CodeListener] = []
        self._lock = threading.Lock()
        self._emit_lock = threading.Lock()

    @property
    def current_code(self) -> Optional[int]:
        return self._code

    @property
    def history(self) -> list[Symbol]:
        with self._lock:
            return list(self._history)

    def subscribe(self, fn: CodeListener) -> None:
        self._listeners.append(fn)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._code = None

    def update(self, magnitudes: Mapping[int, float]) -> Optional[int]:
        """Feed one block. Returns the new code if it changed, else ``None``.

        Listeners are called in the order codes were decided; a concurrent
        ``update`` waits until the previous change has been delivered.
        """
        sym = dominant_symbol(magnitudes, self.config.dominant_floor, self.config.dominant_ratio)
        with self._emit_lock:
            with self._lock:
                self._history.append(sym)
                window = find_pattern(edge_sequence(self._history), self.template)
                if window is None:
                    return None
                code = decode_window(window, self.template)
                if code == self._code:
                    return None
                self._code = code
            logger.info("Signal code changed: %d", code)
            for fn in self._listeners:
                fn(code)
        return code
