"""Easing curves mapping animation progress (0..1) to a blend fraction (0..1)."""

from __future__ import annotations

import math
from typing import Callable

from scipy.optimize import brentq

Easing = Callable[[float], float]

# CSS "ease-out" control points
EASE_OUT_POINTS = (0.0, 0.0, 0.58, 1.0)


def _bezier(t: float, p1: float, p2: float) -> float:
    u = 1.0 - t
    return 3 * u * u * t * p1 + 3 * u * t * t * p2 + t ** 3


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> Easing:
    def curve(p: float) -> float:
        if p <= 0.0:
            return 0.0
        if p >= 1.0:
            return 1.0
        t = brentq(lambda s: _bezier(s, x1, x2) - p, 0.0, 1.0, xtol=1e-9)
        return _bezier(t, y1, y2)

    return curve


ease_out: Easing = cubic_bezier(*EASE_OUT_POINTS)


def normal_blink(p: float) -> float:
    return math.sin(p * math.pi)


def blink_easing(p: float) -> float:
    """
    Sharp pulse: fade in over the first quarter, hold, fade out over the
    third quarter, then stay off.
    """
    if p < 0.25:
        return normal_blink(p * 2)
    if p < 0.5:
        return 1.0
    if p < 0.75:
        return normal_blink((p - 0.5) * 2 + 0.5)
    return 0.0


def transition_easing(p: float) -> float:
    # Twice the speed: done at the halfway mark, then held
    return ease_out(min(max(p * 2, 0.0), 1.0))
