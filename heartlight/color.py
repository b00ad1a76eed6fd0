from __future__ import annotations

from typing import Tuple

RGB = Tuple[int, int, int]


def _clamp_u8(x: float) -> int:
    return 0 if x < 0 else 255 if x > 255 else int(round(x))


def hex_color(code: str) -> RGB:
    s = code.lstrip("#")
    if len(s) != 6:
        raise ValueError(f"Expected #RRGGBB, got {code!r}")
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def to_hex(color: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*color)


def lerp_color(start: RGB, stop: RGB, fraction: float) -> RGB:
    r = _clamp_u8(start[0] + (stop[0] - start[0]) * fraction)
    g = _clamp_u8(start[1] + (stop[1] - start[1]) * fraction)
    b = _clamp_u8(start[2] + (stop[2] - start[2]) * fraction)
    return r, g, b


BLACK: RGB = (0, 0, 0)
RED: RGB = (255, 0, 0)
YELLOW: RGB = (255, 255, 0)
GREEN: RGB = (0, 255, 0)
BLUE: RGB = (0, 0, 255)
PINK: RGB = hex_color("#EA9198")
PINK_WHITE: RGB = hex_color("#FFC0CB")
PURPLE: RGB = hex_color("#A757A8")
LIGHT_BLUE: RGB = hex_color("#9DCCE0")
ORANGE: RGB = hex_color("#FFA500")
