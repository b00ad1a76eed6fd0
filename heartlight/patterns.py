from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .color import BLUE, GREEN, LIGHT_BLUE, ORANGE, PINK, PINK_WHITE, PURPLE, RED, RGB, YELLOW


@dataclass(frozen=True)
class Lighting:
    color: RGB


@dataclass(frozen=True)
class TurnOff:
    pass


@dataclass(frozen=True)
class Blinking:
    color: RGB
    duration_ms: int


@dataclass(frozen=True)
class AlternatingBlink:
    """Two colors blinking in turn. Not bound in the default table; available to custom action tables."""

    first: RGB
    second: RGB
    first_duration_ms: int
    second_duration_ms: int


@dataclass(frozen=True)
class Gradation:
    """
    Endless cycle through ``colors``.

    The opening transition (from the off color) lasts ``first_duration_ms``,
    half of ``duration_ms`` unless set. The rest of the first pass uses
    ``duration_ms``; later passes use ``repeat_duration_ms`` when set.
    """

    colors: tuple[RGB, ...]
    duration_ms: int
    first_duration_ms: Optional[int] = None
    repeat_duration_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("Gradation needs at least one color")


Behavior = Union[Lighting, TurnOff, Blinking, AlternatingBlink, Gradation]


@dataclass(frozen=True)
class LightAction:
    code: int
    name: str
    behavior: Behavior


LIGHT_ACTIONS: tuple[LightAction, ...] = (
    LightAction(1, "long yellow, short green", Gradation((YELLOW, YELLOW, GREEN), 1050)),
    LightAction(5, "yellow", Lighting(YELLOW)),
    LightAction(21, "pale pink blink", Blinking(PINK_WHITE, 1800)),
    LightAction(22, "blue blink", Blinking(BLUE, 2100)),
    LightAction(23, "orange blink", Blinking(ORANGE, 1800)),
    LightAction(
        25,
        "red orange pink yellow green blue purple",
        Gradation((RED, ORANGE, PINK, YELLOW, GREEN, BLUE, PURPLE), 1200),
    ),
    LightAction(26, "light blue blink", Blinking(LIGHT_BLUE, 2100)),
    LightAction(27, "green blink", Blinking(GREEN, 1800)),
    LightAction(32, "purple blue", Gradation((PURPLE, BLUE), 1500, repeat_duration_ms=950)),
    LightAction(
        35,
        "pink yellow green light-blue blue purple red orange",
        Gradation((PINK, YELLOW, GREEN, LIGHT_BLUE, BLUE, PURPLE, RED, ORANGE), 1100),
    ),
    LightAction(42, "pink yellow light blue", Gradation((PINK, YELLOW, LIGHT_BLUE), 1100)),
    LightAction(52, "light blue", Lighting(LIGHT_BLUE)),
    LightAction(57, "fast purple blue", Gradation((PURPLE, BLUE), 650, repeat_duration_ms=550)),
    LightAction(61, "long pale pink, green", Gradation((PINK_WHITE, PINK_WHITE, GREEN), 1050)),
    LightAction(62, "off", TurnOff()),
    LightAction(66, "pale pink", Lighting(PINK_WHITE)),
    LightAction(
        67,
        "long light blue, short yellow",
        Gradation((LIGHT_BLUE, LIGHT_BLUE, YELLOW), 1050, repeat_duration_ms=900),
    ),
    LightAction(70, "off", TurnOff()),
    LightAction(76, "orange", Lighting(ORANGE)),
    LightAction(78, "green blink", Blinking(GREEN, 2100)),
    LightAction(90, "pink yellow light blue", Gradation((PINK, YELLOW, LIGHT_BLUE), 1000, repeat_duration_ms=850)),
    LightAction(95, "pale pink blink", Blinking(PINK_WHITE, 2100)),
    LightAction(99, "long pink, short red", Gradation((PINK, PINK, RED), 1100, repeat_duration_ms=850)),
    LightAction(101, "yellow blink", Blinking(YELLOW, 1800)),
    LightAction(103, "light blue blink", Blinking(LIGHT_BLUE, 1800)),
    LightAction(
        105,
        "fast red orange pink yellow green light-blue purple",
        Gradation((RED, ORANGE, PINK, YELLOW, GREEN, LIGHT_BLUE, PURPLE), 600),
    ),
    LightAction(107, "red blink", Blinking(RED, 2100)),
    LightAction(111, "pink blink", Blinking(PINK, 1800)),
    LightAction(113, "purple", Lighting(PURPLE)),
    LightAction(120, "blue", Lighting(BLUE)),
    LightAction(123, "pink blink", Blinking(PINK, 2100)),
    LightAction(124, "pink", Lighting(PINK)),
)

PATTERN_MAP: dict[int, LightAction] = {a.code: a for a in LIGHT_ACTIONS}


def describe(behavior: Behavior) -> str:
    kind = type(behavior).__name__
    if isinstance(behavior, Gradation):
        return f"{kind}({len(behavior.colors)} colors, {behavior.duration_ms} ms)"
    if isinstance(behavior, Blinking):
        return f"{kind}({behavior.duration_ms} ms)"
    return kind
