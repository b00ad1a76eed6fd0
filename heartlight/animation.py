from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

from .color import RGB, lerp_color
from .config import LightConfig
from .easing import Easing, blink_easing, transition_easing
from .patterns import (
    LIGHT_ACTIONS,
    AlternatingBlink,
    Behavior,
    Blinking,
    Gradation,
    LightAction,
    Lighting,
    TurnOff,
)

logger = logging.getLogger(__name__)

Renderer = Callable[[RGB], None]
Clock = Callable[[], float]


def _hold(p: float) -> float:
    return 1.0


@dataclass(frozen=True)
class Segment:
    """One timed blend from ``start`` to ``end``. Zero duration means steady state."""

    start: RGB
    end: RGB
    duration_ms: int
    easing: Easing = _hold

    def color_at(self, progress: float) -> RGB:
        p = min(max(progress, 0.0), 1.0)
        return lerp_color(self.start, self.end, self.easing(p))


def _blink(color: RGB, duration_ms: int, off_color: RGB) -> Segment:
    return Segment(off_color, color, duration_ms, blink_easing)


def segments(behavior: Behavior, off_color: RGB) -> Iterator[Segment]:
    """
    Expand a behavior into its schedule of segments.

    Lighting and TurnOff produce a single steady segment; everything else is
    an endless generator.
    """
    if isinstance(behavior, Lighting):
        yield Segment(behavior.color, behavior.color, 0)
    elif isinstance(behavior, TurnOff):
        yield Segment(off_color, off_color, 0)
    elif isinstance(behavior, Blinking):
        while True:
            yield _blink(behavior.color, behavior.duration_ms, off_color)
    elif isinstance(behavior, AlternatingBlink):
        while True:
            yield _blink(behavior.first, behavior.first_duration_ms, off_color)
            yield _blink(behavior.second, behavior.second_duration_ms, off_color)
    elif isinstance(behavior, Gradation):
        first = behavior.first_duration_ms
        if first is None:
            first = behavior.duration_ms // 2
        repeat = behavior.repeat_duration_ms
        if repeat is None:
            repeat = behavior.duration_ms
        current = off_color
        loop = 0
        while True:
            for i, color in enumerate(behavior.colors):
                if loop == 0:
                    duration = first if i == 0 else behavior.duration_ms
                else:
                    duration = repeat
                yield Segment(current, color, duration, transition_easing)
                current = color
            loop += 1
    else:
        raise TypeError(f"Unknown behavior: {behavior!r}")


class AnimationTask:
    """Plays one behavior on a worker thread until it finishes or is cancelled."""

    def __init__(
        self,
        action: LightAction,
        config: LightConfig,
        render: Renderer,
        clock: Clock = time.monotonic,
    ):
        self.action = action
        self.config = config
        self._render = render
        self._clock = clock
        self._cancel = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"Animation-{action.code}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancel.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _emit(self, color: RGB) -> bool:
        if self._cancel.is_set():
            return False
        self._render(color)
        return True

    def _run(self) -> None:
        try:
            self.play(segments(self.action.behavior, self.config.off_color))
        except Exception:
            logger.exception("Animation %d (%s) failed", self.action.code, self.action.name)

    def play(self, schedule: Iterable[Segment]) -> bool:
        """Returns False if cancelled before the schedule ran out."""
        interval = self.config.frame_interval
        started = self._clock()
        for seg in schedule:
            if seg.duration_ms <= 0:
                if not self._emit(seg.color_at(1.0)):
                    return False
                continue
            duration = seg.duration_ms / 1000.0
            while True:
                elapsed = self._clock() - started
                if elapsed >= duration:
                    if not self._emit(seg.color_at(1.0)):
                        return False
                    break
                if not self._emit(seg.color_at(elapsed / duration)):
                    return False
                if self._cancel.wait(min(interval, duration - elapsed)):
                    return False
            # Chain on the nominal end so timing does not drift
            started += duration
        return True


class AnimationEngine:
    """
    Binds codes to light actions and keeps exactly one animation running.

    A switch cancels the active task and waits for its thread to exit before
    the next one starts, so colors from two schedules never interleave.
    """

    def __init__(
        self,
        config: LightConfig,
        render: Renderer,
        actions: Iterable[LightAction] = LIGHT_ACTIONS,
        clock: Clock = time.monotonic,
    ):
        self.config = config
        self.render = render
        self._actions = {a.code: a for a in actions}
        self._clock = clock
        self._active: Optional[AnimationTask] = None
        self._lock = threading.Lock()

    @property
    def actions(self) -> dict[int, LightAction]:
        return dict(self._actions)

    @property
    def active_action(self) -> Optional[LightAction]:
        task = self._active
        return task.action if task is not None else None

    @property
    def is_running(self) -> bool:
        task = self._active
        return task is not None and task.is_alive()

    def lookup(self, code: int) -> Optional[LightAction]:
        return self._actions.get(code)

    def on_code_changed(self, code: int) -> Optional[LightAction]:
        action = self._actions.get(code)
        if action is None:
            logger.info("No light action bound to code %d; keeping current animation", code)
            return None
        current = self.active_action
        if current is not None and current.code == action.code:
            return current
        self.play(action)
        return action

    def play(self, action: LightAction) -> None:
        with self._lock:
            self._stop_active()
            logger.info("Light action %d: %s", action.code, action.name)
            task = AnimationTask(action, self.config, self.render, self._clock)
            self._active = task
            task.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_active()
            self._active = None

    def _stop_active(self) -> None:
        task = self._active
        if task is None:
            return
        task.cancel()
        task.join()
