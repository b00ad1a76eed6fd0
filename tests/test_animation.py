import itertools
import threading
import time

import pytest

from heartlight.animation import AnimationEngine, AnimationTask, Segment, segments
from heartlight.color import BLACK, BLUE, GREEN, RED, YELLOW
from heartlight.config import LightConfig
from heartlight.easing import blink_easing
from heartlight.patterns import (
    AlternatingBlink,
    Blinking,
    Gradation,
    LightAction,
    Lighting,
    TurnOff,
)

OFF = BLACK


class Recorder:
    def __init__(self):
        self.frames = []
        self.lock = threading.Lock()

    def __call__(self, color):
        with self.lock:
            self.frames.append((threading.current_thread().name, color))

    @property
    def colors(self):
        with self.lock:
            return [c for _, c in self.frames]

    @property
    def threads(self):
        with self.lock:
            return [t for t, _ in self.frames]


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


def test_lighting_and_turn_off_are_single_steady_segments():
    assert list(segments(Lighting(RED), OFF)) == [Segment(RED, RED, 0)]
    (seg,) = list(segments(TurnOff(), (1, 2, 3)))
    assert seg.color_at(1.0) == (1, 2, 3)


def test_gradation_cycles_back_to_first_color():
    colors = (RED, GREEN, BLUE)
    segs = list(itertools.islice(segments(Gradation(colors, 1000), OFF), 7))
    assert [s.end for s in segs] == [RED, GREEN, BLUE, RED, GREEN, BLUE, RED]
    assert segs[0].start == OFF
    assert all(a.end == b.start for a, b in zip(segs, segs[1:]))
    assert [s.duration_ms for s in segs] == [500, 1000, 1000, 1000, 1000, 1000, 1000]


def test_gradation_durations_are_configurable():
    g = Gradation((RED, BLUE), 1500, first_duration_ms=300, repeat_duration_ms=950)
    segs = list(itertools.islice(segments(g, OFF), 5))
    assert [s.duration_ms for s in segs] == [300, 1500, 950, 950, 950]


def test_blinking_segments_pulse_from_off():
    segs = list(itertools.islice(segments(Blinking(YELLOW, 1800), OFF), 3))
    for s in segs:
        assert (s.start, s.end, s.duration_ms) == (OFF, YELLOW, 1800)
        assert s.color_at(0.0) == OFF
        assert s.color_at(0.4) == YELLOW
        assert s.color_at(1.0) == OFF


def test_alternating_blink():
    segs = list(itertools.islice(segments(AlternatingBlink(RED, BLUE, 100, 200), OFF), 4))
    assert [(s.end, s.duration_ms) for s in segs] == [(RED, 100), (BLUE, 200)] * 2


def test_unknown_behavior():
    with pytest.raises(TypeError):
        next(segments("sparkle", OFF))


def test_task_uses_elapsed_time_not_frame_count():
    ticks = iter([0.0, 0.0, 0.05, 0.2])
    rec = Recorder()
    task = AnimationTask(
        LightAction(0, "test", Lighting(OFF)),
        LightConfig(frame_interval_ms=1),
        rec,
        clock=lambda: next(ticks),
    )
    seg = Segment(BLACK, (255, 255, 255), 100, lambda p: p)
    assert task.play([seg]) is True
    assert rec.colors == [(0, 0, 0), (128, 128, 128), (255, 255, 255)]


def test_lighting_emits_once_and_finishes():
    rec = Recorder()
    engine = AnimationEngine(LightConfig(), rec, actions=[LightAction(7, "red", Lighting(RED))])
    assert engine.on_code_changed(7).code == 7
    assert wait_for(lambda: not engine.is_running)
    assert rec.colors == [RED]
    engine.stop()


def test_blinking_trace_rises_and_returns_to_off():
    rec = Recorder()
    cfg = LightConfig(frame_interval_ms=5)
    engine = AnimationEngine(cfg, rec, actions=[LightAction(1, "blue", Blinking(BLUE, 200))])
    engine.on_code_changed(1)
    time.sleep(0.3)
    engine.stop()
    blues = [c[2] for c in rec.colors]
    assert all(c[0] == 0 and c[1] == 0 for c in rec.colors)
    assert blues[0] < 64
    peak = blues.index(255)
    assert blues[:peak] == sorted(blues[:peak])
    # Falls back to off after the peak
    assert 0 in blues[peak:]


def test_blink_fall_mirrors_rise_and_ends_off():
    # Elapsed seconds into a one-second blink; pairs mirror about 0.375
    ticks = iter([0.0, 0.1, 0.15, 0.6, 0.65, 0.8, 1.0])
    rec = Recorder()
    task = AnimationTask(
        LightAction(0, "test", Lighting(OFF)),
        LightConfig(frame_interval_ms=1),
        rec,
        clock=lambda: next(ticks),
    )
    seg = Segment(OFF, BLUE, 1000, blink_easing)
    assert task.play([seg]) is True
    rise_a, rise_b, fall_b, fall_a, late, last = rec.colors
    assert rise_a == fall_a == (0, 0, 150)
    assert rise_b == fall_b == (0, 0, 206)
    assert late == OFF
    assert last == OFF


def test_switch_never_interleaves_schedules():
    rec = Recorder()
    cfg = LightConfig(frame_interval_ms=2)
    actions = [
        LightAction(1, "rg", Gradation((RED, GREEN), 40)),
        LightAction(2, "blue", Blinking(BLUE, 40)),
        LightAction(3, "yellow", Gradation((YELLOW, BLUE), 30)),
    ]
    engine = AnimationEngine(cfg, rec, actions=actions)
    for code in (1, 2, 3, 1, 2):
        engine.on_code_changed(code)
        time.sleep(0.05)
    engine.stop()
    names = rec.threads
    assert names
    # Collapse consecutive runs: every task appears as one contiguous block
    blocks = [k for k, _ in itertools.groupby(names)]
    assert blocks == ["Animation-1", "Animation-2", "Animation-3", "Animation-1", "Animation-2"]


def test_no_frames_after_stop():
    rec = Recorder()
    engine = AnimationEngine(LightConfig(frame_interval_ms=5), rec, actions=[LightAction(1, "b", Blinking(BLUE, 100))])
    engine.on_code_changed(1)
    time.sleep(0.05)
    engine.stop()
    count = len(rec.colors)
    time.sleep(0.05)
    assert len(rec.colors) == count
    assert engine.active_action is None


def test_cancel_is_observed_within_a_frame():
    rec = Recorder()
    engine = AnimationEngine(LightConfig(), rec, actions=[LightAction(1, "b", Blinking(BLUE, 10_000))])
    engine.on_code_changed(1)
    time.sleep(0.02)
    t0 = time.monotonic()
    engine.stop()
    assert time.monotonic() - t0 < 0.05


def test_unknown_code_keeps_current_animation():
    rec = Recorder()
    engine = AnimationEngine(LightConfig(frame_interval_ms=5), rec, actions=[LightAction(1, "b", Blinking(BLUE, 100))])
    engine.on_code_changed(1)
    assert engine.on_code_changed(99) is None
    assert engine.active_action.code == 1
    assert engine.is_running
    engine.stop()


def test_same_code_does_not_restart():
    rec = Recorder()
    engine = AnimationEngine(LightConfig(frame_interval_ms=5), rec, actions=[LightAction(1, "b", Blinking(BLUE, 100))])
    engine.on_code_changed(1)
    task = engine._active
    engine.on_code_changed(1)
    assert engine._active is task
    engine.stop()
