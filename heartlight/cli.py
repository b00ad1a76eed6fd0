from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

from .animation import AnimationEngine
from .capture import probe_devices
from .color import RGB, to_hex
from .config import ConfigurationError, LightConfig
from .patterns import LIGHT_ACTIONS, describe
from .pipeline import HeartLight
from .synth import AudioSynthesizer


class TerminalRenderer:
    """Draws the current color as a truecolor swatch on one terminal line."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.last: RGB | None = None

    def __call__(self, color: RGB) -> None:
        if color == self.last:
            return
        self.last = color
        r, g, b = color
        self.stream.write(f"\r\x1b[48;2;{r};{g};{b}m        \x1b[0m {to_hex(color)}")
        self.stream.flush()


def _config(ns: argparse.Namespace) -> LightConfig:
    return dataclasses.replace(
        LightConfig(),
        sample_rate=ns.sample_rate,
        fft_size=ns.fft_size,
        fft_neighbor_count=ns.neighbors,
        frame_interval_ms=ns.frame_ms,
        device=getattr(ns, "device", None),
    )


def cmd_probe(cfg: LightConfig):
    dev = probe_devices(cfg)
    if dev is None:
        print(f"No input device supports {cfg.sample_rate} Hz mono")
        return 1
    print(f"Device: [{dev.index}] {dev.name} @ {dev.samplerate} Hz, {dev.channels}ch")
    return 0


def cmd_listen(cfg: LightConfig, feedback: bool):
    synth = AudioSynthesizer(cfg) if feedback else None
    app = HeartLight(cfg, TerminalRenderer(), synthesizer=synth)
    print("Listening (Ctrl+C to stop)")
    try:
        app.run()
    except RuntimeError as e:
        print(f"Audio error: {e}")
        return 1
    print()
    return 0


def cmd_decode(cfg: LightConfig, wav_path: str):
    p = Path(wav_path)
    if not p.exists():
        print(f"No such file: {p}")
        return 2
    app = HeartLight(cfg, lambda color: None)
    try:
        events = app.decode_file(p)
    except ValueError as e:
        print(f"Cannot decode {p}: {e}")
        return 2
    if not events:
        print("No signal found")
        return 1
    for ev in events:
        name = ev.action.name if ev.action else "(unbound)"
        print(f"{ev.time_sec:8.3f}s  code={ev.code:3d}  {name}")
    return 0


def cmd_patterns():
    for a in LIGHT_ACTIONS:
        print(f"{a.code:3d}  {a.name:50} {describe(a.behavior)}")
    return 0


def cmd_preview(cfg: LightConfig, code: int, seconds: float):
    engine = AnimationEngine(cfg, TerminalRenderer())
    action = engine.on_code_changed(code)
    if action is None:
        print(f"No light action for code {code}")
        return 1
    print(f"{action.code}: {action.name}")
    try:
        time.sleep(seconds)
    except KeyboardInterrupt:
        pass
    finally:
        engine.stop()
    print()
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="heartlight")
    ap.add_argument("-v", "--verbose", action="count", default=0)
    ap.add_argument("--sample-rate", type=int, default=44100)
    ap.add_argument("--fft-size", type=int, default=1024)
    ap.add_argument("--neighbors", type=int, default=2)
    ap.add_argument("--frame-ms", type=int, default=50)
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pr = sub.add_parser("probe")
    ap_pr.add_argument("--device")
    ap_li = sub.add_parser("listen")
    ap_li.add_argument("--device")
    ap_li.add_argument("--feedback", action="store_true", help="play the carriers as audible tones")
    ap_de = sub.add_parser("decode")
    ap_de.add_argument("wav")
    sub.add_parser("patterns")
    ap_pv = sub.add_parser("preview")
    ap_pv.add_argument("code", type=int)
    ap_pv.add_argument("--seconds", type=float, default=5.0)

    ns = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING - 10 * min(ns.verbose, 2),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = _config(ns)
        if ns.cmd == "probe":
            return cmd_probe(cfg)
        if ns.cmd == "listen":
            return cmd_listen(cfg, ns.feedback)
        if ns.cmd == "decode":
            return cmd_decode(cfg, ns.wav)
        if ns.cmd == "patterns":
            return cmd_patterns()
        if ns.cmd == "preview":
            return cmd_preview(cfg, ns.code, ns.seconds)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 4
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
