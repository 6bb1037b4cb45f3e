# shaderbox/__main__.py
"""
Command line entry point.

    python -m shaderbox view shader.frag
    python -m shaderbox check shader.frag
    python -m shaderbox uniforms shader.frag
    python -m shaderbox thumbnail shader.frag -o thumb.png
    python -m shaderbox new shader.frag --preset plasma
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from shaderbox.presets import PRESETS, get_preset
from shaderbox.settings import (
    DEFAULT_LOG_LEVEL,
    THUMBNAIL_SIZE,
    THUMBNAIL_TIME,
    SurfaceSettings,
    ViewerSettings,
)
from shaderbox.types import UniformInput
from shaderbox.uniforms.discovery import discover_uniforms

log = logging.getLogger("shaderbox")


def config_log(log_level) -> logging.Logger:
    """Global logging configuration, done once by the CLI."""
    logging.basicConfig(
        level=log_level,
        format="[%(asctime)s,%(msecs)03d] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    return log


def parse_uniform_assignment(text: str) -> tuple[str, UniformInput]:
    """'u_center=-0.5,0.0' -> ('u_center', [-0.5, 0.0])."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name or not raw.strip():
        raise ValueError(f"Expected NAME=VALUE[,VALUE...], got {text!r}")

    values = [float(v) for v in raw.split(",")]
    if len(values) == 1:
        return name, values[0]
    return name, values


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def cmd_view(args: Namespace) -> int:
    from shaderbox.viewer import Viewer

    overrides = dict(parse_uniform_assignment(a) for a in args.set)
    settings = ViewerSettings(
        surface=SurfaceSettings(
            width=args.width, height=args.height, title="shaderbox", vsync=not args.no_vsync
        ),
        show_frame_rate=args.fps,
    )
    return Viewer(Path(args.file), settings, overrides).run()


def cmd_check(args: Namespace) -> int:
    from shaderbox.engine.renderer import RenderEngine
    from shaderbox.host.offscreen import OffscreenSurface

    source = _read_source(args.file)
    surface = OffscreenSurface(SurfaceSettings(width=16, height=16))
    engine = RenderEngine()
    if not engine.init(surface):
        print("error: no OpenGL context available", file=sys.stderr)
        return 2

    try:
        result = engine.compile(source)
    finally:
        engine.destroy()
        surface.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print("ok")
    else:
        for diagnostic in result.diagnostics:
            print(f"{args.file}:{diagnostic.line}: {diagnostic.message}")
    return 0 if result.success else 1


def cmd_uniforms(args: Namespace) -> int:
    descriptors = discover_uniforms(_read_source(args.file))
    print(json.dumps([d.to_dict() for d in descriptors], indent=2))
    return 0


def cmd_thumbnail(args: Namespace) -> int:
    from shaderbox.thumbnail import capture_thumbnail

    png = capture_thumbnail(_read_source(args.file), size=args.size, time=args.time)
    if png is None:
        print("error: thumbnail could not be rendered", file=sys.stderr)
        return 1

    args.output.write_bytes(png)
    log.info("Wrote %s (%d bytes)", args.output, len(png))
    return 0


def cmd_new(args: Namespace) -> int:
    path: Path = args.file
    if path.exists() and not args.force:
        print(f"error: {path} exists (use --force to overwrite)", file=sys.stderr)
        return 1

    path.write_text(get_preset(args.preset).source, encoding="utf-8")
    log.info("Wrote preset %s to %s", args.preset, path)
    return 0


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="shaderbox", description="Live GLSL fragment shader viewer")
    parser.add_argument(
        "-l",
        "--log-level",
        default=logging.getLevelName(DEFAULT_LOG_LEVEL),
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Set the logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    view = sub.add_parser("view", help="open a live-reloading viewer window")
    view.add_argument("file", help="fragment shader file")
    view.add_argument("--width", type=int, default=800)
    view.add_argument("--height", type=int, default=600)
    view.add_argument("--fps", action="store_true", help="show the frame rate")
    view.add_argument("--no-vsync", action="store_true")
    view.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="NAME=V[,V...]",
        help="pin a custom uniform value (repeatable)",
    )
    view.set_defaults(func=cmd_view)

    check = sub.add_parser("check", help="compile offscreen and report diagnostics")
    check.add_argument("file", help="fragment shader file, or - for stdin")
    check.add_argument("--json", action="store_true", help="print the result as JSON")
    check.set_defaults(func=cmd_check)

    uniforms = sub.add_parser("uniforms", help="list discoverable uniforms as JSON")
    uniforms.add_argument("file", help="fragment shader file, or - for stdin")
    uniforms.set_defaults(func=cmd_uniforms)

    thumb = sub.add_parser("thumbnail", help="render a PNG thumbnail")
    thumb.add_argument("file", help="fragment shader file, or - for stdin")
    thumb.add_argument("-o", "--output", type=Path, required=True)
    thumb.add_argument("--size", type=int, default=THUMBNAIL_SIZE)
    thumb.add_argument("--time", type=float, default=THUMBNAIL_TIME)
    thumb.set_defaults(func=cmd_thumbnail)

    new = sub.add_parser("new", help="write a starter shader")
    new.add_argument("file", type=Path)
    new.add_argument(
        "--preset",
        default=PRESETS[0].name,
        choices=[p.name.lower() for p in PRESETS] + [p.name for p in PRESETS],
    )
    new.add_argument("--force", action="store_true")
    new.set_defaults(func=cmd_new)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config_log(args.log_level)
    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
