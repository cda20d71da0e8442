from __future__ import annotations
import argparse
from dataclasses import dataclass, field

from imageoverlay.core.compositor import MergeStrategy

_STRATEGIES = {
    "source": MergeStrategy.SOURCE_SIZE,
    "destination": MergeStrategy.DESTINATION_SIZE,
    "destination-no-upscale": MergeStrategy.DESTINATION_SIZE_NO_UPSCALE,
}


@dataclass
class Overlay:
    source: str
    x: int
    y: int
    strategy: MergeStrategy = MergeStrategy.SOURCE_SIZE


@dataclass
class Blend:
    source: str
    x: int
    y: int
    alpha: int = 127


@dataclass
class Config:
    # Base canvas: decoded background, or a blank width x height canvas
    background: str | None
    width: int
    height: int
    cache_dir: str | None

    # Text
    text: str | None
    font: str | None
    text_size: float
    text_x: int
    text_y: int
    color: tuple[int, int, int, int]
    border_color: tuple[int, int, int, int] | None

    # Output
    out: str
    log_level: str

    overlays: list[Overlay] = field(default_factory=list)
    blends: list[Blend] = field(default_factory=list)


# ---------- argument types ----------
def _split_placement(value: str) -> tuple[str, list[str]]:
    source, sep, rest = value.rpartition("@")
    if not sep or not source:
        raise argparse.ArgumentTypeError(f"expected SOURCE@X,Y[,...], got {value!r}")
    return source, rest.split(",")


def _int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{what} must be an integer, got {value!r}") from None


def overlay_arg(value: str) -> Overlay:
    source, parts = _split_placement(value)
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected SOURCE@X,Y[,STRATEGY], got {value!r}")
    strategy = MergeStrategy.SOURCE_SIZE
    if len(parts) == 3:
        try:
            strategy = _STRATEGIES[parts[2].strip().lower()]
        except KeyError:
            choices = ", ".join(_STRATEGIES)
            raise argparse.ArgumentTypeError(f"unknown strategy {parts[2]!r} (choose from {choices})") from None
    return Overlay(source, _int(parts[0], "x"), _int(parts[1], "y"), strategy)


def blend_arg(value: str) -> Blend:
    source, parts = _split_placement(value)
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected SOURCE@X,Y[,ALPHA], got {value!r}")
    alpha = _int(parts[2], "alpha") if len(parts) == 3 else 127
    return Blend(source, _int(parts[0], "x"), _int(parts[1], "y"), alpha)


def point_arg(value: str) -> tuple[int, int]:
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {value!r}")
    return _int(parts[0], "x"), _int(parts[1], "y")


def color_arg(value: str) -> tuple[int, int, int, int]:
    parts = value.split(",")
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(f"expected R,G,B[,A], got {value!r}")
    channels = [_int(p, "color component") for p in parts]
    if len(channels) == 3:
        channels.append(0)
    return tuple(channels)


def parse_args(argv: list[str] | None = None) -> Config:
    p = argparse.ArgumentParser("imageoverlay", description="Compose images and text into a PNG.")

    base = p.add_argument_group("Canvas")
    base.add_argument("--background", type=str, default=None, help="Background image path or http(s) URL")
    base.add_argument("--w", "--width", dest="width", type=int, default=640, help="Blank canvas width (no --background)")
    base.add_argument("--h", "--height", dest="height", type=int, default=480, help="Blank canvas height (no --background)")
    base.add_argument("--cache-dir", type=str, default=None, help="Directory for cached copies of remote images")

    comp = p.add_argument_group("Compositing")
    comp.add_argument(
        "--overlay",
        dest="overlays",
        type=overlay_arg,
        action="append",
        default=[],
        help="SOURCE@X,Y[,source|destination|destination-no-upscale] (repeatable)",
    )
    comp.add_argument(
        "--blend",
        dest="blends",
        type=blend_arg,
        action="append",
        default=[],
        help="SOURCE@X,Y[,ALPHA]; ALPHA 0 (opaque) .. 127 (transparent) (repeatable)",
    )

    txt = p.add_argument_group("Text")
    txt.add_argument("--text", type=str, default=None)
    txt.add_argument("--font", type=str, default=None, help="TrueType font file")
    txt.add_argument("--size", dest="text_size", type=float, default=7.0, help="Font size in points")
    txt.add_argument("--at", dest="text_at", type=point_arg, default=(0, 0), help="Baseline origin X,Y")
    txt.add_argument("--color", type=color_arg, default=(255, 255, 255, 0), help="R,G,B[,A] text color")
    txt.add_argument("--border-color", type=color_arg, default=None, help="R,G,B[,A]; draws an outline")

    out = p.add_argument_group("Output")
    out.add_argument("--out", type=str, default="-", help="PNG output path, '-' for stdout")
    out.add_argument("--log-level", type=str.upper, default="WARNING",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = p.parse_args(argv)

    if args.text and not args.font:
        p.error("--text requires --font")
    if args.background is None and (args.width <= 0 or args.height <= 0):
        p.error("--width and --height must be positive")

    return Config(
        background=args.background,
        width=args.width,
        height=args.height,
        cache_dir=args.cache_dir,
        text=args.text,
        font=args.font,
        text_size=args.text_size,
        text_x=args.text_at[0],
        text_y=args.text_at[1],
        color=args.color,
        border_color=args.border_color,
        out=args.out,
        log_level=args.log_level,
        overlays=args.overlays,
        blends=args.blends,
    )
