from __future__ import annotations
import logging
import sys

from imageoverlay.color import Color
from imageoverlay.config import Config, parse_args
from imageoverlay.core.canvas import Canvas
from imageoverlay.errors import ImageOverlayError
from imageoverlay.text.base import Text
from imageoverlay.text.decorators import BorderDecorator
from imageoverlay.text.generic import TextRenderer

logger = logging.getLogger("imageoverlay")


def build_text_renderer(cfg: Config, canvas: Canvas) -> Text:
    renderer: Text = TextRenderer(canvas)
    renderer.set_text_color(Color(*cfg.color))
    renderer.set_text_font(cfg.font)
    renderer.set_text_size(cfg.text_size)
    if cfg.border_color is not None:
        renderer = BorderDecorator(renderer, Color(*cfg.border_color))
    return renderer


def compose(cfg: Config) -> Canvas:
    """Build the canvas described by cfg. The caller owns (and releases) it."""
    if cfg.background:
        canvas = Canvas.from_path(cfg.background, cfg.cache_dir)
    else:
        canvas = Canvas.blank(cfg.width, cfg.height)
    logger.info("canvas %dx%d (%s)", canvas.width, canvas.height, cfg.background or "blank")

    try:
        for ov in cfg.overlays:
            with Canvas.from_path(ov.source, cfg.cache_dir) as src:
                canvas.merge(src, ov.x, ov.y, ov.strategy)
            logger.info("merged %s at (%d, %d) [%s]", ov.source, ov.x, ov.y, ov.strategy.name)

        for bl in cfg.blends:
            with Canvas.from_path(bl.source, cfg.cache_dir) as src:
                canvas.merge_alpha(src, bl.x, bl.y, bl.alpha)
            logger.info("blended %s at (%d, %d) alpha=%d", bl.source, bl.x, bl.y, bl.alpha)

        if cfg.text:
            build_text_renderer(cfg, canvas).insert_text(cfg.text_x, cfg.text_y, cfg.text)
            logger.info("text %r at (%d, %d)", cfg.text, cfg.text_x, cfg.text_y)
    except Exception:
        canvas.release()
        raise
    return canvas


def main(argv: list[str] | None = None) -> int:
    cfg = parse_args(argv)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s [%(name)s] %(levelname)s %(message)s")

    try:
        with compose(cfg) as canvas:
            data = canvas.render()
    except ImageOverlayError as exc:
        logger.error("%s", exc)
        return 1

    if cfg.out == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        try:
            with open(cfg.out, "wb") as f:
                f.write(data)
        except OSError as exc:
            logger.error("couldn't write %s: %s", cfg.out, exc)
            return 1
        logger.info("wrote %s (%d bytes)", cfg.out, len(data))
    return 0


if __name__ == "__main__":
    sys.exit(main())
