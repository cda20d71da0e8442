from __future__ import annotations
import logging
from functools import lru_cache
from io import BytesIO

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from imageoverlay.color import ALPHA_MAX, Color
from imageoverlay.core.rect import clip_placement
from imageoverlay.errors import ResourceError
from imageoverlay.renderer.backend import GraphicsBackend, ImageInfo

logger = logging.getLogger(__name__)

# Font sizes are given in points and rasterized at this resolution.
TEXT_DPI = 96
PNG_COMPRESS_LEVEL = 9

# ---------- font helpers ----------
@lru_cache(maxsize=64)
def _load_font(path: str, size_px: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(path, size=size_px)

def _points_to_pixels(size: float) -> int:
    return max(1, int(round(size * TEXT_DPI / 72.0)))

# ---------- colour helpers ----------
def _rgba(color: Color) -> tuple[int, int, int, int]:
    """Map the 0 (opaque) .. 127 (transparent) alpha onto Pillow's 255 .. 0."""
    opacity = int(round((ALPHA_MAX - color.alpha) * 255 / ALPHA_MAX))
    return (color.red, color.green, color.blue, opacity)

# ---------- backend ----------
class PillowBackend(GraphicsBackend):
    """GraphicsBackend on Pillow RGBA images."""

    def probe(self, path: str) -> ImageInfo:
        try:
            with Image.open(path) as im:
                fmt = im.format or ""
                mime = Image.MIME.get(fmt) or f"image/{fmt.lower()}"
                return ImageInfo(width=im.width, height=im.height, mime_type=mime)
        except (OSError, ValueError) as exc:
            raise ResourceError(f"couldn't read image at {path}") from exc

    def decode(self, path: str) -> Image.Image:
        try:
            with Image.open(path) as im:
                im.load()
                logger.debug("decoded %s (%s, %dx%d)", path, im.format, im.width, im.height)
                return im.convert("RGBA")
        except (OSError, ValueError, SyntaxError) as exc:
            raise ResourceError(f"couldn't read image at {path}") from exc

    def create(self, width: int, height: int) -> Image.Image:
        return Image.new("RGBA", (width, height), (0, 0, 0, 255))

    def draw_text(self, handle: Image.Image, font_path: str, size: float, angle: float,
                  x: int, y: int, color: Color, text: str) -> None:
        font = _load_font(font_path, _points_to_pixels(size))
        # Ink goes onto a clear layer that is composited over the canvas, so
        # translucent text blends instead of overwriting the canvas alpha.
        layer = Image.new("RGBA", handle.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).text((x, y), text, font=font, fill=_rgba(color), anchor="ls")
        if angle:
            # counter-clockwise around the baseline origin
            layer = layer.rotate(angle, resample=Image.BICUBIC, center=(x, y))
        handle.alpha_composite(layer)

    def copy_resampled(self, dst: Image.Image, src: Image.Image, dst_x: int, dst_y: int,
                       width: int, height: int) -> None:
        if width <= 0 or height <= 0 or src.width <= 0 or src.height <= 0:
            return
        placement = clip_placement(dst.size, (width, height), dst_x, dst_y)
        if placement is None:
            return
        dst_box, src_box = placement
        im = src if src.size == (width, height) else src.resize((width, height), Image.BILINEAR)
        dst.alpha_composite(im, dest=dst_box[:2], source=src_box)

    def copy_merge(self, dst: Image.Image, src: Image.Image, dst_x: int, dst_y: int, percent: int) -> None:
        placement = clip_placement(dst.size, src.size, dst_x, dst_y)
        if placement is None:
            return
        dst_box, src_box = placement
        under = np.asarray(dst.crop(dst_box), dtype=np.float32)
        over = np.asarray(src.crop(src_box), dtype=np.float32)
        mixed = under.copy()
        # RGB only; the destination keeps its own alpha.
        mixed[..., :3] = (under[..., :3] * (100 - percent) + over[..., :3] * percent) / 100.0
        out = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)
        dst.paste(Image.fromarray(out), dst_box)

    def encode_png(self, handle: Image.Image) -> bytes:
        buf = BytesIO()
        handle.save(buf, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
        return buf.getvalue()

    def destroy(self, handle: Image.Image) -> None:
        handle.close()


_default_backend: PillowBackend | None = None

def default_backend() -> PillowBackend:
    global _default_backend
    if _default_backend is None:
        _default_backend = PillowBackend()
    return _default_backend
