from __future__ import annotations
import logging
import os
from typing import TYPE_CHECKING, Optional

from imageoverlay.color import Color
from imageoverlay.errors import InvalidConfigError, InvalidStateError, ResourceError
from imageoverlay.renderer.backend import GraphicsBackend
from imageoverlay.text.base import Text

if TYPE_CHECKING:
    from imageoverlay.core.canvas import Canvas

logger = logging.getLogger(__name__)

DEFAULT_TEXT_SIZE = 7.0


def _readable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


class TextRenderer(Text):
    """Draws TrueType text onto a canvas, baseline-anchored at (x, y)."""

    def __init__(self, canvas: Optional["Canvas"] = None, *, backend: GraphicsBackend | None = None):
        self._canvas = canvas
        self._text_color: Optional[Color] = None
        self._text_font: Optional[str] = None
        self._text_size = DEFAULT_TEXT_SIZE
        self.text_angle = 0.0
        self._backend = backend

    def set_canvas(self, canvas: Optional["Canvas"]) -> "TextRenderer":
        self._canvas = canvas
        return self

    def get_canvas(self) -> Optional["Canvas"]:
        return self._canvas

    def set_text_color(self, color: Optional[Color]) -> "TextRenderer":
        self._text_color = color
        return self

    def get_text_color(self) -> Optional[Color]:
        return self._text_color

    def set_text_font(self, path: str | os.PathLike) -> "TextRenderer":
        path = os.fspath(path)
        if not _readable_file(path):
            raise InvalidConfigError(f"unable to load font file at {path}")
        self._text_font = os.path.realpath(path)
        return self

    def get_text_font(self) -> Optional[str]:
        return self._text_font

    def set_text_size(self, size: float) -> "TextRenderer":
        self._text_size = float(size)
        return self

    def get_text_size(self) -> float:
        return self._text_size

    def insert_text(self, x: int, y: int, text: str) -> "TextRenderer":
        canvas = self._canvas
        if canvas is None or not canvas.has_buffer:
            raise InvalidStateError("attempt to render text onto invalid image resource")
        if self._text_color is None:
            raise InvalidStateError("attempt to render text without setting a color")
        if not self._text_font:
            raise InvalidStateError("no font file selected for rendering text overlay")
        # the file may have gone away since set_text_font()
        if not _readable_file(self._text_font):
            raise ResourceError(f"failed to read font file '{self._text_font}'")

        backend = self._backend or canvas.backend
        logger.debug("draw %r at (%d, %d) size=%.1f color=%r", text, x, y, self._text_size, self._text_color)
        backend.draw_text(
            canvas.image,
            self._text_font,
            self._text_size,
            self.text_angle,
            int(x),
            int(y),
            self._text_color,
            text,
        )
        return self
