from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional

from imageoverlay.color import Color
from imageoverlay.errors import InvalidStateError
from imageoverlay.text.base import Text

if TYPE_CHECKING:
    from imageoverlay.core.canvas import Canvas

logger = logging.getLogger(__name__)

# Unit offsets around the origin, in drawing order.
BORDER_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


class TextDecorator(Text):
    """
    Wraps another Text and forwards the whole interface to it.

    Subclasses override what they extend. Anything outside the interface
    (a nested decorator's own setters, for instance) is looked up down the
    chain as well.
    """

    def __init__(self, inner: Text):
        self._inner = inner

    @property
    def inner(self) -> Text:
        return self._inner

    def set_canvas(self, canvas: Optional["Canvas"]) -> Text:
        return self._inner.set_canvas(canvas)

    def get_canvas(self) -> Optional["Canvas"]:
        return self._inner.get_canvas()

    def set_text_color(self, color: Optional[Color]) -> Text:
        return self._inner.set_text_color(color)

    def get_text_color(self) -> Optional[Color]:
        return self._inner.get_text_color()

    def set_text_font(self, path: str) -> Text:
        return self._inner.set_text_font(path)

    def get_text_font(self) -> Optional[str]:
        return self._inner.get_text_font()

    def set_text_size(self, size: float) -> Text:
        return self._inner.set_text_size(size)

    def get_text_size(self) -> float:
        return self._inner.get_text_size()

    def insert_text(self, x: int, y: int, text: str) -> Text:
        return self._inner.insert_text(x, y, text)

    def supports(self, name: str) -> bool:
        return super().supports(name) or self._inner.supports(name)

    def __getattr__(self, name: str):
        # only reached when normal lookup fails
        inner = self.__dict__.get("_inner")
        if inner is None or name.startswith("__"):
            raise AttributeError(name)
        try:
            return getattr(inner, name)
        except AttributeError:
            raise AttributeError(
                f"failed to call {type(self).__name__}.{name}(): not provided by any wrapped renderer"
            ) from None


class BorderDecorator(TextDecorator):
    """
    Draws a one pixel outline behind the text.

    The rasterizer has no stroke support, so the string is drawn eight
    times at unit offsets in the border colour before the fill pass. The
    border passes are forced opaque: translucent overdraws would blend
    into each other where they overlap.
    """

    def __init__(self, inner: Text, border_color: Optional[Color] = None):
        super().__init__(inner)
        self._border_color = border_color

    def set_border_color(self, color: Optional[Color]) -> "BorderDecorator":
        self._border_color = color
        return self

    def get_border_color(self) -> Optional[Color]:
        return self._border_color

    border_color = property(get_border_color, set_border_color)

    def insert_text(self, x: int, y: int, text: str) -> "BorderDecorator":
        self._require_border_color()
        # fail before the border passes rather than between border and fill
        if self.get_text_color() is None:
            raise InvalidStateError("attempt to render text without setting a color")
        self.insert_text_border(x, y, text)
        self._inner.insert_text(x, y, text)
        return self

    def insert_text_border(self, x: int, y: int, text: str) -> "BorderDecorator":
        border = self._require_border_color()
        logger.debug("border pass for %r at (%d, %d) color=%r", text, x, y, border)
        with self._drawing_with(border), self._opaque(border):
            for dx, dy in BORDER_OFFSETS:
                self._inner.insert_text(x + dx, y + dy, text)
        return self

    def _require_border_color(self) -> Color:
        if self._border_color is None:
            raise InvalidStateError("attempt to render text border without setting a color")
        return self._border_color

    @staticmethod
    @contextmanager
    def _opaque(color: Color) -> Iterator[None]:
        alpha = color.alpha
        color.alpha = 0
        try:
            yield
        finally:
            color.alpha = alpha

    @contextmanager
    def _drawing_with(self, color: Color) -> Iterator[None]:
        text_color = self.get_text_color()
        self.set_text_color(color)
        try:
            yield
        finally:
            self.set_text_color(text_color)
