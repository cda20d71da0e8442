from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from imageoverlay.color import Color

if TYPE_CHECKING:
    from imageoverlay.core.canvas import Canvas


class Text(ABC):
    """
    Interface shared by TextRenderer and every decorator wrapping it.

    Setters return the receiver so calls can be chained; the properties
    are shorthands for the get_/set_ pairs.
    """

    @abstractmethod
    def set_canvas(self, canvas: Optional["Canvas"]) -> "Text": ...

    @abstractmethod
    def get_canvas(self) -> Optional["Canvas"]: ...

    @abstractmethod
    def set_text_color(self, color: Optional[Color]) -> "Text": ...

    @abstractmethod
    def get_text_color(self) -> Optional[Color]: ...

    @abstractmethod
    def set_text_font(self, path: str) -> "Text": ...

    @abstractmethod
    def get_text_font(self) -> Optional[str]: ...

    @abstractmethod
    def set_text_size(self, size: float) -> "Text": ...

    @abstractmethod
    def get_text_size(self) -> float: ...

    @abstractmethod
    def insert_text(self, x: int, y: int, text: str) -> "Text": ...

    def supports(self, name: str) -> bool:
        """True if this component itself provides the named operation."""
        return callable(getattr(type(self), name, None))

    canvas = property(lambda self: self.get_canvas(), lambda self, v: self.set_canvas(v))
    text_color = property(lambda self: self.get_text_color(), lambda self, v: self.set_text_color(v))
    text_font = property(lambda self: self.get_text_font(), lambda self, v: self.set_text_font(v))
    text_size = property(lambda self: self.get_text_size(), lambda self, v: self.set_text_size(v))
