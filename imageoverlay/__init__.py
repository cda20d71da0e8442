"""Image composition and text overlay on top of Pillow."""

from imageoverlay.color import Color
from imageoverlay.core.cache import CacheLoader
from imageoverlay.core.canvas import Canvas
from imageoverlay.core.compositor import Compositor, MergeStrategy
from imageoverlay.errors import (
    ImageOverlayError,
    InvalidConfigError,
    InvalidStateError,
    InvalidValueError,
    ResourceError,
    UnsupportedFormatError,
)
from imageoverlay.text import BorderDecorator, Text, TextDecorator, TextRenderer

__version__ = "1.0.0"

__all__ = [
    "BorderDecorator",
    "CacheLoader",
    "Canvas",
    "Color",
    "Compositor",
    "ImageOverlayError",
    "InvalidConfigError",
    "InvalidStateError",
    "InvalidValueError",
    "MergeStrategy",
    "ResourceError",
    "Text",
    "TextDecorator",
    "TextRenderer",
    "UnsupportedFormatError",
]
