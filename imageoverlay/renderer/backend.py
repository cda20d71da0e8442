from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from imageoverlay.color import Color

# Opaque pixel-buffer handle; only the backend that created it looks inside.
Handle = Any


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    mime_type: str


class GraphicsBackend(ABC):
    """
    Rasterizer boundary used by Canvas, Compositor and the text renderers.

    Once a caller has checked its preconditions none of the drawing calls
    is expected to fail; probe/decode raise ResourceError for unreadable
    input.
    """

    @abstractmethod
    def probe(self, path: str) -> ImageInfo:
        """Read dimensions and mime type from the file header."""

    @abstractmethod
    def decode(self, path: str) -> Handle:
        """Decode the full pixel payload of a GIF/JPEG/PNG file."""

    @abstractmethod
    def create(self, width: int, height: int) -> Handle:
        """Allocate an opaque black true-colour buffer."""

    @abstractmethod
    def draw_text(self, handle: Handle, font_path: str, size: float, angle: float,
                  x: int, y: int, color: Color, text: str) -> None:
        """Draw text with its baseline origin at (x, y)."""

    @abstractmethod
    def copy_resampled(self, dst: Handle, src: Handle, dst_x: int, dst_y: int,
                       width: int, height: int) -> None:
        """Scale the whole of src to width x height and draw it onto dst at (dst_x, dst_y)."""

    @abstractmethod
    def copy_merge(self, dst: Handle, src: Handle, dst_x: int, dst_y: int, percent: int) -> None:
        """Blend src over dst at native size with the given opacity percent (0-100)."""

    @abstractmethod
    def encode_png(self, handle: Handle) -> bytes:
        ...

    def destroy(self, handle: Handle) -> None:
        pass
