from __future__ import annotations
import logging
import math
from enum import IntEnum
from typing import TYPE_CHECKING, Tuple

from imageoverlay.color import ALPHA_MAX, Color
from imageoverlay.errors import InvalidStateError, InvalidValueError
from imageoverlay.renderer.backend import GraphicsBackend

if TYPE_CHECKING:
    from imageoverlay.core.canvas import Canvas

logger = logging.getLogger(__name__)


class MergeStrategy(IntEnum):
    SOURCE_SIZE = 1
    DESTINATION_SIZE = 2
    DESTINATION_SIZE_NO_UPSCALE = 3


class Compositor:
    """Copies pixels of one canvas into another; never aliases buffers."""

    def __init__(self, backend: GraphicsBackend | None = None):
        self.backend = backend

    @staticmethod
    def resolve_size(dst: "Canvas", src: "Canvas", strategy: MergeStrategy) -> Tuple[int, int]:
        if strategy == MergeStrategy.DESTINATION_SIZE:
            return dst.width, dst.height
        if strategy == MergeStrategy.DESTINATION_SIZE_NO_UPSCALE:
            return min(dst.width, src.width), min(dst.height, src.height)
        return src.width, src.height

    @staticmethod
    def merge_percent(alpha: int) -> int:
        """
        Convert a 0 (opaque) .. 127 (transparent) alpha into a merge percent.
        Alpha 0 gives 100; the result never drops below 1, so some of the
        source always shows.
        """
        Color.validate_alpha(alpha)
        scaled = math.floor(alpha / ALPHA_MAX * 100 + 0.5)
        return min(max(100 - scaled, 1), 100)

    def merge(
        self,
        dst: "Canvas",
        src: "Canvas",
        dst_x: int,
        dst_y: int,
        strategy: MergeStrategy | int = MergeStrategy.SOURCE_SIZE,
    ) -> "Canvas":
        self._check(dst, src)
        try:
            strategy = MergeStrategy(strategy)
        except ValueError as exc:
            raise InvalidValueError(f"unknown merge strategy {strategy!r}") from exc
        width, height = self.resolve_size(dst, src, strategy)
        logger.debug("merge %dx%d -> %dx%d at (%d, %d) [%s]",
                     src.width, src.height, width, height, dst_x, dst_y, strategy.name)
        self._backend_for(dst).copy_resampled(dst.image, src.image, int(dst_x), int(dst_y), width, height)
        return dst

    def merge_alpha(self, dst: "Canvas", src: "Canvas", dst_x: int, dst_y: int, alpha: int = ALPHA_MAX) -> "Canvas":
        self._check(dst, src)
        percent = self.merge_percent(alpha)
        logger.debug("merge_alpha %dx%d at (%d, %d) alpha=%d percent=%d",
                     src.width, src.height, dst_x, dst_y, alpha, percent)
        self._backend_for(dst).copy_merge(dst.image, src.image, int(dst_x), int(dst_y), percent)
        return dst

    def _backend_for(self, dst: "Canvas") -> GraphicsBackend:
        return self.backend or dst.backend

    @staticmethod
    def _check(dst: "Canvas", src: "Canvas") -> None:
        if not dst.has_buffer or not src.has_buffer:
            raise InvalidStateError("attempt to merge image data using an invalid image resource")
