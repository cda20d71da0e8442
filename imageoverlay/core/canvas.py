from __future__ import annotations
import logging
import os
import time
from typing import Dict, Optional, Tuple

from imageoverlay.color import ALPHA_MAX
from imageoverlay.core.cache import CacheLoader
from imageoverlay.core.compositor import Compositor, MergeStrategy
from imageoverlay.errors import InvalidStateError, ResourceError, UnsupportedFormatError
from imageoverlay.renderer.backend import GraphicsBackend, Handle
from imageoverlay.renderer.pillow_renderer import default_backend

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("image/gif", "image/jpeg", "image/png")
PNG_MIME_TYPE = "image/png"


class Canvas:
    """
    A backend pixel buffer plus its metadata.

    The buffer belongs to this canvas alone and is destroyed exactly once,
    by release(), by leaving a ``with`` block or at garbage collection.
    After that every pixel operation raises InvalidStateError.
    """

    def __init__(
        self,
        handle: Handle,
        width: int,
        height: int,
        mime_type: str,
        modified: int,
        *,
        backend: GraphicsBackend,
        source_path: Optional[str] = None,
        cache_path: Optional[str] = None,
    ):
        self._handle = handle
        self.width = width
        self.height = height
        self.mime_type = mime_type
        self.modified = modified
        self.backend = backend
        self.source_path = source_path
        self.cache_path = cache_path

    # ---------- acquisition ----------
    @classmethod
    def from_path(
        cls,
        path: str | os.PathLike,
        cache_dir: str | os.PathLike | None = None,
        *,
        backend: GraphicsBackend | None = None,
        loader: CacheLoader | None = None,
    ) -> "Canvas":
        """
        Decode a GIF, JPEG or PNG from a local path or URL.

        With cache_dir (or an explicit loader) the source is copied into the
        cache directory first and re-read from there while the copy is fresh.
        """
        backend = backend or default_backend()
        source = os.fspath(path)
        if loader is None and cache_dir:
            loader = CacheLoader(cache_dir)

        read_path = source
        cache_path = None
        if loader is not None:
            cache_path = loader.cache_path_for(source)
            read_path = loader.resolve(source)

        info = backend.probe(read_path)
        if info.mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedFormatError(f"Image type {info.mime_type} not supported")
        try:
            modified = int(os.path.getmtime(read_path))
        except OSError as exc:
            raise ResourceError(f"couldn't read image at {read_path}") from exc
        handle = backend.decode(read_path)

        logger.debug("loaded %s (%s, %dx%d)", read_path, info.mime_type, info.width, info.height)
        return cls(
            handle,
            info.width,
            info.height,
            info.mime_type,
            modified,
            backend=backend,
            source_path=source,
            cache_path=cache_path,
        )

    @classmethod
    def blank(cls, width: int, height: int, *, backend: GraphicsBackend | None = None) -> "Canvas":
        backend = backend or default_backend()
        width, height = int(width), int(height)
        handle = backend.create(width, height)
        return cls(handle, width, height, PNG_MIME_TYPE, int(time.time()), backend=backend)

    # ---------- buffer lifetime ----------
    @property
    def has_buffer(self) -> bool:
        return self._handle is not None

    @property
    def image(self) -> Handle:
        if self._handle is None:
            raise InvalidStateError("canvas buffer has been released")
        return self._handle

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self.backend.destroy(handle)

    def __enter__(self) -> "Canvas":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __del__(self):
        if getattr(self, "_handle", None) is not None:
            self.release()

    # ---------- compositing ----------
    def merge(
        self,
        src: "Canvas",
        dst_x: int,
        dst_y: int,
        strategy: MergeStrategy | int = MergeStrategy.SOURCE_SIZE,
    ) -> "Canvas":
        return Compositor(self.backend).merge(self, src, dst_x, dst_y, strategy)

    def merge_alpha(self, src: "Canvas", dst_x: int, dst_y: int, alpha: int = ALPHA_MAX) -> "Canvas":
        return Compositor(self.backend).merge_alpha(self, src, dst_x, dst_y, alpha)

    # ---------- output ----------
    def render(self) -> bytes:
        """Encode the canvas as PNG."""
        if not self.has_buffer:
            raise InvalidStateError("attempt to render invalid resource as image")
        return self.backend.encode_png(self._handle)

    def render_response(self) -> Tuple[Dict[str, str], bytes]:
        body = self.render()
        return {"Content-type": PNG_MIME_TYPE}, body

    def save(self, path: str | os.PathLike) -> None:
        data = self.render()
        with open(path, "wb") as f:
            f.write(data)

    def __repr__(self) -> str:
        state = "live" if self.has_buffer else "released"
        return f"Canvas({self.width}x{self.height}, {self.mime_type}, {state})"
