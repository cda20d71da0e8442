from __future__ import annotations
import os
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from imageoverlay.renderer.backend import GraphicsBackend, ImageInfo

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
    "/Library/Fonts/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


class FakeHandle:
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.closed = False


class RecordingBackend(GraphicsBackend):
    """Backend double that records every call instead of touching pixels."""

    def __init__(self, fail_on_draw: int | None = None):
        self.calls: list[tuple] = []
        self.draws: list[dict] = []
        self.destroyed: list[FakeHandle] = []
        self.fail_on_draw = fail_on_draw

    def probe(self, path):
        raise NotImplementedError

    def decode(self, path):
        raise NotImplementedError

    def create(self, width, height):
        self.calls.append(("create", width, height))
        return FakeHandle(width, height)

    def draw_text(self, handle, font_path, size, angle, x, y, color, text):
        if self.fail_on_draw is not None and len(self.draws) + 1 == self.fail_on_draw:
            raise RuntimeError("rasterizer exploded")
        # snapshot: the colour object may be mutated after the call
        self.draws.append({
            "handle": handle,
            "font": font_path,
            "size": size,
            "angle": angle,
            "xy": (x, y),
            "color": color.as_tuple(),
            "text": text,
        })

    def copy_resampled(self, dst, src, dst_x, dst_y, width, height):
        self.calls.append(("copy_resampled", dst, src, dst_x, dst_y, width, height))

    def copy_merge(self, dst, src, dst_x, dst_y, percent):
        self.calls.append(("copy_merge", dst, src, dst_x, dst_y, percent))

    def encode_png(self, handle):
        return b"png"

    def destroy(self, handle):
        handle.closed = True
        self.destroyed.append(handle)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_image(tmp_path):
    """Write a solid-colour image to tmp_path and return its path."""
    def _make(name: str, size=(32, 24), color=(200, 40, 40, 255), fmt: str | None = None) -> Path:
        path = tmp_path / name
        im = Image.new("RGBA", size, color)
        fmt = fmt or {".gif": "GIF", ".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG",
                      ".tif": "TIFF", ".tiff": "TIFF", ".bmp": "BMP"}[path.suffix.lower()]
        if fmt in ("JPEG", "BMP"):
            im = im.convert("RGB")
        elif fmt == "GIF":
            im = im.convert("P")
        im.save(path, format=fmt)
        return path
    return _make


@pytest.fixture
def noisy_png(tmp_path) -> Path:
    """A large incompressible PNG, so truncating it cuts into the pixel data."""
    rng = np.random.default_rng(1234)
    data = rng.integers(0, 256, size=(128, 128, 4), dtype=np.uint8)
    path = tmp_path / "noise.png"
    Image.fromarray(data).save(path, format="PNG")
    return path


@pytest.fixture
def font_file(tmp_path) -> Path:
    """Any readable file passes font validation; only the real backend parses it."""
    path = tmp_path / "fake-font.ttf"
    path.write_bytes(b"\x00\x01\x00\x00fake")
    return path


@pytest.fixture
def system_font() -> str:
    for candidate in FONT_CANDIDATES:
        if os.path.isfile(candidate):
            return candidate
    pytest.skip("no TrueType font installed")


@pytest.fixture
def failing_backend() -> RecordingBackend:
    """Records draws and raises on the third one."""
    return RecordingBackend(fail_on_draw=3)
