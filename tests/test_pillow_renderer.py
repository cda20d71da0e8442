import io

import numpy as np
import pytest
from PIL import Image

from imageoverlay.color import Color
from imageoverlay.errors import ResourceError
from imageoverlay.renderer.pillow_renderer import PillowBackend, _points_to_pixels, _rgba


@pytest.fixture
def pillow():
    return PillowBackend()


@pytest.mark.parametrize("alpha, opacity", [(0, 255), (127, 0), (64, 126)])
def test_alpha_maps_onto_pillow_opacity(alpha, opacity):
    assert _rgba(Color(1, 2, 3, alpha)) == (1, 2, 3, opacity)


def test_points_to_pixels():
    assert _points_to_pixels(7.0) == 9
    assert _points_to_pixels(12) == 16
    assert _points_to_pixels(0.1) == 1


def test_create_is_opaque_black(pillow):
    im = pillow.create(3, 2)
    assert im.mode == "RGBA"
    assert im.size == (3, 2)
    assert set(im.getcolors()) == {(6, (0, 0, 0, 255))}


@pytest.mark.parametrize("name, mime", [("a.gif", "image/gif"), ("a.jpg", "image/jpeg"),
                                        ("a.png", "image/png"), ("a.tiff", "image/tiff"),
                                        ("a.bmp", "image/bmp")])
def test_probe(pillow, make_image, name, mime):
    info = pillow.probe(str(make_image(name, size=(9, 4))))
    assert (info.width, info.height, info.mime_type) == (9, 4, mime)


def test_probe_unreadable(pillow, tmp_path):
    p = tmp_path / "x.png"
    p.write_bytes(b"")
    with pytest.raises(ResourceError, match="couldn't read image at"):
        pillow.probe(str(p))


def test_decode_converts_to_rgba(pillow, make_image):
    im = pillow.decode(str(make_image("a.gif", size=(5, 5))))
    assert im.mode == "RGBA"
    assert im.size == (5, 5)


def test_encode_png_round_trips_pixels(pillow):
    im = pillow.create(4, 4)
    im.putpixel((1, 1), (10, 20, 30, 255))
    data = pillow.encode_png(im)
    with Image.open(io.BytesIO(data)) as back:
        assert back.format == "PNG"
        assert back.convert("RGBA").getpixel((1, 1)) == (10, 20, 30, 255)


def test_copy_resampled_zero_target_is_a_no_op(pillow):
    dst = pillow.create(4, 4)
    src = Image.new("RGBA", (2, 2), (255, 255, 255, 255))
    pillow.copy_resampled(dst, src, 0, 0, 0, 4)
    assert dst.getpixel((0, 0)) == (0, 0, 0, 255)


def test_copy_resampled_respects_source_alpha(pillow):
    dst = pillow.create(4, 4)
    src = Image.new("RGBA", (4, 4), (255, 255, 255, 0))
    pillow.copy_resampled(dst, src, 0, 0, 4, 4)
    assert dst.getpixel((2, 2)) == (0, 0, 0, 255)


def test_copy_merge_keeps_destination_alpha(pillow):
    dst = Image.new("RGBA", (2, 2), (0, 0, 0, 100))
    src = Image.new("RGBA", (2, 2), (100, 100, 100, 255))
    pillow.copy_merge(dst, src, 0, 0, 50)
    assert dst.getpixel((0, 0)) == (50, 50, 50, 100)


def test_draw_text_baseline(pillow, system_font):
    im = pillow.create(60, 40)
    pillow.draw_text(im, system_font, 18, 0.0, 2, 30, Color(255, 255, 255), "Ag")
    rows = np.nonzero(np.asarray(im)[..., 0] > 0)[0]
    assert rows.size
    # ascenders sit above the baseline, the descender of "g" below it
    assert rows.min() < 30 < rows.max()


def test_draw_text_transparent_color_draws_nothing(pillow, system_font):
    im = pillow.create(60, 40)
    pillow.draw_text(im, system_font, 18, 0.0, 2, 30, Color(255, 255, 255, 127), "Ag")
    assert not np.asarray(im)[..., :3].any()


def test_draw_text_rotated(pillow, system_font):
    im = pillow.create(80, 80)
    pillow.draw_text(im, system_font, 14, 90.0, 40, 70, Color(255, 255, 255), "Tall")
    cols = np.nonzero(np.asarray(im)[..., 0] > 0)[1]
    assert cols.size
    # rotated a quarter turn the string runs upwards in a narrow band
    assert cols.max() - cols.min() < 30


def test_draw_translucent_text_keeps_canvas_opaque(pillow, system_font):
    im = pillow.create(60, 40)
    pillow.draw_text(im, system_font, 18, 0.0, 2, 30, Color(255, 255, 255, 64), "HH")
    px = np.asarray(im)
    assert set(np.unique(px[..., 3])) == {255}
    # half-strength ink shows up as grey, never full white
    assert 0 < px[..., 0].max() < 255


def test_draw_rotated_text_keeps_canvas_opaque(pillow, system_font):
    im = pillow.create(60, 60)
    pillow.draw_text(im, system_font, 14, 45.0, 20, 40, Color(255, 255, 255, 90), "Tilt")
    assert set(np.unique(np.asarray(im)[..., 3])) == {255}


def test_copy_resampled_blends_onto_opaque_destination(pillow):
    dst = pillow.create(4, 4)
    src = Image.new("RGBA", (4, 4), (255, 255, 255, 128))
    pillow.copy_resampled(dst, src, 0, 0, 4, 4)
    assert dst.getpixel((1, 1)) == (128, 128, 128, 255)


def test_copy_resampled_clips_to_destination(pillow):
    dst = pillow.create(4, 4)
    src = Image.new("RGBA", (4, 4), (255, 0, 0, 255))
    pillow.copy_resampled(dst, src, -2, 3, 4, 4)
    assert dst.getpixel((0, 3)) == (255, 0, 0, 255)
    assert dst.getpixel((1, 3)) == (255, 0, 0, 255)
    assert dst.getpixel((2, 3)) == (0, 0, 0, 255)
    assert dst.getpixel((0, 2)) == (0, 0, 0, 255)


def test_copy_resampled_fully_outside_is_a_no_op(pillow):
    dst = pillow.create(4, 4)
    src = Image.new("RGBA", (2, 2), (255, 255, 255, 255))
    pillow.copy_resampled(dst, src, 4, 0, 2, 2)
    assert set(dst.getcolors()) == {(16, (0, 0, 0, 255))}
