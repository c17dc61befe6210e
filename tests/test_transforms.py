import numpy as np
import pytest
from PIL import Image

from paintmate.services import transforms as Sx


def _solid(rgba, w=5, h=4):
    px = np.empty((h, w, 4), dtype=np.uint8)
    px[...] = rgba
    return px


def _gradient():
    rng = np.random.default_rng(7)
    px = rng.integers(0, 256, size=(6, 5, 4), dtype=np.uint8)
    return px


def test_brightness_shifts_and_clamps_keeping_alpha():
    px = _solid((10, 128, 250, 77))
    out = Sx.adjust_brightness(px, 0.1)
    # +25.5 then truncated
    assert tuple(out[0, 0]) == (35, 153, 255, 77)
    out = Sx.adjust_brightness(px, -1.0)
    assert tuple(out[0, 0]) == (0, 0, 0, 77)
    assert tuple(px[0, 0]) == (10, 128, 250, 77)


def test_zero_contrast_is_identity():
    px = _gradient()
    np.testing.assert_array_equal(Sx.adjust_contrast(px, 0.0), px)


def test_contrast_spreads_values_around_mid_grey():
    px = _solid((100, 128, 160, 255))
    out = Sx.adjust_contrast(px, 0.5)
    assert out[0, 0, 0] < 100
    assert out[0, 0, 1] == 128
    assert out[0, 0, 2] > 160
    assert out[0, 0, 3] == 255


def test_full_contrast_does_not_divide_by_zero():
    out = Sx.adjust_contrast(_solid((100, 128, 160, 255)), 5.0)
    assert tuple(out[0, 0, :3]) == (0, 128, 255)


def test_neutral_hue_saturation_is_identity():
    px = _gradient()
    np.testing.assert_array_equal(Sx.adjust_hue_saturation(px, 0.0, 1.0), px)


@pytest.mark.parametrize("shift,expected", [
    (120, (0, 255, 0)),
    (240, (0, 0, 255)),
    (-120, (0, 0, 255)),
    (480, (0, 255, 0)),
])
def test_hue_rotation_wraps_modulo_360(shift, expected):
    out = Sx.adjust_hue_saturation(_solid((255, 0, 0, 200)), shift, 1.0)
    assert tuple(out[0, 0]) == expected + (200,)


def test_grey_pixels_have_hue_zero_and_ignore_rotation():
    px = _solid((90, 90, 90, 255))
    np.testing.assert_array_equal(Sx.adjust_hue_saturation(px, 77, 1.5), px)


def test_zero_saturation_gives_grey():
    out = Sx.adjust_hue_saturation(_solid((255, 0, 0, 255)), 0, 0.0)
    assert tuple(out[0, 0]) == (255, 255, 255, 255)


def test_kernels_keep_uniform_images_and_alpha():
    px = _solid((120, 60, 30, 180))
    np.testing.assert_array_equal(Sx.sharpen(px), px)
    np.testing.assert_array_equal(Sx.emboss(px), px)
    edges = Sx.edge_detect(px)
    assert np.all(edges[..., :3] == 0)
    assert np.all(edges[..., 3] == 180)


def test_edge_detect_finds_a_step():
    px = _solid((0, 0, 0, 255), w=6, h=6)
    px[:, 3:] = (255, 255, 255, 255)
    edges = Sx.edge_detect(px)
    assert edges[2, 3, 0] == 255
    assert edges[2, 0, 0] == 0


def test_blur_smooths_a_spike():
    px = _solid((0, 0, 0, 255), w=9, h=9)
    px[4, 4] = (255, 255, 255, 255)
    out = Sx.blur(px, 1.5)
    assert out.shape == px.shape
    assert 0 < out[4, 4, 0] < 255
    assert out[4, 5, 0] > 0
    np.testing.assert_array_equal(Sx.blur(px, 0), px)


def test_geometry_helpers():
    img = Image.new("RGBA", (4, 2), (0, 0, 0, 0))
    img.putpixel((0, 0), (255, 0, 0, 255))

    assert Sx.rotate_90(img).size == (2, 4)
    assert Sx.rotate_270(img).size == (2, 4)
    assert Sx.rotate_180(img).getpixel((3, 1)) == (255, 0, 0, 255)
    assert Sx.flip_horizontal(img).getpixel((3, 0)) == (255, 0, 0, 255)
    assert Sx.flip_vertical(img).getpixel((0, 1)) == (255, 0, 0, 255)
    assert Sx.resize(img, 8, 6).size == (8, 6)
    assert Sx.crop(img, 1, 0, 10, 10).size == (3, 2)
    assert Sx.rotate(img, 45).size[0] > 4
