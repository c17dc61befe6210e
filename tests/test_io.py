import numpy as np
import pytest

from paintmate.errors import ImageIOError
from paintmate.services import io as Sio


def _pixels():
    px = np.zeros((3, 4, 4), dtype=np.uint8)
    px[..., 0] = 200
    px[..., 3] = 255
    px[1, 2] = (1, 2, 3, 64)
    return px


def test_png_keeps_alpha(tmp_path):
    path = tmp_path / "a.png"
    Sio.save_image(str(path), _pixels())
    np.testing.assert_array_equal(Sio.open_image(str(path)), _pixels())


def test_jpeg_drops_alpha():
    data = Sio.encode_image(_pixels(), "jpg")
    decoded = Sio.decode_image(data)
    assert decoded.shape == (3, 4, 4)
    assert np.all(decoded[..., 3] == 255)


def test_format_for_path():
    assert Sio.format_for_path("x/y/picture.JPEG") == "JPEG"
    assert Sio.format_for_path("p.tif") == "TIFF"
    with pytest.raises(ImageIOError):
        Sio.format_for_path("notes.txt")


def test_missing_file_is_reported(tmp_path):
    with pytest.raises(ImageIOError) as exc:
        Sio.open_image(str(tmp_path / "nope.png"))
    assert "nope.png" in str(exc.value)


def test_corrupt_data_is_reported(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n garbage")
    with pytest.raises(ImageIOError):
        Sio.open_image(str(path))


def test_save_into_missing_directory_is_reported(tmp_path):
    with pytest.raises(ImageIOError):
        Sio.save_image(str(tmp_path / "no" / "such" / "dir.png"), _pixels())
