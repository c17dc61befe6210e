# paintmate/services/io.py
from __future__ import annotations
import io
import logging
import os
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from paintmate.errors import ImageIOError

logger = logging.getLogger(__name__)

_EXT_FORMATS = {
    ".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".bmp": "BMP",
    ".tif": "TIFF", ".tiff": "TIFF", ".webp": "WEBP", ".gif": "GIF",
}

# formats without an alpha channel
_OPAQUE_FORMATS = ("JPEG", "BMP")


def format_for_path(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    try:
        return _EXT_FORMATS[ext]
    except KeyError:
        raise ImageIOError(f"Unsupported file extension: {ext or '(none)'}") from None


def to_pil(pixels: np.ndarray) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))


def from_pil(img: Image.Image) -> np.ndarray:
    return np.array(img.convert("RGBA"), dtype=np.uint8)


def decode_image(data: bytes) -> np.ndarray:
    """Decode any Pillow-readable raster into an RGBA buffer."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return from_pil(img)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageIOError(f"Cannot decode image: {e}") from e


def encode_image(pixels: np.ndarray, fmt: str = "PNG") -> bytes:
    """Encode an RGBA buffer; formats without alpha get an RGB copy."""
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    img = to_pil(pixels)
    if fmt in _OPAQUE_FORMATS:
        img = img.convert("RGB")
    buf = io.BytesIO()
    try:
        img.save(buf, format=fmt)
    except (KeyError, OSError, ValueError) as e:
        raise ImageIOError(f"Cannot encode image as {fmt}: {e}") from e
    return buf.getvalue()


def open_image(path: str) -> np.ndarray:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageIOError(f"Cannot read {path}: {e.strerror or e}") from e
    pixels = decode_image(data)
    logger.info("Opened %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return pixels


def save_image(path: str, pixels: np.ndarray, fmt: Optional[str] = None) -> None:
    data = encode_image(pixels, fmt or format_for_path(path))
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ImageIOError(f"Cannot write {path}: {e.strerror or e}") from e
    logger.info("Saved %s (%d bytes)", path, len(data))
