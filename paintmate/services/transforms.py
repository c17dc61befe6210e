# paintmate/services/transforms.py
"""Stateless pixel transforms.

Colour adjustments and filters take an RGBA ``uint8`` buffer and return a new
one of the same shape, leaving alpha as it was. Geometric operations work on
PIL images and are applied to every layer through ``Document.transform_layers``.
"""
from __future__ import annotations
import numpy as np
import cv2
from PIL import Image

# ---------- colour adjustments ----------

def adjust_brightness(pixels: np.ndarray, brightness: float) -> np.ndarray:
    """Add ``brightness * 255`` to every colour channel. ``brightness`` is in [-1, 1]."""
    out = pixels.copy()
    rgb = pixels[..., :3].astype(np.float32) + float(brightness) * 255.0
    out[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)
    return out


def _contrast_factor(contrast: float) -> float:
    c = max(-1.0, min(1.0, float(contrast))) * 255.0
    return (259.0 * (c + 255.0)) / (255.0 * (259.0 - c))


def adjust_contrast(pixels: np.ndarray, contrast: float) -> np.ndarray:
    """Classic contrast curve around mid-grey 128. ``contrast`` is in [-1, 1]."""
    factor = _contrast_factor(contrast)
    out = pixels.copy()
    rgb = factor * (pixels[..., :3].astype(np.float32) - 128.0) + 128.0
    out[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)
    return out


def _rgb_to_hsv(rgb: np.ndarray):
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    delta = mx - mn
    safe = np.where(delta == 0, 1.0, delta)

    h = np.where(mx == r, 60.0 * np.mod((g - b) / safe, 6.0),
        np.where(mx == g, 60.0 * ((b - r) / safe + 2.0),
                          60.0 * ((r - g) / safe + 4.0)))
    h = np.where(delta == 0, 0.0, h)
    s = np.where(mx == 0, 0.0, delta / np.where(mx == 0, 1.0, mx))
    return h, s, mx


def _hsv_to_rgb(h: np.ndarray, s: np.ndarray, v: np.ndarray) -> np.ndarray:
    c = v * s
    x = c * (1.0 - np.abs(np.mod(h / 60.0, 2.0) - 1.0))
    m = v - c
    zero = np.zeros_like(c)
    sector = np.clip(np.floor(h / 60.0), 0, 5).astype(np.int8)
    conds = [sector == i for i in range(6)]
    r = np.select(conds, [c, x, zero, zero, x, c])
    g = np.select(conds, [x, c, c, x, zero, zero])
    b = np.select(conds, [zero, zero, x, c, c, x])
    return np.stack([r + m, g + m, b + m], axis=-1)


def adjust_hue_saturation(pixels: np.ndarray, hue_shift: float, saturation: float) -> np.ndarray:
    """Rotate hue by ``hue_shift`` degrees (mod 360) and scale saturation."""
    rgb = pixels[..., :3].astype(np.float64) / 255.0
    h, s, v = _rgb_to_hsv(rgb)
    h = np.mod(h + float(hue_shift), 360.0)
    s = np.clip(s * float(saturation), 0.0, 1.0)
    out = pixels.copy()
    out[..., :3] = np.clip(np.floor(_hsv_to_rgb(h, s, v) * 255.0 + 0.5), 0, 255).astype(np.uint8)
    return out

# ---------- filters (OpenCV) ----------

def _sharpen_kernel() -> np.ndarray:
    return np.array([[ 0,-1, 0],
                     [-1, 5,-1],
                     [ 0,-1, 0]], dtype=np.float32)

def _edge_kernel() -> np.ndarray:
    return np.array([[-1,-1,-1],
                     [-1, 8,-1],
                     [-1,-1,-1]], dtype=np.float32)

def _emboss_kernel() -> np.ndarray:
    return np.array([[-2,-1, 0],
                     [-1, 1, 1],
                     [ 0, 1, 2]], dtype=np.float32)


def _convolve_rgb(pixels: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """3x3 convolution over the colour channels, alpha untouched."""
    out = pixels.copy()
    rgb = np.ascontiguousarray(pixels[..., :3])
    out[..., :3] = cv2.filter2D(rgb, -1, kernel, borderType=cv2.BORDER_REFLECT_101)
    return out


def blur(pixels: np.ndarray, radius: float) -> np.ndarray:
    """Gaussian blur, ``radius`` is the sigma in pixels. Alpha is blurred too."""
    if radius <= 0:
        return pixels.copy()
    return cv2.GaussianBlur(np.ascontiguousarray(pixels), (0, 0), sigmaX=float(radius))


def sharpen(pixels: np.ndarray) -> np.ndarray:
    return _convolve_rgb(pixels, _sharpen_kernel())


def edge_detect(pixels: np.ndarray) -> np.ndarray:
    return _convolve_rgb(pixels, _edge_kernel())


def emboss(pixels: np.ndarray) -> np.ndarray:
    return _convolve_rgb(pixels, _emboss_kernel())

# ---------- geometry (PIL) ----------

def resize(img: Image.Image, width: int, height: int) -> Image.Image:
    return img.resize((max(1, int(width)), max(1, int(height))), Image.LANCZOS)

def crop(img: Image.Image, x: int, y: int, width: int, height: int) -> Image.Image:
    """Crop, clipped to the image bounds."""
    x0 = max(0, min(img.width - 1, int(x)))
    y0 = max(0, min(img.height - 1, int(y)))
    x1 = max(x0 + 1, min(img.width, int(x) + int(width)))
    y1 = max(y0 + 1, min(img.height, int(y) + int(height)))
    return img.crop((x0, y0, x1, y1))

def rotate(img: Image.Image, angle_deg: float) -> Image.Image:
    """Clockwise rotation by an arbitrary angle, canvas expanded, corners transparent."""
    return img.rotate(-angle_deg, resample=Image.BICUBIC, expand=True, fillcolor=(0, 0, 0, 0))

def rotate_90(img: Image.Image) -> Image.Image:
    return img.rotate(-90, expand=True)

def rotate_180(img: Image.Image) -> Image.Image:
    return img.rotate(180, expand=True)

def rotate_270(img: Image.Image) -> Image.Image:
    return img.rotate(90, expand=True)

def flip_horizontal(img: Image.Image) -> Image.Image:
    return img.transpose(Image.FLIP_LEFT_RIGHT)

def flip_vertical(img: Image.Image) -> Image.Image:
    return img.transpose(Image.FLIP_TOP_BOTTOM)
