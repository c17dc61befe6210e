# paintmate/services/compositing.py
"""Layer compositing: straight-alpha "over" with a per-mode colour term.

Layers are stacked bottom (index 0) to top. For every visible layer the
accumulator is updated per pixel:

    base_a   = base.alpha / 255
    ov_a     = overlay.alpha / 255 * layer.opacity
    result_a = ov_a + base_a * (1 - ov_a)
    final_c  = (B(base_c, ov_c) * ov_a + base_c * base_a * (1 - ov_a)) / result_a

Pixels with ``ov_a == 0`` are left untouched.
"""
from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Callable, Dict

import numpy as np

from paintmate.errors import InvariantError

if TYPE_CHECKING:
    from paintmate.document import Document, Layer

__all__ = ["BlendMode", "blend_channel", "composite_layer", "flatten", "BACKGROUND"]

# accumulator starts as transparent white
BACKGROUND = (255, 255, 255, 0)


class BlendMode(enum.Enum):
    NORMAL = "Normal"
    MULTIPLY = "Multiply"
    SCREEN = "Screen"
    OVERLAY = "Overlay"
    SOFT_LIGHT = "SoftLight"
    HARD_LIGHT = "HardLight"
    COLOR_DODGE = "ColorDodge"
    COLOR_BURN = "ColorBurn"
    DARKEN = "Darken"
    LIGHTEN = "Lighten"
    DIFFERENCE = "Difference"
    EXCLUSION = "Exclusion"

    @classmethod
    def from_name(cls, name: str) -> "BlendMode":
        key = str(name).replace(" ", "").replace("_", "").lower()
        for mode in cls:
            if mode.value.lower() == key:
                return mode
        raise ValueError(f"Unknown blend mode: {name!r}")


# --- blend formulas: a = base channel, o = overlay channel, both in [0, 1] ---

def _normal(a, o):
    return o

def _multiply(a, o):
    return a * o

def _screen(a, o):
    return 1.0 - (1.0 - a) * (1.0 - o)

def _overlay(a, o):
    return np.where(a < 0.5, 2.0 * a * o, 1.0 - 2.0 * (1.0 - a) * (1.0 - o))

def _soft_light(a, o):
    g = np.where(a <= 0.25, ((16.0 * a - 12.0) * a + 4.0) * a, np.sqrt(a))
    return np.where(o < 0.5,
                    a - (1.0 - 2.0 * o) * a * (1.0 - a),
                    a + (2.0 * o - 1.0) * (g - a))

def _hard_light(a, o):
    return np.where(o < 0.5, 2.0 * a * o, 1.0 - 2.0 * (1.0 - a) * (1.0 - o))

def _color_dodge(a, o):
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(o >= 1.0, 1.0, np.minimum(1.0, a / (1.0 - o)))

def _color_burn(a, o):
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(o <= 0.0, 0.0, 1.0 - np.minimum(1.0, (1.0 - a) / o))

def _darken(a, o):
    return np.minimum(a, o)

def _lighten(a, o):
    return np.maximum(a, o)

def _difference(a, o):
    return np.abs(a - o)

def _exclusion(a, o):
    return a + o - 2.0 * a * o


_BLEND_FUNCS: Dict[BlendMode, Callable] = {
    BlendMode.NORMAL:      _normal,
    BlendMode.MULTIPLY:    _multiply,
    BlendMode.SCREEN:      _screen,
    BlendMode.OVERLAY:     _overlay,
    BlendMode.SOFT_LIGHT:  _soft_light,
    BlendMode.HARD_LIGHT:  _hard_light,
    BlendMode.COLOR_DODGE: _color_dodge,
    BlendMode.COLOR_BURN:  _color_burn,
    BlendMode.DARKEN:      _darken,
    BlendMode.LIGHTEN:     _lighten,
    BlendMode.DIFFERENCE:  _difference,
    BlendMode.EXCLUSION:   _exclusion,
}


def blend_channel(mode: BlendMode, a, o):
    """B(a, o) for one blend mode. Works on floats and on numpy arrays alike."""
    try:
        fn = _BLEND_FUNCS[mode]
    except KeyError:
        raise ValueError(f"Unsupported blend mode: {mode!r}") from None
    a = np.asarray(a, dtype=np.float64)
    o = np.asarray(o, dtype=np.float64)
    return np.broadcast_to(fn(a, o), np.broadcast(a, o).shape)


def _to_u8(values: np.ndarray) -> np.ndarray:
    # round half up, then clamp
    return np.clip(np.floor(values * 255.0 + 0.5), 0, 255).astype(np.uint8)


def composite_layer(acc: np.ndarray, layer: "Layer") -> None:
    """Blend one layer onto the accumulator in place.

    Raises :class:`InvariantError` when the layer is not the accumulator's size.
    """
    if layer.pixels.shape != acc.shape:
        raise InvariantError(f"layer {layer.name!r} is {layer.pixels.shape[1]}x{layer.pixels.shape[0]}, "
                             f"expected {acc.shape[1]}x{acc.shape[0]}")
    _blend_into(acc, layer.pixels, layer)


def _blend_into(acc: np.ndarray, src: np.ndarray, layer: "Layer") -> None:
    base = acc.astype(np.float64) / 255.0
    over = src.astype(np.float64) / 255.0

    base_a = base[..., 3]
    ov_a = over[..., 3] * float(layer.opacity)
    touched = ov_a > 0.0
    if not touched.any():
        return

    result_a = ov_a + base_a * (1.0 - ov_a)
    base_c = base[..., :3]
    blended = blend_channel(layer.blend_mode, base_c, over[..., :3])

    with np.errstate(divide="ignore", invalid="ignore"):
        final_c = (blended * ov_a[..., None] + base_c * (base_a * (1.0 - ov_a))[..., None]) \
                  / result_a[..., None]

    out = np.empty_like(acc)
    out[..., :3] = _to_u8(np.nan_to_num(final_c))
    out[..., 3] = _to_u8(result_a)
    out[result_a == 0.0] = (0, 0, 0, 0)

    acc[touched] = out[touched]


def flatten(document: "Document") -> np.ndarray:
    """Compose all visible layers of ``document`` into a new RGBA buffer."""
    acc = np.empty((document.height, document.width, 4), dtype=np.uint8)
    acc[...] = BACKGROUND
    for layer in document.layers:
        if not layer.visible:
            continue
        composite_layer(acc, layer)
    return acc
