# paintmate/document.py
"""Document model: an ordered stack of RGBA layers plus a lazily rebuilt composite.

Pixel buffers are ``uint8`` arrays of shape ``(height, width, 4)`` (RGBA,
row-major, origin top-left). Layer 0 is the bottom of the stack.

Any code that writes into ``layer.pixels`` directly must call
:meth:`Document.mark_dirty` afterwards, otherwise :meth:`Document.get_composite`
keeps serving the old composite.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from paintmate.errors import InvariantError
from paintmate.services import compositing, io as Sio
from paintmate.services.compositing import BlendMode, BACKGROUND

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]

__all__ = ["BlendMode", "Color", "Document", "Layer", "new_pixels"]


def new_pixels(width: int, height: int, fill: Sequence[int] = BACKGROUND) -> np.ndarray:
    buf = np.empty((int(height), int(width), 4), dtype=np.uint8)
    buf[...] = fill
    return buf


@dataclass(eq=False)
class Layer:
    name: str
    pixels: np.ndarray
    visible: bool = True
    opacity: float = 1.0
    blend_mode: BlendMode = BlendMode.NORMAL

    @classmethod
    def blank(cls, name: str, width: int, height: int) -> "Layer":
        return cls(name=name, pixels=new_pixels(width, height))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def copy(self) -> "Layer":
        return Layer(self.name, self.pixels.copy(), self.visible, self.opacity, self.blend_mode)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Layer):
            return NotImplemented
        return (self.name == other.name
                and self.visible == other.visible
                and self.opacity == other.opacity
                and self.blend_mode is other.blend_mode
                and np.array_equal(self.pixels, other.pixels))

    def __repr__(self):
        return (f"Layer({self.name!r}, {self.width}x{self.height}, visible={self.visible}, "
                f"opacity={self.opacity:.2f}, blend_mode={self.blend_mode.value})")


@dataclass(eq=False)
class Document:
    width: int
    height: int
    layers: List[Layer] = field(default_factory=list)
    active_layer: int = 0
    dirty: bool = True
    _cache: Optional[np.ndarray] = field(default=None, init=False, repr=False)

    # ---- creation ----
    @classmethod
    def new(cls, width: int, height: int) -> "Document":
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Document size must be positive, got {width}x{height}")
        return cls(width, height, [Layer.blank("Background", width, height)])

    @classmethod
    def from_pixels(cls, pixels: np.ndarray, name: str = "Background") -> "Document":
        h, w = pixels.shape[:2]
        return cls(w, h, [Layer(name, np.array(pixels, dtype=np.uint8))])

    @classmethod
    def from_source(cls, data: bytes) -> "Document":
        """Decode a raster file into a single-layer document. Raises ImageIOError."""
        return cls.from_pixels(Sio.decode_image(data))

    def to_bytes(self, fmt: str = "PNG") -> bytes:
        return Sio.encode_image(self.flatten(), fmt)

    def copy(self) -> "Document":
        return Document(self.width, self.height, [layer.copy() for layer in self.layers], self.active_layer)

    # ---- invariants ----
    def check_invariants(self) -> None:
        if not self.layers:
            raise InvariantError("document has no layers")
        if not 0 <= self.active_layer < len(self.layers):
            raise InvariantError(f"active layer {self.active_layer} out of range 0..{len(self.layers) - 1}")
        for layer in self.layers:
            if layer.pixels.shape != (self.height, self.width, 4) or layer.pixels.dtype != np.uint8:
                raise InvariantError(
                    f"layer {layer.name!r} has buffer {layer.pixels.shape}/{layer.pixels.dtype}, "
                    f"expected ({self.height}, {self.width}, 4)/uint8"
                )

    def mark_dirty(self) -> None:
        self.dirty = True

    def _valid_index(self, index: int) -> bool:
        return 0 <= index < len(self.layers)

    # ---- layers ----
    def get_active_layer(self) -> Layer:
        return self.layers[self.active_layer]

    def add_layer(self, name: str) -> Layer:
        layer = Layer.blank(name, self.width, self.height)
        self.layers.append(layer)
        self.active_layer = len(self.layers) - 1
        self.dirty = True
        return layer

    def remove_layer(self, index: int) -> None:
        if len(self.layers) <= 1 or not self._valid_index(index):
            logger.debug("remove_layer(%s) ignored (%d layers)", index, len(self.layers))
            return
        del self.layers[index]
        if self.active_layer >= len(self.layers):
            self.active_layer = len(self.layers) - 1
        self.dirty = True

    def duplicate_layer(self) -> Layer:
        dup = self.get_active_layer().copy()
        dup.name = f"{dup.name} copy"
        self.layers.append(dup)
        self.active_layer = len(self.layers) - 1
        self.dirty = True
        return dup

    def set_active_layer(self, index: int) -> None:
        if self._valid_index(index):
            self.active_layer = index

    def rename_layer(self, index: int, name: str) -> None:
        if self._valid_index(index):
            self.layers[index].name = name

    def set_layer_visible(self, index: int, visible: bool) -> None:
        if self._valid_index(index):
            self.layers[index].visible = bool(visible)
            self.dirty = True

    def set_layer_opacity(self, index: int, opacity: float) -> None:
        if self._valid_index(index):
            self.layers[index].opacity = max(0.0, min(1.0, float(opacity)))
            self.dirty = True

    def set_layer_blend_mode(self, index: int, mode: BlendMode) -> None:
        if self._valid_index(index):
            self.layers[index].blend_mode = mode if isinstance(mode, BlendMode) else BlendMode.from_name(mode)
            self.dirty = True

    def replace_active_pixels(self, pixels: np.ndarray) -> None:
        """Swap in the result of an adjustment or filter for the active layer."""
        if pixels.shape != (self.height, self.width, 4):
            raise ValueError(f"buffer shape {pixels.shape} does not match document {self.width}x{self.height}")
        self.get_active_layer().pixels = np.array(pixels, dtype=np.uint8)
        self.dirty = True

    def transform_layers(self, fn: Callable[[Image.Image], Image.Image]) -> None:
        """Run a geometric PIL transform over every layer; the document takes the new size."""
        out = [Sio.from_pil(fn(Sio.to_pil(layer.pixels))) for layer in self.layers]
        sizes = {p.shape for p in out}
        if len(sizes) != 1:
            raise InvariantError(f"transform produced layers of different sizes: {sorted(sizes)}")
        for layer, pixels in zip(self.layers, out):
            layer.pixels = pixels
        self.height, self.width = out[0].shape[:2]
        self.dirty = True

    # ---- drawing ----
    def draw_pixel(self, x: int, y: int, color: Color) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.get_active_layer().pixels[y, x] = color
            self.dirty = True

    def draw_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        # scans the whole canvas, O(width*height) per dab
        ys, xs = np.ogrid[0:self.height, 0:self.width]
        mask = np.hypot(xs - cx, ys - cy) <= radius
        self.get_active_layer().pixels[mask] = color
        self.dirty = True

    # ---- compositing ----
    def flatten(self) -> np.ndarray:
        return compositing.flatten(self)

    def get_composite(self) -> np.ndarray:
        """Cached composite for display; rebuilt only when the document is dirty."""
        if self.dirty or self._cache is None:
            cache = self.flatten()
            cache.flags.writeable = False
            self._cache = cache
            self.dirty = False
        return self._cache

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return (self.width == other.width
                and self.height == other.height
                and self.active_layer == other.active_layer
                and self.layers == other.layers)
