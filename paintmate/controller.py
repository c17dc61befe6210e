# paintmate/controller.py
from __future__ import annotations
import logging
import math
from collections import deque
from typing import Callable, Deque, List, Optional

import numpy as np
from PIL import Image

from paintmate.config import AppConfig
from paintmate.document import BlendMode, Document
from paintmate.errors import ImageIOError
from paintmate.model import Model
from paintmate.services import io as Sio, metadata as Smeta, transforms as Sx
from paintmate.services.history import HistoryManager
from paintmate.services.worker import FileWorker, OPEN, SAVE

logger = logging.getLogger(__name__)

ERASE_COLOR = (255, 255, 255, 0)

FILTERS = {
    "blur":    lambda px, radius=2.0: Sx.blur(px, radius),
    "sharpen": lambda px: Sx.sharpen(px),
    "edges":   lambda px: Sx.edge_detect(px),
    "emboss":  lambda px: Sx.emboss(px),
}


class Controller:
    def __init__(self, model: Model, config: Optional[AppConfig] = None,
                 worker: Optional[FileWorker] = None):
        self.cfg = config or AppConfig()
        self.m = model
        if self.m.history.capacity != self.cfg.history_capacity:
            self.m.history = HistoryManager(self.cfg.history_capacity)
        self.m.brush_size = self.cfg.brush_size
        self.worker = worker or FileWorker()
        self._stroke_active = False
        self._stroke_drawn = False
        # bumped on every change of the live document; a finished save only
        # clears `modified` if nothing changed since it was requested
        self._revision = 0
        self._pending_saves: Deque[int] = deque()

    @property
    def doc(self) -> Optional[Document]:
        return self.m.document

    # ---- state queries ----
    def has_image(self) -> bool:
        return self.m.document is not None

    def can_undo(self) -> bool:
        return self.has_image() and self.m.history.can_undo()

    def can_redo(self) -> bool:
        return self.has_image() and self.m.history.can_redo()

    def composite(self) -> Optional[np.ndarray]:
        return None if self.m.document is None else self.m.document.get_composite()

    def info_text(self) -> str:
        return Smeta.describe(self.m.document, path=self.m.path,
                              modified=self.m.modified, zoom=self.m.zoom)

    # ---- files ----
    def _replace_document(self, doc: Document, path: Optional[str]) -> None:
        doc.check_invariants()
        self.m.document = doc
        self.m.path = path
        self.m.modified = False
        self.m.zoom = 1.0
        self.m.history.clear()
        self._revision += 1
        # the initial state is the bottom of the undo stack
        self.m.history.push_state(doc)
        self._stroke_active = False
        logger.info("document %dx%d (%s)", doc.width, doc.height, path or "untitled")

    def new_image(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        self._replace_document(Document.new(width or self.cfg.default_width,
                                            height or self.cfg.default_height), None)

    def open_image(self, path: str) -> None:
        """Synchronous open. ImageIOError leaves the current document untouched."""
        self._replace_document(Document.from_pixels(Sio.open_image(path)), path)

    def save_image(self, path: Optional[str] = None) -> None:
        if self.m.document is None:
            return
        target = path or self.m.path
        if not target:
            raise ImageIOError("No file path specified")
        Sio.save_image(target, self.m.document.flatten())
        self.m.path = target
        self.m.modified = False

    # ---- background file operations ----
    def request_open(self, path: str) -> None:
        self.worker.submit_open(path)

    def request_save(self, path: Optional[str] = None) -> None:
        if self.m.document is None:
            return
        target = path or self.m.path
        if not target:
            raise ImageIOError("No file path specified")
        self._pending_saves.append(self._revision)
        self.worker.submit_save(target, self.m.document)

    def process_file_operations(self) -> List[str]:
        """Apply finished file operations (UI thread, once per frame). Returns error messages."""
        errors: List[str] = []
        for res in self.worker.drain():
            # saves complete in submission order
            saved_revision = self._pending_saves.popleft() \
                if res.op == SAVE and self._pending_saves else None
            if not res.ok:
                errors.append(f"Failed to {res.op} {res.path}: {res.error}")
                continue
            if res.op == OPEN:
                self._replace_document(res.document, res.path)
            elif res.op == SAVE:
                self.m.path = res.path
                if saved_revision == self._revision:
                    self.m.modified = False
                else:
                    logger.debug("document changed since save of %s was requested", res.path)
        return errors

    def shutdown(self) -> None:
        self.worker.shutdown()

    # ---- history ----
    def commit(self) -> None:
        """Record the current document as a new history state (call after each edit)."""
        if self.m.document is None:
            return
        self.m.history.push_state(self.m.document)
        self.m.modified = True
        self._revision += 1

    def apply_edit(self, fn: Callable[[Document], object]) -> bool:
        doc = self.m.document
        if doc is None:
            return False
        before = doc.copy()
        fn(doc)
        # ignored calls (bad index, unchanged value) are not history entries
        if doc == before:
            return False
        self.commit()
        return True

    def undo(self) -> bool:
        if self.m.document is None:
            return False
        prev = self.m.history.undo()
        if prev is None:
            return False
        self.m.document = prev
        self.m.modified = True
        self._revision += 1
        return True

    def redo(self) -> bool:
        if self.m.document is None:
            return False
        nxt = self.m.history.redo()
        if nxt is None:
            return False
        self.m.document = nxt
        self.m.modified = True
        self._revision += 1
        return True

    # ---- layers ----
    def add_layer(self, name: Optional[str] = None) -> bool:
        if self.m.document is None:
            return False
        name = name or f"Layer {len(self.m.document.layers) + 1}"
        return self.apply_edit(lambda d: d.add_layer(name))

    def remove_layer(self, index: Optional[int] = None) -> bool:
        doc = self.m.document
        if doc is None or len(doc.layers) <= 1:
            return False
        idx = doc.active_layer if index is None else index
        return self.apply_edit(lambda d: d.remove_layer(idx))

    def duplicate_layer(self) -> bool:
        return self.apply_edit(lambda d: d.duplicate_layer())

    def select_layer(self, index: int) -> None:
        # selection is not an edit, no history entry
        if self.m.document is not None:
            self.m.document.set_active_layer(index)

    def set_layer_visible(self, index: int, visible: bool) -> bool:
        return self.apply_edit(lambda d: d.set_layer_visible(index, visible))

    def set_layer_opacity(self, index: int, opacity: float) -> bool:
        return self.apply_edit(lambda d: d.set_layer_opacity(index, opacity))

    def set_layer_blend_mode(self, index: int, mode: BlendMode) -> bool:
        return self.apply_edit(lambda d: d.set_layer_blend_mode(index, mode))

    def rename_layer(self, index: int, name: str) -> bool:
        return self.apply_edit(lambda d: d.rename_layer(index, name))

    # ---- adjustments / filters on the active layer ----
    def apply_pixel_transform(self, fn: Callable[[np.ndarray], np.ndarray]) -> bool:
        if self.m.document is None:
            return False
        return self.apply_edit(lambda d: d.replace_active_pixels(fn(d.get_active_layer().pixels)))

    def preview_pixel_transform(self, fn: Callable[[np.ndarray], np.ndarray]) -> Optional[np.ndarray]:
        """Composite with ``fn`` applied to the active layer; nothing is changed or recorded."""
        if self.m.document is None:
            return None
        tmp = self.m.document.copy()
        tmp.replace_active_pixels(fn(tmp.get_active_layer().pixels))
        return tmp.flatten()

    def apply_brightness(self, brightness: float) -> bool:
        return self.apply_pixel_transform(lambda px: Sx.adjust_brightness(px, brightness))

    def apply_contrast(self, contrast: float) -> bool:
        return self.apply_pixel_transform(lambda px: Sx.adjust_contrast(px, contrast))

    def apply_hue_saturation(self, hue_shift: float, saturation: float) -> bool:
        return self.apply_pixel_transform(lambda px: Sx.adjust_hue_saturation(px, hue_shift, saturation))

    def apply_filter(self, name: str, **params) -> bool:
        if name not in FILTERS:
            raise ValueError(f"Unknown filter: {name}")
        fn = FILTERS[name]
        return self.apply_pixel_transform(lambda px: fn(px, **params))

    # ---- geometry (all layers) ----
    def apply_geometry(self, fn: Callable[[Image.Image], Image.Image]) -> bool:
        return self.apply_edit(lambda d: d.transform_layers(fn))

    def rotate_90(self) -> bool:
        return self.apply_geometry(Sx.rotate_90)

    def rotate_180(self) -> bool:
        return self.apply_geometry(Sx.rotate_180)

    def rotate_270(self) -> bool:
        return self.apply_geometry(Sx.rotate_270)

    def flip_horizontal(self) -> bool:
        return self.apply_geometry(Sx.flip_horizontal)

    def flip_vertical(self) -> bool:
        return self.apply_geometry(Sx.flip_vertical)

    def resize(self, width: int, height: int) -> bool:
        return self.apply_geometry(lambda im: Sx.resize(im, width, height))

    def crop(self, x: int, y: int, width: int, height: int) -> bool:
        return self.apply_geometry(lambda im: Sx.crop(im, x, y, width, height))

    # ---- view ----
    def set_zoom(self, zoom: float) -> float:
        self.m.zoom = max(self.cfg.min_zoom, min(self.cfg.max_zoom, float(zoom)))
        return self.m.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.m.zoom * self.cfg.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.m.zoom / self.cfg.zoom_step)

    def screen_to_image(self, sx: float, sy: float):
        """Widget coordinates -> integer pixel coordinates."""
        return math.floor(sx / self.m.zoom), math.floor(sy / self.m.zoom)

    # ---- brush strokes ----
    def begin_stroke(self) -> None:
        self._stroke_active = True
        self._stroke_drawn = False

    def stroke_to(self, x: int, y: int, erase: bool = False) -> None:
        doc = self.m.document
        if doc is None or not self._stroke_active:
            return
        color = ERASE_COLOR if erase else self.m.primary_color
        radius = self.m.brush_size / 2.0
        if radius < 1.0:
            doc.draw_pixel(x, y, color)
        else:
            doc.draw_circle(x, y, radius, color)
        self._stroke_drawn = True

    def end_stroke(self) -> None:
        # one history entry per stroke
        if self._stroke_active and self._stroke_drawn:
            self.commit()
        self._stroke_active = False
        self._stroke_drawn = False
