from __future__ import annotations
import tkinter as tk
from typing import Callable, Optional

import numpy as np
from PIL import Image, ImageTk

CHECKER = 8


def _checkerboard(w: int, h: int) -> Image.Image:
    ys, xs = np.indices((h, w))
    light = ((xs // CHECKER + ys // CHECKER) % 2 == 0)
    arr = np.where(light[..., None], 204, 153).astype(np.uint8).repeat(3, axis=2)
    return Image.fromarray(arr).convert("RGBA")


class ImageCanvas(tk.Frame):
    """Shows the document composite and turns pointer drags into stroke callbacks."""
    def __init__(self, master, *, bg="#111"):
        super().__init__(master, bg=bg)
        self._canvas = tk.Canvas(self, bg=bg, highlightthickness=0, cursor="crosshair")
        self._canvas.pack(expand=True, fill=tk.BOTH)
        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._item = None
        self.zoom = 1.0

        self._on_stroke_begin: Optional[Callable[[], None]] = None
        self._on_stroke_move: Optional[Callable[[float, float, bool], None]] = None
        self._on_stroke_end: Optional[Callable[[], None]] = None
        self._on_wheel: Optional[Callable[[int], None]] = None

        for btn, erase in (("1", False), ("3", True)):
            self._canvas.bind(f"<ButtonPress-{btn}>", lambda e, er=erase: self._press(e, er))
            self._canvas.bind(f"<B{btn}-Motion>", lambda e, er=erase: self._move(e, er))
            self._canvas.bind(f"<ButtonRelease-{btn}>", self._release)
        self._canvas.bind("<MouseWheel>", lambda e: self._wheel(+1 if e.delta > 0 else -1))
        self._canvas.bind("<Button-4>", lambda e: self._wheel(+1))
        self._canvas.bind("<Button-5>", lambda e: self._wheel(-1))

    def set_callbacks(self, *, begin, move, end, wheel=None):
        self._on_stroke_begin = begin
        self._on_stroke_move = move
        self._on_stroke_end = end
        self._on_wheel = wheel

    def set_pixels(self, pixels: Optional[np.ndarray], zoom: float = 1.0):
        self.zoom = zoom
        if pixels is None:
            self._canvas.delete("all")
            self._item = None
            self._tk_image = None
            return
        h, w = pixels.shape[:2]
        img = Image.alpha_composite(_checkerboard(w, h), Image.fromarray(np.ascontiguousarray(pixels)))
        tw = max(1, int(w * zoom))
        th = max(1, int(h * zoom))
        if (tw, th) != (w, h):
            img = img.resize((tw, th), Image.NEAREST)
        self._tk_image = ImageTk.PhotoImage(img)
        if self._item is None:
            self._item = self._canvas.create_image(0, 0, anchor="nw", image=self._tk_image)
        else:
            self._canvas.itemconfigure(self._item, image=self._tk_image)
        self._canvas.configure(scrollregion=(0, 0, tw, th))

    # ---- pointer ----
    def _pos(self, event):
        return self._canvas.canvasx(event.x), self._canvas.canvasy(event.y)

    def _press(self, event, erase):
        if self._on_stroke_begin:
            self._on_stroke_begin()
        self._move(event, erase)

    def _move(self, event, erase):
        if self._on_stroke_move:
            x, y = self._pos(event)
            self._on_stroke_move(x, y, erase)

    def _release(self, _event):
        if self._on_stroke_end:
            self._on_stroke_end()

    def _wheel(self, direction: int):
        if self._on_wheel:
            self._on_wheel(direction)
