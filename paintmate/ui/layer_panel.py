# paintmate/ui/layer_panel.py
from __future__ import annotations
import tkinter as tk
from typing import Callable, Dict, Optional

from paintmate.document import BlendMode, Document

class LayerPanel(tk.LabelFrame):
    """Layer list (top layer first) with visibility, opacity and blend mode of the active layer."""
    def __init__(self, master):
        super().__init__(master, text="Layers")
        self._cb: Dict[str, Callable] = {}
        self._doc: Optional[Document] = None
        self._updating = False

        btns = tk.Frame(self); btns.pack(fill=tk.X, padx=4, pady=4)
        self._add = tk.Button(btns, text="Add", command=lambda: self._fire("add"))
        self._del = tk.Button(btns, text="Delete", command=lambda: self._fire("delete"))
        self._dup = tk.Button(btns, text="Duplicate", command=lambda: self._fire("duplicate"))
        for b in (self._add, self._del, self._dup):
            b.pack(side=tk.LEFT, expand=True, fill=tk.X, padx=2)

        self._list = tk.Listbox(self, height=8, exportselection=False)
        self._list.pack(fill=tk.BOTH, expand=True, padx=4)
        self._list.bind("<<ListboxSelect>>", self._on_select)

        props = tk.Frame(self); props.pack(fill=tk.X, padx=4, pady=4)
        self._visible = tk.BooleanVar(value=True)
        tk.Checkbutton(props, text="Visible", variable=self._visible, command=self._on_visible)\
          .grid(row=0, column=0, sticky="w")

        self._mode = tk.StringVar(value=BlendMode.NORMAL.value)
        modes = [m.value for m in BlendMode]
        tk.OptionMenu(props, self._mode, *modes, command=self._on_mode).grid(row=0, column=1, sticky="e")

        self._opacity = tk.DoubleVar(value=100.0)
        sc = tk.Scale(props, from_=0, to=100, resolution=1, orient=tk.HORIZONTAL, label="Opacity, %",
                      variable=self._opacity)
        sc.grid(row=1, column=0, columnspan=2, sticky="we")
        # one history entry per slider gesture
        sc.bind("<ButtonRelease-1>", lambda e: self._on_opacity())
        props.columnconfigure(1, weight=1)

    def set_callbacks(self, mapping: Dict[str, Callable]):
        """Keys: add, delete, duplicate, select(i), visible(i, flag), opacity(i, v), mode(i, BlendMode)."""
        self._cb.update(mapping)

    def _fire(self, key, *args):
        cb = self._cb.get(key)
        if cb and not self._updating:
            cb(*args)

    # ---- list index <-> layer index (list is top-first) ----
    def _layer_index(self, row: int) -> int:
        return len(self._doc.layers) - 1 - row

    def refresh(self, doc: Optional[Document]):
        self._doc = doc
        self._updating = True
        try:
            self._list.delete(0, tk.END)
            state = "normal" if doc is not None else "disabled"
            for b in (self._add, self._del, self._dup):
                b.config(state=state)
            if doc is None:
                return
            for layer in reversed(doc.layers):
                eye = "●" if layer.visible else "○"
                self._list.insert(tk.END, f"{eye} {layer.name}  ({layer.opacity * 100:.0f}%, {layer.blend_mode.value})")
            row = len(doc.layers) - 1 - doc.active_layer
            self._list.selection_set(row)
            self._list.see(row)
            active = doc.get_active_layer()
            self._visible.set(active.visible)
            self._opacity.set(round(active.opacity * 100))
            self._mode.set(active.blend_mode.value)
            self._del.config(state="normal" if len(doc.layers) > 1 else "disabled")
        finally:
            self._updating = False

    def _on_select(self, _e=None):
        sel = self._list.curselection()
        if sel and self._doc is not None:
            self._fire("select", self._layer_index(sel[0]))

    def _on_visible(self):
        if self._doc is not None:
            self._fire("visible", self._doc.active_layer, self._visible.get())

    def _on_opacity(self):
        if self._doc is not None:
            self._fire("opacity", self._doc.active_layer, self._opacity.get() / 100.0)

    def _on_mode(self, value):
        if self._doc is not None:
            self._fire("mode", self._doc.active_layer, BlendMode.from_name(value))
