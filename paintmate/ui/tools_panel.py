from __future__ import annotations
import tkinter as tk

class ToolsPanel(tk.Frame):
    """Brush settings plus buttons for adjustments, filters and transforms"""
    def __init__(self, master, *, brush_size=10.0):
        super().__init__(master)

        # Canvas + Scrollbar
        self._canvas = tk.Canvas(self, borderwidth=0, highlightthickness=1)
        self._scroll = tk.Scrollbar(self, orient="vertical", command=self._canvas.yview)
        self._canvas.configure(yscrollcommand=self._scroll.set)
        self._canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=8, pady=(0,8))
        self._scroll.pack(side=tk.RIGHT, fill=tk.Y, pady=(0,8))

        self._inner = tk.Frame(self._canvas)
        self._win = self._canvas.create_window((0,0), window=self._inner, anchor="nw")

        def _cfg(_e=None):
            self._canvas.configure(scrollregion=self._canvas.bbox("all"))
            self._canvas.itemconfigure(self._win, width=self._canvas.winfo_width())

        self._inner.bind("<Configure>", _cfg)
        self._canvas.bind("<Configure>", lambda e: self._canvas.itemconfigure(self._win, width=e.width))

        # brush
        brush = tk.LabelFrame(self._inner, text="Brush")
        brush.pack(fill=tk.X, padx=8, pady=(0,8))
        self.brush_size = tk.DoubleVar(value=brush_size)
        tk.Scale(brush, from_=1, to=100, resolution=1, orient=tk.HORIZONTAL,
                 label="Size, px", variable=self.brush_size).pack(fill=tk.X, padx=4)
        self._swatch = tk.Button(brush, text="Colour…", bg="#000000", fg="#ffffff")
        self._swatch.pack(fill=tk.X, padx=4, pady=4)

        # buttons
        self.btns = {}
        self.btns["color"]      = self._swatch
        self.btns["adjust"]     = self._mk_button("Adjust colours…", pady=(0,8))
        self.btns["blur"]       = self._mk_button("Blur")
        self.btns["sharpen"]    = self._mk_button("Sharpen")
        self.btns["edges"]      = self._mk_button("Edge detect")
        self.btns["emboss"]     = self._mk_button("Emboss", pady=(0,8))
        self.btns["rot90cw"]    = self._mk_button("Rotate 90°↻")
        self.btns["rot180"]     = self._mk_button("Rotate 180°")
        self.btns["rot90ccw"]   = self._mk_button("Rotate 90°↺")
        self.btns["flip_h"]     = self._mk_button("Flip horizontal")
        self.btns["flip_v"]     = self._mk_button("Flip vertical")
        self.btns["resize"]     = self._mk_button("Resize…", pady=(6,8))

        self.set_image_loaded(False)

    def _mk_button(self, text, *, pady=(0,6)):
        b = tk.Button(self._inner, text=text, state="disabled")
        b.pack(fill=tk.X, pady=pady, padx=8)
        return b

    def set_callbacks(self, mapping: dict[str, callable]):
        for k, cb in mapping.items():
            if k in self.btns:
                self.btns[k].config(command=cb)

    def set_color(self, rgba):
        r, g, b = rgba[:3]
        fg = "#000000" if (r * 299 + g * 587 + b * 114) > 128000 else "#ffffff"
        self._swatch.config(bg=f"#{r:02x}{g:02x}{b:02x}", fg=fg)

    def set_image_loaded(self, flag: bool):
        state = "normal" if flag else "disabled"
        for k, b in self.btns.items():
            if k != "color":
                b.config(state=state)
