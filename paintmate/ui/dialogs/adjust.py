import tkinter as tk

NEUTRAL = {"brightness": 0.0, "contrast": 0.0, "hue": 0.0, "saturation": 1.0}

class AdjustDialog(tk.Toplevel):
    """Brightness / contrast / hue / saturation of the active layer, with live preview"""
    def __init__(self, master, on_preview, on_apply, on_cancel):
        super().__init__(master)
        self.title("Adjust colours")
        self.resizable(False, False)

        self._on_preview = on_preview      # dict of params, or None for "no preview"
        self._on_apply = on_apply          # dict of params
        self._on_cancel = on_cancel

        frm = tk.Frame(self); frm.pack(padx=10, pady=10)

        def make_scale(text, row, lo, hi, res, value):
            tk.Label(frm, text=text).grid(row=row, column=0, sticky="w", padx=6, pady=4)
            var = tk.DoubleVar(value=value)
            sc = tk.Scale(frm, from_=lo, to=hi, resolution=res, orient="horizontal", length=280, variable=var)
            sc.grid(row=row, column=1, padx=6, pady=4)
            return var

        self.vars = {
            "brightness": make_scale("Brightness", 0, -1.0, 1.0, 0.01, NEUTRAL["brightness"]),
            "contrast":   make_scale("Contrast", 1, -1.0, 1.0, 0.01, NEUTRAL["contrast"]),
            "hue":        make_scale("Hue, °", 2, -180, 180, 1, NEUTRAL["hue"]),
            "saturation": make_scale("Saturation", 3, 0.0, 2.0, 0.01, NEUTRAL["saturation"]),
        }

        self.preview_var = tk.BooleanVar(value=True)

        btns = tk.Frame(self); btns.pack(fill="x", padx=10, pady=(0, 10))
        tk.Checkbutton(btns, text="Preview", variable=self.preview_var, command=self._render_preview) \
            .pack(side="left")

        tk.Button(btns, text="Apply", command=self._apply).pack(side="right")
        tk.Button(btns, text="Reset", command=self._reset_vals).pack(side="right", padx=6)
        tk.Button(btns, text="Cancel", command=self._cancel).pack(side="right", padx=6)

        self.protocol("WM_DELETE_WINDOW", self._cancel)

        def _on_var_change(_name: str, _index: str, _op: str) -> None:
            self._render_preview()
        for var in self.vars.values():
            var.trace_add("write", _on_var_change)

        self.after(0, self._render_preview)

    def _current_params(self):
        return {k: v.get() for k, v in self.vars.items()}

    def _render_preview(self):
        if not self.winfo_exists():
            return
        self._on_preview(self._current_params() if self.preview_var.get() else None)

    def _apply(self):
        params = self._current_params()
        self.destroy()
        self._on_apply(params)

    def _reset_vals(self):
        for k, v in self.vars.items():
            v.set(NEUTRAL[k])

    def _cancel(self):
        self.destroy()
        self._on_cancel()
