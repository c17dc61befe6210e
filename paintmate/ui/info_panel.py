# paintmate/ui/info_panel.py
from __future__ import annotations
import tkinter as tk

class InfoPanel(tk.Frame):
    """Status bar: one line of text from metadata.describe()."""
    def __init__(self, master):
        super().__init__(master, bd=1, relief=tk.SUNKEN)
        self._var = tk.StringVar(value="")
        tk.Label(self, textvariable=self._var, anchor="w").pack(side=tk.LEFT, fill=tk.X, expand=True, padx=6)

    def set_text(self, text: str):
        self._var.set(text)
