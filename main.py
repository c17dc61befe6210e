# main.py
import logging
import tkinter as tk
from tkinter import colorchooser, filedialog, messagebox, simpledialog

from paintmate.config import load_config
from paintmate.controller import Controller
from paintmate.errors import ImageIOError
from paintmate.model import Model
from paintmate.services import transforms as Sx
from paintmate.ui import ImageCanvas, InfoPanel, LayerPanel, ToolsPanel
from paintmate.ui.dialogs.adjust import AdjustDialog

logger = logging.getLogger("paintmate")

FRAME_MS = 16

OPEN_TYPES = [
    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.tif *.webp"),
    ("All files", "*.*"),
]
SAVE_TYPES = [
    ("PNG", "*.png"),
    ("JPEG", "*.jpg *.jpeg"),
    ("BMP", "*.bmp"),
    ("TIFF", "*.tif *.tiff"),
    ("WEBP", "*.webp"),
]


# --- application ---
class PaintMateApp(tk.Tk):
    def __init__(self, controller: Controller):
        super().__init__()
        self.c = controller
        self.title("PaintMate")
        self.geometry("1200x800")
        self.minsize(800, 600)

        self._adj_win = None
        self._preview = None          # composite shown while the adjust dialog previews
        self._shown_doc = None
        self._needs_redraw = True

        self._build_menu()

        self._paned = tk.PanedWindow(self, orient=tk.HORIZONTAL, sashrelief=tk.RAISED)
        self._paned.pack(expand=True, fill=tk.BOTH)

        self.tools_panel = ToolsPanel(self._paned, brush_size=self.c.m.brush_size)
        self._paned.add(self.tools_panel, minsize=180)

        self.image_canvas = ImageCanvas(self._paned, bg="#222")
        self._paned.add(self.image_canvas, minsize=480)

        self.layer_panel = LayerPanel(self._paned)
        self._paned.add(self.layer_panel, minsize=220)

        self.info_panel = InfoPanel(self)
        self.info_panel.pack(side=tk.BOTTOM, fill=tk.X)

        self.image_canvas.set_callbacks(begin=self._stroke_begin, move=self._stroke_move,
                                        end=self._stroke_end, wheel=self._wheel)
        self.tools_panel.set_callbacks({
            "color": self.pick_color,
            "adjust": self.open_adjust_dialog,
            "blur": lambda: self._edit(lambda: self.c.apply_filter("blur", radius=2.0)),
            "sharpen": lambda: self._edit(lambda: self.c.apply_filter("sharpen")),
            "edges": lambda: self._edit(lambda: self.c.apply_filter("edges")),
            "emboss": lambda: self._edit(lambda: self.c.apply_filter("emboss")),
            "rot90cw": lambda: self._edit(self.c.rotate_90),
            "rot180": lambda: self._edit(self.c.rotate_180),
            "rot90ccw": lambda: self._edit(self.c.rotate_270),
            "flip_h": lambda: self._edit(self.c.flip_horizontal),
            "flip_v": lambda: self._edit(self.c.flip_vertical),
            "resize": self.resize_dialog,
        })
        self.tools_panel.brush_size.trace_add("write", self._on_brush_size)
        self.layer_panel.set_callbacks({
            "add": lambda: self._edit(self.c.add_layer),
            "delete": lambda: self._edit(self.c.remove_layer),
            "duplicate": lambda: self._edit(self.c.duplicate_layer),
            "select": lambda i: self._edit(lambda: self.c.select_layer(i)),
            "visible": lambda i, v: self._edit(lambda: self.c.set_layer_visible(i, v)),
            "opacity": lambda i, v: self._edit(lambda: self.c.set_layer_opacity(i, v)),
            "mode": lambda i, m: self._edit(lambda: self.c.set_layer_blend_mode(i, m)),
        })

        self._bind_shortcuts()
        self.protocol("WM_DELETE_WINDOW", self.quit_app)
        self.c.new_image()
        self.after(FRAME_MS, self._tick)

    # --- menu / shortcuts ---
    def _build_menu(self):
        bar = tk.Menu(self)
        m_file = tk.Menu(bar, tearoff=False)
        m_file.add_command(label="New…", accelerator="Ctrl+N", command=self.new_dialog)
        m_file.add_command(label="Open…", accelerator="Ctrl+O", command=self.open_image)
        m_file.add_separator()
        m_file.add_command(label="Save", accelerator="Ctrl+S", command=self.save)
        m_file.add_command(label="Save As…", accelerator="Ctrl+Shift+S", command=self.save_as)
        m_file.add_separator()
        m_file.add_command(label="Exit", command=self.quit_app)
        bar.add_cascade(label="File", menu=m_file)

        m_edit = tk.Menu(bar, tearoff=False)
        m_edit.add_command(label="Undo", accelerator="Ctrl+Z", command=self.undo)
        m_edit.add_command(label="Redo", accelerator="Ctrl+Y", command=self.redo)
        bar.add_cascade(label="Edit", menu=m_edit)
        self._m_edit = m_edit

        m_view = tk.Menu(bar, tearoff=False)
        m_view.add_command(label="Zoom in", accelerator="Ctrl++", command=lambda: self._wheel(+1))
        m_view.add_command(label="Zoom out", accelerator="Ctrl+-", command=lambda: self._wheel(-1))
        m_view.add_command(label="Actual size", command=lambda: self._set_zoom(1.0))
        m_view.add_command(label="Fullscreen", accelerator="F11", command=self.toggle_fullscreen)
        bar.add_cascade(label="View", menu=m_view)
        self.config(menu=bar)

    def _bind_shortcuts(self):
        self.bind("<Control-n>", lambda e: self.new_dialog())
        self.bind("<Control-o>", lambda e: self.open_image())
        self.bind("<Control-s>", lambda e: self.save())
        self.bind("<Control-S>", lambda e: self.save_as())
        self.bind("<Control-z>", lambda e: self.undo())
        self.bind("<Control-y>", lambda e: self.redo())
        self.bind("<Control-plus>", lambda e: self._wheel(+1))
        self.bind("<Control-equal>", lambda e: self._wheel(+1))
        self.bind("<Control-minus>", lambda e: self._wheel(-1))
        self.bind("<F11>", lambda e: self.toggle_fullscreen())

    # --- frame loop ---
    def _tick(self):
        for msg in self.c.process_file_operations():
            messagebox.showerror("Error", msg)
        doc = self.c.doc
        if self._needs_redraw or doc is not self._shown_doc or (doc is not None and doc.dirty):
            self._redraw()
        self.after(FRAME_MS, self._tick)

    def _redraw(self):
        pixels = self._preview if self._preview is not None else self.c.composite()
        self.image_canvas.set_pixels(pixels, self.c.m.zoom)
        self.layer_panel.refresh(self.c.doc)
        self.tools_panel.set_image_loaded(self.c.has_image())
        self.info_panel.set_text(self.c.info_text())
        self._m_edit.entryconfig(0, state="normal" if self.c.can_undo() else "disabled")
        self._m_edit.entryconfig(1, state="normal" if self.c.can_redo() else "disabled")
        title = "PaintMate"
        if self.c.m.path:
            title += f" - {self.c.m.path}"
        self.title(title + (" *" if self.c.m.modified else ""))
        self._shown_doc = self.c.doc
        self._needs_redraw = False

    def _edit(self, fn):
        fn()
        self._needs_redraw = True

    # --- drawing ---
    def _stroke_begin(self):
        self.c.begin_stroke()

    def _stroke_move(self, sx, sy, erase):
        x, y = self.c.screen_to_image(sx, sy)
        self.c.stroke_to(x, y, erase=erase)

    def _stroke_end(self):
        self.c.end_stroke()
        self._needs_redraw = True

    def _on_brush_size(self, *_):
        self.c.m.brush_size = float(self.tools_panel.brush_size.get())

    def pick_color(self):
        rgb, _hex = colorchooser.askcolor(color="#%02x%02x%02x" % self.c.m.primary_color[:3], parent=self)
        if rgb is None:
            return
        self.c.m.primary_color = (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255)
        self.tools_panel.set_color(self.c.m.primary_color)

    # --- view ---
    def _set_zoom(self, z):
        self.c.set_zoom(z)
        self._needs_redraw = True

    def _wheel(self, direction):
        if direction > 0:
            self.c.zoom_in()
        else:
            self.c.zoom_out()
        self._needs_redraw = True

    def toggle_fullscreen(self):
        self.c.m.fullscreen = not self.c.m.fullscreen
        self.attributes("-fullscreen", self.c.m.fullscreen)

    # --- files ---
    def new_dialog(self):
        w = simpledialog.askinteger("New image", "Width, px:", parent=self,
                                    initialvalue=self.c.cfg.default_width, minvalue=1, maxvalue=16384)
        if w is None:
            return
        h = simpledialog.askinteger("New image", "Height, px:", parent=self,
                                    initialvalue=self.c.cfg.default_height, minvalue=1, maxvalue=16384)
        if h is None:
            return
        self._edit(lambda: self.c.new_image(w, h))

    def open_image(self):
        path = filedialog.askopenfilename(title="Open image", filetypes=OPEN_TYPES)
        if path:
            self.c.request_open(path)

    def save(self):
        if self.c.m.path:
            self.c.request_save()
        else:
            self.save_as()

    def save_as(self):
        if not self.c.has_image():
            return
        path = filedialog.asksaveasfilename(title="Save as…", defaultextension=".png", filetypes=SAVE_TYPES)
        if not path:
            return
        try:
            self.c.request_save(path)
        except ImageIOError as e:
            messagebox.showerror("Error", f"Cannot save:\n{e}")

    def undo(self):
        self._edit(self.c.undo)

    def redo(self):
        self._edit(self.c.redo)

    # --- dialogs ---
    def resize_dialog(self):
        doc = self.c.doc
        if doc is None:
            return
        w = simpledialog.askinteger("Resize", "Width, px:", parent=self, initialvalue=doc.width, minvalue=1)
        if w is None:
            return
        h = simpledialog.askinteger("Resize", "Height, px:", parent=self, initialvalue=doc.height, minvalue=1)
        if h is None:
            return
        self._edit(lambda: self.c.resize(w, h))

    @staticmethod
    def _adjust_fn(p):
        def fn(px):
            px = Sx.adjust_brightness(px, p["brightness"])
            px = Sx.adjust_contrast(px, p["contrast"])
            return Sx.adjust_hue_saturation(px, p["hue"], p["saturation"])
        return fn

    def open_adjust_dialog(self):
        if not self.c.has_image():
            return
        if self._adj_win and self._adj_win.winfo_exists():
            self._adj_win.lift()
            return

        def on_preview(params):
            self._preview = None if params is None else self.c.preview_pixel_transform(self._adjust_fn(params))
            self._needs_redraw = True

        def on_apply(params):
            self._preview = None
            self._edit(lambda: self.c.apply_pixel_transform(self._adjust_fn(params)))

        def on_cancel():
            self._preview = None
            self._needs_redraw = True

        self._adj_win = AdjustDialog(self, on_preview, on_apply, on_cancel)

    def quit_app(self):
        self.c.shutdown()
        self.destroy()


# --- entry point ---
if __name__ == "__main__":
    cfg = load_config()
    logging.basicConfig(level=getattr(logging, cfg.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = PaintMateApp(Controller(Model(), cfg))
    app.mainloop()
