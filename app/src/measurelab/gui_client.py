"""
Tkinter host for the measurement canvas engine.

Loads a PDF page or a raster image, renders it with Pillow at the engine's
zoom and pan, draws measurements, previews and the selection rectangle on
top, and forwards pointer and keyboard input to ``CanvasEngine``.

Note: requires Tk; it cannot run in headless environments.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

try:
    import tkinter as tk
    from tkinter import filedialog, messagebox, simpledialog, ttk
    from PIL import ImageTk
except ImportError:
    # Tkinter is unavailable (e.g. headless environment)
    tk = None  # type: ignore

from .app_io.document import DocumentPage, load_document_page
from .config import EngineConfig, load_config, save_config
from .core import facade
from .core.engine import CanvasEngine
from .core.model import CalibrationRecord, Measurement, MeasurementType, Point, PointerButton, PointerEvent, Tool
from .core.units import LINEAR_UNITS, format_measurement_value
from .features.scale.scale import parse_real_distance

logger = logging.getLogger(__name__)

# ---------- Visual Style Configuration ----------
SELECTED_OUTLINE: str = '#EF4444'
PREVIEW_DASH: Tuple[int, int] = (4, 4)
MARQUEE_COLOR: str = '#3B82F6'
CALIBRATION_COLOR: str = 'purple'
FIRST_VERTEX_RADIUS: int = 6

# Tk event.state modifier bits
SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004
META_MASK = 0x0008


class UnitLengthDialog(simpledialog.Dialog if tk else object):
    """Single dialog to choose a unit and enter the real length of the calibration line."""

    def __init__(self, parent, pixel_distance: float, title: str = "Set Unit/Scale"):
        self.pixel_distance = pixel_distance
        self.selected_unit: Optional[str] = None
        self.entered_length: Optional[float] = None
        super().__init__(parent, title)

    def body(self, master):
        tk.Label(master, text=f"Measured: {self.pixel_distance:.1f} px").grid(
            row=0, column=0, columnspan=2, padx=6, pady=6)
        tk.Label(master, text="Unit:").grid(row=1, column=0, sticky="e", padx=6, pady=6)
        tk.Label(master, text="Length:").grid(row=2, column=0, sticky="e", padx=6, pady=6)

        self.unit_var = tk.StringVar(value="ft")
        self.unit_combo = ttk.Combobox(master, textvariable=self.unit_var, values=list(LINEAR_UNITS),
                                       state="readonly", width=8)
        self.unit_combo.grid(row=1, column=1, sticky="w", padx=6, pady=6)

        self.len_var = tk.StringVar(value="")
        self.len_entry = tk.Entry(master, textvariable=self.len_var, width=12)
        self.len_entry.grid(row=2, column=1, sticky="w", padx=6, pady=6)
        return self.len_entry

    def validate(self):
        try:
            length = parse_real_distance(self.len_var.get())
        except ValueError as e:
            messagebox.showerror("Set Unit/Scale", str(e))
            return False
        self.selected_unit = self.unit_var.get().strip()
        self.entered_length = length
        return True

    def apply(self):
        pass


class MeasureCanvasGUI:
    """Main class encapsulating the Tkinter application."""

    def __init__(self, root: "tk.Tk", config: Optional[EngineConfig] = None) -> None:
        self.root = root
        self.root.title("MeasureLab")
        self.root.geometry("1200x800")
        self.config_path: Optional[Path] = None

        main_frame = tk.Frame(root)
        main_frame.pack(fill=tk.BOTH, expand=True)
        self.canvas = tk.Canvas(main_frame, bg='gray', width=900, height=700, highlightthickness=0)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        side_frame = tk.Frame(main_frame)
        side_frame.pack(side=tk.RIGHT, fill=tk.Y)
        tk.Button(side_frame, text="Load Document", command=self.load_document).pack(fill=tk.X)
        page_frame = tk.Frame(side_frame)
        page_frame.pack(fill=tk.X)
        tk.Button(page_frame, text="< Page", command=lambda: self.change_page(-1)).pack(side=tk.LEFT, expand=True, fill=tk.X)
        tk.Button(page_frame, text="Page >", command=lambda: self.change_page(1)).pack(side=tk.LEFT, expand=True, fill=tk.X)
        self.tool_var = tk.StringVar(value=Tool.SELECT.value)
        for tool, label in (
            (Tool.SELECT, "Select"),
            (Tool.PAN, "Pan"),
            (Tool.LINEAR, "Length"),
            (Tool.SURFACE, "Area"),
            (Tool.COUNT, "Count"),
            (Tool.CALIBRATE, "Calibrate"),
        ):
            tk.Radiobutton(side_frame, text=label, value=tool.value, variable=self.tool_var,
                           indicatoron=False, command=self.on_tool_change).pack(fill=tk.X)
        tk.Button(side_frame, text="Fit to View", command=self.fit_to_view).pack(fill=tk.X, pady=(10, 0))
        tk.Button(side_frame, text="Zoom In", command=lambda: self._viewport_action(self.engine.zoom_in)).pack(fill=tk.X)
        tk.Button(side_frame, text="Zoom Out", command=lambda: self._viewport_action(self.engine.zoom_out)).pack(fill=tk.X)
        tk.Button(side_frame, text="Delete Selected", command=self.delete_selected).pack(fill=tk.X, pady=(10, 0))
        tk.Button(side_frame, text="Export CSV", command=self.export_csv).pack(fill=tk.X)
        tk.Button(side_frame, text="Load Config", command=self.load_config).pack(fill=tk.X)
        tk.Button(side_frame, text="Save Config", command=self.save_config).pack(fill=tk.X)
        self.scale_label = tk.Label(side_frame, text="Scale: not calibrated")
        self.scale_label.pack(fill=tk.X, pady=(10, 0))
        self.info_label = tk.Label(side_frame, text="No measurement selected.", justify=tk.LEFT)
        self.info_label.pack(fill=tk.X)
        self.status_label = tk.Label(side_frame, text="", fg='gray')
        self.status_label.pack(fill=tk.X)

        # Data structures and state variables
        self.document_path: Optional[Path] = None
        self.page: Optional[DocumentPage] = None
        self.photo: Optional["ImageTk.PhotoImage"] = None
        self._photo_scale: Optional[float] = None
        self._marquee_rect = None
        self._flush_pending = False
        self.engine = self._create_engine(config or EngineConfig())

        self.canvas.bind("<ButtonPress-1>", lambda e: self._pointer(e, self.engine.pointer_down))
        self.canvas.bind("<B1-Motion>", lambda e: self._pointer(e, self.engine.pointer_move))
        self.canvas.bind("<Motion>", lambda e: self._pointer(e, self.engine.pointer_move))
        self.canvas.bind("<ButtonRelease-1>", lambda e: self._pointer(e, self.engine.pointer_up))
        self.canvas.bind("<ButtonPress-3>", lambda e: self._pointer(e, self.engine.pointer_down, PointerButton.SECONDARY))
        self.canvas.bind("<MouseWheel>", self.on_wheel)
        self.canvas.bind("<Button-4>", lambda e: self._wheel_at(e, -1))
        self.canvas.bind("<Button-5>", lambda e: self._wheel_at(e, 1))
        self.canvas.bind("<Configure>", self.on_resize)
        self.root.bind("<Key>", self.on_key)

    def _create_engine(self, config: EngineConfig) -> CanvasEngine:
        old = getattr(self, 'engine', None)
        engine = CanvasEngine(
            config=config,
            distance_prompt=self._prompt_scale_distance,
            on_measurement_added=self._on_measurement_added,
            on_calibration_committed=self._on_calibration_committed,
            on_selection_changed=lambda ids: self.update_info_label(),
            on_delete_requested=lambda ids: self.show_status_message(f"Deleted {len(ids)} measurement(s)"),
            on_marquee_changed=self._on_marquee_changed,
            on_preview_changed=lambda p: self.redraw(),
            on_context_menu=self._on_context_menu,
        )
        if old is not None:
            engine.viewport = old.viewport
            engine.set_measurements(old.measurements)
            engine.calibration = old.calibration
            engine.page_index = old.page_index
            engine.set_tool(old.tool)
        return engine

    # ----- Document -----
    def load_document(self, path: Optional[str] = None, page_number: int = 0) -> None:
        if path is None:
            path = filedialog.askopenfilename(
                title="Select Document",
                filetypes=[("Documents", "*.pdf *.png *.jpg *.jpeg *.tif *.tiff *.bmp"), ("All files", "*.*")],
            )
            if not path:
                return
        try:
            page = load_document_page(path, page_number)
        except Exception as e:
            logger.exception("Failed to load %s", path)
            messagebox.showerror("Error", f"Failed to load document: {e}")
            return
        new_document = self.document_path != Path(path)
        self.document_path = Path(path)
        self.page = page
        self._photo_scale = None
        self._marquee_rect = None
        if new_document:
            self.engine.open_document(page.size, page.page_number)
            self.update_scale_label()
        else:
            self.engine.set_page(page.page_number)
            self.engine.set_document_size(page.size)
            self.engine.fit_to_view()
        self.root.title(f"MeasureLab - {self.document_path.name} ({page.page_number + 1}/{page.page_count})")
        self.update_info_label()
        self.redraw()

    def change_page(self, step: int) -> None:
        if self.page is None or self.document_path is None:
            return
        target = self.page.page_number + step
        if 0 <= target < self.page.page_count:
            self.load_document(str(self.document_path), target)

    # ----- Tools -----
    def on_tool_change(self) -> None:
        self.engine.set_tool(Tool(self.tool_var.get()))
        cursor = {Tool.PAN: "fleur", Tool.SELECT: ""}.get(self.engine.tool, "tcross")
        self.canvas.config(cursor=cursor)
        self.redraw()

    def fit_to_view(self) -> None:
        self._viewport_action(self.engine.fit_to_view)

    def _viewport_action(self, action) -> None:
        if self.page is None:
            return
        action()
        self.redraw()

    def delete_selected(self) -> None:
        if not self.engine.selection:
            messagebox.showwarning("Warning", "No measurement selected.")
            return
        self.engine.delete_selected()
        self.redraw()

    # ----- Input -----
    def _modifiers(self, event) -> dict:
        state = getattr(event, "state", 0)
        return {
            'shift': bool(state & SHIFT_MASK),
            'ctrl': bool(state & CONTROL_MASK),
            'meta': bool(state & META_MASK),
        }

    def _pointer(self, event, handler, button: PointerButton = PointerButton.PRIMARY) -> None:
        if self.page is None:
            return
        handler(PointerEvent(event.x, event.y, button=button, **self._modifiers(event)))
        if self.engine.preview_throttle.has_pending and not self._flush_pending:
            self._flush_pending = True
            self.root.after(int(self.engine.config.canvas.frame_interval_ms), self._flush_preview)
        if handler != self.engine.pointer_move or self.engine.press is not None:
            self.redraw()

    def _flush_preview(self) -> None:
        self._flush_pending = False
        self.engine.flush_preview()

    def on_wheel(self, event) -> None:
        self._wheel_at(event, -event.delta)

    def _wheel_at(self, event, delta: float) -> None:
        if self.page is None:
            return
        self.engine.wheel((event.x, event.y), delta)
        self.redraw()

    def on_resize(self, event) -> None:
        self.engine.set_viewport_size((event.width, event.height))
        self.redraw()

    def on_key(self, event) -> None:
        mods = self._modifiers(event)
        if self.engine.key_press(event.keysym, ctrl=mods['ctrl'], meta=mods['meta']):
            self.redraw()

    # ----- Engine callbacks -----
    def _prompt_scale_distance(self, pixel_distance: float):
        dlg = UnitLengthDialog(self.root, pixel_distance)
        if dlg.selected_unit is None or dlg.entered_length is None:
            return None
        return dlg.entered_length, dlg.selected_unit

    def _on_measurement_added(self, measurement: Measurement) -> None:
        self.show_status_message(f"{measurement.name}: "
                                 f"{format_measurement_value(measurement.value, measurement.unit, measurement.type)}")
        self.redraw()

    def _on_calibration_committed(self, record: CalibrationRecord) -> None:
        self.update_scale_label()
        self.show_status_message("Scale set")

    def _on_marquee_changed(self, rect) -> None:
        self._marquee_rect = rect
        self.redraw()

    def _on_context_menu(self, point: Point, measurement_id: Optional[str]) -> None:
        if measurement_id is None:
            return
        menu = tk.Menu(self.root, tearoff=0)
        menu.add_command(label="Rename...", command=lambda: self.rename_measurement(measurement_id))
        menu.add_command(label="Delete", command=lambda: (self.engine.delete_measurements({measurement_id}), self.redraw()))
        device = self.engine.to_device(point)
        menu.tk_popup(int(self.canvas.winfo_rootx() + device.x), int(self.canvas.winfo_rooty() + device.y))

    def rename_measurement(self, measurement_id: str) -> None:
        measurement = self.engine.find_measurement(measurement_id)
        if measurement is None:
            return
        name = simpledialog.askstring("Rename", "Name:", initialvalue=measurement.name)
        if name and name.strip():
            self.engine.update_measurement(measurement_id, name=name.strip())
            self.update_info_label()
            self.redraw()

    # ----- File and Configuration Management -----
    def export_csv(self) -> None:
        if not self.engine.measurements:
            messagebox.showwarning("Warning", "No measurements to export.")
            return
        path = filedialog.asksaveasfilename(title="Save CSV", defaultextension='.csv', filetypes=[("CSV files", "*.csv")])
        if not path:
            return
        try:
            facade.export_csv(self.engine.measurements, path)
            messagebox.showinfo("Export", "Measurements exported successfully.")
        except OSError as e:
            messagebox.showerror("Error", f"Failed to export CSV: {e}")

    def load_config(self) -> None:
        path = filedialog.askopenfilename(title="Select Config JSON", filetypes=[("JSON files", "*.json")])
        if not path:
            return
        try:
            config = load_config(path)
        except (OSError, ValueError, TypeError) as e:
            messagebox.showerror("Error", f"Failed to load configuration: {e}")
            return
        self.engine = self._create_engine(config)
        self.config_path = Path(path)
        self.redraw()
        messagebox.showinfo("Config", "Configuration loaded.")

    def save_config(self) -> None:
        path = filedialog.asksaveasfilename(title="Save Config", defaultextension='.json', filetypes=[("JSON files", "*.json")])
        if not path:
            return
        try:
            save_config(self.engine.config, path)
            messagebox.showinfo("Config", "Configuration saved.")
        except OSError as e:
            messagebox.showerror("Error", f"Failed to save configuration: {e}")

    # ----- Status -----
    def show_status_message(self, msg: str, duration_ms: int = 1500) -> None:
        self.status_label.config(text=msg)
        if duration_ms > 0:
            self.root.after(duration_ms, lambda: self.status_label.config(text=""))

    def update_scale_label(self) -> None:
        cal = self.engine.calibration
        if cal is None or not cal.is_calibrated:
            self.scale_label.config(text="Scale: not calibrated")
        else:
            self.scale_label.config(text=f"Scale: {cal.scale_factor:.4f} {cal.unit}/pixel")

    def update_info_label(self) -> None:
        selected = [m for m in self.engine.measurements if m.id in self.engine.selection]
        if not selected:
            self.info_label.config(text="No measurement selected.")
            return
        if len(selected) > 1:
            self.info_label.config(text=f"{len(selected)} measurements selected.")
            return
        m = selected[0]
        self.info_label.config(text=f"{m.name}\n{format_measurement_value(m.value, m.unit, m.type)}")

    # ----- Drawing and Display -----
    def _device_coords(self, points) -> List[float]:
        coords: List[float] = []
        for p in points:
            x, y = self.engine.to_device(p)
            coords.extend([x, y])
        return coords

    def _scaled_photo(self) -> "ImageTk.PhotoImage":
        scale = self.engine.viewport.scale
        if self.photo is None or self._photo_scale != scale:
            img = self.page.image
            new_size = (max(1, int(round(img.width * scale))), max(1, int(round(img.height * scale))))
            resized = img.resize(new_size, Image.Resampling.LANCZOS)
            self.photo = ImageTk.PhotoImage(resized)
            self._photo_scale = scale
        return self.photo

    def redraw(self) -> None:
        """Clear and redraw the entire canvas."""
        self.canvas.delete("all")
        if self.page is None:
            return
        engine = self.engine
        origin = engine.to_device((0.0, 0.0))
        self.canvas.create_image(origin.x, origin.y, anchor=tk.NW, image=self._scaled_photo())

        r_end = engine.config.canvas.endpoint_radius
        for m in engine.page_measurements():
            selected = m.id in engine.selection
            outline = SELECTED_OUTLINE if selected else (m.color or 'blue')
            width = 4 if selected else 2
            if m.type is MeasurementType.COUNT:
                cx, cy = engine.to_device(m.point)
                r = engine.config.canvas.count_size / 2
                self.canvas.create_oval(cx - r, cy - r, cx + r, cy + r, fill=m.color or 'orange',
                                        outline=outline, width=width)
                continue
            coords = self._device_coords(m.points)
            if m.type is MeasurementType.SURFACE:
                self.canvas.create_polygon(coords, fill=m.color or 'green', stipple='gray25',
                                           outline=outline, width=width)
            else:
                self.canvas.create_line(coords, fill=outline, width=width)
            # Endpoint markers double as snap targets for the draw tools
            for x, y in zip(coords[::2], coords[1::2]):
                self.canvas.create_oval(x - r_end, y - r_end, x + r_end, y + r_end, fill=outline, outline='')

        draft = engine.draft
        if draft is not None:
            pts = list(draft.points)
            if draft.preview_point is not None:
                pts.append(draft.preview_point)
            coords = self._device_coords(pts)
            if len(coords) >= 4:
                self.canvas.create_line(coords, fill='red', width=2, dash=PREVIEW_DASH)
            for idx, (x, y) in enumerate(zip(coords[::2], coords[1::2])):
                if draft.preview_point is not None and idx == len(pts) - 1:
                    break
                r = FIRST_VERTEX_RADIUS if idx == 0 else r_end
                self.canvas.create_oval(x - r, y - r, x + r, y + r, fill='red', outline='white', width=2)

        for p in engine.calibration_protocol.points:
            x, y = engine.to_device(p)
            self.canvas.create_oval(x - 8, y - 8, x + 8, y + 8, fill=CALIBRATION_COLOR, outline='black', width=2)

        if self._marquee_rect is not None:
            x, y, w, h = self._marquee_rect
            x1, y1 = engine.to_device((x, y))
            x2, y2 = engine.to_device((x + w, y + h))
            self.canvas.create_rectangle(x1, y1, x2, y2, outline=MARQUEE_COLOR, dash=PREVIEW_DASH, width=1)


def main(document: Optional[str] = None, page: int = 0, config: Optional[EngineConfig] = None) -> None:
    if tk is None:
        raise RuntimeError("Tkinter is not available in this environment. Please run on a system with a graphical desktop and Tk installed.")
    root = tk.Tk()
    app = MeasureCanvasGUI(root, config)
    if document:
        root.update_idletasks()
        app.engine.set_viewport_size((app.canvas.winfo_width(), app.canvas.winfo_height()))
        app.load_document(document, page)
    root.mainloop()
