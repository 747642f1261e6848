"""Tkinter GUI for the zen garden.

This is the main application file: it wires the garden session, the
renderer, local storage and the share client into a desktop toy. The
major pieces are:

  * ``ToolBar`` — the top strip with the five tool buttons (wand, smoother,
    rake, plant, rock) and the garden actions (clear, random, share,
    save, load). Disables itself in read-only mode.
  * ``App`` — the top-level window. Owns the ``GardenSession`` and turns
    canvas mouse events into session calls, redrawing after every change
    and writing the local snapshot through after every completed edit.

All garden state lives on the session (``engine/session.py``); this module
only handles widgets, coordinate conversion and persistence side effects.
Rendering goes through ``GardenRenderer`` from ``render.py`` and is shown
via ``ImageTk``.

Startup picks the garden from, in order: a shared garden id (``--garden``,
opened read-only), the local snapshot, or a freshly seeded random garden.
"""

import argparse
import time
import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from urllib.parse import urlparse

import numpy as np
from PIL import ImageTk

from ..engine.snapshot import load_snapshot
from ..engine.session import GardenSession, pixel_to_cell
from ..engine.types import CANVAS_HEIGHT, CANVAS_WIDTH, Tool
from .render import GardenRenderer
from .share import (
    ShareClient,
    ShareError,
    default_server_url,
    garden_id_from_path,
)
from .storage import (
    LocalStore,
    default_data_dir,
    export_garden,
    import_garden,
    load_local,
    save_local,
)

# -- Visual constants --

CANVAS_BG = "#1e1e1e"
MIN_SCALE = 0.4  # 4px cells
MESSAGE_TIMEOUT_MS = 4000

TOOL_LABELS = [
    (Tool.MARK, "Wand"),
    (Tool.SMOOTHER, "Smoother"),
    (Tool.RAKE, "Rake"),
    (Tool.PLANT, "Plant"),
    (Tool.ROCK, "Rock"),
]

TOOL_CURSORS = {
    Tool.MARK: "crosshair",
    Tool.SMOOTHER: "hand2",
    Tool.RAKE: "hand2",
    Tool.PLANT: "plus",
    Tool.ROCK: "plus",
}

SHIFT_MASK = 0x0001


def fit_scale(canvas_w, canvas_h, margin=10):
    """Largest render scale at which the garden fits the canvas.

    Scale is rounded down to whole-pixel cells, never below MIN_SCALE.
    """
    avail_w = max(0, canvas_w - 2 * margin)
    avail_h = max(0, canvas_h - 2 * margin)
    cell = min(avail_w * 10 // CANVAS_WIDTH, avail_h * 10 // CANVAS_HEIGHT)
    return max(MIN_SCALE, cell / 10)


def canvas_to_garden(canvas_x, canvas_y, offset_x, offset_y, scale):
    """Canvas widget pixel -> garden canvas pixel."""
    return (canvas_x - offset_x) / scale, (canvas_y - offset_y) / scale


class StatusLine:
    """Status text that blanks itself a while after each new message.

    ``after`` and ``after_cancel`` are the Tk root's timer calls. The
    read-only banner is never blanked.
    """

    def __init__(self, session, var, after, after_cancel):
        self.session = session
        self.var = var
        self.after = after
        self.after_cancel = after_cancel
        self._shown = session.message
        self._job = None

    def refresh(self):
        msg = self.session.message
        self.var.set(msg)
        if self.session.read_only or not msg or msg == self._shown:
            return
        self._shown = msg
        if self._job is not None:
            self.after_cancel(self._job)
        self._job = self.after(MESSAGE_TIMEOUT_MS, self._expire, msg)

    def _expire(self, msg):
        self._job = None
        if self.session.message != msg:
            return
        self.session.message = ""
        self._shown = ""
        self.var.set("")


class ToolBar(ttk.Frame):
    def __init__(
        self,
        parent,
        on_tool,
        on_clear,
        on_random,
        on_share,
        on_save,
        on_load,
    ):
        super().__init__(parent, padding=(5, 5))
        self.tool_var = tk.StringVar(value=Tool.MARK.value)
        self._tool_buttons = []
        for tool, label in TOOL_LABELS:
            btn = ttk.Radiobutton(
                self,
                text=label,
                value=tool.value,
                variable=self.tool_var,
                command=lambda t=tool: on_tool(t),
                style="Toolbutton",
            )
            btn.pack(side=tk.LEFT, padx=2)
            self._tool_buttons.append(btn)

        ttk.Separator(self, orient=tk.VERTICAL).pack(
            side=tk.LEFT, fill=tk.Y, padx=6
        )

        self.clear_btn = ttk.Button(self, text="Clear", command=on_clear)
        self.random_btn = ttk.Button(self, text="Random", command=on_random)
        self.share_btn = ttk.Button(self, text="Share", command=on_share)
        self.save_btn = ttk.Button(self, text="Save…", command=on_save)
        self.load_btn = ttk.Button(self, text="Load…", command=on_load)
        self._action_buttons = [
            self.clear_btn,
            self.random_btn,
            self.share_btn,
            self.load_btn,
        ]
        for btn in (*self._action_buttons, self.save_btn):
            btn.pack(side=tk.LEFT, padx=2)

    def set_read_only(self):
        """Disable every mutating control."""
        for btn in self._tool_buttons:
            btn.state(["disabled"])
        for btn in self._action_buttons:
            btn.state(["disabled"])
        self.clear_btn.config(text="Clear (disabled)")
        self.random_btn.config(text="Random (disabled)")
        self.share_btn.config(text="Share (disabled)")


class App:
    def __init__(self, session, store, client, shared_id=None):
        self.session = session
        self.store = store
        self.client = client

        self.root = tk.Tk()
        title = "Zen Garden"
        if shared_id:
            title = f"Zen Garden {shared_id} (read-only)"
        self.root.title(title)
        self.root.geometry("1000x720")
        self.root.configure(bg=CANVAS_BG)

        style = ttk.Style()
        style.theme_use("clam")

        self.toolbar = ToolBar(
            self.root,
            on_tool=self._on_tool,
            on_clear=self._on_clear,
            on_random=self._on_random,
            on_share=self._on_share,
            on_save=self._on_save,
            on_load=self._on_load,
        )
        self.toolbar.pack(side=tk.TOP, fill=tk.X)

        self.canvas = tk.Canvas(self.root, bg=CANVAS_BG, highlightthickness=0)
        self.canvas.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        self.status_var = tk.StringVar(value=session.message)
        self.status = ttk.Label(self.root, textvariable=self.status_var)
        self.status.pack(side=tk.BOTTOM, fill=tk.X, padx=5, pady=2)
        self.status_line = StatusLine(
            session, self.status_var, self.root.after, self.root.after_cancel
        )

        self._photo = None  # prevent GC
        self._scale = 1.0
        self._offset_x = 0.0
        self._offset_y = 0.0
        self._last_cursor_cell = None

        self.canvas.bind("<Configure>", self._on_canvas_configure)
        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_drag_motion)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<Motion>", self._on_hover)
        self.canvas.bind("<Leave>", self._on_leave)
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

        if session.read_only:
            self.toolbar.set_read_only()
            self.canvas.config(cursor="X_cursor")
        else:
            self.canvas.config(cursor=TOOL_CURSORS[session.tool])

    # -- rendering --

    def _render(self):
        cw = self.canvas.winfo_width()
        ch = self.canvas.winfo_height()
        if cw < 20 or ch < 20:
            return
        self._scale = fit_scale(cw, ch)
        img = GardenRenderer(self._scale).render(
            self.session.grid,
            self.session.objects,
            tool=self.session.tool,
            cursor=self.session.cursor,
            read_only=self.session.read_only,
        )
        self._offset_x = cw / 2 - img.width / 2
        self._offset_y = ch / 2 - img.height / 2

        self._photo = ImageTk.PhotoImage(img)
        self.canvas.delete("all")
        self.canvas.create_image(
            cw / 2, ch / 2, image=self._photo, anchor="center"
        )
        self.status_line.refresh()

    def _apply(self, change):
        if change.persist:
            self._save_local()
        if change.redraw:
            self._render()
        else:
            self.status_line.refresh()

    def _save_local(self):
        if self.session.read_only:
            return
        try:
            save_local(self.store, self.session.to_local_dict())
        except OSError as e:
            print(f"[zengarden] Could not save garden locally: {e}")

    def _to_garden(self, event):
        return canvas_to_garden(
            event.x, event.y, self._offset_x, self._offset_y, self._scale
        )

    # -- canvas events --

    def _on_canvas_configure(self, _event):
        self._render()

    def _on_press(self, event):
        x, y = self._to_garden(event)
        modifier = bool(event.state & SHIFT_MASK)
        self._apply(self.session.pointer_down(x, y, modifier=modifier))

    def _on_drag_motion(self, event):
        x, y = self._to_garden(event)
        self._apply(self.session.pointer_move(x, y))

    def _on_release(self, _event):
        self._apply(self.session.pointer_up())

    def _on_hover(self, event):
        if self.session.read_only:
            return
        x, y = self._to_garden(event)
        # Only redraw when the cursor crosses into another cell or the
        # object ghost needs to follow it.
        cell = pixel_to_cell(x, y)
        if self.session.tool.object_kind is None:
            if cell == self._last_cursor_cell:
                return
        self._last_cursor_cell = cell
        self._apply(self.session.pointer_move(x, y))

    def _on_leave(self, _event):
        self._last_cursor_cell = None
        self._apply(self.session.pointer_leave())

    # -- toolbar actions --

    def _on_tool(self, tool):
        self._apply(self.session.select_tool(tool))
        self.canvas.config(cursor=TOOL_CURSORS[tool])

    def _on_clear(self):
        if not self.session.read_only and not messagebox.askyesno(
            "Clear", "Clear the garden?"
        ):
            return
        self._apply(self.session.clear())

    def _on_random(self):
        self._apply(self.session.randomize())

    def _on_share(self):
        if self.session.read_only:
            self.session.message = "Cannot share in read-only mode."
            self._render()
            return
        self.status_var.set("Sharing…")
        self.root.update_idletasks()
        try:
            result = self.client.share(self.session.to_share_dict())
        except ShareError as e:
            self.session.message = str(e)
        else:
            self.session.message = f"Shareable link: {result.url}"
            self.root.clipboard_clear()
            self.root.clipboard_append(result.url)
        self._render()

    def _on_save(self):
        path = filedialog.asksaveasfilename(
            defaultextension=".png",
            filetypes=[("PNG files", "*.png"), ("JSON files", "*.json")],
            initialfile=f"garden_{time.strftime('%Y-%m-%d_%H-%M-%S')}.png",
        )
        if not path:
            return
        try:
            export_garden(path, self.session.grid, self.session.objects)
        except OSError as e:
            messagebox.showerror("Save Error", str(e))
            return
        self.session.message = f"Saved {path}"
        self._render()

    def _on_load(self):
        if self.session.read_only:
            return
        path = filedialog.askopenfilename(
            filetypes=[
                ("Garden files", "*.png *.json"),
                ("PNG files", "*.png"),
                ("JSON files", "*.json"),
            ],
        )
        if not path:
            return
        try:
            snapshot = import_garden(path)
        except (ValueError, OSError) as e:
            messagebox.showerror("Load Error", str(e))
            return
        grid, objects = snapshot.to_garden(self.session.rng)
        self.session.grid = grid
        self.session.objects = objects
        self.session.message = f"Loaded {path}"
        self._save_local()
        self._render()

    def _on_close(self):
        self._save_local()
        self.root.destroy()

    def run(self):
        self.root.mainloop()


def build_session(store, client, garden_id=None, rng=None):
    """Pick the starting garden: shared id, then local snapshot, then random.

    Returns the session; a shared garden that fails to load leaves the
    session read-only over a blank garden with an explanatory message.
    """
    rng = rng if rng is not None else np.random.default_rng()
    if garden_id is not None:
        try:
            snapshot = load_snapshot(client.fetch(garden_id))
        except (ShareError, ValueError) as e:
            session = GardenSession.new(rng, seeded=False)
            session.read_only = True
            session.message = (
                str(e)
                if isinstance(e, ShareError)
                else f"Shared garden {garden_id} is unreadable."
            )
            return session
        session = GardenSession.from_snapshot(snapshot, rng, read_only=True)
        session.message = f"Viewing shared garden {garden_id} (read-only)"
        return session

    snapshot = load_local(store)
    if snapshot is not None:
        session = GardenSession.from_snapshot(snapshot, rng)
    else:
        session = GardenSession.new(rng)
    # Re-save so legacy snapshots move to the current format.
    save_local(store, session.to_local_dict())
    return session


def main(argv=None):
    parser = argparse.ArgumentParser(description="Zen garden drawing toy")
    parser.add_argument(
        "--garden", help="Open a shared garden by id (read-only)"
    )
    parser.add_argument(
        "--server",
        default=default_server_url(),
        help="Share server URL (default: $ZENGARDEN_SERVER or "
        "http://localhost:3000)",
    )
    parser.add_argument(
        "--data-dir",
        default=str(default_data_dir()),
        help="Where the local garden is kept (default: $ZENGARDEN_HOME "
        "or ~/.zengarden)",
    )
    parser.add_argument("--seed", type=int, help="Random seed")
    args = parser.parse_args(argv)

    store = LocalStore(args.data_dir)
    client = ShareClient(args.server)
    rng = np.random.default_rng(args.seed)
    garden_id = None
    if args.garden:
        # Accept a bare id, a viewer path or a full share link.
        garden_id = (
            garden_id_from_path(urlparse(args.garden).path) or args.garden
        )
    session = build_session(store, client, garden_id, rng)
    print(f"[zengarden] Local garden: {store.root}")
    App(session, store, client, shared_id=garden_id).run()


if __name__ == "__main__":
    main()
