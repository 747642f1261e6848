"""Explicit application state for one garden session.

``GardenSession`` owns everything the UI used to keep in loose globals:
the grid, the object list, the active tool, the in-progress stroke or drag,
the rake phase, the read-only flag and the transient status message. The
frontend translates pointer events into canvas pixel coordinates and calls
``pointer_down`` / ``pointer_move`` / ``pointer_up``; each returns a
``Change`` telling the caller whether to redraw and whether to persist.

Nothing here touches Tk, the filesystem or the network, so the whole event
flow is testable headless.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .grid import Grid, randomize_grid
from .objects import (
    DragMove,
    DragState,
    auto_fill,
    object_at,
    place_object,
    remove_object_at,
)
from .snapshot import SnapshotV5, local_snapshot_dict, share_snapshot_dict
from .tools import Rake, apply_mark, apply_smoother
from .types import (
    CELL_COLS,
    CELL_PX,
    CELL_ROWS,
    ObjectKind,
    PlacedObject,
    Tool,
)

READ_ONLY_MESSAGE = "Read-only garden: editing is disabled."
STARTER_OBJECTS = {ObjectKind.PLANT: 3, ObjectKind.ROCK: 2}


@dataclass
class Change:
    redraw: bool = False
    persist: bool = False


NO_CHANGE = Change()


def pixel_to_cell(
    x: float, y: float, rows: int = CELL_ROWS, cols: int = CELL_COLS
) -> tuple[int, int] | None:
    """Canvas pixel -> (row, col), or None outside the grid."""
    c = math.floor(x / CELL_PX)
    r = math.floor(y / CELL_PX)
    if r < 0 or r >= rows or c < 0 or c >= cols:
        return None
    return r, c


@dataclass
class GardenSession:
    grid: Grid
    objects: list[PlacedObject] = field(default_factory=list)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    tool: Tool = Tool.MARK
    read_only: bool = False
    rake: Rake = field(default_factory=Rake)
    message: str = ""
    cursor: tuple[float, float] | None = None
    drawing: bool = False
    drag: DragState | None = None

    # -- construction --

    @staticmethod
    def new(
        rng: np.random.Generator | None = None, seeded: bool = True
    ) -> GardenSession:
        """Fresh session; ``seeded`` scatters a light random starter garden."""
        rng = rng if rng is not None else np.random.default_rng()
        session = GardenSession(grid=Grid.empty(rng), rng=rng)
        if seeded:
            randomize_grid(session.grid, rng, density=0.03)
            auto_fill(session.objects, STARTER_OBJECTS, rng)
        return session

    @staticmethod
    def from_snapshot(
        snapshot: SnapshotV5,
        rng: np.random.Generator | None = None,
        read_only: bool = False,
    ) -> GardenSession:
        rng = rng if rng is not None else np.random.default_rng()
        grid, objects = snapshot.to_garden(rng)
        return GardenSession(
            grid=grid, objects=objects, rng=rng, read_only=read_only
        )

    def to_local_dict(self) -> dict:
        return local_snapshot_dict(self.grid, self.objects)

    def to_share_dict(self) -> dict:
        return share_snapshot_dict(self.grid, self.objects)

    # -- tool selection & whole-garden actions --

    def select_tool(self, tool: Tool) -> Change:
        if self.read_only:
            return NO_CHANGE
        self.tool = tool
        self.drawing = False
        self.drag = None
        return Change(redraw=True)

    def _refuse(self, message: str = READ_ONLY_MESSAGE) -> Change:
        self.message = message
        return Change(redraw=True)

    def clear(self) -> Change:
        if self.read_only:
            return self._refuse("Cannot clear in read-only mode.")
        self.grid = Grid.empty(self.rng, self.grid.rows, self.grid.cols)
        self.objects.clear()
        self.message = "Cleared."
        return Change(redraw=True, persist=True)

    def randomize(self) -> Change:
        if self.read_only:
            return self._refuse("Cannot randomize in read-only mode.")
        randomize_grid(self.grid, self.rng)
        self.objects.clear()
        auto_fill(self.objects, STARTER_OBJECTS, self.rng)
        self.message = "Random garden generated."
        return Change(redraw=True, persist=True)

    # -- pointer events --

    def _apply_sand_tool(self, x: float, y: float) -> bool:
        cell = pixel_to_cell(x, y, self.grid.rows, self.grid.cols)
        if cell is None:
            return False
        r, c = cell
        if self.tool is Tool.MARK:
            apply_mark(self.grid, r, c, self.rng)
        elif self.tool is Tool.SMOOTHER:
            apply_smoother(self.grid, r, c, self.rng)
        elif self.tool is Tool.RAKE:
            self.rake.apply(self.grid, r, c, self.rng)
        return True

    def pointer_down(
        self, x: float, y: float, modifier: bool = False
    ) -> Change:
        """Start a stroke, place/drag/delete an object.

        ``modifier`` is the delete modifier (Shift in the desktop UI).
        """
        self.cursor = (x, y)
        if self.read_only:
            return NO_CHANGE
        kind = self.tool.object_kind
        if kind is None:
            self.drawing = True
            return Change(redraw=self._apply_sand_tool(x, y))
        # Presses in the margin around the garden are not object clicks.
        if pixel_to_cell(x, y, self.grid.rows, self.grid.cols) is None:
            return NO_CHANGE

        if modifier:
            if remove_object_at(self.objects, x, y, kind) is None:
                return NO_CHANGE
            self.message = f"Removed a {kind.value}."
            return Change(redraw=True, persist=True)

        idx = object_at(self.objects, x, y, kind)
        if idx is not None:
            self.drag = DragState.begin(self.objects[idx], x, y)
            return Change(redraw=True)

        if place_object(self.objects, kind, x, y, self.rng) is None:
            self.message = f"Not enough room for a {kind.value} here."
            return Change(redraw=True)
        self.message = ""
        return Change(redraw=True, persist=True)

    def pointer_move(self, x: float, y: float) -> Change:
        self.cursor = (x, y)
        if self.read_only:
            return NO_CHANGE
        if self.drag is not None:
            if self.drag.move_to(self.objects, x, y) is DragMove.BLOCKED:
                kind = self.tool.object_kind
                self.message = f"Not enough room for a {kind.value} here."
            return Change(redraw=True)
        if self.drawing:
            self._apply_sand_tool(x, y)
        return Change(redraw=True)

    def pointer_up(self) -> Change:
        if self.read_only:
            self.drawing = False
            self.drag = None
            return NO_CHANGE
        if self.drag is not None:
            self.drag = None
            return Change(redraw=True, persist=True)
        if self.drawing:
            self.drawing = False
            return Change(persist=True)
        return NO_CHANGE

    def pointer_leave(self) -> Change:
        self.cursor = None
        return Change(redraw=not self.drawing)
