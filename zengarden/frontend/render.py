"""Renders a garden to a Pillow image.

Pure Pillow/numpy module with no UI dependencies (no tkinter): the desktop
canvas shows its output through ``ImageTk``, the Flask viewer page serves
it as PNG, and file export embeds it in the saved PNG.

Every redraw is a full redraw, in this order:

  1. Sand cells — each channel is ``floor(base * variation)`` for the
     cell's surface type, computed for the whole grid at once and scaled
     up with nearest-neighbour sampling.
  2. Sand texture dots on plain sand cells where ``(r + c) % 7 == 0``.
  3. Objects in list order, so later objects sit on top.
  4. The tool cursor overlay (skipped for read-only gardens).
"""

import math

import numpy as np
from PIL import Image, ImageDraw

from ..engine.collision import centered_box, find_overlap
from ..engine.grid import Grid
from ..engine.session import pixel_to_cell
from ..engine.types import CELL_PX, SPRITES, SurfaceType, Tool
from .sprites import sprite_image

# Base colours per surface type, indexed by SurfaceType value.
BASE_COLORS = np.array(
    [
        (243, 230, 203),  # sand  #f3e6cb
        (169, 143, 123),  # mark  #a98f7b
        (238, 223, 179),  # smoothed, lighter sand
        (248, 238, 215),  # raked light
        (180, 160, 130),  # raked dark, darker than mark
    ],
    dtype=np.float64,
)

SAND_DOT_SHADE = 0.95
CURSOR_COLOR = (255, 0, 0, 102)  # red at 40% opacity
PLACE_VALID_OUTLINE = (0, 255, 0, 160)
PLACE_INVALID_OUTLINE = (255, 68, 68, 160)


def surface_color(surface, variation):
    """RGB tuple for one cell."""
    base = BASE_COLORS[int(surface)]
    return tuple(math.floor(ch * variation) for ch in base)


def grid_colors(grid: Grid) -> np.ndarray:
    """(rows, cols, 3) uint8 colour array for the whole grid."""
    rgb = np.floor(BASE_COLORS[grid.surface] * grid.variation[..., None])
    return np.clip(rgb, 0, 255).astype(np.uint8)


class GardenRenderer:
    """Renders a grid plus objects; ``scale`` is image px per canvas px."""

    def __init__(self, scale=1.0):
        self.scale = scale

    @property
    def cell_size(self):
        return max(1, round(CELL_PX * self.scale))

    def render(
        self, grid, objects, tool=None, cursor=None, read_only=False
    ):
        cs = self.cell_size
        cells = Image.fromarray(grid_colors(grid), "RGB")
        img = cells.resize(
            (grid.cols * cs, grid.rows * cs), Image.Resampling.NEAREST
        )
        draw = ImageDraw.Draw(img, "RGBA")

        self._draw_sand_texture(draw, grid)

        for obj in objects:
            sprite = sprite_image(obj.kind, obj.sprite_index, self.scale)
            img.paste(
                sprite,
                (round(obj.x * self.scale), round(obj.y * self.scale)),
                sprite,
            )

        if not read_only and tool is not None and cursor is not None:
            self._draw_tool_cursor(draw, grid, objects, tool, cursor)
        return img

    def _draw_sand_texture(self, draw, grid):
        cs = self.cell_size
        dot = max(1, round(cs * 0.15))
        rows, cols = np.nonzero(grid.surface == SurfaceType.SAND)
        for r, c in zip(rows.tolist(), cols.tolist()):
            if (r + c) % 7 != 0:
                continue
            color = surface_color(
                SurfaceType.SAND, grid.variation[r, c] * SAND_DOT_SHADE
            )
            x = c * cs + cs * 0.25
            y = r * cs + cs * 0.25
            draw.rectangle([x, y, x + dot - 1, y + dot - 1], fill=color)

    def _draw_tool_cursor(self, draw, grid, objects, tool, cursor):
        s = self.scale
        kind = tool.object_kind
        if kind is not None:
            spec = SPRITES[kind]
            box = centered_box(cursor[0], cursor[1], spec.width, spec.height)
            blocked = find_overlap(box, objects) is not None
            draw.rectangle(
                [box.x * s, box.y * s, box.right * s - 1, box.bottom * s - 1],
                outline=PLACE_INVALID_OUTLINE
                if blocked
                else PLACE_VALID_OUTLINE,
                width=max(1, round(2 * s)),
            )
            return

        cell = pixel_to_cell(cursor[0], cursor[1], grid.rows, grid.cols)
        if cell is None:
            return
        cs = self.cell_size
        x = cell[1] * cs
        y = cell[0] * cs
        if tool is Tool.MARK:
            draw.rectangle(
                [x + 1, y + 1, x + cs - 2, y + cs - 2], outline=CURSOR_COLOR
            )
        elif tool is Tool.SMOOTHER:
            # Long thin bar across the smoothed span
            draw.rectangle(
                [x - cs, y + cs * 0.25, x + 2 * cs - 1, y + cs * 0.75],
                outline=CURSOR_COLOR,
            )
        elif tool is Tool.RAKE:
            # Rake teeth
            for i in range(4):
                tx = x - cs + i * cs
                draw.rectangle(
                    [tx, y + cs * 0.1, tx + cs * 0.8, y + cs * 0.9],
                    outline=CURSOR_COLOR,
                )


def render_garden(grid, objects, scale=1.0):
    """Cursor-free render, as used for shared and exported images."""
    return GardenRenderer(scale).render(grid, objects, read_only=True)
