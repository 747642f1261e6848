"""Tests for the Pillow garden renderer and the procedural sprites."""

import math

import numpy as np
import pytest

from ..engine.grid import Grid, randomize_grid
from ..engine.types import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    SPRITES,
    ObjectKind,
    PlacedObject,
    SurfaceType,
    Tool,
)
from .render import (
    BASE_COLORS,
    GardenRenderer,
    grid_colors,
    render_garden,
    surface_color,
)
from .sprites import ROCK_PALETTES, sprite_image, sprite_png_bytes


def _grid(seed=0):
    rng = np.random.default_rng(seed)
    grid = Grid.empty(rng)
    randomize_grid(grid, rng, density=0.5)
    return grid


def _hex_rgb(color):
    return tuple(int(color[i : i + 2], 16) for i in (1, 3, 5))


# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------


class TestColors:
    def test_floor_of_base_times_variation(self):
        assert surface_color(SurfaceType.SAND, 1.0) == (243, 230, 203)
        assert surface_color(SurfaceType.SAND, 0.99) == (
            math.floor(243 * 0.99),
            math.floor(230 * 0.99),
            math.floor(203 * 0.99),
        )

    def test_dark_marks(self):
        """Re-marked cells shade well below the plain mark colour."""
        plain = surface_color(SurfaceType.MARK, 1.0)
        dark = surface_color(SurfaceType.MARK, 0.7)
        assert all(d < p for d, p in zip(dark, plain))

    def test_grid_colors_match_per_cell(self):
        grid = _grid()
        colors = grid_colors(grid)
        assert colors.shape == (grid.rows, grid.cols, 3)
        assert colors.dtype == np.uint8
        for r, c in [(0, 0), (5, 17), (39, 63), (20, 40)]:
            expected = surface_color(grid.surface[r, c], grid.variation[r, c])
            assert tuple(colors[r, c]) == expected

    def test_one_colour_per_surface(self):
        assert BASE_COLORS.shape == (len(SurfaceType), 3)


# ---------------------------------------------------------------------------
# GardenRenderer
# ---------------------------------------------------------------------------


class TestRender:
    @pytest.mark.parametrize("scale", [1.0, 0.5, 2.0])
    def test_size(self, scale):
        img = GardenRenderer(scale).render(_grid(), [])
        assert img.size == (
            round(CANVAS_WIDTH * scale),
            round(CANVAS_HEIGHT * scale),
        )

    def test_cell_fill(self):
        grid = _grid()
        img = render_garden(grid, [])
        # (0, 1) never carries a sand dot: (0 + 1) % 7 != 0
        expected = surface_color(grid.surface[0, 1], grid.variation[0, 1])
        assert img.getpixel((15, 5)) == expected

    def test_sand_dot(self):
        grid = Grid.empty(np.random.default_rng(1))
        img = render_garden(grid, [])
        plain = surface_color(SurfaceType.SAND, grid.variation[0, 0])
        dot = img.getpixel((3, 3))
        assert dot != plain
        assert all(d <= p for d, p in zip(dot, plain))

    def test_object_drawn_on_top(self):
        grid = Grid.empty(np.random.default_rng(2))
        spec = SPRITES[ObjectKind.ROCK]
        rock = PlacedObject(
            100, 100, ObjectKind.ROCK, 0, spec.width, spec.height
        )
        img = render_garden(grid, [rock])
        centre = (100 + int(spec.width) // 2, 100 + int(spec.height) // 2)
        assert img.getpixel(centre) == _hex_rgb(ROCK_PALETTES[0][0])

    def test_cursor_only_when_editable(self):
        grid = Grid.empty(np.random.default_rng(3))
        renderer = GardenRenderer()
        plain = renderer.render(grid, [])
        for tool in Tool:
            editable = renderer.render(
                grid, [], tool=tool, cursor=(105, 55)
            )
            read_only = renderer.render(
                grid, [], tool=tool, cursor=(105, 55), read_only=True
            )
            assert editable.tobytes() != plain.tobytes(), tool
            assert read_only.tobytes() == plain.tobytes(), tool

    def test_blocked_placement_outline_differs(self):
        grid = Grid.empty(np.random.default_rng(4))
        renderer = GardenRenderer()
        rock = PlacedObject(300, 300, ObjectKind.ROCK, 0, 48, 36)
        free = renderer.render(grid, [rock], Tool.PLANT, cursor=(100, 100))
        blocked = renderer.render(
            grid, [rock], Tool.PLANT, cursor=(310, 310)
        )
        # Left edge of the ghost outline
        assert free.getpixel((80, 100))[1] > free.getpixel((80, 100))[0]
        assert blocked.getpixel((290, 310))[0] > blocked.getpixel(
            (290, 310)
        )[1]


# ---------------------------------------------------------------------------
# Sprites
# ---------------------------------------------------------------------------


class TestSprites:
    @pytest.mark.parametrize("kind", list(ObjectKind))
    def test_every_variant_has_declared_size(self, kind):
        spec = SPRITES[kind]
        for index in range(spec.variants):
            img = sprite_image(kind, index)
            assert img.mode == "RGBA"
            assert img.size == (spec.width, spec.height)

    def test_variants_differ(self):
        a = sprite_image(ObjectKind.PLANT, 0).tobytes()
        b = sprite_image(ObjectKind.PLANT, 1).tobytes()
        assert a != b

    def test_scaled(self):
        assert sprite_image(ObjectKind.ROCK, 0, 0.5).size == (24, 18)

    @pytest.mark.parametrize(
        "kind,index", [(ObjectKind.PLANT, 4), (ObjectKind.ROCK, -1)]
    )
    def test_index_out_of_range(self, kind, index):
        with pytest.raises(ValueError):
            sprite_image(kind, index)

    def test_png_bytes(self):
        assert sprite_png_bytes(ObjectKind.ROCK, 2).startswith(b"\x89PNG")
