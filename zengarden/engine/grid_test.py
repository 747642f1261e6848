"""Tests for the grid model and random garden generation."""

import numpy as np
import pytest

from .grid import (
    VARIATION_MAX,
    VARIATION_MIN,
    Grid,
    random_variation,
    randomize_grid,
)
from .types import CELL_COLS, CELL_ROWS, SurfaceType


def _rng(seed=0):
    return np.random.default_rng(seed)


class TestEmptyGrid:
    def test_default_size_all_sand(self):
        g = Grid.empty(_rng())
        assert (g.rows, g.cols) == (CELL_ROWS, CELL_COLS)
        assert g.surface.shape == (40, 64)
        assert (g.surface == SurfaceType.SAND).all()

    def test_variation_bounded(self):
        g = Grid.empty(_rng())
        assert g.variation.min() >= VARIATION_MIN
        assert g.variation.max() < VARIATION_MAX

    def test_variation_sampled_per_cell(self):
        """Cells do not share one shade."""
        g = Grid.empty(_rng())
        assert len(np.unique(g.variation)) > CELL_ROWS * CELL_COLS // 2

    def test_mismatched_arrays_rejected(self):
        with pytest.raises(ValueError):
            Grid(np.zeros((2, 2)), np.ones((2, 3)))


class TestCells:
    def test_set_and_read_cell(self):
        g = Grid.empty(_rng(), rows=3, cols=4)
        g.set_cell(1, 2, SurfaceType.RAKED_DARK, 0.97)
        assert g.cell(1, 2) == (SurfaceType.RAKED_DARK, 0.97)

    def test_in_bounds(self):
        g = Grid.empty(_rng(), rows=3, cols=4)
        assert g.in_bounds(0, 0)
        assert g.in_bounds(2, 3)
        assert not g.in_bounds(3, 0)
        assert not g.in_bounds(0, -1)

    def test_to_cells_and_types(self):
        g = Grid.empty(_rng(), rows=2, cols=3)
        g.set_cell(0, 1, SurfaceType.MARK, 1.0)
        cells = g.to_cells()
        assert len(cells) == 2 and len(cells[0]) == 3
        assert cells[0][1] == {"type": 1, "variation": 1.0}
        assert g.to_types() == [[0, 1, 0], [0, 0, 0]]
        assert all(isinstance(t, int) for t in g.to_types()[0])

    def test_copy_is_independent(self):
        g = Grid.empty(_rng(), rows=2, cols=2)
        c = g.copy()
        c.set_cell(0, 0, SurfaceType.MARK, 1.0)
        assert g.surface[0, 0] == SurfaceType.SAND


class TestRandomVariation:
    def test_bounded(self):
        rng = _rng(5)
        for _ in range(1000):
            v = random_variation(rng)
            assert VARIATION_MIN <= v < VARIATION_MAX


class TestRandomizeGrid:
    def test_zero_density_is_plain_sand(self):
        g = Grid.empty(_rng())
        randomize_grid(g, _rng(1), density=0.0)
        assert (g.surface == SurfaceType.SAND).all()

    def test_full_density_only_marks_and_rakes(self):
        g = Grid.empty(_rng())
        randomize_grid(g, _rng(2), density=1.0)
        allowed = {
            SurfaceType.MARK,
            SurfaceType.RAKED_LIGHT,
            SurfaceType.RAKED_DARK,
        }
        assert set(np.unique(g.surface).tolist()) <= allowed
        # Marks dominate at 70%.
        assert (g.surface == SurfaceType.MARK).mean() > 0.6

    def test_default_density_mostly_sand(self):
        g = Grid.empty(_rng())
        randomize_grid(g, _rng(3))
        sand = (g.surface == SurfaceType.SAND).mean()
        assert 0.8 < sand < 0.95
        assert (g.surface == SurfaceType.SMOOTHED).any()
        assert g.variation.min() >= VARIATION_MIN
        assert g.variation.max() < VARIATION_MAX
