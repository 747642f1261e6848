"""Sand tools: mark (wand), smoother and rake.

Each tool takes a target cell and mutates the grid in place. Tools are
called on pointer-down and on every pointer-move while a stroke is active,
so repeated calls on the same cell accumulate randomized changes rather
than converging.

Randomness comes from the caller's ``numpy.random.Generator``; tests pass
a seeded one.
"""

from __future__ import annotations

import numpy as np

from .grid import Grid, random_dark_variation, random_variation
from .types import SurfaceType

MARK_DARKEN = 0.7

SMOOTH_ROW_REACH = 1
SMOOTH_COL_REACH = 2
SMOOTH_FALLOFF = 0.3
SMOOTH_DISTURBED_CHANCE = 0.8  # non-sand -> smoothed
SMOOTH_SAND_CHANCE = 0.6  # sand -> smoothed

RAKE_COL_REACH = 2


def apply_mark(grid: Grid, r: int, c: int, rng: np.random.Generator) -> None:
    """Mark a cell, or darken an existing mark."""
    if not grid.in_bounds(r, c):
        return
    if grid.surface[r, c] == SurfaceType.MARK:
        grid.variation[r, c] = random_variation(rng) * MARK_DARKEN
    else:
        grid.set_cell(r, c, SurfaceType.MARK, random_variation(rng))


def smooth_probability(dr: int, dc: int) -> float:
    """Chance that the smoother touches the neighbour at (dr, dc)."""
    distance = abs(dr) + abs(dc) * 0.5
    return max(0.0, 1.0 - distance * SMOOTH_FALLOFF)


def apply_smoother(
    grid: Grid, r: int, c: int, rng: np.random.Generator
) -> None:
    """Smooth a 3x5 patch, leaving imperfections toward the edges."""
    for dr in range(-SMOOTH_ROW_REACH, SMOOTH_ROW_REACH + 1):
        for dc in range(-SMOOTH_COL_REACH, SMOOTH_COL_REACH + 1):
            nr = r + dr
            nc = c + dc
            if not grid.in_bounds(nr, nc):
                continue
            if rng.random() >= smooth_probability(dr, dc):
                continue
            if grid.surface[nr, nc] != SurfaceType.SAND:
                if rng.random() < SMOOTH_DISTURBED_CHANCE:
                    surface = SurfaceType.SMOOTHED
                else:
                    surface = SurfaceType.SAND
                grid.set_cell(nr, nc, surface, random_variation(rng))
            elif rng.random() < SMOOTH_SAND_CHANCE:
                grid.set_cell(
                    nr, nc, SurfaceType.SMOOTHED, random_variation(rng)
                )
            else:
                grid.variation[nr, nc] = random_variation(rng)


class Rake:
    """Rake with a running phase, so successive strokes alternate furrows."""

    def __init__(self, phase: int = 0) -> None:
        self.phase = phase

    def surface_at(self, c: int) -> SurfaceType:
        if (c + self.phase) % 2 == 0:
            return SurfaceType.RAKED_LIGHT
        return SurfaceType.RAKED_DARK

    def apply(
        self, grid: Grid, r: int, c: int, rng: np.random.Generator
    ) -> None:
        if 0 <= r < grid.rows:
            for dc in range(-RAKE_COL_REACH, RAKE_COL_REACH + 1):
                nc = c + dc
                if not 0 <= nc < grid.cols:
                    continue
                surface = self.surface_at(nc)
                if surface == SurfaceType.RAKED_DARK:
                    variation = random_dark_variation(rng)
                else:
                    variation = random_variation(rng)
                grid.set_cell(r, nc, surface, variation)
        self.phase += 1
