"""The sand grid: a fixed array of cells with a surface type and a shade.

A cell is stored as two parallel numpy arrays rather than per-cell objects:

  * ``surface`` — ``uint8`` array of ``SurfaceType`` values.
  * ``variation`` — ``float64`` shade multiplier applied to the surface's
    base colour when rendering (see ``frontend/render.py``).

Both arrays have shape ``(rows, cols)`` and are indexed ``[row, col]``.
Every assignment of a surface type goes together with a freshly sampled
variation, so the texture never repeats exactly.
"""

from __future__ import annotations

import numpy as np

from .types import CELL_COLS, CELL_ROWS, SurfaceType

VARIATION_MIN = 0.98
VARIATION_MAX = 1.02
# Raked-dark furrows get a wider shade range than the ridges.
DARK_VARIATION_MIN = 0.95
DARK_VARIATION_MAX = 1.05


def random_variation(rng: np.random.Generator) -> float:
    """Uniform shade multiplier in [VARIATION_MIN, VARIATION_MAX)."""
    return VARIATION_MIN + rng.random() * (VARIATION_MAX - VARIATION_MIN)


def random_dark_variation(rng: np.random.Generator) -> float:
    return DARK_VARIATION_MIN + rng.random() * (
        DARK_VARIATION_MAX - DARK_VARIATION_MIN
    )


class Grid:
    def __init__(self, surface: np.ndarray, variation: np.ndarray) -> None:
        if surface.shape != variation.shape or surface.ndim != 2:
            raise ValueError(
                f"surface {surface.shape} and variation {variation.shape}"
                " must be matching 2D arrays"
            )
        self.surface = surface.astype(np.uint8, copy=False)
        self.variation = variation.astype(np.float64, copy=False)

    @property
    def rows(self) -> int:
        return self.surface.shape[0]

    @property
    def cols(self) -> int:
        return self.surface.shape[1]

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def set_cell(
        self, r: int, c: int, surface: SurfaceType, variation: float
    ) -> None:
        self.surface[r, c] = surface
        self.variation[r, c] = variation

    def cell(self, r: int, c: int) -> tuple[SurfaceType, float]:
        return SurfaceType(int(self.surface[r, c])), float(
            self.variation[r, c]
        )

    def copy(self) -> Grid:
        return Grid(self.surface.copy(), self.variation.copy())

    @staticmethod
    def empty(
        rng: np.random.Generator,
        rows: int = CELL_ROWS,
        cols: int = CELL_COLS,
    ) -> Grid:
        """All-sand grid with an independent shade sample per cell."""
        return Grid(
            np.full((rows, cols), SurfaceType.SAND, dtype=np.uint8),
            synthesize_variation(rng, rows, cols),
        )

    @staticmethod
    def from_surface(
        surface: np.ndarray, rng: np.random.Generator
    ) -> Grid:
        """Grid from surface types alone, re-synthesising the shading."""
        rows, cols = surface.shape
        return Grid(surface.copy(), synthesize_variation(rng, rows, cols))

    def to_cells(self) -> list[list[dict]]:
        """Full cell rows, as stored in local snapshots."""
        return [
            [
                {"type": int(t), "variation": float(v)}
                for t, v in zip(srow, vrow)
            ]
            for srow, vrow in zip(self.surface, self.variation)
        ]

    def to_types(self) -> list[list[int]]:
        """Surface types only, as sent to the share backend."""
        return self.surface.astype(int).tolist()


def synthesize_variation(
    rng: np.random.Generator, rows: int, cols: int
) -> np.ndarray:
    return VARIATION_MIN + rng.random((rows, cols)) * (
        VARIATION_MAX - VARIATION_MIN
    )


def randomize_grid(
    grid: Grid, rng: np.random.Generator, density: float = 0.08
) -> None:
    """Scatter marks, raked patches and smoothed areas over the whole grid.

    Per cell: with probability ``density`` a mark (70%) or a raked cell
    (light/dark evenly); with a further ``density / 2`` a smoothed cell;
    otherwise plain sand. Every cell gets a fresh shade.
    """
    for r in range(grid.rows):
        for c in range(grid.cols):
            roll = rng.random()
            if roll < density:
                if rng.random() < 0.7:
                    surface = SurfaceType.MARK
                elif rng.random() < 0.5:
                    surface = SurfaceType.RAKED_LIGHT
                else:
                    surface = SurfaceType.RAKED_DARK
            elif roll < density * 1.5:
                surface = SurfaceType.SMOOTHED
            else:
                surface = SurfaceType.SAND
            grid.set_cell(r, c, surface, random_variation(rng))
