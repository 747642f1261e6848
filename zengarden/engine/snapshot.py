"""Versioned garden snapshots and the v1 -> v5 upgrade chain.

A snapshot is the JSON-serialisable form of a garden:
``{grid, objects, cols, rows, version, timestamp}``. The format has grown
over five versions and every loader must still accept all of them:

  ==  =======================================================================
  v1  ``grid`` of 0/1 bits (sand or mark). Also the fallback for snapshots
      with a missing or unknown version: numbers are taken as the surface
      type, cell objects contribute their ``type`` (or sand).
  v2  ``grid`` of full cells ``{"type": int, "variation": float}``.
  v3  ``grid`` of surface-type ints only; shading is dropped.
  v4  v2/v3 grid plus a plants-only ``plants`` list (no ``kind`` field).
  v5  v2/v3 grid plus a unified ``objects`` list with a ``kind`` per entry.
      Local snapshots carry full cells and object ids; shared snapshots
      carry surface types only and no ids.
  ==  =======================================================================

Each version is parsed into its own record type, and each record knows how
to ``upgrade()`` itself to the next version. ``load_snapshot`` parses by
version and walks the chain up to ``SnapshotV5``, which is the in-memory
form the rest of the app works with. Shading that a format dropped stays
``None`` until ``SnapshotV5.to_garden`` re-synthesises it.

Malformed input raises ``ValueError``.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np

from .grid import Grid, synthesize_variation
from .types import (
    CELL_COLS,
    CELL_ROWS,
    ObjectKind,
    PlacedObject,
    SurfaceType,
)

CURRENT_VERSION = 5

_MAX_SURFACE = max(SurfaceType)


def _surface_value(raw: Any) -> int:
    """Coerce a stored surface type; unknown values read as sand."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"surface type must be a number, got {raw!r}")
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValueError(f"surface type must be finite, got {raw!r}")
    value = int(raw)
    if 0 <= value <= _MAX_SURFACE:
        return value
    return SurfaceType.SAND


def _check_rows(grid: Any) -> list[list[Any]]:
    if not isinstance(grid, list) or not grid:
        raise ValueError("snapshot grid must be a non-empty list of rows")
    width = None
    for row in grid:
        if not isinstance(row, list):
            raise ValueError("snapshot grid rows must be lists")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise ValueError("snapshot grid rows differ in length")
    if not width:
        raise ValueError("snapshot grid rows are empty")
    return grid


def _parse_mixed_grid(grid: Any) -> tuple[np.ndarray, np.ndarray | None]:
    """Parse a grid whose cells are either type ints or full cell dicts.

    Variation is returned only if every cell carried one.
    """
    rows = _check_rows(grid)
    surface = np.zeros((len(rows), len(rows[0])), dtype=np.uint8)
    variation = np.ones(surface.shape, dtype=np.float64)
    has_variation = True
    for r, row in enumerate(rows):
        for c, cell in enumerate(row):
            if isinstance(cell, dict):
                surface[r, c] = _surface_value(cell.get("type", 0))
                v = cell.get("variation")
                if isinstance(v, (int, float)) and not isinstance(v, bool):
                    if not math.isfinite(v):
                        raise ValueError(f"cell variation {v!r} at {r},{c}")
                    variation[r, c] = float(v)
                else:
                    has_variation = False
            else:
                surface[r, c] = _surface_value(cell)
                has_variation = False
    return surface, (variation if has_variation else None)


def _parse_legacy_grid(grid: Any) -> np.ndarray:
    rows = _check_rows(grid)
    surface = np.zeros((len(rows), len(rows[0])), dtype=np.uint8)
    for r, row in enumerate(rows):
        for c, cell in enumerate(row):
            if isinstance(cell, dict):
                surface[r, c] = _surface_value(cell.get("type") or 0)
            else:
                surface[r, c] = _surface_value(cell)
    return surface


def _parse_objects(
    entries: Any, kind: ObjectKind | None = None
) -> list[PlacedObject]:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ValueError("snapshot object list must be a list")
    try:
        objects = [PlacedObject.from_dict(e, kind=kind) for e in entries]
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed snapshot object: {e!r}") from e
    for obj in objects:
        if not all(
            math.isfinite(v) for v in (obj.x, obj.y, obj.width, obj.height)
        ):
            raise ValueError(f"snapshot object {obj.id} has a non-finite box")
    return objects


def _timestamp(d: dict) -> int | None:
    ts = d.get("timestamp", d.get("ts"))
    if isinstance(ts, (int, float)) and math.isfinite(ts):
        return int(ts)
    return None


# ---------------------------------------------------------------------------
# Version records
# ---------------------------------------------------------------------------


@dataclass
class SnapshotV1:
    version: ClassVar[int] = 1
    surface: np.ndarray
    timestamp: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SnapshotV1:
        return SnapshotV1(
            surface=_parse_legacy_grid(d.get("grid")),
            timestamp=_timestamp(d),
        )

    def upgrade(self) -> SnapshotV2:
        return SnapshotV2(self.surface, None, self.timestamp)


@dataclass
class SnapshotV2:
    version: ClassVar[int] = 2
    surface: np.ndarray
    variation: np.ndarray | None
    timestamp: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SnapshotV2:
        surface, variation = _parse_mixed_grid(d.get("grid"))
        return SnapshotV2(surface, variation, _timestamp(d))

    def upgrade(self) -> SnapshotV3:
        return SnapshotV3(self.surface, self.variation, self.timestamp)


@dataclass
class SnapshotV3:
    version: ClassVar[int] = 3
    surface: np.ndarray
    variation: np.ndarray | None = None
    timestamp: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SnapshotV3:
        surface, variation = _parse_mixed_grid(d.get("grid"))
        return SnapshotV3(surface, variation, _timestamp(d))

    def upgrade(self) -> SnapshotV4:
        return SnapshotV4(self.surface, self.variation, [], self.timestamp)


@dataclass
class SnapshotV4:
    version: ClassVar[int] = 4
    surface: np.ndarray
    variation: np.ndarray | None = None
    plants: list[PlacedObject] = field(default_factory=list)
    timestamp: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SnapshotV4:
        surface, variation = _parse_mixed_grid(d.get("grid"))
        return SnapshotV4(
            surface,
            variation,
            _parse_objects(d.get("plants"), kind=ObjectKind.PLANT),
            _timestamp(d),
        )

    def upgrade(self) -> SnapshotV5:
        return SnapshotV5(
            self.surface, self.variation, list(self.plants), self.timestamp
        )


@dataclass
class SnapshotV5:
    version: ClassVar[int] = 5
    surface: np.ndarray
    variation: np.ndarray | None = None
    objects: list[PlacedObject] = field(default_factory=list)
    timestamp: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SnapshotV5:
        surface, variation = _parse_mixed_grid(d.get("grid"))
        return SnapshotV5(
            surface, variation, _parse_objects(d.get("objects")), _timestamp(d)
        )

    def upgrade(self) -> SnapshotV5:
        return self

    def to_garden(
        self,
        rng: np.random.Generator,
        rows: int = CELL_ROWS,
        cols: int = CELL_COLS,
    ) -> tuple[Grid, list[PlacedObject]]:
        """Build a live grid and object list of the standard size.

        Missing shading is re-synthesised; a grid of a different size is
        cropped or padded with sand.
        """
        variation = self.variation
        if variation is None:
            variation = synthesize_variation(rng, *self.surface.shape)
        grid = Grid.empty(rng, rows, cols)
        h = min(rows, self.surface.shape[0])
        w = min(cols, self.surface.shape[1])
        grid.surface[:h, :w] = self.surface[:h, :w]
        grid.variation[:h, :w] = variation[:h, :w]
        return grid, [
            PlacedObject(
                x=o.x,
                y=o.y,
                kind=o.kind,
                sprite_index=o.sprite_index,
                width=o.width,
                height=o.height,
                id=o.id,
            )
            for o in self.objects
        ]


Snapshot = SnapshotV1 | SnapshotV2 | SnapshotV3 | SnapshotV4 | SnapshotV5

_PARSERS = {
    1: SnapshotV1.from_dict,
    2: SnapshotV2.from_dict,
    3: SnapshotV3.from_dict,
    4: SnapshotV4.from_dict,
    5: SnapshotV5.from_dict,
}


def parse_snapshot(d: Any) -> Snapshot:
    """Parse a snapshot dict into the record type for its stored version."""
    if not isinstance(d, dict) or "grid" not in d:
        raise ValueError("snapshot must be an object with a 'grid' field")
    version = d.get("version")
    if isinstance(version, bool) or not isinstance(version, int):
        version = None
    parser = _PARSERS.get(version, SnapshotV1.from_dict)  # type: ignore
    try:
        return parser(d)
    except OverflowError as e:
        raise ValueError(f"snapshot number out of range: {e}") from e


def upgrade(snapshot: Snapshot) -> SnapshotV5:
    """Walk the upgrade chain to the current version."""
    current: Any = snapshot
    while current.version < CURRENT_VERSION:
        current = current.upgrade()
    return current


def load_snapshot(d: Any) -> SnapshotV5:
    return upgrade(parse_snapshot(d))


# ---------------------------------------------------------------------------
# Writers (always the current version)
# ---------------------------------------------------------------------------


def now_ms() -> int:
    return int(time.time() * 1000)


def local_snapshot_dict(
    grid: Grid,
    objects: list[PlacedObject],
    timestamp: int | None = None,
) -> dict:
    """Full-fidelity snapshot for local storage: cells with shading, ids."""
    return {
        "grid": grid.to_cells(),
        "objects": [o.to_dict() for o in objects],
        "cols": grid.cols,
        "rows": grid.rows,
        "version": CURRENT_VERSION,
        "timestamp": now_ms() if timestamp is None else timestamp,
    }


def share_snapshot_dict(grid: Grid, objects: list[PlacedObject]) -> dict:
    """Compact snapshot for the share backend: surface types, no ids."""
    return {
        "grid": grid.to_types(),
        "objects": [o.to_dict(include_id=False) for o in objects],
        "cols": grid.cols,
        "rows": grid.rows,
        "version": CURRENT_VERSION,
    }
