"""Overlap, bounds and hit testing for placed garden objects.

The central question this module answers: "may this object sit here?"
Placement, auto-fill and dragging in ``objects.py`` all call
``find_overlap`` with a candidate box before committing. The rules are:

  * **No overlap** — the candidate's interior must not intersect any other
    object's box. Boxes that only touch along an edge or at a corner are
    fine.
  * **Canvas bounds** — boxes are clamped into the canvas, never rejected
    for sticking out.

All boxes are axis-aligned; sprites never rotate.
"""

from __future__ import annotations

from typing import Iterable

from .types import CANVAS_HEIGHT, CANVAS_WIDTH, Box, PlacedObject


def boxes_overlap(a: Box, b: Box) -> bool:
    """True if the interiors of two boxes overlap.

    Touching (shared edge or corner) is NOT counted as overlap.
    """
    if a.right <= b.x or b.right <= a.x:
        return False
    if a.bottom <= b.y or b.bottom <= a.y:
        return False
    return True


def box_in_bounds(
    box: Box,
    canvas_width: float = CANVAS_WIDTH,
    canvas_height: float = CANVAS_HEIGHT,
) -> bool:
    """True if the box lies within (or on) the canvas edges."""
    return (
        box.x >= 0
        and box.y >= 0
        and box.right <= canvas_width
        and box.bottom <= canvas_height
    )


def clamp_box(
    x: float,
    y: float,
    width: float,
    height: float,
    canvas_width: float = CANVAS_WIDTH,
    canvas_height: float = CANVAS_HEIGHT,
) -> Box:
    """Box with top-left (x, y), pushed back inside the canvas."""
    cx = min(max(0.0, x), max(0.0, canvas_width - width))
    cy = min(max(0.0, y), max(0.0, canvas_height - height))
    return Box(cx, cy, width, height)


def centered_box(
    px: float,
    py: float,
    width: float,
    height: float,
    canvas_width: float = CANVAS_WIDTH,
    canvas_height: float = CANVAS_HEIGHT,
) -> Box:
    """Clamped box of the given size centred on a pointer position."""
    return clamp_box(
        px - width / 2,
        py - height / 2,
        width,
        height,
        canvas_width,
        canvas_height,
    )


def point_in_box(px: float, py: float, box: Box) -> bool:
    return box.x <= px <= box.right and box.y <= py <= box.bottom


def find_overlap(
    box: Box,
    objects: Iterable[PlacedObject],
    exclude_id: str | None = None,
) -> PlacedObject | None:
    """First object (other than ``exclude_id``) whose box overlaps ``box``."""
    for obj in objects:
        if obj.id == exclude_id:
            continue
        if boxes_overlap(box, obj.box):
            return obj
    return None


def hit_test(
    px: float, py: float, objects: list[PlacedObject]
) -> int | None:
    """Index of the object under a point, or None.

    Iterates in reverse order so the most recently placed (topmost) object
    wins.
    """
    for idx in range(len(objects) - 1, -1, -1):
        if point_in_box(px, py, objects[idx].box):
            return idx
    return None
