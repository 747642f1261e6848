"""Plant and rock placement, random auto-fill, dragging and deletion.

Objects live in a flat list in insertion order (later objects draw on top).
Every operation that puts an object somewhere new checks the candidate box
with ``collision.find_overlap`` first, so the list never holds two
overlapping objects:

  * **Place** — box centred on the pointer, clamped to the canvas; rejected
    (returns None, list untouched) if it overlaps anything.
  * **Auto-fill** — random positions with a bounded number of attempts per
    requested object; gives up quietly when the garden is crowded.
  * **Drag** — ``DragState`` remembers the pointer-to-origin offset; each
    move is applied only if the new box is clear, otherwise the object
    stays at its last valid position.
  * **Delete** — remove the topmost object of a given kind under a point.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

from .collision import centered_box, clamp_box, find_overlap, hit_test
from .types import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    SPRITES,
    ObjectKind,
    PlacedObject,
)

AUTO_FILL_ATTEMPTS_PER_OBJECT = 50


def place_object(
    objects: list[PlacedObject],
    kind: ObjectKind,
    px: float,
    py: float,
    rng: np.random.Generator,
) -> PlacedObject | None:
    """Place a new object centred on (px, py).

    Returns the new object, or None if there is no room.
    """
    spec = SPRITES[kind]
    box = centered_box(px, py, spec.width, spec.height)
    if find_overlap(box, objects) is not None:
        return None
    obj = PlacedObject(
        x=box.x,
        y=box.y,
        kind=kind,
        sprite_index=int(rng.integers(spec.variants)),
        width=spec.width,
        height=spec.height,
    )
    objects.append(obj)
    return obj


def auto_fill(
    objects: list[PlacedObject],
    counts: dict[ObjectKind, int],
    rng: np.random.Generator,
    attempts_per_object: int = AUTO_FILL_ATTEMPTS_PER_OBJECT,
) -> int:
    """Scatter up to ``counts[kind]`` new objects of each kind.

    Returns how many were actually placed.
    """
    placed = 0
    for kind, wanted in counts.items():
        spec = SPRITES[kind]
        added = 0
        budget = wanted * attempts_per_object
        while added < wanted and budget > 0:
            budget -= 1
            x = rng.random() * (CANVAS_WIDTH - spec.width)
            y = rng.random() * (CANVAS_HEIGHT - spec.height)
            box = clamp_box(x, y, spec.width, spec.height)
            if find_overlap(box, objects) is not None:
                continue
            objects.append(
                PlacedObject(
                    x=box.x,
                    y=box.y,
                    kind=kind,
                    sprite_index=int(rng.integers(spec.variants)),
                    width=spec.width,
                    height=spec.height,
                )
            )
            added += 1
        placed += added
    return placed


def object_at(
    objects: list[PlacedObject],
    px: float,
    py: float,
    kind: ObjectKind | None = None,
) -> int | None:
    """Index of the topmost object under a point, optionally of one kind.

    Only the topmost object counts: a plant sitting on top of a rock
    shields the rock from rock-tool clicks.
    """
    idx = hit_test(px, py, objects)
    if idx is None:
        return None
    if kind is not None and objects[idx].kind != kind:
        return None
    return idx


def remove_object_at(
    objects: list[PlacedObject],
    px: float,
    py: float,
    kind: ObjectKind,
) -> PlacedObject | None:
    idx = object_at(objects, px, py, kind)
    if idx is None:
        return None
    return objects.pop(idx)


class DragMove(enum.Enum):
    MOVED = "moved"
    UNCHANGED = "unchanged"
    BLOCKED = "blocked"


@dataclass
class DragState:
    object_id: str
    offset_x: float
    offset_y: float

    @staticmethod
    def begin(obj: PlacedObject, px: float, py: float) -> DragState:
        return DragState(
            object_id=obj.id, offset_x=px - obj.x, offset_y=py - obj.y
        )

    def move_to(
        self, objects: list[PlacedObject], px: float, py: float
    ) -> DragMove:
        """Move the dragged object so the grab point follows the pointer.

        A BLOCKED move leaves the object at its last valid position.
        """
        obj = next((o for o in objects if o.id == self.object_id), None)
        if obj is None:
            return DragMove.UNCHANGED
        box = clamp_box(
            px - self.offset_x, py - self.offset_y, obj.width, obj.height
        )
        if (box.x, box.y) == (obj.x, obj.y):
            return DragMove.UNCHANGED
        if find_overlap(box, objects, exclude_id=obj.id) is not None:
            return DragMove.BLOCKED
        obj.x = box.x
        obj.y = box.y
        return DragMove.MOVED
