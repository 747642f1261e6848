"""Tests for object placement, auto-fill, drag and delete."""

import itertools

import numpy as np

from .collision import box_in_bounds, boxes_overlap
from .objects import (
    DragMove,
    DragState,
    auto_fill,
    object_at,
    place_object,
    remove_object_at,
)
from .types import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    SPRITES,
    ObjectKind,
    PlacedObject,
)


def _rng(seed=0):
    return np.random.default_rng(seed)


def _assert_no_overlaps(objects):
    for a, b in itertools.combinations(objects, 2):
        assert not boxes_overlap(a.box, b.box), (a, b)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class TestPlaceObject:
    def test_centred_on_pointer(self):
        objects = []
        obj = place_object(objects, ObjectKind.PLANT, 100, 100, _rng())
        assert obj is not None
        assert objects == [obj]
        assert (obj.x, obj.y) == (80, 80)
        assert (obj.width, obj.height) == (40, 40)

    def test_rock_size_and_variant(self):
        objects = []
        rng = _rng(1)
        for i in range(6):
            place_object(objects, ObjectKind.ROCK, 40 + i * 60, 100, rng)
        spec = SPRITES[ObjectKind.ROCK]
        assert len(objects) == 6
        for obj in objects:
            assert (obj.width, obj.height) == (spec.width, spec.height)
            assert 0 <= obj.sprite_index < spec.variants

    def test_clamped_into_canvas(self):
        objects = []
        obj = place_object(
            objects, ObjectKind.ROCK, CANVAS_WIDTH, CANVAS_HEIGHT, _rng()
        )
        assert obj is not None
        assert box_in_bounds(obj.box)

    def test_overlap_rejected(self):
        objects = []
        place_object(objects, ObjectKind.PLANT, 100, 100, _rng())
        blocked = place_object(objects, ObjectKind.ROCK, 110, 110, _rng())
        assert blocked is None
        assert len(objects) == 1

    def test_touching_allowed(self):
        objects = []
        place_object(objects, ObjectKind.PLANT, 20, 20, _rng())
        beside = place_object(objects, ObjectKind.PLANT, 60, 20, _rng())
        assert beside is not None
        assert beside.x == 40

    def test_fresh_ids(self):
        objects = []
        rng = _rng()
        place_object(objects, ObjectKind.PLANT, 50, 50, rng)
        place_object(objects, ObjectKind.PLANT, 200, 50, rng)
        assert objects[0].id != objects[1].id


# ---------------------------------------------------------------------------
# Auto-fill
# ---------------------------------------------------------------------------


class TestAutoFill:
    def test_places_requested_counts(self):
        objects = []
        placed = auto_fill(
            objects, {ObjectKind.PLANT: 3, ObjectKind.ROCK: 2}, _rng(2)
        )
        assert placed == 5
        kinds = [o.kind for o in objects]
        assert kinds.count(ObjectKind.PLANT) == 3
        assert kinds.count(ObjectKind.ROCK) == 2
        _assert_no_overlaps(objects)
        assert all(box_in_bounds(o.box) for o in objects)

    def test_respects_existing_objects(self):
        objects = []
        place_object(objects, ObjectKind.ROCK, 320, 200, _rng())
        auto_fill(objects, {ObjectKind.PLANT: 10}, _rng(3))
        _assert_no_overlaps(objects)

    def test_crowded_garden_gives_up(self):
        """Far more plants than fit: stops short without overlapping."""
        objects = []
        placed = auto_fill(objects, {ObjectKind.PLANT: 200}, _rng(4))
        assert placed == len(objects)
        assert placed < 200
        _assert_no_overlaps(objects)

    def test_zero_attempts_places_nothing(self):
        objects = []
        placed = auto_fill(
            objects, {ObjectKind.PLANT: 3}, _rng(), attempts_per_object=0
        )
        assert placed == 0
        assert objects == []


# ---------------------------------------------------------------------------
# Lookup and delete
# ---------------------------------------------------------------------------


class TestObjectAt:
    def _stack(self):
        rock = PlacedObject(0, 0, ObjectKind.ROCK, 0, 48, 36, id="rock")
        plant = PlacedObject(30, 20, ObjectKind.PLANT, 0, 40, 40, id="plant")
        return [rock, plant]

    def test_any_kind(self):
        assert object_at(self._stack(), 35, 25) == 1

    def test_kind_filter_uses_topmost_only(self):
        objects = self._stack()
        assert object_at(objects, 35, 25, ObjectKind.ROCK) is None
        assert object_at(objects, 10, 10, ObjectKind.ROCK) == 0

    def test_remove(self):
        objects = self._stack()
        removed = remove_object_at(objects, 50, 50, ObjectKind.PLANT)
        assert removed is not None and removed.id == "plant"
        assert [o.id for o in objects] == ["rock"]

    def test_remove_wrong_kind_is_noop(self):
        objects = self._stack()
        assert remove_object_at(objects, 50, 50, ObjectKind.ROCK) is None
        assert len(objects) == 2


# ---------------------------------------------------------------------------
# Dragging
# ---------------------------------------------------------------------------


class TestDrag:
    def test_grab_point_follows_pointer(self):
        obj = PlacedObject(100, 100, ObjectKind.PLANT, 0, 40, 40, id="p")
        objects = [obj]
        drag = DragState.begin(obj, 110, 115)
        assert (drag.offset_x, drag.offset_y) == (10, 15)
        assert drag.move_to(objects, 210, 215) is DragMove.MOVED
        assert (obj.x, obj.y) == (200, 200)

    def test_blocked_move_keeps_last_position(self):
        obj = PlacedObject(100, 100, ObjectKind.PLANT, 0, 40, 40, id="p")
        wall = PlacedObject(200, 100, ObjectKind.ROCK, 0, 48, 36, id="r")
        objects = [obj, wall]
        drag = DragState.begin(obj, 100, 100)
        assert drag.move_to(objects, 150, 100) is DragMove.MOVED
        assert drag.move_to(objects, 190, 100) is DragMove.BLOCKED
        assert (obj.x, obj.y) == (150, 100)

    def test_clamped_at_canvas_edge(self):
        obj = PlacedObject(100, 100, ObjectKind.PLANT, 0, 40, 40, id="p")
        drag = DragState.begin(obj, 120, 120)
        drag.move_to([obj], -500, 9999)
        assert obj.x == 0
        assert obj.box.bottom == CANVAS_HEIGHT

    def test_unchanged_position_reports_no_move(self):
        obj = PlacedObject(0, 0, ObjectKind.PLANT, 0, 40, 40, id="p")
        drag = DragState.begin(obj, 0, 0)
        assert drag.move_to([obj], -10, -10) is DragMove.UNCHANGED

    def test_missing_object(self):
        drag = DragState("gone", 0, 0)
        assert drag.move_to([], 50, 50) is DragMove.UNCHANGED
