"""Data types matching the zen garden snapshot schema."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field

# -- Canvas geometry --

CELL_COLS = 64  # grid width in "pixels"
CELL_ROWS = 40  # grid height in "pixels"
CELL_PX = 10  # logical pixel size of one cell; object coords use this scale

CANVAS_WIDTH = CELL_COLS * CELL_PX
CANVAS_HEIGHT = CELL_ROWS * CELL_PX


class SurfaceType(enum.IntEnum):
    SAND = 0
    MARK = 1
    SMOOTHED = 2
    RAKED_LIGHT = 3
    RAKED_DARK = 4


class ObjectKind(str, enum.Enum):
    PLANT = "plant"
    ROCK = "rock"


class Tool(str, enum.Enum):
    MARK = "mark"
    SMOOTHER = "smoother"
    RAKE = "rake"
    PLANT = "plant"
    ROCK = "rock"

    @property
    def object_kind(self) -> ObjectKind | None:
        """The object kind this tool places, or None for sand tools."""
        if self is Tool.PLANT:
            return ObjectKind.PLANT
        if self is Tool.ROCK:
            return ObjectKind.ROCK
        return None


@dataclass(frozen=True)
class SpriteSpec:
    width: float
    height: float
    variants: int


SPRITES = {
    ObjectKind.PLANT: SpriteSpec(width=40.0, height=40.0, variants=4),
    ObjectKind.ROCK: SpriteSpec(width=48.0, height=36.0, variants=3),
}


def new_object_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Box:
    """Axis-aligned box in canvas pixels, (x, y) is the top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class PlacedObject:
    x: float
    y: float
    kind: ObjectKind
    sprite_index: int
    width: float
    height: float
    id: str = field(default_factory=new_object_id)

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)

    @staticmethod
    def from_dict(d: dict, kind: ObjectKind | None = None) -> PlacedObject:
        """Build from a snapshot entry.

        ``kind`` overrides the entry's own ``kind`` field (v4 plant lists
        carry no kind). A missing id gets a fresh one.
        """
        k = kind if kind is not None else ObjectKind(d["kind"])
        spec = SPRITES[k]
        return PlacedObject(
            x=float(d["x"]),
            y=float(d["y"]),
            kind=k,
            sprite_index=int(d.get("spriteIndex", 0)) % spec.variants,
            width=float(d.get("width", spec.width)),
            height=float(d.get("height", spec.height)),
            id=str(d.get("id") or new_object_id()),
        )

    def to_dict(self, include_id: bool = True) -> dict:
        d: dict = {
            "x": self.x,
            "y": self.y,
            "kind": self.kind.value,
            "spriteIndex": self.sprite_index,
            "width": self.width,
            "height": self.height,
        }
        if include_id:
            d["id"] = self.id
        return d
