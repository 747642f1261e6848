from .grid import Grid
from .session import GardenSession
from .snapshot import load_snapshot
from .types import ObjectKind, PlacedObject, SurfaceType, Tool

__all__ = [
    "GardenSession",
    "Grid",
    "ObjectKind",
    "PlacedObject",
    "SurfaceType",
    "Tool",
    "load_snapshot",
]
