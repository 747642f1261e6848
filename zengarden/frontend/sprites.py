"""Procedurally drawn plant and rock sprites.

Pure Pillow module with no UI dependencies (no tkinter), so the Flask
backend can serve the same sprites the desktop canvas draws. Sprites are
resolved by ``(kind, index)``; snapshots only store the index, and the
image handle is rebuilt on load.
"""

import functools
import io
import math

from PIL import Image, ImageDraw

from ..engine.types import SPRITES, ObjectKind

# (leaf colour, shadow colour) per plant variant
PLANT_PALETTES = [
    ("#4f7a3a", "#35562a"),
    ("#6b8e3d", "#4a6a2b"),
    ("#3f6e52", "#2c4f3b"),
    ("#7a8f4a", "#566734"),
]

# (face colour, edge colour) per rock variant
ROCK_PALETTES = [
    ("#8d8a85", "#5f5c58"),
    ("#a39e94", "#6e6a63"),
    ("#75716d", "#4d4a47"),
]


def _draw_plant(draw, w, h, index):
    leaf, shadow = PLANT_PALETTES[index % len(PLANT_PALETTES)]
    cx, cy = w / 2, h / 2
    draw.ellipse([w * 0.15, h * 0.7, w * 0.85, h * 0.95], fill="#00000030")
    n_leaves = 5 + index
    for i in range(n_leaves):
        angle = 2 * math.pi * i / n_leaves + index * 0.4
        lx = cx + math.cos(angle) * w * 0.22
        ly = cy + math.sin(angle) * h * 0.22
        r = min(w, h) * 0.2
        draw.ellipse(
            [lx - r, ly - r, lx + r, ly + r], fill=leaf, outline=shadow
        )
    r = min(w, h) * 0.12
    draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=shadow)


def _draw_rock(draw, w, h, index):
    face, edge = ROCK_PALETTES[index % len(ROCK_PALETTES)]
    # Lumpy polygon: radius wobbles with a per-variant phase.
    points = []
    n = 10
    for i in range(n):
        angle = 2 * math.pi * i / n
        wobble = 0.85 + 0.15 * math.sin(angle * (2 + index) + index)
        points.append(
            (
                w / 2 + math.cos(angle) * (w / 2 - 2) * wobble,
                h / 2 + math.sin(angle) * (h / 2 - 2) * wobble,
            )
        )
    draw.polygon(points, fill=face, outline=edge)
    draw.ellipse(
        [w * 0.3, h * 0.25, w * 0.5, h * 0.4], fill="#ffffff40"
    )


@functools.lru_cache(maxsize=None)
def sprite_image(kind: ObjectKind, index: int, scale: float = 1.0):
    """RGBA sprite for ``(kind, index)`` at ``scale`` canvas pixels per unit.

    Raises ValueError for an index outside the kind's variant range.
    """
    spec = SPRITES[kind]
    if not 0 <= index < spec.variants:
        raise ValueError(
            f"{kind.value} sprite index {index} out of range"
            f" (0..{spec.variants - 1})"
        )
    w = max(1, round(spec.width * scale))
    h = max(1, round(spec.height * scale))
    img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img, "RGBA")
    if kind is ObjectKind.PLANT:
        _draw_plant(draw, w, h, index)
    else:
        _draw_rock(draw, w, h, index)
    return img


def sprite_png_bytes(kind: ObjectKind, index: int) -> bytes:
    buf = io.BytesIO()
    sprite_image(kind, index).save(buf, format="PNG")
    return buf.getvalue()
