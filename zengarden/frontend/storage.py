"""Local snapshot storage and garden file export.

``LocalStore`` is a tiny key/value store of JSON documents, one file per
key under a data directory (``~/.zengarden`` by default). The app keeps
its working garden under ``zenGarden_v5`` and writes it through after
every completed stroke, placement, drag, deletion, clear or randomize.
Snapshots left by older builds under ``zenGarden_v2`` / ``zenGarden_v1``
are picked up when the current key is missing and re-saved in the current
format. Anything unreadable is treated as absent.

Gardens can also be exported to a file. A PNG export is a picture of the
garden with the full snapshot JSON in a tEXt chunk (key:
``zengarden_snapshot``), so it can be loaded back as well as looked at. A
``.json`` export is the snapshot alone.
"""

import json
import os
from pathlib import Path

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from ..engine.snapshot import SnapshotV5, load_snapshot, local_snapshot_dict
from .render import render_garden

STORAGE_KEY = "zenGarden_v5"
LEGACY_KEYS = ("zenGarden_v2", "zenGarden_v1")
METADATA_KEY = "zengarden_snapshot"


def default_data_dir() -> Path:
    env = os.environ.get("ZENGARDEN_HOME")
    if env:
        return Path(env)
    return Path.home() / ".zengarden"


class LocalStore:
    """Key/value store of JSON documents, one ``<key>.json`` file per key."""

    def __init__(self, root):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)


def save_local(store: LocalStore, snapshot: dict) -> None:
    store.set(STORAGE_KEY, json.dumps(snapshot))


def _read(store: LocalStore, key: str) -> SnapshotV5 | None:
    try:
        raw = store.get(key)
        if raw is None:
            return None
        return load_snapshot(json.loads(raw))
    except (OSError, ValueError) as e:
        print(f"[zengarden] Ignoring unreadable local snapshot {key}: {e}")
        return None


def load_local(store: LocalStore) -> SnapshotV5 | None:
    """Load the working garden, falling back to legacy keys.

    Returns None when nothing usable is stored.
    """
    for key in (STORAGE_KEY, *LEGACY_KEYS):
        snapshot = _read(store, key)
        if snapshot is not None:
            return snapshot
    return None


# ---------------------------------------------------------------------------
# File export
# ---------------------------------------------------------------------------

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
EXPORT_SCALE = 2.0


def export_garden(path, grid, objects, scale=EXPORT_SCALE) -> dict:
    """Write the garden to ``path`` and return the snapshot written.

    A ``.json`` path gets the bare snapshot. Anything else gets a PNG of
    the garden at ``scale`` with the snapshot in its metadata.
    """
    snapshot = local_snapshot_dict(grid, objects)
    text = json.dumps(snapshot)
    if str(path).lower().endswith(".json"):
        Path(path).write_text(text, encoding="utf-8")
        return snapshot
    info = PngInfo()
    info.add_text(METADATA_KEY, text)
    render_garden(grid, objects, scale=scale).save(
        path, format="PNG", pnginfo=info
    )
    return snapshot


def import_garden(path) -> SnapshotV5:
    """Read a garden written by ``export_garden`` (or any snapshot JSON).

    PNGs are recognised by their signature, not their name. Raises
    ValueError when the file holds no usable garden.
    """
    with open(path, "rb") as f:
        head = f.read(len(PNG_SIGNATURE))
    if head == PNG_SIGNATURE:
        with Image.open(path) as img:
            text = img.text.get(METADATA_KEY)
        if text is None:
            raise ValueError(f"{path} is a PNG without a saved garden")
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"{path} is neither a PNG nor JSON") from e
    return load_snapshot(json.loads(text))
