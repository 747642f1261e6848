"""In-memory garden store for the share backend.

One process-lifetime map from id to the JSON body exactly as posted. Ids
are the creation time in milliseconds, so two creates within the same
millisecond share an id and the second silently replaces the first; this
is a known limitation, not a guarantee.

The Flask development server handles requests on several threads, so the
map is guarded by a lock.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable


def timestamp_id() -> str:
    return str(int(time.time() * 1000))


class GardenStore:
    def __init__(self, make_id: Callable[[], str] = timestamp_id) -> None:
        self._make_id = make_id
        self._gardens: dict[str, Any] = {}
        self._lock = threading.Lock()

    def create(self, body: Any) -> str:
        garden_id = self._make_id()
        with self._lock:
            self._gardens[garden_id] = body
        return garden_id

    def get(self, garden_id: str) -> Any | None:
        with self._lock:
            return self._gardens.get(garden_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._gardens)
