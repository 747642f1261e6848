"""Client for the garden share backend (``zengarden.server``).

Sharing posts a compact snapshot (surface types only, no object ids) to
``POST /api/garden`` and gets back an opaque id plus a viewer link path.
Loading fetches ``GET /api/garden/<id>`` and returns the raw snapshot dict;
the caller runs it through the snapshot upgrade chain.

Network trouble of any kind (refused connection, timeout, non-2xx status,
non-JSON reply) surfaces as ``ShareError`` carrying a message fit for the
status line. Nothing is retried.
"""

import os
import re
from dataclasses import dataclass

import requests

DEFAULT_SERVER = "http://localhost:3000"
REQUEST_TIMEOUT = 10
GARDEN_PATH_RE = re.compile(r"^/garden/([A-Za-z0-9_-]+)$")


class ShareError(RuntimeError):
    pass


def default_server_url() -> str:
    return os.environ.get("ZENGARDEN_SERVER", DEFAULT_SERVER)


def garden_id_from_path(path: str) -> str | None:
    """Garden id from a viewer path like ``/garden/1712345678901``."""
    m = GARDEN_PATH_RE.match(path)
    return m.group(1) if m else None


@dataclass
class ShareResult:
    id: str
    link: str
    url: str


class ShareClient:
    def __init__(self, base_url=None, http=None):
        self.base_url = (base_url or default_server_url()).rstrip("/")
        self.http = http if http is not None else requests.Session()

    def share(self, snapshot: dict) -> ShareResult:
        try:
            res = self.http.post(
                f"{self.base_url}/api/garden",
                json=snapshot,
                timeout=REQUEST_TIMEOUT,
            )
            res.raise_for_status()
            body = res.json()
        except (requests.RequestException, ValueError) as e:
            print(f"[zengarden] Share failed: {e}")
            raise ShareError("Share failed (is the backend running?).") from e

        garden_id = str(body.get("id", ""))
        link = body.get("link") or (
            f"/garden/{garden_id}" if garden_id else ""
        )
        if not link:
            raise ShareError("Saved but no link returned.")
        return ShareResult(id=garden_id, link=link, url=self.base_url + link)

    def fetch(self, garden_id: str) -> dict:
        try:
            res = self.http.get(
                f"{self.base_url}/api/garden/{garden_id}",
                timeout=REQUEST_TIMEOUT,
            )
            res.raise_for_status()
            return res.json()
        except (requests.RequestException, ValueError) as e:
            print(f"[zengarden] Garden {garden_id} not loaded: {e}")
            raise ShareError(
                f"Could not load shared garden {garden_id}."
            ) from e
