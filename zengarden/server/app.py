"""Flask backend for sharing gardens.

Endpoints:

  * ``POST /api/garden`` — store the JSON body verbatim under a new id;
    replies ``{"id": ..., "link": "/garden/<id>"}``.
  * ``GET /api/garden/<id>`` — the stored body, or
    ``404 {"error": "Not found"}``.
  * ``GET /garden/<id>`` — viewer page for a shared garden.
  * ``GET /garden/<id>/image.png`` — the shared garden rendered read-only.
  * ``GET /assets/sprites/<kind>/<index>.png`` — plant and rock sprites.

There is no validation, size limit, update, delete, listing, expiry or
authentication; read-only viewing is a client-side notion.
"""

import argparse
import io
import os
import zlib

import numpy as np
from flask import (
    Flask,
    abort,
    jsonify,
    render_template_string,
    request,
    send_file,
)

from ..engine.snapshot import load_snapshot
from ..engine.types import ObjectKind
from ..frontend.render import render_garden
from ..frontend.sprites import sprite_png_bytes
from .store import GardenStore

DEFAULT_PORT = 3000
VIEWER_SCALE = 1.5

INDEX_PAGE = """<!doctype html>
<title>Zen Garden</title>
<h1>Zen Garden</h1>
<p>Rake and decorate a garden in the desktop app, then share it here.</p>
"""

VIEWER_PAGE = """<!doctype html>
<title>Zen Garden {{ garden_id }}</title>
<style>
  body { background: #1e1e1e; color: #eee; font-family: sans-serif; }
  img { image-rendering: pixelated; border: 3px solid #111; }
</style>
<h1>Shared zen garden</h1>
<p>Viewing shared garden {{ garden_id }} (read-only)</p>
<img src="{{ url_for('garden_image', garden_id=garden_id) }}" alt="Garden {{ garden_id }}">
"""


def _not_found():
    return jsonify({"error": "Not found"}), 404


def create_app(store=None):
    app = Flask(__name__)
    app.config["GARDEN_STORE"] = store if store is not None else GardenStore()

    def _store() -> GardenStore:
        return app.config["GARDEN_STORE"]

    @app.route("/")
    def index():
        return INDEX_PAGE

    @app.route("/api/garden", methods=["POST"])
    def create_garden():
        body = request.get_json(force=True)
        garden_id = _store().create(body)
        app.logger.info("Stored garden %s", garden_id)
        return jsonify({"id": garden_id, "link": f"/garden/{garden_id}"})

    @app.route("/api/garden/<garden_id>", methods=["GET"])
    def get_garden(garden_id):
        garden = _store().get(garden_id)
        if garden is None:
            app.logger.info("Garden %s not found", garden_id)
            return _not_found()
        return jsonify(garden)

    @app.route("/garden/<garden_id>")
    def view_garden(garden_id):
        return render_template_string(VIEWER_PAGE, garden_id=garden_id)

    @app.route("/garden/<garden_id>/image.png")
    def garden_image(garden_id):
        garden = _store().get(garden_id)
        if garden is None:
            abort(404)
        try:
            snapshot = load_snapshot(garden)
        except ValueError as e:
            app.logger.warning(
                "Garden %s cannot be rendered: %s", garden_id, e
            )
            abort(404)
        # Shading is not shared; seed it from the id so reloads look alike.
        rng = np.random.default_rng(zlib.crc32(garden_id.encode()))
        grid, objects = snapshot.to_garden(rng)
        buf = io.BytesIO()
        img = render_garden(grid, objects, scale=VIEWER_SCALE)
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")

    @app.route("/assets/sprites/<kind>/<int:index>.png")
    def sprite(kind, index):
        try:
            data = sprite_png_bytes(ObjectKind(kind), index)
        except ValueError:
            abort(404)
        return send_file(io.BytesIO(data), mimetype="image/png")

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Zen garden share server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", DEFAULT_PORT)),
        help="Port to listen on (default: $PORT or 3000)",
    )
    args = parser.parse_args(argv)

    app = create_app()
    print(
        f"[zengarden-server] Zen garden running on"
        f" http://{args.host}:{args.port}"
    )
    app.run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()
