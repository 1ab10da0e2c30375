from __future__ import annotations

import logging
import os
import threading
import uuid
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request, send_from_directory

from game import (
    Card,
    ChangeEvent,
    GameSession,
    InvalidIndex,
    ThreadingScheduler,
    load_settings,
    rng_from_seed,
)

logger = logging.getLogger(__name__)

SETTINGS = load_settings()

# Serve static assets from ./static (explicit absolute path)
STATIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "static"))
app = Flask(__name__, static_url_path="/static", static_folder=STATIC_DIR)

# Tests swap this for a CooperativeScheduler factory to control time.
make_scheduler = ThreadingScheduler


class GameEntry:
    """A live session plus a change counter that pollers compare against."""

    def __init__(self, session: GameSession) -> None:
        self.session = session
        self.version = 0
        self._lock = threading.Lock()
        session.subscribe(self._on_change)

    def _on_change(self, event: ChangeEvent) -> None:
        with self._lock:
            self.version += 1


_games: "OrderedDict[str, GameEntry]" = OrderedDict()
_games_lock = threading.Lock()


def _register(session: GameSession) -> str:
    game_id = uuid.uuid4().hex
    with _games_lock:
        _games[game_id] = GameEntry(session)
        while len(_games) > SETTINGS.max_games:
            old_id, _ = _games.popitem(last=False)
            logger.info("evicted game %s", old_id)
    return game_id


def _lookup(game_id: Any) -> Optional[GameEntry]:
    if not isinstance(game_id, str):
        return None
    with _games_lock:
        return _games.get(game_id)


def _card_to_json(index: int, c: Card) -> Dict[str, Any]:
    return {
        "id": c.id,
        "index": index,
        # Face-down symbols stay on the server.
        "symbol": c.symbol if c.face_up or c.matched else None,
        "faceUp": bool(c.face_up),
        "matched": bool(c.matched),
    }


def state_to_json(entry: GameEntry) -> Dict[str, Any]:
    # Read before the view so the reported version never runs ahead of the cards.
    with entry._lock:
        version = entry.version
    view = entry.session.view()
    return {
        "pairCount": int(view.pair_count),
        "pendingIndex": view.pending_index,
        "won": all(c.matched for c in view.cards),
        "version": version,
        "cards": [_card_to_json(i, c) for i, c in enumerate(view.cards)],
    }


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be a whole number, got {value}")
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise TypeError(f"{name} must be an integer")


def _entry_or_404(game_id: Any) -> Tuple[Optional[GameEntry], Any]:
    entry = _lookup(game_id)
    if entry is None:
        return None, (jsonify({"ok": False, "error": "unknown game"}), 404)
    return entry, None


# ---------- Static routes ----------

@app.get("/")
def index() -> Any:
    return send_from_directory(app.static_folder, "index.html")


@app.get("/main.js")
def main_js() -> Any:
    resp = send_from_directory(app.static_folder, "main.js")
    resp.headers["Content-Type"] = "application/javascript; charset=utf-8"
    return resp


@app.get("/styles.css")
def styles_css() -> Any:
    resp = send_from_directory(app.static_folder, "styles.css")
    resp.headers["Content-Type"] = "text/css; charset=utf-8"
    return resp


# ---------- Game API (required by main.js) ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        pairs = _parse_int(body.get("pairs", SETTINGS.pairs), "pairs")
        seed = body.get("seed", SETTINGS.seed)
        seed = None if seed is None else _parse_int(seed, "seed")
        session = GameSession(
            pairs,
            rng=rng_from_seed(seed),
            scheduler=make_scheduler(),
            flip_delay=SETTINGS.flip_delay,
        )
    except (TypeError, ValueError) as e:
        # InvalidConfiguration is a ValueError
        return jsonify({"ok": False, "error": str(e)}), 400
    game_id = _register(session)
    logger.info("new game %s with %d pairs", game_id, pairs)
    entry = _lookup(game_id)
    return jsonify({"ok": True, "gameId": game_id, "state": state_to_json(entry)})


@app.get("/api/state")
def api_state() -> Any:
    entry, err = _entry_or_404(request.args.get("gameId"))
    if err:
        return err
    return jsonify({"ok": True, "state": state_to_json(entry)})


@app.post("/api/tap")
def api_tap() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    entry, err = _entry_or_404(body.get("gameId"))
    if err:
        return err
    try:
        index = _parse_int(body.get("index"), "index")
    except (TypeError, ValueError):
        return jsonify({"ok": False, "error": "index must be an integer"}), 400
    try:
        result = entry.session.tap(index)
    except InvalidIndex as e:
        logger.warning("ignored tap on game %s: %s", body.get("gameId"), e)
        return jsonify({"ok": False, "error": str(e), "state": state_to_json(entry)}), 400
    return jsonify({"ok": True, "result": result.value, "state": state_to_json(entry)})


@app.post("/api/pairs")
def api_pairs() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    entry, err = _entry_or_404(body.get("gameId"))
    if err:
        return err
    try:
        pairs = _parse_int(body.get("pairs"), "pairs")
        changed = entry.session.set_pair_count(pairs)
    except (TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": str(e), "state": state_to_json(entry)}), 400
    return jsonify({"ok": True, "changed": changed, "state": state_to_json(entry)})


@app.post("/api/restart")
def api_restart() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    entry, err = _entry_or_404(body.get("gameId"))
    if err:
        return err
    entry.session.new_game()
    return jsonify({"ok": True, "state": state_to_json(entry)})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, SETTINGS.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=debug)
