import json
import unittest

import app as app_mod             # noqa: E402
from app import app as flask_app  # noqa: E402
from game import CooperativeScheduler


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        # Swap the threaded timers for a scheduler the test drives by hand
        self._orig_make = app_mod.make_scheduler
        self.sched = CooperativeScheduler(clock=lambda: 0.0)
        app_mod.make_scheduler = lambda: self.sched
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.make_scheduler = self._orig_make

    def _post(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def _new(self, pairs=2, seed=123):
        r = self._post("/api/new", {"pairs": pairs, "seed": seed})
        self.assertEqual(r.status_code, 200)
        d = r.get_json()
        self.assertTrue(d["ok"])
        return d["gameId"], d["state"]

    def _symbols(self, game_id):
        # Server-side peek; the JSON hides face-down symbols
        return [c.symbol for c in app_mod._lookup(game_id).session.cards]

    def test_given_index_and_static_assets_when_requested_then_html_and_correct_mime(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        self.assertIn(b"Memory Match", r.data)

        rjs = self.client.get("/main.js")
        self.assertEqual(rjs.status_code, 200)
        self.assertIn("application/javascript", rjs.headers.get("Content-Type", ""))

        rcss = self.client.get("/styles.css")
        self.assertEqual(rcss.status_code, 200)
        self.assertIn("text/css", rcss.headers.get("Content-Type", ""))

    def test_given_new_game_when_posted_then_returns_hidden_face_down_deck(self):
        game_id, state = self._new(pairs=3)
        self.assertEqual(state["pairCount"], 3)
        self.assertEqual(len(state["cards"]), 6)
        self.assertIsNone(state["pendingIndex"])
        self.assertFalse(state["won"])
        for i, c in enumerate(state["cards"]):
            self.assertEqual(c["index"], i)
            self.assertFalse(c["faceUp"])
            self.assertIsNone(c["symbol"])

        r = self.client.get(f"/api/state?gameId={game_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["state"]["cards"], state["cards"])

    def test_given_same_seed_when_new_games_then_same_layout(self):
        a, _ = self._new(pairs=4, seed=9)
        b, _ = self._new(pairs=4, seed=9)
        self.assertEqual(self._symbols(a), self._symbols(b))

    def test_given_taps_when_mismatch_then_revealed_until_timer_fires(self):
        game_id, _ = self._new()
        symbols = self._symbols(game_id)
        other = next(i for i in range(1, 4) if symbols[i] != symbols[0])

        r1 = self._post("/api/tap", {"gameId": game_id, "index": 0})
        d1 = r1.get_json()
        self.assertEqual(d1["result"], "first")
        self.assertEqual(d1["state"]["pendingIndex"], 0)
        self.assertEqual(d1["state"]["cards"][0]["symbol"], symbols[0])

        d2 = self._post("/api/tap", {"gameId": game_id, "index": other}).get_json()
        self.assertEqual(d2["result"], "mismatch")
        self.assertTrue(d2["state"]["cards"][other]["faceUp"])
        version = d2["state"]["version"]

        self.sched.advance(1.0)
        d3 = self.client.get(f"/api/state?gameId={game_id}").get_json()
        self.assertGreater(d3["state"]["version"], version)
        self.assertFalse(d3["state"]["cards"][0]["faceUp"])
        self.assertFalse(d3["state"]["cards"][other]["faceUp"])

    def test_given_flip_back_between_version_read_and_view_then_next_state_has_newer_version(self):
        game_id, _ = self._new()
        symbols = self._symbols(game_id)
        other = next(i for i in range(1, 4) if symbols[i] != symbols[0])
        self._post("/api/tap", {"gameId": game_id, "index": 0})
        self._post("/api/tap", {"gameId": game_id, "index": other})

        entry = app_mod._lookup(game_id)
        session = entry.session
        orig_view = session.view

        def view_then_timer():
            v = orig_view()
            self.sched.advance(1.0)
            return v

        session.view = view_then_timer
        try:
            stale = app_mod.state_to_json(entry)
        finally:
            del session.view
        fresh = app_mod.state_to_json(entry)
        self.assertTrue(stale["cards"][0]["faceUp"])
        self.assertFalse(fresh["cards"][0]["faceUp"])
        self.assertNotEqual(stale["version"], fresh["version"])

    def test_given_full_play_when_all_pairs_matched_then_won(self):
        game_id, _ = self._new(pairs=2)
        symbols = self._symbols(game_id)
        order = sorted(range(4), key=lambda i: (symbols[i], i))
        results = [self._post("/api/tap", {"gameId": game_id, "index": i}).get_json() for i in order]
        self.assertEqual([d["result"] for d in results], ["first", "match", "first", "match"])
        self.assertTrue(results[-1]["state"]["won"])
        again = self._post("/api/tap", {"gameId": game_id, "index": order[0]}).get_json()
        self.assertEqual(again["result"], "ignored")

    def test_given_pair_change_when_posted_then_deck_rebuilt(self):
        game_id, _ = self._new(pairs=2)
        d = self._post("/api/pairs", {"gameId": game_id, "pairs": 5}).get_json()
        self.assertTrue(d["ok"])
        self.assertTrue(d["changed"])
        self.assertEqual(len(d["state"]["cards"]), 10)

    def test_given_restart_when_posted_then_fresh_deck_same_pair_count(self):
        game_id, state = self._new(pairs=3)
        self._post("/api/tap", {"gameId": game_id, "index": 0})
        d = self._post("/api/restart", {"gameId": game_id}).get_json()
        self.assertTrue(d["ok"])
        self.assertEqual(d["state"]["pairCount"], 3)
        self.assertIsNone(d["state"]["pendingIndex"])
        old_ids = {c["id"] for c in state["cards"]}
        self.assertFalse(old_ids & {c["id"] for c in d["state"]["cards"]})


if __name__ == "__main__":
    unittest.main(verbosity=2)
