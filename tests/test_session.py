from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from s3lens.history import HISTORY_LIMIT
from s3lens.runtime import session


class SessionPersistenceTests(unittest.TestCase):
    def test_missing_state_file_gives_empty_session(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("s3lens.runtime.session.STATE_PATH", Path(tmp) / "state.json"):
                loaded = session.load_session()

        self.assertIsNone(loaded.last_location)
        self.assertEqual(loaded.history, [])

    def test_save_then_load_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            state_path = Path(tmp) / "nested" / "state.json"
            with mock.patch("s3lens.runtime.session.STATE_PATH", state_path):
                session.save_session(
                    session.SessionState(
                        last_location="s3://bucket/logs",
                        history=["s3://bucket/logs", "local:///tmp"],
                    )
                )
                loaded = session.load_session()

            leftovers = [path.name for path in state_path.parent.iterdir() if path.name != "state.json"]

        self.assertEqual(loaded.last_location, "s3://bucket/logs")
        self.assertEqual(loaded.history, ["s3://bucket/logs", "local:///tmp"])
        self.assertEqual(leftovers, [])

    def test_corrupt_state_file_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            state_path = Path(tmp) / "state.json"
            state_path.write_text("{oops", encoding="utf-8")
            with mock.patch("s3lens.runtime.session.STATE_PATH", state_path):
                loaded = session.load_session()

        self.assertIsNone(loaded.last_location)

    def test_bad_field_types_are_filtered(self) -> None:
        payload = {
            "last_location": 7,
            "history": ["s3://b/a", 3, "", None] + [f"s3://b/{idx}" for idx in range(HISTORY_LIMIT + 5)],
        }
        with tempfile.TemporaryDirectory() as tmp:
            state_path = Path(tmp) / "state.json"
            state_path.write_text(json.dumps(payload), encoding="utf-8")
            with mock.patch("s3lens.runtime.session.STATE_PATH", state_path):
                loaded = session.load_session()

        self.assertIsNone(loaded.last_location)
        self.assertEqual(len(loaded.history), HISTORY_LIMIT)
        self.assertEqual(loaded.history[0], "s3://b/a")


if __name__ == "__main__":
    unittest.main()
