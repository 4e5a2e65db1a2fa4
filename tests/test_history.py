from __future__ import annotations

import unittest

from s3lens.history import HISTORY_LIMIT, HistoryTracker, should_add_to_history


class ShouldAddToHistoryTests(unittest.TestCase):
    def test_root_is_skipped(self) -> None:
        self.assertFalse(should_add_to_history(""))
        self.assertFalse(should_add_to_history("/"))

    def test_numeric_leaf_is_skipped(self) -> None:
        self.assertFalse(should_add_to_history("runs/2024"))
        self.assertFalse(should_add_to_history("runs/2024/"))

    def test_named_folders_are_kept(self) -> None:
        self.assertTrue(should_add_to_history("2024/logs"))
        self.assertTrue(should_add_to_history("run-42"))


class HistoryTrackerTests(unittest.TestCase):
    def test_add_moves_duplicate_to_front(self) -> None:
        history = HistoryTracker(["s3://b/a", "s3://b/b", "s3://b/c"])

        history.add("s3://b/c")

        self.assertEqual(history.items, ["s3://b/c", "s3://b/a", "s3://b/b"])

    def test_history_is_capped(self) -> None:
        history = HistoryTracker()
        for idx in range(HISTORY_LIMIT + 20):
            history.add(f"s3://bucket/dir{idx}")

        self.assertEqual(len(history), HISTORY_LIMIT)
        self.assertEqual(history.items[0], f"s3://bucket/dir{HISTORY_LIMIT + 19}")

    def test_load_drops_duplicates_and_non_strings(self) -> None:
        history = HistoryTracker()
        history.load(["a", "a", 3, "", "b"])

        self.assertEqual(history.items, ["a", "b"])

    def test_filter_and_cursor(self) -> None:
        history = HistoryTracker(["s3://logs/app", "local:///tmp/data", "s3://logs/web"])

        history.set_query("web")
        self.assertEqual(history.visible_items(), ["s3://logs/web"])
        self.assertEqual(history.selected(), "s3://logs/web")

        history.reset_view()
        history.move_down()
        history.move_down()
        history.move_down()
        self.assertEqual(history.selected(), "s3://logs/web")
        history.move_up()
        self.assertEqual(history.selected(), "local:///tmp/data")

    def test_no_match_has_no_selection(self) -> None:
        history = HistoryTracker(["s3://logs/app"])
        history.set_query("zzz")

        self.assertIsNone(history.selected())


if __name__ == "__main__":
    unittest.main()
