"""Tests for the explorer cursor, filter, and multi-file selection."""

from __future__ import annotations

import unittest

from s3lens.backend import Entry, ListResult
from s3lens.selection import NOTHING_SELECTED, REJECTED_DIRECTORY, TOGGLED, SelectionEngine


def _engine(prefix: str = "data") -> SelectionEngine:
    engine = SelectionEngine()
    engine.replace_entries(
        ListResult(
            entries=[
                Entry("archive", True),
                Entry("alpha.csv", False, 10),
                Entry("beta.csv", False, 20),
                Entry("gamma.json", False, 30),
                Entry("notes.txt", False, 40),
            ],
            prefix=prefix,
        )
    )
    return engine


class CursorTests(unittest.TestCase):
    def test_moves_clamp_to_bounds(self) -> None:
        engine = _engine()

        engine.move_up()
        self.assertEqual(engine.cursor, 0)
        engine.jump_down(10)
        self.assertEqual(engine.cursor, 4)
        engine.move_down()
        self.assertEqual(engine.cursor, 4)
        engine.jump_up(2)
        self.assertEqual(engine.cursor, 2)
        engine.jump_to_top()
        self.assertEqual(engine.cursor, 0)
        engine.jump_to_bottom()
        self.assertEqual(engine.cursor, 4)

    def test_current_file_path_joins_prefix(self) -> None:
        engine = _engine()
        engine.move_down()

        self.assertEqual(engine.current_file_path(), "data/alpha.csv")

    def test_directory_has_no_file_path(self) -> None:
        self.assertIsNone(_engine().current_file_path())

    def test_root_prefix_has_no_leading_slash(self) -> None:
        engine = _engine(prefix="")
        engine.move_down()

        self.assertEqual(engine.current_file_path(), "alpha.csv")

    def test_replace_entries_can_select_by_name(self) -> None:
        engine = _engine()
        engine.replace_entries(
            ListResult(entries=[Entry("a", True), Entry("b", True)], prefix=""),
            select_name="b",
        )

        self.assertEqual(engine.cursor, 1)

    def test_empty_listing_keeps_cursor_at_zero(self) -> None:
        engine = SelectionEngine()
        engine.replace_entries(ListResult(entries=[], prefix=""))
        engine.move_down()

        self.assertEqual(engine.cursor, 0)
        self.assertIsNone(engine.current_entry())
        self.assertEqual(engine.toggle_current(), NOTHING_SELECTED)


class FilterTests(unittest.TestCase):
    def test_filter_narrows_and_clamps_cursor(self) -> None:
        engine = _engine()
        engine.jump_to_bottom()

        engine.set_query("csv")

        self.assertEqual([engine.entries[idx].name for idx in engine.filtered], ["beta.csv", "alpha.csv"])
        self.assertEqual(engine.cursor, 1)

    def test_clearing_filter_restores_listing_order(self) -> None:
        engine = _engine()
        engine.set_query("json")
        engine.set_query("")

        self.assertEqual(len(engine.filtered), 5)
        self.assertEqual(engine.filtered, [0, 1, 2, 3, 4])

    def test_clearing_filter_can_keep_current_entry(self) -> None:
        engine = _engine()
        engine.set_query("json")
        self.assertEqual(engine.current_entry().name, "gamma.json")

        engine.set_query("", keep_current=True)

        self.assertEqual(engine.cursor, 3)
        self.assertEqual(engine.current_entry().name, "gamma.json")


class SelectionTests(unittest.TestCase):
    def test_toggle_rejects_directories(self) -> None:
        engine = _engine()

        self.assertEqual(engine.toggle_current(), REJECTED_DIRECTORY)
        self.assertEqual(engine.selected_count(), 0)

    def test_toggle_flips_files(self) -> None:
        engine = _engine()
        engine.move_down()

        self.assertEqual(engine.toggle_current(), TOGGLED)
        self.assertEqual(engine.selected_paths(), ["data/alpha.csv"])
        engine.toggle_current()
        self.assertEqual(engine.selected_paths(), [])

    def test_selection_survives_filtering(self) -> None:
        engine = _engine()
        engine.jump_to_bottom()
        engine.toggle_current()

        engine.set_query("csv")
        engine.set_query("")

        self.assertEqual(engine.selected_paths(), ["data/notes.txt"])

    def test_visual_range_tracks_cursor_and_skips_directories(self) -> None:
        engine = _engine()
        engine.move_down()
        self.assertEqual(engine.begin_visual(), TOGGLED)

        engine.jump_down(2)
        self.assertEqual(
            engine.selected_paths(),
            ["data/alpha.csv", "data/beta.csv", "data/gamma.json"],
        )

        engine.jump_to_top()
        self.assertEqual(engine.selected_paths(), ["data/alpha.csv"])

    def test_visual_cannot_start_on_directory(self) -> None:
        engine = _engine()

        self.assertEqual(engine.begin_visual(), REJECTED_DIRECTORY)
        self.assertIsNone(engine.visual_anchor)

    def test_new_listing_clears_selection(self) -> None:
        engine = _engine()
        engine.move_down()
        engine.toggle_current()

        engine.replace_entries(ListResult(entries=[Entry("x", False)], prefix=""))

        self.assertEqual(engine.selected_count(), 0)


if __name__ == "__main__":
    unittest.main()
