"""Regression tests for ANSI line-shaping primitives.

These cases protect column math for styled text, tabs, and wide characters.
"""

import unittest

from s3lens.render import ansi as ansi_mod


class DisplayWidthTests(unittest.TestCase):
    def test_escapes_do_not_count(self) -> None:
        self.assertEqual(ansi_mod.display_width("\033[31mred\033[0m"), 3)

    def test_tabs_expand_to_next_stop(self) -> None:
        self.assertEqual(ansi_mod.display_width("ab\tc"), 9)

    def test_wide_characters_take_two_cells(self) -> None:
        self.assertEqual(ansi_mod.display_width("日本"), 4)


class ClipAndFitTests(unittest.TestCase):
    def test_clip_keeps_escapes_and_stops_at_width(self) -> None:
        clipped = ansi_mod.clip_ansi_line("\033[1mabcdef\033[0m", 3)

        self.assertEqual(clipped, "\033[1mabc")

    def test_clip_does_not_split_wide_character(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("a日本", 2), "a")

    def test_fit_pads_to_width_then_resets(self) -> None:
        fitted = ansi_mod.fit_ansi_line("ab", 5)

        self.assertEqual(fitted, "ab   " + ansi_mod.RESET)
        self.assertEqual(ansi_mod.display_width(fitted), 5)


class WrapTests(unittest.TestCase):
    def test_wrapped_mode_splits_lines_to_width(self) -> None:
        self.assertEqual(ansi_mod.wrap_ansi_line("abcdefg", 3), ["abc", "def", "g"])

    def test_wrap_handles_empty_input(self) -> None:
        self.assertEqual(ansi_mod.wrap_ansi_line("", 5), [""])

    def test_wrap_preserves_escape_sequences(self) -> None:
        chunks = ansi_mod.wrap_ansi_line("ab\033[32mcd", 2)

        self.assertEqual(chunks, ["ab\033[32m", "cd"])
        self.assertEqual([ansi_mod.display_width(chunk) for chunk in chunks], [2, 2])


if __name__ == "__main__":
    unittest.main()
