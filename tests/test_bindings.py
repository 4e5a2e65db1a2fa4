from __future__ import annotations

import unittest

from s3lens.input import KeyBindings, KeyComboBinding, KeyComboRegistry, parse_key_spec, parse_key_specs


class ParseKeySpecTests(unittest.TestCase):
    def test_single_characters_pass_through(self) -> None:
        self.assertEqual(parse_key_spec("j"), "j")
        self.assertEqual(parse_key_spec("G"), "G")
        self.assertEqual(parse_key_spec("-"), "-")

    def test_modifiers_normalize_to_tokens(self) -> None:
        self.assertEqual(parse_key_spec("Ctrl-u"), "CTRL_U")
        self.assertEqual(parse_key_spec("ctrl-J"), "CTRL_J")
        self.assertEqual(parse_key_spec("Shift-k"), "K")
        self.assertEqual(parse_key_spec("Alt-Left"), "ALT_LEFT")

    def test_named_keys(self) -> None:
        self.assertEqual(parse_key_spec("Enter"), "ENTER")
        self.assertEqual(parse_key_spec("esc"), "ESC")
        self.assertEqual(parse_key_spec("Space"), " ")
        self.assertEqual(parse_key_spec("PageDown"), "PAGE_DOWN")

    def test_ctrl_aliases_match_terminal_bytes(self) -> None:
        self.assertEqual(parse_key_spec("Ctrl-i"), "TAB")
        self.assertEqual(parse_key_spec("Ctrl-m"), "ENTER")

    def test_invalid_specs(self) -> None:
        self.assertIsNone(parse_key_spec(""))
        self.assertIsNone(parse_key_spec("Hyper-x"))
        self.assertIsNone(parse_key_spec("NotAKey"))

    def test_parse_key_specs_drops_invalid_entries(self) -> None:
        self.assertEqual(parse_key_specs(["q", "Bogus-1", "Ctrl-q"]), frozenset({"q", "CTRL_Q"}))


class KeyBindingsFromMappingTests(unittest.TestCase):
    def test_overrides_replace_defaults(self) -> None:
        bindings = KeyBindings.from_mapping({"quit": ["q"], "move_down": "n"})

        self.assertEqual(bindings.quit, frozenset({"q"}))
        self.assertEqual(bindings.move_down, frozenset({"n"}))
        self.assertEqual(bindings.move_up, KeyBindings().move_up)

    def test_invalid_values_keep_defaults(self) -> None:
        bindings = KeyBindings.from_mapping({"quit": 3, "jump_to_top": "ggg", "exit_search_mode": 5})

        self.assertEqual(bindings.quit, KeyBindings().quit)
        self.assertEqual(bindings.jump_to_top, "gg")
        self.assertEqual(bindings.exit_search_mode, "jj")

    def test_unknown_fields_are_ignored(self) -> None:
        self.assertEqual(KeyBindings.from_mapping({"launch_rockets": ["x"]}), KeyBindings())


class KeyComboRegistryTests(unittest.TestCase):
    def test_first_registration_wins(self) -> None:
        registry: KeyComboRegistry[str] = KeyComboRegistry()
        registry.register_bindings(
            KeyComboBinding(("a", "b"), lambda: "first"),
            KeyComboBinding(("b", "c"), lambda: "second"),
        )

        self.assertEqual(registry.dispatch("b"), "first")
        self.assertEqual(registry.dispatch("c"), "second")
        self.assertIsNone(registry.dispatch("z"))

    def test_normalizer_is_applied(self) -> None:
        registry: KeyComboRegistry[str] = KeyComboRegistry(normalize=str.lower)
        registry.register_binding(KeyComboBinding.of({"X"}, lambda: "hit"))

        self.assertEqual(registry.dispatch("x"), "hit")


if __name__ == "__main__":
    unittest.main()
