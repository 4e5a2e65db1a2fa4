"""Keyboard input: raw token reader, binding table, and mode-aware decoder."""

from __future__ import annotations

from .actions import Action, NO_ACTION
from .bindings import KeyBindings, parse_key_spec, parse_key_specs
from .decoder import DecodeContext, decode_key
from .key_registry import KeyComboBinding, KeyComboRegistry
from .reader import read_key

__all__ = [
    "Action",
    "DecodeContext",
    "KeyBindings",
    "KeyComboBinding",
    "KeyComboRegistry",
    "NO_ACTION",
    "decode_key",
    "parse_key_spec",
    "parse_key_specs",
    "read_key",
]
