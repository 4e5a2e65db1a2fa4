"""Reusable key-combo registry primitives."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class KeyComboBinding(Generic[T]):
    """Mapping from one or more key tokens to a single result factory."""

    combos: tuple[str, ...]
    handler: Callable[[], T]

    @classmethod
    def of(cls, combos: Iterable[str], handler: Callable[[], T]) -> KeyComboBinding[T]:
        return cls(tuple(combos), handler)


class KeyComboRegistry(Generic[T]):
    """Ordered key-dispatch table: the first binding registered for a token wins.

    Registration order therefore encodes precedence, which lets callers list
    bindings from most to least specific.
    """

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        """Initialize empty registry with optional token normalizer."""
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, Callable[[], T]] = {}

    @staticmethod
    def _identity(key: str) -> str:
        """Return key unchanged for exact-match dispatch registries."""
        return key

    def register_binding(self, binding: KeyComboBinding[T]) -> KeyComboRegistry[T]:
        """Register one binding; combos already claimed by earlier bindings are kept."""
        for combo in binding.combos:
            self._handlers.setdefault(self._normalize(combo), binding.handler)
        return self

    def register_bindings(self, *bindings: KeyComboBinding[T]) -> KeyComboRegistry[T]:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def dispatch(self, key: str) -> T | None:
        """Invoke bound handler for ``key`` and return its result, or ``None`` if unbound."""
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        return handler()
