"""Key-token to action table used by the browser controller."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

KeyAction = Callable[[], object]


@dataclass(frozen=True)
class KeyComboBinding:
    """One action reachable from any of ``combos``."""

    combos: tuple[str, ...]
    handler: KeyAction


class KeyComboRegistry:
    """Dispatch table from key tokens to actions; later bindings win."""

    def __init__(self, bindings: Iterable[KeyComboBinding] = ()) -> None:
        self._actions: dict[str, KeyAction] = {}
        for binding in bindings:
            self.bind(binding)

    def bind(self, binding: KeyComboBinding) -> None:
        self._actions.update(dict.fromkeys(binding.combos, binding.handler))

    def dispatch(self, key: str) -> object:
        """Run the action bound to ``key``; ``None`` when the key is unbound."""
        action = self._actions.get(key)
        return None if action is None else action()
