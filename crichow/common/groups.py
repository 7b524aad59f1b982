"""Translation between internal group keys and their display names."""

from __future__ import annotations

from typing import Iterable, Mapping

from crichow.common.errors import ConfigError


class GroupNameTranslator:
    """Bidirectional key <-> display-name table.

    Keys missing from the table are their own display name, in both directions.
    """

    def __init__(self, display_names: Mapping[str, str] | None = None) -> None:
        self._to_display = dict(display_names or {})
        self._to_key: dict[str, str] = {}
        for key, name in self._to_display.items():
            if name in self._to_key:
                raise ConfigError(f"Display name {name!r} is mapped from more than one group key")
            self._to_key[name] = key

    def to_display(self, key: str) -> str:
        return self._to_display.get(key, key)

    def to_key(self, name: str) -> str:
        return self._to_key.get(name, name)

    def keys_for(self, names: Iterable[str]) -> frozenset[str]:
        return frozenset(self.to_key(name) for name in names)
