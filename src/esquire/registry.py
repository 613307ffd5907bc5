"""Module registry utilities."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .types import ModuleRecord


class ModuleRegistry:
    """Registry that maps module names to their records."""

    def __init__(self) -> None:
        self._entries: dict[str, ModuleRecord] = {}

    def has(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> ModuleRecord | None:
        return self._entries.get(name)

    def put(self, record: ModuleRecord) -> ModuleRecord | None:
        """Store ``record`` under its name and return the record it replaced."""

        previous = self._entries.get(record.name)
        self._entries[record.name] = record
        return previous

    def is_satisfied(self, names: Iterable[str]) -> list[Any] | None:
        """Return the values for ``names`` in order, or None if any is unresolved.

        The check never mutates the registry, so the resolver may poll it as
        often as it likes.
        """

        values: list[Any] = []
        for name in names:
            record = self._entries.get(name)
            if record is None or not record.resolved:
                return None
            values.append(record.value)
        return values

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ModuleRegistry"]
