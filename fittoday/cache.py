"""
Blueprint cache abstraction.

The engine takes a cache as an explicit argument instead of holding one.
Any object with matching get/set methods can be injected.
"""

from typing import Dict, Optional, Protocol

from fittoday.blueprint_schemas import WorkoutBlueprint


class BlueprintCache(Protocol):
    """Key-value store for generated blueprints, keyed by BlueprintInput.cache_key."""

    def get(self, key: str) -> Optional[WorkoutBlueprint]:
        ...

    def set(self, key: str, blueprint: WorkoutBlueprint) -> None:
        ...


class InMemoryBlueprintCache:
    """Process-local cache backed by a dict."""

    def __init__(self):
        self._entries: Dict[str, WorkoutBlueprint] = {}

    def get(self, key: str) -> Optional[WorkoutBlueprint]:
        return self._entries.get(key)

    def set(self, key: str, blueprint: WorkoutBlueprint) -> None:
        self._entries[key] = blueprint

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
