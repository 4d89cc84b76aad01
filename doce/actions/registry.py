"""Action registry: the static name → handler table built at startup."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

Handler = Callable[[dict[str, Any]], Awaitable[Any] | Any]


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    """A registered action.

    ``declared_params`` documents what the handler reads; it is not a schema
    and nothing validates params against it.
    """

    name: str
    handler: Handler
    declared_params: tuple[str, ...] = ()
    description: str = ""
    category: str = ""
    difficulty: str = ""


@dataclass(frozen=True, slots=True)
class ActionSummary:
    name: str
    description: str
    difficulty: str


class ActionRegistry:
    """Read-only after construction. Lookups are exact and case-sensitive."""

    def __init__(self, descriptors: Iterable[ActionDescriptor] = ()):
        table: dict[str, ActionDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in table:
                raise ValueError(f"duplicate action name: {descriptor.name}")
            table[descriptor.name] = descriptor
        self._actions = MappingProxyType(table)

    def lookup(self, name: str) -> ActionDescriptor | None:
        return self._actions.get(name)

    def list_by_category(self, category: str) -> list[ActionSummary]:
        """Every action in *category*, in registration order."""
        return [
            ActionSummary(d.name, d.description, d.difficulty)
            for d in self._actions.values()
            if d.category == category
        ]

    @property
    def names(self) -> list[str]:
        return list(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __iter__(self) -> Iterator[ActionDescriptor]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)
