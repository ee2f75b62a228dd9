"""Type registry for collection types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Type

from .storage_layout import StorageLayout

if TYPE_CHECKING:
    from .collection import Collection


@dataclass(frozen=True)
class CollectionType:
    """Static metadata of one collection type."""

    name: str
    scope: str
    schema: dict[str, Any] = field(hash=False)
    schema_version: str
    storage_layout: StorageLayout


class TypeRegistry:
    def __init__(self) -> None:
        self._types: dict[str, Type["Collection"]] = {}

    def register(self, cls: Type["Collection"]) -> None:
        name = cls.get_collection_name()
        if name:
            self._types[name] = cls

    def get(self, name: str) -> Type["Collection"] | None:
        return self._types.get(name)

    def describe(self, name: str) -> CollectionType:
        cls = self._types.get(name)
        if cls is None:
            raise KeyError(f"Unknown collection type {name!r}")
        return CollectionType(
            name=name,
            scope=cls.scope(),
            schema=dict(cls.schema),
            schema_version=cls.schema_version,
            storage_layout=StorageLayout(cls.storage_layout),
        )

    def items(self) -> dict[str, Type["Collection"]]:
        return dict(self._types)


# Global registry
registry = TypeRegistry()
