"""Collaborator protocols the engine depends on.

The parser, indexed access, resolver and validator never introspect or
instantiate classes themselves; they go through these interfaces. Default
implementations live in :mod:`proppath.primitives` and :mod:`proppath.beans`.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Protocol, TypeVar, runtime_checkable

from .schema import PropertySchema

T = TypeVar("T")

ValueStore = MutableMapping[str, Any]


class PrimitiveElementAccessor(Protocol):
    def is_primitive_array(self, tp: object) -> bool: ...

    def get(self, values: Any, index: int) -> Any: ...

    def set(self, values: Any, index: int, value: object) -> None: ...


class NestedObjectFactory(Protocol):
    def create(
        self,
        path_hint: str,
        tp: type,
        seed: Mapping[str, Any] | None = None,
    ) -> Any: ...


class Handler(Protocol):
    def proxies_for(self, tp: object) -> bool: ...

    def store(self) -> ValueStore: ...

    def merge(self, values: Mapping[str, Any]) -> None: ...


class HandlerIntrospection(Protocol):
    def is_proxy(self, value: object) -> bool: ...

    def handler_of(self, value: object) -> Handler | None: ...


class Populator(Protocol):
    def __call__(self, instance: object, values: Mapping[str, Any]) -> None: ...


class ListReconciler(Protocol):
    def __call__(self, schema: PropertySchema, values: ValueStore) -> None: ...


@runtime_checkable
class PropertyDelegate(Protocol[T]):
    """Custom storage for a single property of a managed object."""

    property_type: Any

    def get(self, store: ValueStore, name: str) -> T: ...

    def set(self, store: ValueStore, name: str, value: T) -> None: ...


@runtime_checkable
class IndexedPropertyDelegate(PropertyDelegate[T], Protocol):
    component_type: Any

    def get_element(self, store: ValueStore, name: str, index: int) -> Any: ...

    def set_element(
        self, store: ValueStore, name: str, index: int, value: object
    ) -> None: ...


__all__ = [
    "Handler",
    "HandlerIntrospection",
    "IndexedPropertyDelegate",
    "ListReconciler",
    "NestedObjectFactory",
    "Populator",
    "PrimitiveElementAccessor",
    "PropertyDelegate",
    "ValueStore",
]
