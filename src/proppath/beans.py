"""Managed nested objects: value-store backed stand-ins for interface types.

A :class:`Bean` is an attribute-access proxy over a :class:`BeanHandler`,
which owns the value store for one protocol or abstract type. Beans are what
the default nested object factory hands to the resolver and the indexed
access layer when an interface-typed property has to be materialized.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .config import PROPPATH_CONFIG
from .errors import InvalidDelegate, InvalidPropertyValue, UnsupportedFeature
from .expression import OPEN_BRACKET, SEPARATOR
from .indexed import IndexedAccess
from .interfaces import IndexedPropertyDelegate, PropertyDelegate, ValueStore
from .primitives import default_for, is_primitive
from .resolver import FlatMapResolver
from .schema import (
    PropertyDescriptor,
    PropertySchema,
    accepts_instance,
    accepts_subclass,
    describe,
    is_nested_type,
)
from .validation import validate_all, validate_delegate, validate_value

logger = logging.getLogger(__name__)


class BeanHandler:
    """Value store, schema and delegates behind a single :class:`Bean`."""

    def __init__(
        self,
        proxied_type: type,
        schema: PropertySchema | None = None,
    ) -> None:
        self.proxied_type = proxied_type
        self.schema = schema if schema is not None else describe(proxied_type)
        self._store: dict[str, Any] = {}
        self._delegates: dict[str, PropertyDelegate[Any]] = {}

    def proxies_for(self, tp: object) -> bool:
        return accepts_subclass(tp, self.proxied_type)

    def store(self) -> ValueStore:
        return self._store

    def _descriptor(self, name: str) -> PropertyDescriptor:
        descriptor = self.schema.get(name)
        if descriptor is None:
            raise AttributeError(
                f"{self.proxied_type.__name__} has no property {name!r}"
            )
        return descriptor

    def merge(self, values: Mapping[str, Any]) -> None:
        """Resolve, validate and apply ``values`` to the store.

        Either every value is applied or none is: nested managed values and
        list containers touched by resolution are restored when resolution
        or validation fails. Plain objects populated by attribute are not.
        """
        staged = dict(values)
        parents: set[str] = set()
        for key in values:
            if SEPARATOR not in key:
                continue
            parent = key.split(SEPARATOR, 1)[0]
            for name in (parent, parent.split(OPEN_BRACKET, 1)[0]):
                parents.add(name)
                if name not in staged and name in self._store:
                    staged[name] = self._store[name]

        snapshot = _MergeSnapshot.capture(
            staged[name] for name in parents if name in staged
        )
        try:
            DEFAULT_RESOLVER.resolve(self.schema, staged)
            validate_all(self.schema, staged, handlers=BEAN_HANDLERS)
        except Exception:
            snapshot.restore()
            raise
        self._store.update(staged)

    def read(self, name: str) -> Any:
        delegate = self._delegates.get(name)
        if delegate is not None:
            return delegate.get(self._store, name)

        descriptor = self._descriptor(name)
        value = self._store.get(name)
        if value is None and is_primitive(descriptor.declared_type):
            return default_for(descriptor.declared_type)
        return value

    def write(self, name: str, value: object) -> None:
        delegate = self._delegates.get(name)
        if delegate is not None:
            delegate.set(self._store, name, value)
            return

        if PROPPATH_CONFIG.validate_on_write:
            validate_value(self.schema, name, value, handlers=BEAN_HANDLERS)
        elif name not in self.schema:
            raise InvalidPropertyValue(
                f"{self.proxied_type.__name__} has no property {name!r}"
            )
        self._store[name] = value

    def read_element(self, name: str, index: int | None, path_hint: str) -> Any:
        delegate = self._delegates.get(name)
        if isinstance(delegate, IndexedPropertyDelegate):
            if index is None:
                return None
            return delegate.get_element(self._store, name, index)

        descriptor = self._descriptor(name)
        container = self._store.get(name)
        if container is None:
            raise InvalidPropertyValue(
                f"indexed property {name!r} has no value to evaluate {path_hint!r}"
            )
        return INDEXED_ACCESS.get(container, index, descriptor, path_hint)

    def write_element(self, name: str, index: int | None, value: object) -> None:
        delegate = self._delegates.get(name)
        if isinstance(delegate, IndexedPropertyDelegate):
            if index is not None:
                delegate.set_element(self._store, name, index, value)
            return

        descriptor = self._descriptor(name)
        if PROPPATH_CONFIG.validate_on_write:
            self._validate_element(descriptor, value)
        container = self._store.get(name)
        if container is None:
            raise InvalidPropertyValue(
                f"indexed property {name!r} has no value to write element into"
            )
        INDEXED_ACCESS.set(container, index, descriptor, value)

    def _validate_element(self, descriptor: PropertyDescriptor, value: object) -> None:
        component = descriptor.component_type
        if component is None or value is None:
            return
        handler = BEAN_HANDLERS.handler_of(value)
        if handler is not None:
            accepted = handler.proxies_for(component)
        else:
            accepted = accepts_instance(component, value)
        if not accepted:
            raise InvalidPropertyValue(
                f"element {value!r} is not a valid value for indexed property "
                f"{descriptor.name!r}"
            )

    def register_delegate(self, name: str, delegate: PropertyDelegate[Any]) -> None:
        descriptor = self.schema.get(name)
        if descriptor is None:
            raise InvalidDelegate(
                f"{self.proxied_type.__name__} has no property {name!r} to delegate"
            )
        validate_delegate(name, descriptor, delegate)
        self._delegates[name] = delegate
        logger.info(
            "registered delegate %s for %s.%s",
            type(delegate).__name__,
            self.proxied_type.__name__,
            name,
        )


@dataclass(frozen=True)
class _MergeSnapshot:
    stores: list[tuple[dict[str, Any], dict[str, Any]]]
    containers: list[tuple[list[Any], list[Any]]]

    @classmethod
    def capture(cls, values: Iterable[object]) -> "_MergeSnapshot":
        stores: list[tuple[dict[str, Any], dict[str, Any]]] = []
        containers: list[tuple[list[Any], list[Any]]] = []
        for value in values:
            if isinstance(value, list):
                containers.append((value, list(value)))
                nested = list(value)
            else:
                nested = [value]
            for item in nested:
                handler = BEAN_HANDLERS.handler_of(item)
                if handler is not None:
                    stores.append((handler._store, dict(handler._store)))
        return cls(stores=stores, containers=containers)

    def restore(self) -> None:
        for store, saved in self.stores:
            store.clear()
            store.update(saved)
        for container, items in self.containers:
            container[:] = items


class Bean:
    """Attribute-style access to the properties of a managed nested object."""

    __slots__ = ("_proppath_handler",)

    def __init__(self, handler: BeanHandler) -> None:
        object.__setattr__(self, "_proppath_handler", handler)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._proppath_handler.read(name)

    def __setattr__(self, name: str, value: object) -> None:
        if name.startswith("_"):
            raise AttributeError(f"cannot set private attribute {name!r}")
        self._proppath_handler.write(name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"cannot delete property {name!r}")

    def __dir__(self) -> list[str]:
        return sorted(self._proppath_handler.schema)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bean):
            return NotImplemented
        mine = self._proppath_handler
        theirs = other._proppath_handler
        return (
            mine.proxied_type is theirs.proxied_type
            and dict(mine.store()) == dict(theirs.store())
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        handler = self._proppath_handler
        fields = ", ".join(f"{k}={v!r}" for k, v in sorted(handler.store().items()))
        return f"{handler.proxied_type.__name__}Bean({fields})"


class BeanHandlers:
    """Handler introspection over :class:`Bean` instances."""

    def is_proxy(self, value: object) -> bool:
        return isinstance(value, Bean)

    def handler_of(self, value: object) -> BeanHandler | None:
        if not isinstance(value, Bean):
            return None
        handler = object.__getattribute__(value, "_proppath_handler")
        return handler if isinstance(handler, BeanHandler) else None


class BeanFactory:
    """Nested object factory producing :class:`Bean` instances."""

    def create(
        self,
        path_hint: str,
        tp: type,
        seed: Mapping[str, Any] | None = None,
    ) -> Bean:
        if not is_nested_type(tp):
            raise UnsupportedFeature(
                f"cannot create a nested object of type {tp!r} for {path_hint!r}; "
                "only protocol and abstract types can be instantiated"
            )
        handler = BeanHandler(tp)
        if seed:
            handler.merge(seed)
        logger.debug("created %s for %r", tp.__name__, path_hint)
        return Bean(handler)


BEAN_HANDLERS = BeanHandlers()
BEAN_FACTORY = BeanFactory()
INDEXED_ACCESS = IndexedAccess(BEAN_FACTORY)
DEFAULT_RESOLVER = FlatMapResolver(BEAN_FACTORY, BEAN_HANDLERS, indexed=INDEXED_ACCESS)


def create(tp: type, values: Mapping[str, Any] | None = None) -> Any:
    """Create a managed object for the interface ``tp``, seeded with ``values``.

    ``values`` may contain one-level dotted keys (``"address.city"``) which are
    resolved into nested managed objects.
    """
    return BEAN_FACTORY.create(tp.__name__, tp, values)


def handler_of(value: object) -> BeanHandler | None:
    return BEAN_HANDLERS.handler_of(value)


__all__ = [
    "BEAN_FACTORY",
    "BEAN_HANDLERS",
    "Bean",
    "BeanFactory",
    "BeanHandler",
    "BeanHandlers",
    "DEFAULT_RESOLVER",
    "INDEXED_ACCESS",
    "create",
    "handler_of",
]
