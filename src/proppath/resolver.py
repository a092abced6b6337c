"""Resolution of flat ``{"parent.child": value}`` maps into nested values."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .errors import InvalidPropertyValue, UnsupportedFeature
from .expression import SEPARATOR, Segment, parse
from .indexed import IndexedAccess
from .interfaces import (
    HandlerIntrospection,
    ListReconciler,
    NestedObjectFactory,
    Populator,
    ValueStore,
)
from .schema import PropertyDescriptor, PropertySchema, is_nested_type, nested_type

logger = logging.getLogger(__name__)


def populate_attributes(instance: object, values: Mapping[str, Any]) -> None:
    """Copy ``values`` onto a plain object with ``setattr``."""
    for name, value in values.items():
        setattr(instance, name, value)


def passthrough_lists(schema: PropertySchema, values: ValueStore) -> None:
    """Default list reconciliation; list-typed values are left as given."""


def _type_name(tp: Any) -> str:
    return tp.__name__ if isinstance(tp, type) else repr(tp)


class FlatMapResolver:
    """Fold one-level dotted keys into nested values, in place.

    ``{"a": 1, "b.c": 2}`` becomes ``{"a": 1, "b": <b with c=2>}``. Keys with
    more than one ``.`` are rejected.
    """

    def __init__(
        self,
        factory: NestedObjectFactory,
        handlers: HandlerIntrospection,
        *,
        populate: Populator = populate_attributes,
        reconcile_lists: ListReconciler = passthrough_lists,
        indexed: IndexedAccess | None = None,
    ) -> None:
        self.factory = factory
        self.handlers = handlers
        self.populate = populate
        self.reconcile_lists = reconcile_lists
        self.indexed = indexed or IndexedAccess(factory)

    def resolve(self, schema: PropertySchema, values: ValueStore) -> None:
        if not values:
            return

        grouped, dotted = self._group(values)
        for key in dotted:
            del values[key]

        resolved = self._build_nested(schema, values, grouped)
        values.update(resolved)

        self.reconcile_lists(schema, values)

    def _group(
        self, values: Mapping[str, Any]
    ) -> tuple[dict[str, dict[str, Any]], list[str]]:
        grouped: dict[str, dict[str, Any]] = {}
        dotted: list[str] = []
        for key, value in values.items():
            if SEPARATOR not in key:
                logger.debug("flat property %r, continuing", key)
                continue

            expression = parse(key)
            if expression.depth > 2:
                raise InvalidPropertyValue(
                    f"nested property {key!r} is more than one level deep; "
                    "only 'parent.child' keys can be resolved"
                )

            parent = expression.root
            assert parent.child is not None
            child_name = parent.child.expression_to_leaf
            grouped.setdefault(parent.token, {})[child_name] = value
            dotted.append(key)
            logger.debug(
                "adding value %r to property %r for parent %r",
                value,
                child_name,
                parent.token,
            )
        return grouped, dotted

    def _build_nested(
        self,
        schema: PropertySchema,
        values: ValueStore,
        grouped: Mapping[str, dict[str, Any]],
    ) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for parent, nested_values in grouped.items():
            segment = parse(parent).root
            if segment.is_indexed:
                self._resolve_element(schema, values, segment, nested_values)
                continue

            descriptor = schema.get(parent)
            if descriptor is None:
                logger.debug(
                    "no descriptor for property %r; dropping %s",
                    parent,
                    sorted(nested_values),
                )
                continue

            declared = descriptor.declared_type
            nested = nested_type(declared)
            if nested is None:
                raise InvalidPropertyValue(
                    f"nested property {parent!r} must be an interface type to allow "
                    f"automatic instantiation; was {_type_name(declared)}"
                )

            resolved[parent] = self._build_or_reuse(
                values.get(parent), parent, nested, nested_values
            )
        return resolved

    def _resolve_element(
        self,
        schema: PropertySchema,
        values: ValueStore,
        segment: Segment,
        nested_values: dict[str, Any],
    ) -> None:
        descriptor: PropertyDescriptor | None = schema.get(segment.name)
        if descriptor is None or not descriptor.is_indexed:
            logger.debug("no indexed descriptor for %r; dropping", segment.token)
            return
        container = values.get(segment.name)
        if container is None or not segment.has_index:
            logger.debug("no element to resolve for %r; dropping", segment.token)
            return

        component = descriptor.component_type
        if not is_nested_type(component):
            raise InvalidPropertyValue(
                f"elements of nested property {segment.name!r} must be of an "
                f"interface type; was {_type_name(component)}"
            )

        element = self.indexed.get(container, segment.index, descriptor, segment.token)
        self._merge(element, nested_values)

    def _build_or_reuse(
        self,
        existing: object,
        name: str,
        declared: type,
        nested_values: dict[str, Any],
    ) -> object:
        try:
            if existing is None:
                return self.factory.create(name, declared, nested_values)
            self._merge(existing, nested_values)
            return existing
        except UnsupportedFeature as exc:
            raise InvalidPropertyValue(str(exc)) from exc

    def _merge(self, instance: object, nested_values: Mapping[str, Any]) -> None:
        handler = self.handlers.handler_of(instance)
        if handler is None:
            self.populate(instance, nested_values)
        else:
            handler.merge(nested_values)


def resolve(schema: PropertySchema, values: ValueStore) -> None:
    """Resolve ``values`` against ``schema`` with the default collaborators."""
    from .beans import DEFAULT_RESOLVER

    DEFAULT_RESOLVER.resolve(schema, values)


__all__ = [
    "FlatMapResolver",
    "passthrough_lists",
    "populate_attributes",
    "resolve",
]
