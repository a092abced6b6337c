"""Reading and writing values in object graphs by path expression."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from .beans import BEAN_FACTORY, INDEXED_ACCESS, BeanHandler, handler_of
from .errors import InvalidExpression
from .expression import SEPARATOR, Segment, parse
from .schema import IndexedProperty, PropertyDescriptor, describe, nested_type


class _PathMissing:
    """Sentinel for missing object graph paths."""

    def __repr__(self) -> str:
        return "PATH_MISSING"


PATH_MISSING: _PathMissing = _PathMissing()


def _plain_descriptor(current: object, name: str) -> PropertyDescriptor:
    descriptor = describe(type(current)).get(name)
    if descriptor is None:
        return IndexedProperty(name=name, declared_type=None, component_type=None)
    return descriptor


def _plain_read(current: object, name: str) -> Any:
    if isinstance(current, Mapping):
        return current.get(name, PATH_MISSING)
    return getattr(current, name, PATH_MISSING)


def _read_bean(handler: BeanHandler, segment: Segment) -> Any:
    if segment.name not in handler.schema:
        return PATH_MISSING
    if segment.is_indexed:
        if handler.read(segment.name) is None:
            return PATH_MISSING
        return handler.read_element(
            segment.name, segment.index, segment.expression_to_root
        )
    return handler.read(segment.name)


def _read(current: object, segment: Segment) -> Any:
    handler = handler_of(current)
    if handler is not None:
        return _read_bean(handler, segment)

    value = _plain_read(current, segment.name)
    if not segment.is_indexed or value is PATH_MISSING or value is None:
        return value
    descriptor = _plain_descriptor(current, segment.name)
    return INDEXED_ACCESS.get(
        value, segment.index, descriptor, segment.expression_to_root
    )


def get_path(obj: object, path: str) -> Any:
    """Resolve a dotted, optionally indexed path through an object graph.

    Returns ``PATH_MISSING`` when a property is unknown or an intermediate
    value is ``None``. Wildcard or malformed indices read as ``None``.
    Out-of-range indices raise ``IndexError``.
    """
    current: Any = obj
    for segment in parse(path).segments():
        if current is None:
            return PATH_MISSING
        current = _read(current, segment)
        if current is PATH_MISSING:
            return PATH_MISSING
    return current


def _materialize(current: object, segment: Segment) -> Any:
    """Create a missing nested value for a non-indexed managed property."""
    handler = handler_of(current)
    if handler is None or segment.is_indexed:
        return None
    descriptor = handler.schema.get(segment.name)
    nested = None if descriptor is None else nested_type(descriptor.declared_type)
    if nested is None:
        return None
    value = BEAN_FACTORY.create(segment.expression_to_root, nested)
    handler.write(segment.name, value)
    return value


def _write(current: object, segment: Segment, value: object) -> None:
    handler = handler_of(current)
    if handler is not None:
        if segment.is_indexed:
            handler.write_element(segment.name, segment.index, value)
        else:
            handler.write(segment.name, value)
        return

    if segment.is_indexed:
        container = _plain_read(current, segment.name)
        if container is None or container is PATH_MISSING:
            raise InvalidExpression(
                f"expression {segment.path!r} requires a container for "
                f"{segment.token!r} but the value is missing"
            )
        descriptor = _plain_descriptor(current, segment.name)
        INDEXED_ACCESS.set(container, segment.index, descriptor, value)
    elif isinstance(current, MutableMapping):
        current[segment.name] = value
    else:
        setattr(current, segment.name, value)


def set_path(obj: object, path: str, value: object) -> None:
    """Write ``value`` at ``path``.

    Missing interface-typed properties of managed objects are created on the
    way down; any other ``None`` intermediate raises ``InvalidExpression``.
    """
    expression = parse(path)
    current: Any = obj
    for segment in expression.segments():
        if segment.is_leaf:
            _write(current, segment, value)
            return
        if segment.is_indexed:
            segment.require_index()

        following = _read(current, segment)
        if following is None or following is PATH_MISSING:
            following = _materialize(current, segment)
        if following is None:
            raise InvalidExpression(
                f"expression {path!r} cannot be evaluated; "
                f"{segment.expression_to_root!r} has no value"
            )
        current = following


def flatten(obj: object) -> dict[str, Any]:
    """Describe a managed object as a flat map, nested objects as dotted keys."""
    handler = handler_of(obj)
    if handler is None:
        raise TypeError(f"flatten requires a managed object, got {type(obj)}")

    flat: dict[str, Any] = {}
    for name, value in handler.store().items():
        if handler_of(value) is None:
            flat[name] = value
            continue
        for child, child_value in flatten(value).items():
            flat[f"{name}{SEPARATOR}{child}"] = child_value
    return flat


__all__ = ["PATH_MISSING", "flatten", "get_path", "set_path"]
