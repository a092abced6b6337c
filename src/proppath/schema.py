"""Property descriptors and the default class-based schema provider."""

from __future__ import annotations

import array
import dataclasses
import inspect
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache
from typing import Any, ClassVar, TypeAlias, get_args, get_origin, get_type_hints

import chz
from pydantic import BaseModel as PydanticBaseModel


@dataclass(frozen=True)
class SimpleProperty:
    name: str
    declared_type: Any

    @property
    def is_indexed(self) -> bool:
        return False

    @property
    def component_type(self) -> None:
        return None


@dataclass(frozen=True)
class IndexedProperty:
    """A property backed by an array-like container addressed by ``[index]``.

    ``declared_type`` is the container annotation (``list[Item]`` or
    ``array.array``) and may be ``None`` for the index-only variant.
    """

    name: str
    declared_type: Any
    component_type: Any

    @property
    def is_indexed(self) -> bool:
        return True


PropertyDescriptor: TypeAlias = SimpleProperty | IndexedProperty
PropertySchema: TypeAlias = Mapping[str, PropertyDescriptor]

_UNION_ORIGINS = (typing.Union, types.UnionType)


def _is_protocol(tp: object) -> bool:
    return isinstance(tp, type) and bool(getattr(tp, "_is_protocol", False))


def _is_runtime_protocol(tp: object) -> bool:
    return _is_protocol(tp) and bool(getattr(tp, "_is_runtime_protocol", False))


def is_nested_type(tp: object) -> bool:
    """Whether ``tp`` is an interface-like type that proppath may instantiate.

    Protocol classes and abstract classes qualify; concrete classes do not.
    """
    if not isinstance(tp, type):
        return False
    return _is_protocol(tp) or inspect.isabstract(tp)


def runtime_type(declared: Any) -> type | tuple[type, ...]:
    """Return the class (or classes) an annotation constrains values to."""
    if declared is Any or declared is None:
        return object
    origin = get_origin(declared)
    if origin in _UNION_ORIGINS:
        classes: list[type] = []
        for arg in get_args(declared):
            resolved = runtime_type(arg)
            if isinstance(resolved, tuple):
                classes.extend(resolved)
            else:
                classes.append(resolved)
        return tuple(classes)
    if origin is typing.Literal:
        return tuple({type(arg) for arg in get_args(declared)})
    if origin is not None:
        return origin if isinstance(origin, type) else object
    if declared is type(None):
        return type(None)
    if isinstance(declared, type):
        return declared
    return object


def _candidates(declared: Any) -> tuple[type, ...]:
    resolved = runtime_type(declared)
    return resolved if isinstance(resolved, tuple) else (resolved,)


def accepts_instance(declared: Any, value: object) -> bool:
    for candidate in _candidates(declared):
        if _is_protocol(candidate) and not _is_runtime_protocol(candidate):
            # plain protocols only match classes that subclass them explicitly
            if candidate in type(value).__mro__:
                return True
            continue
        if isinstance(value, candidate):
            return True
    return False


def accepts_subclass(declared: Any, cls: type) -> bool:
    for candidate in _candidates(declared):
        if _is_protocol(candidate):
            if candidate in cls.__mro__:
                return True
            continue
        if issubclass(cls, candidate):
            return True
    return False


def is_list_type(declared: Any) -> bool:
    """True when a ``list`` value satisfies ``declared``."""
    return accepts_subclass(declared, list)


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_ORIGINS:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def nested_type(declared: Any) -> type | None:
    """The interface type behind ``declared`` (optional allowed), if any."""
    candidate = _strip_optional(declared)
    return candidate if is_nested_type(candidate) else None


def descriptor_for(name: str, annotation: Any) -> PropertyDescriptor:
    if annotation is array.array or (
        isinstance(annotation, type) and issubclass(annotation, array.array)
    ):
        return IndexedProperty(name=name, declared_type=annotation, component_type=None)
    if get_origin(annotation) is list and get_args(annotation):
        component = _strip_optional(get_args(annotation)[0])
        return IndexedProperty(
            name=name, declared_type=annotation, component_type=component
        )
    return SimpleProperty(name=name, declared_type=annotation)


def _resolved_type_hints(cls: type) -> dict[str, Any]:
    annotations: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        annotations.update(inspect.get_annotations(klass, eval_str=False))
    try:
        annotations.update(get_type_hints(cls))
    except (AttributeError, NameError, TypeError):
        pass
    return annotations


def _is_class_var(annotation: Any) -> bool:
    if annotation is ClassVar or get_origin(annotation) is ClassVar:
        return True
    return isinstance(annotation, str) and annotation.startswith(
        ("ClassVar", "typing.ClassVar")
    )


def _field_names(cls: type, hints: Mapping[str, Any]) -> list[str]:
    if chz.is_chz(cls):
        return [field.logical_name for field in chz.chz_fields(cls).values()]
    if issubclass(cls, PydanticBaseModel):
        return list(cls.model_fields)
    if dataclasses.is_dataclass(cls):
        return [field.name for field in dataclasses.fields(cls)]
    return [name for name, annotation in hints.items() if not _is_class_var(annotation)]


@cache
def describe(cls: type) -> PropertySchema:
    """
    Build the property schema of ``cls`` from its annotations.

    Supports chz classes, pydantic models, dataclasses and plain or protocol
    classes. Names starting with ``_`` are private and skipped.

    Returns:
        PropertySchema: Read-only mapping of property name to descriptor; empty
        when the class declares no public annotated attributes.
    """
    if not isinstance(cls, type):
        raise TypeError(f"describe requires a class, got {type(cls)}")

    hints = _resolved_type_hints(cls)
    if chz.is_chz(cls):
        hints = {
            **hints,
            **{
                field.logical_name: field.final_type
                for field in chz.chz_fields(cls).values()
            },
        }
    elif issubclass(cls, PydanticBaseModel):
        hints = {
            **hints,
            **{name: field.annotation for name, field in cls.model_fields.items()},
        }

    descriptors: dict[str, PropertyDescriptor] = {}
    for name in _field_names(cls, hints):
        if name.startswith("_"):
            continue
        descriptors[name] = descriptor_for(name, hints.get(name, Any))
    return types.MappingProxyType(descriptors)


__all__ = [
    "IndexedProperty",
    "PropertyDescriptor",
    "PropertySchema",
    "SimpleProperty",
    "accepts_instance",
    "accepts_subclass",
    "describe",
    "descriptor_for",
    "is_list_type",
    "is_nested_type",
    "nested_type",
    "runtime_type",
]
