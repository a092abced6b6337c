"""Schema-driven validation of property values and property delegates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, get_args, get_origin

from .errors import InvalidDelegate, InvalidPropertyValue, UnsupportedFeature
from .interfaces import HandlerIntrospection, IndexedPropertyDelegate, PropertyDelegate
from .primitives import is_primitive, is_primitive_array, validate_primitive
from .schema import PropertyDescriptor, PropertySchema, accepts_instance, is_list_type


def _default_handlers() -> HandlerIntrospection:
    from .beans import BEAN_HANDLERS

    return BEAN_HANDLERS


def _type_name(tp: Any) -> str:
    return tp.__name__ if isinstance(tp, type) else repr(tp)


def validate_value(
    schema: PropertySchema,
    name: str,
    value: object,
    *,
    handlers: HandlerIntrospection | None = None,
) -> None:
    """Raise if ``value`` cannot be assigned to property ``name``.

    Raises:
        InvalidPropertyValue: Unknown property, type mismatch, or a managed
            nested value that proxies for the wrong type.
        UnsupportedFeature: ``value`` is a proxy whose handler is not
            recognized.
    """
    descriptor = schema.get(name)
    if descriptor is None:
        raise InvalidPropertyValue(f"object does not have a property {name!r}")

    declared = descriptor.declared_type
    if declared is None:
        return

    if not descriptor.is_indexed:
        # list-like properties are reconciled separately
        if is_list_type(declared):
            return
        if is_primitive(declared):
            validate_primitive(name, declared, value)
            return

    if value is None:
        return

    handlers = handlers or _default_handlers()
    if handlers.is_proxy(value):
        handler = handlers.handler_of(value)
        if handler is None:
            raise UnsupportedFeature(
                f"cannot validate nested value {value!r} for property {name!r}; "
                "its handler is not recognized"
            )
        if handler.proxies_for(declared):
            return
        raise InvalidPropertyValue(
            f"nested value {value!r} cannot be assigned to property {name!r} "
            f"of type {_type_name(declared)}"
        )

    if not accepts_instance(declared, value):
        raise InvalidPropertyValue(
            f"value {value!r} of type {type(value).__name__} is not a valid value "
            f"for property {name!r} of type {_type_name(declared)}"
        )


def validate_all(
    schema: PropertySchema,
    values: Mapping[str, Any],
    *,
    handlers: HandlerIntrospection | None = None,
) -> None:
    for name, value in values.items():
        validate_value(schema, name, value, handlers=handlers)


def _is_array_of(array_type: Any, component: Any) -> bool:
    if get_origin(array_type) is list:
        args = get_args(array_type)
        return bool(args) and args[0] == component
    if is_primitive_array(array_type):
        return is_primitive(component)
    return False


def validate_delegate(
    name: str,
    descriptor: PropertyDescriptor,
    delegate: PropertyDelegate[Any],
) -> None:
    if descriptor.is_indexed:
        if not isinstance(delegate, IndexedPropertyDelegate):
            raise InvalidDelegate(
                f"property {name!r} is indexed and requires an indexed delegate"
            )
        if not _is_array_of(delegate.property_type, delegate.component_type):
            raise InvalidDelegate(
                f"indexed delegate type {_type_name(delegate.property_type)} for "
                f"property {name!r} must be an array of its component type "
                f"{_type_name(delegate.component_type)}"
            )

    if descriptor.declared_type != delegate.property_type:
        raise InvalidDelegate(
            f"delegate type {_type_name(delegate.property_type)} is not valid for "
            f"property {name!r}; requires type {_type_name(descriptor.declared_type)}"
        )


__all__ = ["validate_all", "validate_delegate", "validate_value"]
