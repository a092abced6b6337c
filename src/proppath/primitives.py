"""Primitive-like property types and ``array.array`` element access."""

from __future__ import annotations

import array
from typing import Any

from .errors import InvalidPropertyValue

PRIMITIVE_TYPES: tuple[type, ...] = (bool, int, float, complex)

# Values each primitive type accepts. ``bool`` is excluded from the numeric
# types even though it subclasses ``int``.
_ACCEPTED: dict[type, tuple[type, ...]] = {
    bool: (bool,),
    int: (int,),
    float: (int, float),
    complex: (int, float, complex),
}


def is_primitive(tp: object) -> bool:
    return tp in _ACCEPTED


def is_valid_primitive(tp: type, value: object) -> bool:
    accepted = _ACCEPTED.get(tp)
    if accepted is None or value is None:
        return False
    if isinstance(value, bool) and tp is not bool:
        return False
    return isinstance(value, accepted)


def validate_primitive(name: str, tp: type, value: object) -> None:
    if is_valid_primitive(tp, value):
        return
    value_type = "" if value is None else f" of type {type(value).__name__}"
    raise InvalidPropertyValue(
        f"value {value!r}{value_type} is not a valid value for property "
        f"{name!r} of type {tp.__name__}"
    )


def default_for(tp: type) -> Any:
    """Value read back for a primitive property that was never set."""
    return tp()


def is_primitive_array(tp: object) -> bool:
    return isinstance(tp, type) and issubclass(tp, array.array)


def get_element(values: array.array, index: int) -> Any:
    return values[index]


def set_element(values: array.array, index: int, value: object) -> None:
    try:
        values[index] = value
    except (TypeError, OverflowError) as exc:
        raise InvalidPropertyValue(
            f"value {value!r} cannot be stored in an array of typecode "
            f"{values.typecode!r}: {exc}"
        ) from exc


class PrimitiveArrays:
    """Default primitive element accessor over ``array.array``."""

    def is_primitive_array(self, tp: object) -> bool:
        return is_primitive_array(tp)

    def get(self, values: array.array, index: int) -> Any:
        return get_element(values, index)

    def set(self, values: array.array, index: int, value: object) -> None:
        set_element(values, index, value)


__all__ = [
    "PRIMITIVE_TYPES",
    "PrimitiveArrays",
    "default_for",
    "get_element",
    "is_primitive",
    "is_primitive_array",
    "is_valid_primitive",
    "set_element",
    "validate_primitive",
]
