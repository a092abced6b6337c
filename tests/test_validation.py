"""Tests for property value and delegate validation."""

from __future__ import annotations

import array
from collections.abc import Sequence
from typing import Any, Protocol

import pytest

from proppath.beans import create
from proppath.errors import InvalidDelegate, InvalidPropertyValue, UnsupportedFeature
from proppath.schema import IndexedProperty, SimpleProperty, describe
from proppath.validation import validate_all, validate_delegate, validate_value


class Address(Protocol):
    city: str


class Company(Protocol):
    title: str


class Person(Protocol):
    name: str
    age: int
    score: float
    active: bool
    address: Address
    aliases: list
    history: Sequence[str]
    nicknames: list[str]
    counts: array.array


class NominalAddress(Address):
    city = "Oslo"


SCHEMA = describe(Person)


class NameDelegate:
    property_type: Any = str

    def get(self, store: dict[str, Any], name: str) -> str:
        return store.get(name, "")

    def set(self, store: dict[str, Any], name: str, value: str) -> None:
        store[name] = value


class NicknamesDelegate(NameDelegate):
    property_type: Any = list[str]
    component_type: Any = str

    def get_element(self, store: dict[str, Any], name: str, index: int) -> Any:
        return store[name][index]

    def set_element(
        self, store: dict[str, Any], name: str, index: int, value: object
    ) -> None:
        store[name][index] = value


def test_unknown_property_fails_for_any_value() -> None:
    for value in (None, 1, "x", create(Address)):
        with pytest.raises(InvalidPropertyValue, match="'missing'"):
            validate_value(SCHEMA, "missing", value)


def test_list_typed_property_accepts_anything() -> None:
    for name in ("aliases", "history"):
        validate_value(SCHEMA, name, 42)
        validate_value(SCHEMA, name, None)
        validate_value(SCHEMA, name, create(Address))


def test_untyped_property_accepts_anything() -> None:
    schema = {"raw": IndexedProperty("raw", None, None)}

    validate_value(schema, "raw", object())
    validate_value(schema, "raw", None)


def test_primitive_properties() -> None:
    validate_value(SCHEMA, "age", 3)
    validate_value(SCHEMA, "score", 3)
    validate_value(SCHEMA, "active", False)

    for name, value in (("age", "3"), ("age", True), ("age", None), ("active", 1)):
        with pytest.raises(InvalidPropertyValue):
            validate_value(SCHEMA, name, value)


def test_none_is_accepted_for_non_primitives() -> None:
    validate_value(SCHEMA, "name", None)
    validate_value(SCHEMA, "address", None)
    validate_value(SCHEMA, "nicknames", None)


def test_plain_values_are_type_checked() -> None:
    validate_value(SCHEMA, "name", "Ann")
    validate_value(SCHEMA, "address", NominalAddress())
    validate_value(SCHEMA, "nicknames", ["a", "b"])
    validate_value(SCHEMA, "counts", array.array("i"))

    with pytest.raises(InvalidPropertyValue, match="of type int"):
        validate_value(SCHEMA, "name", 5)
    with pytest.raises(InvalidPropertyValue):
        validate_value(SCHEMA, "address", object())
    with pytest.raises(InvalidPropertyValue):
        validate_value(SCHEMA, "nicknames", "ab")


def test_managed_values_must_proxy_for_declared_type() -> None:
    validate_value(SCHEMA, "address", create(Address))

    with pytest.raises(InvalidPropertyValue, match="cannot be assigned"):
        validate_value(SCHEMA, "address", create(Company))


def test_unrecognized_handler_is_unsupported() -> None:
    class ForeignHandlers:
        def is_proxy(self, value: object) -> bool:
            return True

        def handler_of(self, value: object) -> None:
            return None

    with pytest.raises(UnsupportedFeature, match="not recognized"):
        validate_value(SCHEMA, "address", object(), handlers=ForeignHandlers())


def test_validate_all_stops_at_first_failure() -> None:
    validate_all(SCHEMA, {"name": "Ann", "age": 3})

    with pytest.raises(InvalidPropertyValue, match="'age'"):
        validate_all(SCHEMA, {"name": "Ann", "age": "old"})


def test_simple_delegate_must_match_declared_type() -> None:
    validate_delegate("name", SimpleProperty("name", str), NameDelegate())

    wrong = NameDelegate()
    wrong.property_type = int
    with pytest.raises(InvalidDelegate, match="requires type str"):
        validate_delegate("name", SimpleProperty("name", str), wrong)


def test_indexed_property_requires_indexed_delegate() -> None:
    descriptor = SCHEMA["nicknames"]

    with pytest.raises(InvalidDelegate, match="requires an indexed delegate"):
        validate_delegate("nicknames", descriptor, NameDelegate())
    validate_delegate("nicknames", descriptor, NicknamesDelegate())


def test_indexed_delegate_type_must_be_array_of_component() -> None:
    descriptor = SCHEMA["nicknames"]

    mismatched = NicknamesDelegate()
    mismatched.component_type = int
    with pytest.raises(InvalidDelegate, match="must be an array"):
        validate_delegate("nicknames", descriptor, mismatched)

    other_list = NicknamesDelegate()
    other_list.property_type = list[int]
    other_list.component_type = int
    with pytest.raises(InvalidDelegate, match="requires type"):
        validate_delegate("nicknames", descriptor, other_list)


def test_primitive_array_delegate() -> None:
    delegate = NicknamesDelegate()
    delegate.property_type = array.array
    delegate.component_type = int

    validate_delegate("counts", SCHEMA["counts"], delegate)
