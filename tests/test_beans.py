"""Tests for managed nested objects."""

from __future__ import annotations

import abc
from typing import Any, Protocol

import pytest

from proppath.beans import Bean, BeanHandler, create, handler_of
from proppath.errors import InvalidDelegate, InvalidPropertyValue, UnsupportedFeature


class Address(Protocol):
    city: str
    zip_code: int


class Company(Protocol):
    title: str


class Person(Protocol):
    name: str
    age: int
    active: bool
    address: Address
    addresses: list[Address]
    nicknames: list[str]


class Shape(abc.ABC):
    sides: int

    @abc.abstractmethod
    def area(self) -> float: ...


class Concrete:
    value: int


class UpperDelegate:
    property_type: Any = str

    def get(self, store: dict[str, Any], name: str) -> str:
        return store.get(name, "").upper()

    def set(self, store: dict[str, Any], name: str, value: str) -> None:
        store[name] = value


class ReversedNicknames(UpperDelegate):
    property_type: Any = list[str]
    component_type: Any = str

    def get_element(self, store: dict[str, Any], name: str, index: int) -> Any:
        return store[name][-1 - index]

    def set_element(
        self, store: dict[str, Any], name: str, index: int, value: object
    ) -> None:
        store[name][-1 - index] = value


def _handler(bean: object) -> BeanHandler:
    handler = handler_of(bean)
    assert handler is not None
    return handler


def test_create_with_flat_values() -> None:
    person = create(Person, {"name": "Ann", "address.city": "Oslo"})

    assert isinstance(person, Bean)
    assert person.name == "Ann"
    assert person.address.city == "Oslo"
    assert _handler(person.address).proxied_type is Address


def test_unset_properties_read_as_defaults() -> None:
    person = create(Person)

    assert person.name is None
    assert person.age == 0
    assert person.active is False
    assert person.address is None


def test_create_validates_seed() -> None:
    with pytest.raises(InvalidPropertyValue, match="'age'"):
        create(Person, {"age": "old"})
    with pytest.raises(InvalidPropertyValue, match="'unknown'"):
        create(Person, {"unknown": 1})


def test_create_requires_interface_type() -> None:
    with pytest.raises(UnsupportedFeature, match="only protocol and abstract"):
        create(Concrete)
    with pytest.raises(UnsupportedFeature):
        create(str)


def test_abstract_class_beans() -> None:
    shape = create(Shape, {"sides": 3})

    assert shape.sides == 3
    assert _handler(shape).proxies_for(Shape)


def test_attribute_writes_are_validated() -> None:
    person = create(Person)

    person.age = 41
    person.address = create(Address, {"city": "Oslo"})
    assert person.age == 41
    assert person.address.city == "Oslo"

    with pytest.raises(InvalidPropertyValue):
        person.age = "old"
    with pytest.raises(InvalidPropertyValue):
        person.address = create(Company)
    with pytest.raises(InvalidPropertyValue):
        person.unknown = 1


def test_validation_on_write_can_be_disabled(proppath_config) -> None:
    proppath_config.validate_on_write = False
    person = create(Person)

    person.age = "old"

    assert person.age == "old"
    with pytest.raises(InvalidPropertyValue):
        person.unknown = 1


def test_unknown_and_private_attributes() -> None:
    person = create(Person)

    with pytest.raises(AttributeError):
        person.unknown
    with pytest.raises(AttributeError):
        person._hidden
    with pytest.raises(AttributeError):
        person._hidden = 1
    with pytest.raises(AttributeError):
        del person.name
    assert not hasattr(person, "unknown")


def test_equality_repr_and_dir() -> None:
    first = create(Address, {"city": "Oslo"})
    second = create(Address, {"city": "Oslo"})
    other = create(Company, {"title": "Oslo"})

    assert first == second
    assert first != other
    assert first != {"city": "Oslo"}
    assert repr(first) == "AddressBean(city='Oslo')"
    assert dir(first) == ["city", "zip_code"]
    with pytest.raises(TypeError):
        hash(first)


def test_merge_keeps_existing_nested_instance() -> None:
    person = create(Person, {"address.city": "Oslo"})
    address = person.address

    _handler(person).merge({"address.zip_code": 150})

    assert person.address is address
    assert address.city == "Oslo"
    assert address.zip_code == 150


def test_merge_into_indexed_element() -> None:
    person = create(Person, {"addresses": [None, None]})

    _handler(person).merge({"addresses[0].city": "Oslo"})

    assert person.addresses[0].city == "Oslo"
    assert person.addresses[1] is None


def test_failed_merge_leaves_nested_bean_untouched() -> None:
    """A rejected sibling value rolls back nested values already merged."""

    person = create(Person, {"name": "Ann", "address.city": "Bergen"})
    address = person.address

    with pytest.raises(InvalidPropertyValue, match="'age'"):
        _handler(person).merge({"address.city": "Oslo", "age": "old"})

    assert person.address is address
    assert address.city == "Bergen"
    assert person.name == "Ann"
    assert person.age == 0


def test_failed_merge_rolls_back_after_resolution_error() -> None:
    person = create(Person, {"address.city": "Bergen"})

    with pytest.raises(InvalidPropertyValue, match="interface type"):
        _handler(person).merge({"address.city": "Oslo", "name.first": "Ann"})

    assert person.address.city == "Bergen"
    assert person.name is None


def test_failed_merge_restores_indexed_elements() -> None:
    person = create(Person, {"addresses": [None, None]})
    _handler(person).merge({"addresses[1].city": "Bergen"})
    second = person.addresses[1]

    with pytest.raises(InvalidPropertyValue):
        _handler(person).merge(
            {"addresses[0].city": "Oslo", "addresses[1].city": "Oslo", "age": "old"}
        )

    assert person.addresses[0] is None
    assert person.addresses[1] is second
    assert second.city == "Bergen"


def test_read_element_creates_interface_elements_once() -> None:
    person = create(Person, {"addresses": [None]})
    handler = _handler(person)

    first = handler.read_element("addresses", 0, "addresses[0]")
    second = handler.read_element("addresses", 0, "addresses[0]")

    assert first is second
    assert person.addresses[0] is first


def test_read_element_requires_container() -> None:
    person = create(Person)

    with pytest.raises(InvalidPropertyValue, match="has no value"):
        _handler(person).read_element("addresses", 0, "addresses[0]")


def test_write_element_checks_component_type() -> None:
    person = create(Person, {"addresses": [None], "nicknames": ["a"]})
    handler = _handler(person)

    handler.write_element("addresses", 0, create(Address, {"city": "Oslo"}))
    handler.write_element("nicknames", 0, "b")
    assert person.addresses[0].city == "Oslo"
    assert person.nicknames == ["b"]

    with pytest.raises(InvalidPropertyValue, match="'addresses'"):
        handler.write_element("addresses", 0, create(Company))
    with pytest.raises(InvalidPropertyValue, match="'nicknames'"):
        handler.write_element("nicknames", 0, 3)


def test_register_delegate_routes_reads_and_writes() -> None:
    person = create(Person)
    _handler(person).register_delegate("name", UpperDelegate())

    person.name = "ann"

    assert person.name == "ANN"
    assert _handler(person).store()["name"] == "ann"


def test_indexed_delegate_routes_element_access() -> None:
    person = create(Person, {"nicknames": ["a", "b"]})
    handler = _handler(person)
    handler.register_delegate("nicknames", ReversedNicknames())

    assert handler.read_element("nicknames", 0, "nicknames[0]") == "b"
    handler.write_element("nicknames", 0, "z")
    assert handler.store()["nicknames"] == ["a", "z"]
    assert handler.read_element("nicknames", None, "nicknames[]") is None


def test_register_delegate_rejects_bad_delegates() -> None:
    handler = _handler(create(Person))

    with pytest.raises(InvalidDelegate, match="no property 'missing'"):
        handler.register_delegate("missing", UpperDelegate())
    with pytest.raises(InvalidDelegate):
        handler.register_delegate("age", UpperDelegate())
    with pytest.raises(InvalidDelegate, match="indexed delegate"):
        handler.register_delegate("nicknames", UpperDelegate())
