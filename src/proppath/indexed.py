"""Element access for array-backed (indexed) properties."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from .expression import index_of
from .interfaces import NestedObjectFactory, PrimitiveElementAccessor
from .primitives import PrimitiveArrays
from .schema import PropertyDescriptor, is_nested_type

logger = logging.getLogger(__name__)


class IndexedAccess:
    """Read and write single elements of indexed property containers.

    A ``None`` index turns reads into ``None`` and writes into no-ops.
    Out-of-range indices raise ``IndexError``.
    """

    def __init__(
        self,
        factory: NestedObjectFactory,
        primitives: PrimitiveElementAccessor | None = None,
    ) -> None:
        self.factory = factory
        self.primitives = primitives or PrimitiveArrays()

    def _is_primitive(self, container: Any, descriptor: PropertyDescriptor) -> bool:
        return self.primitives.is_primitive_array(
            descriptor.declared_type
        ) or self.primitives.is_primitive_array(type(container))

    def get(
        self,
        container: Any,
        index: int | None,
        descriptor: PropertyDescriptor,
        path_hint: str,
    ) -> Any:
        if index is None:
            logger.warning("no index found for indexed read of %r", path_hint)
            return None
        if index < 0:
            raise IndexError(f"index {index} out of range for {path_hint!r}")

        if self._is_primitive(container, descriptor):
            return self.primitives.get(container, index)

        element = container[index]
        if element is not None:
            return element

        component = descriptor.component_type
        if not is_nested_type(component):
            return None

        element = self.factory.create(path_hint, component)
        container[index] = element
        logger.debug("materialized %s element for %r", component.__name__, path_hint)
        return element

    def set(
        self,
        container: Any,
        index: int | None,
        descriptor: PropertyDescriptor,
        value: object,
    ) -> None:
        if index is None:
            logger.warning("no index found for indexed write of %s", descriptor.name)
            return
        if index < 0:
            raise IndexError(f"index {index} out of range for {descriptor.name!r}")

        if self._is_primitive(container, descriptor):
            self.primitives.set(container, index, value)
            return

        container[index] = value

    def get_indexed(
        self,
        values: Mapping[str, Any],
        token: str,
        descriptor: PropertyDescriptor,
    ) -> Any:
        """Read ``values[descriptor.name][index_of(token)]``."""
        return self.get(values[descriptor.name], index_of(token), descriptor, token)

    def put_indexed(
        self,
        values: MutableMapping[str, Any],
        token: str,
        descriptor: PropertyDescriptor,
        value: object,
    ) -> None:
        self.set(values[descriptor.name], index_of(token), descriptor, value)


__all__ = ["IndexedAccess"]
