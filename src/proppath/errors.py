"""Exception hierarchy for path expressions, resolution and validation."""

from __future__ import annotations


class ProppathError(Exception):
    """Base class for every error raised by proppath."""


class InvalidPropertyValue(ProppathError, ValueError):
    """A value cannot be applied to a property.

    Raised for unknown property names, type mismatches, unsupported dotted
    keys and nested values that do not fit their property.
    """


class InvalidExpression(ProppathError, ValueError):
    """A path expression cannot be evaluated against an object graph."""


class InvalidDelegate(ProppathError, TypeError):
    """A property delegate does not match the property it is registered for."""


class UnsupportedFeature(ProppathError, NotImplementedError):
    """A collaborator shape proppath does not know how to handle."""


__all__ = [
    "InvalidDelegate",
    "InvalidExpression",
    "InvalidPropertyValue",
    "ProppathError",
    "UnsupportedFeature",
]
