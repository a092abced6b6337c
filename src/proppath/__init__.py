"""
proppath: dotted, indexed property paths over nested objects.

This package uses a src-layout. Import the package as `proppath`.
"""

from importlib.metadata import version

__version__ = version("proppath")

from .config import PROPPATH_CONFIG, ProppathConfig
from .errors import (
    InvalidDelegate,
    InvalidExpression,
    InvalidPropertyValue,
    ProppathError,
    UnsupportedFeature,
)
from .expression import IndexKind, PathExpression, Segment, index_of, parse
from .indexed import IndexedAccess
from .interfaces import IndexedPropertyDelegate, PropertyDelegate
from .runtime import configure_logging, get_logger
from .schema import IndexedProperty, SimpleProperty, describe
from .resolver import FlatMapResolver, resolve
from .validation import validate_all, validate_delegate, validate_value
from .beans import Bean, BeanHandler, create, handler_of
from .paths import PATH_MISSING, flatten, get_path, set_path

__all__ = [
    "__version__",
    "PATH_MISSING",
    "PROPPATH_CONFIG",
    "Bean",
    "BeanHandler",
    "FlatMapResolver",
    "IndexKind",
    "IndexedAccess",
    "IndexedProperty",
    "IndexedPropertyDelegate",
    "InvalidDelegate",
    "InvalidExpression",
    "InvalidPropertyValue",
    "PathExpression",
    "PropertyDelegate",
    "ProppathConfig",
    "ProppathError",
    "Segment",
    "SimpleProperty",
    "UnsupportedFeature",
    "configure_logging",
    "create",
    "describe",
    "flatten",
    "get_logger",
    "get_path",
    "handler_of",
    "index_of",
    "parse",
    "resolve",
    "set_path",
    "validate_all",
    "validate_delegate",
    "validate_value",
]
