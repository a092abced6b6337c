"""Parsing of dotted, optionally indexed property path expressions.

A path such as ``"order.lines[2].sku"`` is parsed into a chain of
:class:`Segment` nodes, one per ``.``-separated token. Each segment knows its
property name, its bracket index (if any) and its neighbours in the chain.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .errors import InvalidExpression

logger = logging.getLogger(__name__)

SEPARATOR = "."
OPEN_BRACKET = "["
CLOSE_BRACKET = "]"


class IndexKind(enum.Enum):
    NONE = "none"
    WILDCARD = "wildcard"
    CONCRETE = "concrete"
    INVALID = "invalid"


def _bracket_span(token: str) -> tuple[int, int] | None:
    start = token.find(OPEN_BRACKET)
    end = token.find(CLOSE_BRACKET)
    if start == -1 or end == -1 or end <= start:
        return None
    return start, end


def _parse_index(text: str) -> int | None:
    # Only the canonical decimal spelling counts: no sign, no leading zeros,
    # no whitespace, no underscores.
    if not text.isascii() or not text.isdigit():
        return None
    index = int(text)
    if str(index) != text:
        return None
    return index


def index_of(token: str) -> int | None:
    """Return the concrete bracket index in ``token`` or ``None``.

    Only the first ``[`` and the first ``]`` are considered. Missing or
    reversed brackets, empty brackets and non-canonical numbers all yield
    ``None``.
    """

    span = _bracket_span(token)
    if span is None:
        logger.debug("no bracket operator in %r", token)
        return None
    start, end = span
    text = token[start + 1 : end]
    index = _parse_index(text)
    if index is None and text:
        logger.warning("bracket text %r in %r is not a valid index", text, token)
    return index


def _classify(token: str) -> tuple[str, IndexKind, int | None]:
    span = _bracket_span(token)
    if span is None:
        return token, IndexKind.NONE, None
    start, end = span
    name = token[:start]
    text = token[start + 1 : end]
    if not text:
        return name, IndexKind.WILDCARD, None
    index = _parse_index(text)
    if index is None:
        logger.warning("bracket text %r in %r is not a valid index", text, token)
        return name, IndexKind.INVALID, None
    return name, IndexKind.CONCRETE, index


@dataclass(frozen=True, eq=False)
class Segment:
    """One token of a path expression, linked to its neighbours."""

    path: str
    token: str
    name: str
    index_kind: IndexKind
    index: int | None
    parent: Segment | None = field(default=None, repr=False)
    child: Segment | None = field(default=None, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return self.child is None

    @property
    def is_indexed(self) -> bool:
        """True when the token carries a bracket operator, valid or not."""
        return self.index_kind is not IndexKind.NONE

    @property
    def has_index(self) -> bool:
        return self.index_kind is IndexKind.CONCRETE

    @property
    def expression_to_root(self) -> str:
        tokens: list[str] = []
        current: Segment | None = self
        while current is not None:
            tokens.append(current.token)
            current = current.parent
        return SEPARATOR.join(reversed(tokens))

    @property
    def expression_to_leaf(self) -> str:
        tokens: list[str] = []
        current: Segment | None = self
        while current is not None:
            tokens.append(current.token)
            current = current.child
        return SEPARATOR.join(tokens)

    def require_index(self) -> int:
        if self.index is None:
            raise InvalidExpression(
                f"expression {self.expression_to_root!r} requires a valid index "
                "for the bracket operator"
            )
        return self.index

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class PathExpression:
    expression: str
    root: Segment
    depth: int

    def get_leaf(self) -> Segment:
        current = self.root
        while not current.is_leaf:
            assert current.child is not None
            current = current.child
        return current

    def segments(self) -> Iterator[Segment]:
        current: Segment | None = self.root
        while current is not None:
            yield current
            current = current.child

    def __str__(self) -> str:
        return self.expression


def parse(path: str) -> PathExpression:
    """Parse ``path`` into a :class:`PathExpression`.

    Raises ``ValueError`` for an empty or missing path. Malformed bracket
    operators never raise; the affected segment simply carries no index.
    """

    if not path:
        raise ValueError("path expression must be a non-empty string")

    tokens = path.split(SEPARATOR)
    root: Segment | None = None
    previous: Segment | None = None
    for token in tokens:
        name, kind, index = _classify(token)
        segment = Segment(
            path=path,
            token=token,
            name=name,
            index_kind=kind,
            index=index,
            parent=previous,
        )
        if previous is None:
            root = segment
        else:
            object.__setattr__(previous, "child", segment)
        previous = segment

    assert root is not None
    return PathExpression(expression=path, root=root, depth=len(tokens))


__all__ = [
    "IndexKind",
    "PathExpression",
    "Segment",
    "index_of",
    "parse",
]
