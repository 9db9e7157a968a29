"""Read-only helpers for walking a parsed tree.

This module resolves relations the tree leaves implicit: which header is in
scope for a line, and which string an event addresses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from catl_parser.models import Element, Event, Header, Tree


def iter_elements(tree: Tree) -> Iterator[tuple[int, Element]]:
    """Yield ``(line_index, element)`` for every element in source order.

    Examples
    --------
    >>> from catl_parser import parse
    >>> [(i, e.kind) for i, e in iter_elements(parse("| 5e"))]
    [(1, 'Bar'), (1, 'EventSpec')]
    """
    for index, line in enumerate(tree.lines):
        if line.kind == "StatementLine":
            for element in line.elements:
                yield index, element


def iter_events(tree: Tree) -> Iterator[tuple[int, Event]]:
    """Yield ``(line_index, event)`` for every event in every event spec."""
    for index, element in iter_elements(tree):
        if element.kind == "EventSpec":
            for event in element.group.events:
                yield index, event


def header_in_scope(tree: Tree, line_index: int) -> Header | None:
    """Find the header governing a line.

    Parameters
    ----------
    tree : Tree
        The parsed tree.
    line_index : int
        Index into ``tree.lines``.

    Returns
    -------
    Header | None
        The header of the nearest header line at or before ``line_index``,
        or None if no header precedes it.

    Examples
    --------
    >>> from catl_parser import parse
    >>> tree = parse("{EADG}\\n0A")
    >>> header_in_scope(tree, 1).string_ids
    ('E', 'A', 'D', 'G')
    """
    if line_index < 0 or line_index >= len(tree.lines):
        msg = f"Line index out of range: {line_index}"
        raise IndexError(msg)

    for line in reversed(tree.lines[: line_index + 1]):
        if line.kind == "HeaderLine":
            return line.header
    return None


def resolve_string_id(event: Event, header: Header | None) -> str | None:
    """Return the string identifier an event is played on.

    Named events carry their identifier directly. Indexed events are looked
    up in ``header`` (1-based).

    Parameters
    ----------
    event : Event
        The event to resolve.
    header : Header | None
        The header in scope.

    Returns
    -------
    str | None
        The identifier, or None if the index is missing or out of range.

    Examples
    --------
    >>> from catl_parser import parse
    >>> tree = parse("3@1+0@4")
    >>> events = [e for _, e in iter_events(tree)]
    >>> [resolve_string_id(e, header_in_scope(tree, 1)) for e in events]
    ['e', 'D']
    """
    if event.kind == "NamedEvent":
        return event.string_id

    index = event.string_index
    if header is None or index is None or not 1 <= index <= len(header.string_ids):
        return None
    return header.string_ids[index - 1]
