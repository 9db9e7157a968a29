"""Atom predicates used for element disambiguation.

The parser decides between chord specs and tab events by looking at the
shape of an atom's text. Each shape test lives here as a named function so
it can be tested on its own.
"""

from __future__ import annotations

import re

from catl_parser.models import Token

# Named event: fret digits followed by a single string letter, e.g. "5e", "12A"
NAMED_EVENT_RE = re.compile(r"^([0-9]+)([A-Za-z])$")

DIGITS_RE = re.compile(r"^[0-9]+$")


def is_digits(text: str | None) -> bool:
    """Check if text is one or more ASCII digits.

    Examples
    --------
    >>> is_digits("12")
    True
    >>> is_digits("12a")
    False
    >>> is_digits("")
    False
    """
    return bool(text) and DIGITS_RE.match(text) is not None


def is_named_event_atom(text: str | None) -> bool:
    """Check if text has the named-event shape (digits then one letter).

    Examples
    --------
    >>> is_named_event_atom("5e")
    True
    >>> is_named_event_atom("12A")
    True
    >>> is_named_event_atom("3x332x")
    False
    """
    return bool(text) and NAMED_EVENT_RE.match(text) is not None


def split_named_event(text: str | None) -> tuple[int, str] | None:
    """Split a named-event atom into fret and string identifier.

    Parameters
    ----------
    text : str | None
        The atom text.

    Returns
    -------
    tuple[int, str] | None
        ``(fret, string_id)``, or None if the text is not event-shaped.

    Examples
    --------
    >>> split_named_event("12A")
    (12, 'A')
    >>> split_named_event("A12")
    """
    if not text:
        return None
    match = NAMED_EVENT_RE.match(text)
    if match is None:
        return None
    fret = parse_digits(match.group(1))
    if fret is None:
        return None
    return fret, match.group(2)


def parse_digits(text: str | None) -> int | None:
    """Decode a digits-only atom, returning None for anything else.

    Examples
    --------
    >>> parse_digits("07")
    7
    >>> parse_digits("x")
    """
    if text is None or not is_digits(text):
        return None
    try:
        return int(text)
    except ValueError:
        # Beyond the interpreter's integer string conversion limit
        return None


def looks_like_indexed_event(first: Token, second: Token) -> bool:
    """Check if two tokens start an indexed event (``<digits> @``)."""
    return first.kind == "Atom" and is_digits(first.value) and second.kind == "At"


def looks_like_named_event(token: Token) -> bool:
    """Check if a token is a named-event atom."""
    return token.kind == "Atom" and is_named_event_atom(token.value)
