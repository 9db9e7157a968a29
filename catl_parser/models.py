"""Data models for CATL parsing.

This module defines the core data structures produced by the lexer and
parser: source positions and spans, diagnostics, tokens, and the syntax
tree nodes. Every type is immutable; tree nodes carry a ``kind``
discriminator so consumers can dispatch without ``isinstance`` checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from catl_parser.errors import CatlSyntaxError

Severity = Literal["error", "warning"]

TokenKind = Literal[
    "LBrace",
    "RBrace",
    "Bar",
    "RepeatBegin",
    "RepeatEnd",
    "Colon",
    "Plus",
    "At",
    "QString",
    "Atom",
    "Newline",
    "EOF",
]


@dataclass(frozen=True, order=True)
class Position:
    """A location in the source text.

    Parameters
    ----------
    offset : int
        Absolute character offset (0-indexed).
    line : int
        Line number (1-indexed).
    col : int
        Column number (1-indexed).

    Examples
    --------
    >>> Position(offset=0, line=1, col=1)
    Position(offset=0, line=1, col=1)
    """

    offset: int
    line: int
    col: int


START = Position(offset=0, line=1, col=1)


@dataclass(frozen=True)
class Span:
    """A source range with inclusive start and exclusive end.

    Parameters
    ----------
    start : Position
        Inclusive start position.
    end : Position
        Exclusive end position.

    Examples
    --------
    >>> span = Span(Position(0, 1, 1), Position(3, 1, 4))
    >>> span.text("Gm7 C")
    'Gm7'
    """

    start: Position
    end: Position

    @classmethod
    def empty_at(cls, pos: Position) -> Span:
        """Build a zero-width span at ``pos``."""
        return cls(start=pos, end=pos)

    @property
    def width(self) -> int:
        """Number of characters covered by the span."""
        return self.end.offset - self.start.offset

    def text(self, source: str) -> str:
        """Return the substring of ``source`` addressed by this span."""
        return source[self.start.offset : self.end.offset]

    def contains(self, other: Span) -> bool:
        """Check whether ``other`` lies entirely within this span."""
        return self.start.offset <= other.start.offset and other.end.offset <= self.end.offset


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while lexing or parsing.

    Parameters
    ----------
    severity : Severity
        ``"error"`` when the input violates the grammar, ``"warning"`` when
        it is accepted but suspicious.
    message : str
        Human-readable description.
    span : Span
        The offending source range.
    """

    severity: Severity
    message: str
    span: Span

    def __str__(self) -> str:
        """Render as ``line:col: severity: message``."""
        start = self.span.start
        return f"{start.line}:{start.col}: {self.severity}: {self.message}"


@dataclass(frozen=True)
class Token:
    """A lexical token.

    Parameters
    ----------
    kind : TokenKind
        The token classification.
    span : Span
        Source range of the token.
    value : str | None
        Decoded text for ``Atom`` and ``QString`` tokens, None otherwise.

    Examples
    --------
    >>> token = Token(kind="Atom", span=Span.empty_at(START), value="5e")
    >>> token.kind, token.value
    ('Atom', '5e')
    """

    kind: TokenKind
    span: Span
    value: str | None = None


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Label:
    """A free-text annotation following a colon, e.g. ``:"Nice chord!"``.

    The span covers the colon through the closing quote.
    """

    text: str
    span: Span
    kind: Literal["Label"] = field(default="Label", init=False)


@dataclass(frozen=True)
class Header:
    """Instrument string identifiers, from highest to lowest pitch.

    Parameters
    ----------
    string_ids : tuple[str, ...]
        Single-character string identifiers, e.g. ``("e", "B", "G")``.
    span : Span
        Source range from ``{`` through ``}``; zero-width when synthesized.
    """

    string_ids: tuple[str, ...]
    span: Span
    kind: Literal["Header"] = field(default="Header", init=False)


@dataclass(frozen=True)
class Bar:
    """A bar line ``|``."""

    span: Span
    kind: Literal["Bar"] = field(default="Bar", init=False)


@dataclass(frozen=True)
class RepeatBegin:
    """A repeat opening ``|:``."""

    span: Span
    kind: Literal["RepeatBegin"] = field(default="RepeatBegin", init=False)


@dataclass(frozen=True)
class RepeatEnd:
    """A repeat closing ``:|``."""

    span: Span
    kind: Literal["RepeatEnd"] = field(default="RepeatEnd", init=False)


@dataclass(frozen=True)
class ChordSpec:
    """A chord diagram.

    Parameters
    ----------
    voicing : str
        Raw fret-per-string text, e.g. ``"3x332x"``. Not interpreted.
    span : Span
        Source range from the name (or voicing) through the label.
    name : str | None
        Display name from a leading ``"Name":`` prefix.
    annotation : Label | None
        Trailing label.

    Examples
    --------
    >>> from catl_parser import parse
    >>> chord = parse('"G":320003').lines[1].elements[0]
    >>> chord.name, chord.voicing
    ('G', '320003')
    """

    voicing: str
    span: Span
    name: str | None = None
    annotation: Label | None = None
    kind: Literal["ChordSpec"] = field(default="ChordSpec", init=False)


@dataclass(frozen=True)
class NamedEvent:
    """A fretted note addressed by string letter, e.g. ``5e``."""

    fret: int
    string_id: str
    span: Span
    kind: Literal["NamedEvent"] = field(default="NamedEvent", init=False)


@dataclass(frozen=True)
class IndexedEvent:
    """A fretted note addressed by 1-based string index, e.g. ``3@1``.

    Parameters
    ----------
    fret : int | None
        Fret number, or None if the source text was not numeric.
    string_index : int | None
        1-based index into the header's string identifiers, or None if the
        source text was not numeric.
    span : Span
        Source range from the fret through the index.
    """

    fret: int | None
    string_index: int | None
    span: Span
    kind: Literal["IndexedEvent"] = field(default="IndexedEvent", init=False)


Event = NamedEvent | IndexedEvent


@dataclass(frozen=True)
class EventGroup:
    """One or more simultaneous events joined by ``+``."""

    events: tuple[Event, ...]
    span: Span
    kind: Literal["EventGroup"] = field(default="EventGroup", init=False)


@dataclass(frozen=True)
class EventSpec:
    """A tab event group with an optional trailing label."""

    group: EventGroup
    span: Span
    annotation: Label | None = None
    kind: Literal["EventSpec"] = field(default="EventSpec", init=False)


Element = Bar | RepeatBegin | RepeatEnd | ChordSpec | EventSpec


@dataclass(frozen=True)
class HeaderLine:
    """A line holding a header."""

    header: Header
    span: Span
    kind: Literal["HeaderLine"] = field(default="HeaderLine", init=False)


@dataclass(frozen=True)
class StatementLine:
    """A line of bars, repeats, chords and events."""

    elements: tuple[Element, ...]
    span: Span
    kind: Literal["StatementLine"] = field(default="StatementLine", init=False)


@dataclass(frozen=True)
class EmptyLine:
    """A bare newline."""

    span: Span
    kind: Literal["EmptyLine"] = field(default="EmptyLine", init=False)


Line = HeaderLine | StatementLine | EmptyLine


@dataclass(frozen=True)
class Tree:
    """Complete parse result.

    Parameters
    ----------
    lines : tuple[Line, ...]
        All lines in source order, starting with a header line.
    diagnostics : tuple[Diagnostic, ...]
        Lexer diagnostics in scan order followed by parser diagnostics in
        parse order.
    """

    lines: tuple[Line, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        """Diagnostics with ``error`` severity."""
        return tuple(d for d in self.diagnostics if d.severity == "error")

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        """Diagnostics with ``warning`` severity."""
        return tuple(d for d in self.diagnostics if d.severity == "warning")

    @property
    def ok(self) -> bool:
        """True when no error diagnostics were produced."""
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise if any error diagnostic was produced.

        Raises
        ------
        CatlSyntaxError
            Carrying every error diagnostic, in order.
        """
        errors = self.errors
        if errors:
            raise CatlSyntaxError(errors)
