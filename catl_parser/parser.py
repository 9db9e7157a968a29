"""Recursive-descent parser for CATL.

This module turns the lexer's token sequence into a tree of lines and
line elements. Parsing never raises: problems are recorded as diagnostics
and the parser recovers at element or line granularity.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from catl_parser.lexer import lex
from catl_parser.models import (
    START,
    Bar,
    ChordSpec,
    Diagnostic,
    Element,
    EmptyLine,
    Event,
    EventGroup,
    EventSpec,
    Header,
    HeaderLine,
    IndexedEvent,
    Label,
    Line,
    NamedEvent,
    RepeatBegin,
    RepeatEnd,
    Span,
    StatementLine,
    Token,
    TokenKind,
    Tree,
)
from catl_parser.predicates import (
    looks_like_indexed_event,
    looks_like_named_event,
    parse_digits,
    split_named_event,
)

logger = logging.getLogger(__name__)

# Standard guitar tuning, highest string first
DEFAULT_STRING_IDS: tuple[str, ...] = ("e", "B", "G", "D", "A", "E")

# Tokens that end a physical line
LINE_END: frozenset[TokenKind] = frozenset({"Newline", "EOF"})


class _Parser:
    """Token cursor plus the diagnostic list shared with the lexer."""

    def __init__(self, tokens: Sequence[Token], diagnostics: Sequence[Diagnostic]) -> None:
        if not tokens or tokens[-1].kind != "EOF":
            eof_at = tokens[-1].span.end if tokens else START
            tokens = [*tokens, Token(kind="EOF", span=Span.empty_at(eof_at))]
        self.tokens = tokens
        self.diagnostics: list[Diagnostic] = list(diagnostics)
        self.i = 0

    # -- cursor ------------------------------------------------------------

    def peek(self, k: int = 0) -> Token:
        index = self.i + k
        return self.tokens[index] if index < len(self.tokens) else self.tokens[-1]

    def at(self, kind: TokenKind, k: int = 0) -> bool:
        return self.peek(k).kind == kind

    def at_line_end(self) -> bool:
        return self.peek().kind in LINE_END

    def next(self) -> Token:
        token = self.peek()
        if self.i < len(self.tokens) - 1:
            self.i += 1
        return token

    def error(self, message: str, span: Span) -> None:
        self.diagnostics.append(Diagnostic(severity="error", message=message, span=span))

    def skip_to_line_end(self) -> None:
        """Discard tokens up to the next Newline/EOF."""
        while not self.at_line_end():
            self.next()

    # -- lines -------------------------------------------------------------

    def parse_file(self) -> list[Line]:
        lines: list[Line] = []

        while not self.at("EOF"):
            if self.at("Newline"):
                lines.append(EmptyLine(span=self.next().span))
                continue

            if self.at("LBrace"):
                lines.extend(self.parse_header_line())
                continue

            lines.append(self.parse_statement_line())
            if self.at("Newline"):
                self.next()

        return lines

    def parse_header_line(self) -> list[Line]:
        """Parse ``{...}`` plus any statement sharing its physical line."""
        start_tok = self.peek()
        header = self.parse_header()

        if header is None:
            # Resynchronize: drop the rest of the line, keep a placeholder
            self.skip_to_line_end()
            span = Span(start_tok.span.start, self.tokens[self.i - 1].span.end)
            if self.at("Newline"):
                self.next()
            return [StatementLine(elements=(), span=span)]

        lines: list[Line] = [HeaderLine(header=header, span=header.span)]
        if not self.at_line_end():
            lines.append(self.parse_statement_line())
        if self.at("Newline"):
            self.next()
        return lines

    def parse_header(self) -> Header | None:
        lbrace = self.next()
        string_ids: list[str] = []

        while not self.at("RBrace") and not self.at_line_end():
            token = self.next()
            if token.kind != "Atom":
                self.error("expected string identifiers in header", token.span)
                return None
            string_ids.extend(token.value or "")

        if not self.at("RBrace"):
            self.error("expected '}' to close header", self.peek().span)
            return None

        rbrace = self.next()
        return Header(string_ids=tuple(string_ids), span=Span(lbrace.span.start, rbrace.span.end))

    def parse_statement_line(self) -> StatementLine:
        start_tok = self.peek()
        elements: list[Element] = []

        while not self.at_line_end():
            element = self.parse_element()
            if element is None:
                self.skip_to_line_end()
                break
            elements.append(element)

        # Every element attempt consumes at least one token, so this is the
        # last token of the line (newline excluded)
        last = self.tokens[self.i - 1]
        return StatementLine(elements=tuple(elements), span=Span(start_tok.span.start, last.span.end))

    # -- elements ----------------------------------------------------------

    def parse_element(self) -> Element | None:
        t0 = self.peek()
        t1 = self.peek(1)

        if t0.kind == "Bar":
            return Bar(span=self.next().span)
        if t0.kind == "RepeatBegin":
            return RepeatBegin(span=self.next().span)
        if t0.kind == "RepeatEnd":
            return RepeatEnd(span=self.next().span)

        if t0.kind == "QString" and t1.kind == "Colon":
            chord = self.parse_chord_spec()
            if chord is not None:
                return chord

        if looks_like_named_event(t0) or looks_like_indexed_event(t0, t1):
            return self.parse_event_spec()

        # Ordered attempt: chord first, event second
        chord = self.parse_chord_spec()
        if chord is not None:
            return chord

        event = self.parse_event_spec()
        if event is not None:
            return event

        bad = self.next()
        self.error(f"unexpected token {bad.kind!r}", bad.span)
        return None

    def parse_label(self) -> Label | None:
        if not self.at("Colon"):
            return None
        colon = self.next()
        if not self.at("QString"):
            self.error("expected quoted string after ':' for label", self.peek().span)
            return None
        qstring = self.next()
        return Label(text=qstring.value or "", span=Span(colon.span.start, qstring.span.end))

    def parse_chord_spec(self) -> ChordSpec | None:
        """Parse ``[QSTRING ":"] ATOM [label]``; restore the cursor on failure."""
        checkpoint = self.i
        start_tok = self.peek()

        name = None
        if self.at("QString") and self.at("Colon", 1):
            name = self.next().value or ""
            self.next()

        if not self.at("Atom"):
            self.i = checkpoint
            return None

        voicing_tok = self.next()
        annotation = self.parse_label()
        end = annotation.span.end if annotation else voicing_tok.span.end
        return ChordSpec(
            voicing=voicing_tok.value or "",
            span=Span(start_tok.span.start, end),
            name=name,
            annotation=annotation,
        )

    def parse_event_spec(self) -> EventSpec | None:
        group = self.parse_event_group()
        if group is None:
            return None
        annotation = self.parse_label()
        end = annotation.span.end if annotation else group.span.end
        return EventSpec(group=group, span=Span(group.span.start, end), annotation=annotation)

    def parse_event_group(self) -> EventGroup | None:
        first = self.parse_event()
        if first is None:
            return None
        events: list[Event] = [first]

        while self.at("Plus"):
            self.next()
            if not self.at("Atom"):
                break
            event = self.parse_event()
            if event is None:
                break
            events.append(event)

        span = Span(first.span.start, events[-1].span.end)
        return EventGroup(events=tuple(events), span=span)

    def parse_event(self) -> Event | None:
        if not self.at("Atom"):
            return None

        if self.at("At", 1) and self.at("Atom", 2):
            fret_tok = self.next()
            self.next()  # @
            index_tok = self.next()
            span = Span(fret_tok.span.start, index_tok.span.end)
            fret = parse_digits(fret_tok.value)
            index = parse_digits(index_tok.value)
            if fret is None or index is None:
                self.error("invalid indexed event; expected <fret>@<index>", span)
            return IndexedEvent(fret=fret, string_index=index, span=span)

        atom = self.next()
        parts = split_named_event(atom.value)
        if parts is None:
            self.error(f"invalid event token {atom.value!r} (expected e.g. 5e, 12A or 12@1)", atom.span)
            return None
        fret, string_id = parts
        return NamedEvent(fret=fret, string_id=string_id, span=atom.span)


def ensure_header(
    lines: Sequence[Line],
    tokens: Sequence[Token],
    default_string_ids: Sequence[str] = DEFAULT_STRING_IDS,
) -> list[Line]:
    """Prepend a default header line if no header line is present.

    Parameters
    ----------
    lines : Sequence[Line]
        Parsed lines.
    tokens : Sequence[Token]
        The token sequence the lines came from; the synthetic header is
        anchored at the first token's start.
    default_string_ids : Sequence[str]
        String identifiers for the synthetic header.

    Returns
    -------
    list[Line]
        ``lines`` unchanged, or with a zero-width header line in front.
    """
    if any(line.kind == "HeaderLine" for line in lines):
        return list(lines)

    start = tokens[0].span.start if tokens else START
    span = Span.empty_at(start)
    header = Header(string_ids=tuple(default_string_ids), span=span)
    return [HeaderLine(header=header, span=span), *lines]


def parse_tokens(
    tokens: Sequence[Token],
    lexer_diagnostics: Sequence[Diagnostic] = (),
    *,
    default_string_ids: Sequence[str] = DEFAULT_STRING_IDS,
) -> Tree:
    """Parse a token sequence into a tree.

    Parameters
    ----------
    tokens : Sequence[Token]
        Tokens from :func:`catl_parser.lexer.lex`.
    lexer_diagnostics : Sequence[Diagnostic]
        Diagnostics from the lexer; they precede parser diagnostics.
    default_string_ids : Sequence[str]
        String identifiers used when the source has no header.

    Returns
    -------
    Tree
        The lines plus every diagnostic.
    """
    parser = _Parser(tokens, lexer_diagnostics)
    lines = parser.parse_file()
    lines = ensure_header(lines, parser.tokens, default_string_ids)
    logger.debug(
        "Parsed %d tokens into %d lines (%d diagnostics)",
        len(parser.tokens),
        len(lines),
        len(parser.diagnostics),
    )
    return Tree(lines=tuple(lines), diagnostics=tuple(parser.diagnostics))


def parse(text: str, *, default_string_ids: Sequence[str] = DEFAULT_STRING_IDS) -> Tree:
    """Parse CATL source text into a tree.

    This is the main entry point. It never raises; check
    :attr:`Tree.diagnostics` or call :meth:`Tree.raise_for_errors`.

    Parameters
    ----------
    text : str
        The raw CATL source.
    default_string_ids : Sequence[str]
        String identifiers used when the source has no ``{...}`` header.

    Returns
    -------
    Tree
        Structured representation of the source.

    Examples
    --------
    >>> tree = parse('"Gmin7":3x332x:"Nice chord!"\\n')
    >>> [line.kind for line in tree.lines]
    ['HeaderLine', 'StatementLine']
    >>> chord = tree.lines[1].elements[0]
    >>> chord.name, chord.voicing, chord.annotation.text
    ('Gmin7', '3x332x', 'Nice chord!')
    """
    tokens, diagnostics = lex(text)
    return parse_tokens(tokens, diagnostics, default_string_ids=default_string_ids)
