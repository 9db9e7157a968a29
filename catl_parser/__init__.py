"""Parser for CATL, a line-oriented chord and tab notation.

This library converts CATL source text into a span-annotated syntax tree
of headers, chord diagrams, tab events, bars and repeats, along with
diagnostics for malformed input. Parsing never raises.

Examples
--------
>>> from catl_parser import parse

>>> tree = parse('{eBGDAE}\\n|: "G":320003 | 3@1+0@4:"fall in love" :|\\n')
>>> [line.kind for line in tree.lines]
['HeaderLine', 'StatementLine']
>>> [e.kind for e in tree.lines[1].elements]
['RepeatBegin', 'ChordSpec', 'Bar', 'EventSpec', 'RepeatEnd']
>>> tree.ok
True

>>> # Malformed input still yields a tree
>>> tree = parse('"G":320003:"oops\\n')
>>> [str(d) for d in tree.diagnostics]
['1:12: error: unterminated string literal']
"""

from catl_parser.errors import CatlSyntaxError
from catl_parser.lexer import lex
from catl_parser.models import (
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
    Position,
    RepeatBegin,
    RepeatEnd,
    Severity,
    Span,
    StatementLine,
    Token,
    TokenKind,
    Tree,
)
from catl_parser.parser import DEFAULT_STRING_IDS, ensure_header, parse, parse_tokens
from catl_parser.query import header_in_scope, iter_elements, iter_events, resolve_string_id

__all__ = [
    "DEFAULT_STRING_IDS",
    "Bar",
    "CatlSyntaxError",
    "ChordSpec",
    "Diagnostic",
    "Element",
    "EmptyLine",
    "Event",
    "EventGroup",
    "EventSpec",
    "Header",
    "HeaderLine",
    "IndexedEvent",
    "Label",
    "Line",
    "NamedEvent",
    "Position",
    "RepeatBegin",
    "RepeatEnd",
    "Severity",
    "Span",
    "StatementLine",
    "Token",
    "TokenKind",
    "Tree",
    "ensure_header",
    "header_in_scope",
    "iter_elements",
    "iter_events",
    "lex",
    "parse",
    "parse_tokens",
    "resolve_string_id",
]
