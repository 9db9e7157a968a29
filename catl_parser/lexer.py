"""Position-tracking lexer for CATL source text.

This module converts raw text into a flat token sequence. Every token keeps
its source span (offset, line, column), which the parser threads through to
the tree nodes and diagnostics.
"""

from __future__ import annotations

import logging

from catl_parser.models import START, Diagnostic, Position, Severity, Span, Token, TokenKind

logger = logging.getLogger(__name__)

# Whitespace skipped silently between tokens (newline is a token of its own)
SKIPPED_WHITESPACE = frozenset(" \t\r")

# Characters that terminate an atom
DELIMITERS = frozenset('#{}|:+@"')

# Two-character tokens, checked before their single-character prefixes
DOUBLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "|:": "RepeatBegin",
    ":|": "RepeatEnd",
}

SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "{": "LBrace",
    "}": "RBrace",
    "|": "Bar",
    ":": "Colon",
    "+": "Plus",
    "@": "At",
}

# Escapes that collapse to the escaped character
KNOWN_ESCAPES = frozenset('\\"')


def is_atom_char(ch: str) -> bool:
    """Check if a character can be part of an atom.

    Examples
    --------
    >>> is_atom_char("x")
    True
    >>> is_atom_char(":")
    False
    >>> is_atom_char(" ")
    False
    """
    return bool(ch) and ch not in SKIPPED_WHITESPACE and ch != "\n" and ch not in DELIMITERS


def advance_position(pos: Position, chars: str) -> Position:
    """Return the position reached after scanning ``chars`` from ``pos``.

    Examples
    --------
    >>> advance_position(Position(0, 1, 1), "ab\\nc")
    Position(offset=4, line=2, col=2)
    """
    offset, line, col = pos.offset, pos.line, pos.col
    for ch in chars:
        offset += 1
        if ch == "\n":
            line += 1
            col = 1
        else:
            col += 1
    return Position(offset=offset, line=line, col=col)


class _Scanner:
    """Cursor over the source text that emits tokens and diagnostics."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = START
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    def peek(self, k: int = 0) -> str:
        index = self.pos.offset + k
        return self.text[index] if index < len(self.text) else ""

    def at_end(self) -> bool:
        return self.pos.offset >= len(self.text)

    def advance(self, n: int = 1) -> None:
        start = self.pos.offset
        self.pos = advance_position(self.pos, self.text[start : start + n])

    def emit(self, kind: TokenKind, start: Position, value: str | None = None) -> None:
        self.tokens.append(Token(kind=kind, span=Span(start, self.pos), value=value))

    def report(self, severity: Severity, message: str, span: Span) -> None:
        self.diagnostics.append(Diagnostic(severity=severity, message=message, span=span))

    def run(self) -> None:
        while not self.at_end():
            start = self.pos
            ch = self.peek()

            if ch == "#":
                self.skip_comment()
                continue

            if ch in SKIPPED_WHITESPACE:
                self.advance()
                continue

            if ch == "\n":
                self.advance()
                self.emit("Newline", start)
                continue

            pair = ch + self.peek(1)
            if pair in DOUBLE_CHAR_TOKENS:
                self.advance(2)
                self.emit(DOUBLE_CHAR_TOKENS[pair], start)
                continue

            if ch in SINGLE_CHAR_TOKENS:
                self.advance()
                self.emit(SINGLE_CHAR_TOKENS[ch], start)
                continue

            if ch == '"':
                self.scan_string()
                continue

            if is_atom_char(ch):
                self.scan_atom()
                continue

            # Anything else is skipped one character at a time
            self.advance()
            self.report("error", f"unexpected character {ch!r}", Span(start, self.pos))

        self.emit("EOF", self.pos)

    def skip_comment(self) -> None:
        while not self.at_end() and self.peek() != "\n":
            self.advance()

    def scan_atom(self) -> None:
        start = self.pos
        begin = start.offset
        while is_atom_char(self.peek()):
            self.advance()
        self.emit("Atom", start, self.text[begin : self.pos.offset])

    def scan_string(self) -> None:
        start = self.pos
        self.advance()  # opening quote
        chars: list[str] = []

        while True:
            c = self.peek()

            if c == '"':
                self.advance()
                self.emit("QString", start, "".join(chars))
                return

            if c in ("\n", ""):
                span = Span(start, self.pos)
                self.report("error", "unterminated string literal", span)
                self.emit("QString", start, "".join(chars))
                return

            if c == "\\":
                nxt = self.peek(1)
                if nxt and nxt in KNOWN_ESCAPES:
                    chars.append(nxt)
                    self.advance(2)
                    continue
                # Unknown escape: drop the backslash, keep the next character
                escape_start = self.pos
                escape_text = self.text[escape_start.offset : escape_start.offset + 2]
                span = Span(escape_start, advance_position(escape_start, escape_text))
                self.report("warning", f"unknown escape sequence {escape_text!r}", span)
                self.advance()
                continue

            chars.append(c)
            self.advance()


def lex(text: str) -> tuple[list[Token], list[Diagnostic]]:
    """Convert source text into tokens.

    Never raises. Malformed input produces diagnostics and the lexer keeps
    going; the result always ends with a single zero-width ``EOF`` token.

    Parameters
    ----------
    text : str
        The raw CATL source.

    Returns
    -------
    tuple[list[Token], list[Diagnostic]]
        Tokens in source order, and lexical diagnostics in scan order.

    Examples
    --------
    >>> tokens, diagnostics = lex("|: 5e :|")
    >>> [t.kind for t in tokens]
    ['RepeatBegin', 'Atom', 'RepeatEnd', 'EOF']
    >>> tokens[1].value
    '5e'
    >>> diagnostics
    []
    """
    scanner = _Scanner(text)
    scanner.run()
    logger.debug(
        "Lexed %d characters into %d tokens (%d diagnostics)",
        len(text),
        len(scanner.tokens),
        len(scanner.diagnostics),
    )
    return scanner.tokens, scanner.diagnostics
