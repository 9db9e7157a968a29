"""Tests for the CATL lexer."""

import pytest

from catl_parser.lexer import advance_position, is_atom_char, lex
from catl_parser.models import Position


def kinds(text: str) -> list[str]:
    tokens, _ = lex(text)
    return [t.kind for t in tokens]


class TestLexStructural:
    """Structural token tests."""

    def test_single_char_tokens(self) -> None:
        """Test every single-character token."""
        assert kinds("{ } | : + @") == ["LBrace", "RBrace", "Bar", "Colon", "Plus", "At", "EOF"]

    def test_repeat_tokens_preferred(self) -> None:
        """Test that |: and :| win over their one-character prefixes."""
        assert kinds("|: :|") == ["RepeatBegin", "RepeatEnd", "EOF"]

    def test_repeat_begin_without_space(self) -> None:
        """Test greedy matching inside a dense run."""
        assert kinds("|:X554X5:|") == ["RepeatBegin", "Atom", "RepeatEnd", "EOF"]

    def test_bar_then_colon_separated(self) -> None:
        """Test a bar followed by a spaced colon stays two tokens."""
        assert kinds("| :") == ["Bar", "Colon", "EOF"]

    def test_newline_token(self) -> None:
        """Test newline emits a token spanning one character."""
        tokens, _ = lex("a\nb")
        newline = tokens[1]
        assert newline.kind == "Newline"
        assert newline.span.start == Position(1, 1, 2)
        assert newline.span.end == Position(2, 2, 1)


class TestLexAtoms:
    """Atom scanning tests."""

    def test_atom_values(self) -> None:
        """Test atoms carry their literal text."""
        tokens, _ = lex("3x332x 5e X(10)9(12)XX")
        assert [t.value for t in tokens if t.kind == "Atom"] == ["3x332x", "5e", "X(10)9(12)XX"]

    def test_atom_stops_at_delimiters(self) -> None:
        """Test atoms are split at structural characters."""
        tokens, _ = lex("3@1+0@4")
        assert [(t.kind, t.value) for t in tokens] == [
            ("Atom", "3"),
            ("At", None),
            ("Atom", "1"),
            ("Plus", None),
            ("Atom", "0"),
            ("At", None),
            ("Atom", "4"),
            ("EOF", None),
        ]

    @pytest.mark.parametrize(
        ("ch", "expected"),
        [
            ("a", True),
            ("9", True),
            ("(", True),
            ("é", True),
            ("\f", True),
            ("\u00a0", True),
            (" ", False),
            ("\n", False),
            ("#", False),
            ('"', False),
            ("", False),
        ],
    )
    def test_is_atom_char(self, ch: str, expected: bool) -> None:
        """Test the atom character class."""
        assert is_atom_char(ch) is expected


class TestLexSkipping:
    """Whitespace and comment handling."""

    def test_whitespace_skipped(self) -> None:
        """Test spaces, tabs and carriage returns produce no tokens."""
        assert kinds(" \t\r5e \t") == ["Atom", "EOF"]

    def test_comment_skipped(self) -> None:
        """Test comments run to end of line but keep the newline."""
        assert kinds("5e # a comment | :\n0A") == ["Atom", "Newline", "Atom", "EOF"]

    def test_comment_at_eof(self) -> None:
        """Test a comment without trailing newline."""
        assert kinds("# only a comment") == ["EOF"]


class TestLexStrings:
    """Quoted string tests."""

    def test_simple_string(self) -> None:
        """Test a closed string decodes its contents."""
        tokens, diagnostics = lex('"Nice chord!"')
        assert tokens[0].kind == "QString"
        assert tokens[0].value == "Nice chord!"
        assert tokens[0].span.end.offset == 13
        assert diagnostics == []

    def test_string_may_contain_delimiters(self) -> None:
        """Test delimiters inside quotes are not tokens."""
        tokens, _ = lex('"a|b:c#d"')
        assert [t.kind for t in tokens] == ["QString", "EOF"]
        assert tokens[0].value == "a|b:c#d"

    def test_known_escapes(self) -> None:
        """Test backslash and quote escapes collapse."""
        tokens, diagnostics = lex(r'"say \"hi\" \\ ok"')
        assert tokens[0].value == 'say "hi" \\ ok'
        assert diagnostics == []

    def test_unknown_escape_warns(self) -> None:
        """Test an unknown escape keeps the character and warns."""
        tokens, diagnostics = lex(r'"a\qb"')
        assert tokens[0].value == "aqb"
        assert len(diagnostics) == 1
        warning = diagnostics[0]
        assert warning.severity == "warning"
        assert warning.message.startswith("unknown escape sequence")
        assert warning.span.start.offset == 2
        assert warning.span.end.offset == 4

    def test_unterminated_at_newline(self) -> None:
        """Test an unterminated string stops at the newline."""
        tokens, diagnostics = lex('"open\n5e')
        assert [t.kind for t in tokens] == ["QString", "Newline", "Atom", "EOF"]
        assert tokens[0].value == "open"
        assert tokens[0].span.end.offset == 5
        assert len(diagnostics) == 1
        assert diagnostics[0].severity == "error"
        assert diagnostics[0].message == "unterminated string literal"
        assert diagnostics[0].span == tokens[0].span

    def test_unterminated_at_eof(self) -> None:
        """Test an unterminated string at end of input."""
        tokens, diagnostics = lex('"open')
        assert [t.kind for t in tokens] == ["QString", "EOF"]
        assert tokens[0].value == "open"
        assert [d.severity for d in diagnostics] == ["error"]

    def test_backslash_at_eof(self) -> None:
        """Test a trailing backslash warns and then reports unterminated."""
        _, diagnostics = lex('"a\\')
        assert [d.severity for d in diagnostics] == ["warning", "error"]
        assert diagnostics[0].span.end.offset == 3


class TestLexUnusualWhitespace:
    """Whitespace outside space, tab, CR and newline."""

    @pytest.mark.parametrize("ch", ["\f", "\v", "\u00a0"])
    def test_part_of_atom(self, ch: str) -> None:
        """Test other whitespace characters are atom text, not errors."""
        tokens, diagnostics = lex(f"5e{ch}0A")
        assert diagnostics == []
        assert [(t.kind, t.value) for t in tokens] == [("Atom", f"5e{ch}0A"), ("EOF", None)]

    def test_no_break_space_after_voicing(self) -> None:
        """Test a trailing no-break space stays inside the voicing atom."""
        tokens, diagnostics = lex("3x332x\u00a0\n")
        assert diagnostics == []
        assert tokens[0].value == "3x332x\u00a0"
        assert tokens[1].kind == "Newline"


class TestLexInvariants:
    """Properties that hold for any input."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "\n",
            "{eBGDAE}\n0A:\"When\" 0D 5e:\"you\"\n",
            '"unterminated',
            '"bad \\q escape"',
            "\f\v\u00a0",
            "|::|||::",
            "# comment only",
            "a\r\nb\r\n",
        ],
    )
    def test_single_zero_width_eof(self, text: str) -> None:
        """Test the stream ends with exactly one zero-width EOF."""
        tokens, _ = lex(text)
        assert [t.kind for t in tokens].count("EOF") == 1
        assert tokens[-1].kind == "EOF"
        assert tokens[-1].span.width == 0
        assert tokens[-1].span.start.offset == len(text)

    @pytest.mark.parametrize(
        "text",
        [
            "|: X554X5 | X554X5 :|\n",
            '"Gmin7":3x332x:"Nice chord!"\n',
            "3@1+0@4\n\n{EADG}",
        ],
    )
    def test_tokens_do_not_overlap(self, text: str) -> None:
        """Test token spans are ordered and disjoint."""
        tokens, _ = lex(text)
        for before, after in zip(tokens, tokens[1:]):
            assert before.span.end.offset <= after.span.start.offset

    def test_line_and_column_tracking(self) -> None:
        """Test positions advance across lines."""
        tokens, _ = lex("{eB}\n  5e")
        atom = tokens[-2]
        assert atom.value == "5e"
        assert atom.span.start == Position(offset=7, line=2, col=3)
        assert atom.span.end == Position(offset=9, line=2, col=5)

    def test_advance_position(self) -> None:
        """Test position arithmetic over a newline."""
        assert advance_position(Position(0, 1, 1), "ab\nc") == Position(4, 2, 2)
