"""Tests for tree query helpers."""

import pytest

from catl_parser import parse
from catl_parser.models import START, Header, IndexedEvent, NamedEvent, Span
from catl_parser.query import header_in_scope, iter_elements, iter_events, resolve_string_id

SPAN = Span.empty_at(START)


class TestIterElements:
    """Test element and event traversal."""

    def test_elements_in_order(self) -> None:
        """Test elements are yielded with their line index."""
        tree = parse("| X554X5\n\n5e :|\n")
        assert [(i, e.kind) for i, e in iter_elements(tree)] == [
            (1, "Bar"),
            (1, "ChordSpec"),
            (3, "EventSpec"),
            (3, "RepeatEnd"),
        ]

    def test_events_flattened(self) -> None:
        """Test events from every group are yielded."""
        tree = parse("3@1+0@4 5e\n0A\n")
        events = [(i, e.kind) for i, e in iter_events(tree)]
        assert events == [
            (1, "IndexedEvent"),
            (1, "IndexedEvent"),
            (1, "NamedEvent"),
            (2, "NamedEvent"),
        ]

    def test_no_elements(self) -> None:
        """Test an empty tree yields nothing."""
        assert list(iter_elements(parse(""))) == []


class TestHeaderInScope:
    """Test header lookup."""

    def test_default_header_in_scope(self) -> None:
        """Test header-less input resolves to the default header."""
        tree = parse("5e\n0A")
        header = header_in_scope(tree, 2)
        assert header is not None
        assert header.string_ids == ("e", "B", "G", "D", "A", "E")

    def test_nearest_preceding_header(self) -> None:
        """Test a later header replaces an earlier one."""
        tree = parse("{eBGDAE}\n5e\n{EADG}\n0A\n")
        assert header_in_scope(tree, 1).string_ids == ("e", "B", "G", "D", "A", "E")
        assert header_in_scope(tree, 3).string_ids == ("E", "A", "D", "G")

    def test_no_header_before_line(self) -> None:
        """Test lines before the only header have none in scope."""
        tree = parse("5e\n{EADG}\n")
        assert header_in_scope(tree, 0) is None

    def test_out_of_range(self) -> None:
        """Test bad line indices raise."""
        with pytest.raises(IndexError):
            header_in_scope(parse("5e"), 5)


class TestResolveStringId:
    """Test string resolution for events."""

    HEADER = Header(string_ids=("e", "B", "G", "D", "A", "E"), span=SPAN)

    def test_named_event(self) -> None:
        """Test named events resolve to their own identifier."""
        event = NamedEvent(fret=5, string_id="e", span=SPAN)
        assert resolve_string_id(event, None) == "e"

    @pytest.mark.parametrize(("index", "expected"), [(1, "e"), (4, "D"), (6, "E"), (0, None), (7, None), (None, None)])
    def test_indexed_event(self, index: int | None, expected: str | None) -> None:
        """Test indexed events look up the header, 1-based."""
        event = IndexedEvent(fret=3, string_index=index, span=SPAN)
        assert resolve_string_id(event, self.HEADER) == expected

    def test_indexed_without_header(self) -> None:
        """Test indexed events need a header."""
        event = IndexedEvent(fret=3, string_index=1, span=SPAN)
        assert resolve_string_id(event, None) is None

    def test_against_parsed_header(self) -> None:
        """Test resolution against a header from source."""
        tree = parse("{EADG}\n2@2+2@3")
        header = header_in_scope(tree, 1)
        assert [resolve_string_id(e, header) for _, e in iter_events(tree)] == ["A", "D"]
