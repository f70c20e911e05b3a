"""
Unit tests for link abbreviations (org_meta.links).

Tests the three format forms, first-placeholder-only substitution, and
the ``TYPE FORMAT`` line parser.
"""

from __future__ import annotations

import pytest

from org_meta.exceptions import ParseFailure
from org_meta.links import (
    compile_format,
    is_valid_link_type,
    parse_format,
    parse_link_format,
    percent_encode,
)
from org_meta.parsing import Cursor


class TestCompileFormat:
    """Tests for compile_format()."""

    def test_plain_placeholder(self):
        assert compile_format("https://example.com/%s")("abc") == "https://example.com/abc"

    def test_plain_placeholder_in_the_middle(self):
        assert compile_format("https://x.org/%s/info")("item") == "https://x.org/item/info"

    def test_url_encoded_placeholder(self):
        assert compile_format("search?q=%h")("a b") == "search?q=a%20b"

    def test_url_encoding_of_reserved_characters(self):
        assert compile_format("%h")("a/b&c") == "a%2Fb%26c"

    def test_append_without_placeholder(self):
        assert compile_format("prefix-")("x") == "prefix-x"

    def test_only_first_placeholder_is_replaced(self):
        assert compile_format("%s and %s")("X") == "X and %s"

    def test_plain_wins_over_encoded(self):
        """`%s` is looked for first, even when `%h` comes earlier."""
        assert compile_format("%h-%s")("a b") == "%h-a b"

    def test_other_specifiers_are_literal(self):
        assert compile_format("v=%d&p=")("1") == "v=%d&p=1"

    def test_empty_format_is_identity(self):
        assert compile_format("")("path") == "path"


class TestPercentEncode:
    """Tests for percent_encode()."""

    def test_unreserved_characters_untouched(self):
        assert percent_encode("Az09-_.~") == "Az09-_.~"

    def test_utf8(self):
        assert percent_encode("é") == "%C3%A9"


class TestParseLinkFormat:
    """Tests for parse_link_format() and parse_format()."""

    def test_type_and_format(self):
        cursor = Cursor("wiki   https://en.wikipedia.org/wiki/%s\nnext")
        link_type, formatter = parse_link_format(cursor)
        assert link_type == "wiki"
        assert formatter("Org") == "https://en.wikipedia.org/wiki/Org"
        assert cursor.text[cursor.pos:] == "next"

    def test_type_with_hyphen_and_underscore(self):
        link_type, _ = parse_link_format(Cursor("my-link_2 x\n"))
        assert link_type == "my-link_2"

    def test_type_must_start_with_letter(self):
        with pytest.raises(ParseFailure):
            parse_link_format(Cursor("2fa https://x\n"))

    def test_format_at_end_of_input(self):
        formatter = parse_format(Cursor("https://x/%s"))
        assert formatter("y") == "https://x/y"

    def test_type_without_format(self):
        link_type, formatter = parse_link_format(Cursor("bare\n"))
        assert link_type == "bare"
        assert formatter("thing") == "thing"


class TestIsValidLinkType:
    def test_valid(self):
        assert is_valid_link_type("gh")

    def test_invalid(self):
        assert not is_valid_link_type("-gh")
        assert not is_valid_link_type("g h")
