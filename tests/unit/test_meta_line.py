"""
Unit tests for #+KEY: line handling (org_meta.meta_line).

Tests the directive-first dispatch, the declaration fallback, and the
guarantee that a failed line leaves cursor and state untouched.
"""

from __future__ import annotations

import logging

import pytest

from org_meta.exceptions import ParseFailure, ParsingError
from org_meta.inlines import Str
from org_meta.meta_line import meta_key, meta_line
from org_meta.parsing import Cursor
from org_meta.todo import TodoMarker, TodoState
from org_meta.values import MetaInlines, MetaString


def _read(state, text: str) -> Cursor:
    cursor = Cursor(text)
    assert meta_line(cursor, state) == []
    return cursor


class TestMetaKey:
    def test_lowercased(self):
        cursor = Cursor("TITLE:   x")
        assert meta_key(cursor) == "title"
        assert cursor.peek() == "x"

    def test_missing_colon(self):
        with pytest.raises(ParseFailure):
            meta_key(Cursor("TITLE x"))


class TestDeclarations:
    """Tests for lines read as metadata declarations."""

    def test_title(self, state):
        cursor = _read(state, "#+TITLE: Hello\nbody")
        assert state.resolved_meta() == {"title": MetaInlines([Str("Hello")])}
        assert cursor.text[cursor.pos:] == "body"

    def test_indented_line(self, state):
        _read(state, "  \t#+title: x\n")
        assert "title" in state.meta

    def test_mixed_case_key(self, state):
        _read(state, "#+LaTeX_Class: report\n")
        assert state.resolved_meta() == {"documentclass": MetaString("report")}

    def test_arbitrary_key(self, state):
        _read(state, "#+ANYTHING: some value\n")
        assert state.resolved_meta() == {"anything": MetaString("some value")}

    def test_empty_value(self, state):
        _read(state, "#+DESCRIPTION:\n")
        assert state.resolved_meta() == {"description": MetaString("")}


class TestDirectives:
    """Tests for lines read as state-changing directives."""

    def test_link_registers_formatter_and_no_meta(self, state):
        _read(state, "#+LINK: wiki https://w/%s\n")
        assert state.link_formatters["wiki"]("Org") == "https://w/Org"
        assert state.meta == {}

    def test_later_link_replaces_earlier(self, state):
        _read(state, "#+LINK: gh https://old/%s\n")
        _read(state, "#+LINK: gh https://new/%s\n")
        assert state.link_formatters["gh"]("x") == "https://new/x"

    def test_options(self, state):
        _read(state, "#+OPTIONS: author:nil\n")
        assert state.export_settings.with_author is False
        assert state.meta == {}

    @pytest.mark.parametrize("key", ["TODO", "SEQ_TODO", "TYP_TODO", "todo"])
    def test_todo_variants(self, state, key):
        _read(state, f"#+{key}: OPEN | CLOSED\n")
        assert state.todo_sequences == [
            [TodoMarker(TodoState.TODO, "OPEN"), TodoMarker(TodoState.DONE, "CLOSED")]
        ]
        assert state.meta == {}

    def test_link_at_end_of_input(self, state):
        _read(state, "#+LINK: gh https://github.com/")
        assert state.link_formatters["gh"]("x") == "https://github.com/x"


class TestFallback:
    """Tests for directives that fall back to declarations."""

    def test_empty_todo_becomes_declaration(self, state, caplog):
        with caplog.at_level(logging.WARNING, logger="org_meta.meta_line"):
            _read(state, "#+TODO:\n")
        assert state.todo_sequences == []
        assert state.resolved_meta() == {"todo": MetaString("")}
        assert "#+todo:" in caplog.text

    def test_invalid_link_type_becomes_declaration(self, state):
        _read(state, "#+LINK: 9lives http://x\n")
        assert state.link_formatters == {}
        assert state.resolved_meta() == {"link": MetaString("9lives http://x")}


class TestFailures:
    """Tests for lines that are not meta lines at all."""

    def test_not_at_line_start_marker(self, state):
        with pytest.raises(ParsingError):
            meta_line(Cursor("TITLE: x\n"), state)

    def test_no_key(self, state):
        cursor = Cursor("#+ no key here\n")
        with pytest.raises(ParseFailure):
            meta_line(cursor, state)
        assert cursor.pos == 0
        assert state.meta == {}

    def test_declaration_without_newline_rolls_back(self, state):
        cursor = Cursor("#+TITLE: unterminated")
        with pytest.raises(ParseFailure):
            meta_line(cursor, state)
        assert cursor.pos == 0
        assert state.meta == {}

    def test_block_marker_without_colon(self, state):
        with pytest.raises(ParseFailure):
            meta_line(Cursor("#+BEGIN_SRC python\n"), state)
