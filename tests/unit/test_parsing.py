"""
Unit tests for the cursor and backtracking combinators (org_meta.parsing).
"""

from __future__ import annotations

import re

import pytest

from org_meta.exceptions import ParseFailure
from org_meta.parsing import Cursor, attempt, choice
from org_meta.state import Deferred
from org_meta.values import MetaString

_WORD_RE = re.compile(r"[a-z]+")


class TestCursor:
    """Tests for Cursor consumers."""

    def test_match_advances(self):
        cursor = Cursor("abc def")
        assert cursor.match(_WORD_RE).group(0) == "abc"
        assert cursor.pos == 3

    def test_match_failure_keeps_position(self):
        cursor = Cursor("123")
        with pytest.raises(ParseFailure, match="at offset 0"):
            cursor.match(_WORD_RE)
        assert cursor.pos == 0

    def test_skip_spaces_only_horizontal(self):
        cursor = Cursor(" \t \nx")
        assert cursor.skip_spaces() == " \t "
        assert cursor.peek() == "\n"

    def test_rest_of_line_stops_before_terminator(self):
        cursor = Cursor("value\r\nnext")
        assert cursor.rest_of_line() == "value"
        assert cursor.peek(2) == "\r\n"

    def test_skip_line_end_crlf(self):
        cursor = Cursor("\r\nx")
        cursor.skip_line_end()
        assert cursor.peek() == "x"

    def test_skip_line_end_at_eof(self):
        cursor = Cursor("")
        cursor.skip_line_end()
        assert cursor.at_eof()

    def test_any_line(self):
        cursor = Cursor("one\ntwo\n")
        assert cursor.any_line() == "one"
        assert cursor.any_line() == "two"
        assert cursor.at_eof()

    def test_any_line_needs_newline(self):
        with pytest.raises(ParseFailure):
            Cursor("last").any_line()

    def test_newline(self):
        cursor = Cursor("x")
        with pytest.raises(ParseFailure):
            cursor.newline()


class TestAttempt:
    """Tests for attempt(): failures leave no trace."""

    def test_success_keeps_effects(self, state):
        def parser(cursor, st):
            st.set_meta("k", Deferred.pure(MetaString("v")))
            return cursor.match(_WORD_RE).group(0)

        cursor = Cursor("word")
        assert attempt(parser, cursor, state) == "word"
        assert cursor.at_eof()
        assert "k" in state.meta

    def test_failure_rolls_back_cursor_and_state(self, state):
        def parser(cursor, st):
            cursor.match(_WORD_RE)
            st.set_meta("k", Deferred.pure(MetaString("v")))
            st.export_settings = st.export_settings.model_copy(update={"with_author": False})
            raise cursor.fail("late failure")

        cursor = Cursor("word rest")
        with pytest.raises(ParseFailure):
            attempt(parser, cursor, state)
        assert cursor.pos == 0
        assert state.meta == {}
        assert state.export_settings.with_author is True

    def test_rollback_of_in_place_mutation(self, state):
        def parser(cursor, st):
            st.register_todo_sequence([])
            st.export_settings.headline_levels = 9
            raise cursor.fail()

        with pytest.raises(ParseFailure):
            attempt(parser, Cursor(""), state)
        assert state.todo_sequences == []
        assert state.export_settings.headline_levels == 3


class TestChoice:
    """Tests for choice()."""

    def test_first_success_wins(self, state):
        parser = choice(lambda c, s: "first", lambda c, s: "second")
        assert parser(Cursor(""), state) == "first"

    def test_falls_through_failures(self, state):
        def failing(cursor, st):
            cursor.match(_WORD_RE)
            st.set_meta("bad", Deferred.pure(MetaString("x")))
            raise cursor.fail()

        def digits(cursor, st):
            cursor.skip_spaces()
            return cursor.rest_of_line()

        cursor = Cursor("abc 1")
        assert choice(failing, digits)(cursor, state) == "abc 1"
        assert "bad" not in state.meta

    def test_all_fail(self, state):
        def failing(cursor, st):
            raise cursor.fail()

        with pytest.raises(ParseFailure, match="no alternative matched"):
            choice(failing, failing)(Cursor("x"), state)
