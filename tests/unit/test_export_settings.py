"""
Unit tests for #+OPTIONS: handling (org_meta.export_settings).
"""

from __future__ import annotations

from org_meta.export_settings import (
    ExportSettings,
    apply_export_options,
    elisp_boolean,
    parse_export_settings,
)
from org_meta.parsing import Cursor


class TestElispBoolean:
    def test_false_values(self):
        assert not elisp_boolean("nil")
        assert not elisp_boolean("NIL")
        assert not elisp_boolean("{}")
        assert not elisp_boolean("()")

    def test_true_values(self):
        assert elisp_boolean("t")
        assert elisp_boolean("yes")


class TestApplyExportOptions:
    """Tests for apply_export_options()."""

    def test_defaults(self):
        settings = ExportSettings()
        assert settings.with_author and settings.with_creator and settings.with_email
        assert settings.headline_levels == 3
        assert settings.drawers == ["LOGBOOK"]
        assert settings.drawers_mode == "exclude"

    def test_metadata_flags(self):
        settings = apply_export_options(ExportSettings(), "author:nil creator:nil email:t")
        assert settings.with_author is False
        assert settings.with_creator is False
        assert settings.with_email is True

    def test_symbol_keys(self):
        settings = apply_export_options(ExportSettings(), "^:{} ':nil *:nil -:nil \\n:t")
        assert settings.sub_superscripts is False
        assert settings.smart_quotes is False
        assert settings.emphasized_text is False
        assert settings.special_strings is False
        assert settings.preserve_breaks is True

    def test_headline_levels(self):
        assert apply_export_options(ExportSettings(), "H:5").headline_levels == 5

    def test_malformed_value_leaves_setting(self):
        assert apply_export_options(ExportSettings(), "H:many").headline_levels == 3

    def test_archived_trees(self):
        assert apply_export_options(ExportSettings(), "arch:nil").archived_trees == "no-export"
        assert apply_export_options(ExportSettings(), "arch:t").archived_trees == "export"
        assert apply_export_options(ExportSettings(), "arch:headline").archived_trees == "headline"

    def test_drawer_exclusion_list_with_spaces(self):
        settings = apply_export_options(
            ExportSettings(), 'd:(not "LOGBOOK" "NOTES") author:nil'
        )
        assert settings.drawers_mode == "exclude"
        assert settings.drawers == ["LOGBOOK", "NOTES"]
        assert settings.with_author is False

    def test_drawer_inclusion_list(self):
        settings = apply_export_options(ExportSettings(), 'd:("PROPERTIES")')
        assert settings.drawers_mode == "include"
        assert settings.drawers == ["PROPERTIES"]

    def test_ignored_and_unknown_options(self):
        settings = apply_export_options(ExportSettings(), "toc:2 num:nil frobnicate:yes stray")
        assert settings == ExportSettings()

    def test_stray_word_followed_by_tab(self):
        settings = apply_export_options(ExportSettings(), "foo\tauthor:nil")
        assert settings.with_author is False

    def test_drawer_names_with_punctuation(self):
        settings = apply_export_options(ExportSettings(), 'd:("MY-DRAWER" "notes.2")')
        assert settings.drawers_mode == "include"
        assert settings.drawers == ["MY-DRAWER", "notes.2"]

    def test_input_not_modified(self):
        original = ExportSettings()
        apply_export_options(original, "author:nil")
        assert original.with_author is True

    def test_later_option_wins(self):
        assert apply_export_options(ExportSettings(), "email:nil email:t").with_email is True


class TestParseExportSettings:
    def test_updates_state(self, state):
        cursor = Cursor("creator:nil H:2\nnext")
        parse_export_settings(cursor, state)
        assert state.export_settings.with_creator is False
        assert state.export_settings.headline_levels == 2
        assert cursor.text[cursor.pos:] == "next"

    def test_options_accumulate_across_lines(self, state):
        parse_export_settings(Cursor("author:nil\n"), state)
        parse_export_settings(Cursor("email:nil\n"), state)
        assert state.export_settings.with_author is False
        assert state.export_settings.with_email is False
