"""Tests for transform/robot.py, transform/edits.py and transform/rules.py."""

import pytest

from smartui_migrator.exceptions import UnsupportedLanguageError
from smartui_migrator.mappings.api import (
    OPTION_RULES,
    UNSUPPORTED_OPTION,
    WIDTHS_WARNING,
)
from smartui_migrator.models import Framework, Platform
from smartui_migrator.transform import SourceDialect, SyntaxTransformEngine, dialect_for
from smartui_migrator.transform.edits import EditBuffer, statement_span
from smartui_migrator.transform.robot import normalize_keyword, split_cells, transform_robot
from smartui_migrator.transform.rules import remap_options

ROBOT_SUITE = """\
*** Settings ***
Library    SeleniumLibrary
Suite Setup    Create Visual Build    Nightly

*** Test Cases ***
Home Page
    Open Browser    https://example.com    chrome
    Visual Snapshot    Home
    visual_snapshot    Footer
    Finish Visual Build
"""


class TestRobot:
    """Sauce Labs Visual keywords in Robot Framework suites."""

    def test_keywords_rewritten(self):
        """Snapshots are renamed and build keywords removed."""
        content, changes, warnings, count = transform_robot(ROBOT_SUITE, Platform.SAUCE_LABS)
        assert "    SmartUI Snapshot    Home\n" in content
        assert "    SmartUI Snapshot    Footer\n" in content
        assert "Create Visual Build" not in content
        assert "Finish Visual Build" not in content
        assert "    Open Browser    https://example.com    chrome\n" in content
        assert count == 2
        assert warnings == []
        assert {c.kind for c in changes} == {"rename", "remove"}

    def test_other_platforms_unsupported(self):
        """Only Sauce Labs has a Robot library to migrate."""
        content, changes, warnings, count = transform_robot(ROBOT_SUITE, Platform.PERCY)
        assert content == ROBOT_SUITE
        assert count == 0
        assert "not implemented for Percy" in warnings[0].message

    def test_engine_routes_robot(self):
        """The engine dispatches .robot files to the keyword variant."""
        engine = SyntaxTransformEngine()
        out = engine.transform(ROBOT_SUITE, Platform.SAUCE_LABS, Framework.ROBOT_FRAMEWORK, SourceDialect.ROBOT)
        assert out.snapshot_count == 2

    def test_cells(self):
        """Cells split on two spaces; a comment ends the row."""
        cells = split_cells("    Visual Snapshot    Home    # note")
        assert [c[2] for c in cells] == ["Visual Snapshot", "Home"]
        assert normalize_keyword("Visual_Snapshot") == normalize_keyword("visual snapshot")


class TestDialects:
    def test_by_extension(self):
        """Extensions pick the dialect."""
        assert dialect_for("a/b.spec.tsx") is SourceDialect.TSX
        assert dialect_for("Home.java") is SourceDialect.JAVA

    def test_unknown_extension(self):
        """Unhandled extensions raise UnsupportedLanguageError."""
        with pytest.raises(UnsupportedLanguageError):
            dialect_for("styles.css")


class TestEditBuffer:
    """Byte-range edits against the untouched source."""

    def test_edits_applied_back_to_front(self):
        """Offsets refer to the original source."""
        buffer = EditBuffer(b"abc def ghi")
        assert buffer.replace(0, 3, "ABCD")
        assert buffer.replace(8, 11, "G")
        assert buffer.apply() == b"ABCD def G"

    def test_overlap_rejected(self):
        """A colliding edit is refused."""
        buffer = EditBuffer(b"abcdef")
        assert buffer.replace(1, 4, "x")
        assert not buffer.replace(3, 5, "y")
        assert len(buffer) == 1

    def test_insert_lands_before_replacement(self):
        """An insertion at a replaced range's start stays in front of it."""
        buffer = EditBuffer(b"call();\n")
        buffer.replace(0, 6, "snap()")
        buffer.insert(0, "assert();\n")
        assert buffer.apply() == b"assert();\nsnap();\n"

    def test_statement_span_takes_whole_line(self):
        """A statement alone on its line is removed with the line."""
        source = b"a();\n    b();\nc();\n"
        assert statement_span(source, 9, 13) == (5, 14)
        assert statement_span(b"a(); b();\n", 5, 9) == (5, 9)


class TestRemapOptions:
    """Flat vendor options into SmartUI's nested shape."""

    def test_percy_options(self):
        """ignoreRegionSelectors nests; widths warns; unknown keys warn."""
        out, notes = remap_options(
            {"ignoreRegionSelectors": [".ad", ".banner"], "widths": [375], "percyCSS": "x"},
            OPTION_RULES[Platform.PERCY],
        )
        assert out == {"ignoreDOM": {"cssSelector": [".ad", ".banner"]}}
        assert notes[0] == WIDTHS_WARNING
        assert notes[1][0] == UNSUPPORTED_OPTION.format(key="percyCSS")

    def test_target_keys_pass_through(self):
        """Options already in SmartUI shape are kept."""
        out, notes = remap_options({"ignoreDOM": {"id": ["x"]}}, OPTION_RULES[Platform.PERCY])
        assert out == {"ignoreDOM": {"id": ["x"]}}
        assert notes == []

    def test_false_lossy_option_is_quiet(self):
        """fully: false loses nothing."""
        out, notes = remap_options({"fully": False}, OPTION_RULES[Platform.APPLITOOLS])
        assert out == {}
        assert notes == []
