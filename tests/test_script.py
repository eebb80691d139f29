"""Tests for script parsing: sections on blank lines, points on sentences."""

from scriptsync.core.ir import Section
from scriptsync.core.script import (
    extract_points,
    extract_points_from_sections,
    parse_script_into_sections,
    split_section,
)


class TestParseScriptIntoSections:
    def test_blank_lines_separate_sections(self):
        script = "Intro line.\n\nMiddle part.\nStill middle.\n  \n\nOutro."
        sections = parse_script_into_sections(script)
        assert [s.id for s in sections] == ["section1", "section2", "section3"]
        assert sections[1].text == "Middle part.\nStill middle."
        assert all(s.points == [] for s in sections)

    def test_surrounding_whitespace_dropped(self):
        sections = parse_script_into_sections("\n\n   Only one.   \n\n\n")
        assert [s.text for s in sections] == ["Only one."]

    def test_empty_script(self):
        assert parse_script_into_sections("") == []
        assert parse_script_into_sections("\n \n") == []


class TestSplitSection:
    def test_sentence_terminators_kept(self):
        assert split_section("Hello there. How are you? Great!") == [
            "Hello there.",
            "How are you?",
            "Great!",
        ]

    def test_no_terminator(self):
        assert split_section("just one fragment") == ["just one fragment"]

    def test_terminator_without_space_does_not_split(self):
        assert split_section("Version 2.5 is out. Try it.") == ["Version 2.5 is out.", "Try it."]

    def test_newlines_split_like_spaces(self):
        assert split_section("One.\nTwo.") == ["One.", "Two."]

    def test_blank(self):
        assert split_section("   ") == []


class TestExtractPoints:
    def test_returns_copy_with_points(self):
        section = Section(id="section1", text="A. B.")
        result = extract_points(section)
        assert result.points == ["A.", "B."]
        assert section.points == []

    def test_many_sections(self):
        sections = parse_script_into_sections("A. B.\n\nC.")
        result = extract_points_from_sections(sections)
        assert [s.points for s in result] == [["A.", "B."], ["C."]]
