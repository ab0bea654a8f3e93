"""Tests for searchable and suggestive selects."""

from app.services.selection import (
    TARGET_ROLE_SUGGESTIONS,
    SuggestiveList,
    cap_items,
    filter_options,
    parse_items,
)

OPTIONS = [
    {"value": "s1", "label": "Ada Lovelace"},
    {"value": "s2", "label": "Grace Hopper"},
    {"value": "s3", "label": "Alan Turing"},
]


class TestFilterOptions:

    def test_case_insensitive_substring(self):
        assert [o["value"] for o in filter_options(OPTIONS, "a")] == ["s1", "s2", "s3"]
        assert [o["value"] for o in filter_options(OPTIONS, "HOP")] == ["s2"]

    def test_empty_term_returns_everything(self):
        assert filter_options(OPTIONS, "") == OPTIONS


class TestSuggestiveList:

    def test_parse_comma_separated(self):
        assert parse_items(" Data Scientist, ,Product Manager ") == ["Data Scientist", "Product Manager"]
        assert parse_items(None) == []

    def test_never_exceeds_cap_over_edit_sequence(self):
        items = SuggestiveList(suggestions=TARGET_ROLE_SUGGESTIONS, max_items=3)
        edits = [
            ("add", "Software Engineer"),
            ("add", "Data Scientist"),
            ("add", "Robot Whisperer"),
            ("add", "Product Manager"),
            ("remove", "Data Scientist"),
            ("add", "UX Designer"),
            ("add", "Technical Writer"),
            ("add", "Software Engineer"),
        ]
        for action, entry in edits:
            getattr(items, action)(entry)
            assert len(items.items) <= 3

        assert items.items == ["Software Engineer", "Robot Whisperer", "UX Designer"]

    def test_duplicates_and_blanks_ignored(self):
        items = SuggestiveList(max_items=3)
        assert items.add("Backend Developer")
        assert not items.add("Backend Developer")
        assert not items.add("   ")
        assert items.items == ["Backend Developer"]

    def test_custom_entries(self):
        items = SuggestiveList(suggestions=TARGET_ROLE_SUGGESTIONS)
        assert items.is_custom("Chief Tea Officer")
        assert not items.is_custom("software engineer")

    def test_suggestions_exclude_selected(self):
        items = SuggestiveList(["Frontend Developer"], TARGET_ROLE_SUGGESTIONS, max_items=3)
        matches = items.matching_suggestions("developer")
        assert "Frontend Developer" not in matches
        assert "Backend Developer" in matches

    def test_from_text_caps(self):
        items = SuggestiveList.from_text("a, b, c, d, e", max_items=3)
        assert items.to_text() == "a, b, c"
        assert items.is_full

    def test_cap_items(self):
        assert cap_items(["x", "y", "x", "z", "w"], 3) == ["x", "y", "z"]
        assert cap_items(None, 3) == []
