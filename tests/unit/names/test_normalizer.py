"""Tests for person-name normalization."""

from __future__ import annotations

import pytest

from meritflow.names.normalizer import (
    DisplayStyle,
    NameOptions,
    format_for_display,
    get_initials,
    is_well_formatted,
    normalize_name,
    normalize_names,
    proper_case,
)


class TestCommaForm:
    def test_inverts_last_first(self):
        parsed = normalize_name("smith, john")
        assert parsed.first_name == "John"
        assert parsed.last_name == "Smith"
        assert parsed.display_name == "John Smith"

    def test_extra_given_names_become_middle(self):
        parsed = normalize_name("Smith, John Paul")
        assert parsed.middle_name == "Paul"
        assert parsed.full_name == "John Paul Smith"
        assert parsed.display_name == "John Smith"

    def test_irregular_spacing_around_comma(self):
        assert normalize_name("  DOE ,JANE  ").display_name == "Jane Doe"

    def test_suffix_after_surname(self):
        parsed = normalize_name("Smith Jr., John")
        assert parsed.last_name == "Smith Jr."
        assert parsed.first_name == "John"


class TestSpaceForm:
    def test_two_tokens(self):
        parsed = normalize_name("jane doe")
        assert (parsed.first_name, parsed.last_name) == ("Jane", "Doe")
        assert parsed.middle_name is None

    def test_single_token_is_first_name(self):
        parsed = normalize_name("Cher")
        assert parsed.first_name == "Cher"
        assert parsed.last_name == ""
        assert parsed.display_name == "Cher"

    def test_interior_folds_into_last_name_by_default(self):
        parsed = normalize_name("Mary Ann Smith")
        assert parsed.first_name == "Mary"
        assert parsed.last_name == "Ann Smith"

    def test_preserve_middle_name(self):
        parsed = normalize_name("Mary Ann Smith", NameOptions(preserve_middle_name=True))
        assert parsed.middle_name == "Ann"
        assert parsed.last_name == "Smith"

    def test_title_prefix_removed(self):
        assert normalize_name("Dr. Jane Doe").display_name == "Jane Doe"

    @pytest.mark.parametrize("raw, last", [
        ("John Smith Jr.", "Smith Jr."),
        ("John Smith III", "Smith III"),
        ("Jane Doe phd", "Doe PhD"),
    ])
    def test_suffixes_formatted(self, raw, last):
        assert normalize_name(raw).last_name == last

    def test_suffix_handling_can_be_disabled(self):
        parsed = normalize_name("John Smith Jr", NameOptions(handle_suffixes=False))
        assert parsed.last_name == "Smith Jr"

    def test_capitalization_can_be_disabled(self):
        parsed = normalize_name("john smith", NameOptions(capitalize_names=False))
        assert parsed.display_name == "john smith"


class TestProperCase:
    @pytest.mark.parametrize("raw, expected", [
        ("MCDONALD", "McDonald"),
        ("o'brien", "O'Brien"),
        ("macdonald", "MacDonald"),
        ("mack", "Mack"),
        ("mary-jane", "Mary-Jane"),
    ])
    def test_cases(self, raw, expected):
        assert proper_case(raw) == expected


class TestStructuredInput:
    def test_parts_win_without_comma(self):
        parsed = normalize_name({"first_name": "JOHN", "last_name": "SMITH", "name": "Johnny S"})
        assert parsed.display_name == "John Smith"

    def test_comma_name_wins_over_parts(self):
        parsed = normalize_name({"name": "Smith, John", "first_name": "J"})
        assert parsed.display_name == "John Smith"

    def test_parts_only(self):
        assert normalize_name({"first_name": "ann"}).first_name == "Ann"

    @pytest.mark.parametrize("value", [None, "", "   ", {}])
    def test_empty_input_gives_empty_name(self, value):
        assert normalize_name(value).display_name == ""


class TestHelpers:
    def test_normalize_names_batch(self):
        assert [n.display_name for n in normalize_names(["doe, jane", "bob lee"])] == ["Jane Doe", "Bob Lee"]

    @pytest.mark.parametrize("name, expected", [
        ("John Smith", True),
        ("john smith", False),
        ("Smith, John", False),
        ("John", False),
    ])
    def test_is_well_formatted(self, name, expected):
        assert is_well_formatted(name) is expected

    def test_initials(self):
        assert get_initials("smith, john") == "J.S"

    def test_display_styles(self):
        assert format_for_display("Smith, John Paul", DisplayStyle.LAST_FIRST) == "Smith, John"
        assert format_for_display("Smith, John Paul", "first-middle-last") == "John Paul Smith"
        assert format_for_display("Smith, John Paul", DisplayStyle.INITIALS) == "J.S"
        assert format_for_display("Smith, John Paul") == "John Smith"
