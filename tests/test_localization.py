"""Tests for localized field selection."""

import pytest

from airstats.localization import (
    CANONICAL_LANGUAGE, SUPPORTED_LANGUAGES, collect_translations, field_candidates,
    localized_field, localized_value, normalize_language, resolve_field,
)


class TestNormalizeLanguage:
    """Test cases for language code normalization."""

    def test_uppercases_supported_codes(self):
        assert normalize_language("de") == "DE"
        assert normalize_language(" Fr ") == "FR"

    @pytest.mark.parametrize("lang", [None, "", "xx", "english", "D"])
    def test_falls_back_to_english(self, lang):
        assert normalize_language(lang) == CANONICAL_LANGUAGE

    def test_supported_set(self):
        assert "EN" in SUPPORTED_LANGUAGES
        assert len(SUPPORTED_LANGUAGES) == len(set(SUPPORTED_LANGUAGES)) == 26


class TestResolveField:
    """Test cases for field key resolution."""

    def test_candidates_for_other_language(self):
        assert field_candidates("Title", "fr") == ["TitleFR", "TitleEN", "Title"]

    def test_candidates_for_english(self):
        assert field_candidates("Title", "EN") == ["TitleEN", "Title"]
        assert field_candidates("Title", None) == ["TitleEN", "Title"]

    def test_resolve_field(self):
        assert resolve_field("Description", "de") == ("DescriptionDE", "DescriptionEN")
        assert resolve_field("Description", "en") == ("DescriptionEN", "Description")
        assert resolve_field("Secondary", "zz") == ("SecondaryEN", "Secondary")


class TestLocalizedValue:
    """Test cases for the fallback chain over record fields."""

    def test_requested_language_first(self):
        fields = {"TitleFR": "Inflation (FR)", "TitleEN": "Inflation", "Title": "Old"}
        assert localized_field(fields, "Title", "FR") == ("TitleFR", "Inflation (FR)")

    def test_english_fallback(self):
        fields = {"TitleFR": "", "TitleEN": "Inflation", "Title": "Old"}
        assert localized_field(fields, "Title", "FR") == ("TitleEN", "Inflation")

    def test_bare_fallback(self):
        fields = {"Title": "GDP"}
        assert localized_field(fields, "Title", "DE") == ("Title", "GDP")
        assert localized_value(fields, "Title", "EN") == "GDP"

    def test_whitespace_counts_as_empty(self):
        fields = {"TitleDE": "   ", "TitleEN": "Inflation"}
        assert localized_value(fields, "Title", "DE") == "Inflation"

    def test_nothing_set(self):
        assert localized_field({}, "Title", "DE") == (None, "")
        assert localized_field(None, "Title", "DE") == (None, "")

    def test_never_undefined_for_any_language(self):
        """Test every supported language returns a string from the chain."""
        fields = {"TitleEN": "English title", "TitlePL": "Polski tytuł"}
        for lang in SUPPORTED_LANGUAGES:
            value = localized_value(fields, "Title", lang)
            expected = "Polski tytuł" if lang == "PL" else "English title"
            assert value == expected

    def test_list_values_are_joined(self):
        fields = {"SecondaryEN": ["Economy"]}
        assert localized_value(fields, "Secondary", "EN") == "Economy"


class TestCollectTranslations:
    """Test cases for translation map building."""

    def test_collects_non_empty_variants(self):
        fields = {
            "TitleEN": "Inflation", "TitleDE": "Inflationsrate", "TitleFR": "",
            "DescriptionDE": "VPI", "Title": "bare", "Other": "x",
        }

        translations = collect_translations(fields, ("Title", "Description"), exclude={"TitleEN"})

        assert translations == {"TitleDE": "Inflationsrate", "DescriptionDE": "VPI"}

    def test_empty_fields(self):
        assert collect_translations({}, ("Title",)) == {}
