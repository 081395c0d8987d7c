"""Unit tests for product-gap classification."""

import pytest

from crosssell.schemas.opportunity import CrossSellSegment
from crosssell.services.scoring.product_gap_classifier import (
    ProductGapClassifier,
    monoline_from_flag,
    parse_products,
)


@pytest.fixture
def classifier() -> ProductGapClassifier:
    return ProductGapClassifier()


class TestParseProducts:

    def test_splits_on_commas_and_semicolons(self):
        assert parse_products("Auto; Home , Life") == ["Auto", "Home", "Life"]

    def test_unknown_placeholder_yields_no_products(self):
        assert parse_products("Unknown") == []
        assert parse_products("") == []
        assert parse_products(None) == []

    def test_presence_flags_take_precedence(self):
        flags = {"auto": True, "property": False, "life": None, "umbrella": True}
        assert parse_products("Life", flags) == ["Auto", "Umbrella"]

    def test_all_unset_flags_fall_back_to_text(self):
        flags = {"auto": None, "property": False, "life": None, "umbrella": None}
        assert parse_products("Home", flags) == ["Home"]


class TestMonolineFlag:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Monoline", True),
            ("Monoline Household", True),
            ("Multiline Household", False),
            ("multi", False),
            ("Y", True),
            ("single", True),
            ("", False),
            (None, False),
        ],
    )
    def test_interpretation(self, value, expected):
        assert monoline_from_flag(value) is expected


class TestClassify:

    def test_auto_only_pitches_home(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Auto"))

        assert result.is_true_monoline is True
        assert result.segment_type == CrossSellSegment.AUTO_TO_HOME
        assert result.recommended_product == "Homeowners/Renters"

    def test_home_only_pitches_auto(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Homeowners"))

        assert result.segment_type == CrossSellSegment.HOME_TO_AUTO
        assert result.recommended_product == "Auto Insurance"

    def test_single_other_product_pitches_bundle(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Life"))

        assert result.is_true_monoline is True
        assert result.segment_type == CrossSellSegment.MONO_TO_BUNDLE

    def test_auto_and_home_pitch_life(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Auto, Home", policy_count=2))

        assert result.is_true_monoline is False
        assert result.segment_type == CrossSellSegment.ADD_LIFE
        assert result.recommended_product == "Life Insurance"

    def test_auto_home_life_pitch_umbrella(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Auto, Home, Life"))

        assert result.segment_type == CrossSellSegment.ADD_UMBRELLA

    def test_fully_loaded_household_pitches_umbrella(self, classifier, record_factory):
        result = classifier.classify(
            record_factory(current_products="Auto, Home, Life, Umbrella", policy_count=4)
        )

        assert result.product_count == 4
        assert result.segment_type == CrossSellSegment.ADD_UMBRELLA
        assert result.recommended_product == "Umbrella Coverage"

    def test_multiline_household_flag_is_not_monoline(self, classifier, record_factory):
        result = classifier.classify(
            record_factory(current_products="Unknown", monoline_flag="Multiline Household")
        )

        assert result.is_true_monoline is False
        assert result.segment_type == CrossSellSegment.ADD_LIFE

    def test_multiline_flag_overrides_single_product(self, classifier, record_factory):
        result = classifier.classify(
            record_factory(current_products="Auto", monoline_flag="Multiline Household")
        )

        assert result.is_true_monoline is False
        assert result.segment_type == CrossSellSegment.ADD_LIFE
        assert result.recommended_product == "Life Insurance"

    def test_monoline_flag_without_products(self, classifier, record_factory):
        result = classifier.classify(
            record_factory(current_products="Unknown", monoline_flag="Monoline Household")
        )

        assert result.is_true_monoline is True
        assert result.segment_type == CrossSellSegment.MONO_TO_BUNDLE

    def test_monoline_flag_ignored_for_several_products(self, classifier, record_factory):
        result = classifier.classify(
            record_factory(current_products="Auto, Home", monoline_flag="Monoline")
        )

        assert result.is_true_monoline is False

    def test_presence_flags_drive_classification(self, classifier, record_factory):
        result = classifier.classify(record_factory(current_products="Unknown", has_auto=True))

        assert result.products == ["Auto"]
        assert result.holdings.has_auto is True
        assert result.segment_type == CrossSellSegment.AUTO_TO_HOME

    def test_empty_products_default_to_unknown(self, record_factory):
        assert record_factory(current_products="  ").current_products == "Unknown"
