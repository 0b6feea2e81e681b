"""Tests for FieldSegmenter and the stemming helper."""

from __future__ import annotations

import logging

import pytest

from cal_nlp.models.event import UNTITLED_EVENT, FieldKind, SegmentedFields
from cal_nlp.rules.segmenter import DEFAULT_INDICATORS, FieldSegmenter, stem


class TestStem:
    """Tests for stem()."""

    @pytest.mark.parametrize(
        ("left", "right"),
        [
            ("meeting", "meet"),
            ("rooms", "room"),
            ("places", "place"),
            ("Details:", "detail"),
            ("regarding", "regard"),
        ],
    )
    def test_equivalent_forms(self, left: str, right: str) -> None:
        assert stem(left) == stem(right)

    def test_short_words_untouched(self) -> None:
        assert stem("at") == "at"
        assert stem("on") == "on"
        assert stem("is") == "is"

    def test_double_s_kept(self) -> None:
        assert stem("address") == "address"

    def test_punctuation_stripped(self) -> None:
        assert stem("(room)") == "room"


class TestSegment:
    """Tests for FieldSegmenter.segment() with the default vocabulary."""

    def test_title_only(self) -> None:
        assert FieldSegmenter().segment("Dinner with Sam") == SegmentedFields(
            title="Dinner with Sam"
        )

    def test_location(self) -> None:
        fields = FieldSegmenter().segment("Lunch with Sam at Cafe Roma")

        assert fields.title == "Lunch with Sam"
        assert fields.location == "Cafe Roma"
        assert fields.description is None

    def test_description_and_location(self) -> None:
        fields = FieldSegmenter().segment("Standup for sprint planning in Room 4")

        assert fields.title == "Standup"
        assert fields.description == "sprint planning"
        assert fields.location == "Room 4"

    def test_location_before_description(self) -> None:
        fields = FieldSegmenter().segment("Sync at HQ regarding the budget")

        assert fields.title == "Sync"
        assert fields.location == "HQ"
        assert fields.description == "the budget"

    def test_first_indicator_per_kind_wins(self) -> None:
        """A later location word stays inside the location value."""
        fields = FieldSegmenter().segment("Meeting about budget in Room 4")

        assert fields.title == "Meeting"
        assert fields.description == "budget"
        assert fields.location == "Room 4"

    def test_indicator_as_last_token_is_ignored(self) -> None:
        fields = FieldSegmenter().segment("Meet at")

        assert fields == SegmentedFields(title="Meet at")

    def test_empty_value_drops_indicator(self) -> None:
        fields = FieldSegmenter().segment("Party at for cake")

        assert fields.title == "Party at"
        assert fields.location is None
        assert fields.description == "cake"

    def test_stemmed_indicator_matches(self) -> None:
        fields = FieldSegmenter().segment("Call regarding contract")

        assert fields.title == "Call"
        assert fields.description == "contract"

    def test_trailing_punctuation_trimmed(self) -> None:
        fields = FieldSegmenter().segment("Lunch, at Cafe Roma.")

        assert fields.title == "Lunch"
        assert fields.location == "Cafe Roma"

    def test_empty_title_defaults(self) -> None:
        fields = FieldSegmenter().segment("at the office")

        assert fields.title == UNTITLED_EVENT
        assert fields.location == "the office"

    @pytest.mark.parametrize("text", ["", "   ", "!!!"])
    def test_blank_text_defaults(self, text: str) -> None:
        assert FieldSegmenter().segment(text).title == UNTITLED_EVENT

    def test_segmentation_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="cal_nlp.rules.segmenter"):
            FieldSegmenter().segment("Lunch at Cafe Roma")

        assert any("Cafe Roma" in r.message for r in caplog.records)


class TestCustomIndicators:
    """The vocabulary is injectable."""

    def test_custom_vocabulary_replaces_defaults(self) -> None:
        segmenter = FieldSegmenter({"venue": FieldKind.LOCATION})

        fields = segmenter.segment("Gala venue Town Hall at night")

        assert fields.title == "Gala"
        assert fields.location == "Town Hall at night"

    def test_custom_words_are_stemmed(self) -> None:
        segmenter = FieldSegmenter({"agenda": FieldKind.DESCRIPTION})

        fields = segmenter.segment("Retro agendas: bring snacks")

        assert fields.title == "Retro"
        assert fields.description == "bring snacks"

    def test_default_vocabulary(self) -> None:
        assert DEFAULT_INDICATORS["room"] is FieldKind.LOCATION
        assert DEFAULT_INDICATORS["re"] is FieldKind.DESCRIPTION
