# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

import pytest

from textlight.highlight import FilterQuery, Rect, RegionMatcher, TextRegion


def _region(text: str, y: float = 0) -> TextRegion:
    return TextRegion(text=text, rect=Rect(x=0, y=y, width=10, height=10), confidence=1.0)


REGIONS = [
    _region("INVOICE #42", 0),
    _region("Subtotal: 10.00", 20),
    _region("Tax", 40),
    _region("Grand total", 60),
]


def test_filter_query_splits_on_any_whitespace():
    query = FilterQuery("  grand\ttotal\n tax ")

    assert query.words == ("grand", "total", "tax")
    assert not query.is_empty


@pytest.mark.parametrize("raw", ["", "   ", "\n\t"])
def test_empty_and_blank_filters_match_nothing(raw):
    assert FilterQuery(raw).is_empty
    assert RegionMatcher().matches(REGIONS, raw) == []


def test_matching_is_case_insensitive_substring():
    matches = RegionMatcher().matches(REGIONS, "TOTAL")

    assert [region.text for region in matches] == ["Subtotal: 10.00", "Grand total"]


def test_any_word_is_enough():
    matches = RegionMatcher().matches(REGIONS, FilterQuery("invoice\ntax"))

    assert [region.text for region in matches] == ["INVOICE #42", "Tax"]


def test_region_text_inside_filter_word_does_not_match():
    assert RegionMatcher().matches(REGIONS, "taxation") == []


def test_matches_keep_recognizer_order():
    regions = list(reversed(REGIONS))

    matches = RegionMatcher().matches(regions, "a")

    assert [region.text for region in matches] == [r.text for r in regions if "a" in r.text.lower()]
