# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Lenient word-level matching of text regions against a filter string."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

from .models import TextRegion


@dataclass(frozen=True)
class FilterQuery:
    raw_text: str = ""
    words: Tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "words", tuple(self.raw_text.split()))

    @property
    def is_empty(self) -> bool:
        return not self.words


class RegionMatcher:
    """Select regions whose text contains any word of the query.

    A single searched term can be split across adjacent OCR fragments, and a
    fragment can hold a longer string around the term, so each filter word is
    tested as a case-insensitive substring of the region text rather than for
    equality.
    """

    def matches(self, regions: Iterable[TextRegion], query: Union[FilterQuery, str]) -> List[TextRegion]:
        if isinstance(query, str):
            query = FilterQuery(query)
        if query.is_empty:
            return []
        words = [word.casefold() for word in query.words]
        return [region for region in regions if _contains_any(region.text.casefold(), words)]


def _contains_any(text: str, words: List[str]) -> bool:
    return any(word in text for word in words)
