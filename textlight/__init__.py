"""Textlight public package surface."""

from __future__ import annotations

from ._version import __version__
from .highlight import (
    FilterQuery,
    HighlightCompositor,
    ImageSource,
    MatchedTextImage,
    RecognitionCache,
    RecognitionFailure,
    RecognitionSession,
    RegionMatcher,
    TextRegion,
    compute_transform,
)

__all__ = [
    "FilterQuery",
    "HighlightCompositor",
    "ImageSource",
    "MatchedTextImage",
    "RecognitionCache",
    "RecognitionFailure",
    "RecognitionSession",
    "RegionMatcher",
    "TextRegion",
    "__version__",
    "compute_transform",
]
