"""Highlight image regions whose recognized text matches a filter."""

from .canvas import PillowCanvas
from .compositor import OUTLINE_THRESHOLD, HighlightCompositor, should_outline
from .effects import Blur, Grayscale, default_suppress, parse_suppress, suppress_with
from .errors import InvalidImageSource, MalformedObservation, RecognitionFailure, SessionClosed, TextlightError
from .geometry import (
    compute_transform,
    normalized_box,
    outset_rect,
    pixel_rect,
    region_from_observation,
    regions_from_observations,
)
from .input_handler import load_image_source
from .interfaces import CallbackRecognizer, DrawingContext, Effect, Recognizer, SuppressEffect
from .matcher import FilterQuery, RegionMatcher
from .mocks import MockCallbackRecognizer, MockRecognizer, RecordingContext
from .models import (
    DrawImage,
    ImageSource,
    NormalizedBox,
    RawObservation,
    Rect,
    RenderPlan,
    RenderTransform,
    StrokeRect,
    TextRegion,
)
from .recognition import RecognitionCache, RecognitionSession, await_callback
from .settings import HighlightSettings, current_filter, load_settings
from .simple import StaticRecognizer
from .tesseract import TesseractRecognizer
from .view import MatchedTextImage

__all__ = [
    "Blur",
    "CallbackRecognizer",
    "DrawImage",
    "DrawingContext",
    "Effect",
    "FilterQuery",
    "Grayscale",
    "HighlightCompositor",
    "HighlightSettings",
    "ImageSource",
    "InvalidImageSource",
    "MalformedObservation",
    "MatchedTextImage",
    "MockCallbackRecognizer",
    "MockRecognizer",
    "NormalizedBox",
    "OUTLINE_THRESHOLD",
    "PillowCanvas",
    "RawObservation",
    "RecognitionCache",
    "RecognitionFailure",
    "RecognitionSession",
    "Recognizer",
    "RecordingContext",
    "Rect",
    "RegionMatcher",
    "RenderPlan",
    "RenderTransform",
    "SessionClosed",
    "StaticRecognizer",
    "StrokeRect",
    "SuppressEffect",
    "TesseractRecognizer",
    "TextRegion",
    "TextlightError",
    "await_callback",
    "compute_transform",
    "current_filter",
    "default_suppress",
    "load_image_source",
    "load_settings",
    "normalized_box",
    "outset_rect",
    "parse_suppress",
    "pixel_rect",
    "region_from_observation",
    "regions_from_observations",
    "should_outline",
    "suppress_with",
]
