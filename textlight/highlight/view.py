# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""An image whose text matching the current filter is highlighted.

:class:`MatchedTextImage` ties the pieces together. ``refresh()`` runs the
one-shot recognition in the background; ``render()`` is synchronous and can be
called whenever the filter, the destination size or the cached regions change.
Until recognition succeeds the image renders unsuppressed.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from PIL import Image

from .canvas import PillowCanvas
from .compositor import HighlightCompositor
from .effects import default_suppress
from .errors import RecognitionFailure
from .input_handler import load_image_source
from .interfaces import DrawingContext, Recognizer, SuppressEffect
from .matcher import FilterQuery, RegionMatcher
from .models import ImageSource, RenderPlan, Size, TextRegion
from .recognition import DEFAULT_CONFIDENCE, RecognitionSession
from .settings import current_filter

logger = logging.getLogger(__name__)

FilterSource = Union[str, Callable[[], str]]


class MatchedTextImage:
    def __init__(
        self,
        image: ImageSource,
        recognizer: Recognizer,
        *,
        filter_text: Optional[FilterSource] = None,
        suppress: SuppressEffect = default_suppress,
        outline_regions: bool = True,
        confidence_threshold: float = DEFAULT_CONFIDENCE,
        matcher: Optional[RegionMatcher] = None,
    ) -> None:
        self.image = image
        self.session = RecognitionSession(image, recognizer)
        self.compositor = HighlightCompositor(suppress=suppress, outline_regions=outline_regions)
        self.matcher = matcher or RegionMatcher()
        self.confidence_threshold = confidence_threshold
        self._filter_source: FilterSource = current_filter if filter_text is None else filter_text
        self._regions: Optional[List[TextRegion]] = None

    @classmethod
    def open(cls, path: Union[str, Path], recognizer: Recognizer, **kwargs) -> Optional["MatchedTextImage"]:
        """Load ``path`` with Pillow; ``None`` if it cannot be decoded."""
        source = load_image_source(path)
        if source is None:
            return None
        return cls(source, recognizer, **kwargs)

    @classmethod
    def from_pil(cls, image: Image.Image, recognizer: Recognizer, **kwargs) -> "MatchedTextImage":
        return cls(ImageSource.from_pil(image), recognizer, **kwargs)

    @property
    def filter_text(self) -> str:
        source = self._filter_source
        return source() if callable(source) else source

    @filter_text.setter
    def filter_text(self, value: FilterSource) -> None:
        self._filter_source = value

    @property
    def regions(self) -> Optional[List[TextRegion]]:
        """Regions at or above the confidence threshold, ``None`` until recognized."""
        return self._regions

    @property
    def found_text(self) -> List[str]:
        return [region.text for region in self._regions or []]

    @property
    def description(self) -> str:
        """All recognized text, for accessibility labels and alt text."""
        return " ".join(self.found_text)

    async def refresh(self) -> bool:
        """Recognize text once; return whether regions are available."""
        if self._regions is not None:
            return True
        if self.session.closed:
            return False
        try:
            regions = await self.session.observations(self.confidence_threshold)
        except RecognitionFailure as exc:
            logger.warning("Error pulling text from image: %s", exc)
            return False
        if self.session.closed:
            return False
        self._regions = regions
        return True

    def matching_regions(self, query: Optional[FilterQuery] = None) -> Optional[List[TextRegion]]:
        if self._regions is None:
            return None
        if query is None:
            query = FilterQuery(self.filter_text)
        return self.matcher.matches(self._regions, query)

    def render(self, size: Size) -> RenderPlan:
        query = FilterQuery(self.filter_text)
        return self.compositor.plan(self.image.size, size, self.matching_regions(query), query)

    def draw(self, context: DrawingContext, size: Size) -> RenderPlan:
        plan = self.render(size)
        self.compositor.draw(context, self.image, plan)
        return plan

    def render_image(
        self, size: Optional[Size] = None, background: Tuple[int, int, int, int] = (0, 0, 0, 0)
    ) -> Image.Image:
        """Render to a new RGBA image, by default at the source size."""
        width, height = size or self.image.size
        canvas = PillowCanvas.blank((round(width), round(height)), background)
        self.draw(canvas, (width, height))
        return canvas.target

    def close(self) -> None:
        self.session.close()
