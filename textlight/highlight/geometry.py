# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Coordinate mapping between recognizer space, image space and the canvas.

Recognizers report boxes in a unit square whose origin is the bottom-left
corner with y growing upward. Images and canvases use a top-left origin with
y growing downward, so every box has to be flipped on the way in.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .errors import MalformedObservation
from .models import NormalizedBox, RawObservation, Rect, RenderTransform, Size, TextRegion

logger = logging.getLogger(__name__)

OUTSET_RATIO = 0.1


def pixel_rect(box: NormalizedBox, size: Size) -> Rect:
    """Map a normalized bottom-left box into top-left pixel space."""
    width, height = size
    return Rect(
        x=box.min_x * width,
        y=height - (box.min_y * height) - (box.height * height),
        width=box.width * width,
        height=box.height * height,
    )


def normalized_box(rect: Rect, size: Size) -> NormalizedBox:
    """Inverse of :func:`pixel_rect`."""
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError("Image size must be positive")
    return NormalizedBox(
        min_x=rect.x / width,
        min_y=(height - rect.y - rect.height) / height,
        width=rect.width / width,
        height=rect.height / height,
    )


def region_from_observation(observation: RawObservation, size: Size) -> TextRegion:
    if observation.top_candidate is None:
        raise MalformedObservation("observation has no top candidate")
    return TextRegion(
        text=observation.top_candidate,
        rect=pixel_rect(observation.bounding_box, size),
        confidence=observation.confidence,
    )


def regions_from_observations(observations: Iterable[RawObservation], size: Size) -> List[TextRegion]:
    """Convert a batch, dropping observations without a top candidate."""
    regions: List[TextRegion] = []
    for observation in observations:
        try:
            regions.append(region_from_observation(observation, size))
        except MalformedObservation:
            logger.debug("dropping observation without candidate at %s", observation.bounding_box)
    return regions


def outset_rect(rect: Rect, ratio: float = OUTSET_RATIO) -> Rect:
    """Expand ``rect`` on all sides by ``ratio`` of its own height."""
    return rect.outset(rect.height * ratio)


def compute_transform(src_size: Sequence[float], dst_size: Sequence[float]) -> RenderTransform:
    """Aspect-fit ``src_size`` into ``dst_size`` and center it."""
    src_w, src_h = src_size
    dst_w, dst_h = dst_size
    if src_w <= 0 or src_h <= 0:
        raise ValueError("Source size must be positive")

    scale = min(dst_w / src_w, dst_h / src_h)
    return RenderTransform(
        scale=scale,
        offset_x=(dst_w - src_w * scale) / 2,
        offset_y=(dst_h - src_h * scale) / 2,
    )
