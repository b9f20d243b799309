# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Compose the highlighted image from a suppressed background and sharp windows.

Rendering is split in two steps. :meth:`HighlightCompositor.plan` is a pure
function of the image size, the destination size, the matching regions and
the filter; it returns a :class:`RenderPlan` of draw commands expressed in
source image pixels. :meth:`HighlightCompositor.draw` replays a plan onto any
:class:`DrawingContext`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .effects import default_suppress
from .geometry import OUTSET_RATIO, compute_transform, outset_rect
from .interfaces import DrawingContext, SuppressEffect
from .matcher import FilterQuery
from .models import DrawCommand, DrawImage, ImageSource, Rect, RenderPlan, Size, StrokeRect, TextRegion

OUTLINE_THRESHOLD = 20.0
# wide light stroke under a thin dark one, visible on any background
OUTLINE_STROKES = ((3.0, 1.0), (1.0, 0.0))


def should_outline(outset: Rect, scale: float, threshold: float = OUTLINE_THRESHOLD) -> bool:
    return outset.height * scale > threshold


@dataclass
class HighlightCompositor:
    suppress: SuppressEffect = default_suppress
    outline_regions: bool = True
    outline_threshold: float = OUTLINE_THRESHOLD
    outset_ratio: float = OUTSET_RATIO

    def plan(
        self,
        image_size: Size,
        dst_size: Size,
        matches: Optional[Sequence[TextRegion]],
        query: Union[FilterQuery, str],
    ) -> RenderPlan:
        """Build the draw commands for one frame.

        ``matches`` is ``None`` when no recognition result is available; the
        image is then drawn as if there were no filter.
        """
        if isinstance(query, str):
            query = FilterQuery(query)
        transform = compute_transform(image_size, dst_size)
        image_rect = Rect(x=0, y=0, width=image_size[0], height=image_size[1])

        if query.is_empty or matches is None:
            return RenderPlan(image_rect=image_rect, transform=transform, commands=[DrawImage()])

        commands: List[DrawCommand] = [DrawImage(clip=image_rect, suppressed=True)]
        for region in matches:
            outset = outset_rect(region.rect, self.outset_ratio)
            commands.append(DrawImage(clip=outset))
            if self.outline_regions and should_outline(outset, transform.scale, self.outline_threshold):
                commands.extend(
                    StrokeRect(rect=outset, line_width=width, white=white) for width, white in OUTLINE_STROKES
                )
        return RenderPlan(image_rect=image_rect, transform=transform, commands=commands)

    def draw(self, context: DrawingContext, image: ImageSource, plan: RenderPlan) -> None:
        transform = plan.transform
        context.translate(transform.offset_x, transform.offset_y)
        context.scale(transform.scale)

        for command in plan.commands:
            if isinstance(command, StrokeRect):
                context.stroke_rect(command.rect, command.line_width, command.white)
                continue
            layer = context.copy()
            if command.clip is not None:
                layer.clip(command.clip)
            if command.suppressed:
                self.suppress(layer, plan.image_rect, image.size)
            layer.draw_image(image, plan.image_rect)

    def render(
        self,
        context: DrawingContext,
        image: ImageSource,
        dst_size: Size,
        matches: Optional[Sequence[TextRegion]],
        query: Union[FilterQuery, str],
    ) -> RenderPlan:
        plan = self.plan(image.size, dst_size, matches, query)
        self.draw(context, image, plan)
        return plan
