# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Pillow-backed drawing context."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageChops, ImageDraw

from .interfaces import DrawingContext, Effect
from .models import ImageSource, Rect

Box = Tuple[float, float, float, float]
PixelBox = Tuple[int, int, int, int]


class PillowCanvas(DrawingContext):
    """Draw onto a ``PIL.Image`` with translate/scale, clipping and filters.

    Copies share the destination image but carry their own transform, clip
    and filter chain, so clipping a copy never affects the original.
    Resized copies of drawn images are cached per device box and shared by
    all copies, so drawing the same image through many clips resizes it once.
    """

    def __init__(self, target: Image.Image) -> None:
        self.target = target
        self._tx = 0.0
        self._ty = 0.0
        self._scale = 1.0
        self._clip: Optional[Box] = None
        self._filters: List[Effect] = []
        self._resized: Dict[Tuple[int, PixelBox], Tuple[Image.Image, Image.Image]] = {}

    @classmethod
    def blank(cls, size: Tuple[int, int], background: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> "PillowCanvas":
        width, height = size
        if width <= 0 or height <= 0:
            raise ValueError("Canvas size must be positive")
        return cls(Image.new("RGBA", (int(width), int(height)), background))

    def copy(self) -> "PillowCanvas":
        other = PillowCanvas(self.target)
        other._tx, other._ty, other._scale = self._tx, self._ty, self._scale
        other._clip = self._clip
        other._filters = list(self._filters)
        other._resized = self._resized
        return other

    def translate(self, dx: float, dy: float) -> None:
        self._tx += dx * self._scale
        self._ty += dy * self._scale

    def scale(self, factor: float) -> None:
        self._scale *= factor

    def clip(self, rect: Rect) -> None:
        box = self._to_device(rect)
        if self._clip is not None:
            box = (
                max(box[0], self._clip[0]),
                max(box[1], self._clip[1]),
                min(box[2], self._clip[2]),
                min(box[3], self._clip[3]),
            )
        self._clip = box

    def add_filter(self, effect: Effect) -> None:
        self._filters.append(effect)

    def draw_image(self, image: ImageSource, rect: Rect) -> None:
        left, top, right, bottom = (round(v) for v in self._to_device(rect))
        if right <= left or bottom <= top:
            return
        rendered = self._resize(image.pixels, (left, top, right, bottom))
        for effect in self._filters:
            rendered = effect.apply(rendered, self._scale)

        layer = Image.new("RGBA", self.target.size, (0, 0, 0, 0))
        layer.paste(rendered, (left, top))
        self._composite(layer)

    def stroke_rect(self, rect: Rect, line_width: float, white: float) -> None:
        # strokes are centered on the path like a vector renderer would draw them
        width = max(1, round(line_width * self._scale))
        half = width / 2
        left, top, right, bottom = self._to_device(rect)
        level = round(min(max(white, 0.0), 1.0) * 255)

        layer = Image.new("RGBA", self.target.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).rectangle(
            (round(left - half), round(top - half), round(right + half) - 1, round(bottom + half) - 1),
            outline=(level, level, level, 255),
            width=width,
        )
        self._composite(layer)

    def _resize(self, pixels: Image.Image, box: PixelBox) -> Image.Image:
        key = (id(pixels), box)
        cached = self._resized.get(key)
        # the source is kept in the entry so its id cannot be reused meanwhile
        if cached is not None and cached[0] is pixels:
            return cached[1]
        left, top, right, bottom = box
        rendered = pixels.convert("RGBA").resize((right - left, bottom - top), Image.Resampling.LANCZOS)
        self._resized[key] = (pixels, rendered)
        return rendered

    def _to_device(self, rect: Rect) -> Box:
        s = self._scale
        return (
            self._tx + rect.x * s,
            self._ty + rect.y * s,
            self._tx + rect.max_x * s,
            self._ty + rect.max_y * s,
        )

    def _clip_mask(self) -> Image.Image:
        if self._clip is None:
            return Image.new("L", self.target.size, 255)
        mask = Image.new("L", self.target.size, 0)
        left, top, right, bottom = (round(v) for v in self._clip)
        if right > left and bottom > top:
            ImageDraw.Draw(mask).rectangle((left, top, right - 1, bottom - 1), fill=255)
        return mask

    def _composite(self, layer: Image.Image) -> None:
        alpha = ImageChops.multiply(layer.getchannel("A"), self._clip_mask())
        self.target.paste(layer, (0, 0), alpha)
