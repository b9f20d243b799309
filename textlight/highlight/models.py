# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Data models for recognized text regions and render planning.

Everything that crosses a component boundary is a pydantic model so that
recognizer adapters, the matcher and the compositor agree on a single data
exchange format. Geometry models are frozen: a region produced by a
recognition pass is never mutated afterwards.
"""
from __future__ import annotations

from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidImageSource

Size = Tuple[float, float]


class Rect(BaseModel):
    """Axis-aligned rectangle, top-left origin, y increasing downward."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def outset(self, amount: float) -> "Rect":
        """Grow the rectangle by ``amount`` on every side."""
        return Rect(
            x=self.x - amount,
            y=self.y - amount,
            width=max(0.0, self.width + 2 * amount),
            height=max(0.0, self.height + 2 * amount),
        )

    def as_box(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.max_x, self.max_y)


class NormalizedBox(BaseModel):
    """Recognizer bounding box: unit square, bottom-left origin, y upward."""

    model_config = ConfigDict(frozen=True)

    min_x: float
    min_y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class RawObservation(BaseModel):
    """One observation as reported by a recognizer."""

    top_candidate: Optional[str] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    bounding_box: NormalizedBox


class TextRegion(BaseModel):
    """A recognized text fragment placed in image pixel space."""

    model_config = ConfigDict(frozen=True)

    text: str
    rect: Rect
    confidence: float = Field(..., ge=0.0, le=1.0)

    @property
    def region_id(self) -> str:
        return f"{self.text}{self.rect!r}"


class ImageSource(BaseModel):
    """Decoded pixels plus their dimensions."""

    pixels: object
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def rect(self) -> Rect:
        return Rect(x=0, y=0, width=self.width, height=self.height)

    @classmethod
    def from_pil(cls, image: object) -> "ImageSource":
        size = getattr(image, "size", None)
        if not size or len(size) != 2:
            raise InvalidImageSource("image does not expose a (width, height) size")
        width, height = size
        if width <= 0 or height <= 0:
            raise InvalidImageSource(f"image has no pixels ({width}x{height})")
        return cls(pixels=image, width=width, height=height)


class RenderTransform(BaseModel):
    """Aspect-fit mapping from source image space to the destination canvas."""

    model_config = ConfigDict(frozen=True)

    scale: float
    offset_x: float
    offset_y: float


class DrawImage(BaseModel):
    """Draw the full source image, optionally clipped and suppressed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    clip: Optional[Rect] = None
    suppressed: bool = False


class StrokeRect(BaseModel):
    """Stroke the outline of ``rect``; ``white`` is a gray level in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stroke"] = "stroke"
    rect: Rect
    line_width: float = Field(..., gt=0)
    white: float = Field(..., ge=0.0, le=1.0)


DrawCommand = Union[DrawImage, StrokeRect]


class RenderPlan(BaseModel):
    """Ordered draw commands for one render pass."""

    image_rect: Rect
    transform: RenderTransform
    commands: List[DrawCommand]

    @property
    def outlines(self) -> List[StrokeRect]:
        return [cmd for cmd in self.commands if isinstance(cmd, StrokeRect)]

    @property
    def suppressed(self) -> bool:
        return any(isinstance(cmd, DrawImage) and cmd.suppressed for cmd in self.commands)
