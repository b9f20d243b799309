# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Suppression effects applied to the background pass."""
from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageFilter, ImageOps

from .interfaces import DrawingContext, Effect, SuppressEffect
from .models import Rect, Size


@dataclass(frozen=True)
class Grayscale:
    """Desaturate by ``amount`` (0 keeps colour, 1 is fully gray)."""

    amount: float = 1.0

    def apply(self, image: Image.Image, scale: float) -> Image.Image:
        if self.amount <= 0:
            return image
        gray = ImageOps.grayscale(image.convert("RGB")).convert(image.mode)
        if "A" in image.getbands():
            gray.putalpha(image.getchannel("A"))
        if self.amount >= 1:
            return gray
        return Image.blend(image, gray, self.amount)


@dataclass(frozen=True)
class Blur:
    """Gaussian blur; ``radius`` is in source image pixels."""

    radius: float = 4.0

    def apply(self, image: Image.Image, scale: float) -> Image.Image:
        radius = self.radius * scale
        if radius <= 0:
            return image
        return image.filter(ImageFilter.GaussianBlur(radius))


def default_suppress(context: DrawingContext, target_rect: Rect, image_size: Size) -> None:
    context.add_filter(Grayscale(1.0))


def suppress_with(*effects: Effect) -> SuppressEffect:
    """Build a suppress callback that stacks ``effects`` in order."""

    def suppress(context: DrawingContext, target_rect: Rect, image_size: Size) -> None:
        for effect in effects:
            context.add_filter(effect)

    return suppress


def parse_suppress(value: str, blur_radius: float = 4.0) -> SuppressEffect:
    """Parse ``"grayscale"``, ``"blur"`` or ``"grayscale+blur"``."""
    effects = []
    for name in (part.strip().lower() for part in value.split("+")):
        if not name:
            continue
        if name == "grayscale":
            effects.append(Grayscale())
        elif name == "blur":
            effects.append(Blur(blur_radius))
        else:
            raise ValueError(f"Unknown suppression effect: {name!r}")
    if not effects:
        return default_suppress
    return suppress_with(*effects)
