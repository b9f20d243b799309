# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Interfaces for the collaborators the highlighting pipeline consumes."""
from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from .models import ImageSource, RawObservation, Rect, Size


class Recognizer(Protocol):
    async def recognize(self, image: ImageSource) -> Sequence[RawObservation]:
        ...


Completion = Callable[[Optional[Sequence[RawObservation]], Optional[BaseException]], None]


class CallbackRecognizer(Protocol):
    def start(self, image: ImageSource, completion: Completion) -> None:
        ...


class Effect(Protocol):
    def apply(self, image: object, scale: float) -> object:
        ...


class DrawingContext(Protocol):
    def copy(self) -> "DrawingContext":
        ...

    def translate(self, dx: float, dy: float) -> None:
        ...

    def scale(self, factor: float) -> None:
        ...

    def clip(self, rect: Rect) -> None:
        ...

    def add_filter(self, effect: Effect) -> None:
        ...

    def draw_image(self, image: ImageSource, rect: Rect) -> None:
        ...

    def stroke_rect(self, rect: Rect, line_width: float, white: float) -> None:
        ...


SuppressEffect = Callable[[DrawingContext, Rect, Size], None]
