# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Mock collaborators for testing."""
from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Sequence, Tuple

from .interfaces import CallbackRecognizer, Completion, DrawingContext, Effect, Recognizer
from .models import ImageSource, RawObservation, Rect


class MockRecognizer(Recognizer):
    """Async recognizer that records calls and can fail on chosen attempts."""

    def __init__(
        self,
        observations: Optional[Sequence[RawObservation]] = None,
        failures: Sequence[BaseException] = (),
        yields: int = 1,
    ) -> None:
        self.observations = list(observations or [])
        self.failures = list(failures)
        self.yields = yields
        self.calls: List[ImageSource] = []

    async def recognize(self, image: ImageSource) -> List[RawObservation]:
        self.calls.append(image)
        for _ in range(self.yields):
            await asyncio.sleep(0)
        if self.failures:
            raise self.failures.pop(0)
        return list(self.observations)


class MockCallbackRecognizer(CallbackRecognizer):
    """Callback recognizer that completes synchronously, possibly several times."""

    def __init__(
        self,
        completions: Sequence[Tuple[Optional[Sequence[RawObservation]], Optional[BaseException]]],
        raise_on_start: Optional[BaseException] = None,
    ) -> None:
        self.completions = list(completions)
        self.raise_on_start = raise_on_start
        self.calls: List[ImageSource] = []

    def start(self, image: ImageSource, completion: Completion) -> None:
        self.calls.append(image)
        if self.raise_on_start is not None:
            raise self.raise_on_start
        for observations, error in self.completions:
            completion(observations, error)


class RecordingContext(DrawingContext):
    """Drawing context that logs every operation.

    Copies append to the same log but keep their own transform, clips and
    filters, mirroring value-semantics graphics contexts.
    """

    def __init__(self, log: Optional[List[Tuple[Any, ...]]] = None, name: str = "root") -> None:
        self.log: List[Tuple[Any, ...]] = log if log is not None else []
        self.name = name
        self.clips: List[Rect] = []
        self.filters: List[Effect] = []
        self.transforms: List[Tuple[str, Tuple[float, ...]]] = []
        self._copies = 0

    def copy(self) -> "RecordingContext":
        self._copies += 1
        other = RecordingContext(self.log, name=f"{self.name}.{self._copies}")
        other.clips = list(self.clips)
        other.filters = list(self.filters)
        other.transforms = list(self.transforms)
        return other

    def translate(self, dx: float, dy: float) -> None:
        self.transforms.append(("translate", (dx, dy)))
        self.log.append(("translate", self.name, dx, dy))

    def scale(self, factor: float) -> None:
        self.transforms.append(("scale", (factor,)))
        self.log.append(("scale", self.name, factor))

    def clip(self, rect: Rect) -> None:
        self.clips.append(rect)
        self.log.append(("clip", self.name, rect))

    def add_filter(self, effect: Effect) -> None:
        self.filters.append(effect)
        self.log.append(("filter", self.name, effect))

    def draw_image(self, image: ImageSource, rect: Rect) -> None:
        self.log.append(("draw", self.name, rect, tuple(self.clips), tuple(self.filters)))

    def stroke_rect(self, rect: Rect, line_width: float, white: float) -> None:
        self.log.append(("stroke", self.name, rect, line_width, white))

    def ops(self, kind: str) -> List[Tuple[Any, ...]]:
        return [entry for entry in self.log if entry[0] == kind]
