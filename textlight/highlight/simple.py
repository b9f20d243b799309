# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Minimal built-in recognizers that need no OCR engine."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Union

from .interfaces import Recognizer
from .models import ImageSource, RawObservation


class StaticRecognizer(Recognizer):
    """Replay a fixed list of observations for every image.

    Useful for previewing highlights from observations exported by another
    engine, or for running the renderer where Tesseract is not installed.
    """

    def __init__(self, observations: Iterable[RawObservation]) -> None:
        self.observations = list(observations)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "StaticRecognizer":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("observations", [])
        if not isinstance(payload, list):
            raise ValueError("Observation file must hold a list or an {'observations': [...]} object")
        return cls(RawObservation.model_validate(item) for item in payload)

    async def recognize(self, image: ImageSource) -> List[RawObservation]:
        return list(self.observations)
