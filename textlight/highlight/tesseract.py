# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Text recognizer backed by pytesseract.

Tesseract reports word boxes in top-left pixel space. This recognizer groups
words into line fragments (block, paragraph, line), then reports each line in
the recognizer convention used throughout the package: a normalized box with a
bottom-left origin and a confidence in ``[0, 1]``. Tesseract is blocking, so
each run happens on a worker thread and reports back through a completion
callback.
"""
from __future__ import annotations

import os
import threading
from statistics import mean
from typing import Dict, List, Sequence, Tuple

import pytesseract
from pytesseract import Output

from .geometry import normalized_box
from .interfaces import CallbackRecognizer, Completion
from .models import ImageSource, RawObservation, Rect
from .recognition import await_callback

_LINE_KEYS = ("block_num", "par_num", "line_num")


def _pytesseract_allowed() -> bool:
    raw = os.environ.get("TEXTLIGHT_ALLOW_PYTESSERACT")
    if raw is None:
        return True
    return raw.strip().lower() not in {"0", "false", "no", "off"}


class TesseractRecognizer(CallbackRecognizer):
    """Recognize text with Tesseract.

    Args:
        lang: Language hint passed to Tesseract (e.g. ``"eng"`` or ``"eng+deu"``).
        oem: OCR Engine Mode; ``3`` selects the LSTM engine.
        psm: Page segmentation mode; ``3`` lets Tesseract find text blocks
            anywhere in a photo or screenshot.
        level: ``"line"`` to merge words into line fragments, ``"word"`` to
            report every word on its own.
        extra_config: Additional flags forwarded to pytesseract.
    """

    def __init__(
        self, lang: str = "eng", oem: int = 3, psm: int = 3, level: str = "line", extra_config: str = ""
    ) -> None:
        if not _pytesseract_allowed():
            raise RuntimeError(
                "pytesseract is disabled by TEXTLIGHT_ALLOW_PYTESSERACT; set it to 1/true to enable"
            )
        if level not in {"line", "word"}:
            raise ValueError("level must be 'line' or 'word'")
        self.lang = lang
        self.level = level
        base_config = f"--oem {oem} --psm {psm}"
        self.config = f"{base_config} {extra_config}".strip()

    async def recognize(self, image: ImageSource) -> List[RawObservation]:
        return await await_callback(self, image)

    def start(self, image: ImageSource, completion: Completion) -> None:
        worker = threading.Thread(
            target=self._run, args=(image, completion), name="textlight-tesseract", daemon=True
        )
        worker.start()

    def _run(self, image: ImageSource, completion: Completion) -> None:
        try:
            observations = self.read(image)
        except Exception as exc:
            completion(None, exc)
            return
        completion(observations, None)

    def read(self, image: ImageSource) -> List[RawObservation]:
        """Run Tesseract synchronously."""
        data = pytesseract.image_to_data(
            image.pixels,
            lang=self.lang,
            config=self.config,
            output_type=Output.DICT,
        )
        texts = data.get("text", [])
        count = len(texts)
        if self.level == "word":
            keys = [(idx,) for idx in range(count)]
        else:
            columns = [data.get(key) or [0] * count for key in _LINE_KEYS]
            keys = list(zip(*columns))

        groups: Dict[Tuple, List[Tuple[str, float, Rect]]] = {}
        for key, text, conf_str, left, top, width, height in zip(
            keys,
            texts,
            data.get("conf", []),
            data.get("left", []),
            data.get("top", []),
            data.get("width", []),
            data.get("height", []),
        ):
            if not text or not str(text).strip() or conf_str is None:
                continue
            conf = float(conf_str)
            if conf < 0:
                continue
            box = Rect(x=float(left), y=float(top), width=float(width), height=float(height))
            groups.setdefault(key, []).append((str(text).strip(), min(conf / 100.0, 1.0), box))

        return [self._observation(words, image.size) for words in groups.values()]

    @staticmethod
    def _observation(words: Sequence[Tuple[str, float, Rect]], size: Tuple[int, int]) -> RawObservation:
        left = min(box.x for _, _, box in words)
        top = min(box.y for _, _, box in words)
        right = max(box.max_x for _, _, box in words)
        bottom = max(box.max_y for _, _, box in words)
        rect = Rect(x=left, y=top, width=right - left, height=bottom - top)
        return RawObservation(
            top_candidate=" ".join(text for text, _, _ in words),
            confidence=mean(conf for _, conf, _ in words),
            bounding_box=normalized_box(rect, size),
        )
