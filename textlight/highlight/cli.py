# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Command-line entry for highlighting matched text in an image.

Recognizes text in one image (with Tesseract, or by replaying observations
from a JSON file), highlights the fragments matching ``--filter`` and writes
the rendered PNG and/or a JSON summary of the regions and draw commands.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from .interfaces import Recognizer
from .models import RenderPlan
from .settings import HighlightSettings, load_settings
from .simple import StaticRecognizer
from .tesseract import TesseractRecognizer
from .view import MatchedTextImage

logger = logging.getLogger(__name__)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).replace(microsecond=0).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(settings: HighlightSettings) -> logging.Logger:
    root = logging.getLogger("textlight")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        if settings.log_format == "json":
            handler.setFormatter(_JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))
    root.propagate = False
    return root


def _parse_size(raw: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in raw.lower().split("x"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {raw!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("size must be positive")
    return (width, height)


def build_recognizer(args: argparse.Namespace) -> Recognizer:
    if args.observations:
        return StaticRecognizer.from_json(args.observations)
    return TesseractRecognizer(lang=args.lang, level=args.level)


def summarize(view: MatchedTextImage, plan: RenderPlan) -> Dict[str, Any]:
    matches = view.matching_regions() or []
    return {
        "filter": view.filter_text,
        "recognized": view.regions is not None,
        "transform": plan.transform.model_dump(),
        "regions": [region.model_dump() for region in view.regions or []],
        "matches": [region.model_dump() for region in matches],
        "commands": [command.model_dump() for command in plan.commands],
    }


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Highlight text matching a filter in an image")
    parser.add_argument("--image", required=True, help="Image file to process")
    parser.add_argument(
        "--filter",
        default=None,
        help="Words to highlight (defaults to TEXTLIGHT_FILTER)",
    )
    parser.add_argument(
        "--observations",
        help="JSON file of recognizer observations to replay instead of running Tesseract",
    )
    parser.add_argument("--lang", default="eng", help="Tesseract language hint")
    parser.add_argument("--level", choices=("line", "word"), default="line", help="Tesseract fragment level")
    parser.add_argument("--size", type=_parse_size, help="Destination size as WIDTHxHEIGHT (default: image size)")
    parser.add_argument("--out", help="Write the rendered PNG to this path")
    parser.add_argument("--json-out", help="Write the JSON summary to this path or '-' for stdout")
    parser.add_argument("--min-confidence", type=float, default=None, help="Minimum region confidence")
    parser.add_argument("--no-outline", action="store_true", help="Never outline matched regions")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Sequence[str] | None = None, settings: Optional[HighlightSettings] = None) -> None:
    args = _parse_args(argv)
    settings = settings or load_settings()
    configure_logging(settings)

    view = MatchedTextImage.open(
        args.image,
        build_recognizer(args),
        filter_text=args.filter if args.filter is not None else settings.filter_text,
        suppress=settings.suppress_effect(),
        outline_regions=settings.outline_regions and not args.no_outline,
        confidence_threshold=(
            args.min_confidence if args.min_confidence is not None else settings.min_confidence
        ),
    )
    if view is None:
        raise SystemExit(f"Could not read image: {args.image}")

    if not asyncio.run(view.refresh()):
        logger.warning("rendering %s without highlights", args.image)

    size = args.size or view.image.size
    plan = view.render(size)

    if args.out:
        view.render_image(size).save(args.out)
        logger.info("wrote %s (%d matches)", args.out, len(view.matching_regions() or []))

    json_out = args.json_out or (None if args.out else "-")
    if json_out is None:
        return
    text = json.dumps(summarize(view, plan), ensure_ascii=False, indent=2)
    if json_out == "-":
        print(text)
    else:
        Path(json_out).write_text(text, encoding="utf-8")


if __name__ == "__main__":  # pragma: no cover
    main()
