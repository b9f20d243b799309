# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Environment-driven configuration."""
from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field

from .effects import default_suppress, parse_suppress
from .interfaces import SuppressEffect

logger = logging.getLogger(__name__)

ENV_PREFIX = "TEXTLIGHT_"


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_truthy(name: str, default: bool = False) -> bool:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


class HighlightSettings(BaseModel):
    filter_text: str = ""
    min_confidence: float = Field(0.5, ge=0.0, le=1.0)
    outline_regions: bool = True
    suppress: str = "grayscale"
    blur_radius: float = Field(4.0, ge=0.0)
    log_level: str = "INFO"
    log_format: str = "text"

    def suppress_effect(self) -> SuppressEffect:
        try:
            return parse_suppress(self.suppress, self.blur_radius)
        except ValueError as exc:
            logger.warning("%s; falling back to grayscale", exc)
            return default_suppress


def load_settings() -> HighlightSettings:
    """Read ``TEXTLIGHT_*`` variables; malformed values fall back to defaults."""
    min_confidence = _env_float("MIN_CONFIDENCE", 0.5)
    if not 0.0 <= min_confidence <= 1.0:
        min_confidence = 0.5
    blur_radius = _env_float("BLUR_RADIUS", 4.0)
    if blur_radius < 0:
        blur_radius = 4.0
    return HighlightSettings(
        filter_text=_env_str("FILTER", ""),
        min_confidence=min_confidence,
        outline_regions=_env_truthy("OUTLINE", True),
        suppress=_env_str("SUPPRESS", "grayscale").strip().lower() or "grayscale",
        blur_radius=blur_radius,
        log_level=_env_str("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        log_format=_env_str("LOG_FORMAT", "text").strip().lower() or "text",
    )


def current_filter() -> str:
    """The filter string, read fresh from the environment."""
    return _env_str("FILTER", "")
