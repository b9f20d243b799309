# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

import pytest

from textlight.highlight import (
    Blur,
    Grayscale,
    HighlightSettings,
    Rect,
    RecordingContext,
    current_filter,
    default_suppress,
    load_settings,
    parse_suppress,
)

_VARS = (
    "TEXTLIGHT_FILTER",
    "TEXTLIGHT_MIN_CONFIDENCE",
    "TEXTLIGHT_OUTLINE",
    "TEXTLIGHT_SUPPRESS",
    "TEXTLIGHT_BLUR_RADIUS",
    "TEXTLIGHT_LOG_LEVEL",
    "TEXTLIGHT_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings()

    assert settings == HighlightSettings()
    assert settings.filter_text == ""
    assert settings.min_confidence == 0.5
    assert settings.outline_regions is True
    assert settings.suppress_effect() is default_suppress


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TEXTLIGHT_FILTER", "total\ndue")
    monkeypatch.setenv("TEXTLIGHT_MIN_CONFIDENCE", "0.25")
    monkeypatch.setenv("TEXTLIGHT_OUTLINE", "off")
    monkeypatch.setenv("TEXTLIGHT_SUPPRESS", "Grayscale+Blur")
    monkeypatch.setenv("TEXTLIGHT_BLUR_RADIUS", "2.5")
    monkeypatch.setenv("TEXTLIGHT_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.filter_text == "total\ndue"
    assert settings.min_confidence == 0.25
    assert settings.outline_regions is False
    assert settings.suppress == "grayscale+blur"
    assert settings.blur_radius == 2.5
    assert settings.log_level == "DEBUG"
    assert current_filter() == "total\ndue"


@pytest.mark.parametrize(
    "name, raw",
    [
        ("TEXTLIGHT_MIN_CONFIDENCE", "high"),
        ("TEXTLIGHT_MIN_CONFIDENCE", "1.5"),
        ("TEXTLIGHT_BLUR_RADIUS", "-3"),
        ("TEXTLIGHT_BLUR_RADIUS", ""),
    ],
)
def test_malformed_values_fall_back_to_defaults(monkeypatch, name, raw):
    monkeypatch.setenv(name, raw)

    settings = load_settings()

    assert settings.min_confidence == 0.5
    assert settings.blur_radius == 4.0


def test_unknown_suppression_falls_back_to_grayscale(monkeypatch):
    monkeypatch.setenv("TEXTLIGHT_SUPPRESS", "sepia")

    assert load_settings().suppress_effect() is default_suppress


def test_parse_suppress_stacks_effects_in_order():
    context = RecordingContext()

    parse_suppress("grayscale + blur", blur_radius=6)(context, Rect(x=0, y=0, width=1, height=1), (1, 1))

    assert context.filters == [Grayscale(), Blur(6)]


def test_parse_suppress_rejects_unknown_effect():
    with pytest.raises(ValueError):
        parse_suppress("grayscale+sepia")
