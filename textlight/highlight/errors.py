# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""Exceptions raised by the highlighting pipeline."""
from __future__ import annotations


class TextlightError(Exception):
    """Base class for all textlight errors."""


class RecognitionFailure(TextlightError):
    """The recognizer failed on a whole image.

    Non-fatal: callers log it and render without highlighting. The owning
    session stays unpopulated so a later request retries recognition.
    """


class MalformedObservation(TextlightError):
    """A single observation has no usable top candidate."""


class InvalidImageSource(TextlightError):
    """The image could not be decoded or has no pixels."""


class SessionClosed(TextlightError):
    """A closed recognition session was asked for regions it never computed."""
