# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

"""One-shot text recognition per image, shared by every caller.

Recognition is the only expensive step of the pipeline and the only one that
awaits. A :class:`RecognitionSession` owns one image and runs the recognizer
at most once for it: the first caller starts a task, every concurrent caller
awaits that same task, and the converted regions are cached as an immutable
tuple. A failed run leaves the cache empty so the next request tries again.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import RecognitionFailure, SessionClosed
from .geometry import regions_from_observations
from .interfaces import CallbackRecognizer, Recognizer
from .models import ImageSource, RawObservation, TextRegion

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5


async def await_callback(recognizer: CallbackRecognizer, image: ImageSource) -> List[RawObservation]:
    """Run a completion-callback recognizer as a single awaitable.

    The completion may be invoked from any thread. Only the first invocation
    settles the result; later ones are ignored.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[List[RawObservation]] = loop.create_future()

    def _settle(observations: Optional[Sequence[RawObservation]], error: Optional[BaseException]) -> None:
        if future.done():
            logger.debug("ignoring repeated recognizer completion")
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(list(observations or []))

    def completion(observations: Optional[Sequence[RawObservation]], error: Optional[BaseException] = None) -> None:
        try:
            loop.call_soon_threadsafe(_settle, observations, error)
        except RuntimeError:
            # the awaiting loop is gone; nobody is left to receive the result
            logger.debug("dropping recognizer completion delivered after the event loop closed")

    try:
        recognizer.start(image, completion)
    except Exception as exc:
        completion(None, exc)
    return await future


class RecognitionSession:
    """Cached recognition results for a single image."""

    def __init__(self, image: ImageSource, recognizer: Recognizer) -> None:
        self.image = image
        self.recognizer = recognizer
        self._regions: Optional[Tuple[TextRegion, ...]] = None
        self._inflight: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def cached_regions(self) -> Optional[Tuple[TextRegion, ...]]:
        """Regions recognized so far, or ``None`` if recognition has not completed."""
        return self._regions

    @property
    def closed(self) -> bool:
        return self._closed

    async def regions(self) -> Tuple[TextRegion, ...]:
        if self._regions is not None:
            return self._regions
        if self._closed and self._inflight is None:
            raise SessionClosed("recognition session is closed")
        if self._inflight is None:
            self._inflight = asyncio.get_running_loop().create_task(self._recognize())
        # a cancelled waiter must not cancel the run the other waiters share
        return await asyncio.shield(self._inflight)

    async def observations(self, confidence_threshold: float = DEFAULT_CONFIDENCE) -> List[TextRegion]:
        regions = await self.regions()
        return [region for region in regions if region.confidence >= confidence_threshold]

    async def text(self, confidence_threshold: float = DEFAULT_CONFIDENCE, separator: str = "") -> str:
        regions = await self.observations(confidence_threshold)
        return separator.join(region.text for region in regions)

    def close(self) -> None:
        """Detach the session.

        A run already in flight still answers its waiters but is not stored.
        Later requests raise :class:`SessionClosed` instead of recognizing again.
        """
        self._closed = True

    async def _recognize(self) -> Tuple[TextRegion, ...]:
        try:
            observations = await self.recognizer.recognize(self.image)
        except RecognitionFailure:
            raise
        except Exception as exc:
            raise RecognitionFailure(f"Text recognition failed: {exc}") from exc
        finally:
            self._inflight = None

        regions = tuple(regions_from_observations(observations, self.image.size))
        if self._closed:
            logger.debug("session closed before recognition finished; discarding %d regions", len(regions))
            return regions
        self._regions = regions
        logger.debug("recognized %d regions from %d observations", len(regions), len(observations))
        return regions


class RecognitionCache:
    """Recognition sessions keyed by image, sharing one recognizer.

    Sessions hold their image, so an entry keeps the pixels alive until it is
    removed with :meth:`discard` or :meth:`clear`.
    """

    def __init__(self, recognizer: Recognizer) -> None:
        self.recognizer = recognizer
        self._sessions: Dict[int, RecognitionSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def session(self, image: ImageSource) -> RecognitionSession:
        session = self._sessions.get(id(image))
        if session is None:
            session = RecognitionSession(image, self.recognizer)
            self._sessions[id(image)] = session
        return session

    async def regions(self, image: ImageSource) -> Tuple[TextRegion, ...]:
        return await self.session(image).regions()

    async def observations(
        self, image: ImageSource, confidence_threshold: float = DEFAULT_CONFIDENCE
    ) -> List[TextRegion]:
        return await self.session(image).observations(confidence_threshold)

    async def text(
        self, image: ImageSource, confidence_threshold: float = DEFAULT_CONFIDENCE, separator: str = ""
    ) -> str:
        return await self.session(image).text(confidence_threshold, separator)

    def discard(self, image: ImageSource) -> None:
        session = self._sessions.pop(id(image), None)
        if session is not None:
            session.close()

    def clear(self) -> None:
        sessions, self._sessions = self._sessions, {}
        for session in sessions.values():
            session.close()
