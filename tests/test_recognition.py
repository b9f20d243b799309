# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 Textlight contributors

import asyncio
import threading

import pytest
from PIL import Image

from textlight.highlight import (
    ImageSource,
    MockCallbackRecognizer,
    MockRecognizer,
    NormalizedBox,
    RawObservation,
    RecognitionCache,
    RecognitionFailure,
    RecognitionSession,
    SessionClosed,
    await_callback,
)


def _observation(text, confidence=0.9, min_y=0.5):
    return RawObservation(
        top_candidate=text,
        confidence=confidence,
        bounding_box=NormalizedBox(min_x=0.1, min_y=min_y, width=0.5, height=0.1),
    )


OBSERVATIONS = [
    _observation("Hello", 0.9, 0.8),
    _observation("faint", 0.3, 0.5),
    _observation("World", 0.5, 0.2),
]


@pytest.fixture
def image():
    return ImageSource.from_pil(Image.new("RGB", (100, 50)))


def test_concurrent_callers_share_one_recognition(image):
    recognizer = MockRecognizer(OBSERVATIONS, yields=3)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        return await asyncio.gather(*(session.regions() for _ in range(5)))

    results = asyncio.run(scenario())

    assert len(recognizer.calls) == 1
    assert all(result is results[0] for result in results)
    assert [region.text for region in results[0]] == ["Hello", "faint", "World"]
    assert session.cached_regions is results[0]


def test_cached_regions_are_reused(image):
    recognizer = MockRecognizer(OBSERVATIONS)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        first = await session.regions()
        second = await session.regions()
        return first, second

    first, second = asyncio.run(scenario())

    assert first is second
    assert len(recognizer.calls) == 1


def test_empty_result_is_cached_and_distinct_from_not_computed(image):
    recognizer = MockRecognizer([])
    session = RecognitionSession(image, recognizer)
    assert session.cached_regions is None

    asyncio.run(session.regions())
    asyncio.run(session.regions())

    assert session.cached_regions == ()
    assert len(recognizer.calls) == 1


def test_failure_leaves_cache_unpopulated_and_retries(image):
    recognizer = MockRecognizer(OBSERVATIONS, failures=[RuntimeError("engine crashed")])
    session = RecognitionSession(image, recognizer)

    with pytest.raises(RecognitionFailure) as excinfo:
        asyncio.run(session.regions())

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert session.cached_regions is None

    regions = asyncio.run(session.regions())

    assert len(regions) == 3
    assert len(recognizer.calls) == 2


def test_concurrent_callers_share_one_failure(image):
    recognizer = MockRecognizer(OBSERVATIONS, failures=[RuntimeError("boom")], yields=2)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        return await asyncio.gather(*(session.regions() for _ in range(3)), return_exceptions=True)

    results = asyncio.run(scenario())

    assert len(recognizer.calls) == 1
    assert all(isinstance(result, RecognitionFailure) for result in results)
    assert session.cached_regions is None


def test_cancelled_waiter_does_not_cancel_shared_run(image):
    recognizer = MockRecognizer(OBSERVATIONS, yields=3)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        first = asyncio.ensure_future(session.regions())
        second = asyncio.ensure_future(session.regions())
        await asyncio.sleep(0)
        first.cancel()
        regions = await second
        return first, regions

    first, regions = asyncio.run(scenario())

    assert first.cancelled()
    assert len(regions) == 3
    assert len(recognizer.calls) == 1


def test_closed_session_discards_late_result(image):
    recognizer = MockRecognizer(OBSERVATIONS, yields=2)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        pending = asyncio.ensure_future(session.regions())
        await asyncio.sleep(0)
        session.close()
        return await pending

    regions = asyncio.run(scenario())

    assert len(regions) == 3
    assert session.cached_regions is None


def test_closed_session_never_recognizes_again(image):
    recognizer = MockRecognizer(OBSERVATIONS, yields=2)
    session = RecognitionSession(image, recognizer)

    async def scenario():
        pending = asyncio.ensure_future(session.regions())
        await asyncio.sleep(0)
        session.close()
        await pending
        for _ in range(2):
            with pytest.raises(SessionClosed):
                await session.regions()

    asyncio.run(scenario())

    assert len(recognizer.calls) == 1
    assert session.cached_regions is None


def test_closed_session_keeps_regions_it_already_has(image):
    recognizer = MockRecognizer(OBSERVATIONS)
    session = RecognitionSession(image, recognizer)

    first = asyncio.run(session.regions())
    session.close()

    assert asyncio.run(session.regions()) is first
    assert len(recognizer.calls) == 1


def test_observations_and_text_filter_by_confidence(image):
    session = RecognitionSession(image, MockRecognizer(OBSERVATIONS))

    async def scenario():
        return (
            await session.observations(),
            await session.observations(confidence_threshold=0.0),
            await session.text(),
            await session.text(confidence_threshold=0.0, separator="\n"),
        )

    default, everything, joined, lines = asyncio.run(scenario())

    assert [region.text for region in default] == ["Hello", "World"]
    assert len(everything) == 3
    assert joined == "HelloWorld"
    assert lines == "Hello\nfaint\nWorld"


def test_recognition_cache_keeps_one_session_per_image(image):
    other = ImageSource.from_pil(Image.new("RGB", (10, 10)))
    recognizer = MockRecognizer(OBSERVATIONS)
    cache = RecognitionCache(recognizer)

    async def scenario():
        await cache.regions(image)
        await cache.regions(image)
        await cache.regions(other)
        return await cache.text(image, separator=" ")

    text = asyncio.run(scenario())

    assert text == "Hello World"
    assert len(cache) == 2
    assert recognizer.calls == [image, other]


def test_recognition_cache_discard_closes_session(image):
    recognizer = MockRecognizer(OBSERVATIONS)
    cache = RecognitionCache(recognizer)
    session = cache.session(image)

    asyncio.run(cache.regions(image))
    cache.discard(image)
    asyncio.run(cache.regions(image))

    assert session.closed
    assert cache.session(image) is not session
    assert len(recognizer.calls) == 2


def test_await_callback_settles_once(image):
    recognizer = MockCallbackRecognizer(
        [([_observation("first")], None), (None, RuntimeError("late")), ([_observation("second")], None)]
    )

    observations = asyncio.run(await_callback(recognizer, image))

    assert [obs.top_candidate for obs in observations] == ["first"]
    assert recognizer.calls == [image]


def test_await_callback_propagates_error(image):
    recognizer = MockCallbackRecognizer([(None, RuntimeError("no text layer"))])

    with pytest.raises(RuntimeError, match="no text layer"):
        asyncio.run(await_callback(recognizer, image))


def test_await_callback_handles_start_failure(image):
    recognizer = MockCallbackRecognizer([], raise_on_start=ValueError("bad image"))

    with pytest.raises(ValueError, match="bad image"):
        asyncio.run(await_callback(recognizer, image))


def test_recognition_cache_clear_closes_every_session(image):
    other = ImageSource.from_pil(Image.new("RGB", (10, 10)))
    cache = RecognitionCache(MockRecognizer(OBSERVATIONS))
    sessions = [cache.session(image), cache.session(other)]

    cache.clear()

    assert len(cache) == 0
    assert all(session.closed for session in sessions)


class DeferredCallbackRecognizer:
    """Completes from a worker thread only when told to."""

    def __init__(self):
        self.release = threading.Event()
        self.errors = []
        self.worker = None

    def start(self, image, completion):
        def run():
            self.release.wait(5)
            try:
                completion([_observation("late")], None)
            except Exception as exc:
                self.errors.append(exc)

        self.worker = threading.Thread(target=run, daemon=True)
        self.worker.start()


def test_await_callback_drops_completion_after_loop_closed(image):
    recognizer = DeferredCallbackRecognizer()

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(asyncio.wait_for(await_callback(recognizer, image), 0.01))

    recognizer.release.set()
    recognizer.worker.join(5)

    assert not recognizer.worker.is_alive()
    assert recognizer.errors == []
