"""
Pytest configuration and fixtures for kontent-ai-core tests.
"""

from typing import Callable, List

import httpx
import pytest

from kontent_ai_core.core.options import ClientOptions, RetryOptions
from kontent_ai_core.core.logging import reset_logging


ENVIRONMENT_ID = "975bf280-fd91-488c-994c-2f04416e5ee3"


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://deliver.kontent.ai"


@pytest.fixture
def environment_id():
    return ENVIRONMENT_ID


@pytest.fixture
def options(base_url):
    """Client options with fast, deterministic retries."""
    return ClientOptions(
        environment_id=ENVIRONMENT_ID,
        base_url=base_url,
        retry=RetryOptions(max_retry_attempts=3, base_delay=0.01, max_delay=0.1, use_jitter=False),
    )


class SleepRecorder:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_sleep():
    return SleepRecorder()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


class RecordingTransport(httpx.AsyncBaseTransport):
    """
    Inner transport returning scripted outcomes.

    Each item is a status code, an httpx.Response or an exception instance.
    The last item repeats once the script is exhausted.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or [200]
        self.requests: List[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(outcome, json={"ok": outcome < 400}, request=request)


@pytest.fixture
def recording_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport


@pytest.fixture(autouse=True)
def clean_library_logging():
    """Drop handlers installed by configure_logging() between tests."""
    yield
    reset_logging()
