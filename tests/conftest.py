"""Shared fixtures: a controllable clock, a mocked AniList endpoint and the app."""

import pytest
import respx
from fastapi.testclient import TestClient

from anilist_rest.clients.anilist import ANILIST_URL
from anilist_rest.core.cache import ResponseCache
from anilist_rest.core.config import Settings
from anilist_rest.main import create_app


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(ttl=3600, check_period=600, timer=clock)


@pytest.fixture
def anilist_api():
    """The mocked ``POST https://graphql.anilist.co`` route."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock.post(ANILIST_URL)


@pytest.fixture
def client(cache: ResponseCache, anilist_api):
    settings = Settings(service_name="anilist-rest-test", anilist_url=ANILIST_URL)
    app = create_app(settings, cache=cache)
    with TestClient(app) as c:
        yield c
