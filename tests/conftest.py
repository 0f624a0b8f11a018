import pytest
from fastapi.testclient import TestClient

from api_gate import MemoryStore, RateLimiter
from email_checker import DisposableDomains
from main import create_app

START_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def domains():
    return DisposableDomains(["mailinator.com", "yopmail.com", "tempmail.com"])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def limiter(store, clock):
    return RateLimiter(store, clock=clock)


@pytest.fixture
def client(domains, limiter):
    app = create_app(domains, limiter)
    with TestClient(app) as c:
        yield c
