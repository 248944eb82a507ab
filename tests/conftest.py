"""
Shared fixtures: a controllable clock for the animation, and fakes for the
relay client and the LLM helper so no test talks to a real provider.
"""

import pytest

from relay_client import RelayUnavailable


class FakeClock:
    """Monotonic clock that only moves when the animation sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeRelay:
    def __init__(self, answer: str = "Relay answer", error: Exception = None):
        self.answer = answer
        self.error = error
        self.calls = []

    def send(self, message: str) -> str:
        self.calls.append(message)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeHelper:
    def __init__(self, answer="Drink water and rest.", error: Exception = None):
        self.answer = answer
        self.error = error
        self.calls = []

    def complete(self, message: str):
        self.calls.append(message)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_relay():
    return FakeRelay()


@pytest.fixture
def offline_relay():
    return FakeRelay(error=RelayUnavailable("connection refused"))


@pytest.fixture
def groq_key(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_groq_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
