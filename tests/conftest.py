"""Shared fixtures: a fixed clock, an in-memory store and a deterministic shuffle."""

from datetime import datetime, timezone

import pytest

from madina.engine import MasteryEngine
from madina.storage import InMemoryStore


NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; advance() moves it forward."""

    def __init__(self, start=NOW):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, delta):
        self.current = self.current + delta


def identity_shuffle(items):
    return list(items)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store, clock):
    return MasteryEngine(store, clock=clock, shuffle=identity_shuffle)
