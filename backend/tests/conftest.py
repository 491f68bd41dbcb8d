"""Pytest configuration and fixtures."""

import os
import pytest

# Ensure tests use in-memory storage by default
os.environ.setdefault("STORAGE_BACKEND", "memory")

from lexicards.images import reset_image_services
from lexicards.repositories import CardStore, reset_card_stores
from lexicards.storage import MemoryStorage, get_storage_settings, reset_storage

# 2025-01-01T00:00:00Z
START_MS = 1_735_689_600_000


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTimer:
    """Settable seconds timer for TTL caches."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop process-wide storage, stores and image services after each test."""
    yield
    reset_card_stores()
    reset_storage()
    reset_image_services()
    get_storage_settings.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    return CardStore(storage, clock=clock)


@pytest.fixture
def image_env_cleared(monkeypatch):
    """Fixture that makes sure image generation starts unconfigured."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reset_image_services()
