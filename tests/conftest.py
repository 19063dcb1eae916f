"""Shared test fixtures."""

from pathlib import Path
from typing import Any

import pytest

from ghstars.cache import CacheGateway, MemoryStore
from ghstars.config import Settings
from ghstars.models import FetchResult
from ghstars.service import StarsService


class FakeBatchFetcher:
    """Batch fetcher answering from a locator -> (status, payload) table."""

    def __init__(self, responses: dict[str, tuple[int, Any]] | None = None):
        self.responses = responses or {}
        self.calls: list[list[str]] = []
        self.updates: list[dict[str, Any]] = []

    async def fetch_each(self, locators, *, api_key, base_path, log) -> list[FetchResult]:
        self.calls.append(list(locators))
        results = []
        for done, locator in enumerate(locators, start=1):
            status, payload = self.responses.get(locator, (404, None))
            results.append(FetchResult(locator=locator, status=status, payload=payload))
            update = {"done": done, "total": len(locators), "locator": locator}
            self.updates.append(update)
            log(update)
        return results


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at test endpoints and a temporary data dir."""
    return Settings(
        _env_file=None,
        fetch_api_key="test_key",
        fetch_base_path="https://fetch.test/ep/",
        day_hour_endpoint="https://hours.test/api",
        week_hour_endpoint="https://week-hours.test/api",
        month_day_endpoint="https://days.test",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def fake_fetcher() -> FakeBatchFetcher:
    """Fetcher where every locator fails until responses are added."""
    return FakeBatchFetcher()


@pytest.fixture
def service(memory_store: MemoryStore, fake_fetcher: FakeBatchFetcher, settings: Settings):
    """Service wired to the in-memory store and the fake fetcher."""
    return StarsService(CacheGateway(memory_store), fake_fetcher, settings)
