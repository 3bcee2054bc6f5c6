"""Pytest configuration and shared fixtures for webexplore tests."""

from collections.abc import Iterator
from typing import Any

import httpx
import pytest

from webexplore.config import get_settings
from webexplore.request import reset_cache_storage


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests; HTTP is mocked with respx")
    config.addinivalue_line("markers", "integration: Tests that combine several components over mocked HTTP")
    config.addinivalue_line("markers", "e2e: End-to-end tests against live websites")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Apply default markers to tests without explicit markers.

    Tests should use explicit markers (@pytest.mark.unit, @pytest.mark.e2e).
    Unmarked tests default to unit.
    """
    for item in items:
        # Skip if already has a category marker
        marker_names = [m.name for m in item.iter_markers()]
        if any(m in marker_names for m in ("unit", "integration", "e2e")):
            continue

        # Default unmarked tests to unit
        item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test fresh settings and an empty response cache."""
    for name in ("WEBEXPLORE_LOG_LEVEL", "WEBEXPLORE_USER_AGENT", "WEBEXPLORE_CRAWL_DELAY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_cache_storage()
    yield
    get_settings.cache_clear()
    reset_cache_storage()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record sitemap search pauses instead of sleeping."""
    calls: list[float] = []
    monkeypatch.setattr("webexplore.sitemap.search.sleep", calls.append)
    return calls


@pytest.fixture
def transport_retries(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    """Record the retry count each request hands to its httpx transport."""
    seen: list[int] = []
    transport_class = httpx.HTTPTransport

    class RecordingTransport(transport_class):
        def __init__(self, *args: Any, retries: int = 0, **kwargs: Any) -> None:
            seen.append(retries)
            super().__init__(*args, retries=retries, **kwargs)

    monkeypatch.setattr(httpx, "HTTPTransport", RecordingTransport)
    return seen
