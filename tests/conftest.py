"""Shared fixtures."""

from datetime import datetime, timezone

import httpx
import pytest

from buidltown_scraper.core.http_client import HttpClient
from buidltown_scraper.reconciler import UpsertReconciler
from buidltown_scraper.storage import InMemoryStore

FIXED_NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def reconciler(store):
    return UpsertReconciler(store)


@pytest.fixture
def mock_http():
    """
    Factory for an HttpClient answering from a route table.

    Routes map a URL (without query string) to HTML text, a JSON-able
    dict or list, or a callable taking the httpx.Request and returning
    an httpx.Response. Unknown URLs get 404.
    """
    def factory(routes: dict) -> HttpClient:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url).split("?")[0])
            if route is None:
                return httpx.Response(404)
            if callable(route):
                return route(request)
            if isinstance(route, str):
                return httpx.Response(200, text=route)
            return httpx.Response(200, json=route)

        return HttpClient(
            requests_per_second=1000.0,
            max_retries=1,
            enable_cache=False,
            backoff_multiplier=0,
            transport=httpx.MockTransport(handler),
        )

    return factory
