"""
Shared async HTTP client for all extractors.

One httpx.AsyncClient per run. Every GET goes through a per-host throttle,
a tenacity retry loop for transient failures and an optional short-lived
response cache, and leaves the client either as a response or a FetchError.
"""

import asyncio
import itertools
import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode, urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import FetchError

logger = structlog.get_logger(__name__)


USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
]

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_transient_error(exc: BaseException) -> bool:
    """True for errors worth another attempt."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return False


def _describe(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return str(exc) or type(exc).__name__


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.info(
        "http_retry",
        url=state.kwargs.get("url"),
        attempt=state.attempt_number,
        error=_describe(exc) if exc else None,
    )


@dataclass
class RateLimiter:
    """Spaces requests to one host at least 1/requests_per_second apart."""
    requests_per_second: float = 2.0
    last_request: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire(self) -> None:
        async with self.lock:
            ready_at = self.last_request + 1.0 / self.requests_per_second
            delay = ready_at - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)
            self.last_request = time.monotonic()


class ResponseCache:
    """Successful responses by full URL, each valid for ``ttl`` seconds."""

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._entries: dict[str, tuple[float, httpx.Response]] = {}

    def get(self, url: str) -> Optional[httpx.Response]:
        hit = self._entries.get(url)
        if hit is None:
            return None
        expires_at, response = hit
        if time.monotonic() >= expires_at:
            del self._entries[url]
            return None
        return response

    def put(self, url: str, response: httpx.Response) -> None:
        self._entries[url] = (time.monotonic() + self.ttl, response)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class HttpClient:
    """
    Async HTTP client with per-host throttling, retries and caching.

    Usage:
        async with HttpClient() as client:
            html = await client.get_text("https://ethglobal.com/events")
            data = await client.get_json("https://api.devfolio.co/api/hackathons")
    """

    def __init__(
        self,
        requests_per_second: float = 2.0,
        timeout: float = 30.0,
        cache_ttl: int = 300,
        max_retries: int = 3,
        enable_cache: bool = True,
        backoff_multiplier: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            requests_per_second: Default rate per host
            timeout: Request timeout in seconds
            cache_ttl: Seconds a cached response stays valid
            max_retries: Total attempts per request
            enable_cache: Serve repeated GETs from the cache
            backoff_multiplier: Exponential backoff base in seconds (0 disables waiting)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.requests_per_second = requests_per_second
        self.timeout = timeout
        self.max_retries = max_retries
        self.enable_cache = enable_cache
        self.backoff_multiplier = backoff_multiplier
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._limiters: dict[str, RateLimiter] = {}
        self._host_rates: dict[str, float] = {}
        self._cache = ResponseCache(cache_ttl)
        self._user_agents = itertools.cycle(USER_AGENTS)

    async def __aenter__(self) -> "HttpClient":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"Accept-Language": "en-US,en;q=0.9"},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def set_rate_limit(self, url: str, requests_per_second: float) -> None:
        """Override the rate for the host of ``url``."""
        host = urlparse(url).netloc
        self._host_rates[host] = requests_per_second
        self._limiters.pop(host, None)

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        host = urlparse(url).netloc
        limiter = self._limiters.get(host)
        if limiter is None:
            limiter = RateLimiter(self._host_rates.get(host, self.requests_per_second))
            self._limiters[host] = limiter
        return limiter

    async def _send(self, method: str, url: str, headers: dict, **kwargs) -> httpx.Response:
        response = await self._client.request(
            method,
            url,
            headers={**headers, "User-Agent": next(self._user_agents)},
            **kwargs,
        )
        response.raise_for_status()
        return response

    async def get(
        self,
        url: str,
        use_cache: bool = True,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        **kwargs,
    ) -> httpx.Response:
        """
        GET ``url`` with throttling, retries and caching.

        Raises:
            FetchError: Non-2xx status or network failure after the last attempt
        """
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        full_url = f"{url}?{urlencode(params, doseq=True)}" if params else url
        caching = use_cache and self.enable_cache

        if caching:
            cached = self._cache.get(full_url)
            if cached is not None:
                logger.debug("cache_hit", url=full_url)
                return cached

        await self._get_rate_limiter(url).acquire()
        logger.debug("http_get", url=full_url)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=10),
            retry=retry_if_exception(is_transient_error),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            response = await retrying(
                self._send, "GET", url=url, headers=headers or {}, params=params, **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning("http_error", url=full_url, error=_describe(e))
            raise FetchError(full_url, _describe(e)) from e

        if caching:
            self._cache.put(full_url, response)
        return response

    async def get_text(self, url: str, **kwargs) -> str:
        response = await self.get(url, **kwargs)
        return response.text

    async def get_json(self, url: str, **kwargs) -> Any:
        """
        GET returning decoded JSON.

        Raises:
            FetchError: Request failed or the body is not JSON
        """
        headers = {"Accept": "application/json", **(kwargs.pop("headers", None) or {})}
        response = await self.get(url, headers=headers, **kwargs)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(url, f"invalid JSON: {e}") from e

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)
