"""Rate-limited, retrying HTTP transport shared by every pipeline stage."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

import httpx

from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "indiacode-harvester/1.0 (+https://www.indiacode.nic.in)"
DEFAULT_ACCEPT = "text/html, application/xhtml+xml, application/json, */*"
RETRYABLE_STATUS = 429


@dataclass
class FetchResult:
    """Outcome of one logical request."""

    status: int
    body: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return self.status == 200


def is_retryable(status: int) -> bool:
    return status == RETRYABLE_STATUS or status >= 500


class RateLimitedTransport:
    """Single HTTP client enforcing request spacing and bounded retries.

    Every attempt first waits on the rate limiter. Responses with status 429
    or >= 500 are retried up to ``max_retries`` times with ``2 ** (attempt + 1)``
    seconds between attempts; the last response is returned whatever its
    status. Connection-level errors are retried on the same schedule and the
    last one is re-raised once the retries are used up.

    Args:
        user_agent: Identifying User-Agent header.
        accept: Accept header.
        timeout: Per-request timeout in seconds.
        max_retries: Number of retries after the first attempt.
        rate_limiter: Limiter owned by this transport.
        client: Optional pre-built httpx client (tests pass a MockTransport).
        sleep: Function used for backoff sleeps.
        follow_redirects: Whether httpx should follow 3xx responses.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        accept: str = DEFAULT_ACCEPT,
        timeout: float = 60,
        max_retries: int = 3,
        rate_limiter: RateLimiter | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        follow_redirects: bool = False,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.max_retries = max_retries
        self.rate_limiter = rate_limiter or RateLimiter()
        self.headers = {"User-Agent": user_agent, "Accept": accept}
        self._sleep = sleep
        self.request_count = 0
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=follow_redirects,
        )
        self.client.headers.update(self.headers)

    def request(self, url: str) -> FetchResult:
        """Fetch ``url`` and return the final response as a FetchResult.

        Raises:
            httpx.TransportError: When no response could be obtained at all.
        """
        attempt = 0
        while True:
            self.rate_limiter.wait()
            self.request_count += 1
            logger.debug("GET %s (attempt %d)", url, attempt + 1)

            try:
                response = self.client.get(url)
            except httpx.TransportError as e:
                if attempt >= self.max_retries:
                    raise
                self._backoff(attempt, url, e.__class__.__name__)
                attempt += 1
                continue

            if is_retryable(response.status_code) and attempt < self.max_retries:
                self._backoff(attempt, url, f"HTTP {response.status_code}")
                attempt += 1
                continue

            return FetchResult(
                status=response.status_code,
                body=response.text,
                content_type=response.headers.get("content-type", ""),
            )

    def _backoff(self, attempt: int, url: str, reason: str) -> None:
        delay = 2 ** (attempt + 1)
        logger.warning("%s for %s, retrying in %ds", reason, url, delay)
        self._sleep(delay)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> RateLimitedTransport:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
