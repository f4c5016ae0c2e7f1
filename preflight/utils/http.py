"""HTTP utilities providing retry/backoff semantics for data-store reads."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 0.5) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds


def is_retryable(exc: Exception) -> bool:
    """Transport failures and 5xx responses are transient; 4xx are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Call ``func`` until it yields a successful response or retries run out.

    Backoff grows linearly with the attempt number. Non-retryable errors are
    raised on first sight.
    """
    config = retry_config or RetryConfig()

    for attempt in range(1, config.attempts + 1):
        try:
            response = await func(*args, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as exc:
            if not is_retryable(exc) or attempt >= config.attempts:
                raise
            logger.debug(
                "Retrying request after %s (attempt %d/%d)",
                type(exc).__name__,
                attempt,
                config.attempts,
            )
            await asyncio.sleep(config.backoff_seconds * attempt)

    raise RuntimeError("Request failed without raising an exception")


__all__ = ["RetryConfig", "is_retryable", "request_with_retry"]
