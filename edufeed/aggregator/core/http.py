"""Shared HTTP plumbing for the transport clients."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...config import AppConfig

logger = logging.getLogger(__name__)


def build_timeout(config: AppConfig) -> httpx.Timeout:
    total = config.request_timeout_seconds
    return httpx.Timeout(total, connect=min(total, 5.0))


def build_http_client(config: AppConfig, **kwargs: Any) -> httpx.AsyncClient:
    """Create the AsyncClient shared by every transport of one aggregator."""
    headers = {
        "User-Agent": config.user_agent,
        "Accept-Language": f"{config.language}-{config.region},{config.language};q=0.9",
    }
    return httpx.AsyncClient(
        timeout=build_timeout(config),
        headers=headers,
        follow_redirects=True,
        **kwargs,
    )


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    attempts: int = 2,
) -> str:
    """GET ``url`` and return the body, retrying connection-level failures only.

    Non-2xx responses raise ``httpx.HTTPStatusError`` without a retry.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.debug("Retrying GET %s (attempt %d)", url, attempt.retry_state.attempt_number)
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.text
    raise RuntimeError("fetch_text exited unexpectedly")
