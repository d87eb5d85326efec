"""
api/dorar_client.py
--------------------
Async client for the Dorar.net hadith search endpoint.

    GET DORAR_API_URL?skey=<query>&<options>

The endpoint answers with a JSON array of loosely-shaped hadith objects.
This client returns the decoded payload untouched; callers decide what
to do with a payload that is not a list.
"""

import time
from typing import Any, Optional

import httpx

from config import API_TIMEOUT, API_USER_AGENT, DORAR_API_URL
from utils.errors import UpstreamBadResponseError, UpstreamUnavailableError
from utils.logger import get_logger

logger = get_logger(__name__)


class DorarClient:
    """
    Wraps a shared ``httpx.AsyncClient``.

    Args:
        base_url: Full URL of the search endpoint.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built client (tests pass one backed by
            ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = DORAR_API_URL,
        timeout: float = API_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": API_USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
        )

    async def search(self, query: str, **params) -> Any:
        """
        Run one search request.

        Args:
            query: Trimmed search text (sent as ``skey``).
            **params: Extra query-string options passed through as-is.

        Returns:
            The decoded JSON payload.

        Raises:
            UpstreamUnavailableError: Timeout, connection failure or 5xx.
            UpstreamBadResponseError: 4xx status or a body that is not JSON.
        """
        started = time.perf_counter()
        try:
            response = await self._client.get(self.base_url, params={"skey": query, **params})
        except httpx.HTTPError as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning(f"🌐 Dorar API request failed after {elapsed:.0f}ms: {e!r}")
            raise UpstreamUnavailableError(f"Dorar API unreachable: {e}") from e

        elapsed = (time.perf_counter() - started) * 1000
        logger.info(f"🌐 Dorar API GET skey={query!r} -> {response.status_code} ({elapsed:.0f}ms)")

        if response.status_code >= 500:
            raise UpstreamUnavailableError(f"Dorar API returned {response.status_code}")
        if response.status_code >= 400:
            raise UpstreamBadResponseError(f"Dorar API returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamBadResponseError(f"Dorar API returned invalid JSON: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
