"""
BibleApiAdapter — chapter text from the public bible-api.com service.

Used by GET /bible/{book}/{chapter} as a datastore-independent source of
chapter text (the response JSON is passed through unchanged). No API key
is needed; BIBLE_API_BASE_URL can point at a self-hosted mirror.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from bible_insight.core.config import settings
from bible_insight.core.errors import UpstreamProviderError

logger = logging.getLogger(__name__)


class BibleApiAdapter:
    """Thin async wrapper around bible-api.com."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.bible_api_base_url).rstrip("/")
        self.timeout = timeout
        self.transport = transport  # tests pass httpx.MockTransport

    async def get_chapter(self, book: str, chapter: int) -> dict[str, Any]:
        """
        Fetch one chapter, e.g. ("John", 3) → GET {base}/John%203.

        Raises:
            UpstreamProviderError: network failure, non-2xx status, or non-JSON body.
        """
        url = f"{self.base_url}/{quote(f'{book} {chapter}')}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "bible-api error: %s — %s",
                    exc.response.status_code,
                    exc.response.text[:200],
                )
                raise UpstreamProviderError(
                    "An error occurred while processing the request", provider="bible-api"
                ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("bible-api request failed: %s", exc)
                raise UpstreamProviderError(
                    "An error occurred while processing the request", provider="bible-api"
                ) from exc


# Module-level singleton
bible_api_adapter = BibleApiAdapter()
