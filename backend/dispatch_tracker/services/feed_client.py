"""Client for the ArcGIS active dispatch feed with retry logic."""

import asyncio
import logging
from typing import Any

import httpx

from dispatch_tracker.config import get_settings
from dispatch_tracker.services.normalizer import FeedParseError

logger = logging.getLogger(__name__)
settings = get_settings()


class FeedClientError(Exception):
    """Base exception for feed fetch errors."""

    pass


class DispatchFeedClient:
    """
    Client for the ArcGIS FeatureServer active dispatch table.

    Features:
    - Exponential backoff retry on rate limiting, server and network errors
    - Per-request timeout so a hung fetch cannot stall the poll loop
    """

    def __init__(
        self,
        feed_url: str = settings.feed_url,
        page_size: int = settings.feed_page_size,
        max_retries: int = settings.feed_max_retries,
        timeout: float = settings.feed_timeout_seconds,
    ):
        self.feed_url = feed_url
        self.page_size = page_size
        self.max_retries = max_retries
        self.timeout = timeout

        self.headers: dict[str, str] = {
            "Accept": "application/json",
        }

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make HTTP request with exponential backoff retry."""
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=self.headers, params=params)
                    response.raise_for_status()
                    try:
                        return response.json()
                    except ValueError as e:
                        raise FeedParseError(f"Feed response is not JSON: {e}") from e

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code == 429:  # Rate limited
                    wait_time = 2**attempt * 10  # 10s, 20s, 40s
                    logger.warning(f"Rate limited, waiting {wait_time}s before retry")
                    await asyncio.sleep(wait_time)
                elif e.response.status_code >= 500:  # Server error
                    wait_time = 2**attempt
                    logger.warning(f"Server error {e.response.status_code}, retry in {wait_time}s")
                    await asyncio.sleep(wait_time)
                else:
                    raise FeedClientError(f"HTTP error: {e}") from e

            except httpx.RequestError as e:
                last_error = e
                wait_time = 2**attempt
                logger.warning(f"Request error: {e}, retry in {wait_time}s")
                await asyncio.sleep(wait_time)

        raise FeedClientError(f"Failed after {self.max_retries} retries: {last_error}")

    async def fetch_active(self) -> Any:
        """
        Fetch the currently active dispatch incidents.

        Returns:
            Raw feature-collection payload (see normalizer.normalize_feed)
        """
        params: dict[str, Any] = {
            "where": "1=1",
            "outFields": "*",
            "f": "json",
            "resultRecordCount": self.page_size,
        }

        logger.info(f"Fetching active dispatch feed: limit={self.page_size}")
        payload = await self._request_with_retry(self.feed_url, params)

        features = payload.get("features") if isinstance(payload, dict) else None
        logger.info(f"Fetched {len(features) if isinstance(features, list) else 0} feed features")

        return payload
