"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS earthquake summary
feeds. All I/O is contained here; parsing is in the core module.
"""

import logging
from enum import Enum
from typing import Any

import requests


logger = logging.getLogger(__name__)


# USGS GeoJSON summary feeds (M2.5+)
USGS_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30


class TimePeriod(str, Enum):
    """Feed windows offered by USGS."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


FEED_FILES = {
    TimePeriod.DAY: "2.5_day.geojson",
    TimePeriod.WEEK: "2.5_week.geojson",
    TimePeriod.MONTH: "2.5_month.geojson",
}


class USGSClient:
    """Client for fetching seismic event snapshots from USGS feeds.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = USGS_FEED_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize USGS client.

        Args:
            base_url: Summary feed base URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def feed_url(self, period: TimePeriod | str) -> str:
        """Build the feed URL for a time window."""
        return f"{self.base_url}/{FEED_FILES[TimePeriod(period)]}"

    def fetch_feed(self, period: TimePeriod | str = TimePeriod.DAY) -> dict[str, Any]:
        """Fetch a full feed snapshot.

        This method performs HTTP I/O.

        Args:
            period: Feed window ('day', 'week' or 'month')

        Returns:
            Raw GeoJSON FeatureCollection

        Raises:
            requests.RequestException: If the request fails
            ValueError: If the body is not JSON
        """
        url = self.feed_url(period)

        logger.info("Fetching %s feed from USGS", TimePeriod(period).value)

        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        count = data.get("metadata", {}).get("count", len(data.get("features", [])))

        logger.info("Fetched %d events from USGS", count)

        return data
