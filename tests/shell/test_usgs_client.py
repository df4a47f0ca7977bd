"""Tests for the USGS feed client.

Uses the `responses` library to mock HTTP requests.
"""

import pytest
import requests
import responses

from quakewatch.shell.usgs_client import USGS_FEED_BASE, TimePeriod, USGSClient


FEED = {
    "type": "FeatureCollection",
    "metadata": {"count": 1},
    "features": [
        {
            "id": "us1",
            "properties": {"mag": 4.1, "place": "Somewhere", "time": 1_700_000_000_000},
            "geometry": {"coordinates": [90.0, 23.0, 10.0]},
        }
    ],
}


class TestFeedUrl:
    """Tests for USGSClient.feed_url()."""

    @pytest.mark.parametrize("period,filename", [
        ("day", "2.5_day.geojson"),
        ("week", "2.5_week.geojson"),
        (TimePeriod.MONTH, "2.5_month.geojson"),
    ])
    def test_feed_files(self, period, filename):
        assert USGSClient().feed_url(period) == f"{USGS_FEED_BASE}/{filename}"

    def test_unknown_period_raises(self):
        with pytest.raises(ValueError):
            USGSClient().feed_url("year")

    def test_strips_trailing_slash(self):
        client = USGSClient(base_url="https://example.com/feeds/")
        assert client.feed_url("day") == "https://example.com/feeds/2.5_day.geojson"


class TestFetchFeed:
    """Tests for USGSClient.fetch_feed()."""

    @responses.activate
    def test_returns_geojson(self):
        responses.add(responses.GET, f"{USGS_FEED_BASE}/2.5_day.geojson", json=FEED, status=200)

        result = USGSClient().fetch_feed("day")

        assert result == FEED

    @responses.activate
    def test_week_feed(self):
        responses.add(responses.GET, f"{USGS_FEED_BASE}/2.5_week.geojson", json=FEED, status=200)

        USGSClient().fetch_feed(TimePeriod.WEEK)

        assert len(responses.calls) == 1

    @responses.activate
    def test_http_error_raises(self):
        responses.add(responses.GET, f"{USGS_FEED_BASE}/2.5_day.geojson", status=503)

        with pytest.raises(requests.HTTPError):
            USGSClient().fetch_feed()

    @responses.activate
    def test_connection_error_raises(self):
        responses.add(
            responses.GET,
            f"{USGS_FEED_BASE}/2.5_day.geojson",
            body=requests.ConnectionError("offline"),
        )

        with pytest.raises(requests.RequestException):
            USGSClient().fetch_feed()

    @responses.activate
    def test_invalid_json_raises_value_error(self):
        responses.add(responses.GET, f"{USGS_FEED_BASE}/2.5_day.geojson", body="<html>", status=200)

        with pytest.raises(ValueError):
            USGSClient().fetch_feed()
