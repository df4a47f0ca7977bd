"""Unit tests for seismic event parsing, filtering and sorting.

These tests demonstrate the benefit of the Functional Core pattern:
- No mocks needed
- Fast, deterministic execution
- Simple assertions on pure functions
"""

from datetime import datetime, timezone

import pytest

from quakewatch.core.event import (
    MS_PER_HOUR,
    SeismicEvent,
    SortOrder,
    TimeRange,
    event_types,
    filter_events,
    get_region_name,
    parse_event,
    parse_events,
    sort_events,
    strongest_event,
)


NOW = 1_700_000_000_000  # 2023-11-14 22:13:20 UTC

# Sample USGS GeoJSON feature for testing
SAMPLE_FEATURE = {
    "type": "Feature",
    "id": "us7000abcd",
    "properties": {
        "mag": 5.6,
        "place": "12 km SW of Sylhet, Bangladesh",
        "time": NOW,
        "url": "https://earthquake.usgs.gov/earthquakes/eventpage/us7000abcd",
        "felt": 42,
        "tsunami": 0,
        "type": "earthquake",
        "magType": "mww",
    },
    "geometry": {
        "type": "Point",
        "coordinates": [91.8, 24.8, 35.0],  # lon, lat, depth
    },
}


def _feature(event_id, time_ms, mag=4.0):
    return {
        "id": event_id,
        "properties": {"mag": mag, "place": "Somewhere", "time": time_ms},
        "geometry": {"coordinates": [90.0, 23.0, 10.0]},
    }


def _event(event_id, occurred_at=NOW, magnitude=4.0, place="Somewhere", event_type="earthquake"):
    return SeismicEvent(
        id=event_id,
        magnitude=magnitude,
        place=place,
        occurred_at=occurred_at,
        latitude=23.0,
        longitude=90.0,
        depth_km=10.0,
        event_type=event_type,
    )


class TestParseEvent:
    """Tests for parse_event() pure function."""

    def test_parses_valid_feature(self):
        """Should parse a valid GeoJSON feature into SeismicEvent."""
        result = parse_event(SAMPLE_FEATURE)

        assert result is not None
        assert result.id == "us7000abcd"
        assert result.magnitude == 5.6
        assert result.place == "12 km SW of Sylhet, Bangladesh"
        assert result.latitude == 24.8
        assert result.longitude == 91.8
        assert result.depth_km == 35.0
        assert result.felt == 42
        assert result.tsunami is False
        assert result.event_type == "earthquake"
        assert result.mag_type == "mww"

    def test_keeps_milliseconds(self):
        """Origin time stays in milliseconds; time is derived."""
        result = parse_event(SAMPLE_FEATURE)

        assert result.occurred_at == NOW
        assert result.time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_returns_none_for_missing_magnitude(self):
        """Should return None if magnitude is missing."""
        feature = _feature("x", NOW)
        feature["properties"]["mag"] = None
        assert parse_event(feature) is None

    def test_returns_none_for_missing_time(self):
        """Should return None if time is missing."""
        feature = _feature("x", NOW)
        del feature["properties"]["time"]
        assert parse_event(feature) is None

    def test_returns_none_for_short_coordinates(self):
        """Should return None without a depth coordinate."""
        feature = _feature("x", NOW)
        feature["geometry"]["coordinates"] = [90.0, 23.0]
        assert parse_event(feature) is None

    def test_returns_none_for_bad_number(self):
        """Should return None if a numeric field is not numeric."""
        feature = _feature("x", NOW)
        feature["properties"]["mag"] = "strong"
        assert parse_event(feature) is None

    def test_missing_place_gets_placeholder(self):
        """A null place becomes a readable placeholder."""
        feature = _feature("x", NOW)
        feature["properties"]["place"] = None
        assert parse_event(feature).place == "Unknown location"


class TestParseEvents:
    """Tests for parse_events() function."""

    def test_sorted_newest_first(self):
        """Head of the list is the latest event."""
        geojson = {"features": [
            _feature("old", NOW - 2 * MS_PER_HOUR),
            _feature("new", NOW),
            _feature("mid", NOW - MS_PER_HOUR),
        ]}

        result = parse_events(geojson)

        assert [e.id for e in result] == ["new", "mid", "old"]

    def test_skips_invalid_features(self):
        """Invalid features are dropped, not fatal."""
        bad = _feature("bad", NOW)
        bad["properties"]["mag"] = None
        result = parse_events({"features": [bad, _feature("good", NOW)]})

        assert [e.id for e in result] == ["good"]

    def test_empty_collection(self):
        """Missing features key yields an empty list."""
        assert parse_events({}) == []


class TestFilterEvents:
    """Tests for filter_events() function."""

    @pytest.fixture
    def events(self):
        return [
            _event("a", NOW - 1 * MS_PER_HOUR, 2.8, "5 km N of Dhaka, Bangladesh"),
            _event("b", NOW - 8 * MS_PER_HOUR, 4.5, "Off the coast of Japan", "earthquake"),
            _event("c", NOW - 30 * MS_PER_HOUR, 5.1, "Quarry near Dhaka", "quarry blast"),
        ]

    def test_no_filters_keeps_all(self, events):
        """Default filters keep every event."""
        assert filter_events(events, NOW) == events

    def test_search_is_case_insensitive(self, events):
        """Search matches the place case-insensitively."""
        result = filter_events(events, NOW, search="dhaka")
        assert [e.id for e in result] == ["a", "c"]

    def test_min_magnitude_inclusive(self, events):
        """Magnitude filter keeps events at the threshold."""
        result = filter_events(events, NOW, min_magnitude=4.5)
        assert [e.id for e in result] == ["b", "c"]

    def test_types(self, events):
        """Type filter keeps listed types."""
        result = filter_events(events, NOW, types=["quarry blast"])
        assert [e.id for e in result] == ["c"]

    def test_time_range(self, events):
        """Time range drops events older than the range."""
        assert [e.id for e in filter_events(events, NOW, time_range=TimeRange.LAST_6H)] == ["a"]
        assert [e.id for e in filter_events(events, NOW, time_range="24h")] == ["a", "b"]


class TestSortEvents:
    """Tests for sort_events() function."""

    @pytest.fixture
    def events(self):
        return [
            _event("a", NOW - 2, 3.0),
            _event("b", NOW - 1, 5.0),
            _event("c", NOW - 3, 4.0),
        ]

    def test_newest(self, events):
        assert [e.id for e in sort_events(events)] == ["b", "a", "c"]

    def test_oldest(self, events):
        assert [e.id for e in sort_events(events, SortOrder.OLDEST)] == ["c", "a", "b"]

    def test_magnitude(self, events):
        assert [e.id for e in sort_events(events, "mag_desc")] == ["b", "c", "a"]
        assert [e.id for e in sort_events(events, "mag_asc")] == ["a", "c", "b"]

    def test_does_not_modify_input(self, events):
        """Sorting returns a new list."""
        original = list(events)
        sort_events(events, SortOrder.MAG_DESC)
        assert events == original


class TestHelpers:
    """Tests for small helpers."""

    def test_event_types_distinct_sorted(self):
        events = [_event("a", event_type="quarry blast"), _event("b"), _event("c")]
        assert event_types(events) == ["earthquake", "quarry blast"]

    def test_region_name(self):
        assert get_region_name("10 km SW of Dhaka, Bangladesh") == "Bangladesh"
        assert get_region_name("Northern Mid-Atlantic Ridge") == "Northern Mid-Atlantic Ridge"
        assert get_region_name("") == ""

    def test_strongest_event(self):
        events = [_event("a", magnitude=3.0), _event("b", magnitude=6.0)]
        assert strongest_event(events).id == "b"
        assert strongest_event([]) is None
