"""Tests for the query engine."""

from __future__ import annotations

import pytest

from quake_intel.catalog import OPERATIONS
from quake_intel.errors import EventNotFound, UpstreamUnavailable, ValidationError
from quake_intel.query import QueryEngine, select_nearby_tier

TOKYO = (35.68, 139.69)


@pytest.fixture
def engine(stub_client, clock) -> QueryEngine:
    return QueryEngine(stub_client, max_workers=2, clock=clock)


class TestSearch:
    @pytest.mark.parametrize("radius_km", [0, 25000])
    def test_radius_out_of_range_never_fetches(self, engine, stub_client, radius_km):
        with pytest.raises(ValidationError) as excinfo:
            engine.search(*TOKYO, radius_km=radius_km)
        assert "radius_km" in excinfo.value.fields
        assert stub_client.calls == []

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_magnitude": -1},
            {"min_magnitude": 11},
            {"days_back": 0},
            {"days_back": 31},
            {"limit": 0},
            {"limit": 101},
            {"min_magnitude": 5.0, "max_magnitude": 4.0},
        ],
    )
    def test_other_constraints(self, engine, stub_client, kwargs):
        with pytest.raises(ValidationError):
            engine.search(*TOKYO, **kwargs)
        assert stub_client.calls == []

    def test_latitude_out_of_range(self, engine, stub_client):
        with pytest.raises(ValidationError):
            engine.search(91.0, 0.0)
        assert stub_client.calls == []

    def test_builds_range_query(self, engine, stub_client, payload, clock):
        stub_client.range_handler = lambda q: payload([])
        engine.search(*TOKYO, radius_km=300, min_magnitude=3.0, days_back=3, limit=15)

        (kind, query), = stub_client.calls
        assert kind == "range"
        assert query.latitude == 35.68
        assert query.longitude == 139.69
        assert query.max_radius_km == 300
        assert query.min_magnitude == 3.0
        assert query.order_by == "time-asc"
        assert query.limit == 15
        assert (clock() - query.start_time).days == 3

    def test_results_respect_magnitude_bounds(self, engine, stub_client, feature, payload):
        stub_client.range_handler = lambda q: payload(
            [
                feature("a", 3.5, 35.7, 139.7, time_ms=1),
                feature("b", 2.0, 35.7, 139.7, time_ms=2),
                feature("c", None, 35.7, 139.7, time_ms=3),
                feature("d", 6.5, 35.7, 139.7, time_ms=4),
            ]
        )
        result = engine.search(*TOKYO, min_magnitude=3.0, max_magnitude=6.0)
        assert [q.id for q in result.earthquakes] == ["a"]
        assert all(q.magnitude >= 3.0 for q in result.earthquakes)
        assert result.total_found == 4

    def test_ordered_oldest_first_and_truncated(self, engine, stub_client, feature, payload):
        stub_client.range_handler = lambda q: payload(
            [feature(f"q{i}", 3.0, 35.7, 139.7, time_ms=1000 * (5 - i)) for i in range(5)]
        )
        result = engine.search(*TOKYO, limit=3)
        assert [q.id for q in result.earthquakes] == ["q4", "q3", "q2"]

    def test_query_echo(self, engine, stub_client, payload):
        stub_client.range_handler = lambda q: payload([])
        result = engine.search(*TOKYO)
        assert result.query["radius_km"] == 500.0
        assert result.query["days_back"] == 7
        assert result.earthquakes == ()

    def test_upstream_failure_propagates(self, engine, stub_client):
        def fail(q):
            raise UpstreamUnavailable("USGS API error: 503", url="u", upstream_status=503)

        stub_client.range_handler = fail
        with pytest.raises(UpstreamUnavailable):
            engine.search(*TOKYO)


class TestSelectNearbyTier:
    @pytest.mark.parametrize(
        ("min_magnitude", "tier"),
        [
            (0.0, "1.0"),
            (0.5, "1.0"),
            (1.0, "1.0"),
            (1.5, "2.5"),
            (2.5, "2.5"),
            (2.6, "4.5"),
            (3.0, "4.5"),
            (4.5, "4.5"),
            (4.6, "all"),
            (6.0, "all"),
        ],
    )
    def test_first_floor_at_or_above_min_magnitude(self, min_magnitude, tier):
        assert select_nearby_tier(min_magnitude) == tier


class TestNearby:
    def test_sorted_by_distance_within_radius(self, engine, stub_client, feature, payload):
        stub_client.feeds["2.5_week"] = payload(
            [
                feature("b", 3.0, 36.1, 139.8),
                feature("a", 3.0, 35.7, 139.8),
                feature("osaka", 3.0, 34.69, 135.50),
                feature("c", 3.0, 35.7, 139.8),
                feature("small", 2.0, 35.68, 139.69),
            ]
        )
        result = engine.nearby(*TOKYO, radius_km=250, min_magnitude=2.5)

        assert result.feed == "2.5_week"
        ids = [n.quake.id for n in result.earthquakes]
        # a and c share a location: feed order is kept
        assert ids == ["a", "c", "b"]
        distances = [n.distance_km for n in result.earthquakes]
        assert distances == sorted(distances)
        assert all(d <= 250 for d in distances)
        assert result.total_in_radius == 3

    def test_feed_follows_magnitude_and_period(self, engine, stub_client, payload):
        stub_client.feeds["all_month"] = payload([])
        result = engine.nearby(*TOKYO, min_magnitude=5.0, period="month")
        assert stub_client.calls == [("feed", "all_month")]
        assert result.earthquakes == ()

    def test_min_just_above_floor_reads_next_feed(self, engine, stub_client, feature, payload):
        stub_client.feeds["4.5_week"] = payload([feature("big", 4.8, 35.7, 139.7)])
        result = engine.nearby(*TOKYO, min_magnitude=2.6)
        assert result.feed == "4.5_week"
        assert [n.quake.id for n in result.earthquakes] == ["big"]

    def test_limit(self, engine, stub_client, feature, payload):
        stub_client.feeds["2.5_week"] = payload(
            [feature(f"q{i}", 2.0, 35.68 + i * 0.01, 139.69) for i in range(10)]
        )
        result = engine.nearby(*TOKYO, min_magnitude=1.5, limit=4)
        assert len(result.earthquakes) == 4
        assert result.total_in_radius == 10

    def test_invalid_period(self, engine, stub_client):
        with pytest.raises(ValidationError):
            engine.nearby(*TOKYO, period="year")
        assert stub_client.calls == []


class TestTop:
    def test_ranked_by_magnitude_stable(self, engine, stub_client, sample_payload):
        stub_client.feeds["all_week"] = sample_payload
        result = engine.top(min_magnitude=3.0)

        ids = [r.quake.id for r in result.top_earthquakes]
        # us003 and us004 tie at 5.8: feed order kept
        assert ids == ["us003", "us004", "ci002", "ak001"]
        assert [r.rank for r in result.top_earthquakes] == [1, 2, 3, 4]
        assert result.total_filtered == 4

    def test_all_results_meet_min_magnitude(self, engine, stub_client, sample_payload):
        stub_client.feeds["all_week"] = sample_payload
        result = engine.top(min_magnitude=4.5)
        assert all(r.quake.magnitude >= 4.5 for r in result.top_earthquakes)
        assert [r.quake.id for r in result.top_earthquakes] == ["us003", "us004", "ci002"]

    def test_ranked_by_significance(self, engine, stub_client, sample_payload):
        stub_client.feeds["all_week"] = sample_payload
        result = engine.top(rank_by="significance", min_magnitude=3.0)
        sigs = [r.quake.significance for r in result.top_earthquakes]
        assert sigs == [600, 520, 330, 148]

    def test_significance_ties_keep_feed_order(self, engine, stub_client, feature, payload):
        stub_client.feeds["all_day"] = payload(
            [
                feature("x", 5.0, 0, 0, sig=400),
                feature("y", 6.0, 0, 0, sig=400),
                feature("z", 5.5, 0, 0, sig=None),
            ]
        )
        result = engine.top(period="day", rank_by="significance", min_magnitude=0)
        assert [r.quake.id for r in result.top_earthquakes] == ["x", "y", "z"]

    def test_limit_applied_after_sort(self, engine, stub_client, sample_payload):
        stub_client.feeds["all_month"] = sample_payload
        result = engine.top(period="month", min_magnitude=0, limit=2)
        assert [r.rank for r in result.top_earthquakes] == [1, 2]
        assert result.total_filtered == 4

    def test_limit_bounds(self, engine, stub_client):
        with pytest.raises(ValidationError):
            engine.top(limit=51)
        assert stub_client.calls == []

    def test_invalid_rank_by(self, engine):
        with pytest.raises(ValidationError):
            engine.top(rank_by="depth")


class TestByMagnitudeTier:
    def test_truncates_without_filtering(self, engine, stub_client, sample_payload):
        stub_client.feeds["significant_month"] = sample_payload
        result = engine.by_magnitude_tier(tier="significant", timeframe="month", limit=2)
        assert result.feed == "significant_month"
        assert result.total_in_feed == 5
        assert [q.id for q in result.earthquakes] == ["ak001", "ci002"]

    def test_unknown_tier(self, engine, stub_client):
        with pytest.raises(ValidationError):
            engine.by_magnitude_tier(tier="3.0")
        assert stub_client.calls == []


class TestOverview:
    def test_summary(self, engine, stub_client, sample_payload, payload, feature, clock):
        stub_client.feeds["significant_week"] = sample_payload
        stub_client.feeds["4.5_day"] = payload([feature("d1", 4.7, 0, 0)], count=7)

        result = engine.overview()
        assert result.significant_quakes_this_week == 5
        assert result.magnitude_45_plus_today == 7
        assert result.largest_this_week.id == "us003"
        assert [q.id for q in result.recent_significant] == ["ak001", "ci002", "us003"]
        assert result.available_operations == OPERATIONS
        assert result.fetched_at == clock()

    def test_empty_week(self, engine, stub_client, payload):
        stub_client.feeds["significant_week"] = payload([])
        stub_client.feeds["4.5_day"] = payload([])
        result = engine.overview()
        assert result.largest_this_week is None
        assert result.recent_significant == ()

    def test_one_failed_feed_fails_overview(self, engine, stub_client, sample_payload):
        stub_client.feeds["significant_week"] = sample_payload
        stub_client.feeds["4.5_day"] = UpstreamUnavailable(
            "USGS API error: 500", url="u", upstream_status=500,
        )
        with pytest.raises(UpstreamUnavailable):
            engine.overview()


class TestLookup:
    def test_found(self, engine, stub_client, sample_event_response):
        stub_client.events["us6000s5ba"] = sample_event_response
        detail = engine.lookup("us6000s5ba")
        assert detail.record.magnitude == 6.2
        assert detail.record.location.latitude == 23.6

    def test_not_found(self, engine):
        with pytest.raises(EventNotFound):
            engine.lookup("missing")

    def test_empty_id(self, engine, stub_client):
        with pytest.raises(ValidationError):
            engine.lookup("")
        assert stub_client.calls == []
