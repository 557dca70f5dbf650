from datetime import date

from metricboard.services.aggregator import Aggregator


class TestSummarize:
    def test_single_post_scenario(self, make_entry):
        payload = {"item": "x" * 39}
        agg = Aggregator()
        assert agg.payload_size(payload) == 50

        summary = agg.summarize([make_entry(method="POST", response_time=120, payload=payload)])
        assert summary.total_api_calls == 1
        assert summary.slowest_response == 120
        assert summary.fastest_response == 120
        assert summary.median_response == 120
        assert summary.avg_payload_size == 50

    def test_distributions(self, make_entry):
        entries = [
            make_entry(method="GET", status_code=200),
            make_entry(method="GET", status_code=404),
            make_entry(method="POST", status_code=200),
        ]
        summary = Aggregator().summarize(entries)
        assert summary.method_counts == {"GET": 2, "POST": 1}
        assert summary.status_counts == {"200": 2, "404": 1}

    def test_response_time_statistics(self, make_entry):
        entries = [make_entry(response_time=t) for t in (40, 10, 30, 20)]
        summary = Aggregator().summarize(entries)
        assert summary.slowest_response == 40
        assert summary.fastest_response == 10
        assert summary.median_response == 25
        assert 30 < summary.p95_response <= 40

    def test_empty_log_policy(self):
        summary = Aggregator().summarize([])
        assert summary.total_api_calls == 0
        assert summary.slowest_response is None
        assert summary.fastest_response is None
        assert summary.median_response is None
        assert summary.p99_response is None
        assert summary.avg_payload_size == 0
        assert summary.endpoints == []

    def test_absent_payload_counts_as_zero(self, make_entry):
        entries = [make_entry(payload=None), make_entry(payload={"a": 1})]
        assert Aggregator().summarize(entries).avg_payload_size == len('{"a":1}') / 2

    def test_empty_payloads_count_as_zero(self, make_entry):
        entries = [make_entry(payload=""), make_entry(payload=0), make_entry(payload=[1])]
        assert Aggregator().summarize(entries).avg_payload_size == len("[1]") / 3


class TestEndpoints:
    def test_extract_distinct_prefixes(self, make_entry):
        entries = [
            make_entry(url="/api/v1/shop/items/1"),
            make_entry(url="/api/v1/shop/items/2"),
            make_entry(url="/api/v1/shop/carts/9"),
            make_entry(url="/api/v1"),
        ]
        assert Aggregator.extract_endpoints(entries) == {
            "/api/v1/shop/items/",
            "/api/v1/shop/carts/",
        }

    def test_summary_lists_endpoints_sorted(self, make_entry):
        entries = [make_entry(url="/s/b/c/d/1"), make_entry(url="/s/a/c/d/1")]
        assert Aggregator().summarize(entries).endpoints == ["/s/a/c/d/", "/s/b/c/d/"]

    def test_filter_by_prefix(self, make_entry):
        entries = [make_entry(url="/s/a/b/c/1"), make_entry(url="/s/x/b/c/1")]
        scoped = Aggregator.filter_by_prefix(entries, "/s/a/b/c/")
        assert [e.url for e in scoped] == ["/s/a/b/c/1"]

    def test_filter_matches_normalized_paths(self, make_entry):
        entries = [
            make_entry(url="/api//v1/shop/items/1"),
            make_entry(url="/api/v1/shop/items/2?page=3"),
            make_entry(url="/api/v1/shop/itemsx/1"),
        ]
        (prefix,) = Aggregator.extract_endpoints(entries[:1])
        scoped = Aggregator.filter_by_prefix(entries, prefix)
        assert [e.url for e in scoped] == ["/api//v1/shop/items/1", "/api/v1/shop/items/2?page=3"]


class TestTraffic:
    def test_hourly_buckets_for_one_day(self, make_entry):
        entries = [
            make_entry(timestamp="2024-01-15T00:10:00.000Z"),
            make_entry(timestamp="2024-01-15T13:05:00.000Z"),
            make_entry(timestamp="2024-01-15T13:55:00.000Z"),
            make_entry(timestamp="2024-01-16T13:00:00.000Z"),
        ]
        hourly = Aggregator.hourly_traffic(entries, date(2024, 1, 15))
        assert len(hourly) == 24
        assert hourly[0] == 1
        assert hourly[13] == 2
        assert sum(hourly) == 3

    def test_latest_date(self, make_entry):
        entries = [
            make_entry(timestamp="2024-01-16T08:00:00.000Z"),
            make_entry(timestamp="2024-01-15T08:00:00.000Z"),
        ]
        assert Aggregator.latest_date(entries) == date(2024, 1, 16)
        assert Aggregator.latest_date([]) is None
