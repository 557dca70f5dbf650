"""
Aggregator Class - Computes metrics and statistics

This module aggregates metric entries into summaries and traffic patterns.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from metricboard.models.data_models import MetricEntry, Summary
from metricboard.services.namer import endpoint_prefix, normalized_path
from metricboard.utils.helpers import average, json_size, median, parse_ts, quantile


class Aggregator:
    """
    Aggregates metric entries into statistics.
    Responsibilities:
    - Compute method/status distributions and response-time statistics
    - Compute payload size averages
    - Extract distinct endpoint prefixes
    - Compute hourly traffic for a date
    """

    median = staticmethod(median)
    average = staticmethod(average)
    payload_size = staticmethod(json_size)

    def summarize(self, entries: List[MetricEntry]) -> Summary:
        """
        Compute the summary of a log.
        Response-time statistics are None for an empty log.
        """
        by_method: Dict[str, int] = {}
        by_status: Dict[str, int] = {}
        for e in entries:
            by_method[e.method] = by_method.get(e.method, 0) + 1
            key = str(e.status_code)
            by_status[key] = by_status.get(key, 0) + 1

        times = sorted(e.response_time for e in entries)
        sizes = [json_size(e.payload) for e in entries]

        return Summary(
            total_api_calls=len(entries),
            method_counts=by_method,
            status_counts=by_status,
            slowest_response=times[-1] if times else None,
            fastest_response=times[0] if times else None,
            median_response=median(times),
            p95_response=quantile(times, 0.95),
            p99_response=quantile(times, 0.99),
            avg_payload_size=average(sizes),
            endpoints=sorted(self.extract_endpoints(entries)),
        )

    @staticmethod
    def extract_endpoints(entries: Iterable[MetricEntry]) -> Set[str]:
        """Distinct endpoint prefixes of qualifying entries"""
        prefixes: Set[str] = set()
        for e in entries:
            prefix = endpoint_prefix(e.url)
            if prefix is not None:
                prefixes.add(prefix)
        return prefixes

    @staticmethod
    def filter_by_prefix(entries: Iterable[MetricEntry], prefix: str) -> List[MetricEntry]:
        """Entries whose normalized path lies under prefix"""
        return [e for e in entries if normalized_path(e.url).startswith(prefix)]

    @staticmethod
    def latest_date(entries: List[MetricEntry]) -> Optional[date]:
        """
        Date of the newest entry.
        Anchors the default traffic view to the log rather than the system clock.
        """
        stamps = [ts for ts in (parse_ts(e.timestamp) for e in entries) if ts is not None]
        return max(stamps).date() if stamps else None

    @staticmethod
    def hourly_traffic(entries: Iterable[MetricEntry], day: date) -> List[int]:
        """Request counts per UTC hour (0-23) for one date"""
        hourly = [0] * 24
        for e in entries:
            ts = parse_ts(e.timestamp)
            if ts is not None and ts.date() == day:
                hourly[ts.hour] += 1
        return hourly
