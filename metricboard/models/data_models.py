"""
Data Models (DTOs - Data Transfer Objects)

This module contains all dataclass definitions used throughout the application.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MetricEntry:
    """One captured request/response cycle. Never mutated once written."""
    timestamp: str
    method: str
    url: str
    status_code: int
    req_size: int = 0
    res_size: int = 0
    response_time: int = 0
    payload: Any = None
    url_params: Dict[str, Any] = field(default_factory=dict)
    query_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted (camelCase) representation"""
        return {
            "timestamp": self.timestamp,
            "method": self.method,
            "url": self.url,
            "statusCode": self.status_code,
            "reqSize": self.req_size,
            "resSize": self.res_size,
            "responseTime": self.response_time,
            "payload": self.payload,
            "urlParams": dict(self.url_params),
            "queryParams": dict(self.query_params),
        }


@dataclass
class HealthStatus:
    """Health check response for one service log"""
    status: str
    log_file_exists: bool
    path: str
    size_bytes: int
    total_entries: int
    latest_timestamp: Optional[str] = None


@dataclass
class Summary:
    """Aggregated statistics over a metric log (or a subset of it)"""
    total_api_calls: int
    method_counts: Dict[str, int]
    status_counts: Dict[str, int]
    slowest_response: Optional[float]
    fastest_response: Optional[float]
    median_response: Optional[float]
    p95_response: Optional[float]
    p99_response: Optional[float]
    avg_payload_size: float
    endpoints: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalApiCalls": self.total_api_calls,
            "methodCounts": dict(self.method_counts),
            "statusCounts": dict(self.status_counts),
            "slowestResponse": self.slowest_response,
            "fastestResponse": self.fastest_response,
            "medianResponse": self.median_response,
            "p95Response": self.p95_response,
            "p99Response": self.p99_response,
            "avgPayloadSize": self.avg_payload_size,
            "endpoints": list(self.endpoints),
        }


@dataclass
class ServiceInfo:
    """Service listing row"""
    service: str
    total_entries: int
    report_exists: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
