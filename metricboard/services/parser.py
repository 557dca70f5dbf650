"""
EntryParser Class - Handles parsing and normalization

This module turns persisted dicts into MetricEntry objects and decodes
captured request bodies.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from metricboard.models.data_models import MetricEntry
from metricboard.utils.helpers import safe_int


class EntryParser:
    """
    Parses raw records into structured MetricEntry objects.
    Responsibilities:
    - Normalize persisted records (camelCase or snake_case keys)
    - Decode request bodies into an opaque payload
    """

    @staticmethod
    def parse_json(text: str) -> Optional[Any]:
        """Parse JSON text, return None if invalid"""
        try:
            return json.loads(text)
        except ValueError:
            return None

    @staticmethod
    def normalize(raw: Dict[str, Any]) -> Optional[MetricEntry]:
        """
        Normalize a persisted record into a MetricEntry.
        Returns None when the record is not a dict or lacks a timestamp.
        """
        if not isinstance(raw, dict):
            return None

        timestamp = raw.get("timestamp")
        if not timestamp:
            return None

        status_raw = raw.get("statusCode", raw.get("status_code"))
        time_raw = raw.get("responseTime", raw.get("response_time"))
        url_params = raw.get("urlParams", raw.get("url_params"))
        query_params = raw.get("queryParams", raw.get("query_params"))

        return MetricEntry(
            timestamp=str(timestamp),
            method=str(raw.get("method") or ""),
            url=str(raw.get("url") or ""),
            status_code=safe_int(status_raw, 0),
            req_size=safe_int(raw.get("reqSize", raw.get("req_size")), 0),
            res_size=safe_int(raw.get("resSize", raw.get("res_size")), 0),
            response_time=safe_int(time_raw, 0),
            payload=raw.get("payload"),
            url_params=url_params if isinstance(url_params, dict) else {},
            query_params=query_params if isinstance(query_params, dict) else {},
        )

    @classmethod
    def decode_body(cls, body: bytes, content_type: str = "") -> Any:
        """
        Decode a request body.
        JSON bodies become structured values, other bodies text; empty is None.
        """
        if not body:
            return None
        text = body.decode("utf-8", errors="replace")
        ctype = (content_type or "").lower()
        if "json" in ctype or not ctype:
            parsed = cls.parse_json(text)
            if parsed is not None:
                return parsed
        if "application/x-www-form-urlencoded" in ctype:
            return dict(parse_qsl(text, keep_blank_values=True))
        return text
