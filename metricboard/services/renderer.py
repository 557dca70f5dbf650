"""
ReportRenderer Class - Builds and writes HTML reports

Each report is a self-contained document: a static page shell plus a JSON
data block (summary + raw entries) that the page's script consumes.
"""

import html
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from metricboard.config import DEFAULT_CHART_JS_URL
from metricboard.models.data_models import MetricEntry, Summary
from metricboard.models.errors import RenderError
from metricboard.services.aggregator import Aggregator
from metricboard.services.namer import endpoint_slug
from metricboard.services.report_page import ENDPOINTS_TEMPLATE, REPORT_TEMPLATE
from metricboard.services.storage import MetricStore, atomic_write

logger = logging.getLogger(__name__)


def _format_ms(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:g} ms"


def _embed_json(data: Dict[str, Any]) -> str:
    """JSON safe to place inside a <script> element"""
    text = json.dumps(data, ensure_ascii=True, default=str)
    return text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


class ReportRenderer:
    """
    Renders service and endpoint reports.
    Responsibilities:
    - Build the JSON data contract for a report
    - Expand the page template
    - Write reports to their deterministic paths
    """

    def __init__(
        self,
        store: MetricStore,
        aggregator: Optional[Aggregator] = None,
        chart_js_url: str = DEFAULT_CHART_JS_URL,
        page_size: int = 10,
    ):
        self.store = store
        self.aggregator = aggregator or Aggregator()
        self.chart_js_url = chart_js_url
        self.page_size = page_size

    def build_payload(
        self,
        service_id: str,
        entries: List[MetricEntry],
        summary: Summary,
        endpoint: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Data contract consumed by the report page script"""
        day = self.aggregator.latest_date(entries) or date.today()
        return {
            "service": service_id,
            "endpoint": endpoint,
            "summary": summary.to_dict(),
            "defaultDate": day.isoformat(),
            "hourly": self.aggregator.hourly_traffic(entries, day),
            "pageSize": self.page_size,
            "entries": [e.to_dict() for e in entries],
        }

    def render_service_report(
        self, service_id: str, log: List[MetricEntry], summary: Summary
    ) -> str:
        items = "\n".join(
            '        <li><a href="{href}">{label}</a></li>'.format(
                href=html.escape(f"{endpoint_slug(prefix)}_report.html"),
                label=html.escape(prefix),
            )
            for prefix in summary.endpoints
        )
        return self._render(
            title=f"MetricBoard - {service_id}",
            heading=f"MetricBoard For {service_id} : {summary.total_api_calls} Requests",
            payload=self.build_payload(service_id, log, summary),
            summary=summary,
            endpoints_section=ENDPOINTS_TEMPLATE.substitute(items=items) if items else "",
        )

    def render_endpoint_report(
        self, prefix: str, log: List[MetricEntry], service_id: str
    ) -> str:
        """Report scoped to entries under prefix, with its own summary"""
        scoped = self.aggregator.filter_by_prefix(log, prefix)
        summary = self.aggregator.summarize(scoped)
        return self._render(
            title=f"MetricBoard - {service_id} {prefix}",
            heading=f"Endpoint Metric Report: {prefix} - {service_id} : {summary.total_api_calls} Requests",
            payload=self.build_payload(service_id, scoped, summary, endpoint=prefix),
            summary=summary,
            endpoints_section="",
        )

    def write_service_report(
        self, service_id: str, log: List[MetricEntry], summary: Summary
    ) -> str:
        path = self.store.report_path(service_id)
        self._write(path, self.render_service_report(service_id, log, summary))
        logger.info("Report generated for %s: %s", service_id, path)
        return path

    def write_endpoint_report(
        self, prefix: str, log: List[MetricEntry], service_id: str
    ) -> str:
        path = self.store.endpoint_report_path(service_id, prefix)
        self._write(path, self.render_endpoint_report(prefix, log, service_id))
        logger.info("Endpoint report generated for %s: %s", service_id, path)
        return path

    def _render(
        self,
        title: str,
        heading: str,
        payload: Dict[str, Any],
        summary: Summary,
        endpoints_section: str,
    ) -> str:
        try:
            return REPORT_TEMPLATE.substitute(
                title=html.escape(title),
                heading=html.escape(heading),
                chart_js_url=html.escape(self.chart_js_url),
                slowest=_format_ms(summary.slowest_response),
                fastest=_format_ms(summary.fastest_response),
                median=_format_ms(summary.median_response),
                p95=_format_ms(summary.p95_response),
                p99=_format_ms(summary.p99_response),
                avg_payload=f"{summary.avg_payload_size:.2f} bytes",
                endpoints_section=endpoints_section,
                default_date=html.escape(payload["defaultDate"]),
                data_json=_embed_json(payload),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RenderError(f"Cannot render report {title!r}: {exc}") from exc

    @staticmethod
    def _write(path: str, document: str) -> None:
        try:
            atomic_write(path, document)
        except OSError as exc:
            raise RenderError(f"Cannot write report {path}: {exc}") from exc
