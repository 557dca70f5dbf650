"""
MetricPipeline - capture → persistence → aggregation → report rendering

Failures at each stage are logged where they occur and never propagate
to the request that triggered them.
"""

import logging
from typing import Dict, List, Optional

from metricboard.config import MetricboardConfig
from metricboard.models.data_models import MetricEntry, Summary
from metricboard.models.errors import MetricboardError
from metricboard.services.aggregator import Aggregator
from metricboard.services.namer import derive_service
from metricboard.services.renderer import ReportRenderer
from metricboard.services.scheduler import ReportScheduler
from metricboard.services.storage import MetricStore

logger = logging.getLogger(__name__)


class MetricPipeline:
    def __init__(self, config: Optional[MetricboardConfig] = None):
        self.config = config or MetricboardConfig()
        self.store = MetricStore(self.config.metrics_dir)
        self.aggregator = Aggregator()
        self.renderer = ReportRenderer(
            self.store,
            self.aggregator,
            chart_js_url=self.config.chart_js_url,
            page_size=self.config.page_size,
        )
        self.scheduler = ReportScheduler(self.regenerate, mode=self.config.report_mode)
        # newest log returned by append, per service; saves a re-read when rendering
        self._latest: Dict[str, List[MetricEntry]] = {}

    def record(self, entry: MetricEntry, path: Optional[str] = None) -> Optional[List[MetricEntry]]:
        """
        Persist one entry under the service derived from path (default: entry.url)
        and schedule its reports. Returns the full log, or None if persisting failed.
        """
        service_id = derive_service(path if path is not None else entry.url)
        try:
            log = self.store.append(service_id, entry)
        except MetricboardError as exc:
            logger.error("Error writing to log file for %s: %s", service_id, exc)
            return None

        self._latest[service_id] = log
        self.scheduler.submit(service_id)
        return log

    def regenerate(self, service_id: str) -> List[str]:
        """
        Rewrite the service report and every endpoint report of a service.
        Returns the paths written.
        """
        log = self._latest.pop(service_id, None)
        if log is None:
            try:
                log = self.store.read(service_id)
            except MetricboardError as exc:
                logger.error("Cannot load log for %s: %s", service_id, exc)
                return []

        summary = self.aggregator.summarize(log)
        written: List[str] = []
        try:
            written.append(self.renderer.write_service_report(service_id, log, summary))
        except MetricboardError as exc:
            logger.error("Error writing report for %s: %s", service_id, exc)

        for prefix in summary.endpoints:
            try:
                written.append(self.renderer.write_endpoint_report(prefix, log, service_id))
            except MetricboardError as exc:
                logger.error("Error writing endpoint report %s for %s: %s", prefix, service_id, exc)

        return written

    def summary(self, service_id: str) -> Summary:
        return self.aggregator.summarize(self.store.read(service_id))

    def drain(self, timeout: float = 10.0) -> bool:
        return self.scheduler.drain(timeout)

    def close(self) -> None:
        self.scheduler.close()
