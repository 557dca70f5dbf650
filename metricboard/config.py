"""Configuration - frozen dataclass, optionally loaded from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Tuple

REPORT_MODES = ("sync", "background")

DEFAULT_CHART_JS_URL = "https://cdn.jsdelivr.net/npm/chart.js"


def _parse_paths(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


@dataclass(frozen=True)
class MetricboardConfig:
    metrics_dir: str = "./metrics"
    report_mode: str = "sync"
    exclude_paths: Tuple[str, ...] = ("/metricboard",)
    chart_js_url: str = DEFAULT_CHART_JS_URL
    page_size: int = 10
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.report_mode not in REPORT_MODES:
            raise ValueError(
                f"report_mode must be one of {REPORT_MODES}, got {self.report_mode!r}"
            )
        if self.page_size < 1:
            raise ValueError("page_size must be positive")

    @classmethod
    def from_env(cls) -> "MetricboardConfig":
        """Build config from METRICBOARD_* environment variables with defaults."""
        raw_exclude = os.getenv("METRICBOARD_EXCLUDE_PATHS")
        return cls(
            metrics_dir=os.getenv("METRICBOARD_DIR", cls.metrics_dir),
            report_mode=os.getenv("METRICBOARD_REPORT_MODE", cls.report_mode).strip().lower(),
            exclude_paths=(
                _parse_paths(raw_exclude) if raw_exclude is not None else cls.exclude_paths
            ),
            chart_js_url=os.getenv("METRICBOARD_CHART_JS_URL", cls.chart_js_url),
            page_size=int(os.getenv("METRICBOARD_PAGE_SIZE", cls.page_size)),
            log_level=os.getenv("METRICBOARD_LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
