from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from metricboard.config import MetricboardConfig, configure_logging
from metricboard.middleware import MetricboardMiddleware
from metricboard.models.errors import StorageError
from metricboard.services.pipeline import MetricPipeline

# ──────────────────────────────────────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────────────────────────────────────

API_PREFIX = "/metricboard"

# ──────────────────────────────────────────────────────────────────────────────
# App
# ──────────────────────────────────────────────────────────────────────────────


def create_app(
    config: Optional[MetricboardConfig] = None,
    pipeline: Optional[MetricPipeline] = None,
) -> FastAPI:
    """
    Host application: installs the capture middleware and serves the
    generated reports and summaries under API_PREFIX.
    """
    if config is None:
        config = pipeline.config if pipeline is not None else MetricboardConfig.from_env()
    if pipeline is None:
        pipeline = MetricPipeline(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        pipeline.close()

    app = FastAPI(title="MetricBoard", lifespan=lifespan)
    app.state.pipeline = pipeline

    app.add_middleware(MetricboardMiddleware, pipeline=pipeline, config=config)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # reports are read-only
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ──────────────────────────────────────────────────────────────────────────
    # Health
    # ──────────────────────────────────────────────────────────────────────────

    @app.get(f"{API_PREFIX}/health")
    def health() -> Dict[str, Any]:
        root = pipeline.store.root_dir
        return {
            "status": "ok",
            "metrics_dir": {
                "exists": os.path.isdir(root),
                "path": root,
            },
            "report_mode": config.report_mode,
            "services": pipeline.store.services(),
        }

    # ──────────────────────────────────────────────────────────────────────────
    # Services + summaries
    # ──────────────────────────────────────────────────────────────────────────

    def _known_service(service: str) -> str:
        try:
            known = os.path.exists(pipeline.store.log_path(service))
        except StorageError:
            known = False
        if not known:
            raise HTTPException(status_code=404, detail=f"Unknown service: {service}")
        return service

    @app.get(f"{API_PREFIX}/services")
    def services() -> Dict[str, Any]:
        return {
            "services": [pipeline.store.describe(s).to_dict() for s in pipeline.store.services()]
        }

    @app.get(f"{API_PREFIX}/{{service}}/summary")
    def summary(service: str) -> Dict[str, Any]:
        _known_service(service)
        try:
            result = pipeline.summary(service)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=str(exc))
        return {"service": service, "summary": result.to_dict()}

    @app.get(f"{API_PREFIX}/{{service}}/health")
    def service_health(service: str) -> Dict[str, Any]:
        _known_service(service)
        try:
            stat = pipeline.store.stat(service)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=str(exc))
        return {
            "status": stat.status,
            "log_file": {
                "exists": stat.log_file_exists,
                "path": stat.path,
                "size_bytes": stat.size_bytes,
                "total_entries": stat.total_entries,
            },
            "latest_timestamp": stat.latest_timestamp,
        }

    # ──────────────────────────────────────────────────────────────────────────
    # Reports
    # ──────────────────────────────────────────────────────────────────────────

    @app.get(f"{API_PREFIX}/{{service}}/report", response_class=HTMLResponse)
    def report(service: str) -> HTMLResponse:
        _known_service(service)
        path = pipeline.store.report_path(service)
        if not os.path.exists(path):
            raise HTTPException(status_code=404, detail="Report not generated yet")
        with open(path, "r", encoding="utf-8") as f:
            return HTMLResponse(f.read())

    return app


def build_default_app() -> FastAPI:
    """Entry point for ``uvicorn --factory metricboard.main:build_default_app``."""
    config = MetricboardConfig.from_env()
    configure_logging(config.log_level)
    return create_app(config)
