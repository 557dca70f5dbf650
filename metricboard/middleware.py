"""
ASGI middleware capturing one MetricEntry per HTTP request.

Two events can end a request: the final response body chunk is sent
("finish"), or the downstream app returns, raises or is cancelled
("close"). A per-request CaptureGuard makes sure only the first one
records anything.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from metricboard.config import MetricboardConfig
from metricboard.models.data_models import MetricEntry
from metricboard.services.parser import EntryParser
from metricboard.services.pipeline import MetricPipeline
from metricboard.utils.helpers import safe_int, utc_now_iso

logger = logging.getLogger(__name__)


class CaptureGuard:
    """Runs its callback at most once, for whichever event fires first."""

    def __init__(self, callback: Callable[[str], None]):
        self._callback = callback
        self._lock = threading.Lock()
        self.fired = False
        self.event: Optional[str] = None

    def fire(self, event: str) -> bool:
        with self._lock:
            if self.fired:
                return False
            self.fired = True
            self.event = event
        self._callback(event)
        return True


class _RequestCycle:
    """Request/response state collected while the request is served"""

    def __init__(self, scope: Scope):
        self.scope = scope
        self.start = time.perf_counter()
        self.body = bytearray()
        self.status_code: Optional[int] = None
        self.response_headers = Headers()
        self.disconnected = False
        self.body_complete = False
        self.replay: List[Message] = []

    def elapsed_ms(self) -> int:
        return int(round((time.perf_counter() - self.start) * 1000))


class MetricboardMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        pipeline: Optional[MetricPipeline] = None,
        config: Optional[MetricboardConfig] = None,
    ):
        self.app = app
        if pipeline is None:
            pipeline = MetricPipeline(config or MetricboardConfig())
        self.pipeline = pipeline
        self.config = config or pipeline.config

    def _excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.config.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self._excluded(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        cycle = _RequestCycle(scope)
        guard = CaptureGuard(lambda event: self._capture(cycle, event))

        async def read_message() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                cycle.body.extend(message.get("body", b""))
                if not message.get("more_body", False):
                    cycle.body_complete = True
            elif message["type"] == "http.disconnect":
                cycle.disconnected = True
                cycle.body_complete = True
            return message

        async def receive_wrapper() -> Message:
            if cycle.replay:
                return cycle.replay.pop(0)
            return await read_message()

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                cycle.status_code = message["status"]
                cycle.response_headers = Headers(raw=message.get("headers", []))
                # The body is unreadable after the response completes; buffer
                # what the app left unread for its own later receive() calls.
                while not cycle.body_complete:
                    cycle.replay.append(await read_message())
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                guard.fire("finish")

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        finally:
            guard.fire("close")

    def _capture(self, cycle: _RequestCycle, event: str) -> None:
        try:
            entry = self.build_entry(cycle)
            self.pipeline.record(entry, path=cycle.scope.get("path", "/"))
        except Exception:
            logger.exception("Metric capture failed (%s event)", event)

    @staticmethod
    def raw_url(scope: Scope) -> str:
        """Request target as the client sent it: percent-encoding kept, query included"""
        raw_path = scope.get("raw_path")
        if raw_path:
            path = raw_path.split(b"?", 1)[0].decode("latin-1")
        else:
            path = Request(scope).url.path
        query = scope.get("query_string", b"").decode("latin-1")
        return f"{path}?{query}" if query else path

    @staticmethod
    def build_entry(cycle: _RequestCycle) -> MetricEntry:
        request = Request(cycle.scope)
        url = MetricboardMiddleware.raw_url(cycle.scope)

        path_params: Dict[str, Any] = dict(cycle.scope.get("path_params") or {})

        return MetricEntry(
            timestamp=utc_now_iso(),
            method=request.method,
            url=url,
            status_code=cycle.status_code if cycle.status_code is not None else 500,
            req_size=safe_int(request.headers.get("content-length"), 0),
            res_size=safe_int(cycle.response_headers.get("content-length"), 0),
            response_time=cycle.elapsed_ms(),
            payload=EntryParser.decode_body(
                bytes(cycle.body), request.headers.get("content-type", "")
            ),
            url_params={k: str(v) for k, v in path_params.items()},
            query_params=dict(request.query_params),
        )
