"""Report regeneration scheduler - inline or on a coalescing background worker."""

import logging
import threading
from typing import Callable, List

from metricboard.config import REPORT_MODES

logger = logging.getLogger(__name__)


class ReportScheduler:
    """
    Runs ``regenerate(service_id)`` for submitted services.

    In ``sync`` mode the call happens inside ``submit``. In ``background``
    mode a daemon thread drains the pending set; a service submitted several
    times before the worker gets to it is regenerated once.
    """

    def __init__(self, regenerate: Callable[[str], object], mode: str = "sync"):
        if mode not in REPORT_MODES:
            raise ValueError(f"Unknown report mode: {mode!r}")
        self._regenerate = regenerate
        self.mode = mode

        self._pending: List[str] = []
        self._cond = threading.Condition()
        self._busy = False
        self._stop_event = threading.Event()
        self._worker = None

        if mode == "background":
            self._worker = threading.Thread(
                target=self._run, name="metricboard-reports", daemon=True
            )
            self._worker.start()

    def submit(self, service_id: str) -> None:
        if self.mode == "sync":
            self._safe_regenerate(service_id)
            return
        with self._cond:
            if service_id not in self._pending:
                self._pending.append(service_id)
            self._cond.notify_all()

    def drain(self, timeout: float = 10.0) -> bool:
        """Block until nothing is pending or running. Returns False on timeout."""
        if self._worker is None:
            return True
        with self._cond:
            return self._cond.wait_for(
                lambda: not self._pending and not self._busy, timeout=timeout
            )

    def close(self, timeout: float = 10.0) -> None:
        """Drain outstanding work and stop the worker thread."""
        if self._worker is None:
            return
        self.drain(timeout)
        self._stop_event.set()
        with self._cond:
            self._cond.notify_all()
        self._worker.join(timeout=timeout)
        logger.info("Report scheduler stopped")

    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending or self._stop_event.is_set())
                if not self._pending and self._stop_event.is_set():
                    return
                service_id = self._pending.pop(0)
                self._busy = True
            try:
                self._safe_regenerate(service_id)
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()

    def _safe_regenerate(self, service_id: str) -> None:
        try:
            self._regenerate(service_id)
        except Exception:
            logger.exception("Report regeneration failed for %s", service_id)
