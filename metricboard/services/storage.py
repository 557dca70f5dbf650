"""
MetricStore Class - Handles file I/O operations

This module manages the per-service metric logs and the report paths beside them.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List

from metricboard.models.data_models import HealthStatus, MetricEntry, ServiceInfo
from metricboard.models.errors import StorageError
from metricboard.services.namer import endpoint_slug
from metricboard.services.parser import EntryParser

logger = logging.getLogger(__name__)

LOG_FILENAME = "metrics.json"
REPORT_FILENAME = "report.html"


def atomic_write(path: str, text: str) -> None:
    """Write text to a temp file beside path, then rename it over path"""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class MetricStore:
    """
    Manages metric log storage and retrieval.
    Responsibilities:
    - Append entries to a service log (read-modify-write, atomic publish)
    - Read service logs
    - Resolve report paths
    - Provide file statistics
    """

    def __init__(self, root_dir: str):
        self.root_dir = os.path.abspath(root_dir)
        self.parser = EntryParser()
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # -- paths ---------------------------------------------------------------

    def service_dir(self, service_id: str) -> str:
        """Directory for a service; rejects identifiers that are not a single path component"""
        if (
            not service_id
            or service_id in (".", "..")
            or "/" in service_id
            or "\\" in service_id
            or "\x00" in service_id
        ):
            raise StorageError(f"Unsafe service identifier: {service_id!r}")
        path = os.path.join(self.root_dir, service_id)
        if os.path.dirname(os.path.abspath(path)) != self.root_dir:
            raise StorageError(f"Service identifier escapes metrics dir: {service_id!r}")
        return path

    def log_path(self, service_id: str) -> str:
        return os.path.join(self.service_dir(service_id), LOG_FILENAME)

    def report_path(self, service_id: str) -> str:
        return os.path.join(self.service_dir(service_id), REPORT_FILENAME)

    def endpoint_report_path(self, service_id: str, prefix: str) -> str:
        return os.path.join(self.service_dir(service_id), f"{endpoint_slug(prefix)}_report.html")

    # -- log I/O -------------------------------------------------------------

    def append(self, service_id: str, entry: MetricEntry) -> List[MetricEntry]:
        """
        Append one entry to the service log and persist the whole log.
        Returns the full log including the new entry.
        """
        with self._lock_for(service_id):
            self._ensure_log(service_id)
            records = self._read_records(service_id)
            records.append(entry.to_dict())
            self._write_records(service_id, records)

        entries = self._to_entries(records)
        logger.debug("Appended entry to %s (%d total)", service_id, len(entries))
        return entries

    def read(self, service_id: str) -> List[MetricEntry]:
        """All entries of a service log, oldest first. Missing log is empty."""
        if not os.path.exists(self.log_path(service_id)):
            return []
        with self._lock_for(service_id):
            records = self._read_records(service_id)
        return self._to_entries(records)

    def services(self) -> List[str]:
        """Services that have a log under the metrics dir"""
        if not os.path.isdir(self.root_dir):
            return []
        return sorted(
            name
            for name in os.listdir(self.root_dir)
            if os.path.isfile(os.path.join(self.root_dir, name, LOG_FILENAME))
        )

    def describe(self, service_id: str) -> ServiceInfo:
        return ServiceInfo(
            service=service_id,
            total_entries=len(self.read(service_id)),
            report_exists=os.path.exists(self.report_path(service_id)),
        )

    def stat(self, service_id: str) -> HealthStatus:
        """Get log file statistics"""
        path = self.log_path(service_id)
        exists = os.path.exists(path)
        size_bytes = os.path.getsize(path) if exists else 0
        entries = self.read(service_id) if exists else []

        return HealthStatus(
            status="ok",
            log_file_exists=exists,
            path=path,
            size_bytes=size_bytes,
            total_entries=len(entries),
            latest_timestamp=entries[-1].timestamp if entries else None,
        )

    # -- internals -----------------------------------------------------------

    def _lock_for(self, service_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(service_id)
            if lock is None:
                lock = self._locks[service_id] = threading.Lock()
            return lock

    def _ensure_log(self, service_id: str) -> None:
        """Create the service directory and an empty log on first use"""
        path = self.log_path(service_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            if not os.path.exists(path):
                atomic_write(path, "[]")
        except OSError as exc:
            raise StorageError(f"Cannot initialize log for {service_id}: {exc}") from exc

    def _read_records(self, service_id: str) -> List[Dict[str, Any]]:
        path = self.log_path(service_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read log for {service_id}: {exc}") from exc

        if not isinstance(data, list):
            raise StorageError(f"Log for {service_id} is not a JSON array")
        return data

    def _write_records(self, service_id: str, records: List[Dict[str, Any]]) -> None:
        path = self.log_path(service_id)
        try:
            text = json.dumps(records, indent=2, ensure_ascii=True, default=str)
            atomic_write(path, text)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Cannot write log for {service_id}: {exc}") from exc

    def _to_entries(self, records: List[Dict[str, Any]]) -> List[MetricEntry]:
        entries: List[MetricEntry] = []
        for raw in records:
            entry = self.parser.normalize(raw)
            if entry is not None:
                entries.append(entry)
        return entries
