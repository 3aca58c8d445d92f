"""
Health and metrics endpoints.

``/health/live`` answers while the process runs. ``/health/ready`` checks
what lookups and admin saves depend on: the database, a writable upload
directory and free memory.
"""

import logging
import os
import tempfile
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import psutil
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# free memory (MB) below which readiness fails / warns
MEMORY_FAIL_MB = 100
MEMORY_WARN_MB = 500

class HealthStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

_SEVERITY = {HealthStatus.PASS: 0, HealthStatus.WARN: 1, HealthStatus.FAIL: 2}

def worst(statuses: Iterable[HealthStatus]) -> HealthStatus:
    return max(statuses, key=_SEVERITY.__getitem__, default=HealthStatus.PASS)

def _result(state: HealthStatus, kind: str, **details) -> Dict[str, Any]:
    return {
        "status": state,
        "kind": kind,
        "checked_at": datetime.now(timezone.utc).isoformat(),
        **details,
    }

class ServiceHealth:
    """Readiness checks for one service plus the router that exposes them."""

    def __init__(
        self,
        service_name: str,
        version: str = "1.0.0",
        engine: Optional[Engine] = None,
        upload_dir: Optional[str] = None,
    ):
        self.service_name = service_name
        self.version = version
        self.engine = engine
        self.upload_dir = upload_dir
        self.started = time.monotonic()
        self.readiness_probes = 0

    @property
    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self.started, 3)

    def checks(self) -> Tuple[Tuple[str, Callable[[], Dict[str, Any]]], ...]:
        probes = [("memory", self.check_memory)]
        if self.engine is not None:
            probes.append(("database", self.check_database))
        if self.upload_dir:
            probes.append(("uploads", self.check_uploads))
        return tuple(probes)

    def run_checks(self) -> Dict[str, Dict[str, Any]]:
        self.readiness_probes += 1
        return {name: probe() for name, probe in self.checks()}

    @staticmethod
    def overall_status(results: Dict[str, Dict[str, Any]]) -> HealthStatus:
        return worst(r["status"] for r in results.values())

    def check_database(self) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Readiness: database unreachable: {e}")
            return _result(HealthStatus.FAIL, "datastore", error=str(e))
        return _result(HealthStatus.PASS, "datastore", latency_ms=round((time.perf_counter() - started) * 1000, 2))

    def check_uploads(self) -> Dict[str, Any]:
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=self.upload_dir):
                pass
        except OSError as e:
            # lookups keep working without image uploads
            logger.warning(f"Readiness: upload dir not writable: {e}")
            return _result(HealthStatus.WARN, "storage", path=self.upload_dir, error=str(e))
        return _result(HealthStatus.PASS, "storage", path=self.upload_dir)

    def check_memory(self) -> Dict[str, Any]:
        free_mb = psutil.virtual_memory().available / (1024 ** 2)
        if free_mb < MEMORY_FAIL_MB:
            state = HealthStatus.FAIL
        elif free_mb < MEMORY_WARN_MB:
            state = HealthStatus.WARN
        else:
            state = HealthStatus.PASS
        return _result(state, "system", free_mb=round(free_mb, 1))

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health")
        async def health() -> Dict[str, Any]:
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": self.uptime_seconds,
            }

        @router.get("/health/live")
        async def live() -> Dict[str, Any]:
            return {"status": "alive"}

        # sync so the DB probe runs in the threadpool
        @router.get("/health/ready")
        def ready() -> JSONResponse:
            results = self.run_checks()
            overall = self.overall_status(results)
            code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == HealthStatus.FAIL else status.HTTP_200_OK
            return JSONResponse(status_code=code, content={
                "status": overall,
                "service": self.service_name,
                "checks": results,
            })

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            with process.oneshot():
                rss = process.memory_info().rss
                threads = process.num_threads()
                cpu = process.cpu_percent()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": self.uptime_seconds,
                "readiness_probes": self.readiness_probes,
                "process": {"rss_bytes": rss, "threads": threads, "cpu_percent": cpu},
            }

        return router
