"""
Health checks for the gallery services
- /health, /health/live: liveness
- /health/ready: dependency checks (database, optional cache, disk, memory)
- /health/startup: migrations applied
- /metrics: process metrics
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from typing import Callable, Dict, Any, Optional
import time
import redis
from datetime import datetime, timezone
from enum import Enum
import psutil
import logging

logger = logging.getLogger(__name__)

Check = Dict[str, Any]

# (fail below, warn below) thresholds
DISK_FREE_GB = (1, 5)
MEMORY_AVAILABLE_MB = (100, 500)


class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _result(state: HealthStatus, component: str, output: Optional[str] = None,
            value: Optional[str] = None, unit: Optional[str] = None) -> Check:
    check: Check = {"status": state, "componentType": component, "time": _now()}
    if output is not None:
        check["output"] = output
    if value is not None:
        check["observedValue"] = value
        check["observedUnit"] = unit
    return check


def _graded(observed: float, limits, component: str, unit: str) -> Check:
    fail_below, warn_below = limits
    if observed < fail_below:
        state = HealthStatus.FAIL
    elif observed < warn_below:
        state = HealthStatus.WARN
    else:
        state = HealthStatus.PASS
    return _result(state, component, value=f"{observed:.2f}", unit=unit)


def _timed_ping(ping: Callable[[], Any], component: str) -> Check:
    started = time.perf_counter()
    ping()
    elapsed = (time.perf_counter() - started) * 1000
    return _result(HealthStatus.PASS, component, value=f"{elapsed:.2f}ms", unit="ms")


def overall_status(checks: Dict[str, Check]) -> HealthStatus:
    statuses = {check["status"] for check in checks.values()}
    for state in (HealthStatus.FAIL, HealthStatus.WARN):
        if state in statuses:
            return state
    return HealthStatus.PASS


class ServiceHealth:
    """
    Health endpoints for one service.

    The database engine is looked up on the application at request time
    (``app.state.database.engine``) so every app instance checks its own store.
    A cache is only checked when a Redis URL is configured, and a cache
    outage degrades readiness to WARN instead of failing it.
    """

    def __init__(self, service_name: str, version: str = "1.0.0",
                 release_id: str = "unknown", redis_url: Optional[str] = None):
        self.service_name = service_name
        self.version = version
        self.release_id = release_id
        self.redis_url = redis_url
        self.start_time = time.time()
        self.checks_performed = 0

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health", status_code=status.HTTP_200_OK)
        async def health_check() -> Dict[str, Any]:
            """Liveness probe, no dependency checks"""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "releaseId": self.release_id,
                "timestamp": _now()
            }

        @router.get("/health/live", status_code=status.HTTP_200_OK)
        async def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        async def readiness(request: Request) -> JSONResponse:
            """Readiness probe; 503 only when a check fails outright"""
            checks = self.readiness_checks(_engine(request))
            state = overall_status(checks)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE if state == HealthStatus.FAIL
                else status.HTTP_200_OK,
                content={
                    "status": state,
                    "serviceId": self.service_name,
                    "version": self.version,
                    "releaseId": self.release_id,
                    "checks": checks,
                    "timestamp": _now()
                }
            )

        @router.get("/health/startup")
        async def startup(request: Request):
            checks = {"database:migrations": check_migrations(_engine(request))}
            if overall_status(checks) == HealthStatus.FAIL:
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"status": "starting", "checks": checks}
                )
            return {"status": "started", "checks": checks}

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            memory = process.memory_info()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": time.time() - self.start_time,
                "checks_performed": self.checks_performed,
                "timestamp": _now(),
                "system": {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads()
                }
            }

        return router

    def readiness_checks(self, engine: Optional[Engine]) -> Dict[str, Check]:
        self.checks_performed += 1
        checks = {"database:connectivity": check_database(engine)}
        if self.redis_url:
            checks["cache:connectivity"] = check_redis(self.redis_url)
        checks["storage:disk_space"] = check_disk_space()
        checks["system:memory"] = check_memory()
        return checks


def _engine(request: Request) -> Optional[Engine]:
    database = getattr(request.app.state, "database", None)
    return database.engine if database is not None else None


def _select_one(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1")).fetchone()


def check_database(engine: Optional[Engine]) -> Check:
    if engine is None:
        return _result(HealthStatus.FAIL, "datastore", output="database not configured")
    try:
        return _timed_ping(lambda: _select_one(engine), "datastore")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return _result(HealthStatus.FAIL, "datastore", output=str(e))


def check_redis(redis_url: str) -> Check:
    try:
        client = redis.from_url(redis_url, socket_connect_timeout=1)
        return _timed_ping(client.ping, "cache")
    except Exception as e:
        return _result(HealthStatus.WARN, "cache", output=str(e))


def check_disk_space(path: str = "/") -> Check:
    try:
        free_gb = psutil.disk_usage(path).free / (1024 ** 3)
    except OSError as e:
        return _result(HealthStatus.WARN, "system", output=str(e))
    return _graded(free_gb, DISK_FREE_GB, "system", "GB")


def check_memory() -> Check:
    available_mb = psutil.virtual_memory().available / (1024 ** 2)
    return _graded(available_mb, MEMORY_AVAILABLE_MB, "system", "MB")


def check_migrations(engine: Optional[Engine]) -> Check:
    """Alembic's version table exists once migrations have run"""
    if engine is None:
        return _result(HealthStatus.FAIL, "datastore", output="database not configured")
    try:
        if inspect(engine).has_table("alembic_version"):
            return _result(HealthStatus.PASS, "datastore")
        return _result(HealthStatus.WARN, "datastore", output="Migrations table not found")
    except Exception as e:
        return _result(HealthStatus.FAIL, "datastore", output=str(e))
