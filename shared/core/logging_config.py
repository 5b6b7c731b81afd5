"""
Structured logging for the gallery services

One JSON object per line on stdout. Records logged while a request is being
served carry that request's id, and request logs carry their duration.
"""

import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

REQUEST_ID_HEADER = 'X-Request-ID'

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

# Chatty libraries only report problems
QUIET_LOGGERS = ('uvicorn.access', 'sqlalchemy.engine', 'httpx', 'PIL')


class StructuredFormatter(logging.Formatter):
    """Render a record as a JSON line stamped with the service identity"""

    def __init__(self, service_name: str, environment: str = "development", version: str = "1.0.0"):
        super().__init__()
        self.service = {"name": service_name, "environment": environment, "version": version}

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        fields = getattr(record, 'extra_fields', None)
        if fields:
            entry["fields"] = fields

        duration_ms = getattr(record, 'duration_ms', None)
        if duration_ms is not None:
            entry["duration_ms"] = round(duration_ms, 3)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            entry["error"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }

        return json.dumps(entry, default=str)


def setup_logging(
    service_name: str,
    level: str = "INFO",
    environment: str = "development",
    version: str = "1.0.0"
) -> None:
    """
    Route every logger through one JSON stdout handler

    Args:
        service_name: Stamped on every line
        level: Root log level name; unknown names fall back to INFO
        environment: Deployment environment label
        version: Service version label
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(service_name, environment, version))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Merge the fields bound with get_logger() into each record's extra_fields

    Call sites add their own fields with extra={'extra_fields': {...}}; those
    win over the bound ones.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        fields = {**self.extra, **extra.get('extra_fields', {})}
        if fields:
            extra['extra_fields'] = fields
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, **fields: Any) -> LoggerAdapter:
    """Logger for `name` (usually __name__) with optional bound fields"""
    return LoggerAdapter(logging.getLogger(name), fields)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id to everything logged while serving the request,
    log its outcome and duration, and echo the id back as X-Request-ID
    """

    logger = get_logger(__name__)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        fields = {'method': request.method, 'path': request.url.path}
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                self.logger.error(
                    f"{request.method} {request.url.path} failed",
                    exc_info=True,
                    extra={'extra_fields': fields, 'duration_ms': self._elapsed_ms(started)}
                )
                raise

            self.logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    'extra_fields': {**fields, 'status_code': response.status_code},
                    'duration_ms': self._elapsed_ms(started)
                }
            )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000
