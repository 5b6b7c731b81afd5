"""Shared core utilities for the gallery services.

Health checks, structured logging and public id generation.
"""

from .health import ServiceHealth, HealthStatus
from .ids import generate_id
from .logging_config import (
    setup_logging,
    get_logger,
    RequestLoggingMiddleware,
    StructuredFormatter,
    LoggerAdapter,
)

__all__ = [
    # Health checks
    "ServiceHealth",
    "HealthStatus",
    # Ids
    "generate_id",
    # Logging
    "setup_logging",
    "get_logger",
    "RequestLoggingMiddleware",
    "StructuredFormatter",
    "LoggerAdapter",
]
