"""Cross-cutting pieces of the tracking service: JSON logging and health endpoints."""

from .health import HealthStatus, ServiceHealth
from .logging_config import (
    ContextLogger,
    RequestLoggingMiddleware,
    current_context,
    get_logger,
    set_request_context,
    setup_logging,
)

__all__ = [
    "ContextLogger",
    "HealthStatus",
    "RequestLoggingMiddleware",
    "ServiceHealth",
    "current_context",
    "get_logger",
    "set_request_context",
    "setup_logging",
]
