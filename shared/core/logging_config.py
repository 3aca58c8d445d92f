"""
Structured JSON logging for the tracking service.

Every record is written as one JSON line. Records logged while a request is
in flight carry that request's context (request id, correlation id, whether
an admin session cookie was sent), so a lookup or an admin save can be
followed from the access line down to the store error.
"""

import json
import logging
import re
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"
SESSION_COOKIE = "admin_session"

_request_context: ContextVar[Optional[Dict[str, str]]] = ContextVar("request_context", default=None)

def current_context() -> Dict[str, str]:
    return dict(_request_context.get() or {})

def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    session: Optional[str] = None,
) -> None:
    """Merge the given values into the current request context."""
    context = current_context()
    for key, value in (("request_id", request_id), ("correlation_id", correlation_id), ("session", session)):
        if value:
            context[key] = value
    _request_context.set(context)

def new_request_id() -> str:
    return uuid.uuid4().hex

class JsonFormatter(logging.Formatter):
    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        doc = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service_name,
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }
        context = current_context()
        if context:
            doc["context"] = context
        fields = getattr(record, "fields", None)
        if fields:
            doc["fields"] = fields
        if record.exc_info:
            doc["exception"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)

class RedactingFilter(logging.Filter):
    """Mask the value of credential-looking ``key=value`` or ``key: value`` pairs."""

    KEYS = ("password", "token", "secret", "authorization", "cookie", SESSION_COOKIE)
    PATTERN = re.compile(r"(?i)\b(%s)\b(\s*[=:]\s*)(\S+)" % "|".join(KEYS))
    MASK = "***REDACTED***"

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = self.PATTERN.sub(lambda m: m.group(1) + m.group(2) + self.MASK, message)
        if masked != message:
            record.msg, record.args = masked, None
        return True

def setup_logging(service_name: str, level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Route all records to stdout as JSON, and to a rotating ``log_file`` when given."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5))
    formatter = JsonFormatter(service_name)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)

    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger(__name__).info(
        "Logging ready", extra={"fields": {"service": service_name, "level": level, "log_file": log_file}}
    )

class ContextLogger(logging.LoggerAdapter):
    """Adapter accepting structured ``fields=`` next to the message."""

    def process(self, msg, kwargs):
        fields = kwargs.pop("fields", None)
        if fields:
            kwargs.setdefault("extra", {})["fields"] = fields
        return msg, kwargs

def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})

def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Give each request an id, log how it ended and echo the id back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        token = _request_context.set(None)
        set_request_context(
            request_id=request_id,
            correlation_id=request.headers.get(CORRELATION_ID_HEADER),
            session="admin" if SESSION_COOKIE in request.cookies else None,
        )
        log = get_logger("tracking.http")
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                log.exception(f"{route} raised", fields={"elapsed_ms": _elapsed_ms(started)})
                raise
            log.info(
                f"{route} -> {response.status_code}",
                fields={"status": response.status_code, "elapsed_ms": _elapsed_ms(started)},
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _request_context.reset(token)
