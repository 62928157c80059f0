"""
Structured logging for the call intake service.

Every line is a structlog event. Request-scoped fields (correlation id, path,
call id) are bound through `structlog.contextvars` so background work started
from a request keeps them. Caller phone numbers are masked and free text
(transcripts, error strings) is truncated before rendering.
"""
import logging
import time
import uuid
from typing import Optional

import structlog
from fastapi import Request

CORRELATION_HEADER = "X-Correlation-ID"

# Keys whose values are caller phone numbers
PHONE_KEYS = ("from_number", "phone", "customer_phone")
# Keys holding unbounded text
TRUNCATE_KEYS = ("error", "transcript", "statement", "message")


def mask_phone(s: Optional[str]) -> str:
    if not s:
        return ""
    s = str(s).strip()
    if "****" in s:
        return s
    if s.startswith("+") and len(s) > 6:
        return s[:3] + "****" + s[-3:]
    if len(s) > 4:
        return s[:2] + "****" + s[-2:]
    return s


class PhoneMaskProcessor:
    def __call__(self, logger, method_name, event_dict):
        for key in PHONE_KEYS:
            if event_dict.get(key):
                event_dict[key] = mask_phone(event_dict[key])
        return event_dict


class TruncateProcessor:
    """Cap free-text fields at `max_length` characters."""

    def __init__(self, max_length: int = 200):
        self.max_length = max_length

    def __call__(self, logger, method_name, event_dict):
        for key in TRUNCATE_KEYS:
            value = event_dict.get(key)
            if value is not None and len(str(value)) > self.max_length:
                event_dict[key] = str(value)[:self.max_length] + "..."
        return event_dict


def setup_logging(debug: bool = False, max_log_length: int = 200, level: str = "INFO"):
    """Configure structlog on top of stdlib logging. JSON lines unless `debug`."""
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        PhoneMaskProcessor(),
        TruncateProcessor(max_length=max_log_length),
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=log_level, format="%(message)s")
    # uvicorn's access log duplicates the request_complete events
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str = __name__):
    return structlog.get_logger(name)


def bind_call_context(call_id: Optional[int] = None, **fields) -> None:
    """Attach call identifiers to every event logged from the current context."""
    if call_id is not None:
        fields["call_id"] = call_id
    structlog.contextvars.bind_contextvars(**fields)


class LoggingMiddleware:
    """Binds a correlation id per request and logs slow or failed requests."""

    def __init__(self, log_requests: bool = False, log_responses: bool = False,
                 slow_threshold: float = 2.0):
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.slow_threshold = slow_threshold
        self.logger = get_logger("http")

    async def __call__(self, request: Request, call_next):
        correlation_id = uuid.uuid4().hex[:8]
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            endpoint=request.url.path,
            method=request.method,
        )
        request.state.correlation_id = correlation_id
        started = time.perf_counter()

        if self.log_requests:
            self.logger.info("request_start", query_params=dict(request.query_params))

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error("request_error", error=str(e), error_type=type(e).__name__,
                              duration_ms=round((time.perf_counter() - started) * 1000, 1))
            raise
        finally:
            structlog.contextvars.clear_contextvars()

        elapsed = time.perf_counter() - started
        slow = elapsed > self.slow_threshold
        if self.log_responses or slow or response.status_code >= 400:
            self.logger.info("request_complete", status_code=response.status_code,
                             duration_ms=round(elapsed * 1000, 1), slow=slow,
                             correlation_id=correlation_id, endpoint=request.url.path)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
