"""
Service error taxonomy and fingerprinted error logging.
"""
import hashlib
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for alerting."""
    LOW = "low"           # 404s, validation errors, rejected webhooks
    MEDIUM = "medium"     # 500s, timeouts, notification failures
    HIGH = "high"         # failed call processing, data integrity
    CRITICAL = "critical" # service down


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    error = "Internal server error"
    severity = ErrorSeverity.MEDIUM

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.error
        super().__init__(self.message)


class NotFoundError(ServiceError):
    status_code = 404
    error = "Not found"
    severity = ErrorSeverity.LOW


class ValidationError(ServiceError):
    status_code = 422
    error = "Invalid request"
    severity = ErrorSeverity.LOW


class AuthError(ServiceError):
    status_code = 401
    error = "Missing signature or timestamp"
    severity = ErrorSeverity.HIGH


class ReplayError(AuthError):
    error = "Webhook timestamp too old"


class SignatureMismatchError(AuthError):
    error = "Invalid signature"


class InternalError(ServiceError):
    status_code = 500
    error = "Internal server error"


_SEVERITY_BY_TYPE = {
    "IntegrityError": ErrorSeverity.HIGH,
    "OperationalError": ErrorSeverity.HIGH,
    "TimeoutError": ErrorSeverity.MEDIUM,
    "ConnectError": ErrorSeverity.MEDIUM,
}


def _fingerprint(error_type: str, message: str, endpoint: str) -> str:
    content = f"{error_type}:{message[:100]}:{endpoint}"
    return hashlib.md5(content.encode(), usedforsecurity=False).hexdigest()[:8]


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None,
              severity: Optional[ErrorSeverity] = None) -> str:
    """Log an error with a stable fingerprint so repeats can be grouped."""
    context = context or {}
    error_type = type(error).__name__

    if severity is None:
        if isinstance(error, ServiceError):
            severity = error.severity
        else:
            severity = _SEVERITY_BY_TYPE.get(error_type, ErrorSeverity.MEDIUM)

    fingerprint = _fingerprint(error_type, str(error), str(context.get("endpoint", "")))
    log = logger.warning if severity == ErrorSeverity.LOW else logger.error
    log(
        "service_error",
        error_hash=fingerprint,
        error_type=error_type,
        error=str(error),
        severity=severity.value,
        exc_info=severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL),
        **context
    )
    return fingerprint


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    log_error(exc, {"endpoint": request.url.path})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
