# app/api/routes/webhooks.py
"""
Vapi lifecycle webhooks.

Both endpoints answer 200 whatever happens internally: the platform retries
anything else, and a retried call-ended event would be processed twice.
Failures are reported in the body and logged.
"""
import json
from typing import Any, Optional

import pydantic
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_database, get_notifier, get_session, get_settings
from app.core.config import Settings
from app.core.errors import ServiceError, log_error
from app.core.logging import get_logger
from app.db.session import Database
from app.schemas.webhook import CallEndedEvent, CallStartedEvent
from app.services.call_lifecycle import mark_call_started, process_call_ended
from app.services.notifications import BookingNotifier
from app.services.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_webhook_signature

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])
logger = get_logger(__name__)


async def _read_payload(request: Request, settings: Settings) -> Any:
    body = await request.body()
    if settings.verify_signatures:
        verify_webhook_signature(
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER),
            body,
            settings.VAPI_WEBHOOK_SECRET,
            tolerance=settings.WEBHOOK_TOLERANCE_SECONDS,
        )
    return json.loads(body or b"{}")


def _public_message(error: Exception) -> str:
    if isinstance(error, ServiceError):
        return error.message
    if isinstance(error, pydantic.ValidationError):
        return "Invalid webhook payload"
    if isinstance(error, json.JSONDecodeError):
        return "Malformed JSON"
    return "Internal error"


def _received(error: Optional[Exception] = None) -> dict[str, Any]:
    if error is None:
        return {"received": True}
    return {"received": True, "error": _public_message(error)}


@router.post("/vapi/call-started")
async def call_started(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_session),
):
    try:
        event = CallStartedEvent.model_validate(await _read_payload(request, settings))
        await mark_call_started(db, event.metadata.call_id)
    except Exception as e:
        log_error(e, {"endpoint": request.url.path})
        return _received(e)
    return _received()


async def run_call_ended(
    database: Database,
    event: CallEndedEvent,
    settings: Settings,
    notifier: Optional[BookingNotifier],
) -> None:
    """Background entry point; failures end here after being logged with full context."""
    try:
        await process_call_ended(database, event, settings=settings, notifier=notifier)
    except Exception as e:
        logger.error("call_ended_processing_failed", call_id=event.metadata.call_id,
                     error_type=type(e).__name__)


@router.post("/vapi/call-ended")
async def call_ended(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    database: Database = Depends(get_database),
    notifier: BookingNotifier = Depends(get_notifier),
):
    try:
        event = CallEndedEvent.model_validate(await _read_payload(request, settings))
    except Exception as e:
        log_error(e, {"endpoint": request.url.path})
        return _received(e)

    logger.info("call_ended_received", call_id=event.metadata.call_id,
                vapi_call_id=event.call.id, ended_reason=event.call.ended_reason)

    # Acknowledge first; the platform enforces a short response deadline
    background_tasks.add_task(run_call_ended, database, event, settings, notifier)
    return _received()
