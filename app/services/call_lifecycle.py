# app/services/call_lifecycle.py
"""
Call lifecycle: initiated -> in-progress -> completed.

Inbound calls are recorded synchronously. The call-ended step runs after the
webhook has been acknowledged and applies the call update, the analysis insert
and (when the caller confirmed) the booking as one transaction. The booking
notification goes out only after that transaction commits.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.errors import ErrorSeverity, NotFoundError, log_error
from app.core.logging import bind_call_context, get_logger
from app.crud.call import complete_call, create_call, mark_call_in_progress
from app.crud.call_analysis import create_call_analysis
from app.crud.workshop import get_active_workshop_by_phone
from app.db.models.booking import Booking
from app.db.models.call import Call
from app.db.models.workshop import Workshop
from app.db.session import Database
from app.schemas.webhook import CallEndedEvent
from app.services.assistant import build_assistant_config
from app.services.booking import create_booking_from_analysis
from app.services.notifications import BookingNotifier, build_notification_payload

logger = get_logger(__name__)


@dataclass
class InboundCallResult:
    call: Call
    workshop: Workshop
    assistant_config: dict[str, Any]


async def handle_inbound_call(
    db: AsyncSession,
    settings: Settings,
    *,
    from_number: str,
    to_number: str,
    call_sid: Optional[str] = None,
) -> InboundCallResult:
    started = time.perf_counter()
    logger.info("inbound_call", from_number=from_number, to_number=to_number)

    workshop = await get_active_workshop_by_phone(db, to_number)
    if not workshop:
        raise NotFoundError("No active workshop found for this phone number")

    call = await create_call(
        db,
        workshop_id=workshop.id,
        from_number=from_number,
        to_number=to_number,
        vapi_call_id=call_sid,
    )
    await db.commit()

    # Handed to the voice platform; creating the platform call itself happens there
    assistant_config = build_assistant_config(workshop, call, settings)

    logger.info("call_initiated", call_id=call.id, workshop_id=workshop.id,
                duration_ms=round((time.perf_counter() - started) * 1000, 1))
    return InboundCallResult(call=call, workshop=workshop, assistant_config=assistant_config)


async def mark_call_started(db: AsyncSession, call_id: int) -> Call:
    call = await mark_call_in_progress(db, call_id)
    if not call:
        raise NotFoundError(f"Call {call_id} not found")
    await db.commit()
    logger.info("call_started", call_id=call_id)
    return call


async def process_call_ended(
    database: Database,
    event: CallEndedEvent,
    *,
    settings: Settings,
    notifier: Optional[BookingNotifier] = None,
    now: Optional[datetime] = None,
) -> Optional[Booking]:
    """
    Apply a call-ended event. Returns the booking when one was created.

    Errors are logged and re-raised after the transaction has rolled back.
    """
    started = time.perf_counter()
    call_id = event.metadata.call_id
    bind_call_context(call_id, vapi_call_id=event.call.id)
    data = event.analysis.structured_data
    booking: Optional[Booking] = None

    async with database.session() as db:
        try:
            async with db.begin():
                # 1) Close out the call
                call = await complete_call(
                    db,
                    call_id,
                    duration_seconds=round(event.call.duration) if event.call.duration is not None else None,
                    cost_usd=event.call.cost or 0,
                    recording_url=event.call.recording_url,
                    transcript=event.call.transcript,
                    ended_reason=event.call.ended_reason,
                )
                if call is None:
                    raise NotFoundError(f"Call {call_id} not found")

                # 2) Store the analysis
                await create_call_analysis(
                    db,
                    call_id=call_id,
                    data=data,
                    sentiment=event.analysis.sentiment_label,
                )

                # 3) Booking, only for confirmed calls with a name
                if data.wants_booking:
                    logger.info("booking_requested", call_id=call_id)
                    booking = await create_booking_from_analysis(
                        db,
                        call_id=call_id,
                        workshop_id=call.workshop_id,
                        data=data,
                        tz=settings.local_tz,
                        now=now,
                    )
        except Exception as e:
            log_error(e, {"component": "call_ended", "call_id": call_id}, ErrorSeverity.HIGH)
            raise

    logger.info("call_processed", call_id=call_id, booking_created=booking is not None,
                duration_ms=round((time.perf_counter() - started) * 1000, 1))

    if booking is not None and notifier is not None:
        notifier.dispatch(build_notification_payload(
            booking_id=booking.id,
            workshop_id=booking.workshop_id,
            customer_id=booking.customer_id,
            customer_email=data.customer_email,
            scheduled_at=booking.scheduled_at,
        ))

    return booking
