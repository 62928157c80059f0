# app/api/routes/calls.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session, get_settings
from app.core.config import Settings
from app.core.errors import InternalError, NotFoundError, ServiceError, log_error
from app.crud.call import count_calls_for_workshop, get_call_detail, list_calls_for_workshop
from app.schemas.call import (
    CallDetailOut,
    CallListItem,
    CallListOut,
    CallOut,
    CallStatus,
    InboundCallRequest,
    InboundCallResponse,
)
from app.services.call_lifecycle import handle_inbound_call

router = APIRouter(prefix="/api/calls", tags=["calls"])


@router.post("/inbound", response_model=InboundCallResponse)
async def inbound_call(
    payload: InboundCallRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Record an incoming call and connect it to the workshop's AI assistant."""
    try:
        result = await handle_inbound_call(
            db,
            settings,
            from_number=payload.from_number,
            to_number=payload.to_number,
            call_sid=payload.call_sid,
        )
    except ServiceError:
        raise
    except Exception as e:
        log_error(e, {"endpoint": "/api/calls/inbound"})
        raise InternalError("Unable to process call") from e

    return InboundCallResponse(
        call_id=result.call.id,
        workshop_name=result.workshop.name,
    )


# Keep the static prefix route above the param route for clarity
@router.get("/workshop/{workshop_id}", response_model=CallListOut)
async def calls_for_workshop(
    workshop_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status: Optional[CallStatus] = Query(None, description="Filter by call status"),
    db: AsyncSession = Depends(get_session),
):
    status_value = status.value if status else None
    try:
        rows = await list_calls_for_workshop(
            db, workshop_id, limit=limit, offset=offset, status=status_value
        )
        total = await count_calls_for_workshop(db, workshop_id, status=status_value)
    except Exception as e:
        log_error(e, {"endpoint": "/api/calls/workshop", "workshop_id": workshop_id})
        raise InternalError() from e

    calls = [
        CallListItem(
            **CallOut.model_validate(call).model_dump(),
            customer_name=customer_name,
            vehicle_make=vehicle_make,
            vehicle_model=vehicle_model,
            booking_created=booking_created,
        )
        for call, customer_name, vehicle_make, vehicle_model, booking_created in rows
    ]
    return CallListOut(calls=calls, total=total, limit=limit, offset=offset)


@router.get("/{call_id}", response_model=CallDetailOut)
async def get_call(call_id: int, db: AsyncSession = Depends(get_session)):
    try:
        detail = await get_call_detail(db, call_id)
    except Exception as e:
        log_error(e, {"endpoint": "/api/calls", "call_id": call_id})
        raise InternalError() from e

    if detail is None:
        raise NotFoundError("Call not found")

    return CallDetailOut(
        **CallOut.model_validate(detail["call"]).model_dump(),
        workshop_name=detail["workshop_name"],
        structured_data=detail["structured_data"],
        sentiment=detail["sentiment"],
    )
