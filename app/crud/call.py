# app/crud/call.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.call import Call, CALL_COMPLETED, CALL_INITIATED, CALL_IN_PROGRESS
from app.db.models.call_analysis import CallAnalysis
from app.db.models.workshop import Workshop


async def create_call(
    db: AsyncSession,
    *,
    workshop_id: int,
    from_number: str,
    to_number: str,
    vapi_call_id: Optional[str] = None,
) -> Call:
    call = Call(
        workshop_id=workshop_id,
        from_number=from_number,
        to_number=to_number,
        vapi_call_id=vapi_call_id,
        status=CALL_INITIATED,
        started_at=datetime.now(timezone.utc),
    )
    db.add(call)
    await db.flush()
    return call


async def mark_call_in_progress(db: AsyncSession, call_id: int) -> Optional[Call]:
    call = await db.get(Call, call_id)
    if not call:
        return None
    call.status = CALL_IN_PROGRESS
    call.answered_at = datetime.now(timezone.utc)
    await db.flush()
    return call


async def complete_call(
    db: AsyncSession,
    call_id: int,
    *,
    duration_seconds: Optional[int],
    cost_usd: float,
    recording_url: Optional[str],
    transcript: Optional[str],
    ended_reason: Optional[str] = None,
) -> Optional[Call]:
    call = await db.get(Call, call_id)
    if not call:
        return None
    call.status = CALL_COMPLETED
    call.ended_at = datetime.now(timezone.utc)
    call.duration_seconds = duration_seconds
    call.cost_usd = cost_usd
    call.recording_url = recording_url
    call.transcript = transcript
    call.ended_reason = ended_reason
    await db.flush()
    return call


async def get_call_detail(db: AsyncSession, call_id: int) -> Optional[dict[str, Any]]:
    """Call joined with its workshop name and latest analysis."""
    stmt = (
        sa.select(Call, Workshop.name, CallAnalysis.structured_data, CallAnalysis.sentiment)
        .join(Workshop, Workshop.id == Call.workshop_id)
        .outerjoin(CallAnalysis, CallAnalysis.call_id == Call.id)
        .where(Call.id == call_id)
        .order_by(CallAnalysis.id.desc())
        .limit(1)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        return None
    call, workshop_name, structured_data, sentiment = row
    return {
        "call": call,
        "workshop_name": workshop_name,
        "structured_data": structured_data,
        "sentiment": sentiment,
    }


async def list_calls_for_workshop(
    db: AsyncSession,
    workshop_id: int,
    *,
    limit: int = 50,
    offset: int = 0,
    status: Optional[str] = None,
) -> Sequence[sa.Row]:
    q = (
        sa.select(
            Call,
            CallAnalysis.customer_name,
            CallAnalysis.vehicle_make,
            CallAnalysis.vehicle_model,
            CallAnalysis.booking_created,
        )
        .outerjoin(CallAnalysis, CallAnalysis.call_id == Call.id)
        .where(Call.workshop_id == workshop_id)
    )
    if status is not None:
        q = q.where(Call.status == status)
    q = q.order_by(Call.started_at.desc(), Call.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return res.all()


async def count_calls_for_workshop(
    db: AsyncSession,
    workshop_id: int,
    *,
    status: Optional[str] = None,
) -> int:
    q = sa.select(sa.func.count()).select_from(Call).where(Call.workshop_id == workshop_id)
    if status is not None:
        q = q.where(Call.status == status)
    return (await db.execute(q)).scalar_one()
