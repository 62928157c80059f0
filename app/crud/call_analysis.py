# app/crud/call_analysis.py
import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.call_analysis import CallAnalysis
from app.schemas.webhook import StructuredData


async def create_call_analysis(
    db: AsyncSession,
    *,
    call_id: int,
    data: StructuredData,
    sentiment: str = "neutral",
) -> CallAnalysis:
    analysis = CallAnalysis(
        call_id=call_id,
        structured_data=data.model_dump(mode="json"),
        customer_name=data.customer_name,
        customer_phone=data.customer_phone,
        customer_email=data.customer_email,
        vehicle_make=data.vehicle_make,
        vehicle_model=data.vehicle_model,
        vehicle_year=data.vehicle_year,
        issue_summary=data.issue_summary,
        issue_category=data.issue_category,
        urgency=data.urgency,
        preferred_date=data.preferred_date,
        preferred_time=data.preferred_time,
        booking_confirmed=data.booking_confirmed,
        sentiment=sentiment,
        booking_created=False,
    )
    db.add(analysis)
    await db.flush()
    return analysis


async def mark_booking_created(db: AsyncSession, call_id: int) -> int:
    stmt = (
        sa.update(CallAnalysis)
        .where(CallAnalysis.call_id == call_id)
        .values(booking_created=True)
        .execution_options(synchronize_session="fetch")
    )
    res = await db.execute(stmt)
    return res.rowcount
