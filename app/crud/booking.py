# app/crud/booking.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.booking import Booking, BOOKING_CONFIRMED


async def create_booking(
    db: AsyncSession,
    *,
    workshop_id: int,
    customer_id: int,
    call_id: int,
    scheduled_at: datetime,
    vehicle_id: Optional[int] = None,
    issue_summary: Optional[str] = None,
    issue_category: str = "other",
    urgency: str = "normal",
    status: str = BOOKING_CONFIRMED,
) -> Booking:
    booking = Booking(
        workshop_id=workshop_id,
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        call_id=call_id,
        scheduled_at=scheduled_at,
        issue_summary=issue_summary,
        issue_category=issue_category,
        urgency=urgency,
        status=status,
    )
    db.add(booking)
    await db.flush()
    return booking
