# app/services/booking.py
from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.business import UTC, parse_preferred_datetime
from app.core.logging import get_logger
from app.crud.booking import create_booking
from app.crud.call_analysis import mark_booking_created
from app.crud.customer import create_customer, get_customer_by_phone
from app.crud.vehicle import create_vehicle
from app.db.models.booking import Booking
from app.db.models.customer import Customer
from app.schemas.webhook import StructuredData

logger = get_logger(__name__)


async def find_or_create_customer(
    db: AsyncSession,
    *,
    workshop_id: int,
    name: str,
    phone: Optional[str],
    email: Optional[str] = None,
) -> Customer:
    """Phone is the dedup key within a workshop; callers without one always get a new row."""
    if phone:
        existing = await get_customer_by_phone(db, workshop_id, phone)
        if existing:
            return existing

    customer = await create_customer(db, workshop_id=workshop_id, name=name, phone=phone, email=email)
    logger.info("customer_created", customer_id=customer.id, workshop_id=workshop_id,
                phone=phone)
    return customer


async def create_booking_from_analysis(
    db: AsyncSession,
    *,
    call_id: int,
    workshop_id: int,
    data: StructuredData,
    tz: tzinfo = UTC,
    now: Optional[datetime] = None,
) -> Booking:
    """
    Derive customer, vehicle and booking rows from a call's structured data.

    Runs inside the caller's transaction and never commits; any failure
    propagates so the whole call-ended unit rolls back.
    """
    # 1) Find-or-create customer
    customer = await find_or_create_customer(
        db,
        workshop_id=workshop_id,
        name=data.customer_name or "Unknown",
        phone=data.customer_phone,
        email=data.customer_email,
    )

    # 2) Vehicle, only when both make and model are known
    vehicle_id = None
    if data.vehicle_make and data.vehicle_model:
        vehicle = await create_vehicle(
            db,
            customer_id=customer.id,
            make=data.vehicle_make,
            model=data.vehicle_model,
            year=data.vehicle_year,
        )
        vehicle_id = vehicle.id
        logger.info("vehicle_created", vehicle_id=vehicle_id, customer_id=customer.id)

    # 3) Appointment time
    scheduled_at = parse_preferred_datetime(data.preferred_date, data.preferred_time, now=now, tz=tz)

    # 4) Booking
    booking = await create_booking(
        db,
        workshop_id=workshop_id,
        customer_id=customer.id,
        vehicle_id=vehicle_id,
        call_id=call_id,
        scheduled_at=scheduled_at,
        issue_summary=data.issue_summary,
        issue_category=data.issue_category or "other",
        urgency=data.urgency or "normal",
    )

    # 5) Flag the analysis row
    await mark_booking_created(db, call_id)

    logger.info("booking_created", booking_id=booking.id, call_id=call_id,
                customer_id=customer.id, scheduled_at=scheduled_at.isoformat())
    return booking
