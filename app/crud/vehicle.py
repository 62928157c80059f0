# app/crud/vehicle.py
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.vehicle import Vehicle


async def create_vehicle(
    db: AsyncSession,
    *,
    customer_id: int,
    make: str,
    model: str,
    year: Optional[int] = None,
) -> Vehicle:
    obj = Vehicle(customer_id=customer_id, make=make, model=model, year=year)
    db.add(obj)
    await db.flush()
    return obj
