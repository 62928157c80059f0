# app/crud/workshop.py
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.workshop import Workshop


async def get_active_workshop_by_phone(db: AsyncSession, phone_number: str) -> Optional[Workshop]:
    stmt = sa.select(Workshop).where(
        Workshop.vapi_phone_number == phone_number,
        Workshop.status == "active",
    )
    res = await db.execute(stmt)
    return res.scalars().first()
