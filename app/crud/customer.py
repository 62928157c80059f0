# app/crud/customer.py
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.customer import Customer


async def get_customer_by_phone(db: AsyncSession, workshop_id: int, phone: str) -> Optional[Customer]:
    stmt = sa.select(Customer).where(Customer.workshop_id == workshop_id, Customer.phone == phone)
    res = await db.execute(stmt)
    return res.scalars().first()


async def create_customer(
    db: AsyncSession,
    *,
    workshop_id: int,
    name: str,
    phone: Optional[str],
    email: Optional[str] = None,
) -> Customer:
    obj = Customer(workshop_id=workshop_id, name=name, phone=phone, email=email)
    db.add(obj)
    await db.flush()
    return obj
