# app/db/models/vehicle.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        sa.Index("ix_vehicles_customer_id", "customer_id"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    make: Mapped[str] = mapped_column(sa.Text, nullable=False)
    model: Mapped[str] = mapped_column(sa.Text, nullable=False)
    year: Mapped[Optional[int]] = mapped_column(sa.Integer)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
