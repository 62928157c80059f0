# app/db/models/customer.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        # NULL phones never collide, so phoneless callers always get a fresh row
        sa.UniqueConstraint("workshop_id", "phone", name="uq_customers_workshop_id_phone"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    workshop_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("workshops.id"), nullable=False)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.Text)
    email: Mapped[Optional[str]] = mapped_column(sa.Text)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
