# app/db/models/booking.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK

BOOKING_CONFIRMED = "confirmed"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        sa.Index("ix_bookings_workshop_id_scheduled_at", "workshop_id", "scheduled_at"),
        sa.Index("ix_bookings_call_id", "call_id"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    workshop_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("workshops.id"), nullable=False)
    customer_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("customers.id"), nullable=False)
    vehicle_id: Mapped[Optional[int]] = mapped_column(PK, sa.ForeignKey("vehicles.id"))
    call_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("calls.id"), nullable=False)

    # Store as timezone-aware
    scheduled_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    issue_summary: Mapped[Optional[str]] = mapped_column(sa.Text)
    issue_category: Mapped[str] = mapped_column(sa.Text, nullable=False, default="other")
    urgency: Mapped[str] = mapped_column(sa.Text, nullable=False, default="normal")
    status: Mapped[str] = mapped_column(sa.String(32), nullable=False, default=BOOKING_CONFIRMED)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
