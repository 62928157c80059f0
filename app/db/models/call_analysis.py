# app/db/models/call_analysis.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK, JSONType


class CallAnalysis(Base):
    """AI extraction for a finished call; `booking_created` is the only field updated later."""

    __tablename__ = "call_analysis"
    __table_args__ = (
        sa.Index("ix_call_analysis_call_id", "call_id"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    call_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("calls.id", ondelete="CASCADE"), nullable=False)
    structured_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    customer_name: Mapped[Optional[str]] = mapped_column(sa.Text)
    customer_phone: Mapped[Optional[str]] = mapped_column(sa.Text)
    customer_email: Mapped[Optional[str]] = mapped_column(sa.Text)
    vehicle_make: Mapped[Optional[str]] = mapped_column(sa.Text)
    vehicle_model: Mapped[Optional[str]] = mapped_column(sa.Text)
    vehicle_year: Mapped[Optional[int]] = mapped_column(sa.Integer)
    issue_summary: Mapped[Optional[str]] = mapped_column(sa.Text)
    issue_category: Mapped[Optional[str]] = mapped_column(sa.Text)
    urgency: Mapped[Optional[str]] = mapped_column(sa.Text)
    preferred_date: Mapped[Optional[str]] = mapped_column(sa.Text)
    preferred_time: Mapped[Optional[str]] = mapped_column(sa.Text)
    booking_confirmed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    sentiment: Mapped[str] = mapped_column(sa.Text, nullable=False, default="neutral")
    booking_created: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
