# app/db/models/call.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK

CALL_INITIATED = "initiated"
CALL_IN_PROGRESS = "in-progress"
CALL_COMPLETED = "completed"


class Call(Base):
    __tablename__ = "calls"
    __table_args__ = (
        sa.Index("ix_calls_workshop_id_started_at", "workshop_id", "started_at"),
        sa.Index("ix_calls_vapi_call_id", "vapi_call_id"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    workshop_id: Mapped[int] = mapped_column(PK, sa.ForeignKey("workshops.id"), nullable=False)

    from_number: Mapped[Optional[str]] = mapped_column(sa.String(20))
    to_number: Mapped[Optional[str]] = mapped_column(sa.String(20))
    vapi_call_id: Mapped[Optional[str]] = mapped_column(sa.String(100))
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=CALL_INITIATED)

    started_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    answered_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    ended_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    duration_seconds: Mapped[Optional[int]] = mapped_column(sa.Integer)
    cost_usd: Mapped[Optional[float]] = mapped_column(sa.Numeric(10, 4, asdecimal=False))
    recording_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    transcript: Mapped[Optional[str]] = mapped_column(sa.Text)
    ended_reason: Mapped[Optional[str]] = mapped_column(sa.Text)
