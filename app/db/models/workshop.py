# app/db/models/workshop.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.db.types import PK, JSONType


class Workshop(Base):
    __tablename__ = "workshops"
    __table_args__ = (
        sa.Index("ix_workshops_vapi_phone_number", "vapi_phone_number"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    # Number the voice platform answers for this workshop (E.164)
    vapi_phone_number: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    business_hours: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, server_default="active")

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
