# app/schemas/call.py
from datetime import datetime as _Datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallStatus(str, Enum):
    initiated = "initiated"
    in_progress = "in-progress"
    completed = "completed"


class InboundCallRequest(BaseModel):
    """Inbound call notification from the telephony provider."""
    model_config = ConfigDict(populate_by_name=True)

    from_number: str = Field(..., alias="from", min_length=1, max_length=20)
    to_number: str = Field(..., alias="to", min_length=1, max_length=20)
    call_sid: Optional[str] = Field(None, alias="callSid", max_length=100)

    @field_validator("from_number", "to_number")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("phone number cannot be blank")
        return v


class InboundCallResponse(BaseModel):
    success: bool = True
    call_id: int
    workshop_name: str
    status: CallStatus = CallStatus.initiated
    message: str = "Call connected to AI assistant"


class CallOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workshop_id: int
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    vapi_call_id: Optional[str] = None
    status: str
    started_at: _Datetime
    answered_at: Optional[_Datetime] = None
    ended_at: Optional[_Datetime] = None
    duration_seconds: Optional[int] = None
    cost_usd: Optional[float] = None
    recording_url: Optional[str] = None
    transcript: Optional[str] = None
    ended_reason: Optional[str] = None


class CallDetailOut(CallOut):
    workshop_name: str
    structured_data: Optional[dict[str, Any]] = None
    sentiment: Optional[str] = None


class CallListItem(CallOut):
    customer_name: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    booking_created: Optional[bool] = None


class CallListOut(BaseModel):
    calls: list[CallListItem]
    total: int
    limit: int
    offset: int
