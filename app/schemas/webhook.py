# app/schemas/webhook.py
"""
Payloads posted by the voice platform's call lifecycle webhooks.

Only the fields this service reads are declared; everything else is kept
(`extra="allow"`) so the full structured extraction can be stored verbatim.
"""
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TEXT_FIELDS = (
    "customer_name", "customer_phone", "customer_email",
    "vehicle_make", "vehicle_model",
    "issue_summary", "issue_category", "urgency",
    "preferred_date", "preferred_time",
)


class StructuredData(BaseModel):
    model_config = ConfigDict(extra="allow")

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    issue_summary: Optional[str] = None
    issue_category: Optional[str] = None
    urgency: Optional[str] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    booking_confirmed: bool = False

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        # The model sometimes returns numbers (phones) or blanks
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("vehicle_year", mode="before")
    @classmethod
    def _coerce_year(cls, v: Any) -> Optional[int]:
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return int(v)
        v = str(v).strip()
        return int(v) if v.isdigit() else None

    @field_validator("booking_confirmed", mode="before")
    @classmethod
    def _coerce_confirmed(cls, v: Any) -> bool:
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "1")
        return bool(v)

    @property
    def wants_booking(self) -> bool:
        return self.booking_confirmed and bool(self.customer_name)


class Sentiment(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: Optional[str] = None


class AnalysisPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    structured_data: StructuredData = Field(default_factory=StructuredData, alias="structuredData")
    sentiment: Optional[Union[Sentiment, str]] = None

    @field_validator("structured_data", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def sentiment_label(self) -> str:
        if isinstance(self.sentiment, Sentiment) and self.sentiment.label:
            return self.sentiment.label
        if isinstance(self.sentiment, str) and self.sentiment.strip():
            return self.sentiment.strip()
        return "neutral"


class VapiCall(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    duration: Optional[float] = None
    cost: Optional[float] = None
    ended_reason: Optional[str] = Field(None, alias="endedReason")
    recording_url: Optional[str] = Field(None, alias="recordingUrl")
    transcript: Optional[str] = None


class CallMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    call_id: int
    workshop_id: Optional[int] = None


class CallStartedEvent(BaseModel):
    call: VapiCall = Field(default_factory=VapiCall)
    metadata: CallMetadata


class CallEndedEvent(BaseModel):
    call: VapiCall = Field(default_factory=VapiCall)
    analysis: AnalysisPayload = Field(default_factory=AnalysisPayload)
    metadata: CallMetadata

    @field_validator("analysis", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v
