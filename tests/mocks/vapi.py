#!/usr/bin/env python3
"""
Builders for Vapi webhook payloads, request signing, and a recorder for
outbound booking notifications.
"""

import json
import time
from typing import Any, Dict, List, Optional

import httpx
import sqlalchemy as sa

from app.services.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, compute_signature

WEBHOOK_SECRET = "test-webhook-secret"

CONFIRMED_BOOKING = {
    "customer_name": "Jane Doe",
    "customer_phone": "+14165551234",
    "customer_email": "jane@example.com",
    "vehicle_make": "Toyota",
    "vehicle_model": "Corolla",
    "vehicle_year": 2018,
    "issue_summary": "Grinding noise when braking",
    "issue_category": "brakes",
    "urgency": "urgent",
    "preferred_date": "2025-01-30",
    "preferred_time": "2:30 pm",
    "booking_confirmed": True,
}


def call_started_payload(call_id: int, workshop_id: Optional[int] = None) -> Dict[str, Any]:
    return {
        "call": {"id": f"vapi-{call_id}", "status": "in-progress"},
        "metadata": {"call_id": call_id, "workshop_id": workshop_id},
    }


def call_ended_payload(
    call_id: int,
    structured_data: Optional[Dict[str, Any]] = None,
    *,
    workshop_id: Optional[int] = None,
    sentiment: Any = None,
    **call_fields: Any,
) -> Dict[str, Any]:
    call = {
        "id": f"vapi-{call_id}",
        "duration": 184,
        "cost": 0.42,
        "endedReason": "customer-ended-call",
        "recordingUrl": f"https://recordings.test/{call_id}.wav",
        "transcript": "AI: Thank you for calling. User: My brakes are grinding.",
    }
    call.update(call_fields)
    analysis: Dict[str, Any] = {"structuredData": structured_data if structured_data is not None else {}}
    if sentiment is not None:
        analysis["sentiment"] = sentiment
    return {
        "call": call,
        "analysis": analysis,
        "metadata": {"call_id": call_id, "workshop_id": workshop_id},
    }


def signed_request(payload: Dict[str, Any], secret: str = WEBHOOK_SECRET,
                   timestamp: Optional[int] = None) -> Dict[str, Any]:
    """kwargs for httpx `post` carrying a correctly signed JSON body."""
    body = json.dumps(payload).encode()
    ts = str(int(time.time()) if timestamp is None else timestamp)
    return {
        "content": body,
        "headers": {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: compute_signature(secret, ts, body),
            TIMESTAMP_HEADER: ts,
        },
    }


class NotificationRecorder:
    """httpx.MockTransport handler standing in for the booking-notification service."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.paths: List[str] = []
        self.status_code = 200
        self.error: Optional[Exception] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"ok": self.status_code < 400})


async def count_rows(database, model, *criteria) -> int:
    async with database.session() as db:
        stmt = sa.select(sa.func.count()).select_from(model)
        for c in criteria:
            stmt = stmt.where(c)
        return (await db.execute(stmt)).scalar_one()


async def fetch_one(database, model, *criteria):
    async with database.session() as db:
        stmt = sa.select(model)
        for c in criteria:
            stmt = stmt.where(c)
        return (await db.execute(stmt)).scalars().first()


async def fetch_all(database, model, *criteria):
    async with database.session() as db:
        stmt = sa.select(model)
        for c in criteria:
            stmt = stmt.where(c)
        return list((await db.execute(stmt.order_by(model.id))).scalars().all())
