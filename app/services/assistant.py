# app/services/assistant.py
"""
Voice assistant configuration handed to the AI calling platform for a new call.
"""
from __future__ import annotations

import json
from typing import Any

from app.core.config import Settings
from app.db.models.call import Call
from app.db.models.workshop import Workshop

CALL_ENDED_WEBHOOK_PATH = "/api/webhooks/vapi/call-ended"

ISSUE_CATEGORIES = ["brakes", "engine", "transmission", "electrical", "tires", "other"]
URGENCY_LEVELS = ["urgent", "normal", "low"]

STRUCTURED_DATA_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "customer_name": {"type": "string"},
        "customer_phone": {"type": "string"},
        "customer_email": {"type": "string"},
        "vehicle_make": {"type": "string"},
        "vehicle_model": {"type": "string"},
        "vehicle_year": {"type": "number"},
        "issue_summary": {"type": "string"},
        "issue_category": {"type": "string", "enum": ISSUE_CATEGORIES},
        "urgency": {"type": "string", "enum": URGENCY_LEVELS},
        "preferred_date": {"type": "string"},
        "preferred_time": {"type": "string"},
        "booking_confirmed": {"type": "boolean"},
    },
    "required": ["customer_name", "customer_phone", "issue_summary"],
}


def build_first_message(workshop: Workshop) -> str:
    return (
        f"Thank you for calling {workshop.name}. I'm your AI assistant and I can help you "
        f"book an appointment. May I have your name please?"
    )


def build_system_prompt(workshop: Workshop) -> str:
    business_hours = json.dumps(workshop.business_hours or {}, indent=2)

    return f"""You are a professional receptionist for {workshop.name}, an auto repair workshop.

Your job is to:
1. Greet the customer warmly
2. Collect their name, phone number, and email (if they want confirmation)
3. Ask about their vehicle (make, model, year)
4. Understand the issue they're experiencing
5. Determine urgency (urgent if safety-related or car won't start)
6. Offer to book an appointment
7. Get their preferred date and time
8. Confirm the booking details

Important guidelines:
- Be friendly, professional, and patient
- If the customer doesn't know the vehicle year, skip it
- Never quote prices - say "We'll provide an estimate after inspection"
- If the issue is urgent (brakes not working, car won't start), prioritize and mention immediate availability
- Always confirm booking details before finalizing
- If the customer wants to speak to a human, offer a callback

Business hours:
{business_hours}

After collecting all information, confirm:
"Let me confirm: I have [NAME] with a [MAKE] [MODEL], [ISSUE], scheduled for [DATE] at [TIME]. Is that correct?"

Then say: "Perfect! You'll receive a confirmation email shortly. We look forward to seeing you!\""""


def build_assistant_config(workshop: Workshop, call: Call, settings: Settings) -> dict[str, Any]:
    return {
        "assistant": {
            "firstMessage": build_first_message(workshop),
            "model": {
                "provider": settings.ASSISTANT_MODEL_PROVIDER,
                "model": settings.ASSISTANT_MODEL,
                "messages": [
                    {"role": "system", "content": build_system_prompt(workshop)},
                ],
                "temperature": settings.ASSISTANT_TEMPERATURE,
            },
            "voice": {
                "provider": settings.ASSISTANT_VOICE_PROVIDER,
                "voiceId": settings.ASSISTANT_VOICE_ID,
            },
            "analysisPlan": {
                "structuredDataSchema": STRUCTURED_DATA_SCHEMA,
            },
        },
        "serverUrl": f"{settings.API_BASE_URL.rstrip('/')}{CALL_ENDED_WEBHOOK_PATH}",
        "serverUrlSecret": settings.VAPI_WEBHOOK_SECRET,
        "metadata": {
            "call_id": call.id,
            "workshop_id": workshop.id,
        },
    }
