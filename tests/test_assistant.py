#!/usr/bin/env python3
"""
Tests for the assistant configuration handed to the voice platform.
"""

import os
import sys

import pytest

# Add app to Python path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.db.models.call import Call
from app.db.models.workshop import Workshop
from app.services.assistant import (
    ISSUE_CATEGORIES,
    STRUCTURED_DATA_SCHEMA,
    URGENCY_LEVELS,
    build_assistant_config,
    build_first_message,
    build_system_prompt,
)

from conftest import make_settings


@pytest.fixture
def shop():
    return Workshop(
        id=7,
        name="Precision Auto Repair",
        vapi_phone_number="+15550001111",
        business_hours={"mon-fri": "08:00-17:00"},
        status="active",
    )


@pytest.fixture
def call():
    return Call(id=42, workshop_id=7, from_number="+14165551234", to_number="+15550001111",
                status="initiated")


@pytest.mark.unit
class TestAssistantConfig:

    def test_first_message_names_workshop(self, shop):
        message = build_first_message(shop)
        assert message.startswith("Thank you for calling Precision Auto Repair.")
        assert "May I have your name" in message

    def test_system_prompt_includes_hours(self, shop):
        prompt = build_system_prompt(shop)
        assert "Precision Auto Repair" in prompt
        assert '"mon-fri": "08:00-17:00"' in prompt
        assert "Never quote prices" in prompt

    def test_system_prompt_without_hours(self, shop):
        shop.business_hours = None
        assert "Business hours:\n{}" in build_system_prompt(shop)

    def test_config_routes_call_ended_webhook_back_here(self, shop, call):
        settings = make_settings(API_BASE_URL="https://voice.test/", VAPI_WEBHOOK_SECRET="s3cret")
        config = build_assistant_config(shop, call, settings)

        assert config["serverUrl"] == "https://voice.test/api/webhooks/vapi/call-ended"
        assert config["serverUrlSecret"] == "s3cret"
        assert config["metadata"] == {"call_id": 42, "workshop_id": 7}

    def test_config_model_and_voice_from_settings(self, shop, call):
        settings = make_settings(
            ASSISTANT_MODEL_PROVIDER="openai",
            ASSISTANT_MODEL="gpt-4o",
            ASSISTANT_TEMPERATURE=0.3,
            ASSISTANT_VOICE_PROVIDER="11labs",
            ASSISTANT_VOICE_ID="rachel",
        )
        assistant = build_assistant_config(shop, call, settings)["assistant"]

        assert assistant["model"]["provider"] == "openai"
        assert assistant["model"]["model"] == "gpt-4o"
        assert assistant["model"]["temperature"] == 0.3
        assert assistant["model"]["messages"][0]["role"] == "system"
        assert assistant["voice"] == {"provider": "11labs", "voiceId": "rachel"}
        assert assistant["firstMessage"] == build_first_message(shop)

    def test_structured_data_schema(self, shop, call):
        config = build_assistant_config(shop, call, make_settings())
        schema = config["assistant"]["analysisPlan"]["structuredDataSchema"]

        assert schema is STRUCTURED_DATA_SCHEMA
        assert schema["properties"]["issue_category"]["enum"] == ISSUE_CATEGORIES
        assert schema["properties"]["urgency"]["enum"] == URGENCY_LEVELS
        assert schema["properties"]["booking_confirmed"]["type"] == "boolean"
        assert set(schema["required"]) == {"customer_name", "customer_phone", "issue_summary"}
