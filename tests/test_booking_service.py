#!/usr/bin/env python3
"""
Tests for the booking service functionality.
"""

import os
import sys
from datetime import datetime

import pytest
from zoneinfo import ZoneInfo

# Add app to Python path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.core.business import UTC
from app.crud.call import create_call
from app.crud.call_analysis import create_call_analysis
from app.db.models.booking import Booking
from app.db.models.call_analysis import CallAnalysis
from app.db.models.customer import Customer
from app.db.models.vehicle import Vehicle
from app.schemas.webhook import StructuredData
from app.services.booking import create_booking_from_analysis, find_or_create_customer

from conftest import WORKSHOP_NUMBER
from mocks.vapi import CONFIRMED_BOOKING, count_rows, fetch_one

LOCAL_TZ = ZoneInfo("America/Edmonton")
NOW = datetime(2025, 1, 20, 15, 45, tzinfo=UTC)


async def _call_with_analysis(database, workshop, data: StructuredData) -> int:
    async with database.session() as db:
        call = await create_call(db, workshop_id=workshop.id, from_number="+14165551234",
                                 to_number=WORKSHOP_NUMBER)
        await create_call_analysis(db, call_id=call.id, data=data)
        await db.commit()
        return call.id


async def _book(database, workshop, data: StructuredData, **kwargs) -> Booking:
    call_id = await _call_with_analysis(database, workshop, data)
    async with database.session() as db:
        async with db.begin():
            return await create_booking_from_analysis(
                db, call_id=call_id, workshop_id=workshop.id, data=data, now=NOW, **kwargs
            )


@pytest.mark.asyncio
class TestFindOrCreateCustomer:
    """Customers are deduplicated by phone within a workshop"""

    async def test_creates_new_customer(self, database, workshop):
        async with database.session() as db:
            customer = await find_or_create_customer(
                db, workshop_id=workshop.id, name="Jane Doe", phone="+14165551234",
                email="jane@example.com",
            )
            await db.commit()

        assert customer.id is not None
        assert customer.name == "Jane Doe"
        assert customer.email == "jane@example.com"

    async def test_reuses_existing_customer_by_phone(self, database, workshop):
        async with database.session() as db:
            first = await find_or_create_customer(db, workshop_id=workshop.id, name="Jane Doe",
                                                  phone="+14165551234")
            await db.commit()

        async with database.session() as db:
            second = await find_or_create_customer(db, workshop_id=workshop.id, name="J. Doe",
                                                   phone="+14165551234")
            await db.commit()

        assert second.id == first.id
        # Existing record is returned as-is
        assert second.name == "Jane Doe"
        assert await count_rows(database, Customer) == 1

    async def test_same_phone_other_workshop_is_new_customer(self, database, workshop):
        async with database.session() as db:
            first = await find_or_create_customer(db, workshop_id=workshop.id, name="Jane",
                                                  phone="+14165551234")
            other = await find_or_create_customer(db, workshop_id=workshop.id + 1, name="Jane",
                                                  phone="+14165551234")
            await db.commit()

        assert first.id != other.id

    async def test_no_phone_always_creates(self, database, workshop):
        async with database.session() as db:
            a = await find_or_create_customer(db, workshop_id=workshop.id, name="Anon", phone=None)
            b = await find_or_create_customer(db, workshop_id=workshop.id, name="Anon", phone=None)
            await db.commit()

        assert a.id != b.id
        assert await count_rows(database, Customer) == 2


@pytest.mark.asyncio
class TestCreateBookingFromAnalysis:

    async def test_full_booking(self, database, workshop):
        data = StructuredData(**CONFIRMED_BOOKING)
        booking = await _book(database, workshop, data)

        assert booking.id is not None
        assert booking.workshop_id == workshop.id
        assert booking.status == "confirmed"
        assert booking.issue_summary == "Grinding noise when braking"
        assert booking.issue_category == "brakes"
        assert booking.urgency == "urgent"
        assert booking.scheduled_at == datetime(2025, 1, 30, 14, 30, tzinfo=UTC)

        vehicle = await fetch_one(database, Vehicle, Vehicle.id == booking.vehicle_id)
        assert (vehicle.make, vehicle.model, vehicle.year) == ("Toyota", "Corolla", 2018)
        assert vehicle.customer_id == booking.customer_id

        customer = await fetch_one(database, Customer, Customer.id == booking.customer_id)
        assert customer.phone == "+14165551234"
        assert customer.workshop_id == workshop.id

    async def test_marks_analysis_booking_created(self, database, workshop):
        booking = await _book(database, workshop, StructuredData(**CONFIRMED_BOOKING))

        analysis = await fetch_one(database, CallAnalysis, CallAnalysis.call_id == booking.call_id)
        assert analysis.booking_created is True

    async def test_no_vehicle_without_make_and_model(self, database, workshop):
        data = StructuredData(**{**CONFIRMED_BOOKING, "vehicle_model": None})
        booking = await _book(database, workshop, data)

        assert booking.vehicle_id is None
        assert await count_rows(database, Vehicle) == 0

    async def test_defaults_category_and_urgency(self, database, workshop):
        data = StructuredData(customer_name="Sam", booking_confirmed=True)
        booking = await _book(database, workshop, data)

        assert booking.issue_category == "other"
        assert booking.urgency == "normal"
        # No preference given: tomorrow at 10:00
        assert booking.scheduled_at == datetime(2025, 1, 21, 10, 0, tzinfo=UTC)

    async def test_unparseable_preference_falls_back(self, database, workshop):
        data = StructuredData(customer_name="Sam", booking_confirmed=True,
                              preferred_date="next Tuesday-ish", preferred_time="after lunch")
        booking = await _book(database, workshop, data)

        assert booking.scheduled_at == datetime(2025, 1, 21, 10, 0, tzinfo=UTC)

    async def test_workshop_timezone(self, database, workshop):
        data = StructuredData(**CONFIRMED_BOOKING)
        booking = await _book(database, workshop, data, tz=LOCAL_TZ)

        assert booking.scheduled_at == datetime(2025, 1, 30, 14, 30, tzinfo=LOCAL_TZ)

    async def test_repeat_caller_reuses_customer_but_adds_vehicle(self, database, workshop):
        data = StructuredData(**CONFIRMED_BOOKING)
        first = await _book(database, workshop, data)
        second = await _book(database, workshop, data)

        assert first.customer_id == second.customer_id
        assert first.vehicle_id != second.vehicle_id
        assert await count_rows(database, Customer) == 1
        assert await count_rows(database, Vehicle) == 2
        assert await count_rows(database, Booking) == 2
