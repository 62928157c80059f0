# app/db/base.py

"""
This file imports all the ORM models so Alembic can discover them.
Whenever you add a new model, import it here.
"""
from app.db.models.workshop import Workshop
from app.db.models.call import Call
from app.db.models.call_analysis import CallAnalysis
from app.db.models.customer import Customer
from app.db.models.vehicle import Vehicle
from app.db.models.booking import Booking
from app.db.session import Base

__all__ = ["Base", "Workshop", "Call", "CallAnalysis", "Customer", "Vehicle", "Booking"]
