#!/usr/bin/env python3
"""
Schema checks against the Postgres dialect (the SQLite test database does not
enforce VARCHAR lengths).
"""

import os
import sys

import pytest
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

# Add app to Python path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import app.db.base  # noqa: F401,E402
from app.db.session import Base  # noqa: E402

# Columns filled from the AI extraction; their length is whatever the caller said
EXTRACTED_TEXT_COLUMNS = {
    "call_analysis": (
        "customer_name", "customer_phone", "customer_email",
        "vehicle_make", "vehicle_model", "issue_summary", "issue_category",
        "urgency", "preferred_date", "preferred_time", "sentiment",
    ),
    "customers": ("name", "phone", "email"),
    "vehicles": ("make", "model"),
    "bookings": ("issue_summary", "issue_category", "urgency"),
    "calls": ("ended_reason", "transcript", "recording_url"),
}


@pytest.mark.unit
@pytest.mark.parametrize("table_name,columns", sorted(EXTRACTED_TEXT_COLUMNS.items()))
def test_extracted_text_columns_are_unbounded(table_name, columns):
    table = Base.metadata.tables[table_name]
    for name in columns:
        column_type = table.c[name].type
        assert isinstance(column_type, sa.Text), f"{table_name}.{name} is {column_type!r}"


@pytest.mark.unit
def test_call_analysis_postgres_ddl_has_no_varchar():
    ddl = str(CreateTable(Base.metadata.tables["call_analysis"]).compile(dialect=postgresql.dialect()))

    assert "VARCHAR" not in ddl
    assert "preferred_date TEXT" in ddl
    assert "sentiment TEXT NOT NULL" in ddl
