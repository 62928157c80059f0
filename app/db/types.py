# app/db/types.py

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# BIGINT ids on Postgres; SQLite only autoincrements INTEGER PRIMARY KEY
PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
