"""Database column type helpers."""
from __future__ import annotations

from pydantic import BaseModel
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class JSONBCompat(TypeDecorator):
    """JSONB on Postgres, plain JSON on SQLite (tests).

    Pydantic models are dumped in JSON mode on the way in, so datetimes and
    enums are stored as strings.
    """

    impl = JSONB
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":  # pragma: no cover - dialect specific
            return dialect.type_descriptor(JSON())
        return dialect.type_descriptor(JSONB())

    def process_bind_param(self, value, dialect):
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        return value
