"""SQLAlchemy declarative base for the durable storage tables."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models. ``datetime`` columns are timezone-aware."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }
