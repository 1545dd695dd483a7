from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_field():
    """created_at/updated_at column, always stored as an aware UTC time."""
    return Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
