from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now():
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class IDModel(BaseModel):
    id: str = Field(default_factory=new_id)


class TimestampModel(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
