import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventpay.core.timezone import as_utc
from eventpay.domain.records import EventStatus
from eventpay.schemas.common import Money


class EventCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Yoga Session"])
    price: Money
    end_at: datetime = Field(..., examples=["2025-08-03T18:00:00Z"])


class EventCloneRequest(BaseModel):
    source_event_id: uuid.UUID
    new_end_at: datetime
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Money] = None


class EventUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Money] = None
    end_at: Optional[datetime] = None


class EventResponse(BaseModel):
    id: uuid.UUID
    name: str
    price: Money
    end_at: datetime
    status: EventStatus
    opt_in_count: int = 0

    model_config = ConfigDict(from_attributes=True)

    # SQLite 는 tz 없이 돌려주므로 UTC 로 맞춤
    @field_validator("end_at")
    @classmethod
    def _end_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class ParticipationResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    opted_in_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("opted_in_at")
    @classmethod
    def _opted_in_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class ParticipantResponse(BaseModel):
    user_id: uuid.UUID
    name: str
    email: str
    opted_in_at: datetime


class EventParticipantsResponse(BaseModel):
    event_id: uuid.UUID
    participants: list[ParticipantResponse]


class MyParticipationResponse(BaseModel):
    event_id: uuid.UUID
    event_name: str
    price: Money
    opted_in_at: datetime
    event_date: str  # 정산 달력 기준 YYYY-MM-DD
