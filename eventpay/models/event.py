import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from eventpay.core.timezone import utcnow
from eventpay.db.base import Base
from eventpay.domain.records import EventStatus


class Event(Base):
    """가격이 있는 기간 한정 이벤트.

    - end_at 이 속한 월(정산 달력 기준)이 정산 월이 된다
    - status 는 open -> closed 로만 바뀐다
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_end_at", "end_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[EventStatus] = mapped_column(default=EventStatus.OPEN, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Participation(Base):
    """회원의 이벤트 참여(opt-in) 레코드.

    - (event_id, user_id) 당 하나만 존재
    - 생성 후 수정/삭제하지 않음
    """

    __tablename__ = "participations"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_participations_event_user"),
        Index("ix_participations_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    event_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("events.id"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    opted_in_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
