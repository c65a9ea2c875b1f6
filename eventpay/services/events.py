"""
services/events.py

이벤트 / 참여(opt-in) 도메인의 비즈니스 로직 모음.

정산 집계가 읽어가는 데이터(이벤트 가격, 종료 시각, 참여 기록)를
만들고 관리하는 쪽이다.

주요 기능:
- 이벤트 생성 / 복제 / 수정 / 마감
- 관리자용 이벤트 목록 (월 필터, 참여 인원 포함)
- 회원용 "오늘 마감되는 진행 중 이벤트" 목록
- 회원 참여(opt-in) 및 참여자 / 참여 이력 조회

설계 원칙:
- 이벤트 상태는 open -> closed 로만 변경
- 마감된 이벤트는 수정 / 참여 불가
- (event, user) 당 참여는 하나 (DB 유니크 제약으로도 보장)
- 트랜잭션 제어(commit / rollback)는 라우터에서 수행

관련 파일:
- eventpay.models.event      : Event / Participation 모델
- eventpay.routers.events    : 이벤트 API
- eventpay.routers.users     : 회원 참여 이력 API

"""

import logging
import uuid
from datetime import datetime, timedelta, tzinfo
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventpay.core.timezone import as_utc, utcnow
from eventpay.domain.errors import NotFoundError, ValidationError
from eventpay.domain.month_key import MonthKey
from eventpay.domain.records import EventStatus
from eventpay.models.event import Event, Participation
from eventpay.models.user import User

logger = logging.getLogger(__name__)


def get_event_or_404(db: Session, event_id: uuid.UUID, *, message: str = "Event not found") -> Event:
    event = db.scalar(select(Event).where(Event.id == event_id))
    if not event:
        raise NotFoundError(message)
    return event


def _validate_price(price: Decimal) -> None:
    if price < 0:
        raise ValidationError("price must be non-negative")


"""
이벤트 생성

- 가격은 0 이상
- 생성 시 항상 open 상태

"""

def create_event(db: Session, *, name: str, price: Decimal, end_at: datetime) -> Event:
    _validate_price(price)
    event = Event(name=name, price=price, end_at=as_utc(end_at), status=EventStatus.OPEN)
    db.add(event)
    db.flush()
    logger.info("Event created: id=%s end_at=%s", event.id, event.end_at)
    return event


"""
이벤트 복제

- 원본 이벤트의 이름 / 가격을 복사하고 end_at 만 새로 지정
- name / price 를 넘기면 그 값으로 덮어씀
- 원본 상태와 관계없이 복제본은 open

"""

def clone_event(
    db: Session,
    *,
    source_event_id: uuid.UUID,
    new_end_at: datetime,
    name: str | None = None,
    price: Decimal | None = None,
) -> Event:
    source = get_event_or_404(db, source_event_id, message="Source event not found")
    return create_event(
        db,
        name=name if name is not None else source.name,
        price=price if price is not None else source.price,
        end_at=new_end_at,
    )


# 이벤트 부분 수정 (None 이면 기존 값 유지, 마감된 이벤트는 수정 불가)
def update_event(
    db: Session,
    *,
    event_id: uuid.UUID,
    name: str | None = None,
    price: Decimal | None = None,
    end_at: datetime | None = None,
) -> Event:
    event = get_event_or_404(db, event_id)
    if event.status == EventStatus.CLOSED:
        raise ValidationError("Cannot update a closed event")

    if name is not None:
        event.name = name
    if price is not None:
        _validate_price(price)
        event.price = price
    if end_at is not None:
        event.end_at = as_utc(end_at)

    db.flush()
    return event


# 이벤트 마감 (이미 마감이면 그대로 반환)
def close_event(db: Session, *, event_id: uuid.UUID) -> Event:
    event = get_event_or_404(db, event_id)
    if event.status != EventStatus.CLOSED:
        event.status = EventStatus.CLOSED
        db.flush()
        logger.info("Event closed: id=%s", event.id)
    return event


def _with_counts(db: Session, *conditions) -> list[tuple[Event, int]]:
    stmt = (
        select(Event, func.count(Participation.id))
        .outerjoin(Participation, Participation.event_id == Event.id)
        .group_by(Event.id)
        .order_by(Event.end_at, Event.created_at)
    )
    for c in conditions:
        stmt = stmt.where(c)
    return [(e, int(n)) for e, n in db.execute(stmt).all()]


"""
관리자용 이벤트 목록

- month 지정 시 end_at 이 해당 월 범위에 있는 이벤트만
- 참여 인원(opt_in_count) 포함, end_at 오름차순

"""

def list_events(db: Session, *, month: MonthKey | None = None, tz: tzinfo) -> list[tuple[Event, int]]:
    if month is None:
        return _with_counts(db)
    start, end = month.window(tz)
    return _with_counts(db, Event.end_at >= as_utc(start), Event.end_at < as_utc(end))


"""
회원용 오늘의 이벤트 목록

- 정산 달력 기준 오늘 안에 end_at 이 있는 open 이벤트만

"""

def list_todays_open_events(db: Session, *, tz: tzinfo, now: datetime | None = None) -> list[tuple[Event, int]]:
    local = (now or utcnow()).astimezone(tz)
    start = datetime(local.year, local.month, local.day, tzinfo=tz)
    end = start + timedelta(days=1)
    return _with_counts(
        db,
        Event.status == EventStatus.OPEN,
        Event.end_at >= as_utc(start),
        Event.end_at < as_utc(end),
    )


"""
이벤트 참여(opt-in)

- 존재하지 않는 이벤트 -> NotFoundError
- 마감된 이벤트 -> ValidationError
- 이미 참여한 이벤트 -> ValidationError
- 동시 요청으로 유니크 제약이 걸려도 같은 에러로 변환

"""

def opt_in(db: Session, *, event_id: uuid.UUID, user_id: uuid.UUID) -> Participation:
    event = get_event_or_404(db, event_id)
    if event.status != EventStatus.OPEN:
        raise ValidationError("Event is not open for opt-in")

    existing = db.scalar(
        select(Participation)
        .where(Participation.event_id == event_id)
        .where(Participation.user_id == user_id)
    )
    if existing:
        raise ValidationError("Already opted in to this event")

    participation = Participation(event_id=event_id, user_id=user_id)
    db.add(participation)
    try:
        db.flush()
    except IntegrityError as e:
        # 세션 rollback 은 라우터에서 수행
        raise ValidationError("Already opted in to this event") from e
    logger.info("Opt-in: event=%s user=%s", event_id, user_id)
    return participation


# 이벤트 참여자 목록 (참여 순)
def list_participants(db: Session, *, event_id: uuid.UUID) -> list[tuple[Participation, User]]:
    get_event_or_404(db, event_id)
    rows = db.execute(
        select(Participation, User)
        .join(User, User.id == Participation.user_id)
        .where(Participation.event_id == event_id)
        .order_by(Participation.opted_in_at, Participation.id)
    ).all()
    return [(p, u) for p, u in rows]


# 회원 본인 참여 이력 (참여 순)
def list_my_participations(db: Session, *, user_id: uuid.UUID) -> list[tuple[Participation, Event]]:
    rows = db.execute(
        select(Participation, Event)
        .join(Event, Event.id == Participation.event_id)
        .where(Participation.user_id == user_id)
        .order_by(Participation.opted_in_at, Participation.id)
    ).all()
    return [(p, e) for p, e in rows]
