"""
events.py

이벤트 관리 및 참여(opt-in) API 모음.

주요 기능:
- 관리자: 이벤트 생성 / 복제 / 수정 / 마감, 전체 목록, 참여자 목록
- 회원: 오늘 마감되는 진행 중 이벤트 목록, 이벤트 참여

설계 원칙:
- 관리 기능은 ADMIN 이상, 참여는 MEMBER 만 (ADMIN 은 참여 불가)
- 비즈니스 규칙은 service 계층(eventpay.services.events)에 위임
- 쓰기 요청은 성공 시 commit, 실패 시 rollback 후 에러 전달

관련 파일:
- eventpay.services.events   : 이벤트 / 참여 로직
- eventpay.schemas.event     : 요청/응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventpay.core.deps import get_db, get_current_admin, get_current_member, get_member_only
from eventpay.core.timezone import as_utc, billing_tz
from eventpay.domain.errors import StoreError
from eventpay.domain.month_key import MonthKey
from eventpay.models.event import Event
from eventpay.models.user import Role, User
from eventpay.schemas.common import DataResponse, ListResponse
from eventpay.schemas.event import (
    EventCloneRequest,
    EventCreateRequest,
    EventParticipantsResponse,
    EventResponse,
    EventUpdateRequest,
    ParticipantResponse,
    ParticipationResponse,
)
from eventpay.services import events as event_service

router = APIRouter(prefix="/events", tags=["events"])


def _event_out(event: Event, opt_in_count: int = 0) -> EventResponse:
    return EventResponse(
        id=event.id,
        name=event.name,
        price=event.price,
        end_at=event.end_at,
        status=event.status,
        opt_in_count=opt_in_count,
    )


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Database error: {type(e).__name__}") from e


"""
이벤트 목록 조회 API

- ADMIN: 전체 이벤트 (month 지정 시 해당 월 end_at 만)
- MEMBER: 오늘 마감되는 open 이벤트만
- 참여 인원(opt_in_count) 포함

"""
@router.get("", response_model=ListResponse[EventResponse])
def get_events(
    month: str | None = Query(default=None, description="예: 2025-08 (관리자 전용 필터)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_member),
):
    tz = billing_tz()
    if current_user.role == Role.ADMIN:
        key = MonthKey.parse(month) if month else None
        rows = event_service.list_events(db, month=key, tz=tz)
    else:
        rows = event_service.list_todays_open_events(db, tz=tz)

    return ListResponse[EventResponse].of([_event_out(e, n) for e, n in rows])


# 관리자 전용 이벤트 생성 API
@router.post("", response_model=DataResponse[EventResponse], status_code=status.HTTP_201_CREATED)
def create_event(
    body: EventCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        event = event_service.create_event(db, name=body.name, price=body.price, end_at=body.end_at)
        _commit(db)
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    return DataResponse[EventResponse](data=_event_out(event))


"""
관리자 전용 이벤트 복제 API

- 원본 이름 / 가격 복사, end_at 은 new_end_at
- name / price 를 주면 덮어씀
- 원본이 없으면 404

"""
@router.post("/clone", response_model=DataResponse[EventResponse], status_code=status.HTTP_201_CREATED)
def clone_event(
    body: EventCloneRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        event = event_service.clone_event(
            db,
            source_event_id=body.source_event_id,
            new_end_at=body.new_end_at,
            name=body.name,
            price=body.price,
        )
        _commit(db)
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    return DataResponse[EventResponse](data=_event_out(event))


# 관리자 전용 이벤트 수정 API (마감된 이벤트는 400)
@router.put("/{event_id}", response_model=DataResponse[EventResponse])
def update_event(
    event_id: uuid.UUID,
    body: EventUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        event = event_service.update_event(
            db,
            event_id=event_id,
            name=body.name,
            price=body.price,
            end_at=body.end_at,
        )
        _commit(db)
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    return DataResponse[EventResponse](data=_event_out(event))


# 관리자 전용 이벤트 마감 API
@router.post("/{event_id}/close", response_model=DataResponse[EventResponse])
def close_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        event = event_service.close_event(db, event_id=event_id)
        _commit(db)
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    return DataResponse[EventResponse](data=_event_out(event))


"""
회원 이벤트 참여 API

- MEMBER 만 가능 (ADMIN 403)
- 마감된 이벤트 / 중복 참여는 400, 없는 이벤트는 404

"""
@router.post("/{event_id}/optin", response_model=DataResponse[ParticipationResponse], status_code=status.HTTP_201_CREATED)
def opt_in_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_member_only),
):
    try:
        participation = event_service.opt_in(db, event_id=event_id, user_id=current_user.id)
        _commit(db)
    except Exception:
        db.rollback()
        raise
    db.refresh(participation)
    return DataResponse[ParticipationResponse](data=ParticipationResponse.model_validate(participation))


# 관리자 전용 이벤트 참여자 목록 API (참여 순)
@router.get("/{event_id}/participants", response_model=DataResponse[EventParticipantsResponse])
def get_event_participants(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    rows = event_service.list_participants(db, event_id=event_id)
    return DataResponse[EventParticipantsResponse](
        data=EventParticipantsResponse(
            event_id=event_id,
            participants=[
                ParticipantResponse(
                    user_id=u.id,
                    name=u.name,
                    email=u.email,
                    opted_in_at=as_utc(p.opted_in_at),
                )
                for p, u in rows
            ],
        )
    )
