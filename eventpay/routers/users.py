"""
users.py

회원(Member) 전용 사용자 정보 조회 API 모음.

주요 기능:
- 본인 프로필 정보 조회
- 본인 이벤트 참여 이력 조회

설계 원칙:
- 참여 이력은 MEMBER 만 조회 (ADMIN 은 참여하지 않음)
- 이벤트 날짜는 정산 달력 기준으로 표시

관련 파일:
- eventpay.services.events      : 참여 이력 조회
- eventpay.core.deps            : 권한 인증
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventpay.core.deps import get_current_member, get_db, get_member_only
from eventpay.core.timezone import as_utc, billing_tz
from eventpay.models.user import User
from eventpay.schemas.common import ListResponse
from eventpay.schemas.event import MyParticipationResponse
from eventpay.services.events import list_my_participations

router = APIRouter(prefix="/users", tags=["users"])


# 회원 본인 프로필 조회 API
@router.get("/profile")
def profile(current_user: User = Depends(get_current_member)):
    return {
        "data": {
            "id": str(current_user.id),
            "name": current_user.name,
            "email": current_user.email,
            "role": current_user.role.value,
        }
    }


"""
회원 본인 참여 이력 조회 API

- 참여한 이벤트 이름 / 가격 / 참여 시각 / 이벤트 날짜(YYYY-MM-DD)
- 참여 순 정렬

"""
@router.get("/me/participations", response_model=ListResponse[MyParticipationResponse])
def my_participations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_member_only),
):
    tz = billing_tz()
    rows = list_my_participations(db, user_id=current_user.id)
    return ListResponse[MyParticipationResponse].of(
        [
            MyParticipationResponse(
                event_id=e.id,
                event_name=e.name,
                price=e.price,
                opted_in_at=as_utc(p.opted_in_at),
                event_date=as_utc(e.end_at).astimezone(tz).date().isoformat(),
            )
            for p, e in rows
        ]
    )
