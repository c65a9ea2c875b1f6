# tests/helpers.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from functools import lru_cache

from sqlalchemy.orm import Session

from eventpay.core.security import create_access_token, get_password_hash
from eventpay.domain.records import EventStatus
from eventpay.models.event import Event, Participation
from eventpay.models.user import User, Role


PASSWORD = "Passw0rd!123"


@lru_cache(maxsize=1)
def _password_hash() -> str:
    # bcrypt 해시는 느리므로 테스트 전체에서 하나만 사용
    return get_password_hash(PASSWORD)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def create_user_in_db(db: Session, *, name: str, role: Role = Role.MEMBER, email: str | None = None) -> User:
    user = User(
        email=email or f"user_{uuid.uuid4().hex[:8]}@test.com",
        password_hash=_password_hash(),
        name=name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_access_token(subject=str(user.id))


def create_event_in_db(
    db: Session,
    *,
    name: str,
    price,
    end_at: datetime,
    status: EventStatus = EventStatus.OPEN,
) -> Event:
    event = Event(name=name, price=Decimal(str(price)), end_at=end_at, status=status)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def participate(db: Session, event: Event, user: User, *, opted_in_at: datetime | None = None) -> Participation:
    p = Participation(event_id=event.id, user_id=user.id)
    if opted_in_at is not None:
        p.opted_in_at = opted_in_at
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def setup_admin_and_members(db: Session):
    """
    ADMIN 1명 + MEMBER 2명과 각 토큰
    """
    admin = create_user_in_db(db, name="Admin", role=Role.ADMIN)
    user1 = create_user_in_db(db, name="User One")
    user2 = create_user_in_db(db, name="User Two")
    return {
        "admin": admin,
        "admin_token": token_for(admin),
        "user1": user1,
        "user1_token": token_for(user1),
        "user2": user2,
        "user2_token": token_for(user2),
    }
