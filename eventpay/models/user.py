"""
user.py

사용자(User) 및 권한(Role) 모델 정의 파일.

이 파일은 회원의 기본 정보와 권한(Role)을 관리한다.
모든 인증, 권한, 이벤트 참여, 정산 기능의 기준이 되는 핵심 모델이다.

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from eventpay.core.timezone import utcnow
from eventpay.db.base import Base



"""
사용자 권한(Role) 정의

- MEMBER      : 일반 회원 (이벤트 참여 / 본인 정산 조회)
- ADMIN       : 관리자 (이벤트 관리 / 월별 정산 / 납부 상태 변경)

"""

class Role(str, Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"



"""
사용자(User) 모델

- email 은 고유 식별자
- role을 통해 접근 권한 제어
- name 은 정산 화면의 표시 이름으로 사용

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    role: Mapped[Role] = mapped_column(default=Role.MEMBER)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
