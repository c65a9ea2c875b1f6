"""
deps.py

FastAPI 의존성 모음.

- get_db           : 요청 단위 DB 세션
- get_stores       : 같은 세션을 공유하는 스토어 묶음 (정산 서비스용)
- get_current_user : Bearer 토큰 -> User
- require_min_role : 권한 레벨 이상 허용 (MEMBER < ADMIN)
- require_role     : 지정한 권한만 허용 (참여는 MEMBER 만)

"""

import uuid
from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from eventpay.core.security import decode_access_token
from eventpay.db.session import SessionLocal
from eventpay.models.user import Role, User
from eventpay.stores.sql_store import SqlStores

# Swagger Authorize 버튼용
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_stores(db: Session = Depends(get_db)) -> SqlStores:
    return SqlStores(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(user: User) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"User role {user.role.value} is not authorized to access this route",
    )


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise _unauthorized("Not authenticated")

    try:
        user_id = uuid.UUID(decode_access_token(cred.credentials))
    except (JWTError, ValueError):
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


ROLE_LEVEL = {
    Role.MEMBER: 1,
    Role.ADMIN: 2,
}


def require_min_role(min_role: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if ROLE_LEVEL[current_user.role] < ROLE_LEVEL[min_role]:
            raise _forbidden(current_user)
        return current_user
    return _checker


def require_role(*roles: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise _forbidden(current_user)
        return current_user
    return _checker


get_current_member = require_min_role(Role.MEMBER)
get_current_admin = require_min_role(Role.ADMIN)
get_member_only = require_role(Role.MEMBER)
