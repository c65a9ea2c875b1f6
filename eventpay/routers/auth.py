"""
auth.py

인증(Authentication) API 모음.

이 파일은 회원 가입과 로그인을 담당한다.
JWT 기반 Bearer 인증 방식을 사용한다.

주요 기능:
- 회원 가입 (기본 권한 MEMBER)
- 로그인 및 Access Token 발급

설계 원칙:
- Access Token은 Authorization Header(Bearer)로 전달
- 비밀번호는 bcrypt 해시로만 저장
- 관리자 계정은 가입 API가 아닌 scripts.create_admin 으로 생성

관련 파일:
- eventpay.core.security        : 비밀번호 해시 / JWT 생성
- eventpay.core.deps            : 인증 의존성
- eventpay.models.user          : User / Role 모델
- eventpay.schemas.auth         : 인증 관련 요청/응답

"""

from fastapi import APIRouter, Depends, HTTPException, status

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select

from eventpay.core.deps import get_db
from eventpay.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
)

from eventpay.models.user import User, Role
from eventpay.schemas.auth import RegisterRequest, RegisterResponse, LoginRequest, TokenResponse
from eventpay.schemas.common import DataResponse

router = APIRouter(prefix="/auth", tags=["auth"])


"""
회원 가입 API

- 이메일 기준으로 신규 회원 가입
- 이미 가입된 이메일이면 400
- 가입 시 기본 권한은 MEMBER

"""

@router.post("/register", response_model=DataResponse[RegisterResponse])
def register(data: RegisterRequest, db: Session = Depends(get_db)):

    existing = db.scalar(select(User).where(User.email == data.email))
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(
        email=data.email,
        password_hash=get_password_hash(data.password),
        name=data.name,
        role=Role.MEMBER,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return DataResponse[RegisterResponse](
        data=RegisterResponse(id=user.id, email=user.email, name=user.name, role=user.role.value)
    )


"""
로그인 API

- 이메일 / 비밀번호 인증
- Access Token은 응답 바디로 반환

"""

@router.post("/login", response_model=DataResponse[TokenResponse])
def login(data: LoginRequest, db: Session = Depends(get_db)):

    user = db.scalar(select(User).where(User.email == data.email))

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return DataResponse[TokenResponse](
        data=TokenResponse(access_token=create_access_token(subject=str(user.id)))
    )
