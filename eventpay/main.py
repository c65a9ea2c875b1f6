"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

주요 역할:
- FastAPI 앱 인스턴스 생성
- 로깅 / CORS 미들웨어 설정
- 도메인 에러(ValidationError / NotFoundError / StoreError) 및 요청 형식 오류 -> HTTP 응답 변환
- 각 도메인별 라우터(auth, users, events, payments) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 요청 단위 에러는 구조화된 응답({"detail", "code"})으로 반환하고 프로세스는 유지

관련 파일:
- eventpay.core.config        : 환경 변수 및 설정 로드
- eventpay.core.deps          : DB 세션 의존성
- eventpay.routers.*          : 기능별 API 라우터

"""

import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from eventpay.core.config import settings
from eventpay.core.deps import get_db
from eventpay.domain.errors import DomainError, ErrorCode
from eventpay.routers import auth, users, events, payments

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Event Payments Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 예상하지 못한 예외는 traceback 을 남기고 500 으로 응답
@app.middleware("http")
async def log_unhandled_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
        )


_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.STORE_ERROR: 500,
}


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status_code = _STATUS_BY_CODE[exc.code]
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code.value, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


# 요청 바디 / 쿼리 형식 오류도 도메인 검증 에러와 같은 형태(400, VALIDATION_ERROR)로 응답
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    message = first.get("msg", "Invalid request")
    detail = f"{'.'.join(loc)}: {message}" if loc else message
    return JSONResponse(
        status_code=400,
        content={"detail": detail, "code": ErrorCode.VALIDATION_ERROR.value},
    )


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(events.router)
app.include_router(payments.router)

"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
