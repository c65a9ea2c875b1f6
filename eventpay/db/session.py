"""
session.py

Engine / SessionLocal 생성.

- 운영은 PostgreSQL(psycopg), 로컬 개발과 테스트는 SQLite 도 허용
- SQLite 는 요청 스레드가 바뀌어도 같은 연결을 쓸 수 있도록 check_same_thread 해제
- 세션 열기/닫기는 eventpay.core.deps.get_db 에서 요청 단위로 처리

"""

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from eventpay.core.config import settings


def _connect_args(url: str) -> dict:
    if make_url(url).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # idle 후 끊긴 연결 감지
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
