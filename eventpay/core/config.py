"""
config.py

.env / 환경 변수 기반 설정.

항목:
- DATABASE_URL / TEST_DATABASE_URL
- SECRET_KEY / ALGORITHM / ACCESS_TOKEN_EXPIRE_MINUTES
- BILLING_TIMEZONE : 월 경계와 "오늘" 판단에 쓰는 정산 달력 (IANA 이름)
- LOG_LEVEL
- CORS_ORIGINS

다른 모듈은 환경 변수를 직접 읽지 않고 settings 만 사용한다.

"""

from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # 집계 / 장부 / 이벤트 목록이 모두 같은 달력을 써야 월 경계가 일치
    BILLING_TIMEZONE: str = "UTC"

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("BILLING_TIMEZONE")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        if v.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown BILLING_TIMEZONE: {v}") from e
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()


settings = Settings()
