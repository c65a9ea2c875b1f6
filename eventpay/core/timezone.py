"""
timezone.py

정산 달력(시간대) 관련 헬퍼.

- DB에는 항상 UTC로 저장
- SQLite처럼 tz 정보 없이 돌려주는 드라이버의 값은 UTC로 간주
- 월 경계 / "오늘" 판단은 settings.BILLING_TIMEZONE 기준

"""

from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from eventpay.core.config import settings


@lru_cache(maxsize=None)
def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def billing_tz() -> tzinfo:
    return _zone(settings.BILLING_TIMEZONE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
