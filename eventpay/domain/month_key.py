"""
month_key.py

정산 단위인 월(YYYY-MM) 값 타입.

- 문자열 'YYYY-MM' 검증은 생성 시점(경계)에서만 수행
- 월 범위 계산은 [해당 월 1일 0시, 다음 달 1일 0시) (시작 포함 / 끝 제외)
- 이벤트의 end_at 을 정산 달력(tz) 기준으로 변환하여 월을 결정

"""

import re
from dataclasses import dataclass
from datetime import datetime, tzinfo

from eventpay.domain.errors import ValidationError


_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

# 9999-12 는 다음 달(끝 경계)을 만들 수 없으므로 받지 않음
_LAST_YEAR, _LAST_MONTH = 9999, 12
_OUT_OF_RANGE = "month must be between 0001-01 and 9999-11"


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    def __post_init__(self) -> None:
        if self.month < 1 or self.month > 12:
            raise ValidationError("month must be between 01 and 12")
        if self.year < 1 or self.year > _LAST_YEAR:
            raise ValidationError(_OUT_OF_RANGE)

    """
    'YYYY-MM' 문자열 → MonthKey

    - 형식이 다르면 ValidationError
    - 월이 01 ~ 12 범위가 아니면 ValidationError
    - 0001-01 ~ 9999-11 밖이면 ValidationError (끝 경계를 만들 수 없음)

    """
    @classmethod
    def parse(cls, value: str | None) -> "MonthKey":
        if not value:
            raise ValidationError("month is required")
        m = _MONTH_RE.match(value)
        if not m:
            raise ValidationError("month must be in 'YYYY-MM' format")
        key = cls(year=int(m.group(1)), month=int(m.group(2)))
        if (key.year, key.month) == (_LAST_YEAR, _LAST_MONTH):
            raise ValidationError(_OUT_OF_RANGE)
        return key

    @classmethod
    def from_datetime(cls, value: datetime, tz: tzinfo) -> "MonthKey":
        local = value.astimezone(tz)
        return cls(year=local.year, month=local.month)

    def next(self) -> "MonthKey":
        if (self.year, self.month) == (_LAST_YEAR, _LAST_MONTH):
            raise ValidationError(_OUT_OF_RANGE)
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def start(self, tz: tzinfo) -> datetime:
        return datetime(self.year, self.month, 1, tzinfo=tz)

    # (start, end) - end 는 다음 달의 첫 순간이며 범위에 포함되지 않음
    def window(self, tz: tzinfo) -> tuple[datetime, datetime]:
        return self.start(tz), self.next().start(tz)

    def contains(self, value: datetime, tz: tzinfo) -> bool:
        start, end = self.window(tz)
        return start <= value < end

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
