from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, Field, PlainSerializer


T = TypeVar("T")

def _money_json(value: Decimal) -> str:
    return f"{value:.2f}"


# 금액: 내부는 Decimal, JSON 응답은 소수 둘째 자리 문자열 (Numeric(12, 2) 와 같은 자리수, float 변환 없음)
Money = Annotated[
    Decimal,
    Field(ge=0, examples=["10000.00"]),
    PlainSerializer(_money_json, return_type=str, when_used="json"),
]

MonthStr = str  # 'YYYY-MM' (검증은 MonthKey.parse 에서)


class Meta(BaseModel):
    count: int


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: Meta

    @classmethod
    def of(cls, items: list) -> "ListResponse":
        return cls(data=items, meta=Meta(count=len(items)))


class ErrorResponse(BaseModel):
    detail: str
    code: str
