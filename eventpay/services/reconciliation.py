"""
services/reconciliation.py

집계 금액과 납부 상태 장부를 합치는 단계(Reconciliation Merge).

설계 원칙:
- 순수 함수: 입력만 보고 결과를 만들며 부수 효과 없음
- 장부에 기록이 없으면 default_status(기본 Unpaid)
- 장부에 저장된 total_amount 는 보지 않음 -> 화면 금액은 항상 집계 결과
- 캐시하지 않고 조회마다 다시 실행

"""

from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from eventpay.domain.records import PaymentStatus


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Reconciled(Generic[T]):
    total: T
    payment_status: PaymentStatus


def merge(
    totals: Iterable[T],
    statuses: Mapping[Hashable, PaymentStatus],
    *,
    key: Callable[[T], Hashable],
    default_status: PaymentStatus = PaymentStatus.UNPAID,
) -> list[Reconciled[T]]:
    return [
        Reconciled(total=t, payment_status=statuses.get(key(t), default_status))
        for t in totals
    ]
