"""
services/payments.py

월별 정산 조회 / 납부 상태 변경 비즈니스 로직 모음.

라우터는 이 파일의 함수를 호출하여
검증/계산 결과를 받아 응답만 처리한다.

주요 기능:
- 관리자용 월별 전체 회원 정산 현황
- 회원 본인 정산 이력 (월별)
- 회원 본인 특정 월 정산 상세
- 관리자용 납부 상태 변경 (upsert)

설계 원칙:
- 집계(aggregation) -> 상태 병합(reconciliation) 순서로 항상 새로 계산
- 화면 금액은 장부(payments)의 total_amount 가 아니라 집계 결과
- 납부 상태 변경은 단일 upsert 문장으로 처리
- 트랜잭션 제어(commit / rollback)는 라우터에서 수행

관련 파일:
- eventpay.services.aggregation    : 집계
- eventpay.services.reconciliation : 상태 병합
- eventpay.stores.sql_store        : 스토어 구현
- eventpay.routers.payments        : 정산 API

"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal

from eventpay.core.timezone import utcnow
from eventpay.domain.errors import NotFoundError, ValidationError
from eventpay.domain.month_key import MonthKey
from eventpay.domain.records import LedgerEntry, PaymentStatus
from eventpay.services.aggregation import (
    EventLine,
    aggregate_by_month,
    aggregate_by_user,
    aggregate_by_user_and_month,
)
from eventpay.services.reconciliation import merge
from eventpay.stores.interfaces import EventStore, ParticipationStore, PaymentLedger, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MonthlySummaryRow:
    user_id: uuid.UUID
    user_name: str
    total_amount: Decimal
    payment_status: PaymentStatus


@dataclass(frozen=True, slots=True)
class HistoryRow:
    month: MonthKey
    total_amount: Decimal
    payment_status: PaymentStatus


@dataclass(frozen=True, slots=True)
class MyMonthlySummary:
    user_id: uuid.UUID
    user_name: str
    month: MonthKey
    total_amount: Decimal
    payment_status: PaymentStatus
    events: list[EventLine] = field(default_factory=list)


"""
관리자용 월별 정산 현황

- 해당 월에 참여가 있는 사용자만 포함
- 사용자 이름은 배치 조회로 붙임 (사용자가 삭제되어 없으면 행에서 제외)

"""

def monthly_summary(
    *,
    events: EventStore,
    participations: ParticipationStore,
    users: UserStore,
    ledger: PaymentLedger,
    month: MonthKey,
    tz: tzinfo,
) -> list[MonthlySummaryRow]:
    totals = aggregate_by_month(events=events, participations=participations, month=month, tz=tz)
    names = users.get_users(t.user_id for t in totals)
    merged = merge(totals, ledger.statuses_for_month(month), key=lambda t: t.user_id)

    return [
        MonthlySummaryRow(
            user_id=r.total.user_id,
            user_name=names[r.total.user_id].name,
            total_amount=r.total.total_amount,
            payment_status=r.payment_status,
        )
        for r in merged
        if r.total.user_id in names
    ]


# 회원 본인 월별 정산 이력 (최신 월 먼저)
def payment_history(
    *,
    events: EventStore,
    participations: ParticipationStore,
    ledger: PaymentLedger,
    user_id: uuid.UUID,
    tz: tzinfo,
) -> list[HistoryRow]:
    totals = aggregate_by_user(events=events, participations=participations, user_id=user_id, tz=tz)
    if not totals:
        return []

    statuses = ledger.statuses_for_user(user_id, [t.month for t in totals])
    return [
        HistoryRow(month=r.total.month, total_amount=r.total.total_amount, payment_status=r.payment_status)
        for r in merge(totals, statuses, key=lambda t: t.month)
    ]


"""
회원 본인 특정 월 정산 상세

- 참여 이벤트가 없어도 total_amount=0, Unpaid, events=[] 로 응답
- 사용자 자체가 없으면 NotFoundError

"""

def my_monthly_summary(
    *,
    events: EventStore,
    participations: ParticipationStore,
    users: UserStore,
    ledger: PaymentLedger,
    user_id: uuid.UUID,
    month: MonthKey,
    tz: tzinfo,
) -> MyMonthlySummary:
    user = users.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")

    total = aggregate_by_user_and_month(
        events=events, participations=participations, user_id=user_id, month=month, tz=tz
    )
    statuses = ledger.statuses_for_user(user_id, [month])
    (merged,) = merge([total], statuses, key=lambda t: t.month)

    return MyMonthlySummary(
        user_id=user.id,
        user_name=user.name,
        month=month,
        total_amount=total.total_amount,
        payment_status=merged.payment_status,
        events=total.events,
    )


def parse_status(value) -> PaymentStatus:
    if isinstance(value, PaymentStatus):
        return value
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValidationError("payment_status must be one of: Paid, Unpaid")


"""
납부 상태 변경 (관리자)

- user_id / month / payment_status 필수
- month 는 'YYYY-MM', payment_status 는 Paid / Unpaid
- 사용자가 없으면 NotFoundError (장부 행은 만들지 않음)
- (user_id, month) 기준 upsert: 같은 호출을 반복해도 같은 상태로 수렴
- total_amount 는 참고용으로만 저장되며 집계 금액을 다시 계산하지 않음

"""

def set_payment_status(
    *,
    users: UserStore,
    ledger: PaymentLedger,
    user_id: uuid.UUID | None,
    month: str | MonthKey | None,
    payment_status: str | PaymentStatus | None,
    total_amount: Decimal | None = None,
    now: datetime | None = None,
) -> LedgerEntry:
    if not user_id or not month or not payment_status:
        raise ValidationError("user_id, month, and payment_status are required")

    key = month if isinstance(month, MonthKey) else MonthKey.parse(month)
    status = parse_status(payment_status)
    if total_amount is not None and total_amount < 0:
        raise ValidationError("total_amount must be non-negative")

    if users.get_user(user_id) is None:
        raise NotFoundError("User not found")

    entry = ledger.upsert_status(
        user_id=user_id,
        month=key,
        status=status,
        total_amount=total_amount,
        updated_at=now or utcnow(),
    )
    logger.info("Payment status set: user=%s month=%s status=%s", user_id, key, status.value)
    return entry
