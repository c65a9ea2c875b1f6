"""
services/aggregation.py

월별 정산 금액 집계(Aggregator).

참여(Participation) 기록을 이벤트 가격/종료 시각과 조인하여
사용자별 / 월별 합계를 계산한다.

설계 원칙:
- 정산 월은 참여 시각이 아니라 이벤트 end_at 기준
- 월 범위는 [시작, 다음 달 시작) 이며 정산 달력(tz) 기준으로 계산
- 스토어 조회는 배치 조회만 사용 (참여 건수만큼 왕복하지 않음)
- 금액은 Decimal 그대로 합산, 반올림하지 않음
- 결과는 저장하지 않으며 매 조회마다 새로 계산

관련 파일:
- eventpay.stores.interfaces     : EventStore / ParticipationStore
- eventpay.services.reconciliation : 집계 결과에 납부 상태를 붙이는 단계

"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal

from eventpay.domain.month_key import MonthKey
from eventpay.stores.interfaces import EventStore, ParticipationStore


@dataclass(frozen=True, slots=True)
class UserTotal:
    user_id: uuid.UUID
    total_amount: Decimal


@dataclass(frozen=True, slots=True)
class MonthTotal:
    month: MonthKey
    total_amount: Decimal


@dataclass(frozen=True, slots=True)
class EventLine:
    event_id: uuid.UUID
    name: str
    price: Decimal
    end_at: datetime


@dataclass(frozen=True, slots=True)
class UserMonthTotal:
    user_id: uuid.UUID
    month: MonthKey
    total_amount: Decimal
    events: list[EventLine] = field(default_factory=list)


"""
특정 월의 사용자별 합계

- end_at 이 해당 월 범위에 있는 이벤트에 참여한 사용자만 포함
- 참여가 없는 사용자는 0이 아니라 결과에서 아예 빠짐
- 순서는 해당 월에 처음 참여가 잡힌 순서 (이벤트 end_at 오름차순)

"""

def aggregate_by_month(
    *,
    events: EventStore,
    participations: ParticipationStore,
    month: MonthKey,
    tz: tzinfo,
) -> list[UserTotal]:
    start, end = month.window(tz)
    in_month = events.list_events_ending_between(start, end)
    if not in_month:
        return []

    prices = {e.id: e.price for e in in_month}
    order = {e.id: i for i, e in enumerate(in_month)}
    rows = sorted(
        participations.list_for_events(prices.keys()),
        key=lambda p: order[p.event_id],
    )

    totals: dict[uuid.UUID, Decimal] = {}
    for p in rows:
        totals[p.user_id] = totals.get(p.user_id, Decimal("0")) + prices[p.event_id]

    return [UserTotal(user_id=u, total_amount=t) for u, t in totals.items()]


"""
특정 사용자의 월별 합계 (정산 이력)

- 참여한 이벤트의 end_at 으로 월을 계산하여 그룹핑
- 최신 월이 먼저 오도록 내림차순, 월 중복 없음
- 참여 기록이 없으면 빈 리스트

"""

def aggregate_by_user(
    *,
    events: EventStore,
    participations: ParticipationStore,
    user_id: uuid.UUID,
    tz: tzinfo,
) -> list[MonthTotal]:
    rows = participations.list_for_user(user_id)
    if not rows:
        return []

    joined = events.get_events(p.event_id for p in rows)

    totals: dict[MonthKey, Decimal] = {}
    for p in rows:
        event = joined.get(p.event_id)
        if event is None:
            # 이벤트가 사라진 참여 기록은 조인 결과에서 제외
            continue
        key = MonthKey.from_datetime(event.end_at, tz)
        totals[key] = totals.get(key, Decimal("0")) + event.price

    return [MonthTotal(month=m, total_amount=totals[m]) for m in sorted(totals, reverse=True)]


"""
특정 사용자 / 특정 월 합계 + 기여 이벤트 목록

- 참여가 없어도 항상 레코드를 반환 (total_amount=0, events=[])
- 이벤트 목록은 end_at 오름차순, 같으면 참여 순서 유지

"""

def aggregate_by_user_and_month(
    *,
    events: EventStore,
    participations: ParticipationStore,
    user_id: uuid.UUID,
    month: MonthKey,
    tz: tzinfo,
) -> UserMonthTotal:
    rows = participations.list_for_user(user_id)
    joined = events.get_events(p.event_id for p in rows)
    start, end = month.window(tz)

    lines = []
    for p in rows:
        event = joined.get(p.event_id)
        if event is None or not (start <= event.end_at < end):
            continue
        lines.append(EventLine(event_id=event.id, name=event.name, price=event.price, end_at=event.end_at))

    # sorted() 는 안정 정렬이라 end_at 이 같으면 참여 순서가 유지됨
    lines = sorted(lines, key=lambda line: line.end_at)
    total = sum((line.price for line in lines), Decimal("0"))

    return UserMonthTotal(user_id=user_id, month=month, total_amount=total, events=lines)
