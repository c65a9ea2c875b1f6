"""
월별 집계(Aggregator) 단위 테스트.
- 스토어는 메모리 fake 로 대체
- 월별 사용자 합계 / 사용자별 월 이력 / 사용자+월 상세를 확인한다.
"""

from datetime import timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from eventpay.domain.month_key import MonthKey
from eventpay.services.aggregation import (
    aggregate_by_month,
    aggregate_by_user,
    aggregate_by_user_and_month,
)
from tests.fakes import FakeEventStore, FakeParticipationStore, event, joined, month, user
from tests.helpers import utc

UTC = timezone.utc


def _stores(events, participations):
    return FakeEventStore(events), FakeParticipationStore(participations)


def test_aggregate_by_month_sums_per_user():
    u1, u2 = user("User One"), user("User Two")
    e1 = event("Event 1", 100, utc(2025, 8, 5))
    e2 = event("Event 2", 200, utc(2025, 8, 15))
    e3 = event("Event 3", 50, utc(2025, 9, 10))
    events, parts = _stores(
        [e1, e2, e3],
        [joined(e1, u1.id), joined(e2, u1.id), joined(e1, u2.id), joined(e3, u2.id)],
    )

    totals = {t.user_id: t.total_amount for t in aggregate_by_month(
        events=events, participations=parts, month=month("2025-08"), tz=UTC
    )}

    assert totals == {u1.id: Decimal("300"), u2.id: Decimal("100")}


def test_aggregate_by_month_omits_users_without_qualifying_participation():
    u1, u2 = user("User One"), user("User Two")
    aug = event("Aug", 100, utc(2025, 8, 5))
    sep = event("Sep", 50, utc(2025, 9, 10))
    events, parts = _stores([aug, sep], [joined(aug, u1.id), joined(sep, u2.id)])

    rows = aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=UTC)

    assert [r.user_id for r in rows] == [u1.id]


def test_aggregate_by_month_window_boundaries():
    u = user("Edge")
    first_instant = event("Start", 10, utc(2025, 8, 1, 0, 0, 0))
    last_instant = event("Last", 20, utc(2025, 8, 31, 23, 59, 59))
    next_month = event("Next", 40, utc(2025, 9, 1, 0, 0, 0))
    events, parts = _stores(
        [first_instant, last_instant, next_month],
        [joined(first_instant, u.id), joined(last_instant, u.id), joined(next_month, u.id)],
    )

    (row,) = aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=UTC)

    assert row.total_amount == Decimal("30")


def test_aggregate_by_month_empty_month():
    events, parts = _stores([], [])
    assert aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=UTC) == []


def test_aggregate_by_month_uses_billing_timezone():
    seoul = ZoneInfo("Asia/Seoul")
    u = user("Seoul")
    # 서울 기준으로는 8월 1일 새벽
    e = event("Late July UTC", 70, utc(2025, 7, 31, 16, 0))
    events, parts = _stores([e], [joined(e, u.id)])

    assert aggregate_by_month(events=events, participations=parts, month=month("2025-07"), tz=UTC)
    assert aggregate_by_month(events=events, participations=parts, month=month("2025-07"), tz=seoul) == []
    assert aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=seoul)


def test_aggregate_by_month_uses_constant_store_round_trips():
    users = [user(f"U{i}") for i in range(20)]
    evs = [event(f"E{i}", 10, utc(2025, 8, 1 + i)) for i in range(10)]
    events, parts = _stores(evs, [joined(e, u.id) for e in evs for u in users])

    rows = aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=UTC)

    assert len(rows) == 20
    assert all(r.total_amount == Decimal("100") for r in rows)
    assert events.calls == 1
    assert parts.calls == 1


def test_aggregate_by_user_groups_months_descending():
    u1, u2 = user("User One"), user("User Two")
    aug1 = event("Event Aug 1", 100, utc(2025, 8, 5))
    aug2 = event("Event Aug 2", 150, utc(2025, 8, 20))
    jul1 = event("Event Jul 1", 200, utc(2025, 7, 10))
    sep1 = event("Event Sep 1", 50, utc(2025, 9, 1))
    events, parts = _stores(
        [aug1, aug2, jul1, sep1],
        [joined(aug1, u1.id), joined(jul1, u1.id), joined(sep1, u1.id), joined(aug2, u1.id), joined(aug1, u2.id)],
    )

    rows = aggregate_by_user(events=events, participations=parts, user_id=u1.id, tz=UTC)

    assert [str(r.month) for r in rows] == ["2025-09", "2025-08", "2025-07"]
    assert [r.total_amount for r in rows] == [Decimal("50"), Decimal("250"), Decimal("200")]
    months = [r.month for r in rows]
    assert len(set(months)) == len(months)
    assert all(a > b for a, b in zip(months, months[1:]))


def test_aggregate_by_user_without_participations_is_empty():
    events, parts = _stores([event("Lonely", 10, utc(2025, 8, 1))], [])
    assert aggregate_by_user(events=events, participations=parts, user_id=user("Nobody").id, tz=UTC) == []


def test_aggregate_by_user_and_month_lists_events_by_end_time():
    u = user("User One")
    late = event("Late", 200, utc(2025, 8, 20))
    early = event("Early", 100, utc(2025, 8, 5))
    tie_a = event("Tie A", 30, utc(2025, 8, 10))
    tie_b = event("Tie B", 40, utc(2025, 8, 10))
    other = event("Other month", 999, utc(2025, 9, 1))
    events, parts = _stores(
        [late, early, tie_a, tie_b, other],
        [joined(late, u.id), joined(tie_b, u.id), joined(early, u.id), joined(tie_a, u.id), joined(other, u.id)],
    )

    result = aggregate_by_user_and_month(
        events=events, participations=parts, user_id=u.id, month=month("2025-08"), tz=UTC
    )

    assert result.month == MonthKey(2025, 8)
    assert result.total_amount == Decimal("370")
    # end_at 이 같으면 참여 순서 유지 (Tie B 가 먼저 참여)
    assert [e.name for e in result.events] == ["Early", "Tie B", "Tie A", "Late"]


def test_aggregate_by_user_and_month_zero_when_nothing_qualifies():
    u = user("User One")
    sep = event("Sep", 50, utc(2025, 9, 1))
    events, parts = _stores([sep], [joined(sep, u.id)])

    result = aggregate_by_user_and_month(
        events=events, participations=parts, user_id=u.id, month=month("2025-08"), tz=UTC
    )

    assert result.user_id == u.id
    assert result.total_amount == Decimal("0")
    assert result.events == []


def test_decimal_prices_are_not_rounded():
    u = user("Cents")
    e1 = event("A", "10.25", utc(2025, 8, 1))
    e2 = event("B", "0.10", utc(2025, 8, 2))
    events, parts = _stores([e1, e2], [joined(e1, u.id), joined(e2, u.id)])

    (row,) = aggregate_by_month(events=events, participations=parts, month=month("2025-08"), tz=UTC)

    assert row.total_amount == Decimal("10.35")
