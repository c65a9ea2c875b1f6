"""SQLAlchemy implementations of the store interfaces.

One instance per request session. Reads convert ORM rows into domain
records; driver failures surface as StoreError.
"""

import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventpay.core.timezone import as_utc
from eventpay.domain.errors import StoreError
from eventpay.domain.month_key import MonthKey
from eventpay.domain.records import (
    EventRecord,
    LedgerEntry,
    ParticipationRecord,
    PaymentStatus,
    UserRecord,
)
from eventpay.models.event import Event, Participation
from eventpay.models.payment import Payment
from eventpay.models.user import User
from eventpay.stores.interfaces import EventStore, ParticipationStore, PaymentLedger, UserStore


# 단일 문장 upsert(INSERT ... ON CONFLICT DO UPDATE)를 지원하는 방언
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"Database error while {action}: {type(e).__name__}") from e


def to_event_record(row: Event) -> EventRecord:
    return EventRecord(
        id=row.id,
        name=row.name,
        price=Decimal(row.price),
        end_at=as_utc(row.end_at),
        status=row.status,
    )


def to_participation_record(row: Participation) -> ParticipationRecord:
    return ParticipationRecord(
        id=row.id,
        event_id=row.event_id,
        user_id=row.user_id,
        opted_in_at=as_utc(row.opted_in_at),
    )


def to_user_record(row: User) -> UserRecord:
    return UserRecord(id=row.id, name=row.name, email=row.email)


def to_ledger_entry(row: Payment) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        user_id=row.user_id,
        month=row.month,
        payment_status=row.payment_status,
        total_amount=Decimal(row.total_amount),
        updated_at=as_utc(row.updated_at),
    )


class SqlEventStore(EventStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_event(self, event_id: uuid.UUID) -> EventRecord | None:
        with store_errors("loading event"):
            row = self._db.scalar(select(Event).where(Event.id == event_id))
        return to_event_record(row) if row else None

    def get_events(self, event_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, EventRecord]:
        ids = set(event_ids)
        if not ids:
            return {}
        with store_errors("loading events"):
            rows = self._db.scalars(select(Event).where(Event.id.in_(ids))).all()
        return {r.id: to_event_record(r) for r in rows}

    def list_events_ending_between(self, start: datetime, end: datetime) -> list[EventRecord]:
        with store_errors("loading events"):
            rows = self._db.scalars(
                select(Event)
                .where(Event.end_at >= as_utc(start))
                .where(Event.end_at < as_utc(end))
                .order_by(Event.end_at, Event.created_at)
            ).all()
        return [to_event_record(r) for r in rows]


class SqlParticipationStore(ParticipationStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def list_for_events(self, event_ids: Iterable[uuid.UUID]) -> list[ParticipationRecord]:
        ids = set(event_ids)
        if not ids:
            return []
        with store_errors("loading participations"):
            rows = self._db.scalars(
                select(Participation)
                .where(Participation.event_id.in_(ids))
                .order_by(Participation.opted_in_at, Participation.id)
            ).all()
        return [to_participation_record(r) for r in rows]

    def list_for_user(self, user_id: uuid.UUID) -> list[ParticipationRecord]:
        with store_errors("loading participations"):
            rows = self._db.scalars(
                select(Participation)
                .where(Participation.user_id == user_id)
                .order_by(Participation.opted_in_at, Participation.id)
            ).all()
        return [to_participation_record(r) for r in rows]


class SqlUserStore(UserStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_user(self, user_id: uuid.UUID) -> UserRecord | None:
        with store_errors("loading user"):
            row = self._db.scalar(select(User).where(User.id == user_id))
        return to_user_record(row) if row else None

    def get_users(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, UserRecord]:
        ids = set(user_ids)
        if not ids:
            return {}
        with store_errors("loading users"):
            rows = self._db.scalars(select(User).where(User.id.in_(ids))).all()
        return {r.id: to_user_record(r) for r in rows}


class SqlPaymentLedger(PaymentLedger):

    def __init__(self, db: Session) -> None:
        self._db = db

    def statuses_for_month(self, month: MonthKey) -> dict[uuid.UUID, PaymentStatus]:
        with store_errors("loading payment statuses"):
            rows = self._db.execute(
                select(Payment.user_id, Payment.payment_status).where(Payment.month == str(month))
            ).all()
        return {user_id: status for user_id, status in rows}

    def statuses_for_user(self, user_id: uuid.UUID, months: Iterable[MonthKey]) -> dict[MonthKey, PaymentStatus]:
        keys = {str(m): m for m in months}
        if not keys:
            return {}
        with store_errors("loading payment statuses"):
            rows = self._db.execute(
                select(Payment.month, Payment.payment_status)
                .where(Payment.user_id == user_id)
                .where(Payment.month.in_(list(keys)))
            ).all()
        return {keys[month]: status for month, status in rows}

    def get_entry(self, user_id: uuid.UUID, month: MonthKey) -> LedgerEntry | None:
        with store_errors("loading payment"):
            row = self._db.scalar(
                select(Payment)
                .where(Payment.user_id == user_id)
                .where(Payment.month == str(month))
                .execution_options(populate_existing=True)
            )
        return to_ledger_entry(row) if row else None

    """
    납부 상태 upsert

    - (user_id, month) 유니크 제약 기준 INSERT ... ON CONFLICT DO UPDATE 한 문장으로 처리
    - 애플리케이션 레벨에서 조회 후 쓰기(read-then-write)를 하지 않음
    - total_amount 가 None 이면 기존 값을 유지 (신규 생성 시 0)
    - commit 은 호출 측(라우터)에서 수행

    """
    def upsert_status(
        self,
        *,
        user_id: uuid.UUID,
        month: MonthKey,
        status: PaymentStatus,
        total_amount: Decimal | None,
        updated_at: datetime,
    ) -> LedgerEntry:
        dialect = self._db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise StoreError(f"Payment status upsert is not supported on '{dialect}'")

        stmt = insert(Payment).values(
            id=uuid.uuid4(),
            user_id=user_id,
            month=str(month),
            total_amount=total_amount if total_amount is not None else Decimal("0"),
            payment_status=status,
            updated_at=as_utc(updated_at),
        )
        set_ = {
            "payment_status": stmt.excluded.payment_status,
            "updated_at": stmt.excluded.updated_at,
        }
        if total_amount is not None:
            set_["total_amount"] = stmt.excluded.total_amount
        stmt = stmt.on_conflict_do_update(index_elements=["user_id", "month"], set_=set_)

        with store_errors("updating payment status"):
            self._db.execute(stmt)

        entry = self.get_entry(user_id, month)
        if entry is None:
            raise StoreError("Payment status was not persisted")
        return entry


class SqlStores:
    """Bundle of the SQL stores sharing one request session."""

    def __init__(self, db: Session) -> None:
        self.events = SqlEventStore(db)
        self.participations = SqlParticipationStore(db)
        self.users = SqlUserStore(db)
        self.ledger = SqlPaymentLedger(db)
