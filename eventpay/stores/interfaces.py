"""Store interfaces (repository pattern).

The billing services depend only on these. Stores return domain records and
expose batch lookups so an aggregation costs a fixed number of round trips.
"""

import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from eventpay.domain.month_key import MonthKey
from eventpay.domain.records import (
    EventRecord,
    LedgerEntry,
    ParticipationRecord,
    PaymentStatus,
    UserRecord,
)


class EventStore(ABC):
    """Read side of event persistence used by billing."""

    @abstractmethod
    def get_event(self, event_id: uuid.UUID) -> EventRecord | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def get_events(self, event_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, EventRecord]:
        """Batch fetch; unknown IDs are simply missing from the result."""
        ...

    @abstractmethod
    def list_events_ending_between(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Return events with start <= end_at < end, ordered by end_at ascending."""
        ...


class ParticipationStore(ABC):

    @abstractmethod
    def list_for_events(self, event_ids: Iterable[uuid.UUID]) -> list[ParticipationRecord]:
        """Return participations for any of the events, in opt-in order."""
        ...

    @abstractmethod
    def list_for_user(self, user_id: uuid.UUID) -> list[ParticipationRecord]:
        """Return a user's participations, in opt-in order."""
        ...


class UserStore(ABC):

    @abstractmethod
    def get_user(self, user_id: uuid.UUID) -> UserRecord | None:
        ...

    @abstractmethod
    def get_users(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, UserRecord]:
        ...


class PaymentLedger(ABC):
    """Per-user, per-month payment status."""

    @abstractmethod
    def statuses_for_month(self, month: MonthKey) -> dict[uuid.UUID, PaymentStatus]:
        """Return {user_id: status} for every ledger entry of the month."""
        ...

    @abstractmethod
    def statuses_for_user(self, user_id: uuid.UUID, months: Iterable[MonthKey]) -> dict[MonthKey, PaymentStatus]:
        """Return {month: status} for the user's entries among the given months."""
        ...

    @abstractmethod
    def get_entry(self, user_id: uuid.UUID, month: MonthKey) -> LedgerEntry | None:
        ...

    @abstractmethod
    def upsert_status(
        self,
        *,
        user_id: uuid.UUID,
        month: MonthKey,
        status: PaymentStatus,
        total_amount: Decimal | None,
        updated_at: datetime,
    ) -> LedgerEntry:
        """Create or overwrite the (user_id, month) entry in one atomic store operation.

        A None total_amount keeps the stored amount (0 on insert).
        """
        ...
