"""Read-only records returned by the stores.

Stores convert ORM rows into these so the billing services never touch
SQLAlchemy objects directly.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class EventStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"


@dataclass(frozen=True, slots=True)
class EventRecord:
    id: uuid.UUID
    name: str
    price: Decimal
    end_at: datetime
    status: EventStatus = EventStatus.OPEN


@dataclass(frozen=True, slots=True)
class ParticipationRecord:
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    opted_in_at: datetime


@dataclass(frozen=True, slots=True)
class UserRecord:
    id: uuid.UUID
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    id: uuid.UUID
    user_id: uuid.UUID
    month: str
    payment_status: PaymentStatus
    total_amount: Decimal
    updated_at: datetime
