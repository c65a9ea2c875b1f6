import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from eventpay.domain.records import PaymentStatus
from eventpay.schemas.common import Meta, MonthStr, Money


class PaymentStatusUpdateRequest(BaseModel):
    # 필수 여부는 서비스에서 한 번에 검증 (누락 시 공통 메시지로 400)
    user_id: Optional[uuid.UUID] = None
    month: Optional[MonthStr] = Field(default=None, examples=["2025-08"])
    payment_status: Optional[str] = Field(default=None, examples=["Paid"])
    total_amount: Optional[Decimal] = None


class PaymentEntryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    month: MonthStr
    payment_status: PaymentStatus
    total_amount: Money
    updated_at: datetime


class MonthlyPaymentRow(BaseModel):
    user_id: uuid.UUID
    user_name: str
    total_amount: Money
    payment_status: PaymentStatus


class MonthlyPaymentsResponse(BaseModel):
    month: MonthStr
    data: list[MonthlyPaymentRow]
    meta: Meta


class PaymentHistoryRow(BaseModel):
    month: MonthStr
    total_amount: Money
    payment_status: PaymentStatus


class EventLineResponse(BaseModel):
    event_id: uuid.UUID
    name: str
    price: Money
    end_at: datetime


class MyMonthlySummaryResponse(BaseModel):
    user_id: uuid.UUID
    user_name: str
    month: MonthStr
    total_amount: Money
    payment_status: PaymentStatus
    events: list[EventLineResponse]
