import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from eventpay.core.timezone import utcnow
from eventpay.db.base import Base
from eventpay.domain.records import PaymentStatus


class Payment(Base):
    """월별 납부 상태 장부(ledger).

    month: 'YYYY-MM'
    - (user_id, month) 당 하나, 상태 변경 시 처음 생성된다
    - total_amount 는 참고용 기록일 뿐 화면 금액은 항상 집계 결과를 사용
    """

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_payments_user_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    payment_status: Mapped[PaymentStatus] = mapped_column(default=PaymentStatus.UNPAID, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
