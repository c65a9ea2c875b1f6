"""
payments.py

월별 정산 조회 및 납부 상태 관리 API 모음.

이 파일은 이벤트 참여 금액을 월 단위로 집계한 결과와
관리자가 수동으로 기록하는 납부 상태(Paid / Unpaid)를
함께 보여주는 기능을 담당한다.

주요 기능:
- 관리자용 월별 전체 회원 정산 현황 (+ CSV / Excel 내보내기)
- 관리자용 납부 상태 변경
- 회원 본인 월별 정산 이력
- 회원 본인 특정 월 정산 상세

설계 원칙:
- 금액은 매 요청마다 새로 집계 (장부 금액을 화면에 쓰지 않음)
- 장부 기록이 없으면 Unpaid
- 비즈니스 로직은 service 계층(eventpay.services.payments)에 위임
- 이 라우터는 요청/응답, 권한, 트랜잭션 처리에만 집중

관련 파일:
- eventpay.services.payments     : 정산 조회 / 상태 변경 로직
- eventpay.stores.sql_store      : 스토어 구현
- eventpay.schemas.payment       : 요청/응답 스키마

"""

import csv
import io
from starlette.responses import StreamingResponse, Response
from openpyxl import Workbook

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventpay.core.deps import get_db, get_stores, get_current_admin, get_current_member
from eventpay.core.timezone import billing_tz
from eventpay.domain.errors import StoreError, ValidationError
from eventpay.domain.month_key import MonthKey
from eventpay.models.user import User
from eventpay.schemas.common import DataResponse, ListResponse, Meta
from eventpay.schemas.payment import (
    EventLineResponse,
    MonthlyPaymentRow,
    MonthlyPaymentsResponse,
    MyMonthlySummaryResponse,
    PaymentEntryResponse,
    PaymentHistoryRow,
    PaymentStatusUpdateRequest,
)
from eventpay.services.payments import (
    monthly_summary,
    my_monthly_summary,
    payment_history,
    set_payment_status,
)
from eventpay.stores.sql_store import SqlStores

router = APIRouter(prefix="/payments", tags=["payments"])


def _month_param(month: str | None) -> MonthKey:
    if not month:
        raise ValidationError("month query parameter is required")
    return MonthKey.parse(month)


def _summary_rows(stores: SqlStores, month: MonthKey):
    return monthly_summary(
        events=stores.events,
        participations=stores.participations,
        users=stores.users,
        ledger=stores.ledger,
        month=month,
        tz=billing_tz(),
    )


"""
관리자 전용 월별 정산 현황 조회 API

- month(YYYY-MM) 필수
- 해당 월에 end_at 이 있는 이벤트에 참여한 회원만 포함
- 금액은 새로 집계, 상태는 장부 기준 (없으면 Unpaid)

"""
@router.get("/monthly", response_model=MonthlyPaymentsResponse)
def get_monthly_payments(
    month: str | None = Query(default=None, description="예: 2025-08"),
    stores: SqlStores = Depends(get_stores),
    _: User = Depends(get_current_admin),
):
    key = _month_param(month)
    rows = _summary_rows(stores, key)
    return MonthlyPaymentsResponse(
        month=str(key),
        data=[
            MonthlyPaymentRow(
                user_id=r.user_id,
                user_name=r.user_name,
                total_amount=r.total_amount,
                payment_status=r.payment_status,
            )
            for r in rows
        ],
        meta=Meta(count=len(rows)),
    )


"""
관리자 전용 납부 상태 변경 API

- user_id / month / payment_status 필수
- (user_id, month) 장부 행이 없으면 생성, 있으면 상태만 덮어씀
- 같은 요청을 반복해도 결과 동일 (idempotent)

"""
@router.post("/monthly/status", response_model=DataResponse[PaymentEntryResponse])
def update_payment_status(
    body: PaymentStatusUpdateRequest,
    db: Session = Depends(get_db),
    stores: SqlStores = Depends(get_stores),
    _: User = Depends(get_current_admin),
):
    try:
        entry = set_payment_status(
            users=stores.users,
            ledger=stores.ledger,
            user_id=body.user_id,
            month=body.month,
            payment_status=body.payment_status,
            total_amount=body.total_amount,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Database error: {type(e).__name__}") from e
    except Exception:
        db.rollback()
        raise

    return DataResponse[PaymentEntryResponse](
        data=PaymentEntryResponse(
            id=entry.id,
            user_id=entry.user_id,
            month=entry.month,
            payment_status=entry.payment_status,
            total_amount=entry.total_amount,
            updated_at=entry.updated_at,
        )
    )


"""
회원 본인 정산 이력 조회 API

- 로그인한 회원 본인 기준
- 참여 이벤트가 있는 월만, 최신 월 먼저
- 참여 기록이 없으면 빈 리스트

"""
@router.get("/me", response_model=ListResponse[PaymentHistoryRow])
def get_my_payment_history(
    stores: SqlStores = Depends(get_stores),
    current_user: User = Depends(get_current_member),
):
    rows = payment_history(
        events=stores.events,
        participations=stores.participations,
        ledger=stores.ledger,
        user_id=current_user.id,
        tz=billing_tz(),
    )
    return ListResponse[PaymentHistoryRow].of(
        [
            PaymentHistoryRow(month=str(r.month), total_amount=r.total_amount, payment_status=r.payment_status)
            for r in rows
        ]
    )


"""
회원 본인 특정 월 정산 상세 API

- month(YYYY-MM) 필수
- 참여 이벤트가 없어도 0원 / Unpaid / 빈 이벤트 목록으로 응답

"""
@router.get("/me/monthly", response_model=DataResponse[MyMonthlySummaryResponse])
def get_my_monthly_payment(
    month: str | None = Query(default=None, description="예: 2025-08"),
    stores: SqlStores = Depends(get_stores),
    current_user: User = Depends(get_current_member),
):
    key = _month_param(month)
    summary = my_monthly_summary(
        events=stores.events,
        participations=stores.participations,
        users=stores.users,
        ledger=stores.ledger,
        user_id=current_user.id,
        month=key,
        tz=billing_tz(),
    )
    return DataResponse[MyMonthlySummaryResponse](
        data=MyMonthlySummaryResponse(
            user_id=summary.user_id,
            user_name=summary.user_name,
            month=str(summary.month),
            total_amount=summary.total_amount,
            payment_status=summary.payment_status,
            events=[
                EventLineResponse(event_id=e.event_id, name=e.name, price=e.price, end_at=e.end_at)
                for e in summary.events
            ],
        )
    )


_EXPORT_HEADER = ["month", "user_id", "name", "total_amount", "payment_status"]


"""
관리자용 월별 정산 현황 CSV 다운로드 API

- StreamingResponse 로 행 단위 출력
- UTF-8 BOM을 추가하여 Excel에서 한글이 깨지지 않도록 처리

"""
@router.get("/monthly/export")
def export_monthly_csv(
    month: str | None = Query(default=None, description="예: 2025-08"),
    stores: SqlStores = Depends(get_stores),
    _: User = Depends(get_current_admin),
):
    key = _month_param(month)
    # 스트리밍 시작 전에 집계를 끝내서, 실패 시 일부만 내려가지 않도록 함
    rows = _summary_rows(stores, key)

    def generate():
        # Excel에서 UTF-8 CSV 한글 깨짐 방지를 위해 BOM(Byte Order Mark) 먼저 출력
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(_EXPORT_HEADER)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for r in rows:
            writer.writerow([str(key), str(r.user_id), r.user_name, str(r.total_amount), r.payment_status.value])
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"payments_{key}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


"""
관리자용 월별 정산 현황 Excel(xlsx) 다운로드 API

- openpyxl을 사용하여 XLSX 파일 생성

"""
@router.get("/monthly/export.xlsx")
def export_monthly_xlsx(
    month: str | None = Query(default=None, description="예: 2025-08"),
    stores: SqlStores = Depends(get_stores),
    _: User = Depends(get_current_admin),
):
    key = _month_param(month)
    rows = _summary_rows(stores, key)

    wb = Workbook()
    ws = wb.active
    ws.title = "payments"

    ws.append(_EXPORT_HEADER)
    for r in rows:
        ws.append([str(key), str(r.user_id), r.user_name, r.total_amount, r.payment_status.value])

    buf = io.BytesIO()
    wb.save(buf)

    filename = f"payments_{key}.xlsx"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(
        content=buf.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )
