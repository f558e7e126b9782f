"""
지급 배치 라우트 (관리자 전용)

POST /api/admin/payouts/reimbursements - 승인된 경비 지급 배치 (요청 본문 항목)
POST /api/admin/payouts/reimbursements/approved - 승인된 경비 지급 배치 (저장된 청구)
POST /api/admin/payouts/salaries - 급여 지급 배치
"""

from typing import Any

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.errors import LedgerError
from web.dependencies import Actor, get_app_settings, get_db, require_admin
from web.errors import to_http_exception
from web.models.requests import (
    ApprovedPayoutRequest,
    ReimbursementPayoutRequest,
    SalaryPayoutRequest,
)
from web.models.responses import PayoutResponse
from web.routing import DecimalJSONRoute
from web.services.payout_service import PayoutService

router = APIRouter(prefix="/api/admin/payouts", tags=["Payouts"], route_class=DecimalJSONRoute)


@router.post("/reimbursements", response_model=PayoutResponse)
async def build_reimbursement_payout(
    request: ReimbursementPayoutRequest,
    actor: Actor = Depends(require_admin),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """승인된 경비를 수령인별로 묶어 지급 페이로드 생성

    EVM 주소가 없는 수령인은 issues에만 포함되고 전송 목록에서 제외된다.
    """
    service = PayoutService(settings.payout)
    try:
        return await service.build_reimbursement_batches(
            request.items,
            payout_currency_rate=request.payout_currency_rate,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.post("/reimbursements/approved", response_model=PayoutResponse)
async def build_approved_reimbursement_payout(
    request: ApprovedPayoutRequest,
    actor: Actor = Depends(require_admin),
    settings: Settings = Depends(get_app_settings),
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, Any]:
    """저장된 승인 청구(status=approved)로 지급 페이로드 생성

    청구 제출 시 저장된 USD 환산 금액을 그대로 사용한다.
    """
    service = PayoutService(settings.payout)
    try:
        return await service.build_approved_reimbursement_batches(
            db,
            applicant_id=request.applicant_id,
            currency=request.currency,
            payout_currency_rate=request.payout_currency_rate,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.post("/salaries", response_model=PayoutResponse)
async def build_salary_payout(
    request: SalaryPayoutRequest,
    actor: Actor = Depends(require_admin),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """급여 지급 페이로드 생성"""
    service = PayoutService(settings.payout)
    try:
        return await service.build_salary_batches(
            request.payments,
            payout_currency_rate=request.payout_currency_rate,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e
