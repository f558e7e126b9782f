"""
경비 청구 라우트

POST /api/reimbursements - 청구 제출 (USD 환산 결과 저장)
GET /api/reimbursements - 청구 목록 (일반 사용자는 본인 것만)
POST /api/admin/reimbursements/{id}/review - 심사 (관리자 전용)
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import LedgerError
from core.exchange.resolver import ExchangeRateError, ExchangeRateResolver
from core.reimbursement.service import ReimbursementService
from web.dependencies import (
    Actor,
    get_actor,
    get_db,
    get_db_write,
    require_admin,
    require_rate_resolver,
)
from web.errors import to_http_exception
from web.models.requests import ReimbursementCreateRequest, ReimbursementReviewRequest
from web.models.responses import ReimbursementListResponse, ReimbursementResponse
from web.routing import DecimalJSONRoute

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reimbursements"], route_class=DecimalJSONRoute)


@router.post("/api/reimbursements", response_model=ReimbursementResponse, status_code=201)
async def submit_reimbursement(
    request: ReimbursementCreateRequest,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
    resolver: ExchangeRateResolver = Depends(require_rate_resolver),
) -> dict[str, Any]:
    """경비 청구 제출

    환율 API 장애 시 기본 환율로 환산되어 exchange_rate_source=static-fallback으로 저장된다.
    """
    service = ReimbursementService(db, resolver)
    try:
        item = await service.submit(
            applicant_id=actor.user_id,
            applicant_name=request.applicant_name or actor.user_id,
            title=request.title,
            amount=request.amount,
            currency=request.currency,
            manual_rate=request.manual_rate,
            chain=request.chain,
            applicant_email=request.applicant_email,
            description=request.description,
            receipt_url=request.receipt_url,
            evm_address=request.evm_address,
            solana_address=request.solana_address,
            chain_addresses=request.chain_addresses,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e
    except ExchangeRateError as e:
        logger.error(f"경비 청구 환산 실패: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    return item.to_dict()


@router.get("/api/reimbursements", response_model=ReimbursementListResponse)
async def list_reimbursements(
    status: str | None = Query(default=None, description="상태 필터"),
    applicant_id: str | None = Query(default=None, description="신청자 필터 (관리자 전용)"),
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, Any]:
    """경비 청구 목록 (최근 수정순)"""
    service = ReimbursementService(db)
    owner = applicant_id if actor.is_admin else actor.user_id
    items = await service.list_reimbursements(applicant_id=owner, status=status)
    return {
        "reimbursements": [item.to_dict() for item in items],
        "total": len(items),
    }


@router.post(
    "/api/admin/reimbursements/{reimbursement_id}/review",
    response_model=ReimbursementResponse,
)
async def review_reimbursement(
    reimbursement_id: str,
    request: ReimbursementReviewRequest,
    actor: Actor = Depends(require_admin),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """청구 승인/반려 (submitted 상태만 가능)"""
    service = ReimbursementService(db)
    try:
        item = await service.review(reimbursement_id, actor.user_id, request.action)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return item.to_dict()
