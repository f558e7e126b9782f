"""
자산 기록 라우트

기록 추가(Ledger Apply), 조회, 수정/삭제(재계산) API
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import LedgerError
from web.dependencies import Actor, get_actor, get_db, get_db_write
from web.errors import to_http_exception
from web.models.requests import RecordCreateRequest, RecordUpdateRequest
from web.models.responses import AssetResponse, RecordListResponse, RecordMutationResponse
from web.routing import DecimalJSONRoute
from web.services.asset_service import AssetService

router = APIRouter(prefix="/api/assets", tags=["Records"], route_class=DecimalJSONRoute)


@router.post("/{asset_id}/records", response_model=RecordMutationResponse, status_code=201)
async def create_record(
    asset_id: str,
    request: RecordCreateRequest,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """기록 추가

    **금액 해석**:
    - REVALUATION: 목표 가치
    - 그 외: 증감액 (감소는 음수)
    """
    service = AssetService(db, actor)
    try:
        return await service.add_record(
            asset_id,
            record_type=request.type,
            amount=request.amount,
            date=request.date,
            note=request.note,
            historical=request.historical,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.get("/{asset_id}/records", response_model=RecordListResponse)
async def list_records(
    asset_id: str,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, Any]:
    """기록 목록 (최신순)"""
    service = AssetService(db, actor)
    try:
        return await service.list_records(asset_id)
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.patch("/records/{record_id}", response_model=RecordMutationResponse)
async def update_record(
    record_id: str,
    request: RecordUpdateRequest,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """기록 수정 후 전체 재계산"""
    fields = request.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    service = AssetService(db, actor)
    try:
        return await service.update_record(record_id, fields)
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.delete("/records/{record_id}", status_code=204)
async def delete_record(
    record_id: str,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> Response:
    """기록 삭제 후 전체 재계산"""
    service = AssetService(db, actor)
    try:
        await service.delete_record(record_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return Response(status_code=204)
