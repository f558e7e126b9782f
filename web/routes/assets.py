"""
자산 라우트

자산 생성/조회/수정/삭제 및 재계산 API
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import LedgerError
from core.types import AssetStatus
from web.dependencies import Actor, get_actor, get_db, get_db_write
from web.errors import to_http_exception
from web.models.requests import AssetCreateRequest, AssetUpdateRequest
from web.models.responses import AssetDetailResponse, AssetListResponse, AssetResponse
from web.routing import DecimalJSONRoute
from web.services.asset_service import AssetService

router = APIRouter(prefix="/api/assets", tags=["Assets"], route_class=DecimalJSONRoute)


@router.post("", response_model=AssetResponse, status_code=201)
async def create_asset(
    request: AssetCreateRequest,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """자산 생성

    INITIAL 기록(금액 변화 0, 적용 후 가치 = initial_value)이 함께 생성된다.
    """
    service = AssetService(db, actor)
    try:
        return await service.create_asset(request.model_dump())
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=AssetListResponse)
async def list_assets(
    type: str | None = Query(default=None, description="분류 태그 필터"),
    status: str = Query(
        default=AssetStatus.ACTIVE.value,
        description="상태 필터 (all이면 전체)",
    ),
    user_id: str | None = Query(default=None, description="소유자 필터 (관리자 전용)"),
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, Any]:
    """자산 목록 조회 (최근 생성순)"""
    service = AssetService(db, actor)
    return await service.list_assets(asset_type=type, status=status, user_id=user_id)


@router.get("/{asset_id}", response_model=AssetDetailResponse)
async def get_asset(
    asset_id: str,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, Any]:
    """자산 상세 조회 (최근 기록 5건 포함)"""
    service = AssetService(db, actor)
    try:
        return await service.get_asset_detail(asset_id)
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    request: AssetUpdateRequest,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """자산 메타데이터 수정

    가치(initial_value/current_value)는 기록으로만 변경 가능.
    """
    fields = request.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    service = AssetService(db, actor)
    try:
        return await service.update_asset(asset_id, fields)
    except LedgerError as e:
        raise to_http_exception(e) from e


@router.delete("/{asset_id}", status_code=204)
async def delete_asset(
    asset_id: str,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> Response:
    """자산 삭제 (기록 포함)"""
    service = AssetService(db, actor)
    try:
        await service.delete_asset(asset_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return Response(status_code=204)


@router.post("/{asset_id}/recalculate", response_model=AssetResponse)
async def recalculate_asset(
    asset_id: str,
    actor: Actor = Depends(get_actor),
    db: SQLiteAdapter = Depends(get_db_write),
) -> dict[str, Any]:
    """전체 기록 재계산"""
    service = AssetService(db, actor)
    try:
        return await service.recalculate(asset_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
