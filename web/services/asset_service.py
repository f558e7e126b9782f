"""
자산 서비스

AssetLedger 호출 전 호출자 권한 확인 (소유자 또는 관리자).
응답은 API 직렬화용 딕셔너리 (금액은 문자열).
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.errors import ConsistencyError, PermissionDeniedError
from core.ledger.models import Asset
from core.ledger.service import AssetLedger
from core.ledger.store import UNSET
from core.types import AssetStatus
from core.utils.timezone import now_utc
from web.dependencies import Actor

logger = logging.getLogger(__name__)

# status 필터에 이 값을 주면 전체 조회
STATUS_ALL = "all"


class AssetService:
    """자산 서비스

    Args:
        db: SQLite 어댑터 (쓰기 작업은 쓰기 가능 연결 필요)
        actor: 요청 호출자
    """

    def __init__(self, db: SQLiteAdapter, actor: Actor):
        self.db = db
        self.actor = actor
        self.ledger = AssetLedger(db)

    def _check_access(self, asset: Asset) -> None:
        if self.actor.is_admin or asset.user_id == self.actor.user_id:
            return
        logger.warning(
            "자산 접근 거부",
            extra={"asset_id": asset.asset_id, "actor_id": self.actor.user_id},
        )
        raise PermissionDeniedError(f"No access to asset {asset.asset_id}")

    async def _get_accessible_asset(self, asset_id: str) -> Asset:
        asset = await self.ledger.get_asset(asset_id)
        self._check_access(asset)
        return asset

    # -------------------------------------------------------------------------
    # 자산
    # -------------------------------------------------------------------------

    async def create_asset(self, fields: dict[str, Any]) -> dict[str, Any]:
        """자산 생성 (INITIAL 기록 포함)

        user_id 지정은 관리자만 가능.
        """
        owner_id = fields.get("user_id") or self.actor.user_id
        if owner_id != self.actor.user_id and not self.actor.is_admin:
            raise PermissionDeniedError("Only admins can create assets for other users")

        asset, _ = await self.ledger.create_asset(
            user_id=owner_id,
            actor_id=self.actor.user_id,
            name=fields.get("name"),
            asset_type=fields.get("type"),
            initial_value=fields.get("initial_value"),
            currency=fields.get("currency"),
            purchase_date=fields.get("purchase_date") or now_utc(),
            description=fields.get("description"),
            quantity=fields.get("quantity"),
            unit=fields.get("unit"),
        )
        return asset.to_dict()

    async def list_assets(
        self,
        asset_type: str | None = None,
        status: str | None = AssetStatus.ACTIVE.value,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """자산 목록

        관리자: 전체 (user_id로 필터 가능)
        일반 사용자: 본인 자산만 (user_id 무시)
        """
        owner = user_id if self.actor.is_admin else self.actor.user_id
        status_filter = None if status and status.lower() == STATUS_ALL else status

        assets = await self.ledger.list_assets(
            user_id=owner,
            asset_type=asset_type,
            status=status_filter,
        )
        return {
            "assets": [asset.to_dict() for asset in assets],
            "total": len(assets),
        }

    async def get_asset_detail(self, asset_id: str) -> dict[str, Any]:
        """자산 + 최근 기록"""
        asset = await self._get_accessible_asset(asset_id)
        records = await self.ledger.list_records(
            asset_id,
            descending=True,
            limit=Defaults.RECENT_RECORD_LIMIT,
        )
        result = asset.to_dict()
        result["records"] = [record.to_dict() for record in records]
        return result

    async def update_asset(self, asset_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """자산 메타데이터 수정"""
        await self._get_accessible_asset(asset_id)
        asset = await self.ledger.update_asset(asset_id, fields)
        return asset.to_dict()

    async def delete_asset(self, asset_id: str) -> None:
        """자산 삭제 (기록 포함)"""
        await self._get_accessible_asset(asset_id)
        await self.ledger.delete_asset(asset_id)

    # -------------------------------------------------------------------------
    # 기록
    # -------------------------------------------------------------------------

    async def add_record(
        self,
        asset_id: str,
        record_type: str,
        amount: Any,
        date: str | None = None,
        note: str | None = None,
        historical: bool = False,
    ) -> dict[str, Any]:
        """기록 추가

        historical=False: Ledger Apply (최신 기록)
        historical=True: 과거 시점 삽입 후 전체 재계산
        """
        await self._get_accessible_asset(asset_id)

        if historical:
            asset, record = await self.ledger.insert_record(
                asset_id,
                raw_amount=amount,
                record_type=record_type,
                actor_id=self.actor.user_id,
                date=date or now_utc(),
                note=note,
            )
        else:
            asset, record = await self.ledger.apply_record(
                asset_id,
                raw_amount=amount,
                record_type=record_type,
                actor_id=self.actor.user_id,
                date=date,
                note=note,
            )

        return {"asset": asset.to_dict(), "record": record.to_dict()}

    async def list_records(self, asset_id: str) -> dict[str, Any]:
        """기록 목록 (최신순)"""
        await self._get_accessible_asset(asset_id)
        records = await self.ledger.list_records(asset_id, descending=True)
        return {
            "asset_id": asset_id,
            "records": [record.to_dict() for record in records],
        }

    async def recalculate(self, asset_id: str) -> dict[str, Any]:
        """전체 재계산"""
        await self._get_accessible_asset(asset_id)
        asset = await self.ledger.recalculate(asset_id)
        return asset.to_dict()

    async def _check_record_access(self, record_id: str) -> None:
        record = await self.ledger.get_record(record_id)
        asset = await self.ledger.store.get_asset(record.asset_id)
        if asset is None:
            raise ConsistencyError(
                f"Record {record_id} references missing asset {record.asset_id}"
            )
        self._check_access(asset)

    async def update_record(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """기록 수정 후 재계산

        fields에 note 키가 없으면 메모 유지, None이면 메모 삭제.
        """
        await self._check_record_access(record_id)
        asset, record = await self.ledger.edit_record(
            record_id,
            amount=fields.get("amount"),
            date=fields.get("date"),
            note=fields["note"] if "note" in fields else UNSET,
        )
        return {"asset": asset.to_dict(), "record": record.to_dict()}

    async def delete_record(self, record_id: str) -> dict[str, Any]:
        """기록 삭제 후 재계산"""
        await self._check_record_access(record_id)
        asset = await self.ledger.delete_record(record_id)
        return asset.to_dict()
