"""
자산 Ledger 저장소

assets / asset_records 테이블 저장 및 조회.
커밋하지 않음: 호출자(AssetLedger의 unit of work)가 트랜잭션을 관리한다.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.ledger.models import Asset, AssetRecord, RecordChange
from core.utils.timezone import from_iso, now_utc, to_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class _Unset:
    """인자 미지정 표시 (None과 구분)"""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()

_ASSET_COLUMNS = """
    asset_id, user_id, name, description, asset_type, currency,
    initial_value, current_value, quantity, unit,
    status, purchase_date, created_at, updated_at
"""

_RECORD_COLUMNS = """
    seq, record_id, asset_id, user_id, record_type,
    amount_change, value_after, date, note, created_at
"""

# PATCH /api/assets/{id} 로 변경 가능한 컬럼
EDITABLE_ASSET_COLUMNS: frozenset[str] = frozenset({
    "name",
    "description",
    "asset_type",
    "currency",
    "quantity",
    "unit",
    "status",
})


def _row_to_asset(row: tuple[Any, ...]) -> Asset:
    return Asset(
        asset_id=row[0],
        user_id=row[1],
        name=row[2],
        description=row[3],
        asset_type=row[4],
        currency=row[5],
        initial_value=Decimal(row[6]),
        current_value=Decimal(row[7]),
        quantity=Decimal(row[8]) if row[8] is not None else None,
        unit=row[9],
        status=row[10],
        purchase_date=from_iso(row[11]),
        created_at=from_iso(row[12]),
        updated_at=from_iso(row[13]),
    )


def _row_to_record(row: tuple[Any, ...]) -> AssetRecord:
    return AssetRecord(
        seq=row[0],
        record_id=row[1],
        asset_id=row[2],
        user_id=row[3],
        record_type=row[4],
        amount_change=Decimal(row[5]),
        value_after=Decimal(row[6]),
        date=from_iso(row[7]),
        note=row[8],
        created_at=from_iso(row[9]),
    )


class AssetStore:
    """자산 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # Asset
    # -------------------------------------------------------------------------

    async def get_asset(self, asset_id: str) -> Asset | None:
        """자산 조회"""
        row = await self.db.fetchone(
            f"SELECT {_ASSET_COLUMNS} FROM assets WHERE asset_id = ?",
            (asset_id,),
        )
        return _row_to_asset(row) if row else None

    async def list_assets(
        self,
        user_id: str | None = None,
        asset_type: str | None = None,
        status: str | None = None,
    ) -> list[Asset]:
        """자산 목록 조회 (최근 생성순)

        Args:
            user_id: 소유자 필터 (None이면 전체)
            asset_type: 유형 필터
            status: 상태 필터
        """
        conditions: list[str] = []
        params: list[Any] = []

        if user_id is not None:
            conditions.append("user_id = ?")
            params.append(user_id)
        if asset_type is not None:
            conditions.append("asset_type = ?")
            params.append(asset_type)
        if status is not None:
            conditions.append("status = ?")
            params.append(status)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = await self.db.fetchall(
            f"SELECT {_ASSET_COLUMNS} FROM assets {where} ORDER BY created_at DESC",
            tuple(params),
        )
        return [_row_to_asset(row) for row in rows]

    async def insert_asset(self, asset: Asset) -> None:
        """자산 저장"""
        created_at = asset.created_at or now_utc()
        updated_at = asset.updated_at or created_at

        await self.db.execute(
            f"""
            INSERT INTO assets ({_ASSET_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                asset.asset_id,
                asset.user_id,
                asset.name,
                asset.description,
                asset.asset_type,
                asset.currency,
                str(asset.initial_value),
                str(asset.current_value),
                str(asset.quantity) if asset.quantity is not None else None,
                asset.unit,
                asset.status,
                to_iso(asset.purchase_date),
                to_iso(created_at),
                to_iso(updated_at),
            ),
        )

    async def update_asset_value(self, asset_id: str, current_value: Decimal) -> None:
        """자산 현재 가치 갱신"""
        await self.db.execute(
            """
            UPDATE assets
            SET current_value = ?, updated_at = ?
            WHERE asset_id = ?
            """,
            (str(current_value), to_iso(now_utc()), asset_id),
        )

    async def update_asset_fields(self, asset_id: str, fields: dict[str, Any]) -> None:
        """자산 메타데이터 갱신

        Args:
            asset_id: 자산 ID
            fields: {컬럼명: 값}, EDITABLE_ASSET_COLUMNS만 허용

        Raises:
            ValueError: 허용되지 않은 컬럼
        """
        invalid = set(fields) - EDITABLE_ASSET_COLUMNS
        if invalid:
            raise ValueError(f"Not editable: {sorted(invalid)}")

        if not fields:
            return

        assignments = [f"{column} = ?" for column in fields]
        params = [
            str(value) if isinstance(value, Decimal) else value
            for value in fields.values()
        ]
        assignments.append("updated_at = ?")
        params.append(to_iso(now_utc()))
        params.append(asset_id)

        await self.db.execute(
            f"UPDATE assets SET {', '.join(assignments)} WHERE asset_id = ?",
            tuple(params),
        )

    async def delete_asset(self, asset_id: str) -> bool:
        """자산 삭제 (기록은 delete_records_for_asset로 먼저 삭제해야 함)"""
        cursor = await self.db.execute(
            "DELETE FROM assets WHERE asset_id = ?",
            (asset_id,),
        )
        return cursor.rowcount > 0

    # -------------------------------------------------------------------------
    # AssetRecord
    # -------------------------------------------------------------------------

    async def get_record(self, record_id: str) -> AssetRecord | None:
        """기록 조회"""
        row = await self.db.fetchone(
            f"SELECT {_RECORD_COLUMNS} FROM asset_records WHERE record_id = ?",
            (record_id,),
        )
        return _row_to_record(row) if row else None

    async def list_records(
        self,
        asset_id: str,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[AssetRecord]:
        """자산의 기록 조회 (date, created_at, seq 순)

        Args:
            asset_id: 자산 ID
            descending: True면 최신순
            limit: 최대 개수
        """
        direction = "DESC" if descending else "ASC"
        sql = (
            f"SELECT {_RECORD_COLUMNS} FROM asset_records WHERE asset_id = ? "
            f"ORDER BY date {direction}, created_at {direction}, seq {direction}"
        )
        params: tuple[Any, ...] = (asset_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (asset_id, limit)

        rows = await self.db.fetchall(sql, params)
        return [_row_to_record(row) for row in rows]

    async def insert_record(self, record: AssetRecord) -> AssetRecord:
        """기록 저장

        Returns:
            seq가 채워진 기록
        """
        cursor = await self.db.execute(
            """
            INSERT INTO asset_records (
                record_id, asset_id, user_id, record_type,
                amount_change, value_after, date, note, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.record_id,
                record.asset_id,
                record.user_id,
                record.record_type,
                str(record.amount_change),
                str(record.value_after),
                to_iso(record.date),
                record.note,
                to_iso(record.created_at),
            ),
        )

        return replace(record, seq=cursor.lastrowid or 0)

    async def update_record(
        self,
        record_id: str,
        amount_change: Decimal | None = None,
        value_after: Decimal | None = None,
        date: datetime | None = None,
        note: Any = UNSET,
    ) -> None:
        """기록 필드 갱신 (None/UNSET 필드는 유지)"""
        assignments: list[str] = []
        params: list[Any] = []

        if amount_change is not None:
            assignments.append("amount_change = ?")
            params.append(str(amount_change))
        if value_after is not None:
            assignments.append("value_after = ?")
            params.append(str(value_after))
        if date is not None:
            assignments.append("date = ?")
            params.append(to_iso(date))
        if note is not UNSET:
            assignments.append("note = ?")
            params.append(note)

        if not assignments:
            return

        params.append(record_id)
        await self.db.execute(
            f"UPDATE asset_records SET {', '.join(assignments)} WHERE record_id = ?",
            tuple(params),
        )

    async def apply_changes(self, changes: list[RecordChange]) -> None:
        """재계산 결과 반영 (바뀐 필드만 UPDATE)"""
        for change in changes:
            await self.update_record(
                change.record_id,
                amount_change=change.amount_change,
                value_after=change.value_after,
            )

        if changes:
            logger.debug(f"재계산 결과 반영: {len(changes)}건")

    async def delete_record(self, record_id: str) -> bool:
        """기록 삭제"""
        cursor = await self.db.execute(
            "DELETE FROM asset_records WHERE record_id = ?",
            (record_id,),
        )
        return cursor.rowcount > 0

    async def delete_records_for_asset(self, asset_id: str) -> int:
        """자산의 전체 기록 삭제

        Returns:
            삭제된 기록 수
        """
        cursor = await self.db.execute(
            "DELETE FROM asset_records WHERE asset_id = ?",
            (asset_id,),
        )
        return cursor.rowcount
