"""
자산 Ledger 서비스

Ledger Apply / Recalculate 및 기록 수정·삭제를 트랜잭션 단위로 실행.

동시성:
- 같은 자산에 대한 작업은 자산별 asyncio.Lock으로 직렬화 (프로세스 내)
- SQLite BEGIN IMMEDIATE 트랜잭션으로 프로세스 간 쓰기 직렬화
- 서로 다른 자산은 독립적으로 병렬 실행 가능
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator
from weakref import WeakValueDictionary

from core.errors import ConsistencyError, NotFoundError, ValidationError
from core.ledger.engine import compute_apply, replay
from core.ledger.models import Asset, AssetRecord
from core.ledger.store import UNSET, AssetStore
from core.ledger.types import RecordKind, RecordType, classify, record_type_value
from core.types import AssetStatus
from core.utils.money import ZERO, to_decimal
from core.utils.timezone import now_utc, parse_datetime, to_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

INITIAL_RECORD_NOTE = "Initial creation"


class AssetLockRegistry:
    """자산별 asyncio.Lock 관리

    사용 중인 Lock만 유지 (WeakValueDictionary).
    아무도 참조하지 않으면 자동 정리되므로 이벤트 루프가 바뀌어도 안전.
    """

    def __init__(self) -> None:
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def get(self, asset_id: str) -> asyncio.Lock:
        lock = self._locks.get(asset_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[asset_id] = lock
        return lock


# 프로세스 전역 Lock 레지스트리 (요청마다 AssetLedger가 새로 생성되므로 공유)
_default_locks = AssetLockRegistry()


def _require_text(value: Any, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def _require_record_type(value: RecordType | str | None) -> str:
    if isinstance(value, RecordType):
        return value.value
    return record_type_value(_require_text(value, "type"))


class AssetLedger:
    """자산 Ledger 서비스

    Args:
        db: SQLite 어댑터 (쓰기 가능)
        locks: 자산별 Lock 레지스트리 (기본: 프로세스 전역)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        ledger = AssetLedger(db)
        asset, record = await ledger.apply_record(
            asset_id, raw_amount="200", record_type="ADDITION", actor_id="user-1",
        )
        asset = await ledger.recalculate(asset_id)
    ```
    """

    def __init__(self, db: SQLiteAdapter, locks: AssetLockRegistry | None = None):
        self.db = db
        self.store = AssetStore(db)
        self._locks = locks or _default_locks

    @asynccontextmanager
    async def unit_of_work(self, asset_id: str) -> AsyncIterator[AssetStore]:
        """자산 단위 트랜잭션

        블록 안의 모든 읽기/쓰기가 함께 커밋되거나 함께 롤백된다.
        """
        async with self._locks.get(asset_id):
            async with self.db.transaction(immediate=True):
                yield self.store

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_asset(self, asset_id: str) -> Asset:
        """자산 조회

        Raises:
            NotFoundError: 자산 없음
        """
        asset = await self.store.get_asset(asset_id)
        if asset is None:
            raise NotFoundError("asset", asset_id)
        return asset

    async def get_record(self, record_id: str) -> AssetRecord:
        """기록 조회

        Raises:
            NotFoundError: 기록 없음
        """
        record = await self.store.get_record(record_id)
        if record is None:
            raise NotFoundError("record", record_id)
        return record

    async def list_assets(
        self,
        user_id: str | None = None,
        asset_type: str | None = None,
        status: str | None = AssetStatus.ACTIVE.value,
    ) -> list[Asset]:
        """자산 목록 조회"""
        return await self.store.list_assets(
            user_id=user_id,
            asset_type=asset_type,
            status=status,
        )

    async def list_records(
        self,
        asset_id: str,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[AssetRecord]:
        """자산 기록 조회 (기본 최신순)

        Raises:
            NotFoundError: 자산 없음
        """
        await self.get_asset(asset_id)
        return await self.store.list_records(asset_id, descending=descending, limit=limit)

    # -------------------------------------------------------------------------
    # 자산 생성 / 수정 / 삭제
    # -------------------------------------------------------------------------

    async def create_asset(
        self,
        user_id: str,
        actor_id: str,
        name: str,
        asset_type: str,
        initial_value: Any,
        currency: str,
        purchase_date: Any,
        description: str | None = None,
        quantity: Any = None,
        unit: str | None = None,
    ) -> tuple[Asset, AssetRecord]:
        """자산 생성 + INITIAL 기록

        Args:
            user_id: 소유자 ID
            actor_id: 생성한 사용자 ID (관리자가 대신 생성할 수 있음)
            name: 자산명
            asset_type: 분류 태그
            initial_value: 최초 가치
            currency: 통화 코드
            purchase_date: 취득일 (INITIAL 기록의 date)

        Returns:
            (생성된 자산, INITIAL 기록)

        Raises:
            ValidationError: 필수값 누락, 금액/날짜 형식 오류
        """
        name = _require_text(name, "name")
        asset_type = _require_text(asset_type, "type")
        currency = _require_text(currency, "currency").upper()
        value = to_decimal(initial_value, "initial_value")
        purchased_at = parse_datetime(purchase_date, "purchase_date")
        qty = to_decimal(quantity, "quantity") if quantity is not None else None

        now = now_utc()
        asset = Asset(
            asset_id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            description=description,
            asset_type=asset_type,
            currency=currency,
            initial_value=value,
            current_value=value,
            quantity=qty,
            unit=unit,
            status=AssetStatus.ACTIVE.value,
            purchase_date=purchased_at,
            created_at=now,
            updated_at=now,
        )

        async with self.unit_of_work(asset.asset_id) as store:
            await store.insert_asset(asset)
            record = await store.insert_record(
                AssetRecord(
                    record_id=str(uuid.uuid4()),
                    asset_id=asset.asset_id,
                    user_id=actor_id,
                    record_type=RecordType.INITIAL.value,
                    amount_change=ZERO,
                    value_after=value,
                    date=purchased_at,
                    created_at=now,
                    note=INITIAL_RECORD_NOTE,
                )
            )

        logger.info(
            f"자산 생성: {asset.name} ({asset.initial_value} {asset.currency})",
            extra={"asset_id": asset.asset_id, "user_id": user_id, "actor_id": actor_id},
        )
        return asset, record

    async def update_asset(self, asset_id: str, fields: dict[str, Any]) -> Asset:
        """자산 메타데이터 수정 (가치 관련 필드는 변경 불가)

        Raises:
            NotFoundError: 자산 없음
            ValidationError: 허용되지 않은 필드 또는 형식 오류
        """
        updates: dict[str, Any] = {}
        for key, value in fields.items():
            column = "asset_type" if key == "type" else key
            if column in ("name", "asset_type", "currency"):
                value = _require_text(value, key)
                if column == "currency":
                    value = value.upper()
            elif column == "quantity" and value is not None:
                value = to_decimal(value, "quantity")
            updates[column] = value

        async with self.unit_of_work(asset_id) as store:
            if await store.get_asset(asset_id) is None:
                raise NotFoundError("asset", asset_id)
            try:
                await store.update_asset_fields(asset_id, updates)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            updated = await store.get_asset(asset_id)

        assert updated is not None
        return updated

    async def delete_asset(self, asset_id: str) -> None:
        """자산 삭제 (기록 먼저 삭제, cascade)

        Raises:
            NotFoundError: 자산 없음
        """
        async with self.unit_of_work(asset_id) as store:
            if await store.get_asset(asset_id) is None:
                raise NotFoundError("asset", asset_id)
            deleted_records = await store.delete_records_for_asset(asset_id)
            await store.delete_asset(asset_id)

        logger.info(
            f"자산 삭제: 기록 {deleted_records}건 포함",
            extra={"asset_id": asset_id},
        )

    # -------------------------------------------------------------------------
    # Ledger Apply (최신 기록 추가)
    # -------------------------------------------------------------------------

    async def apply_record(
        self,
        asset_id: str,
        raw_amount: Any,
        record_type: RecordType | str,
        actor_id: str,
        date: Any = None,
        note: str | None = None,
    ) -> tuple[Asset, AssetRecord]:
        """새 기록 적용

        TARGET(REVALUATION): raw_amount = 목표 가치
        그 외: raw_amount = 증감액 (감소는 음수)

        기록 저장과 자산 가치 갱신은 하나의 트랜잭션.
        새 기록이 (date, created_at) 기준 최신 기록보다 앞서면
        과거 기록 삽입과 동일하게 기준 필드만 저장 후 전체 재계산.

        Returns:
            (갱신된 자산, 새 기록)

        Raises:
            ValidationError: 금액 누락/숫자 아님, 타입 누락, 날짜 형식 오류
            NotFoundError: 자산 없음
        """
        type_value = _require_record_type(record_type)
        amount = to_decimal(raw_amount, "amount")
        event_date = parse_datetime(date) if date is not None else now_utc()

        if classify(type_value) == RecordKind.RESET:
            logger.warning(
                f"{type_value} 기록을 증감액으로 적용 (리셋은 생성 시에만 적용)",
                extra={"asset_id": asset_id},
            )

        async with self.unit_of_work(asset_id) as store:
            asset = await store.get_asset(asset_id)
            if asset is None:
                raise NotFoundError("asset", asset_id)

            created_at = now_utc()
            latest = await store.list_records(asset_id, descending=True, limit=1)
            if latest and (event_date, created_at) < (latest[0].date, latest[0].created_at):
                logger.info(
                    f"최신 기록({to_iso(latest[0].date)})보다 이전 날짜, 재계산으로 적용",
                    extra={"asset_id": asset_id},
                )
                updated, record = await self._insert_and_replay(
                    store,
                    asset,
                    self._basis_record(
                        asset_id, actor_id, type_value, amount, event_date, note
                    ),
                )
                return updated, record

            amount_change, value_after = compute_apply(
                asset.current_value, type_value, amount
            )

            record = await store.insert_record(
                AssetRecord(
                    record_id=str(uuid.uuid4()),
                    asset_id=asset_id,
                    user_id=actor_id,
                    record_type=type_value,
                    amount_change=amount_change,
                    value_after=value_after,
                    date=event_date,
                    created_at=created_at,
                    note=note,
                )
            )
            await store.update_asset_value(asset_id, value_after)

        logger.info(
            f"기록 적용: {type_value} {amount_change:+} → {value_after}",
            extra={"asset_id": asset_id, "record_id": record.record_id},
        )
        return asset.with_value(value_after), record

    # -------------------------------------------------------------------------
    # Ledger Recalculate (전체 재계산)
    # -------------------------------------------------------------------------

    async def recalculate(self, asset_id: str) -> Asset:
        """전체 기록 재계산

        Raises:
            NotFoundError: 자산 없음
            ConsistencyError: 재계산 중 불변식 위반 (트랜잭션 롤백)
        """
        async with self.unit_of_work(asset_id) as store:
            asset = await store.get_asset(asset_id)
            if asset is None:
                raise NotFoundError("asset", asset_id)
            return await self._replay(store, asset)

    async def insert_record(
        self,
        asset_id: str,
        raw_amount: Any,
        record_type: RecordType | str,
        actor_id: str,
        date: Any,
        note: str | None = None,
    ) -> tuple[Asset, AssetRecord]:
        """과거 시점 기록 삽입 + 재계산

        date가 최신이 아닐 수 있는 경우 사용.
        기준 필드(TARGET은 value_after, 그 외는 amount_change)만 저장 후 재계산.

        Returns:
            (갱신된 자산, 재계산이 반영된 새 기록)
        """
        type_value = _require_record_type(record_type)
        amount = to_decimal(raw_amount, "amount")
        event_date = parse_datetime(date)

        async with self.unit_of_work(asset_id) as store:
            asset = await store.get_asset(asset_id)
            if asset is None:
                raise NotFoundError("asset", asset_id)

            return await self._insert_and_replay(
                store,
                asset,
                self._basis_record(asset_id, actor_id, type_value, amount, event_date, note),
            )

    async def edit_record(
        self,
        record_id: str,
        amount: Any = None,
        date: Any = None,
        note: Any = UNSET,
    ) -> tuple[Asset, AssetRecord]:
        """기록 수정 + 재계산

        amount 해석:
        - TARGET(REVALUATION): 새 목표 가치 (value_after)
        - 그 외: 새 증감액 (amount_change)

        Returns:
            (갱신된 자산, 재계산이 반영된 기록)

        Raises:
            NotFoundError: 기록 없음
            ValidationError: 금액/날짜 형식 오류
            ConsistencyError: 기록의 자산이 존재하지 않음
        """
        new_amount = to_decimal(amount, "amount") if amount is not None else None
        new_date = parse_datetime(date) if date is not None else None

        existing = await self.get_record(record_id)

        async with self.unit_of_work(existing.asset_id) as store:
            record = await store.get_record(record_id)
            if record is None:
                raise NotFoundError("record", record_id)
            asset = await self._asset_for_record(store, record)

            amount_change: Decimal | None = None
            value_after: Decimal | None = None
            if new_amount is not None:
                if record.kind == RecordKind.TARGET:
                    value_after = new_amount
                else:
                    amount_change = new_amount

            await store.update_record(
                record_id,
                amount_change=amount_change,
                value_after=value_after,
                date=new_date,
                note=note,
            )
            updated = await self._replay(store, asset)
            stored = await store.get_record(record_id)

        assert stored is not None
        logger.info(
            "기록 수정 후 재계산 완료",
            extra={"asset_id": asset.asset_id, "record_id": record_id},
        )
        return updated, stored

    async def delete_record(self, record_id: str) -> Asset:
        """기록 삭제 + 재계산

        Returns:
            갱신된 자산

        Raises:
            NotFoundError: 기록 없음
            ConsistencyError: 기록의 자산이 존재하지 않음
        """
        existing = await self.get_record(record_id)

        async with self.unit_of_work(existing.asset_id) as store:
            record = await store.get_record(record_id)
            if record is None:
                raise NotFoundError("record", record_id)
            asset = await self._asset_for_record(store, record)

            await store.delete_record(record_id)
            updated = await self._replay(store, asset)

        logger.info(
            "기록 삭제 후 재계산 완료",
            extra={"asset_id": asset.asset_id, "record_id": record_id},
        )
        return updated

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    async def _asset_for_record(self, store: AssetStore, record: AssetRecord) -> Asset:
        asset = await store.get_asset(record.asset_id)
        if asset is None:
            raise ConsistencyError(
                f"Record {record.record_id} references missing asset {record.asset_id}"
            )
        return asset

    @staticmethod
    def _basis_record(
        asset_id: str,
        actor_id: str,
        type_value: str,
        amount: Decimal,
        event_date: datetime,
        note: str | None,
    ) -> AssetRecord:
        """기준 필드만 채운 기록 (TARGET은 value_after, 그 외는 amount_change)"""
        if classify(type_value) == RecordKind.TARGET:
            amount_change, value_after = ZERO, amount
        else:
            amount_change, value_after = amount, ZERO

        return AssetRecord(
            record_id=str(uuid.uuid4()),
            asset_id=asset_id,
            user_id=actor_id,
            record_type=type_value,
            amount_change=amount_change,
            value_after=value_after,
            date=event_date,
            created_at=now_utc(),
            note=note,
        )

    async def _insert_and_replay(
        self, store: AssetStore, asset: Asset, record: AssetRecord
    ) -> tuple[Asset, AssetRecord]:
        """unit of work 안에서 호출: 기록 삽입 후 재계산"""
        inserted = await store.insert_record(record)
        updated = await self._replay(store, asset)
        stored = await store.get_record(inserted.record_id)
        assert stored is not None
        return updated, stored

    async def _replay(self, store: AssetStore, asset: Asset) -> Asset:
        """unit of work 안에서 호출: 재계산 결과와 최종 가치를 저장"""
        records = await store.list_records(asset.asset_id)
        result = replay(records, asset.initial_value, asset_id=asset.asset_id)

        await store.apply_changes(result.changes)
        await store.update_asset_value(asset.asset_id, result.final_value)

        logger.debug(
            f"재계산: 기록 {len(result.records)}건, 변경 {len(result.changes)}건, "
            f"최종 가치 {result.final_value}",
            extra={"asset_id": asset.asset_id},
        )
        return asset.with_value(result.final_value)
