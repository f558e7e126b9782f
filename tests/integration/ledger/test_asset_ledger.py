"""
AssetLedger 통합 테스트

실제 SQLite DB로 Apply / Recalculate / 기록 수정·삭제 흐름 검증.
"""

import asyncio
from decimal import Decimal
from pathlib import Path

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.errors import ConsistencyError, NotFoundError, ValidationError
from core.ledger.service import INITIAL_RECORD_NOTE, AssetLedger
from core.ledger.types import RecordType


async def create_sample_asset(ledger: AssetLedger, initial_value: str = "1000"):
    return await ledger.create_asset(
        user_id="user-1",
        actor_id="user-1",
        name="Camera",
        asset_type="PHYSICAL",
        initial_value=initial_value,
        currency="usd",
        purchase_date="2024-01-01",
    )


def assert_chain_consistent(records) -> None:
    """value_after[i] == value_after[i-1] + amount_change[i] (시간순)"""
    for previous, current in zip(records, records[1:]):
        if current.record_type == RecordType.INITIAL.value:
            continue
        assert current.value_after == previous.value_after + current.amount_change


class TestCreateAsset:
    """자산 생성 테스트"""

    @pytest.mark.asyncio
    async def test_creates_initial_record(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)

        asset, record = await create_sample_asset(ledger)

        assert asset.currency == "USD"
        assert asset.current_value == Decimal("1000")
        assert record.record_type == "INITIAL"
        assert record.amount_change == Decimal("0")
        assert record.value_after == Decimal("1000")
        assert record.note == INITIAL_RECORD_NOTE

        stored = await ledger.get_asset(asset.asset_id)
        assert stored.initial_value == Decimal("1000")
        assert stored.purchase_date == record.date

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "  "},
            {"initial_value": "abc"},
            {"initial_value": None},
            {"purchase_date": "yesterday"},
        ],
    )
    async def test_validation(self, db: SQLiteAdapter, overrides: dict) -> None:
        ledger = AssetLedger(db)
        params = {
            "user_id": "user-1",
            "actor_id": "user-1",
            "name": "Camera",
            "asset_type": "PHYSICAL",
            "initial_value": "1000",
            "currency": "USD",
            "purchase_date": "2024-01-01",
        }
        params.update(overrides)

        with pytest.raises(ValidationError):
            await ledger.create_asset(**params)

        assert await ledger.list_assets(status=None) == []


class TestApplyRecord:
    """Ledger Apply 테스트"""

    @pytest.mark.asyncio
    async def test_addition_then_revaluation(self, db: SQLiteAdapter) -> None:
        """1000 → ADDITION 200 → 1200 → REVALUATION 1500 (증감 300)"""
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        asset, addition = await ledger.apply_record(
            asset.asset_id, "200", RecordType.ADDITION, actor_id="user-1"
        )
        assert addition.amount_change == Decimal("200")
        assert addition.value_after == Decimal("1200")
        assert asset.current_value == Decimal("1200")

        asset, revaluation = await ledger.apply_record(
            asset.asset_id, 1500, "REVALUATION", actor_id="user-1"
        )
        assert revaluation.amount_change == Decimal("300")
        assert revaluation.value_after == Decimal("1500")

        stored = await ledger.get_asset(asset.asset_id)
        assert stored.current_value == Decimal("1500")

    @pytest.mark.asyncio
    async def test_custom_type_is_delta(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        asset, record = await ledger.apply_record(
            asset.asset_id, "-100.50", "Depreciation", actor_id="user-1"
        )

        assert record.record_type == "Depreciation"
        assert asset.current_value == Decimal("899.50")

    @pytest.mark.asyncio
    async def test_back_dated_record_is_replayed(self, db: SQLiteAdapter) -> None:
        """최신 기록보다 이전 날짜 적용 시 재계산으로 끼워 넣음"""
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)
        _, june = await ledger.apply_record(
            asset.asset_id, "200", "ADDITION", actor_id="user-1", date="2024-06-01"
        )

        updated, march = await ledger.apply_record(
            asset.asset_id, "100", "ADDITION", actor_id="user-1", date="2024-03-01"
        )

        assert march.amount_change == Decimal("100")
        assert march.value_after == Decimal("1100")
        assert (await ledger.get_record(june.record_id)).value_after == Decimal("1300")

        records = await ledger.list_records(asset.asset_id, descending=False)
        assert [r.record_id for r in records[1:]] == [march.record_id, june.record_id]
        assert_chain_consistent(records)
        assert updated.current_value == records[-1].value_after == Decimal("1300")
        assert (await ledger.get_asset(asset.asset_id)).current_value == Decimal("1300")

    @pytest.mark.asyncio
    async def test_back_dated_revaluation_keeps_target(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)
        await ledger.apply_record(
            asset.asset_id, "200", "ADDITION", actor_id="user-1", date="2024-06-01"
        )

        updated, reval = await ledger.apply_record(
            asset.asset_id, "800", "REVALUATION", actor_id="user-1", date="2024-03-01"
        )

        assert reval.value_after == Decimal("800")
        assert reval.amount_change == Decimal("-200")
        assert updated.current_value == Decimal("1000")

    @pytest.mark.asyncio
    async def test_future_purchase_date_without_record_date(self, db: SQLiteAdapter) -> None:
        """취득일이 미래이면 날짜 없는 기록은 INITIAL 앞에 위치"""
        ledger = AssetLedger(db)
        asset, initial = await ledger.create_asset(
            user_id="user-1",
            actor_id="user-1",
            name="Preorder",
            asset_type="PHYSICAL",
            initial_value="1000",
            currency="USD",
            purchase_date="2999-01-01",
        )

        updated, record = await ledger.apply_record(
            asset.asset_id, "50", "ADDITION", actor_id="user-1"
        )

        records = await ledger.list_records(asset.asset_id, descending=False)
        assert [r.record_id for r in records] == [record.record_id, initial.record_id]
        assert updated.current_value == records[-1].value_after == Decimal("1000")

    @pytest.mark.asyncio
    async def test_missing_asset(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)

        with pytest.raises(NotFoundError):
            await ledger.apply_record("missing", "1", "ADDITION", actor_id="user-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount,record_type", [(None, "ADDITION"), ("x", "ADDITION"), ("1", "")])
    async def test_invalid_input_writes_nothing(
        self, db: SQLiteAdapter, amount: object, record_type: str
    ) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        with pytest.raises(ValidationError):
            await ledger.apply_record(asset.asset_id, amount, record_type, actor_id="user-1")

        assert len(await ledger.list_records(asset.asset_id)) == 1
        assert (await ledger.get_asset(asset.asset_id)).current_value == Decimal("1000")

    @pytest.mark.asyncio
    async def test_concurrent_applies_are_serialized(self, db: SQLiteAdapter) -> None:
        """같은 자산 동시 적용 시 갱신 유실 없음"""
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        await asyncio.gather(*[
            ledger.apply_record(asset.asset_id, "10", "ADDITION", actor_id="user-1")
            for _ in range(10)
        ])

        stored = await ledger.get_asset(asset.asset_id)
        records = await ledger.list_records(asset.asset_id, descending=False)

        assert stored.current_value == Decimal("1100")
        assert len(records) == 11
        assert sorted(r.value_after for r in records[1:]) == [
            Decimal(1000 + 10 * i) for i in range(1, 11)
        ]

    @pytest.mark.asyncio
    async def test_different_assets_on_separate_connections(self, tmp_path: Path) -> None:
        db_path = tmp_path / "parallel.db"
        async with SQLiteAdapter(db_path) as setup_db:
            await init_schema(setup_db)
            first, _ = await create_sample_asset(AssetLedger(setup_db))
            second, _ = await create_sample_asset(AssetLedger(setup_db), "500")

        async with SQLiteAdapter(db_path) as db1, SQLiteAdapter(db_path) as db2:
            results = await asyncio.gather(
                AssetLedger(db1).apply_record(first.asset_id, "1", "ADDITION", actor_id="u"),
                AssetLedger(db2).apply_record(second.asset_id, "2", "ADDITION", actor_id="u"),
            )

            assert results[0][0].current_value == Decimal("1001")
            assert results[1][0].current_value == Decimal("502")
            assert (await AssetLedger(db1).get_asset(second.asset_id)).current_value == Decimal("502")


class TestRecalculate:
    """재계산 / 기록 수정·삭제 테스트"""

    async def _history(self, ledger: AssetLedger):
        """INITIAL(1일) → ADDITION 200(2일) → REVALUATION 1500(3일)"""
        asset, _ = await create_sample_asset(ledger)
        _, addition = await ledger.apply_record(
            asset.asset_id, "200", "ADDITION", actor_id="user-1", date="2024-01-02"
        )
        _, revaluation = await ledger.apply_record(
            asset.asset_id, "1500", "REVALUATION", actor_id="user-1", date="2024-01-03"
        )
        return asset, addition, revaluation

    @pytest.mark.asyncio
    async def test_edit_past_record(self, db: SQLiteAdapter) -> None:
        """과거 ADDITION 200 → 500 수정 시 REVALUATION 증감 0"""
        ledger = AssetLedger(db)
        asset, addition, revaluation = await self._history(ledger)

        updated, edited = await ledger.edit_record(addition.record_id, amount="500")

        assert edited.amount_change == Decimal("500")
        assert edited.value_after == Decimal("1500")
        reval = await ledger.get_record(revaluation.record_id)
        assert reval.amount_change == Decimal("0")
        assert reval.value_after == Decimal("1500")
        assert updated.current_value == Decimal("1500")
        assert (await ledger.get_asset(asset.asset_id)).current_value == Decimal("1500")

    @pytest.mark.asyncio
    async def test_edit_revaluation_sets_target(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, addition, revaluation = await self._history(ledger)

        updated, edited = await ledger.edit_record(revaluation.record_id, amount="1000")

        assert edited.value_after == Decimal("1000")
        assert edited.amount_change == Decimal("-200")
        assert updated.current_value == Decimal("1000")

        # 다른 기록의 기준 필드는 그대로
        kept = await ledger.get_record(addition.record_id)
        assert kept.amount_change == Decimal("200")
        assert kept.value_after == Decimal("1200")
        initial = (await ledger.list_records(asset.asset_id, descending=False))[0]
        assert initial.value_after == Decimal("1000")

    @pytest.mark.asyncio
    async def test_edit_date_reorders(self, db: SQLiteAdapter) -> None:
        """ADDITION을 REVALUATION 이후로 옮기면 최종 가치 1700"""
        ledger = AssetLedger(db)
        asset, addition, revaluation = await self._history(ledger)

        updated, _ = await ledger.edit_record(addition.record_id, date="2024-01-04")

        reval = await ledger.get_record(revaluation.record_id)
        assert reval.amount_change == Decimal("500")
        assert updated.current_value == Decimal("1700")

    @pytest.mark.asyncio
    async def test_edit_note_only(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        _, addition, _ = await self._history(ledger)

        _, edited = await ledger.edit_record(addition.record_id, note="lens")
        assert edited.note == "lens"

        _, cleared = await ledger.edit_record(addition.record_id, note=None)
        assert cleared.note is None

    @pytest.mark.asyncio
    async def test_delete_record(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, addition, revaluation = await self._history(ledger)

        updated = await ledger.delete_record(addition.record_id)

        reval = await ledger.get_record(revaluation.record_id)
        assert reval.amount_change == Decimal("500")
        assert updated.current_value == Decimal("1500")
        with pytest.raises(NotFoundError):
            await ledger.get_record(addition.record_id)

    @pytest.mark.asyncio
    async def test_insert_historical_record(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, addition, revaluation = await self._history(ledger)

        updated, inserted = await ledger.insert_record(
            asset.asset_id, "-100", "CONSUMPTION", actor_id="user-1", date="2024-01-02T12:00:00Z"
        )

        assert inserted.value_after == Decimal("1100")
        reval = await ledger.get_record(revaluation.record_id)
        assert reval.amount_change == Decimal("400")
        assert updated.current_value == Decimal("1500")

    @pytest.mark.asyncio
    async def test_recalculate_is_idempotent(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _, _ = await self._history(ledger)

        before = await ledger.list_records(asset.asset_id, descending=False)
        first = await ledger.recalculate(asset.asset_id)
        second = await ledger.recalculate(asset.asset_id)
        after = await ledger.list_records(asset.asset_id, descending=False)

        assert first.current_value == second.current_value == Decimal("1500")
        assert before == after
        assert_chain_consistent(after)

    @pytest.mark.asyncio
    async def test_recalculate_repairs_drifted_values(self, db: SQLiteAdapter) -> None:
        """DB에 잘못 저장된 파생 필드를 복구"""
        ledger = AssetLedger(db)
        asset, addition, _ = await self._history(ledger)
        await db.execute(
            "UPDATE asset_records SET value_after = '9999' WHERE record_id = ?",
            (addition.record_id,),
        )
        await db.execute(
            "UPDATE assets SET current_value = '1' WHERE asset_id = ?",
            (asset.asset_id,),
        )
        await db.commit()

        updated = await ledger.recalculate(asset.asset_id)

        assert updated.current_value == Decimal("1500")
        assert (await ledger.get_record(addition.record_id)).value_after == Decimal("1200")

    @pytest.mark.asyncio
    async def test_consistency_error_rolls_back(
        self, db: SQLiteAdapter, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """재계산 중 오류 시 기록 수정도 롤백"""
        ledger = AssetLedger(db)
        asset, addition, _ = await self._history(ledger)

        def broken_replay(*args, **kwargs):
            raise ConsistencyError("broken")

        monkeypatch.setattr("core.ledger.service.replay", broken_replay)

        with pytest.raises(ConsistencyError):
            await ledger.edit_record(addition.record_id, amount="500")

        assert (await ledger.get_record(addition.record_id)).amount_change == Decimal("200")
        assert (await ledger.get_asset(asset.asset_id)).current_value == Decimal("1500")

    @pytest.mark.asyncio
    async def test_missing_record(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)

        with pytest.raises(NotFoundError):
            await ledger.edit_record("missing", amount="1")
        with pytest.raises(NotFoundError):
            await ledger.delete_record("missing")


class TestAssetMaintenance:
    """자산 수정 / 삭제 / 목록"""

    @pytest.mark.asyncio
    async def test_update_metadata(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        updated = await ledger.update_asset(
            asset.asset_id, {"name": "Drone", "type": "GADGET", "status": "INACTIVE"}
        )

        assert updated.name == "Drone"
        assert updated.asset_type == "GADGET"
        assert updated.status == "INACTIVE"
        assert updated.current_value == Decimal("1000")

    @pytest.mark.asyncio
    async def test_update_value_fields_rejected(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)

        with pytest.raises(ValidationError):
            await ledger.update_asset(asset.asset_id, {"current_value": "1"})

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        asset, _ = await create_sample_asset(ledger)
        await ledger.apply_record(asset.asset_id, "1", "ADDITION", actor_id="user-1")

        await ledger.delete_asset(asset.asset_id)

        with pytest.raises(NotFoundError):
            await ledger.get_asset(asset.asset_id)
        row = await db.fetchone(
            "SELECT COUNT(*) FROM asset_records WHERE asset_id = ?", (asset.asset_id,)
        )
        assert row[0] == 0
        with pytest.raises(NotFoundError):
            await ledger.delete_asset(asset.asset_id)

    @pytest.mark.asyncio
    async def test_list_assets_filters(self, db: SQLiteAdapter) -> None:
        ledger = AssetLedger(db)
        mine, _ = await create_sample_asset(ledger)
        other, _ = await ledger.create_asset(
            user_id="user-2",
            actor_id="admin-1",
            name="Wallet",
            asset_type="CRYPTO",
            initial_value="5",
            currency="USDT",
            purchase_date="2024-02-01",
        )
        await ledger.update_asset(other.asset_id, {"status": "INACTIVE"})

        assert [a.asset_id for a in await ledger.list_assets(user_id="user-1")] == [mine.asset_id]
        assert await ledger.list_assets(user_id="user-2") == []
        assert len(await ledger.list_assets(status=None)) == 2
        assert [
            a.asset_id for a in await ledger.list_assets(asset_type="CRYPTO", status=None)
        ] == [other.asset_id]
