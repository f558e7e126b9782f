"""
자산 가치 Ledger

자산별 가치 변동 기록(AssetRecord)을 시간순으로 관리.
- Apply: 최신 기록 추가 (fast path)
- Recalculate: 과거 기록 수정/삭제 후 전체 재계산

사용 예시:
```python
from core.ledger import AssetLedger, RecordType

ledger = AssetLedger(db)

asset, initial = await ledger.create_asset(
    user_id="user-1",
    actor_id="user-1",
    name="Laptop",
    asset_type="equipment",
    initial_value="1000",
    currency="USD",
    purchase_date="2024-01-01",
)

asset, record = await ledger.apply_record(
    asset.asset_id, "-150", RecordType.CONSUMPTION, actor_id="user-1",
)

# 과거 기록 수정 후 재계산
asset, record = await ledger.edit_record(record.record_id, amount="-100")
```
"""

from core.ledger.engine import compute_apply, replay, sort_records
from core.ledger.models import Asset, AssetRecord, RecordChange, ReplayResult
from core.ledger.service import AssetLedger, AssetLockRegistry
from core.ledger.store import UNSET, AssetStore
from core.ledger.types import RecordKind, RecordType, classify, parse_record_type

__all__ = [
    # 서비스
    "AssetLedger",
    "AssetLockRegistry",
    "AssetStore",
    "UNSET",
    # 모델
    "Asset",
    "AssetRecord",
    "RecordChange",
    "ReplayResult",
    # 계산
    "compute_apply",
    "replay",
    "sort_records",
    # 타입
    "RecordType",
    "RecordKind",
    "classify",
    "parse_record_type",
]
