"""
자산 Ledger 계산 엔진

I/O 없는 순수 계산 함수.
- compute_apply: 새 기록 적용 (최신 기록 추가 fast path)
- replay: 전체 기록 재계산 (과거 기록 수정/삭제 후)

기록 타입별 규칙:
- RESET (INITIAL): amount_change = 0, value_after = initial_value, running 리셋
- TARGET (REVALUATION): value_after 신뢰, amount_change = value_after - running
- DELTA (그 외): amount_change 신뢰, value_after = running + amount_change
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable

from core.errors import ConsistencyError
from core.ledger.models import AssetRecord, RecordChange, ReplayResult
from core.ledger.types import RecordKind, RecordType, classify
from core.utils.money import ZERO, is_same_amount

logger = logging.getLogger(__name__)


def compute_apply(
    previous: Decimal,
    record_type: RecordType | str,
    raw_amount: Decimal,
) -> tuple[Decimal, Decimal]:
    """새 기록의 증감액/적용 후 가치 계산

    RESET은 자산 생성 시에만 의미가 있으므로 여기서는 DELTA로 처리.

    Args:
        previous: 적용 전 자산 가치 (asset.current_value)
        record_type: 기록 유형
        raw_amount: 사용자 입력 금액

    Returns:
        (amount_change, value_after)
    """
    if classify(record_type) == RecordKind.TARGET:
        value_after = raw_amount
        amount_change = value_after - previous
    else:
        amount_change = raw_amount
        value_after = previous + amount_change

    return amount_change, value_after


def sort_records(records: Iterable[AssetRecord]) -> list[AssetRecord]:
    """(date, created_at, seq) 오름차순 정렬"""
    return sorted(records, key=lambda r: r.sort_key)


def replay(
    records: Iterable[AssetRecord],
    initial_value: Decimal,
    asset_id: str | None = None,
) -> ReplayResult:
    """전체 기록 재계산

    각 기록의 기준 필드(DELTA의 amount_change, TARGET의 value_after)는 유지하고
    파생 필드만 다시 계산한다. 값이 바뀐 기록만 changes에 담는다.

    Args:
        records: 자산의 전체 기록 (순서 무관)
        initial_value: 자산의 최초 가치
        asset_id: 지정하면 모든 기록이 이 자산 소속인지 검증

    Returns:
        ReplayResult

    Raises:
        ConsistencyError: 다른 자산의 기록이 섞여 있는 경우
    """
    ordered = sort_records(records)
    running = initial_value
    result = ReplayResult(final_value=initial_value)
    reset_count = 0

    for record in ordered:
        if asset_id is not None and record.asset_id != asset_id:
            raise ConsistencyError(
                f"Record {record.record_id} belongs to asset {record.asset_id}, "
                f"not {asset_id}"
            )

        kind = classify(record.record_type)

        if kind == RecordKind.RESET:
            reset_count += 1
            running = initial_value
            new_amount_change = ZERO
            new_value_after = initial_value
        elif kind == RecordKind.TARGET:
            new_value_after = record.value_after
            new_amount_change = new_value_after - running
            running = new_value_after
        else:
            new_amount_change = record.amount_change
            new_value_after = running + new_amount_change
            running = new_value_after

        amount_changed = not is_same_amount(new_amount_change, record.amount_change)
        value_changed = not is_same_amount(new_value_after, record.value_after)

        if amount_changed or value_changed:
            result.changes.append(
                RecordChange(
                    record_id=record.record_id,
                    amount_change=new_amount_change if amount_changed else None,
                    value_after=new_value_after if value_changed else None,
                )
            )
            record = replace(
                record,
                amount_change=new_amount_change,
                value_after=new_value_after,
            )

        result.records.append(record)

    if reset_count > 1:
        logger.warning(
            f"{RecordType.INITIAL.value} 기록이 {reset_count}개 존재, 각각 initial_value로 리셋됨",
            extra={"asset_id": asset_id},
        )

    result.final_value = running
    return result
