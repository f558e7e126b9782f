"""
자산 Ledger 도메인 모델

Asset / AssetRecord 데이터클래스.
모든 금액은 Decimal, 모든 시간은 UTC datetime.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.ledger.types import RecordKind, classify
from core.utils.timezone import to_iso


@dataclass(frozen=True)
class Asset:
    """자산

    Attributes:
        asset_id: 자산 ID
        user_id: 소유자 ID
        name: 자산명
        asset_type: 분류 태그 (자유 문자열)
        currency: 통화 코드
        initial_value: 최초 가치 (생성 시 1회 설정)
        current_value: 현재 가치 (마지막 기록의 value_after)
        status: 상태 (ACTIVE 등 자유 문자열)
        purchase_date: 취득일
        description: 설명
        quantity: 수량
        unit: 단위
        created_at: 생성 시간
        updated_at: 수정 시간
    """

    asset_id: str
    user_id: str
    name: str
    asset_type: str
    currency: str
    initial_value: Decimal
    current_value: Decimal
    status: str
    purchase_date: datetime
    description: str | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def with_value(self, current_value: Decimal) -> "Asset":
        """current_value만 바꾼 사본"""
        return replace(self, current_value=current_value)

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 딕셔너리 (Decimal은 문자열)"""
        return {
            "id": self.asset_id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "type": self.asset_type,
            "currency": self.currency,
            "initial_value": str(self.initial_value),
            "current_value": str(self.current_value),
            "quantity": str(self.quantity) if self.quantity is not None else None,
            "unit": self.unit,
            "status": self.status,
            "purchase_date": to_iso(self.purchase_date),
            "created_at": to_iso(self.created_at) if self.created_at else None,
            "updated_at": to_iso(self.updated_at) if self.updated_at else None,
        }


@dataclass(frozen=True)
class AssetRecord:
    """자산 가치 변동 기록

    정렬 키는 (date, created_at, seq).
    seq는 저장소가 부여하는 삽입 순번 (같은 시각 생성 시 순서 보존).

    Attributes:
        record_id: 기록 ID
        asset_id: 소속 자산 ID
        user_id: 기록한 사용자 ID
        record_type: 기록 유형 (RecordType 값 또는 사용자 정의 문자열)
        amount_change: 증감액
        value_after: 기록 적용 직후 가치
        date: 이벤트 시간 (사용자 입력)
        created_at: 생성 시간 (동일 date 정렬용)
        note: 메모
        seq: 삽입 순번
    """

    record_id: str
    asset_id: str
    user_id: str
    record_type: str
    amount_change: Decimal
    value_after: Decimal
    date: datetime
    created_at: datetime
    note: str | None = None
    seq: int = 0

    @property
    def kind(self) -> RecordKind:
        """amount 필드 해석 방식"""
        return classify(self.record_type)

    @property
    def sort_key(self) -> tuple[datetime, datetime, int]:
        """시간순 정렬 키"""
        return (self.date, self.created_at, self.seq)

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 딕셔너리 (Decimal은 문자열)"""
        return {
            "id": self.record_id,
            "asset_id": self.asset_id,
            "user_id": self.user_id,
            "type": self.record_type,
            "amount_change": str(self.amount_change),
            "value_after": str(self.value_after),
            "date": to_iso(self.date),
            "note": self.note,
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class RecordChange:
    """재계산 결과 변경된 파생 필드

    변경되지 않은 필드는 None.
    """

    record_id: str
    amount_change: Decimal | None = None
    value_after: Decimal | None = None


@dataclass
class ReplayResult:
    """재계산 결과

    Attributes:
        records: 재계산이 반영된 기록 (시간순)
        changes: 실제로 값이 바뀐 기록 목록 (DB 쓰기 대상)
        final_value: 마지막 기록 이후 running value
    """

    records: list[AssetRecord] = field(default_factory=list)
    changes: list[RecordChange] = field(default_factory=list)
    final_value: Decimal = Decimal("0")
