"""
어댑터 공통 데이터 모델

외부 API 응답을 표준화한 모델.
모든 금액/환율은 Decimal 타입 사용.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class FetchedRate:
    """환율 API 조회 결과

    Attributes:
        currency: 조회한 통화 코드 (API 코드, 별칭 해석 후)
        rate: 1 통화 = rate USD
        fetched_at: 제공자가 알려준 갱신 시각 (없으면 조회 시각)
        source: 제공자 이름
    """

    currency: str
    rate: Decimal
    fetched_at: datetime
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "rate": str(self.rate),
            "fetched_at": self.fetched_at.isoformat(),
            "source": self.source,
        }
