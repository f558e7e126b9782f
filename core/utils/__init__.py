"""
유틸리티 패키지

금액(Decimal) 연산, 타임존 처리 등 공통 유틸리티
"""

from core.utils.money import (
    ZERO,
    to_decimal,
    quantize_amount,
    to_minor_units,
    is_same_amount,
)
from core.utils.timezone import (
    now_utc,
    to_utc,
    to_iso,
    from_iso,
    parse_datetime,
)

__all__ = [
    "ZERO",
    "to_decimal",
    "quantize_amount",
    "to_minor_units",
    "is_same_amount",
    "now_utc",
    "to_utc",
    "to_iso",
    "from_iso",
    "parse_datetime",
]
