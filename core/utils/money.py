"""
금액 연산 유틸리티

모든 금액은 Decimal로 처리 (부동소수점 오차 방지).
DB에는 TEXT(str(Decimal))로 저장하고 읽을 때 Decimal로 복원한다.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.errors import ValidationError

ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """입력값을 Decimal로 변환

    float는 str()을 거쳐 변환하여 이진 표현 오차가 섞이지 않게 한다.

    Args:
        value: Decimal, int, str, float
        field: 에러 메시지용 필드명

    Returns:
        유한한 Decimal 값

    Raises:
        ValidationError: None, bool, 빈 문자열, 숫자가 아닌 값, NaN/Infinity
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    # bool은 int의 하위 타입이므로 먼저 거른다
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be numeric", field=field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError(f"{field} is required", field=field)
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise ValidationError(
                f"{field} must be numeric: {value!r}", field=field
            ) from e
    else:
        raise ValidationError(f"{field} must be numeric", field=field)

    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)

    return result


def quantize_amount(value: Decimal, places: int = 2) -> Decimal:
    """표시용 반올림 (ROUND_HALF_UP)

    Args:
        value: 금액
        places: 소수점 자릿수

    Returns:
        반올림된 금액
    """
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_minor_units(value: Decimal, decimals: int) -> int:
    """최소 단위 정수로 변환

    예: 1700 USDT, decimals=6 → 1700000000

    Args:
        value: 금액
        decimals: 토큰 소수점 자릿수

    Returns:
        최소 단위 정수 (ROUND_HALF_UP)
    """
    scaled = value.scaleb(decimals)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_same_amount(a: Decimal, b: Decimal) -> bool:
    """정확한 Decimal 동등 비교 (Decimal("1.0") == Decimal("1"))"""
    return a.compare(b) == 0
