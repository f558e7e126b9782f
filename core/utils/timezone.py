"""
타임존 유틸리티

내부 저장: UTC ISO-8601 (마이크로초 고정 자릿수) 원칙 준수를 위한 헬퍼 함수.
고정 자릿수로 저장하므로 문자열 정렬 순서와 시간 순서가 일치한다.
"""

from datetime import date, datetime, timezone
from typing import Any

from core.errors import ValidationError


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """DB 저장용 ISO 문자열

    Example:
        >>> to_iso(datetime(2024, 1, 2, tzinfo=timezone.utc))
        '2024-01-02T00:00:00.000000+00:00'
    """
    return to_utc(dt).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    """DB에 저장된 ISO 문자열을 UTC datetime으로 복원"""
    return to_utc(datetime.fromisoformat(value))


def parse_datetime(value: Any, field: str = "date") -> datetime:
    """사용자 입력 날짜 파싱

    datetime, date, ISO 문자열("2024-01-02", "2024-01-02T10:00:00Z" 등) 허용.

    Args:
        value: 입력값
        field: 에러 메시지용 필드명

    Returns:
        UTC datetime

    Raises:
        ValidationError: 해석할 수 없는 값
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str) and value.strip():
        text = value.strip()
        # Python 3.10의 fromisoformat은 "Z" 접미사를 지원하지 않음
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise ValidationError(
                f"{field} is not a valid date: {value!r}", field=field
            ) from e

    raise ValidationError(f"{field} is not a valid date: {value!r}", field=field)
