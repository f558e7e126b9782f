"""
자산 기록 타입 정의

RecordType / RecordKind Enum과 기록 분류 함수.
"""

from enum import Enum


class RecordType(str, Enum):
    """자산 기록 유형

    str을 상속하여 JSON 직렬화 가능.
    DB에는 자유 문자열로 저장되며, 아래에 없는 값은 사용자 정의 타입(Other)으로 취급.
    """

    INITIAL = "INITIAL"  # 생성 시 기준점 (initial_value로 리셋)
    REVALUATION = "REVALUATION"  # 재평가 (목표 가치 입력)
    ADDITION = "ADDITION"  # 추가 (증감액 입력)
    CONSUMPTION = "CONSUMPTION"  # 소비 (증감액 입력, 감소는 음수)


class RecordKind(str, Enum):
    """기록의 amount 필드 해석 방식

    - DELTA: amount_change가 기준값, value_after는 파생
    - TARGET: value_after가 기준값, amount_change는 파생
    - RESET: running value를 initial_value로 리셋
    """

    DELTA = "DELTA"
    TARGET = "TARGET"
    RESET = "RESET"


_KIND_BY_TYPE: dict[RecordType, RecordKind] = {
    RecordType.INITIAL: RecordKind.RESET,
    RecordType.REVALUATION: RecordKind.TARGET,
    RecordType.ADDITION: RecordKind.DELTA,
    RecordType.CONSUMPTION: RecordKind.DELTA,
}


def parse_record_type(value: "RecordType | str") -> "RecordType | str":
    """기록 타입 정규화

    알려진 타입은 대소문자 무관하게 RecordType으로 변환,
    그 외 문자열은 사용자 정의 타입으로 그대로 반환.
    """
    if isinstance(value, RecordType):
        return value

    text = str(value).strip()
    try:
        return RecordType(text.upper())
    except ValueError:
        return text


def classify(record_type: "RecordType | str") -> RecordKind:
    """기록 타입 분류 (순수 함수, 예외 없음)

    Args:
        record_type: RecordType 또는 임의 문자열

    Returns:
        INITIAL → RESET, REVALUATION → TARGET, 그 외 전부 DELTA
    """
    parsed = parse_record_type(record_type)
    if isinstance(parsed, RecordType):
        return _KIND_BY_TYPE[parsed]
    return RecordKind.DELTA


def record_type_value(record_type: "RecordType | str") -> str:
    """DB 저장용 문자열"""
    parsed = parse_record_type(record_type)
    if isinstance(parsed, RecordType):
        return parsed.value
    return parsed
