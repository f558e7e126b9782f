"""
도메인 예외 정의

Ledger 계층에서 발생하는 예외 분류.
Web 라우트에서 HTTP 상태 코드로 변환된다.

- ValidationError: 금액/날짜 등 입력값 오류 (400)
- NotFoundError: 자산/기록 ID 미존재 (404)
- PermissionDeniedError: 소유자도 관리자도 아닌 호출자 (403)
- ConsistencyError: 재계산 중 불변식 위반 (500, 트랜잭션 중단)
"""


class LedgerError(Exception):
    """Ledger 예외 베이스"""

    pass


class ValidationError(LedgerError):
    """입력값 검증 실패

    Args:
        message: 에러 메시지
        field: 문제가 된 필드명 (선택)
    """

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class NotFoundError(LedgerError):
    """자산 또는 기록을 찾을 수 없음

    Args:
        entity: 엔티티 종류 ("asset", "record")
        entity_id: 조회한 ID
    """

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class PermissionDeniedError(LedgerError):
    """권한 없음 (소유자 또는 관리자만 접근 가능)"""

    pass


class ConsistencyError(LedgerError):
    """내부 불변식 위반

    재계산 도중 발견되면 부분 복구를 시도하지 않고 트랜잭션을 중단한다.
    """

    pass
