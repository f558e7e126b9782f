"""
도메인 예외 → HTTP 응답 변환
"""

import logging

from fastapi import HTTPException

from core.errors import (
    ConsistencyError,
    LedgerError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: LedgerError) -> HTTPException:
    """LedgerError → HTTPException

    - ValidationError: 400
    - PermissionDeniedError: 403
    - NotFoundError: 404
    - ConsistencyError 및 기타: 500 (트랜잭션은 이미 롤백됨)
    """
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(error) or "Forbidden")
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))

    if isinstance(error, ConsistencyError):
        logger.error(f"Ledger 불변식 위반: {error}")
    else:
        logger.error(f"처리되지 않은 Ledger 오류: {error}")
    return HTTPException(status_code=500, detail="Internal server error")
