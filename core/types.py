"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class AppMode(str, Enum):
    """실행 모드 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class AssetStatus(str, Enum):
    """자산 상태

    DB에는 자유 문자열로 저장되며 아래 값은 기본 제공 상태.
    """

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DEPLETED = "DEPLETED"


class UserRole(str, Enum):
    """사용자 역할"""

    USER = "user"
    REVIEWER = "reviewer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class PayoutSource(str, Enum):
    """지급 대상 항목 출처"""

    REIMBURSEMENT = "reimbursement"
    SALARY = "salary"


class PayoutIssueType(str, Enum):
    """지급 배치 생성 시 발견된 문제 유형"""

    MISSING_EVM_ADDRESS = "missing_evm_address"
    MISSING_CHAIN_ADDRESS = "missing_chain_address"
    NON_POSITIVE_TOTAL = "non_positive_total"


class ReimbursementStatus(str, Enum):
    """경비 청구 상태

    submitted → approved / rejected (심사는 submitted 상태에서만)
    """

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
