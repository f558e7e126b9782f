"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능한지 확인
"""

import json

import pytest

from core.types import (
    AppMode,
    AssetStatus,
    PayoutIssueType,
    PayoutSource,
    ReimbursementStatus,
    UserRole,
)


class TestAppMode:
    """AppMode 테스트"""

    def test_values(self) -> None:
        assert AppMode.PRODUCTION.value == "production"
        assert AppMode.DEVELOPMENT.value == "development"

    def test_from_string(self) -> None:
        assert AppMode("production") is AppMode.PRODUCTION

    def test_invalid_value(self) -> None:
        with pytest.raises(ValueError):
            AppMode("testnet")


@pytest.mark.parametrize(
    "member,expected",
    [
        (AssetStatus.ACTIVE, "ACTIVE"),
        (UserRole.SUPERADMIN, "superadmin"),
        (PayoutSource.SALARY, "salary"),
        (PayoutIssueType.MISSING_EVM_ADDRESS, "missing_evm_address"),
        (ReimbursementStatus.APPROVED, "approved"),
    ],
)
def test_json_serialization(member: object, expected: str) -> None:
    """str 상속 Enum은 json.dumps 가능"""
    assert json.dumps({"v": member}) == json.dumps({"v": expected})
    assert member == expected
