"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증

금액 필드: JSON 숫자는 float를 거치지 않고 바로 Decimal로 파싱.
문자열은 그대로 두고 Decimal 변환은 서비스에서 수행
(숫자가 아닌 값은 422가 아닌 400으로 응답하기 위함).
"""

from decimal import Decimal
from typing import Any, Union

from pydantic import BaseModel, Field

# JSON 숫자(Decimal) 또는 숫자 문자열
AmountInput = Union[Decimal, str]


class AssetCreateRequest(BaseModel):
    """자산 생성 요청

    관리자는 user_id로 다른 사용자의 자산을 만들 수 있다.
    """

    name: str = Field(..., description="자산명")
    type: str = Field(..., description="분류 태그 (자유 문자열)")
    initial_value: AmountInput | None = Field(default=None, description="최초 가치")
    currency: str = Field(default="USD", description="통화 코드")
    purchase_date: str | None = Field(default=None, description="취득일 (ISO-8601)")
    description: str | None = Field(default=None, description="설명")
    quantity: AmountInput | None = Field(default=None, description="수량")
    unit: str | None = Field(default=None, description="단위")
    user_id: str | None = Field(default=None, description="소유자 ID (관리자 전용)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "MacBook Pro",
                    "type": "equipment",
                    "initial_value": "2400",
                    "currency": "USD",
                    "purchase_date": "2024-01-15",
                }
            ]
        }
    }


class AssetUpdateRequest(BaseModel):
    """자산 메타데이터 수정 요청 (보낸 필드만 수정)"""

    name: str | None = Field(default=None, description="자산명")
    description: str | None = Field(default=None, description="설명")
    type: str | None = Field(default=None, description="분류 태그")
    currency: str | None = Field(default=None, description="통화 코드")
    quantity: AmountInput | None = Field(default=None, description="수량")
    unit: str | None = Field(default=None, description="단위")
    status: str | None = Field(default=None, description="상태 (ACTIVE/INACTIVE/DEPLETED 등)")


class RecordCreateRequest(BaseModel):
    """기록 추가 요청

    REVALUATION: amount = 목표 가치
    그 외: amount = 증감액 (감소는 음수)
    """

    type: str = Field(..., description="기록 유형 (INITIAL/REVALUATION/ADDITION/CONSUMPTION/기타)")
    amount: AmountInput | None = Field(default=None, description="금액")
    date: str | None = Field(default=None, description="이벤트 시간 (없으면 현재)")
    note: str | None = Field(default=None, description="메모")
    historical: bool = Field(
        default=False,
        description="과거 시점 기록 (저장 후 전체 재계산)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"type": "CONSUMPTION", "amount": "-150", "note": "repair"},
                {"type": "REVALUATION", "amount": "1800", "date": "2024-06-30"},
            ]
        }
    }


class RecordUpdateRequest(BaseModel):
    """기록 수정 요청 (보낸 필드만 수정, 수정 후 전체 재계산)"""

    amount: AmountInput | None = Field(default=None, description="새 금액")
    date: str | None = Field(default=None, description="새 이벤트 시간")
    note: str | None = Field(default=None, description="새 메모 (null이면 삭제)")


class ConvertRequest(BaseModel):
    """USD 환산 요청"""

    amount: AmountInput = Field(..., description="원래 금액 (양수)")
    currency: str = Field(..., description="원래 통화")
    manual_rate: AmountInput | None = Field(default=None, description="수동 환율 (1 통화 = ? USD)")


class PayoutItemRequest(BaseModel):
    """지급 대상 항목 (승인된 경비)"""

    id: str = Field(..., description="항목 ID")
    recipient_id: str = Field(..., description="수령인 ID")
    recipient_name: str = Field(..., description="수령인 이름")
    recipient_email: str = Field(default="", description="수령인 이메일")
    amount_usd: AmountInput = Field(..., description="USD 환산 금액")
    chain: str = Field(default="evm", description="지급 체인")
    evm_address: str | None = Field(default=None, description="EVM 주소 (레거시 필드)")
    solana_address: str | None = Field(default=None, description="Solana 주소 (레거시 필드)")
    chain_addresses: Any = Field(default=None, description="체인별 주소 (dict/list/JSON 문자열)")
    title: str = Field(default="", description="제목")
    description: str | None = Field(default=None, description="설명")
    amount_original: AmountInput | None = Field(default=None, description="원래 금액")
    currency: str = Field(default="USD", description="원래 통화")
    exchange_rate_to_usd: AmountInput = Field(default="1", description="적용 환율")


class ReimbursementPayoutRequest(BaseModel):
    """경비 지급 배치 생성 요청"""

    items: list[PayoutItemRequest] = Field(default_factory=list, description="승인된 경비 항목")
    payout_currency_rate: AmountInput | None = Field(
        default=None,
        description="1 USD당 지급 토큰 수 (기본 1)",
    )


class SalaryPaymentRequest(BaseModel):
    """급여 지급 예정 1건"""

    id: str = Field(..., description="지급 ID")
    user_id: str = Field(..., description="수령인 ID")
    user_name: str = Field(..., description="수령인 이름")
    user_email: str = Field(default="", description="수령인 이메일")
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="대상 월 (YYYY-MM)")
    amount_usdt: AmountInput = Field(..., description="기본 급여")
    payment_amount_usdt: AmountInput | None = Field(default=None, description="실제 지급액")
    notes: str | None = Field(default=None, description="메모")
    status: str | None = Field(default=None, description="지급 상태")
    transaction_hash: str | None = Field(default=None, description="트랜잭션 해시")
    evm_address: str | None = Field(default=None, description="EVM 주소")
    solana_address: str | None = Field(default=None, description="Solana 주소")
    chain_addresses: Any = Field(default=None, description="체인별 주소")


class SalaryPayoutRequest(BaseModel):
    """급여 지급 배치 생성 요청"""

    payments: list[SalaryPaymentRequest] = Field(default_factory=list, description="급여 지급 목록")
    payout_currency_rate: AmountInput | None = Field(default=None, description="1 USD당 지급 토큰 수")


class ReimbursementCreateRequest(BaseModel):
    """경비 청구 제출 요청

    manual_rate를 주지 않으면 현재 환율로 USD 환산 (API 장애 시 기본 환율).
    """

    title: str = Field(..., description="제목")
    amount: AmountInput = Field(..., description="원래 금액 (양수)")
    currency: str = Field(..., description="원래 통화")
    manual_rate: AmountInput | None = Field(default=None, description="수동 환율 (1 통화 = ? USD)")
    chain: str = Field(default="evm", description="지급 체인")
    description: str | None = Field(default=None, description="설명")
    receipt_url: str | None = Field(default=None, description="영수증 URL")
    applicant_name: str | None = Field(default=None, description="신청자 이름 (없으면 사용자 ID)")
    applicant_email: str = Field(default="", description="신청자 이메일")
    evm_address: str | None = Field(default=None, description="EVM 주소")
    solana_address: str | None = Field(default=None, description="Solana 주소")
    chain_addresses: Any = Field(default=None, description="체인별 주소 (dict/list/JSON 문자열)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Taxi",
                    "amount": "100",
                    "currency": "CNY",
                    "evm_address": "0x1111111111111111111111111111111111111111",
                }
            ]
        }
    }


class ReimbursementReviewRequest(BaseModel):
    """경비 청구 심사 요청"""

    action: str = Field(..., pattern=r"^(approve|reject)$", description="approve 또는 reject")
    comment: str | None = Field(default=None, description="심사 의견")


class ApprovedPayoutRequest(BaseModel):
    """승인된 경비 청구(DB) 기반 지급 배치 요청"""

    applicant_id: str | None = Field(default=None, description="신청자 필터")
    currency: str | None = Field(default=None, description="원래 통화 필터")
    payout_currency_rate: AmountInput | None = Field(default=None, description="1 USD당 지급 토큰 수")
