"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
금액은 정밀도 보존을 위해 모두 문자열.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (production/development)")
    version: str = Field(..., description="앱 버전")


class AssetResponse(BaseModel):
    """자산 응답"""

    id: str = Field(..., description="자산 ID")
    user_id: str = Field(..., description="소유자 ID")
    name: str = Field(..., description="자산명")
    description: str | None = Field(default=None, description="설명")
    type: str = Field(..., description="분류 태그")
    currency: str = Field(..., description="통화")
    initial_value: str = Field(..., description="최초 가치")
    current_value: str = Field(..., description="현재 가치")
    quantity: str | None = Field(default=None, description="수량")
    unit: str | None = Field(default=None, description="단위")
    status: str = Field(..., description="상태")
    purchase_date: str = Field(..., description="취득일")
    created_at: str | None = Field(default=None, description="생성 시간")
    updated_at: str | None = Field(default=None, description="수정 시간")


class RecordResponse(BaseModel):
    """자산 기록 응답"""

    id: str = Field(..., description="기록 ID")
    asset_id: str = Field(..., description="자산 ID")
    user_id: str = Field(..., description="기록한 사용자 ID")
    type: str = Field(..., description="기록 유형")
    amount_change: str = Field(..., description="증감액")
    value_after: str = Field(..., description="적용 후 가치")
    date: str = Field(..., description="이벤트 시간")
    note: str | None = Field(default=None, description="메모")
    created_at: str = Field(..., description="생성 시간")


class AssetDetailResponse(AssetResponse):
    """자산 상세 응답 (최근 기록 포함)"""

    records: list[RecordResponse] = Field(default_factory=list, description="최근 기록")


class AssetListResponse(BaseModel):
    """자산 목록 응답"""

    assets: list[AssetResponse] = Field(default_factory=list, description="자산 목록")
    total: int = Field(..., description="자산 수")


class RecordListResponse(BaseModel):
    """기록 목록 응답 (최신순)"""

    asset_id: str = Field(..., description="자산 ID")
    records: list[RecordResponse] = Field(default_factory=list, description="기록 목록")


class RecordMutationResponse(BaseModel):
    """기록 생성/수정 응답"""

    asset: AssetResponse = Field(..., description="갱신된 자산")
    record: RecordResponse = Field(..., description="생성/수정된 기록")


class RateQuoteResponse(BaseModel):
    """환율 응답 (1 currency = rate USD)"""

    currency: str = Field(..., description="통화")
    rate: str = Field(..., description="USD 환율")
    source: str = Field(..., description="환율 출처 (static-usd/static-fallback/제공자)")
    fetched_at: str = Field(..., description="환율 시각")
    is_fallback: bool = Field(default=False, description="기본 환율 사용 여부")


class ConversionResponse(BaseModel):
    """USD 환산 응답"""

    amount: str = Field(..., description="원래 금액")
    currency: str = Field(..., description="원래 통화")
    amount_usd: str = Field(..., description="USD 환산 금액")
    exchange_rate: str = Field(..., description="적용 환율")
    exchange_rate_source: str = Field(..., description="환율 출처 (manual 포함)")
    exchange_rate_time: str = Field(..., description="환율 시각")
    is_manual_rate: bool = Field(default=False, description="수동 환율 여부")
    is_fallback: bool = Field(default=False, description="기본 환율 사용 여부")


class PayoutResponse(BaseModel):
    """지급 배치 응답"""

    total_items: int = Field(..., description="항목 수")
    total_batches: int = Field(..., description="배치(수령인) 수")
    total_usd: str = Field(..., description="전체 합계 (USD)")
    items: list[dict[str, Any]] = Field(default_factory=list, description="입력 항목")
    batches: list[dict[str, Any]] = Field(default_factory=list, description="수령인별 배치")
    issues: list[dict[str, Any]] = Field(default_factory=list, description="지급 불가 사유")
    payload: dict[str, Any] = Field(..., description="지갑 도구 업로드용 페이로드")


class ReimbursementResponse(BaseModel):
    """경비 청구 응답"""

    id: str = Field(..., description="청구 ID")
    applicant_id: str = Field(..., description="신청자 ID")
    applicant_name: str = Field(..., description="신청자 이름")
    applicant_email: str = Field(default="", description="신청자 이메일")
    title: str = Field(..., description="제목")
    description: str | None = Field(default=None, description="설명")
    amount_original: str = Field(..., description="원래 금액")
    currency: str = Field(..., description="원래 통화")
    exchange_rate_to_usd: str = Field(..., description="적용 환율")
    amount_usd: str = Field(..., description="USD 환산 금액")
    exchange_rate_source: str = Field(..., description="환율 출처 (static-fallback, manual 포함)")
    exchange_rate_time: str = Field(..., description="환율 시각")
    is_manual_rate: bool = Field(..., description="수동 환율 여부")
    chain: str = Field(..., description="지급 체인")
    receipt_url: str | None = Field(default=None, description="영수증 URL")
    status: str = Field(..., description="상태 (submitted/approved/rejected)")
    reviewer_id: str | None = Field(default=None, description="심사자 ID")
    created_at: str = Field(..., description="생성 시간")
    updated_at: str = Field(..., description="수정 시간")


class ReimbursementListResponse(BaseModel):
    """경비 청구 목록 응답"""

    reimbursements: list[ReimbursementResponse] = Field(default_factory=list)
    total: int = Field(..., description="건수")
