"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AssetCreateRequest,
    AssetUpdateRequest,
    ConvertRequest,
    PayoutItemRequest,
    RecordCreateRequest,
    RecordUpdateRequest,
    ReimbursementPayoutRequest,
    SalaryPaymentRequest,
    SalaryPayoutRequest,
)
from web.models.responses import (
    AssetDetailResponse,
    AssetListResponse,
    AssetResponse,
    ConversionResponse,
    HealthResponse,
    PayoutResponse,
    RateQuoteResponse,
    RecordListResponse,
    RecordMutationResponse,
    RecordResponse,
)

__all__ = [
    # Requests
    "AssetCreateRequest",
    "AssetUpdateRequest",
    "ConvertRequest",
    "PayoutItemRequest",
    "RecordCreateRequest",
    "RecordUpdateRequest",
    "ReimbursementPayoutRequest",
    "SalaryPaymentRequest",
    "SalaryPayoutRequest",
    # Responses
    "AssetDetailResponse",
    "AssetListResponse",
    "AssetResponse",
    "ConversionResponse",
    "HealthResponse",
    "PayoutResponse",
    "RateQuoteResponse",
    "RecordListResponse",
    "RecordMutationResponse",
    "RecordResponse",
]
