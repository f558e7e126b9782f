"""
경비 청구 모델

제출 시점의 USD 환산 결과(환율, 출처, 시각, 수동 여부)를 함께 보관한다.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.payout.models import PayoutItem
from core.utils.timezone import to_iso


@dataclass(frozen=True)
class Reimbursement:
    """경비 청구 1건

    Attributes:
        reimbursement_id: 청구 ID
        applicant_id: 신청자 ID
        applicant_name: 신청자 이름 (지급 설명 문구용)
        amount_original: 원래 금액
        currency: 원래 통화
        exchange_rate_to_usd: 적용 환율 (1 currency = ? USD)
        amount_usd: USD 환산 금액 (소수점 2자리)
        exchange_rate_source: 환율 출처 (API 출처, static-fallback, manual 등)
        exchange_rate_time: 환율 시각
        is_manual_rate: 수동 환율 여부
        chain: 지급 체인
        status: 상태 (ReimbursementStatus)
        chain_addresses: 체인별 주소 (JSON 문자열 그대로 보관)
        reviewer_id: 심사자 ID
    """

    reimbursement_id: str
    applicant_id: str
    applicant_name: str
    title: str
    amount_original: Decimal
    currency: str
    exchange_rate_to_usd: Decimal
    amount_usd: Decimal
    exchange_rate_source: str
    exchange_rate_time: datetime
    is_manual_rate: bool
    chain: str
    status: str
    created_at: datetime
    updated_at: datetime
    applicant_email: str = ""
    description: str | None = None
    receipt_url: str | None = None
    evm_address: str | None = None
    solana_address: str | None = None
    chain_addresses: str | None = None
    reviewer_id: str | None = None

    def to_payout_item(self) -> PayoutItem:
        """지급 배치 입력 항목으로 변환"""
        return PayoutItem(
            item_id=self.reimbursement_id,
            recipient_id=self.applicant_id,
            recipient_name=self.applicant_name,
            recipient_email=self.applicant_email,
            amount_usd=self.amount_usd,
            chain=self.chain,
            evm_address=self.evm_address,
            solana_address=self.solana_address,
            chain_addresses=self.chain_addresses,
            title=self.title,
            description=self.description,
            amount_original=self.amount_original,
            currency=self.currency,
            exchange_rate_to_usd=self.exchange_rate_to_usd,
            status=self.status,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.reimbursement_id,
            "applicant_id": self.applicant_id,
            "applicant_name": self.applicant_name,
            "applicant_email": self.applicant_email,
            "title": self.title,
            "description": self.description,
            "amount_original": str(self.amount_original),
            "currency": self.currency,
            "exchange_rate_to_usd": str(self.exchange_rate_to_usd),
            "amount_usd": str(self.amount_usd),
            "exchange_rate_source": self.exchange_rate_source,
            "exchange_rate_time": to_iso(self.exchange_rate_time),
            "is_manual_rate": self.is_manual_rate,
            "chain": self.chain,
            "receipt_url": self.receipt_url,
            "status": self.status,
            "reviewer_id": self.reviewer_id,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }
