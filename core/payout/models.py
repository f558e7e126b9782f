"""
지급 배치 모델

PayoutItem(입력) → PayoutBatch(수령인별 묶음) → PayoutTransaction(지갑 도구 전송 항목)
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.types import PayoutIssueType
from core.utils.money import ZERO
from core.utils.timezone import to_iso


@dataclass(frozen=True)
class PayoutItem:
    """지급 대상 항목 (승인된 경비 또는 급여 1건)

    amount_usd는 이미 USD 환산된 금액.
    주소 필드는 수령인 프로필 값을 그대로 전달.
    """

    item_id: str
    recipient_id: str
    recipient_name: str
    amount_usd: Decimal
    recipient_email: str = ""
    chain: str = "evm"
    evm_address: str | None = None
    solana_address: str | None = None
    chain_addresses: Any = None
    title: str = ""
    description: str | None = None
    amount_original: Decimal | None = None
    currency: str = "USD"
    exchange_rate_to_usd: Decimal = Decimal("1")
    status: str | None = None
    transaction_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.item_id,
            "recipient_id": self.recipient_id,
            "recipient_name": self.recipient_name,
            "recipient_email": self.recipient_email,
            "title": self.title,
            "description": self.description,
            "amount_original": (
                str(self.amount_original) if self.amount_original is not None else None
            ),
            "currency": self.currency,
            "exchange_rate_to_usd": str(self.exchange_rate_to_usd),
            "amount_usd": str(self.amount_usd),
            "chain": self.chain,
            "status": self.status,
            "transaction_hash": self.transaction_hash,
        }


@dataclass(frozen=True)
class SalaryPayment:
    """급여 지급 예정 1건

    payment_amount_usdt가 있으면 실제 지급액, 없으면 amount_usdt(기본급) 사용.
    """

    payment_id: str
    user_id: str
    user_name: str
    month: str
    amount_usdt: Decimal
    payment_amount_usdt: Decimal | None = None
    user_email: str = ""
    notes: str | None = None
    status: str | None = None
    transaction_hash: str | None = None
    evm_address: str | None = None
    solana_address: str | None = None
    chain_addresses: Any = None


@dataclass
class PayoutBatch:
    """수령인 1명에 대한 지급 묶음

    Attributes:
        total_usd: 항목 금액 합계 (정확한 Decimal)
        payout_amount: 지급 통화 환산 금액 (total_usd * 환율)
        address: 전송 수신 주소 (EVM, 없으면 None)
    """

    recipient_id: str
    recipient_name: str
    recipient_email: str
    chain_addresses: dict[str, str]
    evm_address: str | None = None
    solana_address: str | None = None
    chains: list[str] = field(default_factory=list)
    total_usd: Decimal = ZERO
    payout_amount: Decimal = ZERO
    item_ids: list[str] = field(default_factory=list)
    items: list[PayoutItem] = field(default_factory=list)

    @property
    def address(self) -> str | None:
        return self.evm_address

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient_id": self.recipient_id,
            "recipient_name": self.recipient_name,
            "recipient_email": self.recipient_email,
            "evm_address": self.evm_address,
            "solana_address": self.solana_address,
            "chain_addresses": dict(self.chain_addresses),
            "chains": list(self.chains),
            "total_usd": str(self.total_usd),
            "payout_amount": str(self.payout_amount),
            "item_ids": list(self.item_ids),
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class PayoutIssue:
    """지급 불가 사유"""

    recipient_id: str
    recipient_name: str
    issue_type: PayoutIssueType
    message: str
    chain: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient_id": self.recipient_id,
            "recipient_name": self.recipient_name,
            "type": self.issue_type.value,
            "chain": self.chain,
            "message": self.message,
        }


@dataclass(frozen=True)
class PayoutTransaction:
    """멀티시그 지갑 도구 전송 항목

    value는 토큰 최소 단위 정수 문자열.
    """

    to: str
    value: str
    description: str
    recipient_id: str
    member_item_ids: tuple[str, ...]
    data: str = "0x"

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "description": self.description,
            "metadata": {
                "recipientId": self.recipient_id,
                "memberItemIds": list(self.member_item_ids),
            },
        }


@dataclass
class PayoutAggregation:
    """지급 배치 집계 결과"""

    items: list[PayoutItem]
    batches: list[PayoutBatch]
    issues: list[PayoutIssue]
    transactions: list[PayoutTransaction]
    token: str
    created_at: datetime

    @property
    def total_usd(self) -> Decimal:
        return sum((batch.total_usd for batch in self.batches), ZERO)

    @property
    def payload(self) -> dict[str, Any]:
        """지갑 도구 업로드용 페이로드"""
        return {
            "version": "1.0",
            "createdAt": to_iso(self.created_at),
            "token": self.token,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_items": len(self.items),
            "total_batches": len(self.batches),
            "total_usd": str(self.total_usd),
            "items": [item.to_dict() for item in self.items],
            "batches": [batch.to_dict() for batch in self.batches],
            "issues": [issue.to_dict() for issue in self.issues],
            "payload": self.payload,
        }
