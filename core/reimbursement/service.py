"""
경비 청구 서비스

제출: ExchangeRateResolver로 USD 환산 후 환산 결과와 함께 저장.
환율 API 장애 시에도 기본 환율(static-fallback)로 저장되며 요청은 실패하지 않는다.
심사: submitted 상태만 approved/rejected로 변경.
지급: approved 청구를 지급 배치 집계 입력으로 변환.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from core.errors import NotFoundError, ValidationError
from core.exchange.resolver import ExchangeRateResolver
from core.payout.addresses import normalize_chain
from core.payout.aggregator import aggregate_payout
from core.payout.models import PayoutAggregation
from core.reimbursement.models import Reimbursement
from core.reimbursement.store import ReimbursementStore
from core.types import ReimbursementStatus
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

# 심사 액션 → 결과 상태
REVIEW_ACTIONS: dict[str, ReimbursementStatus] = {
    "approve": ReimbursementStatus.APPROVED,
    "reject": ReimbursementStatus.REJECTED,
}


def _require_text(value: Any, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def _encode_addresses(value: Any) -> str | None:
    """체인별 주소를 JSON 문자열로 보관 (문자열은 그대로)"""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


class ReimbursementService:
    """경비 청구 서비스

    Args:
        db: SQLite 어댑터
        resolver: 환율 해석기 (제출 시 필요)
    """

    def __init__(self, db: SQLiteAdapter, resolver: ExchangeRateResolver | None = None):
        self.db = db
        self.store = ReimbursementStore(db)
        self.resolver = resolver

    async def get(self, reimbursement_id: str) -> Reimbursement:
        """청구 조회

        Raises:
            NotFoundError: 청구 없음
        """
        item = await self.store.get(reimbursement_id)
        if item is None:
            raise NotFoundError("reimbursement", reimbursement_id)
        return item

    async def list_reimbursements(
        self,
        applicant_id: str | None = None,
        status: str | None = None,
        currency: str | None = None,
    ) -> list[Reimbursement]:
        return await self.store.list_reimbursements(
            applicant_id=applicant_id,
            status=status,
            currency=currency,
        )

    async def submit(
        self,
        applicant_id: str,
        applicant_name: str,
        title: str,
        amount: Any,
        currency: str,
        manual_rate: Any = None,
        chain: str | None = None,
        applicant_email: str = "",
        description: str | None = None,
        receipt_url: str | None = None,
        evm_address: str | None = None,
        solana_address: str | None = None,
        chain_addresses: Any = None,
    ) -> Reimbursement:
        """경비 청구 제출

        Returns:
            저장된 청구 (status=submitted)

        Raises:
            ValidationError: 필수값 누락, 금액/환율이 양수 아님, 미지원 통화
            ExchangeRateError: 환율을 결정할 수 없음
        """
        if self.resolver is None:
            raise RuntimeError("ExchangeRateResolver is required to submit reimbursements")

        title = _require_text(title, "title")
        applicant_name = _require_text(applicant_name, "applicant_name")

        conversion = await self.resolver.convert_to_usd(
            amount,
            currency,
            manual_rate=manual_rate,
        )

        now = now_utc()
        item = Reimbursement(
            reimbursement_id=str(uuid.uuid4()),
            applicant_id=applicant_id,
            applicant_name=applicant_name,
            applicant_email=applicant_email or "",
            title=title,
            description=description,
            amount_original=conversion.amount,
            currency=conversion.currency,
            exchange_rate_to_usd=conversion.exchange_rate,
            amount_usd=conversion.amount_usd,
            exchange_rate_source=conversion.exchange_rate_source,
            exchange_rate_time=conversion.exchange_rate_time,
            is_manual_rate=conversion.is_manual_rate,
            chain=normalize_chain(chain),
            receipt_url=receipt_url,
            evm_address=evm_address,
            solana_address=solana_address,
            chain_addresses=_encode_addresses(chain_addresses),
            status=ReimbursementStatus.SUBMITTED.value,
            created_at=now,
            updated_at=now,
        )

        async with self.db.transaction(immediate=True):
            await self.store.insert(item)

        log = logger.warning if conversion.is_fallback else logger.info
        log(
            f"경비 청구 제출: {item.amount_original} {item.currency} → "
            f"{item.amount_usd} USD ({item.exchange_rate_source})",
            extra={"reimbursement_id": item.reimbursement_id, "applicant_id": applicant_id},
        )
        return item

    async def review(self, reimbursement_id: str, reviewer_id: str, action: str) -> Reimbursement:
        """청구 심사 (approve / reject)

        Raises:
            ValidationError: 알 수 없는 액션, submitted 상태가 아님
            NotFoundError: 청구 없음
        """
        status = REVIEW_ACTIONS.get((action or "").strip().lower())
        if status is None:
            raise ValidationError(f"Unknown review action: {action!r}", field="action")

        async with self.db.transaction(immediate=True):
            item = await self.store.get(reimbursement_id)
            if item is None:
                raise NotFoundError("reimbursement", reimbursement_id)
            if item.status != ReimbursementStatus.SUBMITTED.value:
                raise ValidationError(
                    f"Reimbursement {reimbursement_id} is {item.status}, not submitted",
                    field="status",
                )
            await self.store.update_status(reimbursement_id, status.value, reviewer_id)
            updated = await self.store.get(reimbursement_id)

        assert updated is not None
        logger.info(
            f"경비 청구 심사: {status.value}",
            extra={"reimbursement_id": reimbursement_id, "reviewer_id": reviewer_id},
        )
        return updated

    async def aggregate_approved(
        self,
        payout_currency_rate: Any = None,
        token: str | None = None,
        decimals: int | None = None,
        applicant_id: str | None = None,
        currency: str | None = None,
    ) -> PayoutAggregation:
        """승인된 청구로 지급 배치 집계"""
        approved = await self.store.list_reimbursements(
            applicant_id=applicant_id,
            status=ReimbursementStatus.APPROVED.value,
            currency=currency,
        )
        return aggregate_payout(
            [item.to_payout_item() for item in approved],
            payout_currency_rate=payout_currency_rate,
            token=token,
            decimals=decimals,
        )
