"""
지급 배치 서비스

요청 항목 → PayoutItem/SalaryPayment 변환 후 집계.
토큰/소수점 자릿수는 settings.yaml의 payout 섹션 사용.
"""

from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import PayoutConfig
from core.payout.aggregator import aggregate_payout, aggregate_salaries
from core.payout.models import PayoutItem, SalaryPayment
from core.reimbursement.service import ReimbursementService
from core.utils.money import to_decimal
from web.models.requests import PayoutItemRequest, SalaryPaymentRequest


def _optional_decimal(value: Any, field: str) -> Decimal | None:
    return to_decimal(value, field) if value is not None else None


class PayoutService:
    """지급 배치 서비스

    Args:
        config: 지급 토큰 설정
    """

    def __init__(self, config: PayoutConfig):
        self.config = config

    async def build_reimbursement_batches(
        self,
        items: list[PayoutItemRequest],
        payout_currency_rate: Any = None,
    ) -> dict[str, Any]:
        """승인된 경비 지급 배치"""
        payout_items = [
            PayoutItem(
                item_id=item.id,
                recipient_id=item.recipient_id,
                recipient_name=item.recipient_name,
                recipient_email=item.recipient_email,
                amount_usd=to_decimal(item.amount_usd, "amount_usd"),
                chain=item.chain,
                evm_address=item.evm_address,
                solana_address=item.solana_address,
                chain_addresses=item.chain_addresses,
                title=item.title,
                description=item.description,
                amount_original=_optional_decimal(item.amount_original, "amount_original"),
                currency=item.currency,
                exchange_rate_to_usd=to_decimal(
                    item.exchange_rate_to_usd, "exchange_rate_to_usd"
                ),
            )
            for item in items
        ]

        aggregation = aggregate_payout(
            payout_items,
            payout_currency_rate=payout_currency_rate,
            token=self.config.token,
            decimals=self.config.decimals,
        )
        return aggregation.to_dict()

    async def build_approved_reimbursement_batches(
        self,
        db: SQLiteAdapter,
        applicant_id: str | None = None,
        currency: str | None = None,
        payout_currency_rate: Any = None,
    ) -> dict[str, Any]:
        """DB에 저장된 승인 청구로 지급 배치"""
        aggregation = await ReimbursementService(db).aggregate_approved(
            payout_currency_rate=payout_currency_rate,
            token=self.config.token,
            decimals=self.config.decimals,
            applicant_id=applicant_id,
            currency=currency.upper() if currency else None,
        )
        return aggregation.to_dict()

    async def build_salary_batches(
        self,
        payments: list[SalaryPaymentRequest],
        payout_currency_rate: Any = None,
    ) -> dict[str, Any]:
        """급여 지급 배치"""
        salary_payments = [
            SalaryPayment(
                payment_id=payment.id,
                user_id=payment.user_id,
                user_name=payment.user_name,
                user_email=payment.user_email,
                month=payment.month,
                amount_usdt=to_decimal(payment.amount_usdt, "amount_usdt"),
                payment_amount_usdt=_optional_decimal(
                    payment.payment_amount_usdt, "payment_amount_usdt"
                ),
                notes=payment.notes,
                status=payment.status,
                transaction_hash=payment.transaction_hash,
                evm_address=payment.evm_address,
                solana_address=payment.solana_address,
                chain_addresses=payment.chain_addresses,
            )
            for payment in payments
        ]

        aggregation = aggregate_salaries(
            salary_payments,
            payout_currency_rate=payout_currency_rate,
            token=self.config.token,
            decimals=self.config.decimals,
        )
        return aggregation.to_dict()
