"""
지급 배치 집계

승인된 경비/급여 항목을 수령인별로 묶어 멀티시그 지갑 도구용 전송 목록을 만든다.
1 USD = 1 USDT 가정 (payout_currency_rate로 조정 가능).

규칙:
- 수령인 ID 기준 그룹핑, 첫 등장 순서가 배치 순서
- 합계는 정확한 Decimal 합산 후 한 번만 환산
- EVM 주소를 찾지 못한 배치는 issues에만 기록, transactions에서 제외
- 합계 0 이하 배치도 issues에 기록하고 제외
"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from core.constants import Defaults
from core.errors import ValidationError
from core.payout.addresses import (
    collect_addresses,
    is_evm_chain,
    normalize_chain,
    resolve_address,
)
from core.payout.models import (
    PayoutAggregation,
    PayoutBatch,
    PayoutIssue,
    PayoutItem,
    PayoutTransaction,
    SalaryPayment,
)
from core.types import PayoutIssueType, PayoutSource
from core.utils.money import ZERO, to_decimal, to_minor_units
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)

_DESCRIPTION_TEMPLATES: dict[PayoutSource, str] = {
    PayoutSource.REIMBURSEMENT: "ReimX reimbursements for {name} ({count} items)",
    PayoutSource.SALARY: "ReimX salary for {name} ({count} items)",
}


def _normalize_item(item: PayoutItem) -> PayoutItem:
    """금액 Decimal 변환 + 체인 정규화"""
    return replace(
        item,
        amount_usd=to_decimal(item.amount_usd, "amount_usd"),
        chain=normalize_chain(item.chain),
    )


def _new_batch(item: PayoutItem) -> PayoutBatch:
    addresses = collect_addresses(
        item.chain_addresses,
        evm_address=item.evm_address,
        solana_address=item.solana_address,
    )
    return PayoutBatch(
        recipient_id=item.recipient_id,
        recipient_name=item.recipient_name,
        recipient_email=item.recipient_email,
        chain_addresses=addresses,
        evm_address=resolve_address(addresses, "evm", evm_fallback=item.evm_address),
        solana_address=resolve_address(
            addresses, "solana", solana_fallback=item.solana_address
        ),
    )


def _address_issues(batch: PayoutBatch) -> list[PayoutIssue]:
    issues: list[PayoutIssue] = []

    for chain in batch.chains:
        resolved = resolve_address(
            batch.chain_addresses,
            chain,
            evm_fallback=batch.evm_address,
            solana_fallback=batch.solana_address,
        )
        if resolved:
            continue

        if is_evm_chain(chain):
            issues.append(_missing_evm_issue(batch, chain))
        else:
            issues.append(
                PayoutIssue(
                    recipient_id=batch.recipient_id,
                    recipient_name=batch.recipient_name,
                    issue_type=PayoutIssueType.MISSING_CHAIN_ADDRESS,
                    chain=chain,
                    message=(
                        f"{batch.recipient_name} has no {chain.upper()} address; "
                        "cannot build payout transaction"
                    ),
                )
            )

    # 전송은 항상 EVM 주소로 보내므로, 비EVM 체인만 있는 배치도 EVM 주소가 필요
    has_evm_issue = any(
        issue.issue_type == PayoutIssueType.MISSING_EVM_ADDRESS for issue in issues
    )
    if batch.address is None and not has_evm_issue:
        issues.append(_missing_evm_issue(batch, "evm"))

    return issues


def _missing_evm_issue(batch: PayoutBatch, chain: str) -> PayoutIssue:
    return PayoutIssue(
        recipient_id=batch.recipient_id,
        recipient_name=batch.recipient_name,
        issue_type=PayoutIssueType.MISSING_EVM_ADDRESS,
        chain=chain,
        message=(
            f"{batch.recipient_name} has no EVM address; "
            "cannot build payout transaction"
        ),
    )


def aggregate_payout(
    items: Iterable[PayoutItem],
    payout_currency_rate: Any = None,
    token: str | None = None,
    decimals: int | None = None,
    source: PayoutSource = PayoutSource.REIMBURSEMENT,
    created_at: datetime | None = None,
) -> PayoutAggregation:
    """지급 배치 집계

    Args:
        items: 지급 대상 항목 (USD 환산 완료)
        payout_currency_rate: 1 USD당 지급 통화 (기본 1)
        token: 지급 토큰 심볼 (기본 USDT)
        decimals: 토큰 소수점 자릿수 (기본 6)
        source: 항목 출처 (전송 설명 문구에 사용)
        created_at: 페이로드 생성 시각 (기본 현재)

    Returns:
        PayoutAggregation (빈 입력이면 빈 결과)

    Raises:
        ValidationError: 금액이 숫자가 아니거나 환율이 0 이하
    """
    rate = (
        to_decimal(payout_currency_rate, "payout_currency_rate")
        if payout_currency_rate is not None
        else Decimal("1")
    )
    if rate <= ZERO:
        raise ValidationError(
            "payout_currency_rate must be positive", field="payout_currency_rate"
        )

    token = token or Defaults.PAYOUT_TOKEN
    decimals = Defaults.PAYOUT_DECIMALS if decimals is None else decimals

    normalized = [_normalize_item(item) for item in items]

    # 1. 수령인별 그룹핑 (dict는 삽입 순서 유지)
    batches: dict[str, PayoutBatch] = {}
    for item in normalized:
        batch = batches.get(item.recipient_id)
        if batch is None:
            batch = _new_batch(item)
            batches[item.recipient_id] = batch

        batch.items.append(item)
        batch.item_ids.append(item.item_id)
        batch.total_usd += item.amount_usd
        if item.chain not in batch.chains:
            batch.chains.append(item.chain)

    # 2. 환산 + 주소 확인 + 전송 목록
    issues: list[PayoutIssue] = []
    transactions: list[PayoutTransaction] = []
    template = _DESCRIPTION_TEMPLATES[source]

    for batch in batches.values():
        batch.payout_amount = batch.total_usd * rate

        batch_issues = _address_issues(batch)
        issues.extend(batch_issues)

        if batch.payout_amount <= ZERO:
            issues.append(
                PayoutIssue(
                    recipient_id=batch.recipient_id,
                    recipient_name=batch.recipient_name,
                    issue_type=PayoutIssueType.NON_POSITIVE_TOTAL,
                    message=(
                        f"{batch.recipient_name} total {batch.payout_amount} {token} "
                        "is not positive"
                    ),
                )
            )
            continue

        if batch.address is None:
            continue

        transactions.append(
            PayoutTransaction(
                to=batch.address,
                value=str(to_minor_units(batch.payout_amount, decimals)),
                description=template.format(
                    name=batch.recipient_name, count=len(batch.item_ids)
                ),
                recipient_id=batch.recipient_id,
                member_item_ids=tuple(batch.item_ids),
            )
        )

    if issues:
        logger.warning(
            f"지급 배치 문제 {len(issues)}건",
            extra={"recipients": sorted({issue.recipient_id for issue in issues})},
        )

    logger.info(
        f"지급 배치 집계: 항목 {len(normalized)}건, 배치 {len(batches)}개, "
        f"전송 {len(transactions)}건",
        extra={"source": source.value, "token": token},
    )

    return PayoutAggregation(
        items=normalized,
        batches=list(batches.values()),
        issues=issues,
        transactions=transactions,
        token=token,
        created_at=created_at or now_utc(),
    )


def salary_to_item(payment: SalaryPayment) -> PayoutItem:
    """급여 지급 건 → 지급 항목 (항상 EVM 체인)"""
    base = to_decimal(payment.amount_usdt, "amount_usdt")
    amount = (
        to_decimal(payment.payment_amount_usdt, "payment_amount_usdt")
        if payment.payment_amount_usdt is not None
        else base
    )
    return PayoutItem(
        item_id=payment.payment_id,
        recipient_id=payment.user_id,
        recipient_name=payment.user_name,
        recipient_email=payment.user_email,
        amount_usd=amount,
        chain="evm",
        evm_address=payment.evm_address,
        solana_address=payment.solana_address,
        chain_addresses=payment.chain_addresses,
        title=f"Salary payout {payment.month}",
        description=payment.notes,
        amount_original=base,
        currency="USDT",
        status=payment.status,
        transaction_hash=payment.transaction_hash,
    )


def aggregate_salaries(
    payments: Iterable[SalaryPayment],
    payout_currency_rate: Any = None,
    token: str | None = None,
    decimals: int | None = None,
    created_at: datetime | None = None,
) -> PayoutAggregation:
    """급여 지급 배치 집계"""
    return aggregate_payout(
        [salary_to_item(payment) for payment in payments],
        payout_currency_rate=payout_currency_rate,
        token=token,
        decimals=decimals,
        source=PayoutSource.SALARY,
        created_at=created_at,
    )
