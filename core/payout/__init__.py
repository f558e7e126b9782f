"""
지급 배치 생성

승인된 경비/급여를 수령인별로 묶어 멀티시그 지갑 도구용 페이로드 생성.
"""

from core.payout.addresses import (
    collect_addresses,
    extract_chain_addresses,
    is_evm_chain,
    normalize_chain,
    resolve_address,
)
from core.payout.aggregator import aggregate_payout, aggregate_salaries, salary_to_item
from core.payout.models import (
    PayoutAggregation,
    PayoutBatch,
    PayoutIssue,
    PayoutItem,
    PayoutTransaction,
    SalaryPayment,
)

__all__ = [
    "aggregate_payout",
    "aggregate_salaries",
    "salary_to_item",
    "PayoutAggregation",
    "PayoutBatch",
    "PayoutIssue",
    "PayoutItem",
    "PayoutTransaction",
    "SalaryPayment",
    "collect_addresses",
    "extract_chain_addresses",
    "is_evm_chain",
    "normalize_chain",
    "resolve_address",
]
