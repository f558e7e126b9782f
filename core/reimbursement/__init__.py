"""
경비 청구

제출 시 USD 환산 결과(환율 출처, 수동 여부 포함)를 보관하고
승인된 청구를 지급 배치로 집계한다.
"""

from core.reimbursement.models import Reimbursement
from core.reimbursement.service import REVIEW_ACTIONS, ReimbursementService
from core.reimbursement.store import ReimbursementStore

__all__ = [
    "Reimbursement",
    "ReimbursementService",
    "ReimbursementStore",
    "REVIEW_ACTIONS",
]
