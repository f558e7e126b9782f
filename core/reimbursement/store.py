"""
경비 청구 저장소

reimbursements 테이블 저장 및 조회.
커밋하지 않음: 호출자가 트랜잭션을 관리한다.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.reimbursement.models import Reimbursement
from core.utils.timezone import from_iso, now_utc, to_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

_COLUMNS = """
    reimbursement_id, applicant_id, applicant_name, applicant_email,
    title, description, amount_original, currency,
    exchange_rate_to_usd, amount_usd, exchange_rate_source, exchange_rate_time,
    is_manual_rate, chain, receipt_url, evm_address, solana_address, chain_addresses,
    status, reviewer_id, created_at, updated_at
"""


def _row_to_reimbursement(row: tuple[Any, ...]) -> Reimbursement:
    return Reimbursement(
        reimbursement_id=row[0],
        applicant_id=row[1],
        applicant_name=row[2],
        applicant_email=row[3] or "",
        title=row[4],
        description=row[5],
        amount_original=Decimal(row[6]),
        currency=row[7],
        exchange_rate_to_usd=Decimal(row[8]),
        amount_usd=Decimal(row[9]),
        exchange_rate_source=row[10],
        exchange_rate_time=from_iso(row[11]),
        is_manual_rate=bool(row[12]),
        chain=row[13],
        receipt_url=row[14],
        evm_address=row[15],
        solana_address=row[16],
        chain_addresses=row[17],
        status=row[18],
        reviewer_id=row[19],
        created_at=from_iso(row[20]),
        updated_at=from_iso(row[21]),
    )


class ReimbursementStore:
    """경비 청구 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(self, item: Reimbursement) -> None:
        await self.db.execute(
            f"""
            INSERT INTO reimbursements ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item.reimbursement_id,
                item.applicant_id,
                item.applicant_name,
                item.applicant_email,
                item.title,
                item.description,
                str(item.amount_original),
                item.currency,
                str(item.exchange_rate_to_usd),
                str(item.amount_usd),
                item.exchange_rate_source,
                to_iso(item.exchange_rate_time),
                1 if item.is_manual_rate else 0,
                item.chain,
                item.receipt_url,
                item.evm_address,
                item.solana_address,
                item.chain_addresses,
                item.status,
                item.reviewer_id,
                to_iso(item.created_at),
                to_iso(item.updated_at),
            ),
        )

    async def get(self, reimbursement_id: str) -> Reimbursement | None:
        row = await self.db.fetchone(
            f"SELECT {_COLUMNS} FROM reimbursements WHERE reimbursement_id = ?",
            (reimbursement_id,),
        )
        return _row_to_reimbursement(row) if row else None

    async def list_reimbursements(
        self,
        applicant_id: str | None = None,
        status: str | None = None,
        currency: str | None = None,
    ) -> list[Reimbursement]:
        """청구 목록 (최근 수정순)"""
        conditions: list[str] = []
        params: list[Any] = []

        if applicant_id is not None:
            conditions.append("applicant_id = ?")
            params.append(applicant_id)
        if status is not None:
            conditions.append("status = ?")
            params.append(status)
        if currency is not None:
            conditions.append("currency = ?")
            params.append(currency)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = await self.db.fetchall(
            f"SELECT {_COLUMNS} FROM reimbursements {where} "
            "ORDER BY updated_at DESC, reimbursement_id",
            tuple(params),
        )
        return [_row_to_reimbursement(row) for row in rows]

    async def update_status(
        self,
        reimbursement_id: str,
        status: str,
        reviewer_id: str | None,
    ) -> None:
        await self.db.execute(
            """
            UPDATE reimbursements
            SET status = ?, reviewer_id = ?, updated_at = ?
            WHERE reimbursement_id = ?
            """,
            (status, reviewer_id, to_iso(now_utc()), reimbursement_id),
        )
