"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
여러 Web 워커가 동시에 접근 가능하도록 설정.

주의: 금액 컬럼은 모두 TEXT (str(Decimal)) 로 저장. REAL 사용 금지.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths
from core.types import AppMode

logger = logging.getLogger(__name__)


def get_db_path(mode: AppMode | str) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 실행 모드 (PRODUCTION/DEVELOPMENT)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(mode, str):
        mode = AppMode(mode.lower())

    if mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    # 연결 생성
    if readonly:
        # 읽기 전용 모드
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # WAL 모드 설정
    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction(immediate=True):
        await adapter.execute("UPDATE assets SET ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(
        self,
        immediate: bool = False,
    ) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.

        Args:
            immediate: True면 BEGIN IMMEDIATE로 시작하여 쓰기 락을 먼저 확보.
                다른 프로세스의 쓰기와 직렬화되고, 트랜잭션 내 조회 결과가
                커밋 전까지 바뀌지 않음.

        사용 예시:
        ```python
        async with adapter.transaction(immediate=True) as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if immediate and not self._conn.in_transaction:
            await self._conn.execute("BEGIN IMMEDIATE")

        try:
            yield self._conn
            await self._conn.commit()
        except BaseException:
            await self._conn.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter

    주의: Web 시작 시 lifespan에서 호출. 이미 존재하는 테이블은 건드리지 않음.
    """
    # assets (자산)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS assets (
            asset_id         TEXT PRIMARY KEY,
            user_id          TEXT NOT NULL,
            name             TEXT NOT NULL,
            description      TEXT,
            asset_type       TEXT NOT NULL,
            currency         TEXT NOT NULL,

            initial_value    TEXT NOT NULL,
            current_value    TEXT NOT NULL,
            quantity         TEXT,
            unit             TEXT,

            status           TEXT NOT NULL DEFAULT 'ACTIVE',
            purchase_date    TEXT NOT NULL,

            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL
        )
    """)

    # asset_records (자산 가치 변동 기록)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS asset_records (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            record_id        TEXT NOT NULL UNIQUE,
            asset_id         TEXT NOT NULL,
            user_id          TEXT NOT NULL,
            record_type      TEXT NOT NULL,

            amount_change    TEXT NOT NULL,
            value_after      TEXT NOT NULL,

            date             TEXT NOT NULL,
            note             TEXT,
            created_at       TEXT NOT NULL,

            FOREIGN KEY (asset_id) REFERENCES assets(asset_id)
        )
    """)

    # reimbursements (경비 청구, 제출 시점 환산 결과 보관)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS reimbursements (
            reimbursement_id      TEXT PRIMARY KEY,
            applicant_id          TEXT NOT NULL,
            applicant_name        TEXT NOT NULL,
            applicant_email       TEXT,
            title                 TEXT NOT NULL,
            description           TEXT,

            amount_original       TEXT NOT NULL,
            currency              TEXT NOT NULL,
            exchange_rate_to_usd  TEXT NOT NULL,
            amount_usd            TEXT NOT NULL,
            exchange_rate_source  TEXT NOT NULL,
            exchange_rate_time    TEXT NOT NULL,
            is_manual_rate        INTEGER NOT NULL DEFAULT 0,

            chain                 TEXT NOT NULL DEFAULT 'evm',
            receipt_url           TEXT,
            evm_address           TEXT,
            solana_address        TEXT,
            chain_addresses       TEXT,

            status                TEXT NOT NULL DEFAULT 'submitted',
            reviewer_id           TEXT,
            created_at            TEXT NOT NULL,
            updated_at            TEXT NOT NULL
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_reimbursements_status
        ON reimbursements(status, applicant_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_assets_user
        ON assets(user_id, status)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_asset_records_asset
        ON asset_records(asset_id, date, created_at, seq)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
