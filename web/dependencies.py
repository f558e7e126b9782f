"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from dataclasses import dataclass
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.constants import ADMIN_ROLES
from core.exchange.resolver import ExchangeRateResolver
from core.types import UserRole


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)"""
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    자산/기록 생성·수정·삭제, 재계산 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 호출자 (인증은 앞단 게이트웨이가 처리하고 헤더로 전달)
# =========================================================================


@dataclass(frozen=True)
class Actor:
    """요청 호출자"""

    user_id: str
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """X-User-Id / X-User-Role 헤더에서 호출자 생성

    Raises:
        HTTPException: X-User-Id 없음 (401)
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")

    role = (x_user_role or UserRole.USER.value).strip().lower()
    return Actor(user_id=x_user_id.strip(), role=role)


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    """관리자 전용 엔드포인트

    Raises:
        HTTPException: 관리자 아님 (403)
    """
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Admin permission required")
    return actor


# =========================================================================
# 환율 해석기 (프로세스 전역, lifespan에서 설정)
# =========================================================================

_rate_resolver: ExchangeRateResolver | None = None


def set_rate_resolver(resolver: ExchangeRateResolver | None) -> None:
    """ExchangeRateResolver 설정

    앱 시작 시 호출하여 전역 인스턴스 설정 (캐시 공유).
    """
    global _rate_resolver
    _rate_resolver = resolver


def get_rate_resolver() -> ExchangeRateResolver | None:
    return _rate_resolver


def require_rate_resolver() -> ExchangeRateResolver:
    """환율 해석기 반환

    Raises:
        HTTPException: 초기화되지 않음 (503)
    """
    if _rate_resolver is None:
        raise HTTPException(status_code=503, detail="Exchange rate service unavailable")
    return _rate_resolver
