"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.exchange_rate.rest_client import ExchangeRateRestClient
from core.config.loader import Settings, get_settings
from core.constants import APP_VERSION
from core.exchange.cache import RateCache
from core.exchange.resolver import ExchangeRateResolver
from core.logging import setup_logging
from web.dependencies import get_rate_resolver, set_rate_resolver
from web.routes import assets, exchange, health, payouts, records, reimbursements

logger = logging.getLogger(__name__)


def build_rate_resolver(settings: Settings) -> ExchangeRateResolver:
    """설정 기반 환율 해석기 생성"""
    config = settings.exchange_rate
    client = ExchangeRateRestClient(
        base_url=config.api_base,
        timeout=config.timeout_sec,
    )
    return ExchangeRateResolver(client, RateCache(ttl_seconds=config.cache_ttl_sec))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """앱 생명주기 관리"""
    setup_logging("web")
    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    resolver = get_rate_resolver()
    owns_resolver = resolver is None
    if resolver is None:
        resolver = build_rate_resolver(settings)
        set_rate_resolver(resolver)

    logger.info(
        f"Web 시작: mode={settings.mode.value}",
        extra={"db_path": str(settings.db_path)},
    )

    yield

    # 종료 시 - 직접 만든 해석기만 정리
    if owns_resolver:
        await resolver.close()
        set_rate_resolver(None)
    logger.info("Web 종료")


def create_app() -> FastAPI:
    """FastAPI 앱 생성"""
    application = FastAPI(
        title="ReimX API",
        description="경비 정산/급여 지급 및 자산 가치 Ledger API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정 (개발용)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router)
    application.include_router(assets.router)
    application.include_router(records.router)
    application.include_router(exchange.router)
    application.include_router(reimbursements.router)
    application.include_router(payouts.router)

    return application


app = create_app()
