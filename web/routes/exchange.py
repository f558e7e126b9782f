"""
환율 라우트

GET /api/exchange/latest - 환율 조회
POST /api/exchange/convert - USD 환산
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from core.errors import LedgerError
from core.exchange.resolver import ExchangeRateError, ExchangeRateResolver
from web.dependencies import require_rate_resolver
from web.errors import to_http_exception
from web.models.requests import ConvertRequest
from web.models.responses import ConversionResponse, RateQuoteResponse
from web.routing import DecimalJSONRoute
from web.services.exchange_service import ExchangeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/exchange", tags=["Exchange"], route_class=DecimalJSONRoute)


@router.get("/latest")
async def get_latest_rate(
    currency: str | None = Query(default=None, description="통화 코드 (없으면 지원 통화 전체)"),
    resolver: ExchangeRateResolver = Depends(require_rate_resolver),
) -> dict[str, Any]:
    """환율 조회 (1 통화 = ? USD)

    환율 API 장애 시 기본 환율 반환 (is_fallback=true).
    """
    service = ExchangeService(resolver)
    try:
        if currency is None:
            return await service.get_all_latest()
        quote = await service.get_latest(currency)
        return RateQuoteResponse(**quote).model_dump()
    except LedgerError as e:
        raise to_http_exception(e) from e
    except ExchangeRateError as e:
        logger.error(f"환율 조회 실패: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/convert", response_model=ConversionResponse)
async def convert(
    request: ConvertRequest,
    resolver: ExchangeRateResolver = Depends(require_rate_resolver),
) -> dict[str, Any]:
    """USD 환산

    manual_rate 지정 시 수동 환율 사용 (exchange_rate_source=manual).
    """
    service = ExchangeService(resolver)
    try:
        return await service.convert(
            request.amount,
            request.currency,
            manual_rate=request.manual_rate,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e
    except ExchangeRateError as e:
        logger.error(f"환산 실패: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
