"""
환율 REST API 클라이언트

open.er-api.com 무료 API 사용 (인증 불필요).
GET {base_url}/{통화코드} → {"result": "success", "rates": {"USD": ...}, ...}

IExchangeRateClient Protocol 준수.
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from adapters.models import FetchedRate
from core.constants import Defaults, ExchangeRateEndpoints
from core.utils.timezone import now_utc, to_utc

logger = logging.getLogger(__name__)

SOURCE_NAME = "open.er-api.com"


class ExchangeRateFetchError(Exception):
    """환율 조회 실패

    네트워크 오류, HTTP 에러 응답, 형식이 맞지 않는 응답 본문 모두 포함.
    """

    def __init__(self, currency: str, message: str, status_code: int | None = None):
        self.currency = currency
        self.message = message
        self.status_code = status_code
        super().__init__(f"Exchange rate fetch failed [{currency}]: {message}")


def _parse_update_time(value: Any) -> datetime | None:
    """time_last_update_utc (RFC 2822) 파싱, 실패 시 None"""
    if not isinstance(value, str) or not value:
        return None
    try:
        return to_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError):
        return None


def parse_rate_response(currency: str, data: Any) -> FetchedRate:
    """API 응답 본문 → FetchedRate

    Raises:
        ExchangeRateFetchError: result != "success" 또는 rates.USD 누락/숫자 아님
    """
    if not isinstance(data, dict) or data.get("result") != "success":
        error = data.get("error-type") if isinstance(data, dict) else None
        raise ExchangeRateFetchError(currency, f"Unsuccessful response: {error or data!r}")

    rates = data.get("rates")
    usd = rates.get("USD") if isinstance(rates, dict) else None

    # bool은 int의 하위 타입이므로 제외
    if isinstance(usd, bool) or not isinstance(usd, (int, float)):
        raise ExchangeRateFetchError(currency, "rates.USD missing or not numeric")

    return FetchedRate(
        currency=currency,
        rate=Decimal(str(usd)),
        fetched_at=_parse_update_time(data.get("time_last_update_utc")) or now_utc(),
        source=SOURCE_NAME,
    )


class ExchangeRateRestClient:
    """환율 REST API 클라이언트

    Args:
        base_url: API 베이스 URL
        timeout: 요청 타임아웃 (초)
        max_retries: 타임아웃/연결 오류 시 최대 시도 횟수
    """

    def __init__(
        self,
        base_url: str = ExchangeRateEndpoints.OPEN_ER_API_URL,
        timeout: float = Defaults.RATE_TIMEOUT_SEC,
        max_retries: int = 2,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 가져오기 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch_usd_rate(self, currency: str) -> FetchedRate:
        """1 통화당 USD 환율 조회

        Args:
            currency: API 통화 코드 (별칭 해석 후, 예: CNY)

        Returns:
            FetchedRate

        Raises:
            ExchangeRateFetchError: 모든 시도 실패 또는 응답 형식 오류
        """
        url = f"{self.base_url}/{currency}"
        client = await self._get_client()

        for attempt in range(self.max_retries):
            try:
                response = await client.get(
                    url,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TimeoutException as e:
                logger.warning(
                    "환율 조회 타임아웃",
                    extra={"currency": currency, "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise ExchangeRateFetchError(currency, "Request timeout") from e
            except httpx.RequestError as e:
                logger.warning(
                    "환율 조회 요청 오류",
                    extra={"currency": currency, "error": str(e), "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise ExchangeRateFetchError(currency, f"Request error: {e}") from e

            if response.status_code >= 400:
                raise ExchangeRateFetchError(
                    currency,
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as e:
                raise ExchangeRateFetchError(currency, "Invalid JSON body") from e

            rate = parse_rate_response(currency, data)
            logger.debug(
                f"환율 조회: 1 {currency} = {rate.rate} USD",
                extra={"currency": currency, "source": rate.source},
            )
            return rate

        raise ExchangeRateFetchError(currency, "All retries failed")
