"""
환율 해석기

통화 → USD 환율 결정 순서:
1. USD: 1 (static-usd)
2. 캐시 (TTL 내)
3. 환율 API 조회 → 캐시 저장
4. API 실패 시 하드코딩 기본 환율 (static-fallback, 캐시하지 않음)

지원 통화의 요청은 환율 API 장애로 실패하지 않는다.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from adapters.exchange_rate.rest_client import ExchangeRateFetchError
from adapters.interfaces import IExchangeRateClient
from core.constants import CURRENCY_ALIASES, DEFAULT_USD_RATES, SUPPORTED_CURRENCIES
from core.errors import ValidationError
from core.exchange.cache import RateCache
from core.utils.money import ZERO, quantize_amount, to_decimal
from core.utils.timezone import now_utc, to_iso

logger = logging.getLogger(__name__)

SOURCE_STATIC_USD = "static-usd"
SOURCE_FALLBACK = "static-fallback"
SOURCE_MANUAL = "manual"


class ExchangeRateError(Exception):
    """환율을 결정할 수 없음 (API 실패 + 기본 환율 없음)"""

    def __init__(self, currency: str, message: str):
        self.currency = currency
        self.message = message
        super().__init__(f"Exchange rate unavailable [{currency}]: {message}")


@dataclass(frozen=True)
class RateQuote:
    """환율 조회 결과 (1 currency = rate USD)"""

    currency: str
    rate: Decimal
    source: str
    fetched_at: datetime
    is_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "rate": str(self.rate),
            "source": self.source,
            "fetched_at": to_iso(self.fetched_at),
            "is_fallback": self.is_fallback,
        }


@dataclass(frozen=True)
class ConversionQuote:
    """금액 환산 결과"""

    amount: Decimal
    currency: str
    amount_usd: Decimal
    exchange_rate: Decimal
    exchange_rate_source: str
    exchange_rate_time: datetime
    is_manual_rate: bool = False
    is_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "amount_usd": str(self.amount_usd),
            "exchange_rate": str(self.exchange_rate),
            "exchange_rate_source": self.exchange_rate_source,
            "exchange_rate_time": to_iso(self.exchange_rate_time),
            "is_manual_rate": self.is_manual_rate,
            "is_fallback": self.is_fallback,
        }


def normalize_currency(currency: Any) -> str:
    """통화 코드 정규화 (대문자) 및 지원 여부 확인

    Raises:
        ValidationError: 빈 값 또는 미지원 통화
    """
    if not isinstance(currency, str) or not currency.strip():
        raise ValidationError("currency is required", field="currency")

    code = currency.strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError(f"Unsupported currency: {currency}", field="currency")
    return code


class ExchangeRateResolver:
    """환율 해석기

    Args:
        client: 환율 API 클라이언트
        cache: 성공한 조회 결과 캐시 (API 코드 기준)
        fallback_rates: API 실패 시 사용할 기본 환율

    사용 예시:
    ```python
    resolver = ExchangeRateResolver(ExchangeRateRestClient(), RateCache(ttl_seconds=60))
    quote = await resolver.get_rate_to_usd("RMB")
    conversion = await resolver.convert_to_usd(Decimal("100"), "CNY")
    ```
    """

    def __init__(
        self,
        client: IExchangeRateClient,
        cache: RateCache[RateQuote] | None = None,
        fallback_rates: dict[str, Decimal] | None = None,
    ):
        self.client = client
        self.cache: RateCache[RateQuote] = cache if cache is not None else RateCache()
        self.fallback_rates = (
            DEFAULT_USD_RATES if fallback_rates is None else fallback_rates
        )

    async def close(self) -> None:
        await self.client.close()

    def invalidate(self) -> None:
        """캐시 전체 무효화"""
        self.cache.clear()

    async def get_rate_to_usd(self, currency: str) -> RateQuote:
        """1 통화당 USD 환율

        Raises:
            ValidationError: 미지원 통화
            ExchangeRateError: API 실패 + 기본 환율 없음
        """
        code = normalize_currency(currency)
        api_code = CURRENCY_ALIASES.get(code, code)

        if api_code == "USD":
            return RateQuote(
                currency=code,
                rate=Decimal("1"),
                source=SOURCE_STATIC_USD,
                fetched_at=now_utc(),
            )

        cached = self.cache.get(api_code)
        if cached is not None:
            return RateQuote(
                currency=code,
                rate=cached.rate,
                source=cached.source,
                fetched_at=cached.fetched_at,
            )

        try:
            fetched = await self.client.fetch_usd_rate(api_code)
        except ExchangeRateFetchError as e:
            return self._fallback(code, api_code, e)

        quote = RateQuote(
            currency=code,
            rate=fetched.rate,
            source=fetched.source,
            fetched_at=fetched.fetched_at,
        )
        self.cache.set(api_code, quote)
        return quote

    def _fallback(
        self,
        code: str,
        api_code: str,
        error: ExchangeRateFetchError,
    ) -> RateQuote:
        rate = self.fallback_rates.get(api_code) or self.fallback_rates.get(code)
        if rate is None:
            logger.error(
                "환율 조회 실패, 기본 환율 없음",
                extra={"currency": code, "error": str(error)},
            )
            raise ExchangeRateError(code, error.message) from error

        logger.warning(
            f"환율 조회 실패, 기본 환율 사용: 1 {code} = {rate} USD",
            extra={"currency": code, "error": str(error)},
        )
        return RateQuote(
            currency=code,
            rate=rate,
            source=SOURCE_FALLBACK,
            fetched_at=now_utc(),
            is_fallback=True,
        )

    async def convert_to_usd(
        self,
        amount: Any,
        currency: str,
        manual_rate: Any = None,
    ) -> ConversionQuote:
        """금액을 USD로 환산 (소수점 2자리, ROUND_HALF_UP)

        Args:
            amount: 원래 금액 (양수)
            currency: 원래 통화
            manual_rate: 수동 환율 (지정 시 API 조회 생략)

        Raises:
            ValidationError: 금액/환율이 양수가 아님, 미지원 통화
            ExchangeRateError: 환율을 결정할 수 없음
        """
        value = to_decimal(amount, "amount")
        if value <= ZERO:
            raise ValidationError("amount must be positive", field="amount")

        code = normalize_currency(currency)

        if manual_rate is not None:
            rate = to_decimal(manual_rate, "manual_rate")
            if rate <= ZERO:
                raise ValidationError("manual_rate must be positive", field="manual_rate")
            return ConversionQuote(
                amount=value,
                currency=code,
                amount_usd=quantize_amount(value * rate),
                exchange_rate=rate,
                exchange_rate_source=SOURCE_MANUAL,
                exchange_rate_time=now_utc(),
                is_manual_rate=True,
            )

        quote = await self.get_rate_to_usd(code)
        return ConversionQuote(
            amount=value,
            currency=code,
            amount_usd=quantize_amount(value * quote.rate),
            exchange_rate=quote.rate,
            exchange_rate_source=quote.source,
            exchange_rate_time=quote.fetched_at,
            is_fallback=quote.is_fallback,
        )
