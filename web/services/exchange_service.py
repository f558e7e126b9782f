"""
환율 서비스

프로세스 전역 ExchangeRateResolver를 사용 (캐시 공유).
"""

from typing import Any

from core.constants import SUPPORTED_CURRENCIES
from core.exchange.resolver import ExchangeRateResolver


class ExchangeService:
    """환율 서비스

    Args:
        resolver: 환율 해석기
    """

    def __init__(self, resolver: ExchangeRateResolver):
        self.resolver = resolver

    async def get_latest(self, currency: str) -> dict[str, Any]:
        """1 통화당 USD 환율"""
        quote = await self.resolver.get_rate_to_usd(currency)
        return quote.to_dict()

    async def get_all_latest(self) -> dict[str, Any]:
        """지원 통화 전체 환율"""
        rates = {}
        for currency in SUPPORTED_CURRENCIES:
            quote = await self.resolver.get_rate_to_usd(currency)
            rates[currency] = quote.to_dict()
        return {"base": "USD", "rates": rates}

    async def convert(
        self,
        amount: Any,
        currency: str,
        manual_rate: Any = None,
    ) -> dict[str, Any]:
        """USD 환산"""
        conversion = await self.resolver.convert_to_usd(
            amount,
            currency,
            manual_rate=manual_rate,
        )
        return conversion.to_dict()
