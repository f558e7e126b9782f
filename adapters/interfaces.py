"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Protocol, runtime_checkable

from adapters.models import FetchedRate


@runtime_checkable
class IExchangeRateClient(Protocol):
    """환율 API 클라이언트 인터페이스

    환율은 반드시 Decimal 타입 사용.
    실패 시 ExchangeRateFetchError 발생 (httpx 예외를 그대로 노출하지 않음).
    """

    async def fetch_usd_rate(self, currency: str) -> FetchedRate:
        """1 통화당 USD 환율 조회

        Args:
            currency: API 통화 코드 (예: CNY)

        Returns:
            FetchedRate
        """
        ...

    async def close(self) -> None:
        """연결 종료"""
        ...
