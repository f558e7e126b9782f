"""
Mock 환율 클라이언트

테스트용 메모리 내 환율 제공자.
IExchangeRateClient Protocol 준수.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from adapters.exchange_rate.rest_client import ExchangeRateFetchError
from adapters.models import FetchedRate


@dataclass
class MockRateState:
    """Mock 상태"""

    # 통화 → USD 환율
    rates: dict[str, Decimal] = field(default_factory=dict)

    # 실패 시뮬레이션
    should_fail: bool = False
    failure_message: str = "Mock failure"

    # 호출 기록
    calls: list[str] = field(default_factory=list)

    fetched_at: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc)
    )


class MockExchangeRateClient:
    """Mock 환율 클라이언트

    사용 예시:
    ```python
    client = MockExchangeRateClient({"CNY": Decimal("0.138")})
    rate = await client.fetch_usd_rate("CNY")

    client.set_failure(True)  # 이후 조회는 ExchangeRateFetchError
    ```
    """

    SOURCE = "mock"

    def __init__(self, rates: dict[str, Decimal] | None = None):
        self.state = MockRateState(rates=dict(rates or {}))
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.state.calls)

    def set_rate(self, currency: str, rate: Decimal) -> None:
        self.state.rates[currency.upper()] = rate

    def set_failure(self, should_fail: bool, message: str = "Mock failure") -> None:
        self.state.should_fail = should_fail
        self.state.failure_message = message

    async def fetch_usd_rate(self, currency: str) -> FetchedRate:
        self.state.calls.append(currency)

        if self.state.should_fail:
            raise ExchangeRateFetchError(currency, self.state.failure_message)

        rate = self.state.rates.get(currency)
        if rate is None:
            raise ExchangeRateFetchError(currency, "Unknown currency", status_code=404)

        return FetchedRate(
            currency=currency,
            rate=rate,
            fetched_at=self.state.fetched_at,
            source=self.SOURCE,
        )

    async def close(self) -> None:
        self.closed = True
