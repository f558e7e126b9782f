"""
환율 API 어댑터
"""

from adapters.exchange_rate.rest_client import (
    ExchangeRateFetchError,
    ExchangeRateRestClient,
    parse_rate_response,
)

__all__ = [
    "ExchangeRateFetchError",
    "ExchangeRateRestClient",
    "parse_rate_response",
]
