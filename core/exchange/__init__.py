"""
환율 해석

TTL 캐시 + 환율 API + 기본 환율 폴백.
"""

from core.exchange.cache import RateCache
from core.exchange.resolver import (
    SOURCE_FALLBACK,
    SOURCE_MANUAL,
    SOURCE_STATIC_USD,
    ConversionQuote,
    ExchangeRateError,
    ExchangeRateResolver,
    RateQuote,
    normalize_currency,
)

__all__ = [
    "RateCache",
    "ExchangeRateResolver",
    "ExchangeRateError",
    "RateQuote",
    "ConversionQuote",
    "normalize_currency",
    "SOURCE_FALLBACK",
    "SOURCE_MANUAL",
    "SOURCE_STATIC_USD",
]
