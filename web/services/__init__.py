"""
Web 서비스 패키지

비즈니스 로직 처리
"""

from web.services.asset_service import AssetService
from web.services.exchange_service import ExchangeService
from web.services.payout_service import PayoutService

__all__ = [
    "AssetService",
    "ExchangeService",
    "PayoutService",
]
