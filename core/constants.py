"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → reimx/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

APP_VERSION: str = "1.0.0"


class ExchangeRateEndpoints:
    """환율 API 엔드포인트 (고정값)

    공식 문서: https://www.exchangerate-api.com/docs/free
    """

    OPEN_ER_API_URL: str = "https://open.er-api.com/v6/latest"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 환율 캐시 TTL (초)
    RATE_CACHE_TTL_SEC: int = 60
    RATE_TIMEOUT_SEC: float = 10.0

    # 지급 토큰 (1 USD ≈ 1 USDT 가정)
    PAYOUT_TOKEN: str = "USDT"
    PAYOUT_DECIMALS: int = 6

    # 자산 상세 조회 시 함께 반환하는 최근 기록 수
    RECENT_RECORD_LIMIT: int = 5


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "reimx_prod.db"
    DEV_DB: Path = DATA_DIR / "reimx_dev.db"


# 지원 통화 목록 (신청서 입력 가능 통화)
SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "USD",
    "CNY",
    "RMB",
    "HKD",
    "EUR",
    "GBP",
    "JPY",
    "AUD",
    "CAD",
    "CHF",
    "SGD",
    "KRW",
    "INR",
    "IDR",
    "THB",
    "TWD",
    "MYR",
    "PHP",
    "VND",
    "NZD",
)

# API 조회용 통화 별칭
CURRENCY_ALIASES: dict[str, str] = {
    "RMB": "CNY",
}

# 하드코딩된 기본 환율 (1 통화 = ? USD, API 실패 시 최후의 폴백)
DEFAULT_USD_RATES: dict[str, Decimal] = {
    "CNY": Decimal("0.14"),
    "RMB": Decimal("0.14"),
    "HKD": Decimal("0.128"),
    "EUR": Decimal("1.09"),
    "GBP": Decimal("1.27"),
    "JPY": Decimal("0.0068"),
    "AUD": Decimal("0.66"),
    "CAD": Decimal("0.74"),
    "CHF": Decimal("1.11"),
    "SGD": Decimal("0.74"),
    "KRW": Decimal("0.00073"),
    "INR": Decimal("0.012"),
    "IDR": Decimal("0.000064"),
    "THB": Decimal("0.028"),
    "TWD": Decimal("0.032"),
    "MYR": Decimal("0.21"),
    "PHP": Decimal("0.018"),
    "VND": Decimal("0.000041"),
    "NZD": Decimal("0.61"),
}

# 관리자 권한 역할
ADMIN_ROLES: frozenset[str] = frozenset({"admin", "superadmin"})
