"""
설정 로더

settings.yaml 로드 및 환율/지급/웹 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, ExchangeRateEndpoints, Paths
from core.types import AppMode


@dataclass(frozen=True)
class ExchangeRateConfig:
    """환율 API 설정"""

    api_base: str = ExchangeRateEndpoints.OPEN_ER_API_URL
    cache_ttl_sec: int = Defaults.RATE_CACHE_TTL_SEC
    timeout_sec: float = Defaults.RATE_TIMEOUT_SEC


@dataclass(frozen=True)
class PayoutConfig:
    """지급 토큰 설정

    decimals: 토큰 최소 단위 자릿수 (USDT=6)
    """

    token: str = Defaults.PAYOUT_TOKEN
    decimals: int = Defaults.PAYOUT_DECIMALS


@dataclass(frozen=True)
class WebConfig:
    """웹 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    exchange_rate: ExchangeRateConfig = field(default_factory=ExchangeRateConfig)
    payout: PayoutConfig = field(default_factory=PayoutConfig)
    web: WebConfig = field(default_factory=WebConfig)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션 형식이 잘못되었습니다")
    return section


def _parse_exchange_rate(section: dict[str, Any]) -> ExchangeRateConfig:
    try:
        config = ExchangeRateConfig(
            api_base=str(section.get("api_base", ExchangeRateEndpoints.OPEN_ER_API_URL)),
            cache_ttl_sec=int(section.get("cache_ttl_sec", Defaults.RATE_CACHE_TTL_SEC)),
            timeout_sec=float(section.get("timeout_sec", Defaults.RATE_TIMEOUT_SEC)),
        )
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"exchange_rate 설정 값이 잘못되었습니다: {e}") from e

    if config.cache_ttl_sec <= 0 or config.timeout_sec <= 0:
        raise SettingsLoadError("exchange_rate의 cache_ttl_sec, timeout_sec는 양수여야 합니다")
    return config


def _parse_payout(section: dict[str, Any]) -> PayoutConfig:
    try:
        config = PayoutConfig(
            token=str(section.get("token", Defaults.PAYOUT_TOKEN)),
            decimals=int(section.get("decimals", Defaults.PAYOUT_DECIMALS)),
        )
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"payout 설정 값이 잘못되었습니다: {e}") from e

    if config.decimals < 0:
        raise SettingsLoadError("payout.decimals는 0 이상이어야 합니다")
    return config


def _parse_web(section: dict[str, Any]) -> WebConfig:
    try:
        return WebConfig(
            host=str(section.get("host", Defaults.WEB_HOST)),
            port=int(section.get("port", Defaults.WEB_PORT)),
        )
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"web 설정 값이 잘못되었습니다: {e}") from e


def load_settings(path: Path | None = None) -> AppSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 인스턴스 (없는 섹션은 기본값)

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(str(mode_str).lower())
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    return AppSettings(
        mode=mode,
        exchange_rate=_parse_exchange_rate(_section(data, "exchange_rate")),
        payout=_parse_payout(_section(data, "payout")),
        web=_parse_web(_section(data, "web")),
    )


def get_db_path(settings: AppSettings) -> Path:
    """모드에 따른 DB 경로 반환"""
    if settings.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: AppSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            type(self)._settings = load_settings(settings_path)

    @property
    def app(self) -> AppSettings:
        assert self._settings is not None
        return self._settings

    @property
    def mode(self) -> AppMode:
        """현재 실행 모드"""
        return self.app.mode

    @property
    def exchange_rate(self) -> ExchangeRateConfig:
        return self.app.exchange_rate

    @property
    def payout(self) -> PayoutConfig:
        return self.app.payout

    @property
    def web(self) -> WebConfig:
        return self.app.web

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        return get_db_path(self.app)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
