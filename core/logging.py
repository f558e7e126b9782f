"""
로깅 설정 유틸리티

Web 프로세스 공통 로깅 설정.
- 콘솔: INFO 레벨
- 파일: INFO 레벨 (TimedRotatingFileHandler, daily)

사용법:
    from core.logging import setup_logging
    setup_logging("web")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


# 로그 설정 상수
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# 불필요한 로그를 생성하는 로거 목록 (레벨 조정 대상)
NOISY_LOGGERS = [
    "aiosqlite",       # DB 쿼리마다 executing/completed 로그
    "httpcore",        # HTTP 연결 상세 로그
    "httpx",           # 환율 API 요청 로그
    "asyncio",
    "uvicorn.access",  # 요청마다 1줄
]


def get_log_dir(process_name: str) -> Path:
    """프로세스별 로그 디렉토리"""
    if process_name == "web":
        return Paths.WEB_LOGS_DIR
    return Paths.LOGS_DIR


def get_log_file_path(process_name: str) -> Path:
    """로그 파일 경로 반환

    Args:
        process_name: 프로세스 이름 ("web" 등)

    Returns:
        로그 파일 Path
    """
    return get_log_dir(process_name) / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """로깅 설정 초기화

    Daily 롤링으로 매일 자정에 새 파일 생성.

    Args:
        process_name: 프로세스 이름 ("web" 등)
        console_level: 콘솔 로그 레벨 (기본: INFO)
        file_level: 파일 로그 레벨 (기본: INFO)
        log_dir: 로그 디렉토리 (None이면 프로세스별 기본 경로)

    Returns:
        설정된 루트 Logger
    """
    log_dir = log_dir or get_log_dir(process_name)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{process_name}.log"

    # 루트는 DEBUG, 핸들러에서 필터링
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # 기존 핸들러 제거 (uvicorn reload 시 중복 방지)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # web.log.2026-02-21
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"로깅 초기화 완료: {process_name}")
    root_logger.info(f"  - 파일: {log_file} (daily rotation, {LOG_FILE_BACKUP_COUNT}일 보관)")

    return root_logger
