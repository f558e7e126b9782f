"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    content = """# 테스트용 settings.yaml
mode: development

exchange_rate:
  api_base: https://rates.example.com/v6/latest
  cache_ttl_sec: 30
  timeout_sec: 5

payout:
  token: USDC
  decimals: 6

web:
  host: 0.0.0.0
  port: 9000
"""
    path = temp_dir / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, 선택 섹션 없음)"""
    path = temp_dir / "settings_prod.yaml"
    path.write_text("mode: production\n", encoding="utf-8")
    return path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    path = temp_dir / "settings_invalid.yaml"
    path.write_text("mode: staging\n", encoding="utf-8")
    return path


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_reimx.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()
