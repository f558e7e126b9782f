"""
환율 캐시

TTL 기반 메모리 캐시. 시계(clock)를 주입받아 테스트에서 시간 경과를 재현할 수 있다.
"""

import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from core.constants import Defaults

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    stored_at: float


class RateCache(Generic[T]):
    """TTL 캐시

    clock() - stored_at >= ttl 이면 만료.

    Args:
        ttl_seconds: 유효 시간 (초)
        clock: 단조 증가 시계 (기본 time.monotonic)
    """

    def __init__(
        self,
        ttl_seconds: float = Defaults.RATE_CACHE_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive: {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> T | None:
        """유효한 값 반환 (없거나 만료면 None, 만료 항목은 제거)"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None

        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
