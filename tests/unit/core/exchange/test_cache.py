"""
환율 캐시 테스트 (가짜 시계 사용)
"""

import pytest

from core.exchange.cache import RateCache


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_get_within_ttl() -> None:
    clock = FakeClock()
    cache: RateCache[str] = RateCache(ttl_seconds=60, clock=clock)

    cache.set("CNY", "quote")
    clock.advance(59.9)

    assert cache.get("CNY") == "quote"


def test_expires_at_ttl() -> None:
    """정확히 TTL이 지나면 만료되고 항목이 제거됨"""
    clock = FakeClock()
    cache: RateCache[str] = RateCache(ttl_seconds=60, clock=clock)

    cache.set("CNY", "quote")
    clock.advance(60)

    assert cache.get("CNY") is None
    assert len(cache) == 0


def test_set_refreshes_timestamp() -> None:
    clock = FakeClock()
    cache: RateCache[str] = RateCache(ttl_seconds=10, clock=clock)

    cache.set("EUR", "old")
    clock.advance(8)
    cache.set("EUR", "new")
    clock.advance(8)

    assert cache.get("EUR") == "new"


def test_invalidate_and_clear() -> None:
    cache: RateCache[str] = RateCache(ttl_seconds=10, clock=FakeClock())
    cache.set("A", "1")
    cache.set("B", "2")

    cache.invalidate("A")
    cache.invalidate("missing")
    assert cache.get("A") is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_missing_key() -> None:
    assert RateCache(ttl_seconds=1).get("nope") is None


@pytest.mark.parametrize("ttl", [0, -1])
def test_invalid_ttl(ttl: float) -> None:
    with pytest.raises(ValueError):
        RateCache(ttl_seconds=ttl)
