"""Tests for CacheService and ResultsCache — in-memory, Redis mock and concurrency paths."""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from lottoscan.schemas.lottery import Product
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult
from lottoscan.services.cache import CacheService, ResultsCache, ResultsUnavailableError
from lottoscan.services.providers.base import ProviderError
from tests.conftest import FakeClock, StaticProvider, lotto_result, pension_result

# ── CacheService in-memory ──────────────────────────────────────────


class TestCacheServiceInMemory:
    def test_get_miss_returns_none(self):
        assert CacheService().get("nonexistent") is None

    def test_set_and_get(self):
        cache = CacheService()
        assert cache.set("key1", {"data": 42}) is True
        assert cache.get("key1") == {"data": 42}

    def test_entry_expires_at_ttl(self, fake_clock: FakeClock):
        cache = CacheService(clock=fake_clock)
        cache.set("k", "v", ttl=60)
        fake_clock.advance(59)
        assert cache.get("k") == "v"
        fake_clock.advance(1)
        assert cache.get("k") is None

    def test_default_ttl(self, fake_clock: FakeClock):
        cache = CacheService(clock=fake_clock, default_ttl=10)
        cache.set("k", "v")
        fake_clock.advance(10)
        assert cache.get("k") is None

    def test_delete(self):
        cache = CacheService()
        cache.set("k", 1)
        assert cache.delete("k") is True
        assert cache.delete("k") is False

    def test_delete_pattern(self):
        cache = CacheService()
        cache.set("draw-result:lotto645:1", 1)
        cache.set("draw-result:pension720:2", 2)
        cache.set("other:key", 3)
        assert cache.delete_pattern("draw-result:*") == 2
        assert cache.get("other:key") == 3


# ── CacheService Redis ──────────────────────────────────────────────


class TestCacheServiceRedis:
    def test_set_uses_setex_with_json(self, mock_redis: MagicMock):
        cache = CacheService(redis_client=mock_redis)
        cache.set("k", {"a": 1}, ttl=30)
        mock_redis.setex.assert_called_once_with("k", 30, json.dumps({"a": 1}))
        assert cache.get("k") == {"a": 1}

    def test_get_error_is_a_miss(self):
        client = MagicMock()
        client.get.side_effect = ConnectionError("down")
        assert CacheService(redis_client=client).get("k") is None

    def test_set_error_returns_false(self):
        client = MagicMock()
        client.setex.side_effect = ConnectionError("down")
        assert CacheService(redis_client=client).set("k", 1) is False

    def test_delete_pattern_scans(self):
        client = MagicMock()
        client.scan.return_value = (0, ["draw-result:lotto645:1", "draw-result:lotto645:2"])
        client.delete.return_value = 2
        assert CacheService(redis_client=client).delete_pattern("draw-result:*") == 2
        client.scan.assert_called_once_with(cursor=0, match="draw-result:*", count=100)


# ── ResultsCache ────────────────────────────────────────────────────


class TestResultsCache:
    def test_cache_key(self):
        assert ResultsCache.cache_key(Product.LOTTO645, 1207) == "draw-result:lotto645:1207"

    def test_fetches_once_within_ttl(self, results_cache: ResultsCache, static_provider: StaticProvider):
        first = results_cache.get(Product.LOTTO645, 1207)
        second = results_cache.get(Product.LOTTO645, 1207)
        assert isinstance(first, LottoDrawResult)
        assert first == second
        assert static_provider.calls == [("lotto645", 1207)]

    def test_refetches_after_ttl(
        self,
        results_cache: ResultsCache,
        static_provider: StaticProvider,
        fake_clock: FakeClock,
    ):
        results_cache.get(Product.LOTTO645, 1207)
        fake_clock.advance(3599)
        results_cache.get(Product.LOTTO645, 1207)
        assert len(static_provider.calls) == 1
        fake_clock.advance(1)
        results_cache.get(Product.LOTTO645, 1207)
        assert len(static_provider.calls) == 2

    def test_pension_result(self, results_cache: ResultsCache):
        result = results_cache.get(Product.PENSION720, 300)
        assert isinstance(result, PensionDrawResult)
        assert result.winning_number == "619968"

    def test_unpublished_round_not_cached(self, results_cache: ResultsCache, static_provider: StaticProvider):
        for _ in range(2):
            with pytest.raises(ResultsUnavailableError) as exc_info:
                results_cache.get(Product.LOTTO645, 1208)
            assert exc_info.value.round_no == 1208
        assert len(static_provider.calls) == 2

    def test_provider_error_not_cached(self, fake_clock: FakeClock):
        provider = StaticProvider({("lotto645", 1207): ProviderError("static", "timeout", retriable=True)})
        cache = ResultsCache(provider, cache=CacheService(clock=fake_clock))
        with pytest.raises(ResultsUnavailableError):
            cache.get(Product.LOTTO645, 1207)

        provider.results[("lotto645", 1207)] = lotto_result(1207)
        assert cache.get(Product.LOTTO645, 1207).round == 1207
        assert len(provider.calls) == 2

    def test_wrong_round_rejected(self):
        provider = StaticProvider({("lotto645", 1207): lotto_result(1206)})
        cache = ResultsCache(provider)
        with pytest.raises(ResultsUnavailableError):
            cache.get(Product.LOTTO645, 1207)
        assert cache.cache.get(ResultsCache.cache_key(Product.LOTTO645, 1207)) is None

    def test_wrong_product_rejected(self):
        provider = StaticProvider({("lotto645", 300): pension_result(300)})
        with pytest.raises(ResultsUnavailableError):
            ResultsCache(provider).get(Product.LOTTO645, 300)

    @pytest.mark.parametrize("error", [ConnectionError("socket reset"), TimeoutError(), ValueError("bad payload")])
    def test_unexpected_provider_exception_becomes_unavailable(self, error: Exception):
        provider = StaticProvider({("lotto645", 1207): error})
        cache = ResultsCache(provider)
        with pytest.raises(ResultsUnavailableError) as exc_info:
            cache.get(Product.LOTTO645, 1207)
        assert exc_info.value.__cause__ is error
        assert cache.cache.get(ResultsCache.cache_key(Product.LOTTO645, 1207)) is None

    def test_non_result_object_rejected(self):
        provider = StaticProvider({("lotto645", 1207): {"round": 1207}})
        with pytest.raises(ResultsUnavailableError):
            ResultsCache(provider).get(Product.LOTTO645, 1207)

    def test_mismatched_cache_entry_is_discarded(self, results_cache: ResultsCache, static_provider: StaticProvider):
        key = ResultsCache.cache_key(Product.LOTTO645, 1207)
        results_cache.cache.set(key, lotto_result(1000).model_dump(mode="json"))
        assert results_cache.get(Product.LOTTO645, 1207).round == 1207
        assert len(static_provider.calls) == 1

    def test_invalidate(self, results_cache: ResultsCache, static_provider: StaticProvider):
        results_cache.get(Product.LOTTO645, 1207)
        assert results_cache.invalidate(Product.LOTTO645, 1207) is True
        results_cache.get(Product.LOTTO645, 1207)
        assert len(static_provider.calls) == 2

    def test_clear(self, results_cache: ResultsCache):
        results_cache.get(Product.LOTTO645, 1207)
        results_cache.get(Product.PENSION720, 300)
        assert results_cache.clear() == 2

    def test_redis_backed_round_trip(self, mock_redis: MagicMock, static_provider: StaticProvider):
        cache = ResultsCache(static_provider, cache=CacheService(redis_client=mock_redis), ttl_seconds=3600)
        first = cache.get(Product.LOTTO645, 1207)
        second = cache.get(Product.LOTTO645, 1207)
        assert first == second
        assert second.tier_prizes == {2: 60_000_000, 3: 1_500_000}
        assert len(static_provider.calls) == 1
        assert mock_redis.setex.call_args.args[1] == 3600

    def test_redis_outage_degrades_to_provider(self, static_provider: StaticProvider):
        client = MagicMock()
        client.get.side_effect = ConnectionError("down")
        client.setex.side_effect = ConnectionError("down")
        cache = ResultsCache(static_provider, cache=CacheService(redis_client=client))
        assert cache.get(Product.LOTTO645, 1207).round == 1207
        assert cache.get(Product.LOTTO645, 1207).round == 1207
        assert len(static_provider.calls) == 2


# ── Concurrency ─────────────────────────────────────────────────────


class BlockingProvider(StaticProvider):
    """Holds every fetch until released."""

    def __init__(self, results=None) -> None:
        super().__init__(results)
        self.entered = threading.Event()
        self.release = threading.Event()
        self._calls_lock = threading.Lock()

    def fetch(self, product, round_no):
        with self._calls_lock:
            self.calls.append((Product(product).value, round_no))
        self.entered.set()
        self.release.wait(timeout=5)
        value = self.results.get((Product(product).value, round_no))
        if isinstance(value, Exception):
            raise value
        return value


class TestResultsCacheConcurrency:
    def test_concurrent_callers_share_one_fetch(self):
        provider = BlockingProvider({("lotto645", 1207): lotto_result(1207)})
        cache = ResultsCache(provider)

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(cache.get, Product.LOTTO645, 1207) for _ in range(8)]
            assert provider.entered.wait(timeout=5)
            time.sleep(0.1)
            provider.release.set()
            results = [f.result(timeout=5) for f in futures]

        assert len(provider.calls) == 1
        assert all(r.round == 1207 for r in results)

    def test_waiters_see_the_failure(self):
        provider = BlockingProvider()
        cache = ResultsCache(provider)

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(cache.get, Product.LOTTO645, 1300) for _ in range(4)]
            assert provider.entered.wait(timeout=5)
            time.sleep(0.1)
            provider.release.set()
            for f in futures:
                with pytest.raises(ResultsUnavailableError):
                    f.result(timeout=5)

    def test_different_keys_do_not_block_each_other(self):
        provider = BlockingProvider({("lotto645", 1207): lotto_result(1207)})
        fast = StaticProvider({("pension720", 300): pension_result(300)})

        class Router(StaticProvider):
            def fetch(self, product, round_no):
                if Product(product) == Product.LOTTO645:
                    return provider.fetch(product, round_no)
                return fast.fetch(product, round_no)

        cache = ResultsCache(Router())
        with ThreadPoolExecutor(max_workers=2) as pool:
            slow = pool.submit(cache.get, Product.LOTTO645, 1207)
            assert provider.entered.wait(timeout=5)
            # Lotto fetch is still blocked; the pension key resolves independently.
            assert cache.get(Product.PENSION720, 300).round == 300
            provider.release.set()
            assert slow.result(timeout=5).round == 1207
