"""Cache services — TTL key/value cache and the draw results cache.

``CacheService`` is backed by a Redis client when one is injected and by an
in-memory dict otherwise. The in-memory store honours TTLs against an
injectable clock so expiry is testable without sleeping.

``ResultsCache`` sits in front of a :class:`ResultsProvider`. Successful
lookups are kept for an hour; failures are never cached. Concurrent callers
asking for the same uncached round share one provider call.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from lottoscan.core.constants import RESULTS_CACHE_TTL_SECONDS
from lottoscan.schemas.lottery import Product
from lottoscan.schemas.results import (
    LottoDrawResult,
    PensionDrawResult,
    draw_result_adapter,
)
from lottoscan.services.providers.base import ProviderError, ResultsProvider

logger = logging.getLogger(__name__)

UNAVAILABLE_REASON = "Results are not available. The draw may not be published yet or the network failed."


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl: float


class CacheService:
    """Unified TTL caching interface backed by Redis or an in-memory dict.

    In production, *redis_client* is a ``redis.Redis`` instance.
    In tests / local use without Redis, pass ``None`` to use an in-memory dict.
    """

    def __init__(
        self,
        redis_client: Any | None = None,
        clock: Callable[[], float] = time.monotonic,
        default_ttl: int = 900,
    ) -> None:
        self._redis = redis_client
        self._clock = clock
        self._default_ttl = default_ttl
        self._memory: dict[str, _Entry] = {}
        self._memory_lock = threading.Lock()

    # ── Core operations ─────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        """Get a value by key. Returns ``None`` on miss, expiry or error."""
        if self._redis is not None:
            try:
                raw = self._redis.get(key)
                if raw is None:
                    return None
                return json.loads(raw)
            except Exception:
                logger.warning("Cache GET failed for %s", key, exc_info=True)
                return None

        with self._memory_lock:
            entry = self._memory.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= entry.ttl:
                del self._memory[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Set a value with TTL (seconds)."""
        ttl = self._default_ttl if ttl is None else ttl
        if self._redis is not None:
            try:
                serialized = json.dumps(value, default=str)
                self._redis.setex(key, ttl, serialized)
                return True
            except Exception:
                logger.warning("Cache SET failed for %s", key, exc_info=True)
                return False

        with self._memory_lock:
            self._memory[key] = _Entry(value=value, stored_at=self._clock(), ttl=ttl)
        return True

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if the key existed."""
        if self._redis is not None:
            try:
                return bool(self._redis.delete(key))
            except Exception:
                logger.warning("Cache DELETE failed for %s", key, exc_info=True)
                return False

        with self._memory_lock:
            return self._memory.pop(key, None) is not None

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern. Returns count deleted.

        Uses Redis SCAN (never KEYS). The in-memory store uses fnmatch.
        """
        if self._redis is not None:
            try:
                count = 0
                cursor = 0
                while True:
                    cursor, keys = self._redis.scan(cursor=cursor, match=pattern, count=100)
                    if keys:
                        count += self._redis.delete(*keys)
                    if cursor == 0:
                        break
                return count
            except Exception:
                logger.warning("Cache DELETE_PATTERN failed for %s", pattern, exc_info=True)
                return 0

        with self._memory_lock:
            to_delete = [k for k in self._memory if fnmatch.fnmatch(k, pattern)]
            for k in to_delete:
                del self._memory[k]
        return len(to_delete)


class ResultsUnavailableError(Exception):
    """Draw results could not be obtained. Always retryable."""

    def __init__(self, product: Product, round_no: int, detail: str = UNAVAILABLE_REASON) -> None:
        self.product = product
        self.round_no = round_no
        self.detail = detail
        super().__init__(detail)


class ResultsCache:
    """TTL cache of draw results keyed by ``(product, round)``."""

    KEY_PREFIX = "draw-result"

    def __init__(
        self,
        provider: ResultsProvider,
        cache: CacheService | None = None,
        ttl_seconds: int = RESULTS_CACHE_TTL_SECONDS,
    ) -> None:
        self.provider = provider
        self.cache = cache or CacheService()
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._in_flight: dict[str, Future[LottoDrawResult | PensionDrawResult]] = {}

    @classmethod
    def cache_key(cls, product: Product, round_no: int) -> str:
        return f"{cls.KEY_PREFIX}:{Product(product).value}:{round_no}"

    def get(self, product: Product, round_no: int) -> LottoDrawResult | PensionDrawResult:
        """Return the result for ``(product, round_no)``.

        Raises:
            ResultsUnavailableError: The provider had nothing or failed.
        """
        key = self.cache_key(product, round_no)
        cached = self._lookup(key, product, round_no)
        if cached is not None:
            return cached

        with self._lock:
            future = self._in_flight.get(key)
            leader = future is None
            if future is None:
                future = Future()
                self._in_flight[key] = future

        if not leader:
            logger.debug("Joining in-flight fetch for %s", key)
            return future.result()

        try:
            # A previous leader may have stored the entry after our first lookup.
            result = self._lookup(key, product, round_no)
            if result is None:
                result = self._fetch(product, round_no)
                self.cache.set(key, result.model_dump(mode="json"), ttl=self.ttl_seconds)
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._in_flight.pop(key, None)

    def invalidate(self, product: Product, round_no: int) -> bool:
        """Drop the cached result for one round."""
        return self.cache.delete(self.cache_key(product, round_no))

    def clear(self) -> int:
        """Drop every cached draw result."""
        return self.cache.delete_pattern(f"{self.KEY_PREFIX}:*")

    # ── Internals ───────────────────────────────────────────────────

    def _lookup(
        self,
        key: str,
        product: Product,
        round_no: int,
    ) -> LottoDrawResult | PensionDrawResult | None:
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            result = draw_result_adapter.validate_python(raw)
        except ValidationError:
            logger.warning("Discarding undecodable cache entry %s", key)
            self.cache.delete(key)
            return None
        if result.product != product or result.round != round_no:
            logger.warning(
                "Cache data mismatch: requested %s round %d, cached %s round %d",
                product,
                round_no,
                result.product,
                result.round,
            )
            self.cache.delete(key)
            return None
        return result

    def _fetch(self, product: Product, round_no: int) -> LottoDrawResult | PensionDrawResult:
        try:
            result = self.provider.fetch(product, round_no)
        except ProviderError as e:
            logger.warning("Results fetch failed for %s round %d: %s", product, round_no, e)
            raise ResultsUnavailableError(product, round_no) from e
        except Exception as e:
            logger.warning(
                "Provider %s raised %s for %s round %d",
                type(self.provider).__name__,
                type(e).__name__,
                product,
                round_no,
                exc_info=True,
            )
            raise ResultsUnavailableError(product, round_no) from e

        if result is None:
            logger.info("Results for %s round %d are not published", product, round_no)
            raise ResultsUnavailableError(product, round_no)

        if not isinstance(result, (LottoDrawResult, PensionDrawResult)):
            logger.warning(
                "Provider returned %s for %s round %d",
                type(result).__name__,
                product,
                round_no,
            )
            raise ResultsUnavailableError(product, round_no)

        if result.product != product or result.round != round_no:
            logger.warning(
                "Provider returned %s round %d for %s round %d",
                result.product,
                result.round,
                product,
                round_no,
            )
            raise ResultsUnavailableError(product, round_no)

        logger.info("Fetched results for %s round %d", product, round_no)
        return result
