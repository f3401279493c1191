"""Shared pytest fixtures and test configuration."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

import pytest

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from lottoscan.schemas.lottery import Product  # noqa: E402
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult  # noqa: E402
from lottoscan.services.cache import CacheService, ResultsCache  # noqa: E402
from lottoscan.services.draw_schedule import KST  # noqa: E402
from lottoscan.services.providers.base import ResultsProvider  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProvider(ResultsProvider):
    """Provider answering from a dict and counting calls."""

    provider_name = "static"

    def __init__(self, results: dict[tuple[str, int], Any] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, int]] = []

    def fetch(self, product: Product, round_no: int) -> Any:
        self.calls.append((Product(product).value, round_no))
        value = self.results.get((Product(product).value, round_no))
        if isinstance(value, Exception):
            raise value
        return value


def lotto_result(round_no: int = 1207, **overrides: Any) -> LottoDrawResult:
    data: dict[str, Any] = {
        "round": round_no,
        "numbers": [1, 6, 9, 10, 11, 16],
        "bonus_number": 25,
        "first_prize_amount": 2_000_000_000,
        "first_winner_count": 12,
        "tier_prizes": {2: 60_000_000, 3: 1_500_000},
    }
    data.update(overrides)
    return LottoDrawResult(**data)


def pension_result(round_no: int = 300, **overrides: Any) -> PensionDrawResult:
    data: dict[str, Any] = {
        "round": round_no,
        "winning_group": 5,
        "winning_number": "619968",
        "bonus_number": "123456",
    }
    data.update(overrides)
    return PensionDrawResult(**data)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def static_provider() -> StaticProvider:
    return StaticProvider(
        {
            ("lotto645", 1207): lotto_result(1207),
            ("pension720", 300): pension_result(300),
        }
    )


@pytest.fixture
def results_cache(static_provider: StaticProvider, fake_clock: FakeClock) -> ResultsCache:
    return ResultsCache(static_provider, cache=CacheService(clock=fake_clock), ttl_seconds=3600)


@pytest.fixture
def mock_redis() -> MagicMock:
    """Redis-like client backed by a plain dict."""
    store: dict[str, str] = {}
    client = MagicMock()
    client.get.side_effect = store.get
    client.setex.side_effect = lambda key, ttl, value: store.__setitem__(key, value)
    client.delete.side_effect = lambda *keys: sum(1 for k in keys if store.pop(k, None) is not None)
    client.store = store
    return client


@pytest.fixture
def after_lotto_1207() -> datetime:
    """Sunday after round 1207 (drawn Saturday 2026-01-17)."""
    return datetime(2026, 1, 18, 10, 0, tzinfo=KST)
