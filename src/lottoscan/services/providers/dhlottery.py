"""DhLottery result provider.

Maps the public DhLottery JSON endpoints onto draw result schemas. The HTTP
transport is injected as ``http_get(url) -> decoded JSON`` so the engine
never owns network I/O.
"""

from __future__ import annotations

import logging
import time
import urllib.parse
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import ValidationError

from lottoscan.core.constants import DHLOTTERY_LOTTO_URL, DHLOTTERY_PENSION_URL
from lottoscan.schemas.lottery import Product
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult
from lottoscan.services.providers.base import ProviderError, ResultsProvider

logger = logging.getLogger(__name__)

HttpGet = Callable[[str], Any]


class DhLotteryProvider(ResultsProvider):
    """DhLottery results for Lotto 6/45 and Pension 720+."""

    provider_name = "dhlottery"

    def __init__(
        self,
        http_get: HttpGet,
        lotto_url: str = DHLOTTERY_LOTTO_URL,
        pension_url: str = DHLOTTERY_PENSION_URL,
    ) -> None:
        self.http_get = http_get
        self.lotto_url = lotto_url
        self.pension_url = pension_url

    # ── Public API ──────────────────────────────────────────────────

    def fetch(
        self,
        product: Product,
        round_no: int,
    ) -> LottoDrawResult | PensionDrawResult | None:
        if product == Product.LOTTO645:
            return self.fetch_lotto(round_no)
        if product == Product.PENSION720:
            return self.fetch_pension(round_no)
        raise ProviderError(self.provider_name, f"Unsupported product: {product!r}")

    def lotto_request_url(self, round_no: int) -> str:
        return f"{self.lotto_url}&{urllib.parse.urlencode({'drwNo': round_no})}"

    def pension_request_url(self) -> str:
        # Cache-busting parameter, the endpoint is otherwise cached upstream
        return f"{self.pension_url}?{urllib.parse.urlencode({'_': int(time.time() * 1000)})}"

    def fetch_lotto(self, round_no: int) -> LottoDrawResult | None:
        data = self._get(self.lotto_request_url(round_no))
        return parse_lotto_response(data, round_no)

    def fetch_pension(self, round_no: int) -> PensionDrawResult | None:
        data = self._get(self.pension_request_url())
        return parse_pension_response(data, round_no)

    # ── Internals ───────────────────────────────────────────────────

    def _get(self, url: str) -> Any:
        try:
            return self.http_get(url)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.provider_name, f"Request failed: {e}", retriable=True) from e


def parse_lotto_response(data: Any, round_no: int) -> LottoDrawResult | None:
    """Map a ``getLottoNumber`` response to :class:`LottoDrawResult`.

    Returns ``None`` when the round is not published or the response is for
    a different round.
    """
    if not isinstance(data, dict):
        raise ProviderError("dhlottery", "Unexpected lotto response shape")

    if data.get("returnValue") != "success":
        return None

    if data.get("drwNo") != round_no:
        logger.warning(
            "Lotto API mismatch: requested round %d, got %s",
            round_no,
            data.get("drwNo"),
        )
        return None

    try:
        return LottoDrawResult(
            round=data["drwNo"],
            numbers=[data[f"drwtNo{i}"] for i in range(1, 7)],
            bonus_number=data["bnusNo"],
            draw_date=_parse_date(data.get("drwNoDate")),
            first_prize_amount=data.get("firstWinamnt") or 0,
            first_winner_count=data.get("firstPrzwnerCo") or 0,
            total_sales_amount=data.get("totSellamnt"),
        )
    except (KeyError, ValidationError) as e:
        raise ProviderError("dhlottery", f"Malformed lotto response: {e}") from e


def parse_pension_response(data: Any, round_no: int) -> PensionDrawResult | None:
    """Pick *round_no* out of the Pension 720+ result list.

    A missing round usually means the draw has not been published yet.
    """
    if not isinstance(data, list):
        raise ProviderError("dhlottery", "Unexpected pension response shape")

    row = next(
        (item for item in data if isinstance(item, dict) and _as_int(item.get("psltEpsd")) == round_no),
        None,
    )
    if row is None:
        return None

    try:
        return PensionDrawResult(
            round=round_no,
            winning_group=int(row["wnBndNo"]),
            winning_number=str(row["wnRnkVl"]),
            bonus_number=str(row["bnsRnkVl"]),
            draw_date=_parse_date(row.get("psltRflYmd")),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ProviderError("dhlottery", f"Malformed pension response: {e}") from e


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_date(value: Any) -> date | None:
    """Accept ``YYYY-MM-DD`` or ``YYYYMMDD``."""
    if not value:
        return None
    text = str(value).replace("-", "")
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        return None
