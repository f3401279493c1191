"""Scan service — single entry point for interpreting scanned strings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from lottoscan.core.config import Settings
from lottoscan.core.constants import LOTTERY_QR_MARKER
from lottoscan.core.context import new_scan_id, reset_scan_id, set_scan_id
from lottoscan.core.logging import configure_logging
from lottoscan.schemas.lottery import LotteryTicket
from lottoscan.schemas.outcomes import VerificationOutcome
from lottoscan.schemas.payloads import ScannedPayload
from lottoscan.services import classifier, lottery_decoder
from lottoscan.services.cache import CacheService, ResultsCache
from lottoscan.services.draw_schedule import DrawSchedule
from lottoscan.services.notifications import NotificationPolicy
from lottoscan.services.providers.dhlottery import DhLotteryProvider, HttpGet
from lottoscan.services.verification import VerificationEngine

logger = logging.getLogger(__name__)


class ScanService:
    """Lottery tickets first, generic content classification otherwise."""

    def __init__(
        self,
        engine: VerificationEngine | None = None,
        lottery_marker: str = LOTTERY_QR_MARKER,
        notifications: NotificationPolicy | None = None,
    ) -> None:
        self.engine = engine
        self.lottery_marker = lottery_marker
        self.notifications = notifications or NotificationPolicy()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_get: HttpGet,
        redis_client: Any | None = None,
    ) -> ScanService:
        """Wire logging, the DhLottery provider, results cache, schedule and reminders from *settings*."""
        configure_logging(settings)
        provider = DhLotteryProvider(
            http_get,
            lotto_url=settings.dhlottery_lotto_url,
            pension_url=settings.dhlottery_pension_url,
        )
        results = ResultsCache(
            provider,
            cache=CacheService(redis_client=redis_client),
            ttl_seconds=settings.results_cache_ttl_seconds,
        )
        engine = VerificationEngine(results, schedule=DrawSchedule(settings.draw_tz))
        logger.info("Scan service ready (env=%s)", settings.app_env)
        return cls(
            engine=engine,
            lottery_marker=settings.lottery_qr_marker,
            notifications=NotificationPolicy.from_settings(settings),
        )

    def interpret(self, raw: str | None) -> LotteryTicket | ScannedPayload:
        """Turn a scanned string into a lottery ticket or a typed payload."""
        scan_id = new_scan_id()
        token = set_scan_id(scan_id)
        try:
            return self._interpret(raw, scan_id)
        finally:
            reset_scan_id(token)

    def _interpret(self, raw: str | None, scan_id: str) -> LotteryTicket | ScannedPayload:
        text = raw.strip() if isinstance(raw, str) else raw

        ticket = lottery_decoder.decode(text, self.lottery_marker)
        if ticket is not None:
            logger.info(
                "Scan %s decoded as %s round %d with %d game(s)",
                scan_id,
                ticket.product.value,
                ticket.round,
                ticket.game_count,
            )
            return ticket

        payload = classifier.classify(raw)
        logger.info("Scan %s classified as %s", scan_id, payload.kind.value)
        return payload

    def verify(
        self,
        ticket: LotteryTicket,
        now: datetime | None = None,
        current_round: int | None = None,
    ) -> VerificationOutcome:
        """Verify a decoded ticket through the configured engine."""
        if self.engine is None:
            msg = "ScanService was created without a verification engine"
            raise RuntimeError(msg)
        return self.engine.verify(ticket, now=now, current_round=current_round)
