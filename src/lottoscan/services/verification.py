"""Verification engine — checks a decoded ticket against the official draw.

Flow for one ticket:

1. Gate on the draw schedule. A round that has not been drawn yet yields
   :class:`BeforeDraw`. When the schedule cannot tell (``UNSUPPORTED``) the
   provider decides.
2. Look the result up through :class:`ResultsCache`. Anything that goes
   wrong there yields :class:`Unavailable`.
3. Tier every game independently and aggregate into :class:`Verified`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from lottoscan.schemas.lottery import LotteryTicket, LottoGame, PensionGame, Product
from lottoscan.schemas.outcomes import (
    BeforeDraw,
    GameOutcome,
    Unavailable,
    VerificationOutcome,
    Verified,
)
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult
from lottoscan.services.cache import ResultsCache, ResultsUnavailableError
from lottoscan.services.draw_schedule import DrawSchedule, Unsupported
from lottoscan.services.prizes import evaluate_lotto_game, evaluate_pension_game

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def evaluate_games(
    ticket: LotteryTicket,
    result: LottoDrawResult | PensionDrawResult,
) -> tuple[GameOutcome, ...]:
    """Tier each game of *ticket* against *result*."""
    outcomes: list[GameOutcome] = []
    for game in ticket.games:
        if isinstance(game, LottoGame) and isinstance(result, LottoDrawResult):
            outcomes.append(evaluate_lotto_game(game, result))
        elif isinstance(game, PensionGame) and isinstance(result, PensionDrawResult):
            outcomes.append(evaluate_pension_game(game, result))
        else:
            msg = f"Cannot evaluate {type(game).__name__} against {result.product} results"
            raise ValueError(msg)
    return tuple(outcomes)


def best_tier(outcomes: tuple[GameOutcome, ...]) -> int:
    """Lowest positive tier across games, 0 when nothing won."""
    winning = [o.tier for o in outcomes if o.tier > 0]
    return min(winning) if winning else 0


class VerificationEngine:
    """Orchestrates schedule gate, results lookup and prize evaluation."""

    def __init__(
        self,
        results: ResultsCache,
        schedule: DrawSchedule | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.results = results
        self.schedule = schedule or DrawSchedule()
        self.clock = clock

    def verify(
        self,
        ticket: LotteryTicket,
        now: datetime | None = None,
        current_round: int | None = None,
    ) -> VerificationOutcome:
        """Verify *ticket* as of *now*.

        Args:
            ticket: Decoded lottery ticket.
            now: Evaluation instant, defaults to the engine clock.
            current_round: Caller-known current round, needed for products
                without a round epoch.
        """
        now = now or self.clock()
        product = Product(ticket.product)

        completed = self.schedule.is_draw_completed(
            product,
            ticket.round,
            now,
            current_round_override=current_round,
        )
        if isinstance(completed, Unsupported):
            logger.debug("Draw gate unsupported for %s, asking the provider", product.value)
        elif not completed:
            round_draw_at = self.schedule.draw_time(product, ticket.round)
            logger.info("%s round %d not drawn yet", product.value, ticket.round)
            return BeforeDraw(
                product=product,
                round=ticket.round,
                next_draw_at=self.schedule.next_draw_at(product, now),
                round_draw_at=None if isinstance(round_draw_at, Unsupported) else round_draw_at,
            )

        try:
            result = self.results.get(product, ticket.round)
        except ResultsUnavailableError as e:
            return Unavailable(product=product, round=ticket.round, reason=e.detail)

        games = evaluate_games(ticket, result)
        total = sum(o.prize_amount for o in games)
        outcome = Verified(
            product=product,
            round=ticket.round,
            result=result,
            games=games,
            best_tier=best_tier(games),
            total_prize=total,
        )
        logger.info(
            "Verified %s round %d: %d games, best tier %d, total %d",
            product.value,
            ticket.round,
            len(games),
            outcome.best_tier,
            total,
        )
        return outcome
