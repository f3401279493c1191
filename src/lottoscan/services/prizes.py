"""Prize rules — tier computation for Lotto 6/45 and Pension 720+ games.

Lotto 6/45 (first match wins)::

    6 matched            → 1st  (round-variable amount)
    5 matched + bonus    → 2nd  (round-variable amount)
    5 matched            → 3rd  (round-variable amount)
    4 matched            → 4th  KRW 50,000
    3 matched            → 5th  KRW 5,000

Pension 720+ main draw: group and all six digits → 1st; otherwise the
longest matching trailing run of k digits (k = 6..1) gives tier 8 - k.
A shorter suffix never overrides a longer one. Bonus draw: all six digits
equal to the bonus number → bonus tier (aggregated as 2nd).
"""

from __future__ import annotations

from lottoscan.core.constants import (
    LOTTO_FIXED_PRIZES,
    LOTTO_PRIZE_INFO,
    PENSION_BONUS_TIER,
    PENSION_NUMBER_LENGTH,
    PENSION_PRIZE_INFO,
)
from lottoscan.schemas.lottery import LottoGame, PensionDraw, PensionGame
from lottoscan.schemas.outcomes import GameOutcome
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult


def lotto_tier(match_count: int, has_bonus: bool) -> int:
    """Map a match count (and bonus hit) to a Lotto 6/45 tier, 0 for no win."""
    if match_count == 6:
        return 1
    if match_count == 5 and has_bonus:
        return 2
    if match_count == 5:
        return 3
    if match_count == 4:
        return 4
    if match_count == 3:
        return 5
    return 0


def evaluate_lotto_game(game: LottoGame, result: LottoDrawResult) -> GameOutcome:
    """Evaluate one Lotto 6/45 line against the round's result."""
    winning = set(result.numbers)
    matched = tuple(n for n in game.numbers if n in winning)
    has_bonus = result.bonus_number in game.numbers
    tier = lotto_tier(len(matched), has_bonus)

    if tier in LOTTO_FIXED_PRIZES:
        prize = LOTTO_FIXED_PRIZES[tier]
    elif tier > 0:
        prize = result.prize_for_tier(tier)
    else:
        prize = 0

    return GameOutcome(
        label=game.label,
        tier=tier,
        tier_name=LOTTO_PRIZE_INFO[tier]["name"],
        prize_amount=prize,
        matched_count=len(matched),
        matched_numbers=matched,
        has_bonus=has_bonus,
    )


def matching_suffix_length(number: str, winning: str) -> int:
    """Length of the longest common trailing run of digits (0-6)."""
    for k in range(PENSION_NUMBER_LENGTH, 0, -1):
        if number[-k:] == winning[-k:]:
            return k
    return 0


def pension_main_tier(group: int, number: str, winning_group: int, winning_number: str) -> int:
    """Tier for the Pension 720+ main draw, 0 for no win."""
    if group == winning_group and number == winning_number:
        return 1
    k = matching_suffix_length(number, winning_number)
    if k == 0:
        return 0
    return 8 - k


def evaluate_pension_game(game: PensionGame, result: PensionDrawResult) -> GameOutcome:
    """Evaluate one Pension 720+ entry against the round's result."""
    if game.label == PensionDraw.BONUS:
        won = game.number == result.bonus_number
        info = PENSION_PRIZE_INFO["bonus" if won else 0]
        return GameOutcome(
            label=game.label.value,
            tier=PENSION_BONUS_TIER if won else 0,
            tier_name=str(info["name"]),
            prize_amount=int(info["prize"]),
            matched_digits=PENSION_NUMBER_LENGTH if won else 0,
            is_bonus_tier=won,
        )

    tier = pension_main_tier(game.group, game.number, result.winning_group, result.winning_number)
    info = PENSION_PRIZE_INFO[tier]
    return GameOutcome(
        label=game.label.value,
        tier=tier,
        tier_name=str(info["name"]),
        prize_amount=int(info["prize"]),
        matched_digits=matching_suffix_length(game.number, result.winning_number),
    )


def format_prize(amount: int | None) -> str:
    """Render a KRW amount with Korean units.

    ``0`` → ``0원``, ``5000`` → ``5,000원``, ``50000`` → ``5만원``,
    ``1234000000`` → ``12억 3,400만원``.
    """
    if not amount:
        return "0원"

    if amount >= 100_000_000:
        eok = amount // 100_000_000
        man = (amount % 100_000_000) // 10_000
        if man > 0:
            return f"{eok}억 {man:,}만원"
        return f"{eok}억원"

    if amount >= 10_000:
        return f"{amount // 10_000:,}만원"

    return f"{amount:,}원"
