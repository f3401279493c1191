"""Verification outcomes and reminder decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from lottoscan.schemas.lottery import Product
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult


@dataclass(frozen=True)
class GameOutcome:
    """Prize evaluation for a single game.

    Lotto games fill ``matched_count``/``matched_numbers``/``has_bonus``;
    pension games fill ``matched_digits``/``is_bonus_tier``.
    """

    label: str
    tier: int
    tier_name: str
    prize_amount: int = 0
    matched_count: int | None = None
    matched_numbers: tuple[int, ...] = ()
    has_bonus: bool = False
    matched_digits: int | None = None
    is_bonus_tier: bool = False

    @property
    def is_win(self) -> bool:
        return self.tier > 0


@dataclass(frozen=True)
class BeforeDraw:
    """The round has not been drawn yet. An expected state, not a failure."""

    product: Product
    round: int
    next_draw_at: datetime
    round_draw_at: datetime | None = None
    status: Literal["before_draw"] = field(default="before_draw", init=False)


@dataclass(frozen=True)
class Unavailable:
    """Results could not be obtained right now. Retry later."""

    product: Product
    round: int
    reason: str
    status: Literal["unavailable"] = field(default="unavailable", init=False)


@dataclass(frozen=True)
class Verified:
    """Per-game and ticket-level prize evaluation."""

    product: Product
    round: int
    result: LottoDrawResult | PensionDrawResult
    games: tuple[GameOutcome, ...]
    best_tier: int
    total_prize: int
    status: Literal["verified"] = field(default="verified", init=False)

    @property
    def has_win(self) -> bool:
        return self.total_prize > 0


VerificationOutcome = BeforeDraw | Unavailable | Verified


@dataclass(frozen=True)
class TicketStatus:
    """Caller-owned view of a stored ticket: only the checked flag matters here."""

    ticket_id: str
    product: Product
    checked: bool = False


class ReminderDecision(BaseModel):
    """Instruction for the external notification scheduler.

    ``key`` identifies the reminder slot; scheduling under an existing key
    replaces the previous reminder.
    """

    action: Literal["schedule", "cancel"]
    product: Product
    key: str
    fire_at: datetime | None = None
    ticket_count: int = 0
    title: str | None = None
    body: str | None = None
