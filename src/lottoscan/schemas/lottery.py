"""Decoded lottery ticket structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Product(str, Enum):
    """Lottery products that can be decoded and verified."""

    LOTTO645 = "lotto645"
    PENSION720 = "pension720"


class GameMode(str, Enum):
    """How the numbers of a Lotto 6/45 game were chosen."""

    MANUAL = "manual"
    AUTO = "auto"
    BLANK = "blank"


class PensionDraw(str, Enum):
    """The two draws a Pension 720+ ticket takes part in."""

    MAIN = "main"
    BONUS = "bonus"


@dataclass(frozen=True)
class LottoGame:
    """One Lotto 6/45 line: always 6 distinct numbers in [1, 45]."""

    label: str
    numbers: tuple[int, ...]
    mode: GameMode


@dataclass(frozen=True)
class PensionGame:
    """One Pension 720+ entry. ``number`` keeps its leading zeros."""

    label: PensionDraw
    group: int
    number: str

    @property
    def display_number(self) -> str:
        return f"{self.group}-{self.number}"


@dataclass(frozen=True)
class LotteryTicket:
    """A decoded lottery QR payload."""

    product: Product
    round: int
    games: tuple[LottoGame, ...] | tuple[PensionGame, ...]
    source_url: str = ""

    @property
    def game_count(self) -> int:
        return len(self.games)
