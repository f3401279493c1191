"""Draw result schemas returned by result providers and held in the cache."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from lottoscan.core.constants import (
    LOTTO_MAX_NUMBER,
    LOTTO_MIN_NUMBER,
    LOTTO_NUMBERS_PER_GAME,
)


class LottoDrawResult(BaseModel):
    """Official Lotto 6/45 result for one round."""

    product: Literal["lotto645"] = "lotto645"
    round: int = Field(ge=1)
    numbers: list[int]
    bonus_number: int = Field(ge=LOTTO_MIN_NUMBER, le=LOTTO_MAX_NUMBER)
    draw_date: date | None = None
    first_prize_amount: int = Field(default=0, ge=0)
    first_winner_count: int = Field(default=0, ge=0)
    total_sales_amount: int | None = Field(default=None, ge=0)
    # Per-winner amounts for tiers 2 and 3 when the source publishes them
    tier_prizes: dict[int, int] = Field(default_factory=dict)

    @field_validator("numbers")
    @classmethod
    def _six_distinct_numbers(cls, value: list[int]) -> list[int]:
        if len(value) != LOTTO_NUMBERS_PER_GAME or len(set(value)) != LOTTO_NUMBERS_PER_GAME:
            msg = f"Expected {LOTTO_NUMBERS_PER_GAME} distinct numbers, got {value!r}"
            raise ValueError(msg)
        if any(n < LOTTO_MIN_NUMBER or n > LOTTO_MAX_NUMBER for n in value):
            msg = f"Numbers must be in [{LOTTO_MIN_NUMBER}, {LOTTO_MAX_NUMBER}]: {value!r}"
            raise ValueError(msg)
        return value

    def prize_for_tier(self, tier: int) -> int:
        """Per-winner amount for a round-variable tier (1-3)."""
        if tier == 1:
            return self.tier_prizes.get(1, self.first_prize_amount)
        return self.tier_prizes.get(tier, 0)


class PensionDrawResult(BaseModel):
    """Official Pension 720+ result for one round."""

    product: Literal["pension720"] = "pension720"
    round: int = Field(ge=1)
    winning_group: int = Field(ge=1, le=9)
    winning_number: str = Field(pattern=r"^\d{6}$")
    bonus_number: str = Field(pattern=r"^\d{6}$")
    draw_date: date | None = None


DrawResult = Annotated[
    LottoDrawResult | PensionDrawResult,
    Field(discriminator="product"),
]

draw_result_adapter: TypeAdapter[LottoDrawResult | PensionDrawResult] = TypeAdapter(DrawResult)
