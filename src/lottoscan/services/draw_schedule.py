"""Draw schedule — round numbering and draw cutoffs.

All functions are pure in ``(product, now)``; callers inject ``now``.
Cutoffs are defined in the draw timezone (Asia/Seoul by default):

  Lotto 6/45   — weekly on Saturday, results final from 20:45.
                 Round 1 was drawn on 2002-12-07.
  Pension 720+ — weekly on Thursday, results final from 19:00,
                 next draw announced for 19:05. No round epoch is known,
                 so round numbering is ``UNSUPPORTED`` unless the caller
                 supplies the current round.
"""

from __future__ import annotations

import enum
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from lottoscan.core.constants import (
    DEFAULT_DRAW_TIMEZONE,
    DRAW_INTERVAL_DAYS,
    LOTTO_DRAW_CUTOFF,
    LOTTO_DRAW_WEEKDAY,
    LOTTO_FIRST_DRAW_DATE,
    PENSION_DRAW_WEEKDAY,
    PENSION_NEXT_DRAW_TIME,
    PENSION_RESULT_CUTOFF,
)
from lottoscan.schemas.lottery import Product

KST = ZoneInfo(DEFAULT_DRAW_TIMEZONE)


class Unsupported(enum.Enum):
    """Sentinel for computations the schedule cannot answer."""

    UNSUPPORTED = "unsupported"

    def __bool__(self) -> bool:
        return False


UNSUPPORTED = Unsupported.UNSUPPORTED


def _local(now: datetime, tz: tzinfo) -> datetime:
    """Express *now* in the draw timezone. Naive values are draw-local."""
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def _lotto_epoch(tz: tzinfo) -> datetime:
    return datetime.combine(LOTTO_FIRST_DRAW_DATE, time.min, tzinfo=tz)


def _weekday_cutoff(day: date, weekday: int, cutoff: time, tz: tzinfo) -> datetime:
    """Cutoff on *weekday* of the Monday-anchored week containing *day*."""
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday + timedelta(days=weekday), cutoff, tzinfo=tz)


def current_round(
    product: Product,
    now: datetime,
    tz: tzinfo = KST,
) -> int | Unsupported:
    """Return the round whose draw falls in the current draw week.

    Lotto weeks run Saturday 00:00 to Friday 23:59, so on a Saturday the
    current round is the one drawn that evening.
    """
    if product == Product.LOTTO645:
        elapsed = _local(now, tz) - _lotto_epoch(tz)
        return elapsed // timedelta(days=DRAW_INTERVAL_DAYS) + 1
    if product == Product.PENSION720:
        return UNSUPPORTED
    msg = f"Unknown product: {product!r}"
    raise ValueError(msg)


def draw_time(product: Product, round_no: int, tz: tzinfo = KST) -> datetime | Unsupported:
    """Return the cutoff after which *round_no* results are final."""
    if product == Product.LOTTO645:
        draw_day = LOTTO_FIRST_DRAW_DATE + timedelta(days=DRAW_INTERVAL_DAYS * (round_no - 1))
        return datetime.combine(draw_day, LOTTO_DRAW_CUTOFF, tzinfo=tz)
    if product == Product.PENSION720:
        return UNSUPPORTED
    msg = f"Unknown product: {product!r}"
    raise ValueError(msg)


def is_draw_completed(
    product: Product,
    round_no: int,
    now: datetime,
    *,
    current_round_override: int | None = None,
    tz: tzinfo = KST,
) -> bool | Unsupported:
    """Has *round_no* been drawn as of *now*?

    Rounds before the current one are complete, rounds after it are not.
    For the current round *now* is compared with this week's cutoff.
    Pension 720+ needs *current_round_override*; without it the answer is
    ``UNSUPPORTED``.
    """
    current = (
        current_round_override
        if current_round_override is not None
        else current_round(product, now, tz)
    )
    if isinstance(current, Unsupported):
        return UNSUPPORTED

    if round_no < current:
        return True
    if round_no > current:
        return False

    local_now = _local(now, tz)
    if product == Product.LOTTO645:
        cutoff = _lotto_cutoff_this_week(local_now, tz)
    else:
        cutoff = _weekday_cutoff(local_now.date(), PENSION_DRAW_WEEKDAY, PENSION_RESULT_CUTOFF, tz)
    return local_now >= cutoff


def _lotto_cutoff_this_week(local_now: datetime, tz: tzinfo) -> datetime:
    # Lotto draw weeks start on Saturday.
    days_since_saturday = (local_now.weekday() - LOTTO_DRAW_WEEKDAY) % 7
    saturday = local_now.date() - timedelta(days=days_since_saturday)
    return datetime.combine(saturday, LOTTO_DRAW_CUTOFF, tzinfo=tz)


def next_draw_at(product: Product, now: datetime, tz: tzinfo = KST) -> datetime:
    """Return the next draw cutoff strictly after *now*."""
    if product == Product.LOTTO645:
        weekday, at = LOTTO_DRAW_WEEKDAY, LOTTO_DRAW_CUTOFF
    elif product == Product.PENSION720:
        weekday, at = PENSION_DRAW_WEEKDAY, PENSION_NEXT_DRAW_TIME
    else:
        msg = f"Unknown product: {product!r}"
        raise ValueError(msg)

    local_now = _local(now, tz)
    days_ahead = (weekday - local_now.weekday()) % 7
    candidate = datetime.combine(local_now.date() + timedelta(days=days_ahead), at, tzinfo=tz)
    if candidate <= local_now:
        candidate += timedelta(days=DRAW_INTERVAL_DAYS)
    return candidate


class DrawSchedule:
    """Draw schedule bound to a timezone."""

    def __init__(self, tz: tzinfo = KST) -> None:
        self.tz = tz

    def current_round(self, product: Product, now: datetime) -> int | Unsupported:
        return current_round(product, now, self.tz)

    def draw_time(self, product: Product, round_no: int) -> datetime | Unsupported:
        return draw_time(product, round_no, self.tz)

    def is_draw_completed(
        self,
        product: Product,
        round_no: int,
        now: datetime,
        current_round_override: int | None = None,
    ) -> bool | Unsupported:
        return is_draw_completed(
            product,
            round_no,
            now,
            current_round_override=current_round_override,
            tz=self.tz,
        )

    def next_draw_at(self, product: Product, now: datetime) -> datetime:
        return next_draw_at(product, now, self.tz)
