"""Notification policy — decides when draw reminders should exist.

The policy never delivers anything and keeps no state between calls. The
caller passes the current ticket statuses after each scan and each "mark
checked" action, and hands the resulting :class:`ReminderDecision` to the
platform scheduler. One reminder slot exists per product; scheduling under
the same key replaces the previous reminder.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from lottoscan.core.config import Settings
from lottoscan.core.constants import REMINDER_OFFSET_MINUTES
from lottoscan.schemas.lottery import Product
from lottoscan.schemas.outcomes import ReminderDecision, TicketStatus
from lottoscan.services.draw_schedule import DrawSchedule

logger = logging.getLogger(__name__)

PRODUCT_NAMES: dict[Product, str] = {
    Product.LOTTO645: "Lotto 6/45",
    Product.PENSION720: "Pension 720+",
}

# Reminder template definitions
REMINDER_TEMPLATES: dict[Product, dict[str, str]] = {
    Product.LOTTO645: {
        "title": "Lotto 6/45 results are out",
        "body": (
            "Round results have been announced. "
            "You have {count} unchecked {product_name} ticket(s). "
            "Scan again to see if you won."
        ),
    },
    Product.PENSION720: {
        "title": "Pension 720+ results are out",
        "body": (
            "Round results have been announced. "
            "You have {count} unchecked {product_name} ticket(s). "
            "Scan again to see if you won."
        ),
    },
}


def reminder_key(product: Product) -> str:
    """Scheduler key of the single reminder slot for *product*."""
    return f"draw-reminder:{Product(product).value}"


def render_reminder(product: Product, count: int) -> tuple[str, str]:
    """Render the reminder title and body for *product*."""
    product = Product(product)
    template = REMINDER_TEMPLATES[product]
    context = {"count": count, "product_name": PRODUCT_NAMES[product]}
    return template["title"].format(**context), template["body"].format(**context)


def _in_scope(tickets: Iterable[TicketStatus], product: Product | None) -> list[TicketStatus]:
    if product is None:
        return list(tickets)
    return [t for t in tickets if t.product == product]


def unresolved_count(tickets: Iterable[TicketStatus], product: Product | None = None) -> int:
    """Number of unchecked tickets, optionally for one product."""
    return sum(1 for t in _in_scope(tickets, product) if not t.checked)


def has_unresolved(tickets: Iterable[TicketStatus], product: Product | None = None) -> bool:
    """Whether any unchecked ticket exists, optionally for one product."""
    return unresolved_count(tickets, product) > 0


class NotificationPolicy:
    """Reminder scheduling decisions over caller-owned ticket statuses."""

    def __init__(
        self,
        schedule: DrawSchedule | None = None,
        offset_minutes: int = REMINDER_OFFSET_MINUTES,
    ) -> None:
        self.schedule = schedule or DrawSchedule()
        self.offset = timedelta(minutes=offset_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> NotificationPolicy:
        return cls(DrawSchedule(settings.draw_tz), offset_minutes=settings.reminder_offset_minutes)

    def has_unresolved(self, tickets: Iterable[TicketStatus], product: Product | None = None) -> bool:
        return has_unresolved(tickets, product)

    def unresolved_count(self, tickets: Iterable[TicketStatus], product: Product | None = None) -> int:
        return unresolved_count(tickets, product)

    def schedule_or_cancel(
        self,
        tickets: Iterable[TicketStatus],
        product: Product,
        now: datetime,
    ) -> ReminderDecision:
        """Decide the reminder for *product* as of *now*.

        Unchecked tickets → schedule one reminder shortly after the next
        draw. Otherwise → cancel whatever is scheduled under the key.
        """
        product = Product(product)
        key = reminder_key(product)
        count = unresolved_count(tickets, product)

        if count == 0:
            logger.debug("No unchecked %s tickets, cancelling %s", product.value, key)
            return ReminderDecision(action="cancel", product=product, key=key)

        fire_at = self.schedule.next_draw_at(product, now) + self.offset
        title, body = render_reminder(product, count)
        logger.info(
            "Scheduling %s at %s for %d unchecked ticket(s)",
            key,
            fire_at.isoformat(),
            count,
        )
        return ReminderDecision(
            action="schedule",
            product=product,
            key=key,
            fire_at=fire_at,
            ticket_count=count,
            title=title,
            body=body,
        )

    def evaluate_all(self, tickets: Iterable[TicketStatus], now: datetime) -> list[ReminderDecision]:
        """One decision per product, in product declaration order."""
        statuses = list(tickets)
        return [self.schedule_or_cancel(statuses, product, now) for product in Product]
