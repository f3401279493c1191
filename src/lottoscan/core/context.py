"""Scan context management via contextvars — scan IDs for log correlation."""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_scan_id: ContextVar[str | None] = ContextVar("scan_id", default=None)


def set_scan_id(value: str | None) -> Token[str | None]:
    """Set the scan ID for the current context. Returns the reset token."""
    return _scan_id.set(value)


def reset_scan_id(token: Token[str | None]) -> None:
    """Restore the scan ID that was current before ``set_scan_id``."""
    _scan_id.reset(token)


def get_scan_id() -> str | None:
    """Get the scan ID for the current context."""
    return _scan_id.get()


def new_scan_id() -> str:
    """Generate a fresh scan ID."""
    return uuid.uuid4().hex[:12]
