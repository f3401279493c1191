"""Typed records for classified scan payloads.

Every record keeps the trimmed ``raw`` string it was built from and a
``kind`` tag. Fields that could not be parsed are ``None`` (or an empty
tuple for repeated fields).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ContentKind(str, Enum):
    """Category of a classified payload."""

    URL = "url"
    PHONE = "phone"
    SMS = "sms"
    EMAIL = "email"
    WIFI = "wifi"
    GEO = "geo"
    CONTACT = "contact"
    EVENT = "event"
    TEXT = "text"


@dataclass(frozen=True)
class ScannedPayload:
    """Base record for all classified payloads."""

    raw: str


@dataclass(frozen=True)
class UrlPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.URL, init=False)
    url: str = ""
    scheme: str | None = None
    hostname: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class PhonePayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.PHONE, init=False)
    phone_number: str | None = None


@dataclass(frozen=True)
class SmsPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.SMS, init=False)
    phone_number: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class EmailPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.EMAIL, init=False)
    address: str | None = None
    subject: str | None = None
    body: str | None = None
    cc: str | None = None
    bcc: str | None = None


@dataclass(frozen=True)
class WifiPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.WIFI, init=False)
    encryption: str = "nopass"
    ssid: str | None = None
    password: str | None = None
    hidden: bool | None = None


@dataclass(frozen=True)
class GeoPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.GEO, init=False)
    latitude: float = 0.0
    longitude: float = 0.0
    query: str | None = None
    zoom: int | None = None


@dataclass(frozen=True)
class ContactPayload(ScannedPayload):
    """vCard or MeCard contact.

    ``phones`` and ``emails`` preserve the order in which they appear.
    """

    kind: ContentKind = field(default=ContentKind.CONTACT, init=False)
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phones: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    organization: str | None = None
    title: str | None = None
    address: str | None = None
    url: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class EventPayload(ScannedPayload):
    """iCalendar event. Dates without a ``Z`` suffix are naive (floating)."""

    kind: ContentKind = field(default=ContentKind.EVENT, init=False)
    title: str | None = None
    description: str | None = None
    location: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    organizer: str | None = None


@dataclass(frozen=True)
class TextPayload(ScannedPayload):
    kind: ContentKind = field(default=ContentKind.TEXT, init=False)
    text: str = ""
