"""Content classifier — turn a raw scanned string into a typed payload.

Grammars overlap (a vCard can carry URLs, a URL can look like anything), so
classification is an ordered list of (predicate, extractor) pairs and the
first matching predicate wins:

  1. ``http://`` / ``https://``   → Url
  2. ``tel:``                     → Phone
  3. ``sms:`` / ``smsto:``        → Sms
  4. ``mailto:`` / ``MATMSG:``    → Email
  5. ``WIFI:``                    → Wifi
  6. ``geo:``                     → Geo (falls through on bad coordinates)
  7. contains ``BEGIN:VCARD``     → Contact (vCard)
  8. ``MECARD:``                  → Contact (MeCard)
  9. ``BEGIN:VCALENDAR/VEVENT``   → Event
 10. anything else                → Text

``classify`` never raises. Fields that fail to parse are left unset.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import parse_qs, unquote, urlsplit

from lottoscan.schemas.payloads import (
    ContactPayload,
    EmailPayload,
    EventPayload,
    GeoPayload,
    PhonePayload,
    ScannedPayload,
    SmsPayload,
    TextPayload,
    UrlPayload,
    WifiPayload,
)

logger = logging.getLogger(__name__)

_TEL_RE = re.compile(r"^tel:(.*)$", re.IGNORECASE | re.DOTALL)
_SMSTO_RE = re.compile(r"^smsto:([^:]*)(?::(.*))?$", re.IGNORECASE | re.DOTALL)
_GEO_RE = re.compile(
    r"^geo:(-?\d+(?:\.\d*)?),(-?\d+(?:\.\d*)?)(?:\?(.*))?$",
    re.IGNORECASE | re.DOTALL,
)
_ICAL_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})(Z)?)?")
_UNESCAPED_SEMICOLON = re.compile(r"(?<!\\);")


# ── Field helpers ───────────────────────────────────────────────────


def _split_fields(body: str) -> dict[str, str]:
    """Parse ``KEY:value;KEY:value;;`` fields (Wi-Fi, MeCard, MATMSG).

    Keys are upper-cased, the first occurrence of a key wins, backslash
    escapes are resolved and an empty field (``;;``) ends the payload.
    """
    fields: dict[str, str] = {}
    key: str | None = None
    buf: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            buf.append(body[i + 1])
            i += 2
            continue
        if ch == ":" and key is None:
            key = "".join(buf).strip().upper()
            buf = []
        elif ch == ";":
            if key is None and not buf:
                break
            if key is not None:
                fields.setdefault(key, "".join(buf))
            key = None
            buf = []
        else:
            buf.append(ch)
        i += 1
    if key is not None:
        fields.setdefault(key, "".join(buf))
    return fields


def _unescape_vcard(value: str) -> str:
    return (
        value.replace("\\n", "\n")
        .replace("\\N", "\n")
        .replace("\\,", ",")
        .replace("\\;", ";")
        .replace("\\\\", "\\")
    )


def _content_lines(data: str) -> list[tuple[str, str]]:
    """Split vCard/iCalendar text into ``(PROPERTY, value)`` pairs.

    Folded lines are joined, parameters (``TEL;TYPE=CELL``) and group
    prefixes (``item1.EMAIL``) are dropped from the property name.
    """
    unfolded = re.sub(r"\r?\n[ \t]", "", data)
    lines: list[tuple[str, str]] = []
    for line in unfolded.splitlines():
        name_part, sep, value = line.partition(":")
        if not sep:
            continue
        name = name_part.split(";", 1)[0].strip().upper()
        name = name.rsplit(".", 1)[-1]
        lines.append((name, value.strip()))
    return lines


def _first(lines: list[tuple[str, str]], name: str) -> str | None:
    for key, value in lines:
        if key == name and value:
            return _unescape_vcard(value)
    return None


def _all(lines: list[tuple[str, str]], name: str) -> tuple[str, ...]:
    return tuple(_unescape_vcard(value) for key, value in lines if key == name and value)


def _parse_ical_date(value: str | None) -> datetime | None:
    """Parse ``YYYYMMDD[THHMMSS][Z]``. A missing time means midnight."""
    if not value:
        return None
    match = _ICAL_DATE_RE.match(value.strip())
    if not match:
        return None
    year, month, day, hour, minute, second, zulu = match.groups()
    try:
        parsed = datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None
    if zulu:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ── Extractors ──────────────────────────────────────────────────────


def _parse_url(data: str) -> UrlPayload:
    try:
        parts = urlsplit(data)
        hostname = parts.hostname
    except ValueError:
        return UrlPayload(raw=data, url=data)
    return UrlPayload(
        raw=data,
        url=data,
        scheme=parts.scheme or None,
        hostname=hostname,
        path=parts.path or None,
    )


def _parse_phone(data: str) -> PhonePayload:
    match = _TEL_RE.match(data)
    number = match.group(1).strip() if match else ""
    return PhonePayload(raw=data, phone_number=number or None)


def _parse_sms(data: str) -> SmsPayload:
    match = _SMSTO_RE.match(data)
    if match:
        number = match.group(1).strip()
        return SmsPayload(raw=data, phone_number=number or None, body=match.group(2))

    rest = data[len("sms:"):]
    number, _, query = rest.partition("?")
    body: str | None = None
    for pair in query.split("&") if query else []:
        key, _, value = pair.partition("=")
        if key.lower() == "body":
            body = unquote(value)
            break
    return SmsPayload(raw=data, phone_number=number.strip() or None, body=body)


def _parse_email(data: str) -> EmailPayload:
    if data.lower().startswith("mailto:"):
        address, _, query = data[len("mailto:"):].partition("?")
        params = parse_qs(query)

        def param(name: str) -> str | None:
            values = params.get(name)
            return values[0] if values else None

        return EmailPayload(
            raw=data,
            address=unquote(address).strip() or None,
            subject=param("subject"),
            body=param("body"),
            cc=param("cc"),
            bcc=param("bcc"),
        )

    fields = _split_fields(data[len("MATMSG:"):])
    return EmailPayload(
        raw=data,
        address=fields.get("TO") or None,
        subject=fields.get("SUB") or None,
        body=fields.get("BODY") or None,
    )


def _parse_wifi(data: str) -> WifiPayload:
    fields = _split_fields(data[len("WIFI:"):])
    hidden_raw = fields.get("H")
    return WifiPayload(
        raw=data,
        encryption=fields.get("T") or "nopass",
        ssid=fields.get("S"),
        password=fields.get("P"),
        hidden=hidden_raw.strip().lower() == "true" if hidden_raw is not None else None,
    )


def _parse_geo(data: str) -> GeoPayload | None:
    match = _GEO_RE.match(data)
    if not match:
        logger.debug("geo: payload with non-numeric coordinates, falling through")
        return None

    query_label: str | None = None
    zoom: int | None = None
    if match.group(3):
        params = parse_qs(match.group(3))
        if params.get("q"):
            query_label = params["q"][0]
        if params.get("z"):
            try:
                zoom = int(params["z"][0])
            except ValueError:
                zoom = None

    return GeoPayload(
        raw=data,
        latitude=float(match.group(1)),
        longitude=float(match.group(2)),
        query=query_label,
        zoom=zoom,
    )


def _parse_vcard(data: str) -> ContactPayload:
    lines = _content_lines(data)

    last_name: str | None = None
    first_name: str | None = None
    n_value = next((v for k, v in lines if k == "N" and v), None)
    if n_value is not None:
        parts = [_unescape_vcard(p).strip() for p in _UNESCAPED_SEMICOLON.split(n_value)]
        last_name = parts[0] or None
        first_name = parts[1] or None if len(parts) > 1 else None

    address: str | None = None
    adr_value = next((v for k, v in lines if k == "ADR" and v), None)
    if adr_value is not None:
        parts = [_unescape_vcard(p).strip() for p in _UNESCAPED_SEMICOLON.split(adr_value)]
        address = " ".join(p for p in parts if p) or None

    return ContactPayload(
        raw=data,
        full_name=_first(lines, "FN"),
        first_name=first_name,
        last_name=last_name,
        phones=_all(lines, "TEL"),
        emails=_all(lines, "EMAIL"),
        organization=_first(lines, "ORG"),
        title=_first(lines, "TITLE"),
        address=address,
        url=_first(lines, "URL"),
        note=_first(lines, "NOTE"),
    )


def _parse_mecard(data: str) -> ContactPayload:
    fields = _split_fields(data[len("MECARD:"):])

    def single(name: str) -> str | None:
        value = fields.get(name, "").strip()
        return value or None

    phone = single("TEL")
    email = single("EMAIL")
    return ContactPayload(
        raw=data,
        full_name=single("N"),
        phones=(phone,) if phone else (),
        emails=(email,) if email else (),
        address=single("ADR"),
        url=single("URL"),
        note=single("NOTE"),
    )


def _parse_event(data: str) -> EventPayload:
    lines = _content_lines(data)

    # Prefer the VEVENT block so VTIMEZONE DTSTART lines are ignored.
    if ("BEGIN", "VEVENT") in lines:
        start = lines.index(("BEGIN", "VEVENT")) + 1
        end = lines.index(("END", "VEVENT"), start) if ("END", "VEVENT") in lines[start:] else len(lines)
        lines = lines[start:end]

    return EventPayload(
        raw=data,
        title=_first(lines, "SUMMARY"),
        description=_first(lines, "DESCRIPTION"),
        location=_first(lines, "LOCATION"),
        start=_parse_ical_date(_first(lines, "DTSTART")),
        end=_parse_ical_date(_first(lines, "DTEND")),
        organizer=_first(lines, "ORGANIZER"),
    )


# ── Dispatch table ──────────────────────────────────────────────────


def _prefix(*prefixes: str, ignore_case: bool = True) -> Callable[[str], bool]:
    if ignore_case:
        lowered = tuple(p.lower() for p in prefixes)
        return lambda data: data.lower().startswith(lowered)
    return lambda data: data.startswith(prefixes)


def _contains(*markers: str) -> Callable[[str], bool]:
    return lambda data: any(marker in data for marker in markers)


Extractor = Callable[[str], ScannedPayload | None]

CLASSIFIERS: tuple[tuple[str, Callable[[str], bool], Extractor], ...] = (
    ("url", _prefix("http://", "https://"), _parse_url),
    ("phone", _prefix("tel:"), _parse_phone),
    ("sms", _prefix("sms:", "smsto:"), _parse_sms),
    ("mailto", _prefix("mailto:"), _parse_email),
    ("matmsg", _prefix("MATMSG:", ignore_case=False), _parse_email),
    ("wifi", _prefix("WIFI:", ignore_case=False), _parse_wifi),
    ("geo", _prefix("geo:"), _parse_geo),
    ("vcard", _contains("BEGIN:VCARD"), _parse_vcard),
    ("mecard", _prefix("MECARD:", ignore_case=False), _parse_mecard),
    ("event", _contains("BEGIN:VCALENDAR", "BEGIN:VEVENT"), _parse_event),
)


def classify(raw: str | None) -> ScannedPayload:
    """Classify a scanned string into a typed payload.

    Unrecognised input (including ``None`` and the empty string) always
    resolves to a :class:`TextPayload`.
    """
    if not raw or not isinstance(raw, str):
        return TextPayload(raw="", text="")

    data = raw.strip()
    for name, matches, extract in CLASSIFIERS:
        if not matches(data):
            continue
        payload = extract(data)
        if payload is not None:
            logger.debug("Classified scan via %s grammar", name)
            return payload

    return TextPayload(raw=data, text=data)


def format_phone_number(phone: str | None) -> str:
    """Format Korean phone numbers for display.

    ``+821012345678`` → ``010-1234-5678``; anything unrecognised is returned
    unchanged.
    """
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("82"):
        local = "0" + digits[2:]
        if len(local) == 11:
            return f"{local[:3]}-{local[3:7]}-{local[7:]}"
        if len(local) == 10:
            return f"{local[:3]}-{local[3:6]}-{local[6:]}"
    if len(digits) == 11:
        return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    return phone
