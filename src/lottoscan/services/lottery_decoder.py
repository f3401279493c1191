"""Lottery payload decoder — positional decoding of DhLottery ticket QR codes.

Ticket QR codes are URLs on the DhLottery QR host whose ``v`` parameter
packs the whole ticket:

Pension 720+::

    pd{2 reserved}{round:4}{group:1}s{number:6}
    pd1203005s619968  → round 300, group 5, number "619968"

Lotto 6/45::

    {round:4}({mode:1}{numbers:12}) × up to 5 [+ trailing data]
    1207m010609101116q182531...  → round 1207, game A manual 1 6 9 10 11 16, ...

Decoding is pure. Anything that does not decode into at least one valid
game returns ``None`` so the caller can fall back to generic classification.
"""

from __future__ import annotations

import logging
import re

from lottoscan.core.constants import (
    LOTTERY_QR_MARKER,
    LOTTERY_QUERY_FRAGMENT,
    LOTTO_BLOCK_LENGTH,
    LOTTO_GAME_LABELS,
    LOTTO_MAX_GAMES,
    LOTTO_MAX_NUMBER,
    LOTTO_MIN_NUMBER,
    LOTTO_MODE_CODES,
    LOTTO_NUMBERS_PER_GAME,
)
from lottoscan.schemas.lottery import (
    GameMode,
    LotteryTicket,
    LottoGame,
    PensionDraw,
    PensionGame,
    Product,
)

logger = logging.getLogger(__name__)

_PENSION_RE = re.compile(r"^pd\d{2}(\d{4})(\d)s(\d{6})(?!\d)", re.ASCII)
_LOTTO_RE = re.compile(r"^\d{4}[mqn]", re.ASCII)
_TWO_DIGITS_RE = re.compile(r"^\d{2}$", re.ASCII)


def is_lottery_qr(url: str | None, marker: str = LOTTERY_QR_MARKER) -> bool:
    """Check whether *url* points at the lottery QR host."""
    return isinstance(url, str) and marker in url


def extract_payload(url: str | None, marker: str = LOTTERY_QR_MARKER) -> str | None:
    """Return the ``v`` value of a lottery QR URL, or ``None``."""
    if url is None or not is_lottery_qr(url, marker):
        return None
    _, sep, value = url.partition(LOTTERY_QUERY_FRAGMENT)
    if not sep or not value:
        return None
    # Only the text up to a following "?v=" belongs to this payload.
    return value.split(LOTTERY_QUERY_FRAGMENT, 1)[0]


def decode(url: str | None, marker: str = LOTTERY_QR_MARKER) -> LotteryTicket | None:
    """Decode a lottery QR URL into a :class:`LotteryTicket`.

    Returns ``None`` when *url* is not a lottery payload or carries no valid
    game. This is not an error: the caller falls through to the generic
    content classifier.
    """
    if url is None:
        return None
    payload = extract_payload(url, marker)
    if payload is None:
        return None

    if payload.startswith("pd"):
        return decode_pension(payload, source_url=url)
    if _LOTTO_RE.match(payload):
        return decode_lotto(payload, source_url=url)

    logger.debug("Lottery QR with unrecognised payload layout")
    return None


def decode_pension(payload: str, source_url: str = "") -> LotteryTicket | None:
    """Decode a Pension 720+ ``v`` value.

    The ticket takes part in both the main and the bonus draw with the same
    group and number, so two games are produced.
    """
    match = _PENSION_RE.match(payload)
    if not match:
        return None

    round_no = int(match.group(1))
    group = int(match.group(2))
    number = match.group(3)

    games = (
        PensionGame(label=PensionDraw.MAIN, group=group, number=number),
        PensionGame(label=PensionDraw.BONUS, group=group, number=number),
    )
    return LotteryTicket(
        product=Product.PENSION720,
        round=round_no,
        games=games,
        source_url=source_url,
    )


def decode_lotto(payload: str, source_url: str = "") -> LotteryTicket | None:
    """Decode a Lotto 6/45 ``v`` value.

    Blocks are skipped when blank (mode ``n``), all zeros, truncated or of
    unknown mode. A game survives only with 6 distinct numbers in [1, 45].
    """
    if not _LOTTO_RE.match(payload):
        return None

    round_no = int(payload[:4])
    body = payload[4:]

    games: list[LottoGame] = []
    for index in range(LOTTO_MAX_GAMES):
        start = index * LOTTO_BLOCK_LENGTH
        if start >= len(body):
            break
        game = _decode_lotto_block(body[start:start + LOTTO_BLOCK_LENGTH], LOTTO_GAME_LABELS[index])
        if game is not None:
            games.append(game)

    if not games:
        logger.debug("Lotto payload for round %d has no valid games", round_no)
        return None

    return LotteryTicket(
        product=Product.LOTTO645,
        round=round_no,
        games=tuple(games),
        source_url=source_url,
    )


def _decode_lotto_block(block: str, label: str) -> LottoGame | None:
    if len(block) < LOTTO_BLOCK_LENGTH:
        return None

    mode_code = LOTTO_MODE_CODES.get(block[0])
    digits = block[1:]
    if mode_code is None or mode_code == GameMode.BLANK.value or set(digits) == {"0"}:
        return None

    numbers: list[int] = []
    for offset in range(0, len(digits), 2):
        pair = digits[offset:offset + 2]
        if not _TWO_DIGITS_RE.match(pair):
            continue
        value = int(pair)
        if LOTTO_MIN_NUMBER <= value <= LOTTO_MAX_NUMBER:
            numbers.append(value)

    if len(numbers) != LOTTO_NUMBERS_PER_GAME or len(set(numbers)) != LOTTO_NUMBERS_PER_GAME:
        return None

    return LottoGame(label=label, numbers=tuple(numbers), mode=GameMode(mode_code))
