"""Domain constants for lottoscan."""

from __future__ import annotations

from datetime import date, time

# ── Lottery QR detection ────────────────────────────────────────────
LOTTERY_QR_MARKER = "qr.dhlottery.co.kr"
LOTTERY_QUERY_FRAGMENT = "?v="

# ── Lotto 6/45 ──────────────────────────────────────────────────────
LOTTO_MIN_NUMBER = 1
LOTTO_MAX_NUMBER = 45
LOTTO_NUMBERS_PER_GAME = 6
LOTTO_MAX_GAMES = 5
LOTTO_GAME_LABELS: list[str] = ["A", "B", "C", "D", "E"]
LOTTO_BLOCK_LENGTH = 13  # 1 mode char + 12 digits

# Mode chars printed on the ticket
LOTTO_MODE_CODES: dict[str, str] = {
    "m": "manual",
    "q": "auto",
    "n": "blank",
}

# ── Draw schedule ───────────────────────────────────────────────────
DEFAULT_DRAW_TIMEZONE = "Asia/Seoul"

# Round 1 of Lotto 6/45 was drawn on Saturday 2002-12-07.
LOTTO_FIRST_DRAW_DATE = date(2002, 12, 7)
DRAW_INTERVAL_DAYS = 7

# Weekday numbers follow datetime.weekday(): Monday == 0.
LOTTO_DRAW_WEEKDAY = 5  # Saturday
LOTTO_DRAW_CUTOFF = time(20, 45)

PENSION_DRAW_WEEKDAY = 3  # Thursday
PENSION_RESULT_CUTOFF = time(19, 0)
PENSION_NEXT_DRAW_TIME = time(19, 5)

# ── DhLottery result endpoints ──────────────────────────────────────
DHLOTTERY_LOTTO_URL = "https://www.dhlottery.co.kr/common.do?method=getLottoNumber"
DHLOTTERY_PENSION_URL = "https://www.dhlottery.co.kr/pt720/selectPstPt720WnList.do"

# ── Results cache ───────────────────────────────────────────────────
RESULTS_CACHE_TTL_SECONDS = 60 * 60

# ── Reminders ───────────────────────────────────────────────────────
REMINDER_OFFSET_MINUTES = 5

# ── Prize tables ────────────────────────────────────────────────────
LOTTO_FIXED_PRIZES: dict[int, int] = {
    4: 50_000,
    5: 5_000,
}

LOTTO_PRIZE_INFO: dict[int, dict[str, str]] = {
    1: {"name": "1st", "description": "6 numbers matched"},
    2: {"name": "2nd", "description": "5 numbers + bonus matched"},
    3: {"name": "3rd", "description": "5 numbers matched"},
    4: {"name": "4th", "description": "4 numbers matched"},
    5: {"name": "5th", "description": "3 numbers matched"},
    0: {"name": "No win", "description": "2 or fewer numbers matched"},
}

PENSION_BONUS_TIER = 2  # Bonus wins aggregate as 2nd tier
PENSION_NUMBER_LENGTH = 6

PENSION_PRIZE_INFO: dict[int | str, dict[str, str | int]] = {
    1: {
        "name": "1st",
        "description": "Group and all 6 digits matched",
        "prize": 1_680_000_000,
        "prize_text": "KRW 7,000,000 monthly for 20 years",
    },
    2: {
        "name": "2nd",
        "description": "Last 6 digits matched",
        "prize": 120_000_000,
        "prize_text": "KRW 1,000,000 monthly for 10 years",
    },
    3: {
        "name": "3rd",
        "description": "Last 5 digits matched",
        "prize": 1_000_000,
        "prize_text": "KRW 1,000,000",
    },
    4: {
        "name": "4th",
        "description": "Last 4 digits matched",
        "prize": 100_000,
        "prize_text": "KRW 100,000",
    },
    5: {
        "name": "5th",
        "description": "Last 3 digits matched",
        "prize": 50_000,
        "prize_text": "KRW 50,000",
    },
    6: {
        "name": "6th",
        "description": "Last 2 digits matched",
        "prize": 5_000,
        "prize_text": "KRW 5,000",
    },
    7: {
        "name": "7th",
        "description": "Last digit matched",
        "prize": 1_000,
        "prize_text": "KRW 1,000",
    },
    "bonus": {
        "name": "Bonus",
        "description": "Bonus number matched",
        "prize": 120_000_000,
        "prize_text": "KRW 1,000,000 monthly for 10 years",
    },
    0: {
        "name": "No win",
        "description": "No digits matched",
        "prize": 0,
        "prize_text": "KRW 0",
    },
}
