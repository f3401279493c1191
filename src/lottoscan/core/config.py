"""Engine configuration loaded from environment variables."""

from __future__ import annotations

from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings

from lottoscan.core.constants import (
    DEFAULT_DRAW_TIMEZONE,
    DHLOTTERY_LOTTO_URL,
    DHLOTTERY_PENSION_URL,
    LOTTERY_QR_MARKER,
    REMINDER_OFFSET_MINUTES,
    RESULTS_CACHE_TTL_SECONDS,
)


class Settings(BaseSettings):
    """lottoscan engine settings."""

    # App
    app_env: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # Draw schedule
    draw_timezone: str = DEFAULT_DRAW_TIMEZONE

    # Results cache
    results_cache_ttl_seconds: int = RESULTS_CACHE_TTL_SECONDS

    # Reminders (minutes after the draw cutoff)
    reminder_offset_minutes: int = REMINDER_OFFSET_MINUTES

    # Lottery QR detection
    lottery_qr_marker: str = LOTTERY_QR_MARKER

    # DhLottery result endpoints
    dhlottery_lotto_url: str = DHLOTTERY_LOTTO_URL
    dhlottery_pension_url: str = DHLOTTERY_PENSION_URL

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_testing(self) -> bool:
        return self.app_env == "testing"

    @property
    def draw_tz(self) -> ZoneInfo:
        """Timezone in which draw cutoffs are defined."""
        return ZoneInfo(self.draw_timezone)


def get_settings() -> Settings:
    """Return a settings instance."""
    return Settings()
