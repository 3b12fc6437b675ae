"""Configuration management for stepleague."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    service_environment: str = Field(default="production", description="Environment name reported to Logfire")

    # Period Resolution
    reference_timezone: str = Field(
        default="UTC",
        description="IANA time zone used to resolve 'today' once per request (e.g., 'Europe/London')",
    )

    # Leaderboard Pagination
    leaderboard_default_limit: int = Field(default=50, ge=1, description="Default leaderboard page size")
    leaderboard_max_limit: int = Field(default=100, ge=1, description="Maximum leaderboard page size")

    # Trends
    trend_default_bucket_count: int = Field(default=8, ge=2, le=52, description="Default number of trend buckets")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Lifetime total badge tier (highest wins)
    BADGE_MILLION_CLUB_TOTAL: int = 1_000_000
    BADGE_500K_CLUB_TOTAL: int = 500_000
    BADGE_100K_CLUB_TOTAL: int = 100_000

    # Current streak badge tier (highest wins)
    BADGE_STREAK_30_DAYS: int = 30
    BADGE_STREAK_7_DAYS: int = 7
    BADGE_STREAK_3_DAYS: int = 3

    # Longest streak badge tier (highest wins)
    BADGE_LEGEND_DAYS: int = 365
    BADGE_CENTURION_DAYS: int = 100

    # Award badges
    MOST_IMPROVED_AWARD_COUNT: int = 3

    # Milestones
    STREAK_MILESTONES: tuple[int, ...] = (7, 14, 30, 100)  # Ascending
    RANK_IMPROVEMENT_TOP_CUTOFF: int = 3
    RANK_IMPROVEMENT_ASSUMED_DELTA: int = 2  # Used when no previous rank is stored

    # Trends
    TREND_DIRECTION_THRESHOLD_PCT: float = 5.0
    TREND_MIN_BUCKETS: int = 2
    TREND_MAX_BUCKETS: int = 52

    # Formatting
    PERCENT_DECIMAL_PLACES: int = 1
    DATE_FORMAT: str = "%Y-%m-%d"

    # Period Windows (inclusive day counts)
    LAST_7_DAYS_SPAN: int = 7
    LAST_30_DAYS_SPAN: int = 30
    LAST_90_DAYS_SPAN: int = 90


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
