"""Period domain models and enums."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PeriodToken(StrEnum):
    """Named period shorthands accepted by leaderboards."""

    ALL_TIME = "all_time"
    THIS_YEAR = "this_year"
    THIS_MONTH = "this_month"
    LAST_30_DAYS = "last_30_days"
    LAST_7_DAYS = "last_7_days"
    CUSTOM = "custom"
    # League leaderboard presets
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    LAST_MONTH = "last_month"
    LAST_90_DAYS = "last_90_days"


class ComparisonMode(StrEnum):
    """How a comparison range is derived from a primary range."""

    PREVIOUS = "previous"
    LAST_YEAR = "last_year"
    CUSTOM = "custom"


class PeriodRange(BaseModel):
    """Inclusive calendar date range."""

    model_config = ConfigDict(frozen=True)

    start: date = Field(..., description="First day of the range (inclusive)")
    end: date = Field(..., description="Last day of the range (inclusive)")
    label: str = Field(default="", description="Human-readable label")

    @model_validator(mode="after")
    def validate_order(self) -> "PeriodRange":
        """Ensure start is not after end."""
        if self.start > self.end:
            msg = f"Range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            raise ValueError(msg)
        return self

    @property
    def day_count(self) -> int:
        """Number of calendar days in the range, both ends included."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        """Return True if the day falls inside the range."""
        return self.start <= day <= self.end
