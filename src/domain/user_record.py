"""User record and league domain models."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """Snapshot of a user's lifetime statistics, maintained by the external store."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="ID of the user this record belongs to")
    best_day_value: int = Field(default=0, ge=0, description="Highest single-day total")
    best_day_date: date | None = Field(default=None, description="Date of the highest single-day total")
    current_streak: int = Field(default=0, ge=0, description="Consecutive days with a submission")
    longest_streak: int = Field(default=0, ge=0, description="Longest streak ever reached")
    total_lifetime: int = Field(default=0, ge=0, description="Sum of all counted activity")


class League(BaseModel):
    """League metadata needed for ranking."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique league ID")
    name: str = Field(..., description="Display name of the league")
    counting_start_date: date | None = Field(
        default=None,
        description="Activity before this date does not count towards league rankings",
    )
