"""Activity domain models and enums."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class VerifiedFilter(StrEnum):
    """Which submissions a caller wants counted."""

    ALL = "all"
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class ActivityRecord(BaseModel):
    """One raw daily activity submission, read from the external store."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="ID of the user who submitted the activity")
    for_date: date = Field(..., description="Calendar date the activity counts for")
    metric_value: int = Field(..., ge=0, description="Activity count (e.g., steps)")
    verified: bool | None = Field(default=None, description="True/False once reviewed, None when unknown")
    league_id: str | None = Field(default=None, description="League the submission was made through")
    source: str | None = Field(
        default=None,
        description="Submission source (device or import); None groups all unlabelled records together",
    )

    def matches(self, verified: VerifiedFilter) -> bool:
        """Return True if this record is included under the given verified filter."""
        if verified == VerifiedFilter.VERIFIED:
            return self.verified is True
        if verified == VerifiedFilter.UNVERIFIED:
            return self.verified is False
        return True
