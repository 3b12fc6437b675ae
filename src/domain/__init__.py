"""Domain models and DTOs."""

from src.domain.activity import ActivityRecord, VerifiedFilter
from src.domain.badge import BadgeId
from src.domain.period import ComparisonMode, PeriodRange, PeriodToken
from src.domain.user_record import League, UserRecord


__all__ = [
    "ActivityRecord",
    "BadgeId",
    "ComparisonMode",
    "League",
    "PeriodRange",
    "PeriodToken",
    "UserRecord",
    "VerifiedFilter",
]
