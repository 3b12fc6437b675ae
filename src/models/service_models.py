"""Pydantic models for service layer return types.

These models provide type safety at service boundaries. They are created,
consumed and discarded within a single request; nothing here is persisted.
"""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from src.domain.badge import BadgeId
from src.domain.period import PeriodRange


class AggregatedTotal(BaseModel):
    """De-duplicated activity total for one user over one period."""

    user_id: str
    total: int
    distinct_days_counted: int

    @property
    def average_per_day(self) -> float:
        """Average value over the days that contributed, 0 when none did."""
        if self.distinct_days_counted == 0:
            return 0.0
        return self.total / self.distinct_days_counted


class LeaderboardEntry(BaseModel):
    """One ranked row of a leaderboard."""

    rank: int = Field(..., ge=1)
    user_id: str
    total: int
    days_counted: int = 0
    average_per_day: int = 0
    streak: int = 0
    badges: set[BadgeId] = Field(default_factory=set)
    compare_total: int | None = None
    improvement_pct: float | None = None


class LeaderboardMeta(BaseModel):
    """Context describing how a leaderboard page was produced."""

    total_members: int
    team_total: int
    total_days_in_period: int
    period: str
    date_range: PeriodRange | None
    compare_date_range: PeriodRange | None = None
    limit: int
    offset: int


class Leaderboard(BaseModel):
    """A page of leaderboard entries with its metadata."""

    entries: list[LeaderboardEntry]
    meta: LeaderboardMeta


class PersonalBest(BaseModel):
    """A new highest single-day total."""

    old: int
    new: int
    delta: int


class StreakMilestone(BaseModel):
    """A streak threshold reached by the latest submission."""

    days: int
    threshold: int
    is_new: bool


class RankChange(BaseModel):
    """A league rank improvement."""

    old_rank: int
    new_rank: int
    delta: int
    league_name: str | None = None


class MilestoneKind(StrEnum):
    """Milestone categories in display priority order."""

    PERSONAL_BEST = "personal_best"
    STREAK_MILESTONE = "streak_milestone"
    RANK_CHANGE = "rank_change"


class MilestoneResult(BaseModel):
    """Achievements unlocked by a single submission. Any combination may be present."""

    personal_best: PersonalBest | None = None
    streak_milestone: StreakMilestone | None = None
    rank_change: RankChange | None = None


class TrendDirection(StrEnum):
    """Overall direction of a trend series."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendDataPoint(BaseModel):
    """Aggregated value for one bucket of a trend series."""

    label: str
    value: int
    period_start: date
    period_end: date
    days_with_data: int
    total_days: int


class TrendComparisonPoint(TrendDataPoint):
    """Trend bucket paired with the equivalent bucket of the previous series."""

    comparison_value: int | None = None
    comparison_start: date | None = None
    percent_change: float = 0.0


class TrendSummary(BaseModel):
    """Headline statistics over a trend series."""

    total: int
    average: int
    best: int
    best_period_label: str
    worst: int
    worst_period_label: str
    trend: TrendDirection
    percent_change: float


class TrendReport(BaseModel):
    """Trend series for one user, with optional comparison series."""

    points: list[TrendDataPoint]
    comparison: list[TrendComparisonPoint] | None = None
    summary: TrendSummary
