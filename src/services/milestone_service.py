"""Milestone detection for newly submitted activity.

This module compares a user's record snapshot from before a submission with
the state after it and reports achievements worth celebrating:
- Personal best: new highest single-day total
- Streak milestone: consecutive-day streak reaching 7, 14, 30 or 100 days
- Rank change: reaching the top 3 of a league's weekly ranking

Each check is independent; one submission may unlock none, some or all of them.

Key Concepts:
- Day total: within one source, a day's value is the highest record (a
  resubmission replaces, never adds). Different sources on the same day add up.
- Streak: consecutive calendar days with at least one record, walked
  backwards from the submission date until the first gap. The streak helpers
  are also used by leaderboard_service for per-period streaks.
- Previous rank: only known when the caller persisted it. Without it, any
  top-3 finish is reported as an improvement of two places.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from pydantic import BaseModel, Field

from src.core import activity_store
from src.core.config import Constants
from src.core.logging import log_with_user_context, span
from src.domain.activity import ActivityRecord, VerifiedFilter
from src.domain.period import PeriodRange
from src.domain.user_record import UserRecord
from src.models.service_models import (
    AggregatedTotal,
    MilestoneKind,
    MilestoneResult,
    PersonalBest,
    RankChange,
    StreakMilestone,
)
from src.services import aggregation_service, period_service, ranking_service


logger = logging.getLogger(__name__)


class LeagueContext(BaseModel):
    """League a submission was made through, for rank milestones."""

    league_id: str
    previous_rank: int | None = Field(default=None, ge=1, description="Rank before this submission, if persisted")


# Personal best


def day_total(
    records: Iterable[ActivityRecord],
    *,
    user_id: str,
    day: date,
    new_value: int,
    new_source: str | None = None,
) -> int:
    """Total for one user and date once the new submission is included.

    Records are collapsed to their highest value per source, then summed
    across sources. The new submission competes within its own source, so a
    submission already present in the store is not counted twice.
    """
    per_source: dict[str | None, int] = {new_source: new_value}
    for record in records:
        if record.user_id != user_id or record.for_date != day:
            continue
        per_source[record.source] = max(per_source.get(record.source, 0), record.metric_value)
    return sum(per_source.values())


def detect_personal_best(prior: UserRecord | None, new_day_total: int) -> PersonalBest | None:
    """Report a personal best when the day total strictly beats the prior best.

    No prior record means there is no best to beat yet.
    """
    if prior is None:
        return None

    old_best = prior.best_day_value
    if new_day_total > old_best:
        return PersonalBest(old=old_best, new=new_day_total, delta=new_day_total - old_best)
    return None


# Streaks


def streak_ending_on(dates: Iterable[date], end_day: date) -> int:
    """Length of the consecutive-day run ending on end_day.

    end_day always counts (it is the day just submitted); earlier days count
    while there is no gap.
    """
    active_days = set(dates)
    active_days.add(end_day)

    streak = 0
    current = end_day
    while current in active_days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def calculate_current_streak(dates: Iterable[date], reference_date: date) -> int:
    """Current streak as of reference_date.

    The streak may end today or yesterday (today's activity may not be in
    yet); anything older means the streak is broken.
    leaderboard_service calls this with the days inside a leaderboard period.
    """
    active_days = set(dates)
    if not active_days:
        return 0

    if reference_date in active_days:
        return streak_ending_on(active_days, reference_date)

    yesterday = reference_date - timedelta(days=1)
    if yesterday in active_days:
        return streak_ending_on(active_days, yesterday)
    return 0


def detect_streak_milestone(streak: int, prior_streak: int) -> StreakMilestone | None:
    """Report the lowest streak threshold the new streak has reached.

    Thresholds are checked in ascending order and the first match wins:
    - crossed: streak reached the threshold and the prior streak had not
    - exactly at: streak equals the threshold (is_new only if it was not reached before)
    """
    for threshold in Constants.STREAK_MILESTONES:
        if streak >= threshold and prior_streak < threshold:
            return StreakMilestone(days=streak, threshold=threshold, is_new=True)
        if streak == threshold:
            return StreakMilestone(days=streak, threshold=threshold, is_new=prior_streak < threshold)
    return None


# Rank improvement


def detect_rank_improvement(
    user_id: str,
    weekly_totals: dict[str, AggregatedTotal],
    *,
    league_name: str | None = None,
    previous_rank: int | None = None,
) -> RankChange | None:
    """Report a rank improvement when the user is in the league's top 3.

    With a previous rank the real movement is reported, and only when the
    user moved up. Without one, a top-3 finish is assumed to be a two-place
    improvement.
    """
    entries = ranking_service.build_ranked_entries(weekly_totals)
    current = next((entry for entry in entries if entry.user_id == user_id), None)
    if current is None or current.rank > Constants.RANK_IMPROVEMENT_TOP_CUTOFF:
        return None

    if previous_rank is None:
        delta = Constants.RANK_IMPROVEMENT_ASSUMED_DELTA
        return RankChange(old_rank=current.rank + delta, new_rank=current.rank, delta=delta, league_name=league_name)

    if current.rank >= previous_rank:
        return None
    return RankChange(
        old_rank=previous_rank,
        new_rank=current.rank,
        delta=previous_rank - current.rank,
        league_name=league_name,
    )


# Result helpers


def has_milestones(result: MilestoneResult) -> bool:
    """Check if a milestone result has any milestones."""
    return bool(result.personal_best or result.streak_milestone or result.rank_change)


def get_primary_milestone(result: MilestoneResult) -> MilestoneKind | None:
    """Get the most significant milestone (personal best > streak > rank change)."""
    if result.personal_best:
        return MilestoneKind.PERSONAL_BEST
    if result.streak_milestone:
        return MilestoneKind.STREAK_MILESTONE
    if result.rank_change:
        return MilestoneKind.RANK_CHANGE
    return None


# Detection entry point


async def _check_rank_change(
    *,
    user_id: str,
    submission_date: date,
    submission_value: int,
    league: LeagueContext,
    reference_date: date,
) -> RankChange | None:
    league_info = await activity_store.get_league(league_id=league.league_id)
    week = PeriodRange(start=period_service.get_week_start(reference_date), end=reference_date, label="This Week")

    records = await aggregation_service.fetch_activity(
        period=week,
        league_id=league.league_id,
        verified=VerifiedFilter.VERIFIED,
    )
    if week.contains(submission_date):
        records.append(
            ActivityRecord(
                user_id=user_id,
                for_date=submission_date,
                metric_value=submission_value,
                verified=True,
                league_id=league.league_id,
            )
        )

    weekly_totals = aggregation_service.aggregate_totals(records, week)
    return detect_rank_improvement(
        user_id,
        weekly_totals,
        league_name=league_info.name if league_info else None,
        previous_rank=league.previous_rank,
    )


async def detect_milestones(
    *,
    user_id: str,
    submission_date: date,
    submission_value: int,
    prior: UserRecord | None,
    league: LeagueContext | None = None,
    source: str | None = None,
    reference_date: date | None = None,
) -> MilestoneResult:
    """Detect the milestones unlocked by a submission.

    Call with the user record as it was before the submission was applied.

    Args:
        user_id: User who submitted
        submission_date: Date the submission counts for
        submission_value: Submitted value
        prior: User record snapshot from before the submission (None for a new user)
        league: League context for rank milestones (None skips the rank check)
        source: Source of the submission, for per-source de-duplication
        reference_date: "Today" for the weekly league window (defaults to the current date)

    Returns:
        MilestoneResult with any combination of fields set

    Raises:
        StoreError: If a store read fails
    """
    reference_date = reference_date or period_service.get_reference_date()

    with span("milestone_service.detect_milestones"):
        history = await activity_store.list_activity(user_ids=[user_id], verified=True)

        new_total = day_total(
            history,
            user_id=user_id,
            day=submission_date,
            new_value=submission_value,
            new_source=source,
        )
        streak = streak_ending_on((record.for_date for record in history), submission_date)

        result = MilestoneResult(
            personal_best=detect_personal_best(prior, new_total),
            streak_milestone=detect_streak_milestone(streak, prior.current_streak if prior else 0),
        )

        if league is not None:
            result.rank_change = await _check_rank_change(
                user_id=user_id,
                submission_date=submission_date,
                submission_value=submission_value,
                league=league,
                reference_date=reference_date,
            )

        if has_milestones(result):
            log_with_user_context(
                logger,
                "info",
                "Milestones detected",
                user_id=user_id,
                primary=get_primary_milestone(result),
                submission_date=submission_date.isoformat(),
            )
        return result
