"""Leaderboard assembly for the global and league leaderboards.

Flow for one request:
1. Resolve "today" once, then the primary period and optional comparison
   period. Invalid ranges are rejected here, before any data is read.
2. Aggregate activity per user for each period (or, for all time, use the
   lifetime totals kept on user records).
3. Rank, attach badges, and slice the requested page.

Streak: each entry's streak is the run of consecutive submission days ending
on the last day of the period (or the day before it). All-time boards
without date bounds use the current streak kept on user records.
"""

import logging
from collections.abc import Iterable
from datetime import date

from src.core import activity_store
from src.core.config import settings
from src.core.logging import log_with_context, span
from src.domain.activity import ActivityRecord, VerifiedFilter
from src.domain.badge import BadgeId
from src.domain.period import ComparisonMode, PeriodRange, PeriodToken
from src.domain.user_record import UserRecord
from src.models.service_models import AggregatedTotal, Leaderboard, LeaderboardEntry, LeaderboardMeta
from src.services import aggregation_service, badge_service, milestone_service, period_service, ranking_service
from src.services.ranking_service import LeaderboardSort


logger = logging.getLogger(__name__)


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return settings.leaderboard_default_limit
    return max(1, min(limit, settings.leaderboard_max_limit))


def _check_offset(offset: int) -> None:
    if offset < 0:
        msg = f"Leaderboard offset cannot be negative, got {offset}"
        raise ValueError(msg)


def _badges_from_records(records: list[UserRecord]) -> dict[str, set[BadgeId]]:
    return {
        record.user_id: badge_service.classify_badges(
            record.total_lifetime,
            record.current_streak,
            record.longest_streak,
        )
        for record in records
    }


def _period_streaks(
    records: Iterable[ActivityRecord],
    period: PeriodRange | None,
    *,
    as_of: date,
    verified: VerifiedFilter,
) -> dict[str, int]:
    active_days: dict[str, set[date]] = {}
    for user_id, day in aggregation_service.daily_values(records, period, verified=verified):
        active_days.setdefault(user_id, set()).add(day)
    return {
        user_id: milestone_service.calculate_current_streak(days, as_of) for user_id, days in active_days.items()
    }


async def _period_activity(
    period: PeriodRange | None,
    *,
    as_of: date,
    league_id: str | None = None,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> tuple[dict[str, AggregatedTotal], dict[str, int]]:
    """Aggregate one period's activity with a single read, returning totals and streaks."""
    records = await aggregation_service.fetch_activity(period=period, league_id=league_id, verified=verified)
    totals = aggregation_service.aggregate_totals(records, period, verified=verified)
    return totals, _period_streaks(records, period, as_of=as_of, verified=verified)


def _build_leaderboard(
    entries: list[LeaderboardEntry],
    *,
    period: PeriodToken | str,
    primary: PeriodRange | None,
    compare_range: PeriodRange | None,
    limit: int,
    offset: int,
) -> Leaderboard:
    page = ranking_service.paginate(entries, limit=limit, offset=offset)
    meta = LeaderboardMeta(
        total_members=len(entries),
        team_total=sum(entry.total for entry in entries),
        total_days_in_period=period_service.days_in_range(primary),
        period=str(period),
        date_range=primary,
        compare_date_range=compare_range,
        limit=limit,
        offset=offset,
    )
    return Leaderboard(entries=page, meta=meta)


async def _lifetime_entries(sort_by: LeaderboardSort) -> list[LeaderboardEntry]:
    records = await activity_store.list_user_records()
    totals = {
        record.user_id: AggregatedTotal(user_id=record.user_id, total=record.total_lifetime, distinct_days_counted=0)
        for record in records
    }
    return ranking_service.build_ranked_entries(
        totals,
        badges=_badges_from_records(records),
        streaks={record.user_id: record.current_streak for record in records},
        sort_by=sort_by,
    )


async def get_global_leaderboard(
    *,
    period: PeriodToken | str = PeriodToken.ALL_TIME,
    start: date | None = None,
    end: date | None = None,
    compare_mode: ComparisonMode | str | None = None,
    compare_start: date | None = None,
    compare_end: date | None = None,
    sort_by: LeaderboardSort = LeaderboardSort.TOTAL,
    limit: int | None = None,
    offset: int = 0,
    reference_date: date | None = None,
) -> Leaderboard:
    """Get one page of the platform-wide leaderboard.

    All time without a comparison ranks by lifetime totals from user records.
    Every other period aggregates activity records for the resolved range.

    Args:
        period: Period token
        start: Explicit start (custom period only)
        end: Explicit end (custom period only)
        compare_mode: How to derive a comparison range (None for no comparison)
        compare_start: Explicit comparison start (custom comparison only)
        compare_end: Explicit comparison end (custom comparison only)
        sort_by: Leaderboard ordering
        limit: Page size, clamped to 1..settings.leaderboard_max_limit
        offset: Number of ranked entries to skip
        reference_date: "Today" for this request (defaults to the current date)

    Returns:
        Leaderboard page with metadata

    Raises:
        InvalidRangeError: If the period or comparison range cannot be resolved
        ValueError: If offset is negative
        StoreError: If a store read fails
    """
    reference_date = reference_date or period_service.get_reference_date()
    limit = _resolve_limit(limit)

    primary = period_service.resolve_period(period, reference_date=reference_date, start=start, end=end)
    compare_range = None
    if compare_mode is not None:
        compare_range = period_service.resolve_comparison_range(
            primary, compare_mode, start=compare_start, end=compare_end
        )
    _check_offset(offset)

    with span("leaderboard_service.get_global_leaderboard"):
        if primary is None:
            entries = await _lifetime_entries(sort_by)
        else:
            primary_totals, streaks = await _period_activity(primary, as_of=primary.end)
            compare_totals = None
            if compare_range is not None:
                compare_totals = await aggregation_service.fetch_period_totals(period=compare_range)

            records = await activity_store.list_user_records(user_ids=list(primary_totals)) if primary_totals else []
            entries = ranking_service.build_ranked_entries(
                primary_totals,
                compare_totals=compare_totals,
                badges=_badges_from_records(records),
                streaks=streaks,
                sort_by=sort_by,
            )

        log_with_context(
            logger,
            "info",
            "Global leaderboard built",
            period=str(period),
            members=len(entries),
            compare=str(compare_mode) if compare_range else None,
        )
        return _build_leaderboard(
            entries,
            period=period,
            primary=primary,
            compare_range=compare_range,
            limit=limit,
            offset=offset,
        )


async def get_league_leaderboard(
    *,
    league_id: str,
    period: PeriodToken | str = PeriodToken.THIS_WEEK,
    start: date | None = None,
    end: date | None = None,
    compare_mode: ComparisonMode | str | None = None,
    compare_start: date | None = None,
    compare_end: date | None = None,
    verified: VerifiedFilter = VerifiedFilter.ALL,
    sort_by: LeaderboardSort = LeaderboardSort.TOTAL,
    limit: int | None = None,
    offset: int = 0,
    reference_date: date | None = None,
) -> Leaderboard:
    """Get one page of a league's leaderboard.

    Periods are clamped to the league's counting start date. A period lying
    entirely before it yields an empty, correctly shaped leaderboard. Entries
    carry tier badges plus the leader and most_improved awards.

    Args:
        league_id: League to rank
        period: Period token
        start: Explicit start (custom period only)
        end: Explicit end (custom period only)
        compare_mode: How to derive a comparison range (None for no comparison)
        compare_start: Explicit comparison start (custom comparison only)
        compare_end: Explicit comparison end (custom comparison only)
        verified: Which submissions to count
        sort_by: Leaderboard ordering
        limit: Page size, clamped to 1..settings.leaderboard_max_limit
        offset: Number of ranked entries to skip
        reference_date: "Today" for this request (defaults to the current date)

    Returns:
        Leaderboard page with metadata

    Raises:
        InvalidRangeError: If the period or comparison range cannot be resolved
        ValueError: If offset is negative
        StoreError: If a store read fails
    """
    reference_date = reference_date or period_service.get_reference_date()
    limit = _resolve_limit(limit)

    # The counting start is only known after the league is read
    requested = period_service.resolve_period(period, reference_date=reference_date, start=start, end=end)
    if compare_mode is not None:
        period_service.validate_comparison(compare_mode, start=compare_start, end=compare_end)
    _check_offset(offset)

    with span("leaderboard_service.get_league_leaderboard"):
        league = await activity_store.get_league(league_id=league_id)
        if league is None:
            logger.warning("League %s not found, ranking without a counting start date", league_id)
        counting_start = league.counting_start_date if league else None

        primary, out_of_bounds = period_service.apply_counting_start(
            requested,
            period,
            reference_date=reference_date,
            counting_start=counting_start,
        )
        compare_range = None
        if compare_mode is not None:
            compare_range = period_service.clamp_to_counting_start(
                period_service.resolve_comparison_range(primary, compare_mode, start=compare_start, end=compare_end),
                counting_start,
            )

        primary_totals: dict[str, AggregatedTotal] = {}
        streaks: dict[str, int] = {}
        if not out_of_bounds:
            primary_totals, streaks = await _period_activity(
                primary,
                as_of=primary.end if primary else reference_date,
                league_id=league_id,
                verified=verified,
            )

        compare_totals = None
        if compare_range is not None:
            compare_totals = await aggregation_service.fetch_period_totals(
                period=compare_range, league_id=league_id, verified=verified
            )

        records = await activity_store.list_user_records(user_ids=list(primary_totals)) if primary_totals else []
        entries = ranking_service.assign_award_badges(
            ranking_service.build_ranked_entries(
                primary_totals,
                compare_totals=compare_totals,
                badges=_badges_from_records(records),
                streaks=streaks,
                sort_by=sort_by,
            )
        )

        log_with_context(
            logger,
            "info",
            "League leaderboard built",
            league_id=league_id,
            period=str(period),
            members=len(entries),
            out_of_bounds=out_of_bounds,
        )
        return _build_leaderboard(
            entries,
            period=period,
            primary=primary,
            compare_range=compare_range,
            limit=limit,
            offset=offset,
        )
