"""Leaderboard ranking over aggregated totals.

Key Concepts:
- Rank: 1-based position after sorting. Equal totals do not share a rank;
  they receive consecutive ranks.
- Ties: the sort is stable and has no secondary key, so tied users keep the
  order in which they appear in the aggregated map (the store's read order).
  That order is not a guarantee callers should depend on.
- Pagination: ranks are global positions in the full sorted board, so the
  first entry of page 2 with limit 50 has rank 51.
- Improvement: percentage change against a comparison period, only defined
  when the comparison total is positive.
"""

import logging
from enum import StrEnum

from src.core.config import Constants
from src.core.rounding import round_percent, round_to_int
from src.domain.badge import BadgeId
from src.models.service_models import AggregatedTotal, LeaderboardEntry


logger = logging.getLogger(__name__)


class LeaderboardSort(StrEnum):
    """Leaderboard ordering."""

    TOTAL = "total"  # Highest total first
    AVERAGE = "average"  # Highest average per counted day first
    IMPROVEMENT = "improvement"  # Highest improvement first, entries without one last
    STREAK = "streak"  # Longest current streak first


def compute_improvement_pct(total: int, compare_total: int | None) -> float | None:
    """Percentage change from compare_total to total, rounded to one decimal.

    Returns:
        The change, or None when there is no positive comparison total
    """
    if not compare_total or compare_total <= 0:
        return None
    return round_percent((total - compare_total) / compare_total * 100)


def _sort_key(sort_by: LeaderboardSort):
    match sort_by:
        case LeaderboardSort.AVERAGE:
            return lambda entry: entry.average_per_day
        case LeaderboardSort.STREAK:
            return lambda entry: entry.streak
        case LeaderboardSort.IMPROVEMENT:
            return lambda entry: (
                entry.improvement_pct is not None,
                entry.improvement_pct if entry.improvement_pct is not None else 0.0,
            )
        case _:
            return lambda entry: entry.total


def build_ranked_entries(
    totals: dict[str, AggregatedTotal],
    *,
    compare_totals: dict[str, AggregatedTotal] | None = None,
    badges: dict[str, set[BadgeId]] | None = None,
    streaks: dict[str, int] | None = None,
    sort_by: LeaderboardSort = LeaderboardSort.TOTAL,
) -> list[LeaderboardEntry]:
    """Sort aggregated totals and assign ranks across the whole board.

    Args:
        totals: Aggregated totals for the primary period
        compare_totals: Aggregated totals for the comparison period (None when not comparing).
            Users absent from it are compared against zero.
        badges: Tier badges per user
        streaks: Consecutive-day streak per user (0 when absent)
        sort_by: Ordering to apply

    Returns:
        Every entry of the board, ranked 1..n
    """
    badges = badges or {}
    streaks = streaks or {}
    unranked: list[LeaderboardEntry] = []

    for user_id, aggregated in totals.items():
        compare_total: int | None = None
        if compare_totals is not None:
            compared = compare_totals.get(user_id)
            compare_total = compared.total if compared else 0

        unranked.append(
            LeaderboardEntry(
                rank=1,
                user_id=user_id,
                total=aggregated.total,
                days_counted=aggregated.distinct_days_counted,
                average_per_day=round_to_int(aggregated.average_per_day),
                streak=streaks.get(user_id, 0),
                badges=set(badges.get(user_id, set())),
                compare_total=compare_total,
                improvement_pct=compute_improvement_pct(aggregated.total, compare_total),
            )
        )

    ordered = sorted(unranked, key=_sort_key(sort_by), reverse=True)
    return [entry.model_copy(update={"rank": index + 1}) for index, entry in enumerate(ordered)]


def assign_award_badges(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Add leaderboard-wide award badges to a fully ranked board.

    - leader: the rank 1 entry
    - most_improved: up to three entries with the highest strictly positive improvement

    Returns:
        New entries; the input is left unchanged
    """
    if not entries:
        return []

    awards: dict[str, set[BadgeId]] = {entries[0].user_id: {BadgeId.LEADER}}

    improved = sorted(
        (entry for entry in entries if entry.improvement_pct is not None and entry.improvement_pct > 0),
        key=lambda entry: entry.improvement_pct or 0.0,
        reverse=True,
    )
    for entry in improved[: Constants.MOST_IMPROVED_AWARD_COUNT]:
        awards.setdefault(entry.user_id, set()).add(BadgeId.MOST_IMPROVED)

    return [
        entry.model_copy(update={"badges": entry.badges | awards[entry.user_id]}) if entry.user_id in awards else entry
        for entry in entries
    ]


def paginate(entries: list[LeaderboardEntry], *, limit: int, offset: int = 0) -> list[LeaderboardEntry]:
    """Slice a ranked board into one page.

    Raises:
        ValueError: If limit is below 1 or offset is negative
    """
    if limit < 1:
        msg = f"Leaderboard limit must be at least 1, got {limit}"
        raise ValueError(msg)
    if offset < 0:
        msg = f"Leaderboard offset cannot be negative, got {offset}"
        raise ValueError(msg)
    return entries[offset : offset + limit]


def rank_totals(
    totals: dict[str, AggregatedTotal],
    *,
    limit: int,
    offset: int = 0,
    compare_totals: dict[str, AggregatedTotal] | None = None,
    badges: dict[str, set[BadgeId]] | None = None,
    streaks: dict[str, int] | None = None,
    sort_by: LeaderboardSort = LeaderboardSort.TOTAL,
) -> list[LeaderboardEntry]:
    """Rank aggregated totals and return one page of the leaderboard.

    Args:
        totals: Aggregated totals for the primary period
        limit: Page size
        offset: Number of ranked entries to skip
        compare_totals: Aggregated totals for the comparison period
        badges: Tier badges per user
        streaks: Consecutive-day streak per user
        sort_by: Ordering to apply

    Returns:
        Entries for the requested page, ranked by their global position

    Raises:
        ValueError: If limit is below 1 or offset is negative
    """
    entries = build_ranked_entries(
        totals, compare_totals=compare_totals, badges=badges, streaks=streaks, sort_by=sort_by
    )
    page = paginate(entries, limit=limit, offset=offset)
    logger.debug("Ranked %d users, returning %d from offset %d", len(entries), len(page), offset)
    return page
