"""De-duplicating aggregation of raw activity records.

Key Concepts:
- Daily value: a user may submit several records for the same date (e.g. a
  corrected resubmission). Only the highest value for each (user, date) pair
  counts; duplicates are never summed.
- Absent means zero: users without records in the period are not present in
  the result map at all.
- Store order: users appear in the result in the order their first kept
  record was read, which the ranking engine relies on for ties.
"""

import logging
from collections.abc import Iterable
from datetime import date

from src.core import activity_store
from src.domain.activity import ActivityRecord, VerifiedFilter
from src.domain.period import PeriodRange
from src.models.service_models import AggregatedTotal


logger = logging.getLogger(__name__)

_STORE_VERIFIED_FLAG: dict[VerifiedFilter, bool | None] = {
    VerifiedFilter.ALL: None,
    VerifiedFilter.VERIFIED: True,
    VerifiedFilter.UNVERIFIED: False,
}


def daily_values(
    records: Iterable[ActivityRecord],
    period: PeriodRange | None = None,
    *,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> dict[tuple[str, date], int]:
    """Collapse records to one value per (user_id, for_date), keeping the maximum.

    Args:
        records: Raw activity records, in any order
        period: Inclusive date range to keep (None keeps every date)
        verified: Which records to count

    Returns:
        Map of (user_id, for_date) to the highest submitted value for that day
    """
    values: dict[tuple[str, date], int] = {}
    for record in records:
        if period is not None and not period.contains(record.for_date):
            continue
        if not record.matches(verified):
            continue

        key = (record.user_id, record.for_date)
        current = values.get(key)
        if current is None or record.metric_value > current:
            values[key] = record.metric_value
    return values


def aggregate_totals(
    records: Iterable[ActivityRecord],
    period: PeriodRange | None = None,
    *,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> dict[str, AggregatedTotal]:
    """Aggregate records into one de-duplicated total per user.

    Args:
        records: Raw activity records, in any order
        period: Inclusive date range to aggregate over (None for all time)
        verified: Which records to count

    Returns:
        Map of user_id to AggregatedTotal. Users with no records in range are absent.
    """
    totals: dict[str, int] = {}
    counted_days: dict[str, int] = {}

    for (user_id, _), value in daily_values(records, period, verified=verified).items():
        totals[user_id] = totals.get(user_id, 0) + value
        counted_days[user_id] = counted_days.get(user_id, 0) + (1 if value > 0 else 0)

    return {
        user_id: AggregatedTotal(user_id=user_id, total=total, distinct_days_counted=counted_days[user_id])
        for user_id, total in totals.items()
    }


async def fetch_activity(
    *,
    period: PeriodRange | None,
    user_ids: list[str] | None = None,
    league_id: str | None = None,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> list[ActivityRecord]:
    """Read the activity records covering a period from the store.

    Raises:
        StoreError: If the store read fails
    """
    return await activity_store.list_activity(
        user_ids=user_ids,
        league_id=league_id,
        start=period.start if period else None,
        end=period.end if period else None,
        verified=_STORE_VERIFIED_FLAG[verified],
    )


async def fetch_period_totals(
    *,
    period: PeriodRange | None,
    user_ids: list[str] | None = None,
    league_id: str | None = None,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> dict[str, AggregatedTotal]:
    """Fetch activity for a period and aggregate it per user.

    Args:
        period: Inclusive date range (None for all time)
        user_ids: Restrict to these users
        league_id: Restrict to one league's submissions
        verified: Which records to count

    Returns:
        Map of user_id to AggregatedTotal

    Raises:
        StoreError: If the store read fails
    """
    records = await fetch_activity(period=period, user_ids=user_ids, league_id=league_id, verified=verified)
    totals = aggregate_totals(records, period, verified=verified)
    logger.debug(
        "Aggregated %d records into %d user totals (period=%s)",
        len(records),
        len(totals),
        f"{period.start}..{period.end}" if period else "all_time",
    )
    return totals
