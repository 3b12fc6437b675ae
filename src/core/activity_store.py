"""Read-only access to activity data held by the external store.

The store itself (schema, writes, conflict resolution) lives outside this
package. A backend implementing ActivityStoreBackend is registered once at
startup; the functions below are the only suspension points used by the
services. Every failure surfaces as StoreError.
"""

import logging
from datetime import date
from typing import Protocol

from src.core.errors import StoreError
from src.domain.activity import ActivityRecord
from src.domain.user_record import League, UserRecord


logger = logging.getLogger(__name__)


class ActivityStoreBackend(Protocol):
    """Query interface the external store must provide."""

    async def list_activity(
        self,
        *,
        user_ids: list[str] | None = None,
        league_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
        verified: bool | None = None,
    ) -> list[ActivityRecord]: ...

    async def get_user_record(self, *, user_id: str) -> UserRecord | None: ...

    async def list_user_records(self, *, user_ids: list[str] | None = None) -> list[UserRecord]: ...

    async def get_league(self, *, league_id: str) -> League | None: ...


_backend: ActivityStoreBackend | None = None


def register_backend(backend: ActivityStoreBackend) -> None:
    """Register the store backend used by all reads."""
    global _backend  # noqa: PLW0603
    _backend = backend
    logger.info("Activity store backend registered: %s", type(backend).__name__)


def reset_backend() -> None:
    """Remove the registered backend."""
    global _backend  # noqa: PLW0603
    _backend = None


def _get_backend() -> ActivityStoreBackend:
    if _backend is None:
        raise StoreError("Activity store backend not configured. Call register_backend() at startup.")
    return _backend


async def list_activity(
    *,
    user_ids: list[str] | None = None,
    league_id: str | None = None,
    start: date | None = None,
    end: date | None = None,
    verified: bool | None = None,
) -> list[ActivityRecord]:
    """List activity records matching the filters.

    Args:
        user_ids: Restrict to these users (None for all users)
        league_id: Restrict to submissions made through this league
        start: Earliest for_date to include (inclusive), None for unbounded
        end: Latest for_date to include (inclusive), None for unbounded
        verified: Only records with this verified flag (None for any)

    Returns:
        Matching activity records in store order

    Raises:
        StoreError: If no backend is registered or the query fails
    """
    backend = _get_backend()
    try:
        return await backend.list_activity(
            user_ids=user_ids,
            league_id=league_id,
            start=start,
            end=end,
            verified=verified,
        )
    except StoreError:
        raise
    except Exception as e:
        logger.error("Failed to list activity (league=%s, start=%s, end=%s): %s", league_id, start, end, e)
        raise StoreError(f"Failed to list activity: {e}") from e


async def get_user_record(*, user_id: str) -> UserRecord | None:
    """Get a user's lifetime record snapshot, or None if the user has none yet.

    Raises:
        StoreError: If no backend is registered or the query fails
    """
    backend = _get_backend()
    try:
        return await backend.get_user_record(user_id=user_id)
    except StoreError:
        raise
    except Exception as e:
        logger.error("Failed to get user record for %s: %s", user_id, e)
        raise StoreError(f"Failed to get user record for {user_id}: {e}") from e


async def list_user_records(*, user_ids: list[str] | None = None) -> list[UserRecord]:
    """List lifetime record snapshots, optionally restricted to some users.

    Raises:
        StoreError: If no backend is registered or the query fails
    """
    backend = _get_backend()
    try:
        return await backend.list_user_records(user_ids=user_ids)
    except StoreError:
        raise
    except Exception as e:
        logger.error("Failed to list user records: %s", e)
        raise StoreError(f"Failed to list user records: {e}") from e


async def get_league(*, league_id: str) -> League | None:
    """Get league metadata, or None if the league does not exist.

    Raises:
        StoreError: If no backend is registered or the query fails
    """
    backend = _get_backend()
    try:
        return await backend.get_league(league_id=league_id)
    except StoreError:
        raise
    except Exception as e:
        logger.error("Failed to get league %s: %s", league_id, e)
        raise StoreError(f"Failed to get league {league_id}: {e}") from e
