"""Unit tests for activity_store module."""

from datetime import date

import pytest

from src.core import activity_store
from src.core.errors import StoreError


@pytest.mark.unit
class TestActivityStore:
    """Tests for backend registration and error wrapping."""

    async def test_no_backend_raises_store_error(self):
        """Reads without a registered backend fail with StoreError."""
        with pytest.raises(StoreError, match="not configured"):
            await activity_store.list_activity()

    async def test_reads_through_registered_backend(self, registered_store):
        """Reads are delegated to the registered backend with their filters."""
        registered_store.add_activity("alice", date(2026, 1, 13), 5000, league_id="L1")
        registered_store.add_activity("alice", date(2026, 1, 14), 6000, league_id="L1", verified=False)
        registered_store.add_activity("bob", date(2026, 1, 14), 7000, league_id="L2")

        records = await activity_store.list_activity(league_id="L1", start=date(2026, 1, 14), verified=False)

        assert [(record.user_id, record.metric_value) for record in records] == [("alice", 6000)]

    async def test_user_record_and_league(self, registered_store):
        """User records and leagues are read from the backend."""
        registered_store.add_user_record("alice", total_lifetime=1000)
        registered_store.add_league("L1", "Office", counting_start_date=date(2026, 1, 1))

        record = await activity_store.get_user_record(user_id="alice")
        league = await activity_store.get_league(league_id="L1")

        assert record.total_lifetime == 1000
        assert league.counting_start_date == date(2026, 1, 1)
        assert await activity_store.get_user_record(user_id="nobody") is None
        assert [r.user_id for r in await activity_store.list_user_records(user_ids=["alice", "bob"])] == ["alice"]

    async def test_backend_failure_is_wrapped(self, registered_store):
        """Backend exceptions are re-raised as StoreError with the cause attached."""
        cause = TimeoutError("query timed out")
        registered_store.fail_with = cause

        with pytest.raises(StoreError, match="query timed out") as exc_info:
            await activity_store.get_league(league_id="L1")

        assert exc_info.value.__cause__ is cause

    async def test_store_error_not_double_wrapped(self, registered_store):
        """StoreErrors raised by the backend pass through unchanged."""
        original = StoreError("read replica unavailable")
        registered_store.fail_with = original

        with pytest.raises(StoreError) as exc_info:
            await activity_store.list_user_records()

        assert exc_info.value is original

    async def test_reset_backend(self, in_memory_store):
        """Resetting removes the registered backend."""
        activity_store.register_backend(in_memory_store)
        activity_store.reset_backend()

        with pytest.raises(StoreError):
            await activity_store.get_user_record(user_id="alice")
